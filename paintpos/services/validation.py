from datetime import date
from decimal import Decimal
from typing import Optional

from ..domain.entities import BatchRecord
from ..util.dates import parse_date
from ..util.money import to_decimal


def _required(value: Optional[str], message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(message)
    return text


def parse_price(text: str) -> Decimal:
    try:
        price = to_decimal(text)
    except ValueError:
        raise ValueError("Enter a valid non-negative price.") from None
    if not price.is_finite() or price < 0:
        raise ValueError("Enter a valid non-negative price.")
    return price


def parse_quantity(text: str, *, adding: bool) -> int:
    try:
        qty = int(str(text).strip())
    except ValueError:
        raise ValueError("Enter a valid integer quantity.") from None
    if adding and qty < 1:
        raise ValueError("Quantity must be at least 1 when adding a batch.")
    if qty < 0:
        raise ValueError("Quantity cannot be negative.")
    return qty


def parse_batch_form(
    *,
    name: str,
    brand: str,
    price: str,
    quantity: str,
    date_imported,
    expiration_date=None,
    color: str = "",
    type_: str = "",
    code: Optional[str] = None,
    batch_id: Optional[int] = None,
) -> BatchRecord:
    """Validate raw inventory form input and build the record to save.

    A form with ``batch_id`` is an update: the code becomes mandatory and a
    zero quantity is allowed. Raises ValueError with the message to show.
    """
    adding = batch_id is None
    name = _required(name, "Product name is required.")
    brand = _required(brand, "Brand is required.")
    unit_price = parse_price(price)
    qty = parse_quantity(quantity, adding=adding)

    imported = parse_date(date_imported) or date.today()
    expiration = None
    if expiration_date not in (None, ""):
        expiration = parse_date(expiration_date)
        if expiration is None:
            raise ValueError("Select an expiration date or check 'No Expiration'.")
        if expiration <= imported:
            raise ValueError("Expiration date must be after Date Imported.")

    if not adding:
        code = _required(code, "Product ID is required when updating.")

    return BatchRecord(
        id=batch_id,
        code=(code or "").strip() or None,
        name=name,
        brand=brand,
        color=(color or "").strip(),
        type=(type_ or "").strip(),
        unit_price=unit_price,
        quantity=qty,
        date_imported=imported,
        expiration_date=expiration,
    )
