from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

CENT = Decimal("0.01")
DEFAULT_VAT_RATE = Decimal("0.12")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats like 0.1 do not drag their binary noise along
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a valid amount: {value!r}") from e


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> Optional[int]:
    if value is None:
        return None
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Decimal:
    return Decimal("0.00") if cents is None else (Decimal(int(cents)) / 100).quantize(CENT)


def format_amount(value, symbol: str = "₱") -> str:
    return f"{symbol}{round_money(value):,.2f}"


def vat_breakdown(subtotal, rate=DEFAULT_VAT_RATE) -> Dict[str, Decimal]:
    """Split a VAT-inclusive subtotal into its vatable part and the VAT.

    Shelf prices already include VAT, so the total equals the subtotal.
    """
    subtotal = to_decimal(subtotal)
    rate = to_decimal(rate)
    vatable = subtotal / (1 + rate)
    return {
        "vatable": round_money(vatable),
        "vat_exempt": Decimal("0.00"),
        "subtotal": round_money(subtotal),
        "vat": round_money(subtotal - vatable),
        "total": round_money(subtotal),
    }
