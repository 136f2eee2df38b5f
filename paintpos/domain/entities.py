from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from ..util.money import round_money, to_decimal

# Status labels cached on inventory rows and shown in the tables
STATUS_ACTIVE = "Active"
STATUS_LOW_STOCK = "Low Stock"
STATUS_OUT_OF_STOCK = "Out of Stock"
STATUS_EXPIRING_SOON = "Expiring Soon"
STATUS_EXPIRED = "Expired"


class AlertKind(str, Enum):
    EXPIRED = "EXPIRED"
    EXPIRING_SOON = "EXPIRING_SOON"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


@dataclass
class BatchRecord:
    name: str
    brand: str
    unit_price: Decimal
    quantity: int
    date_imported: Optional[date]
    expiration_date: Optional[date] = None
    color: str = ""
    type: str = ""
    code: Optional[str] = None
    status: str = STATUS_ACTIVE
    id: Optional[int] = None

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)

    def with_changes(self, **changes) -> "BatchRecord":
        return replace(self, **changes)


@dataclass
class SaleLineItem:
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int

    def __post_init__(self):
        self.name = self.name or "Unnamed"
        self.unit_price = to_decimal(self.unit_price)
        self.quantity = max(int(self.quantity), 0)

    @property
    def subtotal(self) -> Decimal:
        return round_money(self.unit_price * self.quantity)


@dataclass
class SaleRecord:
    reference: str
    timestamp: datetime
    line_items: List[SaleLineItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((it.subtotal for it in self.line_items), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(it.quantity for it in self.line_items)


@dataclass(frozen=True)
class Alert:
    batch_id: Optional[int]
    kind: AlertKind
    message: str
    code: Optional[str] = None
    product_name: str = ""
    brand: str = ""

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.product_name} - {self.message}"


@dataclass(frozen=True)
class Session:
    """Who is at the terminal. Mutating inventory needs ``is_admin``."""
    user: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()
