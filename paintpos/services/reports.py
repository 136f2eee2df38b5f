"""Sales analytics for the monitoring window.

Everything here works on records already loaded by the services; nothing touches
the database.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..domain.entities import BatchRecord, SaleRecord

UNKNOWN = "Unknown"


def _index(batches: Iterable[BatchRecord]) -> Dict[int, BatchRecord]:
    return {b.id: b for b in batches if b.id is not None}


def cumulative_product_sales(sales: Iterable[SaleRecord]) -> Dict[int, int]:
    """Units sold per product id."""
    totals: Dict[int, int] = {}
    for sale in sales:
        for it in sale.line_items:
            totals[it.product_id] = totals.get(it.product_id, 0) + it.quantity
    return totals


def _revenue_by(sales: Iterable[SaleRecord], batches: Iterable[BatchRecord], attr: str) -> Dict[str, Decimal]:
    by_id = _index(batches)
    totals: Dict[str, Decimal] = {}
    for sale in sales:
        for it in sale.line_items:
            batch = by_id.get(it.product_id)
            key = (getattr(batch, attr, None) or "").strip() or UNKNOWN
            totals[key] = totals.get(key, Decimal("0.00")) + it.subtotal
    return totals


def revenue_by_brand(sales: Iterable[SaleRecord], batches: Iterable[BatchRecord]) -> Dict[str, Decimal]:
    """Revenue per brand, in first-seen order. Sold batches that were deleted count as "Unknown"."""
    return _revenue_by(sales, batches, "brand")


def revenue_by_type(sales: Iterable[SaleRecord], batches: Iterable[BatchRecord]) -> Dict[str, Decimal]:
    return _revenue_by(sales, batches, "type")


def filter_sales(
    sales: Iterable[SaleRecord],
    batches: Iterable[BatchRecord],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    brand: Optional[str] = None,
) -> List[SaleRecord]:
    """Sales inside an inclusive date range that contain at least one item of ``brand``.

    ``date_to`` covers the whole day. Raises ValueError when the range is reversed.
    """
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValueError("Invalid date range: 'From' cannot be after 'To'.")

    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to, time.max) if date_to else None
    by_id = _index(batches)
    wanted = brand.strip().lower() if brand else None

    result = []
    for sale in sales:
        if start is not None and sale.timestamp < start:
            continue
        if end is not None and sale.timestamp > end:
            continue
        if wanted is not None and not any(
            (by_id.get(it.product_id) is not None and (by_id[it.product_id].brand or "").lower() == wanted)
            for it in sale.line_items
        ):
            continue
        result.append(sale)
    return result


def sales_summary(sales: Iterable[SaleRecord]) -> Dict[str, object]:
    sales = list(sales)
    return {
        "receipts": len(sales),
        "items_sold": sum(s.item_count for s in sales),
        "revenue": sum((s.total for s in sales), Decimal("0.00")),
    }
