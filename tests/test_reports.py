"""Tests for the sales monitoring analytics."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from paintpos.domain.entities import BatchRecord, SaleLineItem, SaleRecord
from paintpos.services import reports


def _batch(id, brand, type_):
    return BatchRecord(id=id, name=f"P{id}", brand=brand, type=type_, unit_price=Decimal("10.00"),
                       quantity=5, date_imported=date(2024, 1, 1))


BATCHES = [_batch(1, "Boysen", "Latex"), _batch(2, "Davies", "Enamel"), _batch(3, "Boysen", "")]

SALES = [
    SaleRecord("031524001", datetime(2024, 3, 15, 9, 0), [
        SaleLineItem(1, "P1", Decimal("10.00"), 2),
        SaleLineItem(2, "P2", Decimal("25.00"), 1),
    ]),
    SaleRecord("031624001", datetime(2024, 3, 16, 23, 59, 59), [
        SaleLineItem(3, "P3", Decimal("5.00"), 4),
    ]),
    SaleRecord("031724001", datetime(2024, 3, 17, 8, 0), [
        SaleLineItem(99, "Deleted", Decimal("1.50"), 2),
    ]),
]


def test_cumulative_product_sales() -> None:
    assert reports.cumulative_product_sales(SALES) == {1: 2, 2: 1, 3: 4, 99: 2}


def test_revenue_by_brand_counts_missing_batches_as_unknown() -> None:
    assert reports.revenue_by_brand(SALES, BATCHES) == {
        "Boysen": Decimal("40.00"),
        "Davies": Decimal("25.00"),
        "Unknown": Decimal("3.00"),
    }


def test_revenue_by_type_treats_blank_as_unknown() -> None:
    assert reports.revenue_by_type(SALES, BATCHES) == {
        "Latex": Decimal("20.00"),
        "Enamel": Decimal("25.00"),
        "Unknown": Decimal("23.00"),
    }


def test_filter_by_inclusive_date_range() -> None:
    shown = reports.filter_sales(SALES, BATCHES, date(2024, 3, 15), date(2024, 3, 16))
    assert [s.reference for s in shown] == ["031524001", "031624001"]


def test_filter_by_brand_is_case_insensitive() -> None:
    shown = reports.filter_sales(SALES, BATCHES, brand="davies")
    assert [s.reference for s in shown] == ["031524001"]


def test_reversed_range_is_rejected() -> None:
    with pytest.raises(ValueError, match="'From' cannot be after 'To'"):
        reports.filter_sales(SALES, BATCHES, date(2024, 3, 17), date(2024, 3, 15))


def test_sales_summary() -> None:
    summary = reports.sales_summary(SALES)
    assert summary == {"receipts": 3, "items_sold": 9, "revenue": Decimal("68.00")}


def test_summary_of_nothing() -> None:
    assert reports.sales_summary([]) == {"receipts": 0, "items_sold": 0, "revenue": Decimal("0.00")}
