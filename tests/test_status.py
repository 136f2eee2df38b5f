"""Tests for batch status classification and the alert scan."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from paintpos.domain.entities import AlertKind
from paintpos.domain.status import alerts_of_kind, classify, classify_batch, composite_status, scan

TODAY = date(2024, 3, 15)


@pytest.mark.parametrize(
    ("quantity", "expiration", "expected"),
    [
        (0, None, "Out of Stock"),
        (20, TODAY, "Expired"),
        (20, TODAY - timedelta(days=30), "Expired"),
        (20, TODAY + timedelta(days=7), "Expiring Soon"),
        (20, TODAY + timedelta(days=8), "Active"),
        (5, None, "Low Stock"),
        (6, None, "Active"),
        (0, TODAY - timedelta(days=1), "Expired"),
        (3, TODAY + timedelta(days=2), "Expiring Soon"),
    ],
)
def test_classify(quantity, expiration, expected) -> None:
    assert classify(quantity, expiration, TODAY) == expected


def test_classify_is_idempotent() -> None:
    first = classify(4, TODAY + timedelta(days=3), TODAY)
    assert classify(4, TODAY + timedelta(days=3), TODAY) == first


def test_thresholds_are_configurable() -> None:
    assert classify(10, None, TODAY, low_stock_threshold=10) == "Low Stock"
    assert classify(10, TODAY + timedelta(days=20), TODAY, expiry_days=30) == "Expiring Soon"


def test_composite_status_lists_every_condition() -> None:
    assert composite_status(3, TODAY + timedelta(days=2), TODAY) == "Expiring Soon; Low Stock"
    assert composite_status(0, TODAY, TODAY) == "Expired; Out of Stock"
    assert composite_status(50, None, TODAY) == "Active"


def test_scan_of_nothing_is_empty() -> None:
    assert scan([], TODAY) == []
    assert scan(None, TODAY) == []


def test_healthy_batch_has_no_alerts(make_batch) -> None:
    assert scan([make_batch(quantity=50, expiration_date=TODAY + timedelta(days=90))], TODAY) == []


def test_expired_and_empty_batch_gets_two_alerts_expiry_first(make_batch) -> None:
    batch = make_batch(id=1, code="031524001", quantity=0, expiration_date=TODAY - timedelta(days=1))
    alerts = scan([batch], TODAY)
    assert [a.kind for a in alerts] == [AlertKind.EXPIRED, AlertKind.OUT_OF_STOCK]
    assert alerts[0].batch_id == 1
    assert "031524001" in alerts[0].message
    assert "expired on 2024-03-14" in alerts[0].message


def test_alerts_follow_batch_order(make_batch) -> None:
    batches = [
        make_batch(id=1, quantity=2, expiration_date=None),
        make_batch(id=2, quantity=40, expiration_date=TODAY + timedelta(days=3)),
    ]
    alerts = scan(batches, TODAY)
    assert [(a.batch_id, a.kind) for a in alerts] == [(1, AlertKind.LOW_STOCK), (2, AlertKind.EXPIRING_SOON)]
    assert "expires in 3 day(s)" in alerts[1].message
    assert "only 2 left" in alerts[0].message


def test_alerts_of_kind(make_batch) -> None:
    batches = [
        make_batch(id=1, quantity=0, expiration_date=None),
        make_batch(id=2, quantity=1, expiration_date=None),
        make_batch(id=3, quantity=0, expiration_date=None),
    ]
    out = alerts_of_kind(scan(batches, TODAY), AlertKind.OUT_OF_STOCK)
    assert [a.batch_id for a in out] == [1, 3]


@pytest.mark.parametrize(
    ("quantity", "expiration", "expected"),
    [
        (20, TODAY, [AlertKind.EXPIRED]),
        (20, TODAY + timedelta(days=7), [AlertKind.EXPIRING_SOON]),
        (20, TODAY + timedelta(days=8), []),
        (5, None, [AlertKind.LOW_STOCK]),
        (6, None, []),
    ],
)
def test_scan_boundaries(make_batch, quantity, expiration, expected) -> None:
    batch = make_batch(id=1, quantity=quantity, expiration_date=expiration)
    assert [a.kind for a in scan([batch], TODAY)] == expected


def test_scan_mixes_expiry_and_stock_alerts_in_batch_order(make_batch) -> None:
    batches = [
        make_batch(id=1, quantity=5, expiration_date=TODAY),
        make_batch(id=2, quantity=6, expiration_date=TODAY + timedelta(days=7)),
        make_batch(id=3, quantity=6, expiration_date=TODAY + timedelta(days=8)),
    ]
    assert [(a.batch_id, a.kind) for a in scan(batches, TODAY)] == [
        (1, AlertKind.EXPIRED),
        (1, AlertKind.LOW_STOCK),
        (2, AlertKind.EXPIRING_SOON),
    ]


def test_classify_batch_uses_the_batch_fields(make_batch) -> None:
    batch = make_batch(quantity=4, expiration_date=TODAY + timedelta(days=30))
    assert classify_batch(batch, TODAY) == "Low Stock"
    assert classify_batch(batch, TODAY, expiry_days=30) == "Expiring Soon"
