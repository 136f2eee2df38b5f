"""Tests for InventoryService against a real SQLite file."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from paintpos.domain.entities import AlertKind
from paintpos.infra.db import connect
from paintpos.services.inventory import InventoryService

TODAY = date(2024, 3, 15)


@pytest.fixture
def svc(db_path: str) -> InventoryService:
    return InventoryService(db_path)


def test_added_batches_get_sequential_codes_from_their_import_date(svc, admin, make_batch) -> None:
    first = svc.add_batch(make_batch(), session=admin, today=TODAY)
    second = svc.add_batch(make_batch(name="Davies Gloss"), session=admin, today=TODAY)
    other_day = svc.add_batch(make_batch(date_imported=date(2024, 3, 16)), session=admin, today=TODAY)

    assert first.code == "031524001"
    assert second.code == "031524002"
    assert other_day.code == "031624001"
    assert first.id is not None and first.id != second.id


def test_deleted_codes_are_not_reused(svc, admin, make_batch) -> None:
    svc.add_batch(make_batch(), session=admin, today=TODAY)
    middle = svc.add_batch(make_batch(), session=admin, today=TODAY)
    svc.add_batch(make_batch(), session=admin, today=TODAY)
    assert svc.delete_batch(middle.id, session=admin)

    assert svc.add_batch(make_batch(), session=admin, today=TODAY).code == "031524004"


def test_explicit_duplicate_code_is_rejected(svc, admin, make_batch) -> None:
    svc.add_batch(make_batch(code="CUSTOM-1"), session=admin, today=TODAY)
    with pytest.raises(ValueError, match="already exists"):
        svc.add_batch(make_batch(code="CUSTOM-1"), session=admin, today=TODAY)
    assert len(svc.get_all_batches()) == 1


def test_mutations_need_an_admin_session(svc, admin, cashier, make_batch) -> None:
    with pytest.raises(PermissionError):
        svc.add_batch(make_batch(), session=cashier)
    stored = svc.add_batch(make_batch(), session=admin, today=TODAY)
    with pytest.raises(PermissionError):
        svc.update_batch(stored.with_changes(quantity=1), session=cashier)
    with pytest.raises(PermissionError):
        svc.delete_batch(stored.id, session=cashier)


def test_stored_batch_round_trips(svc, admin, make_batch) -> None:
    stored = svc.add_batch(make_batch(unit_price=Decimal("199.95")), session=admin, today=TODAY)
    loaded = svc.get_batch(stored.id)
    assert loaded.unit_price == Decimal("199.95")
    assert loaded.date_imported == date(2024, 3, 15)
    assert loaded.expiration_date == date(2026, 3, 15)
    assert loaded.status == "Active"


def test_status_is_computed_on_add(svc, admin, make_batch) -> None:
    stored = svc.add_batch(make_batch(quantity=3), session=admin, today=TODAY)
    assert stored.status == "Low Stock"


def test_update_batch(svc, admin, make_batch) -> None:
    stored = svc.add_batch(make_batch(), session=admin, today=TODAY)
    updated = svc.update_batch(stored.with_changes(quantity=0, color="Red"), session=admin, today=TODAY)
    assert updated.status == "Out of Stock"
    loaded = svc.get_batch(stored.id)
    assert loaded.quantity == 0
    assert loaded.color == "Red"


def test_update_rejects_a_code_owned_by_another_batch(svc, admin, make_batch) -> None:
    a = svc.add_batch(make_batch(), session=admin, today=TODAY)
    b = svc.add_batch(make_batch(), session=admin, today=TODAY)
    with pytest.raises(ValueError, match="already exists"):
        svc.update_batch(b.with_changes(code=a.code), session=admin)
    # keeping its own code is fine
    svc.update_batch(b.with_changes(name="Renamed"), session=admin, today=TODAY)


def test_update_requires_a_code(svc, admin, make_batch) -> None:
    stored = svc.add_batch(make_batch(), session=admin, today=TODAY)
    with pytest.raises(ValueError, match="Product ID is required"):
        svc.update_batch(stored.with_changes(code="  "), session=admin)


def test_update_of_missing_batch(svc, admin, make_batch) -> None:
    with pytest.raises(ValueError, match="no longer exists"):
        svc.update_batch(make_batch(id=999, code="X"), session=admin)


def test_generate_batch_code_previews_the_next_code(svc, admin, make_batch) -> None:
    assert svc.generate_batch_code(TODAY) == "031524001"
    svc.add_batch(make_batch(), session=admin, today=TODAY)
    assert svc.generate_batch_code(TODAY) == "031524002"


def test_minting_continues_after_codes_entered_by_hand(svc, admin, make_batch, db_path) -> None:
    svc.add_batch(make_batch(), session=admin, today=TODAY)
    conn = connect(db_path)
    with conn:
        conn.execute(
            "INSERT INTO inventory(product_code, name, brand, price_cents, qty, date_imported) VALUES (?,?,?,?,?,?)",
            ("031524002", "Manual", "Boysen", 100, 1, "2024-03-15"),
        )
    assert svc.add_batch(make_batch(), session=admin, today=TODAY).code == "031524003"


def test_refresh_statuses_only_writes_changes(svc, admin, make_batch) -> None:
    svc.add_batch(make_batch(expiration_date=date(2024, 3, 20)), session=admin, today=TODAY)
    svc.add_batch(make_batch(expiration_date=None), session=admin, today=TODAY)

    assert svc.refresh_statuses(TODAY) == 0
    later = TODAY + timedelta(days=10)
    assert svc.refresh_statuses(later) == 1
    assert [b.status for b in svc.get_all_batches()] == ["Expired", "Active"]


def test_scan_alerts_and_available_for_sale(svc, admin, make_batch) -> None:
    expired = svc.add_batch(
        make_batch(date_imported=date(2024, 1, 1), expiration_date=date(2024, 3, 1)), session=admin, today=TODAY
    )
    sellable = svc.add_batch(make_batch(), session=admin, today=TODAY)

    alerts = svc.scan_alerts(TODAY)
    assert [(a.batch_id, a.kind) for a in alerts] == [(expired.id, AlertKind.EXPIRED)]
    assert [b.id for b in svc.available_for_sale(TODAY)] == [sellable.id]


def test_search_and_filters(svc, admin, make_batch) -> None:
    svc.add_batch(make_batch(name="Boysen Latex", brand="Boysen", color="White"), session=admin, today=TODAY)
    svc.add_batch(make_batch(name="Davies Enamel", brand="Davies", color="Red", type="Enamel"),
                  session=admin, today=TODAY)

    assert svc.brands() == ["Boysen", "Davies"]
    assert svc.colors() == ["Red", "White"]
    assert [b.name for b in svc.search_batches("enamel")] == ["Davies Enamel"]
    assert [b.name for b in svc.search_batches("031524001")] == ["Boysen Latex"]
    assert [b.name for b in svc.search_batches(brand="Davies")] == ["Davies Enamel"]
    assert [b.name for b in svc.search_batches(color="White")] == ["Boysen Latex"]
    assert len(svc.search_batches()) == 2


def test_collision_guard_steps_past_a_code_the_lookup_missed(svc, admin, make_batch, monkeypatch) -> None:
    svc.add_batch(make_batch(), session=admin, today=TODAY)
    monkeypatch.setattr(InventoryService, "_codes_with_prefix", staticmethod(lambda conn, prefix: []))
    assert svc.add_batch(make_batch(), session=admin, today=TODAY).code == "031524002"


def test_batch_code_falls_back_when_the_table_is_unreadable(svc, db_path) -> None:
    conn = connect(db_path)
    with conn:
        conn.execute("DROP TABLE inventory")
    code = svc.generate_batch_code(TODAY)
    assert len(code) == 9
    assert code.startswith("031524")
    assert code[6:].isdigit()


def test_status_details_lists_every_label(svc, make_batch) -> None:
    batch = make_batch(quantity=3, expiration_date=TODAY + timedelta(days=2))
    assert svc.batch_status(batch, TODAY) == "Expiring Soon"
    assert svc.status_details(batch, TODAY) == "Expiring Soon; Low Stock"
    assert svc.status_details(make_batch(quantity=50), TODAY) == "Active"
