"""Shared pytest fixtures for the paint center services."""

from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from paintpos.domain.entities import BatchRecord, Session  # noqa: E402
from paintpos.infra.db_init import init_db  # noqa: E402


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "test.sqlite")
    init_db(path).close()
    return path


@pytest.fixture
def admin() -> Session:
    return Session(user="admin", is_admin=True)


@pytest.fixture
def cashier() -> Session:
    return Session.anonymous()


@pytest.fixture
def make_batch():
    def _make(**overrides) -> BatchRecord:
        values = dict(
            name="Boysen Latex",
            brand="Boysen",
            color="White",
            type="Latex",
            unit_price=Decimal("350.00"),
            quantity=20,
            date_imported=date(2024, 3, 15),
            expiration_date=date(2026, 3, 15),
        )
        values.update(overrides)
        return BatchRecord(**values)

    return _make
