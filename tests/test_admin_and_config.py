"""Tests for the admin password, sessions and the JSON config file."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from paintpos.domain.entities import Session
from paintpos.infra.db_init import DEFAULT_ADMIN_PASSWORD, init_db
from paintpos.services.admin import AdminService, require_admin
from paintpos.util.config import DEFAULT_CONFIG, load_config, save_config, vat_rate
from paintpos.util.passwords import generate_salt, hash_password, password_matches


def test_default_password_is_seeded(db_path) -> None:
    svc = AdminService(db_path)
    assert svc.verify_password(DEFAULT_ADMIN_PASSWORD)
    assert not svc.verify_password("wrong")
    assert not svc.verify_password("")


def test_reinitialising_keeps_the_stored_password(db_path) -> None:
    svc = AdminService(db_path)
    assert svc.change_password(DEFAULT_ADMIN_PASSWORD, "s3cret")
    init_db(db_path).close()
    assert svc.verify_password("s3cret")


def test_change_password_round_trip(db_path) -> None:
    svc = AdminService(db_path)
    assert not svc.change_password("wrong", "new-pass")
    assert svc.change_password(DEFAULT_ADMIN_PASSWORD, "new-pass")
    assert svc.verify_password("new-pass")
    assert not svc.verify_password(DEFAULT_ADMIN_PASSWORD)


def test_empty_new_password_is_rejected(db_path) -> None:
    with pytest.raises(ValueError):
        AdminService(db_path).change_password(DEFAULT_ADMIN_PASSWORD, "")


def test_login_returns_a_session(db_path) -> None:
    svc = AdminService(db_path)
    assert svc.login("maria", DEFAULT_ADMIN_PASSWORD) == Session("maria", True)
    assert svc.login("maria", "nope") == Session("maria", False)


def test_require_admin() -> None:
    require_admin(Session("admin", True))
    with pytest.raises(PermissionError):
        require_admin(Session.anonymous())
    with pytest.raises(PermissionError):
        require_admin(None)


def test_password_hash_is_salted() -> None:
    a, b = generate_salt(), generate_salt()
    assert a != b
    assert len(a) == 32
    assert hash_password("pw", a) != hash_password("pw", b)
    assert password_matches("pw", hash_password("pw", a), a)
    assert not password_matches("pw", None, a)


def test_first_load_writes_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    cfg = load_config(str(path))
    assert cfg == DEFAULT_CONFIG
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    cfg["db_path"] = "changed.sqlite"
    assert DEFAULT_CONFIG["db_path"] == "paintcenter.sqlite"


def test_missing_keys_are_filled_from_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"db_path": "shop.sqlite", "low_stock_threshold": 10}), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg["db_path"] == "shop.sqlite"
    assert cfg["low_stock_threshold"] == 10
    assert cfg["expiry_alert_days"] == 7


def test_save_then_load(tmp_path: Path) -> None:
    path = str(tmp_path / "config.json")
    save_config({**DEFAULT_CONFIG, "vat_rate": "0.10"}, path)
    assert vat_rate(load_config(path)) == Decimal("0.10")
