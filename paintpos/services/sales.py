import sqlite3
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..domain import codes
from ..domain.entities import SaleLineItem, SaleRecord, Session, STATUS_EXPIRED
from ..domain.status import EXPIRY_ALERT_DAYS, LOW_STOCK_THRESHOLD, classify
from ..infra.db import connect, immediate_transaction
from ..util.config import vat_rate as configured_vat_rate
from ..util.dates import datetime_text, parse_date, parse_datetime
from ..util.logging import get_logger
from ..util.money import DEFAULT_VAT_RATE, format_amount, from_cents, to_cents, vat_breakdown
from .admin import require_admin

logger = get_logger(__name__)


class SalesService:
    def __init__(
        self,
        db_path: str,
        *,
        vat_rate: Decimal = DEFAULT_VAT_RATE,
        expiry_days: int = EXPIRY_ALERT_DAYS,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        currency_symbol: str = "₱",
    ):
        self.db_path = db_path
        self.vat_rate = vat_rate
        self.expiry_days = expiry_days
        self.low_stock_threshold = low_stock_threshold
        self.currency_symbol = currency_symbol

    @classmethod
    def from_config(cls, cfg: dict) -> "SalesService":
        return cls(
            cfg["db_path"],
            vat_rate=configured_vat_rate(cfg),
            expiry_days=int(cfg.get("expiry_alert_days", EXPIRY_ALERT_DAYS)),
            low_stock_threshold=int(cfg.get("low_stock_threshold", LOW_STOCK_THRESHOLD)),
            currency_symbol=cfg.get("currency_symbol", "₱"),
        )

    # ---------- SALE REFERENCES ----------
    @staticmethod
    def _references_with_prefix(conn, prefix: str) -> List[str]:
        try:
            rows = conn.execute("""
                SELECT DISTINCT sale_reference FROM sales
                WHERE sale_reference IS NOT NULL AND substr(sale_reference, 1, 6) = ?
            """, (prefix,)).fetchall()
        except sqlite3.Error as e:
            raise codes.CodeLookupUnavailable(str(e)) from e
        return [r["sale_reference"] for r in rows]

    def references_with_prefix(self, prefix: str) -> List[str]:
        try:
            conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise codes.CodeLookupUnavailable(str(e)) from e
        return self._references_with_prefix(conn, prefix)

    def next_sale_reference(self, day: Optional[date] = None) -> str:
        """Reference the next checkout on ``day`` would get (shown before confirming)."""
        return codes.next_code(self.references_with_prefix, day)

    # ---------- CHECKOUT ----------
    def checkout(self, cart: Iterable[SaleLineItem], *, when: Optional[datetime] = None) -> SaleRecord:
        """Record a sale: validate stock, mint the reference, decrement batches, append rows.

        Nothing is written when any line fails validation.
        """
        items = list(cart or [])
        if not items:
            raise ValueError("Cart is empty.")
        when = when or datetime.now()
        today = when.date()

        needed: Dict[int, int] = {}
        for it in items:
            if it.quantity <= 0:
                raise ValueError(f"Quantity for {it.name} must be at least 1.")
            needed[it.product_id] = needed.get(it.product_id, 0) + it.quantity

        conn = connect(self.db_path)
        with immediate_transaction(conn):
            stock: Dict[int, sqlite3.Row] = {}
            for product_id, qty in needed.items():
                row = conn.execute(
                    "SELECT id, name, qty, expiration_date FROM inventory WHERE id=?", (product_id,)
                ).fetchone()
                if row is None:
                    name = next(it.name for it in items if it.product_id == product_id)
                    raise ValueError(f"Product not found: {name}")
                expiration = parse_date(row["expiration_date"])
                if classify(int(row["qty"]), expiration, today, expiry_days=self.expiry_days) == STATUS_EXPIRED:
                    raise ValueError(f"{row['name']} has expired and cannot be sold.")
                if qty > int(row["qty"]):
                    raise ValueError(f"Not enough stock for {row['name']}.")
                stock[product_id] = row

            reference = codes.next_code(lambda prefix: self._references_with_prefix(conn, prefix), today)

            for product_id, qty in needed.items():
                row = stock[product_id]
                new_qty = int(row["qty"]) - qty
                new_status = classify(
                    new_qty, parse_date(row["expiration_date"]), today,
                    expiry_days=self.expiry_days, low_stock_threshold=self.low_stock_threshold,
                )
                conn.execute("UPDATE inventory SET qty=?, status=? WHERE id=?", (new_qty, new_status, product_id))

            stamp = datetime_text(when)
            for it in items:
                conn.execute("""
                    INSERT INTO sales(sale_reference, product_id, product_name, quantity, price_cents, total_cents, sale_date)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (reference, it.product_id, it.name, it.quantity, to_cents(it.unit_price), to_cents(it.subtotal), stamp))

        sale = SaleRecord(reference=reference, timestamp=when, line_items=items)
        logger.info("Sale %s recorded: %d line(s), total %s", reference, len(items), sale.total)
        return sale

    # ---------- HISTORY ----------
    def load_sales(self) -> List[SaleRecord]:
        """All recorded sales, rebuilt from their line rows in insertion order."""
        conn = connect(self.db_path)
        rows = conn.execute("""
            SELECT id, sale_reference, product_id, product_name, quantity, price_cents, sale_date
            FROM sales ORDER BY id ASC
        """).fetchall()

        by_reference: Dict[str, SaleRecord] = {}
        for r in rows:
            reference = r["sale_reference"]
            if not reference or not str(reference).strip():
                reference = f"S{r['id']}"  # rows written before references existed
            sale = by_reference.get(reference)
            if sale is None:
                stamp = parse_datetime(r["sale_date"])
                if stamp is None:
                    logger.warning("Sale %s has an unreadable date %r", reference, r["sale_date"])
                    stamp = datetime.now()
                sale = by_reference[reference] = SaleRecord(reference=reference, timestamp=stamp)
            sale.line_items.append(SaleLineItem(
                product_id=int(r["product_id"]),
                name=r["product_name"],
                unit_price=from_cents(r["price_cents"]),
                quantity=int(r["quantity"]),
            ))
        return list(by_reference.values())

    def clear_all_sales(self, *, session: Session) -> int:
        """Delete every sale row and restart the row ids. Returns the number of rows removed."""
        require_admin(session)
        conn = connect(self.db_path)
        with conn:
            removed = conn.execute("DELETE FROM sales").rowcount
            conn.execute("DELETE FROM sqlite_sequence WHERE name='sales'")
        logger.warning("Cleared %d sales row(s) (user=%s)", removed, session.user)
        return removed

    # ---------- RECEIPT ----------
    def totals(self, items: Iterable[SaleLineItem]) -> Dict[str, Decimal]:
        return vat_breakdown(sum((it.subtotal for it in items), Decimal("0.00")), self.vat_rate)

    def format_receipt(self, sale: SaleRecord, store_name: str = "LTB Paint Center") -> str:
        def money(v):
            return format_amount(v, self.currency_symbol)

        t = self.totals(sale.line_items)
        rate_pct = (self.vat_rate * 100).normalize()
        lines = [
            store_name,
            f"Reference No.: {sale.reference}",
            f"Date: {datetime_text(sale.timestamp)}",
            "-" * 40,
        ]
        for it in sale.line_items:
            lines.append(f"{it.name} x{it.quantity} @ {money(it.unit_price)}")
            lines.append(f"{money(it.subtotal):>40}")
        lines += [
            "-" * 40,
            f"{'VATable Sale:':<20}{money(t['vatable']):>20}",
            f"{'VAT-Exempt Sale:':<20}{money(t['vat_exempt']):>20}",
            f"{f'VAT ({rate_pct:f}%):':<20}{money(t['vat']):>20}",
            f"{'TOTAL:':<20}{money(t['total']):>20}",
        ]
        return "\n".join(lines)
