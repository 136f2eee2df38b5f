import sqlite3
from datetime import date
from typing import List, Optional

from ..domain import codes
from ..domain.entities import Alert, BatchRecord, Session, STATUS_EXPIRED
from ..domain.status import EXPIRY_ALERT_DAYS, LOW_STOCK_THRESHOLD, classify, classify_batch, composite_status, scan
from ..infra.db import connect, immediate_transaction
from ..util.dates import date_text, parse_date
from ..util.logging import get_logger
from ..util.money import from_cents, to_cents
from .admin import require_admin

logger = get_logger(__name__)


def row_to_batch(row) -> BatchRecord:
    return BatchRecord(
        id=int(row["id"]),
        code=row["product_code"],
        name=row["name"],
        brand=row["brand"],
        color=row["color"] or "",
        type=row["type"] or "",
        unit_price=from_cents(row["price_cents"]),
        quantity=int(row["qty"] or 0),
        date_imported=parse_date(row["date_imported"]),
        expiration_date=parse_date(row["expiration_date"]),
        status=row["status"],
    )


class InventoryService:
    def __init__(
        self,
        db_path: str,
        *,
        expiry_days: int = EXPIRY_ALERT_DAYS,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        retry_attempts: int = codes.DEFAULT_RETRY_ATTEMPTS,
    ):
        self.db_path = db_path
        self.expiry_days = expiry_days
        self.low_stock_threshold = low_stock_threshold
        self.retry_attempts = retry_attempts

    @classmethod
    def from_config(cls, cfg: dict) -> "InventoryService":
        return cls(
            cfg["db_path"],
            expiry_days=int(cfg.get("expiry_alert_days", EXPIRY_ALERT_DAYS)),
            low_stock_threshold=int(cfg.get("low_stock_threshold", LOW_STOCK_THRESHOLD)),
            retry_attempts=int(cfg.get("code_retry_attempts", codes.DEFAULT_RETRY_ATTEMPTS)),
        )

    def status_for(self, quantity: int, expiration_date: Optional[date], today: Optional[date] = None) -> str:
        return classify(
            quantity, expiration_date, today,
            expiry_days=self.expiry_days, low_stock_threshold=self.low_stock_threshold,
        )

    def batch_status(self, batch: BatchRecord, today: Optional[date] = None) -> str:
        return classify_batch(
            batch, today, expiry_days=self.expiry_days, low_stock_threshold=self.low_stock_threshold,
        )

    def status_details(self, batch: BatchRecord, today: Optional[date] = None) -> str:
        """Every label that applies to ``batch``, e.g. ``"Expiring Soon; Low Stock"``."""
        return composite_status(
            batch.quantity, batch.expiration_date, today,
            expiry_days=self.expiry_days, low_stock_threshold=self.low_stock_threshold,
        )

    # ---------- PRODUCT CODES (MMDDYYNNN) ----------
    @staticmethod
    def _codes_with_prefix(conn, prefix: str) -> List[str]:
        try:
            rows = conn.execute(
                "SELECT product_code FROM inventory WHERE product_code IS NOT NULL AND substr(product_code, 1, 6) = ?",
                (prefix,),
            ).fetchall()
        except sqlite3.Error as e:
            raise codes.CodeLookupUnavailable(str(e)) from e
        return [r["product_code"] for r in rows]

    @staticmethod
    def _code_exists(conn, code: str, exclude_id: Optional[int] = None) -> bool:
        if not code or not code.strip():
            return False
        row = conn.execute(
            "SELECT 1 FROM inventory WHERE product_code = ? AND id IS NOT ? LIMIT 1",
            (code, exclude_id),
        ).fetchone()
        return row is not None

    def codes_with_prefix(self, prefix: str) -> List[str]:
        try:
            conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise codes.CodeLookupUnavailable(str(e)) from e
        return self._codes_with_prefix(conn, prefix)

    def code_exists(self, code: str) -> bool:
        return self._code_exists(connect(self.db_path), code)

    def _mint_batch_code(self, conn, day: Optional[date]) -> str:
        code = codes.next_code(lambda prefix: self._codes_with_prefix(conn, prefix), day)
        return codes.resolve_collision(
            code, lambda c: self._code_exists(conn, c), max_attempts=self.retry_attempts,
        )

    def generate_batch_code(self, day: Optional[date] = None) -> str:
        """Preview of the code the next batch imported on ``day`` would get."""
        code = codes.next_code(self.codes_with_prefix, day)
        try:
            return codes.resolve_collision(code, self.code_exists, max_attempts=self.retry_attempts)
        except sqlite3.Error as e:
            logger.warning("Could not re-check generated code %s: %s", code, e)
            return code

    # ---------- BATCHES ----------
    def add_batch(self, batch: BatchRecord, *, session: Session, today: Optional[date] = None) -> BatchRecord:
        """Insert a batch, minting its code from the import date when it has none."""
        require_admin(session)
        if batch.quantity < 0:
            raise ValueError("Quantity cannot be negative.")

        explicit_code = (batch.code or "").strip() or None
        day = batch.date_imported or date.today()
        status = self.status_for(batch.quantity, batch.expiration_date, today)

        conn = connect(self.db_path)
        for attempt in range(1, self.retry_attempts + 1):
            try:
                with immediate_transaction(conn):
                    if explicit_code and self._code_exists(conn, explicit_code):
                        raise ValueError(f"Product ID '{explicit_code}' already exists. Please use a unique Product ID.")
                    code = explicit_code or self._mint_batch_code(conn, day)
                    cur = conn.execute("""
                        INSERT INTO inventory(product_code, name, brand, color, type, price_cents, qty,
                                              date_imported, expiration_date, status)
                        VALUES(?,?,?,?,?,?,?,?,?,?)
                    """, (code, batch.name, batch.brand, batch.color, batch.type, to_cents(batch.unit_price),
                          int(batch.quantity), date_text(day), date_text(batch.expiration_date), status))
                    stored = batch.with_changes(id=cur.lastrowid, code=code, date_imported=day, status=status)
            except sqlite3.IntegrityError as e:
                if explicit_code or "product_code" not in str(e):
                    raise ValueError(f"Could not save the batch: {e}") from e
                logger.warning("Code clash on insert (attempt %d/%d): %s", attempt, self.retry_attempts, e)
                continue
            logger.info("Added batch %s (%s, %s) x%d", stored.code, stored.name, stored.brand, stored.quantity)
            return stored

        raise ValueError("Could not assign a unique product ID, please try again.")

    def get_all_batches(self) -> List[BatchRecord]:
        conn = connect(self.db_path)
        rows = conn.execute("SELECT * FROM inventory ORDER BY id ASC").fetchall()
        return [row_to_batch(r) for r in rows]

    def get_batch(self, batch_id: int) -> Optional[BatchRecord]:
        conn = connect(self.db_path)
        row = conn.execute("SELECT * FROM inventory WHERE id=?", (int(batch_id),)).fetchone()
        return row_to_batch(row) if row else None

    def update_batch(self, batch: BatchRecord, *, session: Session, today: Optional[date] = None) -> BatchRecord:
        require_admin(session)
        if batch.id is None:
            raise ValueError("Select a batch to update.")
        code = (batch.code or "").strip()
        if not code:
            raise ValueError("Product ID is required when updating.")
        if batch.quantity < 0:
            raise ValueError("Quantity cannot be negative.")

        status = self.status_for(batch.quantity, batch.expiration_date, today)
        conn = connect(self.db_path)
        with conn:
            if self._code_exists(conn, code, exclude_id=batch.id):
                raise ValueError(f"Product ID '{code}' already exists. Please use a unique Product ID.")
            cur = conn.execute("""
                UPDATE inventory
                SET product_code=?, name=?, brand=?, color=?, type=?, price_cents=?, qty=?,
                    date_imported=?, expiration_date=?, status=?
                WHERE id=?
            """, (code, batch.name, batch.brand, batch.color, batch.type, to_cents(batch.unit_price),
                  int(batch.quantity), date_text(batch.date_imported), date_text(batch.expiration_date),
                  status, int(batch.id)))
            if cur.rowcount == 0:
                raise ValueError("The batch no longer exists.")
        logger.info("Updated batch %s", code)
        return batch.with_changes(code=code, status=status)

    def delete_batch(self, batch_id: int, *, session: Session) -> bool:
        require_admin(session)
        conn = connect(self.db_path)
        with conn:
            cur = conn.execute("DELETE FROM inventory WHERE id=?", (int(batch_id),))
        if cur.rowcount:
            logger.info("Deleted batch id=%s", batch_id)
        return cur.rowcount > 0

    # ---------- STATUS & ALERTS ----------
    def refresh_statuses(self, today: Optional[date] = None) -> int:
        """Recompute the cached status of every batch; only changed rows are written."""
        conn = connect(self.db_path)
        changed = 0
        with conn:
            for batch in [row_to_batch(r) for r in conn.execute("SELECT * FROM inventory").fetchall()]:
                new_status = self.batch_status(batch, today)
                if new_status != batch.status:
                    conn.execute("UPDATE inventory SET status=? WHERE id=?", (new_status, batch.id))
                    changed += 1
        if changed:
            logger.info("Refreshed status of %d batch(es)", changed)
        return changed

    def scan_alerts(self, today: Optional[date] = None) -> List[Alert]:
        return scan(
            self.get_all_batches(), today,
            expiry_days=self.expiry_days, low_stock_threshold=self.low_stock_threshold,
        )

    def available_for_sale(self, today: Optional[date] = None) -> List[BatchRecord]:
        """Batches the till may sell: in stock and not expired."""
        return [
            b for b in self.get_all_batches()
            if b.quantity > 0 and self.batch_status(b, today) != STATUS_EXPIRED
        ]

    # ---------- SEARCH / FILTERS ----------
    def brands(self) -> List[str]:
        conn = connect(self.db_path)
        rows = conn.execute(
            "SELECT DISTINCT brand FROM inventory WHERE TRIM(IFNULL(brand, '')) <> '' ORDER BY brand"
        ).fetchall()
        return [r["brand"] for r in rows]

    def colors(self) -> List[str]:
        conn = connect(self.db_path)
        rows = conn.execute(
            "SELECT DISTINCT color FROM inventory WHERE TRIM(IFNULL(color, '')) <> '' ORDER BY color"
        ).fetchall()
        return [r["color"] for r in rows]

    def search_batches(self, text: str = "", brand: Optional[str] = None, color: Optional[str] = None) -> List[BatchRecord]:
        items = self.get_all_batches()
        if text:
            s = text.strip().lower()
            items = [
                b for b in items
                if any(s in (v or "").lower() for v in (b.code, b.name, b.type, b.brand, b.color))
            ]
        if brand:
            items = [b for b in items if b.brand == brand]
        if color:
            items = [b for b in items if b.color == color]
        return items
