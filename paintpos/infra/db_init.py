from .db import connect
from ..util.logging import get_logger
from ..util.passwords import generate_salt, hash_password

logger = get_logger(__name__)

DEFAULT_ADMIN_PASSWORD = "admin123"

SCHEMA_SQL = """
PRAGMA foreign_keys=ON;

-- =========================
-- INVENTORY (one row per batch / lot)
-- =========================
-- product_code = MMDDYYNNN, minted from date_imported when the batch is added
-- status is a cache of the classifier output, refreshed on demand
CREATE TABLE IF NOT EXISTS inventory (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_code TEXT,
  name TEXT NOT NULL,
  brand TEXT NOT NULL,
  color TEXT,
  type TEXT,
  price_cents INTEGER NOT NULL DEFAULT 0 CHECK(price_cents >= 0),
  qty INTEGER NOT NULL DEFAULT 0 CHECK(qty >= 0),
  date_imported TEXT NOT NULL DEFAULT (DATE('now')),
  expiration_date TEXT,
  status TEXT NOT NULL DEFAULT 'Active'
);

-- NULL codes are allowed several times, real codes only once
CREATE UNIQUE INDEX IF NOT EXISTS ux_inventory_product_code ON inventory(product_code);
CREATE INDEX IF NOT EXISTS ix_inventory_expiration ON inventory(expiration_date);

-- =========================
-- SALES (one row per line item; rows of a receipt share sale_reference)
-- =========================
-- product_id is not a foreign key: sold batches may be deleted later, the sale stays
CREATE TABLE IF NOT EXISTS sales (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  sale_reference TEXT,
  product_id INTEGER NOT NULL,
  product_name TEXT NOT NULL,
  quantity INTEGER NOT NULL CHECK(quantity > 0),
  price_cents INTEGER NOT NULL,
  total_cents INTEGER NOT NULL,
  sale_date TEXT NOT NULL DEFAULT (DATETIME('now', 'localtime'))
);
CREATE INDEX IF NOT EXISTS ix_sales_reference ON sales(sale_reference);
CREATE INDEX IF NOT EXISTS ix_sales_date ON sales(sale_date);

-- =========================
-- ADMIN PASSWORD (single row)
-- =========================
CREATE TABLE IF NOT EXISTS admin_settings (
  id INTEGER PRIMARY KEY CHECK (id = 1),
  password_hash TEXT NOT NULL,
  salt TEXT NOT NULL
);
"""

def init_db(db_path: str):
    conn = connect(db_path)
    with conn:
        # the whole schema runs as one script
        conn.executescript(SCHEMA_SQL)
    with conn:
        count = conn.execute("SELECT COUNT(1) AS n FROM admin_settings").fetchone()["n"]
        if count == 0:
            salt = generate_salt()
            conn.execute(
                "INSERT INTO admin_settings(id, password_hash, salt) VALUES(1, ?, ?)",
                (hash_password(DEFAULT_ADMIN_PASSWORD, salt), salt),
            )
            logger.info("Admin password initialised with the default value")
    return conn
