import sqlite3
from contextlib import contextmanager
from pathlib import Path

# ---------------------------- DATABASE CONNECTION AND SETTINGS -----------------------------
# Creates the parent dir of the DB file if missing.
# Rows come back as sqlite3.Row, so they can be read like dicts: row["product_code"].
# Dates are stored as ISO text and parsed by util.dates, so no detect_types here.

def connect(db_path: str):
    p = Path(db_path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row

    # WAL: readers keep working while the till writes a sale.
    conn.execute("PRAGMA journal_mode=WAL;")
    # NORMAL: balance between durability and speed for a single terminal.
    conn.execute("PRAGMA synchronous=NORMAL;")
    # SQLite ships with FOREIGN KEY checks off.
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


# ---------------------------------- WRITE TRANSACTIONS -----------------------------------
# BEGIN IMMEDIATE takes the database write lock up front. Code minting runs inside it,
# so reading the highest code and inserting the next one cannot interleave with another writer.

@contextmanager
def immediate_transaction(conn):
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()

