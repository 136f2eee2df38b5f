# Application settings for the paint center terminal.
# Stored as a small JSON file next to the app; created with defaults on first run.

from pathlib import Path
from decimal import Decimal
import json

# ------------------------------ DEFAULT CONFIGURATION PARAMETERS -----------------------------
# db_path = SQLite file holding inventory, sales and the admin password
# expiry_alert_days = a batch expiring within this many days is "Expiring Soon"
# low_stock_threshold = a batch with this many units or fewer is "Low Stock"
# vat_rate = VAT included in shelf prices (decimal text so it round-trips exactly)
# code_retry_attempts = how many suffixes to try when a freshly minted batch code is taken
# log_level = DEBUG / INFO / WARNING / ERROR

DEFAULT_CONFIG = {
    "db_path": "paintcenter.sqlite",
    "expiry_alert_days": 7,
    "low_stock_threshold": 5,
    "vat_rate": "0.12",
    "currency_symbol": "₱",
    "code_retry_attempts": 10,
    "log_level": "INFO",
}

# ---------------------------     LOADING THE CONFIGURATION    ---------------------------------
# First run on a machine: config.json is missing, so it is written with the defaults.
# Later runs read it back; keys added in newer versions are filled in from the defaults.
def load_config(path: str = "config.json") -> dict:
    p = Path(path)
    if not p.exists():
        save_config(DEFAULT_CONFIG, path)
        return DEFAULT_CONFIG.copy()  # never hand out the module-level dict
    stored = json.loads(p.read_text(encoding="utf-8"))
    cfg = DEFAULT_CONFIG.copy()
    cfg.update(stored)
    return cfg

def save_config(cfg: dict, path: str = "config.json"):
    Path(path).write_text(json.dumps(cfg, indent=2, ensure_ascii=False), encoding="utf-8")

def vat_rate(cfg: dict) -> Decimal:
    return Decimal(str(cfg.get("vat_rate", DEFAULT_CONFIG["vat_rate"])))
