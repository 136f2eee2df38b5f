from datetime import date, timedelta
from typing import Iterable, List, Optional

from .entities import (
    Alert, AlertKind, BatchRecord,
    STATUS_ACTIVE, STATUS_EXPIRED, STATUS_EXPIRING_SOON, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK,
)

EXPIRY_ALERT_DAYS = 7
LOW_STOCK_THRESHOLD = 5


def _expiry_label(expiration_date: Optional[date], today: date, expiry_days: int) -> Optional[str]:
    if expiration_date is None:
        return None
    if expiration_date <= today:
        return STATUS_EXPIRED  # expiring today already counts as expired
    if expiration_date <= today + timedelta(days=expiry_days):
        return STATUS_EXPIRING_SOON
    return None


def _stock_label(quantity: int, low_stock_threshold: int) -> Optional[str]:
    if quantity <= 0:
        return STATUS_OUT_OF_STOCK
    if quantity <= low_stock_threshold:
        return STATUS_LOW_STOCK
    return None


def classify(
    quantity: int,
    expiration_date: Optional[date],
    today: Optional[date] = None,
    *,
    expiry_days: int = EXPIRY_ALERT_DAYS,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> str:
    """Primary status label for one batch; expiration outranks stock."""
    today = today or date.today()
    return (
        _expiry_label(expiration_date, today, expiry_days)
        or _stock_label(quantity, low_stock_threshold)
        or STATUS_ACTIVE
    )


def composite_status(
    quantity: int,
    expiration_date: Optional[date],
    today: Optional[date] = None,
    *,
    expiry_days: int = EXPIRY_ALERT_DAYS,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> str:
    """Every matching label, e.g. ``"Expiring Soon; Low Stock"``."""
    today = today or date.today()
    labels = [
        label for label in (
            _expiry_label(expiration_date, today, expiry_days),
            _stock_label(quantity, low_stock_threshold),
        ) if label
    ]
    return "; ".join(labels) if labels else STATUS_ACTIVE


def classify_batch(batch: BatchRecord, today: Optional[date] = None, **thresholds) -> str:
    return classify(batch.quantity, batch.expiration_date, today, **thresholds)


def check_batch(
    batch: BatchRecord,
    today: date,
    *,
    expiry_days: int = EXPIRY_ALERT_DAYS,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> List[Alert]:
    """Up to two alerts for a batch: one about expiration, then one about stock."""
    alerts = []

    def _alert(kind: AlertKind, message: str) -> Alert:
        return Alert(batch.id, kind, message, code=batch.code, product_name=batch.name, brand=batch.brand)

    if batch.expiration_date is not None:
        days_left = (batch.expiration_date - today).days
        if days_left <= 0:
            alerts.append(_alert(
                AlertKind.EXPIRED,
                f"Batch {batch.code or '-'} of {batch.name} ({batch.brand}) expired on {batch.expiration_date.isoformat()}.",
            ))
        elif days_left <= expiry_days:
            alerts.append(_alert(
                AlertKind.EXPIRING_SOON,
                f"Batch {batch.code or '-'} of {batch.name} ({batch.brand}) expires in {days_left} day(s) "
                f"on {batch.expiration_date.isoformat()}.",
            ))

    if batch.quantity <= 0:
        alerts.append(_alert(
            AlertKind.OUT_OF_STOCK,
            f"Batch {batch.code or '-'} of {batch.name} ({batch.brand}) is out of stock.",
        ))
    elif batch.quantity <= low_stock_threshold:
        alerts.append(_alert(
            AlertKind.LOW_STOCK,
            f"Batch {batch.code or '-'} of {batch.name} ({batch.brand}) is running low, only {batch.quantity} left.",
        ))

    return alerts


def scan(
    batches: Iterable[BatchRecord],
    today: Optional[date] = None,
    *,
    expiry_days: int = EXPIRY_ALERT_DAYS,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
) -> List[Alert]:
    """Alerts for a batch collection, in batch order. Empty result = all healthy."""
    today = today or date.today()
    alerts: List[Alert] = []
    for batch in batches or ():
        alerts.extend(check_batch(batch, today, expiry_days=expiry_days, low_stock_threshold=low_stock_threshold))
    return alerts


def alerts_of_kind(alerts: Iterable[Alert], kind: AlertKind) -> List[Alert]:
    return [a for a in alerts if a.kind == kind]
