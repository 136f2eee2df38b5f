import sqlite3
from typing import Optional, Tuple

from ..domain.entities import Session
from ..infra.db import connect
from ..util.logging import get_logger
from ..util.passwords import generate_salt, hash_password, password_matches

logger = get_logger(__name__)


def require_admin(session: Optional[Session]) -> None:
    if session is None or not session.is_admin:
        raise PermissionError("Admin password required for this operation.")


class AdminService:
    """Salted-hash admin password kept in the single admin_settings row."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _hash_and_salt(self, conn) -> Optional[Tuple[str, str]]:
        row = conn.execute("SELECT password_hash, salt FROM admin_settings WHERE id = 1").fetchone()
        return (row["password_hash"], row["salt"]) if row else None

    def verify_password(self, plain: str) -> bool:
        try:
            conn = connect(self.db_path)
            hs = self._hash_and_salt(conn)
        except sqlite3.Error as e:
            logger.error("Could not read the admin password: %s", e)
            return False
        if hs is None:
            return False
        ok = password_matches(plain, *hs)
        if not ok:
            logger.info("Rejected admin password attempt")
        return ok

    def change_password(self, current_plain: str, new_plain: str) -> bool:
        if not new_plain:
            raise ValueError("The new password cannot be empty.")
        try:
            conn = connect(self.db_path)
            with conn:
                hs = self._hash_and_salt(conn)
                if hs is None or not password_matches(current_plain, *hs):
                    return False
                salt = generate_salt()
                conn.execute(
                    "INSERT OR REPLACE INTO admin_settings(id, password_hash, salt) VALUES(1, ?, ?)",
                    (hash_password(new_plain, salt), salt),
                )
        except sqlite3.Error as e:
            logger.error("Could not change the admin password: %s", e)
            return False
        logger.info("Admin password changed")
        return True

    def login(self, user: str, password: str) -> Session:
        """Admin session when the password checks out, otherwise a plain cashier session."""
        return Session(user=user or None, is_admin=self.verify_password(password))
