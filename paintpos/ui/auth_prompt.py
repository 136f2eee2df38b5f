from PySide6 import QtWidgets
from ..domain.entities import Session
from ..services.admin import AdminService


def admin_session(parent, admin: AdminService, session: Session) -> Session:
    """Return an admin session, asking for the password when ``session`` is not one.

    Cancel or a wrong password gives back the session passed in.
    """
    if session.is_admin:
        return session
    password, ok = QtWidgets.QInputDialog.getText(
        parent, "Admin password required", "Password:", QtWidgets.QLineEdit.Password
    )
    if not ok:
        return session
    granted = admin.login(session.user or "admin", password)
    if not granted.is_admin:
        QtWidgets.QMessageBox.warning(parent, "Access denied", "Invalid admin password.")
        return session
    return granted
