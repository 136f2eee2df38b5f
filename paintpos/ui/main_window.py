from PySide6 import QtWidgets, QtGui
from ..domain.entities import Session
from ..infra.db_init import init_db
from ..services.admin import AdminService
from ..services.inventory import InventoryService
from ..services.sales import SalesService
from ..util.config import load_config
from ..util.logging import effective_level, get_logger, set_log_level
from .alerts_window import AlertsWindow
from .auth_prompt import admin_session
from .inventory_window import InventoryWindow
from .monitoring_window import MonitoringWindow
from .sale_dialog import SaleDialog

logger = get_logger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("LTB Paint Center - POS & Inventory")
        self.resize(900, 600)

        self.cfg = load_config()
        set_log_level(effective_level(self.cfg.get("log_level")))
        self.conn = init_db(self.cfg["db_path"])
        self.inventory = InventoryService.from_config(self.cfg)
        self.sales = SalesService.from_config(self.cfg)
        self.admin = AdminService(self.cfg["db_path"])
        self.session = Session.anonymous()

        changed = self.inventory.refresh_statuses()
        logger.info("Started with %s, %d status(es) refreshed", self.cfg["db_path"], changed)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        layout = QtWidgets.QVBoxLayout(central)

        # big buttons for the counter
        self.btn_sale = QtWidgets.QPushButton("Point of Sale (F1)")
        self.btn_inventory = QtWidgets.QPushButton("Inventory (F2)")
        self.btn_alerts = QtWidgets.QPushButton("Alerts (F3)")
        self.btn_monitoring = QtWidgets.QPushButton("Sales Monitoring (F4)")
        self.btn_admin = QtWidgets.QPushButton("Admin Login (F10)")
        self.btn_password = QtWidgets.QPushButton("Change Admin Password")
        for b in (self.btn_sale, self.btn_inventory, self.btn_alerts, self.btn_monitoring, self.btn_admin):
            b.setMinimumHeight(64)
            b.setStyleSheet("font-size: 22px;")

        layout.addWidget(self.btn_sale)
        layout.addWidget(self.btn_inventory)
        layout.addWidget(self.btn_alerts)
        layout.addWidget(self.btn_monitoring)
        layout.addStretch()
        layout.addWidget(self.btn_admin)
        layout.addWidget(self.btn_password)

        self._update_status_bar()

        self.btn_sale.clicked.connect(self.open_sale)
        self.btn_inventory.clicked.connect(self.open_inventory)
        self.btn_alerts.clicked.connect(self.open_alerts)
        self.btn_monitoring.clicked.connect(self.open_monitoring)
        self.btn_admin.clicked.connect(self.toggle_admin)
        self.btn_password.clicked.connect(self.change_password)

        # shortcuts (keep references so they are not garbage collected)
        self.shortcuts = []
        for key, slot in (("F1", self.open_sale), ("F2", self.open_inventory), ("F3", self.open_alerts),
                          ("F4", self.open_monitoring), ("F10", self.toggle_admin)):
            sc = QtGui.QShortcut(QtGui.QKeySequence(key), self)
            sc.activated.connect(slot)
            self.shortcuts.append(sc)

    def _update_status_bar(self):
        who = f"Admin ({self.session.user})" if self.session.is_admin else "Cashier"
        self.statusBar().showMessage(f"Ready - {who}")
        self.btn_admin.setText("Admin Logout (F10)" if self.session.is_admin else "Admin Login (F10)")

    def toggle_admin(self):
        if self.session.is_admin:
            self.session = Session.anonymous()
        else:
            self.session = admin_session(self, self.admin, self.session)
        self._update_status_bar()

    def open_sale(self):
        dlg = SaleDialog(self.inventory, self.sales, self)
        dlg.exec()

    def open_inventory(self):
        dlg = InventoryWindow(self.inventory, self.admin, self.session, self)
        dlg.exec()

    def open_alerts(self):
        dlg = AlertsWindow(self.inventory, self)
        dlg.exec()

    def open_monitoring(self):
        dlg = MonitoringWindow(self.inventory, self.sales, self.admin, self.session, self)
        dlg.exec()

    def change_password(self):
        current, ok = QtWidgets.QInputDialog.getText(
            self, "Change admin password", "Current password:", QtWidgets.QLineEdit.Password
        )
        if not ok:
            return
        new, ok = QtWidgets.QInputDialog.getText(
            self, "Change admin password", "New password:", QtWidgets.QLineEdit.Password
        )
        if not ok:
            return
        again, ok = QtWidgets.QInputDialog.getText(
            self, "Change admin password", "Repeat new password:", QtWidgets.QLineEdit.Password
        )
        if not ok:
            return
        if new != again:
            QtWidgets.QMessageBox.warning(self, "Admin", "The new passwords do not match.")
            return
        try:
            changed = self.admin.change_password(current, new)
        except ValueError as e:
            QtWidgets.QMessageBox.warning(self, "Admin", str(e))
            return
        if changed:
            QtWidgets.QMessageBox.information(self, "Admin", "Password changed.")
        else:
            QtWidgets.QMessageBox.warning(self, "Access denied", "Invalid admin password.")
