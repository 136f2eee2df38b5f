from PySide6 import QtWidgets, QtGui
from ..domain.entities import AlertKind
from ..domain.status import alerts_of_kind
from ..services.inventory import InventoryService

KIND_COLORS = {
    AlertKind.EXPIRED: QtGui.QColor(255, 205, 210),
    AlertKind.EXPIRING_SOON: QtGui.QColor(255, 249, 196),
    AlertKind.OUT_OF_STOCK: QtGui.QColor(224, 224, 224),
    AlertKind.LOW_STOCK: QtGui.QColor(255, 224, 178),
}

KIND_LABELS = {
    AlertKind.EXPIRED: "Expired",
    AlertKind.EXPIRING_SOON: "Expiring soon",
    AlertKind.OUT_OF_STOCK: "Out of stock",
    AlertKind.LOW_STOCK: "Low stock",
}


class AlertsWindow(QtWidgets.QDialog):
    def __init__(self, svc: InventoryService, parent=None):
        super().__init__(parent)
        self.svc = svc
        self.setWindowTitle("Inventory alerts")
        self.resize(820, 520)

        top = QtWidgets.QHBoxLayout()
        self.cb_kind = QtWidgets.QComboBox()
        self.cb_kind.addItem("All alerts", None)
        for kind, label in KIND_LABELS.items():
            self.cb_kind.addItem(label, kind)
        self.lbl_counts = QtWidgets.QLabel()
        self.btn_refresh = QtWidgets.QPushButton("Refresh")
        top.addWidget(QtWidgets.QLabel("Show"))
        top.addWidget(self.cb_kind)
        top.addWidget(self.lbl_counts)
        top.addStretch()
        top.addWidget(self.btn_refresh)

        self.table = QtWidgets.QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Alert", "Product ID", "Product", "Status", "Message"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.verticalHeader().setVisible(False)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(top)
        layout.addWidget(self.table)

        self.btn_refresh.clicked.connect(self.refresh)
        self.cb_kind.currentIndexChanged.connect(self.refresh)
        self.refresh()

    def refresh(self):
        self.svc.refresh_statuses()
        alerts = self.svc.scan_alerts()
        batches = {b.id: b for b in self.svc.get_all_batches()}
        counts = "   ".join(f"{label}: {len(alerts_of_kind(alerts, kind))}" for kind, label in KIND_LABELS.items())
        self.lbl_counts.setText(counts)

        kind = self.cb_kind.currentData()
        shown = alerts_of_kind(alerts, kind) if kind is not None else alerts

        self.table.setRowCount(0)
        for a in shown:
            r = self.table.rowCount(); self.table.insertRow(r)
            batch = batches.get(a.batch_id)
            status = self.svc.status_details(batch) if batch is not None else ""
            values = [KIND_LABELS[a.kind], a.code or "-", f"{a.product_name} ({a.brand})", status, a.message]
            for c, v in enumerate(values):
                cell = QtWidgets.QTableWidgetItem(v)
                cell.setBackground(KIND_COLORS[a.kind])
                self.table.setItem(r, c, cell)
        self.table.resizeColumnsToContents()

        if not alerts:
            r = self.table.rowCount(); self.table.insertRow(r)
            self.table.setSpan(r, 0, 1, 5)
            self.table.setItem(r, 0, QtWidgets.QTableWidgetItem("All stock is healthy. No alerts."))
