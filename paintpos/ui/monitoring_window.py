from PySide6 import QtWidgets, QtCore
from ..domain.entities import Session
from ..services import reports
from ..services.admin import AdminService
from ..services.inventory import InventoryService
from ..services.sales import SalesService
from ..util.dates import datetime_text
from ..util.money import format_amount
from .auth_prompt import admin_session


class MonitoringWindow(QtWidgets.QDialog):
    def __init__(self, inventory: InventoryService, sales: SalesService, admin: AdminService,
                 session: Session, parent=None):
        super().__init__(parent)
        self.inventory = inventory
        self.sales = sales
        self.admin = admin
        self.session = session
        self.setWindowTitle("Sales Monitoring")
        self.resize(1100, 680)

        # --- filters ---
        filt = QtWidgets.QHBoxLayout()
        self.chk_dates = QtWidgets.QCheckBox("Date range")
        self.in_from = QtWidgets.QDateEdit(calendarPopup=True)
        self.in_to = QtWidgets.QDateEdit(calendarPopup=True)
        for d in (self.in_from, self.in_to):
            d.setDisplayFormat("yyyy-MM-dd")
            d.setDate(QtCore.QDate.currentDate())
            d.setEnabled(False)
        self.chk_dates.toggled.connect(self.in_from.setEnabled)
        self.chk_dates.toggled.connect(self.in_to.setEnabled)
        self.cb_brand = QtWidgets.QComboBox()
        self.btn_apply = QtWidgets.QPushButton("Apply")
        self.btn_export = QtWidgets.QPushButton("Export CSV")
        filt.addWidget(self.chk_dates)
        filt.addWidget(QtWidgets.QLabel("From")); filt.addWidget(self.in_from)
        filt.addWidget(QtWidgets.QLabel("To")); filt.addWidget(self.in_to)
        filt.addWidget(self.cb_brand)
        filt.addWidget(self.btn_apply)
        filt.addStretch()
        filt.addWidget(self.btn_export)

        # --- sales table ---
        self.table = QtWidgets.QTableWidget(0, 6)
        self.table.setHorizontalHeaderLabels(["Reference No.", "Date", "Product", "Qty", "Price", "Subtotal"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setAlternatingRowColors(True)
        self.table.verticalHeader().setVisible(False)

        # --- breakdowns ---
        self.tbl_brand = self._breakdown_table("Brand")
        self.tbl_type = self._breakdown_table("Type")
        side = QtWidgets.QVBoxLayout()
        side.addWidget(QtWidgets.QLabel("Revenue by brand"))
        side.addWidget(self.tbl_brand)
        side.addWidget(QtWidgets.QLabel("Revenue by type"))
        side.addWidget(self.tbl_type)
        side_w = QtWidgets.QWidget(); side_w.setLayout(side)

        split = QtWidgets.QSplitter(QtCore.Qt.Horizontal)
        split.addWidget(self.table)
        split.addWidget(side_w)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 1)

        self.lbl_summary = QtWidgets.QLabel()
        self.btn_clear = QtWidgets.QPushButton("Clear all sales")
        bottom = QtWidgets.QHBoxLayout()
        bottom.addWidget(self.lbl_summary)
        bottom.addStretch()
        bottom.addWidget(self.btn_clear)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(filt)
        layout.addWidget(split)
        layout.addLayout(bottom)

        # --- events ---
        self.btn_apply.clicked.connect(self.refresh)
        self.cb_brand.currentIndexChanged.connect(self.refresh)
        self.btn_export.clicked.connect(self.export_csv)
        self.btn_clear.clicked.connect(self.clear_sales)

        self._populate_brands()
        self.refresh()

    @staticmethod
    def _breakdown_table(label: str) -> QtWidgets.QTableWidget:
        t = QtWidgets.QTableWidget(0, 2)
        t.setHorizontalHeaderLabels([label, "Revenue"])
        t.horizontalHeader().setStretchLastSection(True)
        t.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        t.verticalHeader().setVisible(False)
        return t

    def _money(self, value) -> str:
        return format_amount(value, self.sales.currency_symbol)

    def _populate_brands(self):
        self.cb_brand.blockSignals(True)
        self.cb_brand.clear()
        self.cb_brand.addItem("All Brands")
        self.cb_brand.addItems(self.inventory.brands())
        self.cb_brand.blockSignals(False)

    def _filtered(self):
        batches = self.inventory.get_all_batches()
        date_from = date_to = None
        if self.chk_dates.isChecked():
            date_from = self.in_from.date().toPython()
            date_to = self.in_to.date().toPython()
        brand = self.cb_brand.currentText() if self.cb_brand.currentIndex() > 0 else None
        return reports.filter_sales(self.sales.load_sales(), batches, date_from, date_to, brand), batches

    def refresh(self):
        try:
            shown, batches = self._filtered()
        except ValueError as e:
            QtWidgets.QMessageBox.warning(self, "Filter", str(e))
            return

        self.table.setRowCount(0)
        for sale in shown:
            for it in sale.line_items:
                r = self.table.rowCount(); self.table.insertRow(r)
                values = [sale.reference, datetime_text(sale.timestamp), it.name, str(it.quantity),
                          self._money(it.unit_price), self._money(it.subtotal)]
                for c, v in enumerate(values):
                    self.table.setItem(r, c, QtWidgets.QTableWidgetItem(v))
        self.table.resizeColumnsToContents()

        for table, totals in ((self.tbl_brand, reports.revenue_by_brand(shown, batches)),
                              (self.tbl_type, reports.revenue_by_type(shown, batches))):
            table.setRowCount(0)
            for key, amount in totals.items():
                r = table.rowCount(); table.insertRow(r)
                table.setItem(r, 0, QtWidgets.QTableWidgetItem(key))
                table.setItem(r, 1, QtWidgets.QTableWidgetItem(self._money(amount)))

        s = reports.sales_summary(shown)
        self.lbl_summary.setText(
            f"Receipts: {s['receipts']}   Items sold: {s['items_sold']}   Revenue: {self._money(s['revenue'])}"
        )

    def export_csv(self):
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export CSV", "sales.csv", "CSV Files (*.csv)")
        if not path:
            return
        try:
            shown, _ = self._filtered()
        except ValueError as e:
            QtWidgets.QMessageBox.warning(self, "Filter", str(e))
            return
        import csv
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["Reference No.", "Date", "Product ID", "Product", "Qty", "Price", "Subtotal"])
            for sale in shown:
                for it in sale.line_items:
                    w.writerow([sale.reference, datetime_text(sale.timestamp), it.product_id, it.name,
                                it.quantity, f"{it.unit_price:.2f}", f"{it.subtotal:.2f}"])
        QtWidgets.QMessageBox.information(self, "Export", "Export done.")

    def clear_sales(self):
        if QtWidgets.QMessageBox.question(
            self, "Clear sales", "Delete ALL recorded sales? This cannot be undone."
        ) != QtWidgets.QMessageBox.Yes:
            return
        self.session = admin_session(self, self.admin, self.session)
        if not self.session.is_admin:
            return
        try:
            removed = self.sales.clear_all_sales(session=self.session)
        except PermissionError as e:
            QtWidgets.QMessageBox.critical(self, "Error", str(e))
            return
        QtWidgets.QMessageBox.information(self, "Clear sales", f"{removed} sale row(s) deleted.")
        self.refresh()
