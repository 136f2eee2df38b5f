from PySide6 import QtWidgets, QtCore, QtGui
from ..domain.entities import BatchRecord, Session, STATUS_EXPIRED, STATUS_EXPIRING_SOON, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK
from ..services.admin import AdminService
from ..services.inventory import InventoryService
from ..services.validation import parse_batch_form
from .auth_prompt import admin_session

STATUS_COLORS = {
    STATUS_EXPIRED: QtGui.QColor(255, 235, 238),
    STATUS_EXPIRING_SOON: QtGui.QColor(255, 249, 196),
    STATUS_OUT_OF_STOCK: QtGui.QColor(224, 224, 224),
    STATUS_LOW_STOCK: QtGui.QColor(255, 243, 224),
}

COLUMNS = ["#", "Product ID", "Name", "Brand", "Color", "Type", "Price", "Qty", "Imported", "Expires", "Status"]


class BatchFormDialog(QtWidgets.QDialog):
    """Add / edit form for one batch. The code field only shows when editing."""

    def __init__(self, svc: InventoryService, batch: BatchRecord | None = None, parent=None):
        super().__init__(parent)
        self.svc = svc
        self.batch = batch
        self.result_batch = None
        self.setWindowTitle("Edit batch" if batch else "Add batch")
        self.resize(420, 420)

        form = QtWidgets.QFormLayout()
        self.in_code = QtWidgets.QLineEdit()
        self.in_name = QtWidgets.QLineEdit()
        self.in_brand = QtWidgets.QComboBox(); self.in_brand.setEditable(True)
        self.in_brand.addItems(svc.brands())
        self.in_color = QtWidgets.QComboBox(); self.in_color.setEditable(True)
        self.in_color.addItems(svc.colors())
        self.in_type = QtWidgets.QLineEdit()
        self.in_price = QtWidgets.QLineEdit(); self.in_price.setPlaceholderText("0.00")
        self.in_qty = QtWidgets.QLineEdit(); self.in_qty.setPlaceholderText("1")
        self.in_imported = QtWidgets.QDateEdit(calendarPopup=True)
        self.in_imported.setDisplayFormat("yyyy-MM-dd")
        self.in_imported.setDate(QtCore.QDate.currentDate())
        self.chk_no_expiry = QtWidgets.QCheckBox("No Expiration")
        self.in_expiry = QtWidgets.QDateEdit(calendarPopup=True)
        self.in_expiry.setDisplayFormat("yyyy-MM-dd")
        self.in_expiry.setDate(QtCore.QDate.currentDate().addYears(1))
        self.chk_no_expiry.toggled.connect(lambda checked: self.in_expiry.setEnabled(not checked))

        if batch:
            form.addRow("Product ID", self.in_code)
        else:
            self.in_code.setPlaceholderText(svc.generate_batch_code())
            self.in_code.setEnabled(False)
            form.addRow("Product ID (auto)", self.in_code)
        form.addRow("Name", self.in_name)
        form.addRow("Brand", self.in_brand)
        form.addRow("Color", self.in_color)
        form.addRow("Type", self.in_type)
        form.addRow("Price", self.in_price)
        form.addRow("Quantity", self.in_qty)
        form.addRow("Date Imported", self.in_imported)
        h_exp = QtWidgets.QHBoxLayout()
        h_exp.addWidget(self.chk_no_expiry)
        h_exp.addWidget(self.in_expiry)
        w_exp = QtWidgets.QWidget(); w_exp.setLayout(h_exp)
        form.addRow("Expiration", w_exp)

        buttons = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.save)
        buttons.rejected.connect(self.reject)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

        if batch:
            self._fill(batch)

    def _fill(self, b: BatchRecord):
        self.in_code.setText(b.code or "")
        self.in_name.setText(b.name)
        self.in_brand.setCurrentText(b.brand)
        self.in_color.setCurrentText(b.color)
        self.in_type.setText(b.type)
        self.in_price.setText(f"{b.unit_price:.2f}")
        self.in_qty.setText(str(b.quantity))
        if b.date_imported:
            self.in_imported.setDate(QtCore.QDate(b.date_imported.year, b.date_imported.month, b.date_imported.day))
        if b.expiration_date:
            self.in_expiry.setDate(QtCore.QDate(b.expiration_date.year, b.expiration_date.month, b.expiration_date.day))
        else:
            self.chk_no_expiry.setChecked(True)

    def save(self):
        try:
            self.result_batch = parse_batch_form(
                name=self.in_name.text(),
                brand=self.in_brand.currentText(),
                color=self.in_color.currentText(),
                type_=self.in_type.text(),
                price=self.in_price.text(),
                quantity=self.in_qty.text(),
                date_imported=self.in_imported.date().toString("yyyy-MM-dd"),
                expiration_date=None if self.chk_no_expiry.isChecked() else self.in_expiry.date().toString("yyyy-MM-dd"),
                code=self.in_code.text() if self.batch else None,
                batch_id=self.batch.id if self.batch else None,
            )
        except ValueError as e:
            QtWidgets.QMessageBox.warning(self, "Validation", str(e))
            return
        self.accept()


class InventoryWindow(QtWidgets.QDialog):
    def __init__(self, svc: InventoryService, admin: AdminService, session: Session, parent=None):
        super().__init__(parent)
        self.svc = svc
        self.admin = admin
        self.session = session
        self.setWindowTitle("Inventory")
        self.resize(1100, 620)

        # --- filters ---
        filt = QtWidgets.QHBoxLayout()
        self.search = QtWidgets.QLineEdit(); self.search.setPlaceholderText("Search code, name, brand, color, type...")
        self.cb_brand = QtWidgets.QComboBox()
        self.cb_color = QtWidgets.QComboBox()
        self.btn_refresh = QtWidgets.QPushButton("Refresh")
        filt.addWidget(self.search, 2)
        filt.addWidget(self.cb_brand)
        filt.addWidget(self.cb_color)
        filt.addStretch()
        filt.addWidget(self.btn_refresh)

        # --- table ---
        self.table = QtWidgets.QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setAlternatingRowColors(True)
        self.table.verticalHeader().setVisible(False)

        # --- buttons ---
        self.btn_add = QtWidgets.QPushButton("Add batch")
        self.btn_edit = QtWidgets.QPushButton("Edit")
        self.btn_delete = QtWidgets.QPushButton("Delete")
        btns = QtWidgets.QHBoxLayout()
        btns.addWidget(self.btn_add); btns.addWidget(self.btn_edit); btns.addStretch(); btns.addWidget(self.btn_delete)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(filt)
        layout.addWidget(self.table)
        layout.addLayout(btns)

        # --- events ---
        self.btn_refresh.clicked.connect(self.reload)
        self.search.returnPressed.connect(self.refresh)
        self.cb_brand.currentIndexChanged.connect(self.refresh)
        self.cb_color.currentIndexChanged.connect(self.refresh)
        self.btn_add.clicked.connect(self.add_batch)
        self.btn_edit.clicked.connect(self.edit_batch)
        self.table.doubleClicked.connect(self.edit_batch)
        self.btn_delete.clicked.connect(self.delete_batch)

        self.reload()

    def _populate_filters(self):
        for cb, label, values in ((self.cb_brand, "All Brands", self.svc.brands()),
                                  (self.cb_color, "All Colors", self.svc.colors())):
            current = cb.currentText()
            cb.blockSignals(True)
            cb.clear()
            cb.addItem(label)
            cb.addItems(values)
            idx = cb.findText(current)
            cb.setCurrentIndex(idx if idx >= 0 else 0)
            cb.blockSignals(False)

    def reload(self):
        self.svc.refresh_statuses()
        self._populate_filters()
        self.refresh()

    def refresh(self):
        items = self.svc.search_batches(
            self.search.text(),
            brand=self.cb_brand.currentText() if self.cb_brand.currentIndex() > 0 else None,
            color=self.cb_color.currentText() if self.cb_color.currentIndex() > 0 else None,
        )
        self.table.setRowCount(0)
        for b in items:
            r = self.table.rowCount(); self.table.insertRow(r)
            values = [
                str(b.id), b.code or "", b.name, b.brand, b.color, b.type, f"{b.unit_price:,.2f}", str(b.quantity),
                b.date_imported.isoformat() if b.date_imported else "",
                b.expiration_date.isoformat() if b.expiration_date else "-",
                b.status,
            ]
            for c, v in enumerate(values):
                cell = QtWidgets.QTableWidgetItem(v)
                if c == 0:
                    cell.setData(QtCore.Qt.UserRole, b.id)
                color = STATUS_COLORS.get(b.status)
                if color is not None:
                    cell.setBackground(color)
                self.table.setItem(r, c, cell)
        self.table.resizeColumnsToContents()

    def select_batch(self, batch_id: int):
        for r in range(self.table.rowCount()):
            cell = self.table.item(r, 0)
            if cell and cell.data(QtCore.Qt.UserRole) == batch_id:
                self.table.selectRow(r)
                self.table.scrollToItem(cell)
                return

    def _selected_id(self):
        r = self.table.currentRow()
        if r < 0:
            return None
        cell = self.table.item(r, 0)
        return cell.data(QtCore.Qt.UserRole) if cell else None

    def _authorize(self) -> bool:
        self.session = admin_session(self, self.admin, self.session)
        return self.session.is_admin

    def add_batch(self):
        if not self._authorize():
            return
        dlg = BatchFormDialog(self.svc, parent=self)
        if dlg.exec() != QtWidgets.QDialog.Accepted:
            return
        try:
            stored = self.svc.add_batch(dlg.result_batch, session=self.session)
        except (ValueError, PermissionError) as e:
            QtWidgets.QMessageBox.critical(self, "Error", str(e))
            return
        QtWidgets.QMessageBox.information(self, "Inventory", f"Batch added with Product ID {stored.code}.")
        self.reload()
        self.select_batch(stored.id)

    def edit_batch(self):
        batch_id = self._selected_id()
        if batch_id is None:
            QtWidgets.QMessageBox.information(self, "Inventory", "Select a row to update.")
            return
        batch = self.svc.get_batch(int(batch_id))
        if batch is None or not self._authorize():
            return
        dlg = BatchFormDialog(self.svc, batch, self)
        if dlg.exec() != QtWidgets.QDialog.Accepted:
            return
        try:
            self.svc.update_batch(dlg.result_batch, session=self.session)
        except (ValueError, PermissionError) as e:
            QtWidgets.QMessageBox.critical(self, "Error", str(e))
            return
        self.reload()
        self.select_batch(batch.id)

    def delete_batch(self):
        batch_id = self._selected_id()
        if batch_id is None:
            QtWidgets.QMessageBox.information(self, "Inventory", "Select a batch to delete.")
            return
        if QtWidgets.QMessageBox.question(self, "Delete", "Delete the selected batch?") != QtWidgets.QMessageBox.Yes:
            return
        if not self._authorize():
            return
        try:
            if not self.svc.delete_batch(int(batch_id), session=self.session):
                QtWidgets.QMessageBox.critical(self, "Error", "Delete failed.")
        except PermissionError as e:
            QtWidgets.QMessageBox.critical(self, "Error", str(e))
        self.reload()
