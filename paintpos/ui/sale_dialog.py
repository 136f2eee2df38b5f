from PySide6 import QtWidgets, QtCore, QtGui
from ..domain.entities import SaleLineItem
from ..services.inventory import InventoryService
from ..services.sales import SalesService
from ..util.money import format_amount


class SaleDialog(QtWidgets.QDialog):
    def __init__(self, inventory: InventoryService, sales: SalesService, parent=None):
        super().__init__(parent)
        self.inventory = inventory
        self.sales = sales
        self.cart: list[SaleLineItem] = []
        self.setWindowTitle("Point of Sale")
        self.resize(1000, 640)

        # ---- product picker ----
        pick = QtWidgets.QHBoxLayout()
        self.search = QtWidgets.QLineEdit()
        self.search.setPlaceholderText("Filter products by code, name or brand...")
        self.in_qty = QtWidgets.QSpinBox()
        self.in_qty.setRange(1, 100000)
        self.btn_add = QtWidgets.QPushButton("Add to cart (Enter)")
        pick.addWidget(self.search, 2)
        pick.addWidget(QtWidgets.QLabel("Qty"))
        pick.addWidget(self.in_qty)
        pick.addWidget(self.btn_add)

        self.products = QtWidgets.QTableWidget(0, 6)
        self.products.setHorizontalHeaderLabels(["Product ID", "Name", "Brand", "Color", "Price", "Stock"])
        self._table_defaults(self.products)

        self.cart_table = QtWidgets.QTableWidget(0, 4)
        self.cart_table.setHorizontalHeaderLabels(["Name", "Qty", "Price", "Subtotal"])
        self._table_defaults(self.cart_table)
        self.cart_table.setContextMenuPolicy(QtCore.Qt.CustomContextMenu)
        self.cart_table.customContextMenuRequested.connect(self._cart_menu)

        self.lbl_total = QtWidgets.QLabel()
        f = self.lbl_total.font()
        f.setPointSize(20); f.setBold(True)
        self.lbl_total.setFont(f)
        self.lbl_vat = QtWidgets.QLabel()

        self.btn_checkout = QtWidgets.QPushButton("Checkout (F12)")
        self.btn_close = QtWidgets.QPushButton("Close (Esc)")
        btns = QtWidgets.QHBoxLayout()
        totals = QtWidgets.QVBoxLayout()
        totals.addWidget(self.lbl_total)
        totals.addWidget(self.lbl_vat)
        btns.addLayout(totals)
        btns.addStretch()
        btns.addWidget(self.btn_checkout)
        btns.addWidget(self.btn_close)

        split = QtWidgets.QSplitter(QtCore.Qt.Vertical)
        split.addWidget(self.products)
        split.addWidget(self.cart_table)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(pick)
        layout.addWidget(split)
        layout.addLayout(btns)

        # ---- events ----
        self.search.textChanged.connect(self.load_products)
        self.btn_add.clicked.connect(self.add_to_cart)
        self.products.doubleClicked.connect(self.add_to_cart)
        self.btn_checkout.clicked.connect(self.checkout)
        self.btn_close.clicked.connect(self.reject)
        self.shortcuts = []
        for key, slot in (("Return", self.add_to_cart), ("Enter", self.add_to_cart),
                          ("F12", self.checkout), ("Del", self.remove_selected_line)):
            sc = QtGui.QShortcut(QtGui.QKeySequence(key), self)
            sc.activated.connect(slot)
            self.shortcuts.append(sc)

        self.search.setFocus()
        self.load_products()
        self.refresh_cart()

    @staticmethod
    def _table_defaults(table: QtWidgets.QTableWidget):
        table.horizontalHeader().setStretchLastSection(True)
        table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        table.verticalHeader().setVisible(False)

    def _money(self, value) -> str:
        return format_amount(value, self.sales.currency_symbol)

    def _in_cart(self, product_id: int) -> int:
        return sum(it.quantity for it in self.cart if it.product_id == product_id)

    # ---------------- products ----------------
    def load_products(self):
        needle = self.search.text().strip().lower()
        self.available = {}
        self.products.setRowCount(0)
        for b in self.inventory.available_for_sale():
            haystack = " ".join((b.code or "", b.name, b.brand)).lower()
            if needle and needle not in haystack:
                continue
            self.available[b.id] = b
            r = self.products.rowCount(); self.products.insertRow(r)
            left = b.quantity - self._in_cart(b.id)
            values = [b.code or "", b.name, b.brand, b.color, self._money(b.unit_price), str(left)]
            for c, v in enumerate(values):
                cell = QtWidgets.QTableWidgetItem(v)
                if c == 0:
                    cell.setData(QtCore.Qt.UserRole, b.id)
                self.products.setItem(r, c, cell)
        if self.products.rowCount():
            self.products.selectRow(0)

    def add_to_cart(self):
        r = self.products.currentRow()
        if r < 0:
            return
        batch = self.available.get(self.products.item(r, 0).data(QtCore.Qt.UserRole))
        if batch is None:
            return
        qty = int(self.in_qty.value())
        if qty + self._in_cart(batch.id) > batch.quantity:
            QtWidgets.QMessageBox.warning(self, "Stock", f"Not enough stock for {batch.name}.")
            return
        for i, it in enumerate(self.cart):
            if it.product_id == batch.id:
                self.cart[i] = SaleLineItem(batch.id, batch.name, batch.unit_price, it.quantity + qty)
                break
        else:
            self.cart.append(SaleLineItem(batch.id, batch.name, batch.unit_price, qty))
        self.in_qty.setValue(1)
        self.refresh_cart()
        self.load_products()

    # ---------------- cart ----------------
    def refresh_cart(self):
        self.cart_table.setRowCount(0)
        for it in self.cart:
            r = self.cart_table.rowCount(); self.cart_table.insertRow(r)
            for c, v in enumerate([it.name, str(it.quantity), self._money(it.unit_price), self._money(it.subtotal)]):
                self.cart_table.setItem(r, c, QtWidgets.QTableWidgetItem(v))
        t = self.sales.totals(self.cart)
        self.lbl_total.setText(f"Total: {self._money(t['total'])}")
        self.lbl_vat.setText(f"VATable: {self._money(t['vatable'])}   VAT: {self._money(t['vat'])}")
        self.btn_checkout.setEnabled(bool(self.cart))

    def remove_selected_line(self):
        r = self.cart_table.currentRow()
        if 0 <= r < len(self.cart):
            del self.cart[r]
            self.refresh_cart()
            self.load_products()

    def _cart_menu(self, pos):
        if self.cart_table.currentRow() < 0:
            return
        menu = QtWidgets.QMenu(self)
        act = menu.addAction("Remove line")
        if menu.exec(self.cart_table.viewport().mapToGlobal(pos)) == act:
            self.remove_selected_line()

    def checkout(self):
        if not self.cart:
            return
        t = self.sales.totals(self.cart)
        question = (
            f"Reference No.: {self.sales.next_sale_reference()}\n"
            f"Items: {sum(it.quantity for it in self.cart)}\n"
            f"VAT: {self._money(t['vat'])}\n"
            f"Total: {self._money(t['total'])}\n\nConfirm sale?"
        )
        if QtWidgets.QMessageBox.question(self, "Checkout", question) != QtWidgets.QMessageBox.Yes:
            return
        try:
            sale = self.sales.checkout(self.cart)
        except ValueError as e:
            QtWidgets.QMessageBox.critical(self, "Checkout failed", str(e))
            self.load_products()
            return

        receipt = QtWidgets.QMessageBox(self)
        receipt.setWindowTitle("Receipt")
        receipt.setText(self.sales.format_receipt(sale))
        receipt.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))
        receipt.exec()

        self.cart = []
        self.refresh_cart()
        self.load_products()
