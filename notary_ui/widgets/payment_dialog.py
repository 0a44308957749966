from __future__ import annotations
from PySide6.QtWidgets import QDialog, QVBoxLayout, QFormLayout, QLineEdit, QDoubleSpinBox, QDialogButtonBox, QDateEdit
from PySide6.QtCore import QDate
from typing import Optional

from notary.models.invoice import PaymentInput, PaymentRecord


class PaymentDialog(QDialog):
    def __init__(self, parent=None, amount: int = 0, payment: Optional[PaymentRecord] = None):
        super().__init__(parent)
        self.setWindowTitle("Modifier le paiement" if payment else "Encaissement")
        self.setModal(True)

        self.sp_amount = QDoubleSpinBox()
        self.sp_amount.setRange(0, 1e12)
        self.sp_amount.setDecimals(0)  # roupies entières
        self.sp_amount.setGroupSeparatorShown(True)

        self.dt_paid = QDateEdit()
        self.dt_paid.setCalendarPopup(True)
        self.dt_paid.setDisplayFormat("yyyy-MM-dd")
        self.dt_paid.setDate(QDate.currentDate())

        self.ed_note = QLineEdit()

        if payment:
            self.sp_amount.setValue(payment.amount)
            d = QDate.fromString(payment.date, "yyyy-MM-dd")
            if d.isValid():
                self.dt_paid.setDate(d)
            self.ed_note.setText(payment.note or "")
        else:
            self.sp_amount.setValue(amount)

        form = QFormLayout()
        form.addRow("Montant (Rp)", self.sp_amount)
        form.addRow("Date du paiement", self.dt_paid)
        form.addRow("Note", self.ed_note)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

    def get_payment(self) -> PaymentInput:
        note = self.ed_note.text().strip() or None
        return PaymentInput(
            date=self.dt_paid.date().toString("yyyy-MM-dd"),
            amount=int(round(self.sp_amount.value())),
            note=note,
        )
