from __future__ import annotations
from typing import Callable, Optional

from PySide6.QtWidgets import QDialog, QMessageBox

from notary.errors import PaymentNotFoundError, PaymentValidationError, PersistenceError, RecordNotFoundError
from notary.models.invoice import Invoice, PaymentInput
from notary.services.invoice_service import InvoiceService
from notary.services.ledger_service import effective_history, remaining_balance
from notary_ui.widgets.payment_dialog import PaymentDialog


def _run(parent, title: str, action: Callable[[], Invoice]) -> Optional[Invoice]:
    try:
        return action()
    except PaymentValidationError as e:
        QMessageBox.warning(parent, "Validation", str(e))
    except (PaymentNotFoundError, RecordNotFoundError) as e:
        QMessageBox.warning(parent, title, str(e))
    except PersistenceError as e:
        # la vue mémoire est déjà à jour : on prévient sans annuler
        QMessageBox.critical(parent, title, f"Paiement appliqué localement mais non enregistré :\n{e}")
        return e.record
    return None


def record_payment(parent, service: InvoiceService, invoice_id: str,
                   payment: Optional[PaymentInput] = None) -> Optional[Invoice]:
    if payment is None:
        inv = service.get_by_id(invoice_id)
        if not inv:
            QMessageBox.information(parent, "Paiement", "Sélectionne une facture."); return None
        dlg = PaymentDialog(parent, amount=remaining_balance(inv))
        if dlg.exec() != QDialog.Accepted:
            return None
        payment = dlg.get_payment()
    return _run(parent, "Paiement", lambda: service.add_payment(invoice_id, payment))


def edit_payment(parent, service: InvoiceService, invoice_id: str, payment_id: str,
                 payment: Optional[PaymentInput] = None) -> Optional[Invoice]:
    if payment is None:
        inv = service.get_by_id(invoice_id)
        current = next((p for p in effective_history(inv) if p.id == payment_id), None) if inv else None
        if not current:
            QMessageBox.information(parent, "Paiement", "Sélectionne un paiement."); return None
        dlg = PaymentDialog(parent, payment=current)
        if dlg.exec() != QDialog.Accepted:
            return None
        payment = dlg.get_payment()
    return _run(parent, "Paiement", lambda: service.edit_payment(invoice_id, payment_id, payment))


def delete_payment(parent, service: InvoiceService, invoice_id: str, payment_id: str) -> Optional[Invoice]:
    if QMessageBox.question(parent, "Suppression", "Supprimer ce paiement ?") != QMessageBox.Yes:
        return None
    return _run(parent, "Paiement", lambda: service.delete_payment(invoice_id, payment_id))
