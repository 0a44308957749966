"""
Registre des paiements d'une facture.

Toutes les fonctions sont pures : elles lisent une Invoice et en renvoient une
nouvelle (même id). La persistance est à la charge d'InvoiceService.

L'ancien format stockait un seul paiement scalaire (payment_amount / payment_date).
effective_history() est l'unique point de migration vers l'historique ; rien
d'autre ne doit tester "ancien format ou non".
"""
from __future__ import annotations
from typing import List

from notary.errors import PaymentNotFoundError, PaymentValidationError
from notary.models.common import gen_id
from notary.models.invoice import (
    LEGACY_PAYMENT_ID,
    LEGACY_PAYMENT_NOTE,
    Invoice,
    InvoiceStatus,
    PaymentInput,
    PaymentRecord,
)
from notary.services.totals_service import grand_total


def effective_history(invoice: Invoice) -> List[PaymentRecord]:
    """Vue de lecture ; n'est persistée qu'au moment d'une mutation."""
    if invoice.payment_history:
        return list(invoice.payment_history)
    if invoice.payment_amount > 0:
        return [
            PaymentRecord(
                id=LEGACY_PAYMENT_ID,
                date=invoice.payment_date or invoice.date,
                amount=invoice.payment_amount,
                note=LEGACY_PAYMENT_NOTE,
            )
        ]
    return []


def sum_payments(history: List[PaymentRecord]) -> int:
    return sum(p.amount for p in history)


def derive_status(total_paid: int, total_due: int) -> InvoiceStatus:
    return "PAID" if total_paid >= total_due else "UNPAID"


def total_paid(invoice: Invoice) -> int:
    return sum_payments(effective_history(invoice))


def remaining_balance(invoice: Invoice) -> int:
    # valeur d'affichage uniquement, jamais stockée
    return max(0, grand_total(invoice.items) - total_paid(invoice))


def _validate(payment: PaymentInput) -> None:
    if payment.amount <= 0:
        raise PaymentValidationError("Le montant du paiement doit être supérieur à 0.")


def _with_history(invoice: Invoice, history: List[PaymentRecord], payment_date: str) -> Invoice:
    paid = sum_payments(history)
    due = grand_total(invoice.items)
    return invoice.model_copy(update={
        "payment_history": history,
        "payment_amount": paid,  # champ déprécié gardé synchro
        "payment_date": payment_date,
        "status": derive_status(paid, due),
        "total_amount": due,
    })


def add_payment(invoice: Invoice, payment: PaymentInput) -> Invoice:
    _validate(payment)
    history = effective_history(invoice)
    history.append(PaymentRecord(id=gen_id(), date=payment.date, amount=payment.amount, note=payment.note))
    # date de dernière activité, pas forcément la plus récente chronologiquement
    return _with_history(invoice, history, payment.date)


def edit_payment(invoice: Invoice, payment_id: str, payment: PaymentInput) -> Invoice:
    _validate(payment)
    history = effective_history(invoice)
    for idx, rec in enumerate(history):
        if rec.id == payment_id:
            history[idx] = PaymentRecord(id=rec.id, date=payment.date, amount=payment.amount, note=payment.note)
            break
    else:
        raise PaymentNotFoundError(payment_id)
    return _with_history(invoice, history, payment.date)


def delete_payment(invoice: Invoice, payment_id: str) -> Invoice:
    if not invoice.payment_history and invoice.payment_amount > 0:
        # seul l'ancien paiement scalaire existe : on l'efface entièrement
        history: List[PaymentRecord] = []
    else:
        history = [p for p in invoice.payment_history if p.id != payment_id]
        if len(history) == len(invoice.payment_history):
            raise PaymentNotFoundError(payment_id)
    # comparaison de chaînes ISO, pas de calendrier
    last_date = max((p.date for p in history), default="")
    return _with_history(invoice, history, last_date)
