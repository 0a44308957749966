# notary/services/invoice_service.py
from __future__ import annotations
import logging
import os
import re
from datetime import date
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from notary import config
from notary.errors import InvoiceValidationError, RecordNotFoundError
from notary.models.common import parse_iso_date
from notary.models.invoice import Invoice, PaymentInput
from notary.models.settings import CompanySettings
from notary.services import ledger_service
from notary.services.totals_service import compute_totals
from notary.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


# ---------- Formats ----------
def format_rupiah(amount: int) -> str:
    # 1234567 -> "Rp 1.234.567"
    return "Rp " + f"{int(amount):,}".replace(",", ".")


# ---------- Service ----------
class InvoiceService:
    """
    Factures + registre des paiements.
    Les mutations du registre mettent à jour la vue mémoire tout de suite,
    puis enregistrent la facture complète. Un échec d'écriture n'annule pas la vue.
    """

    def __init__(self, path: Optional[os.PathLike | str] = None, *, store: Optional[JsonStore] = None):
        self.store = store or JsonStore(path or config.invoices_json(), entity_name="invoice",
                                        backup_keep=config.BACKUP_KEEP)
        self._invoices: Dict[str, Invoice] = {}
        self._unsubscribe = self.store.subscribe(self._on_snapshot)

    def _on_snapshot(self, rows) -> None:
        fresh: Dict[str, Invoice] = {}
        for d in rows:
            try:
                inv = Invoice(**d)
            except ValidationError as e:
                logger.warning("Facture ignorée (id=%s): %s", d.get("id"), e)
                continue
            fresh[inv.id] = inv
        self._invoices = fresh

    def close(self) -> None:
        self._unsubscribe()

    # ----------- CRUD/list -----------
    def list_invoices(self) -> List[Invoice]:
        return sorted(self._invoices.values(), key=lambda i: i.created_at, reverse=True)

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        return self._invoices.get(invoice_id)

    def _require(self, invoice_id: str) -> Invoice:
        inv = self.get_by_id(invoice_id)
        if inv is None:
            raise RecordNotFoundError("invoice", invoice_id)
        return inv

    @staticmethod
    def _validate_items(inv: Invoice) -> None:
        if not inv.items:
            raise InvoiceValidationError("La facture doit contenir au moins une ligne.")
        for item in inv.items:
            if not item.description.strip() or item.amount <= 0:
                raise InvoiceValidationError(
                    "Chaque ligne doit avoir une description et un montant supérieur à 0."
                )

    def add_invoice(self, inv: Invoice, settings: Optional[CompanySettings] = None) -> Invoice:
        self._validate_items(inv)
        settings = settings or CompanySettings()
        update = {"total_amount": compute_totals(inv.items).grand_total}
        # numéro auto
        if not inv.invoice_number:
            update["invoice_number"] = self._next_invoice_number(inv.date, settings.invoice_prefix)
        inv = inv.model_copy(update=update)
        self._invoices[inv.id] = inv
        self.store.save(inv)
        logger.info("Facture %s créée (%s)", inv.invoice_number, format_rupiah(inv.total_amount))
        return inv

    def update_invoice(self, inv: Invoice) -> Invoice:
        self._require(inv.id)
        self._validate_items(inv)
        # le statut reste celui fixé par la dernière mutation du registre
        inv = inv.model_copy(update={"total_amount": compute_totals(inv.items).grand_total})
        self._invoices[inv.id] = inv
        self.store.save(inv)
        return inv

    def delete_invoice(self, invoice_id: str) -> None:
        self.store.delete(invoice_id)
        self._invoices.pop(invoice_id, None)

    # ----------- numérotation -----------
    def _next_invoice_number(self, inv_date: str, prefix: str) -> str:
        d = parse_iso_date(inv_date)
        year = d.year if d else date.today().year
        head = f"{prefix}/{year}/"
        pattern = re.compile(rf"^{re.escape(head)}(\d+)")
        max_n = 0
        for inv in self._invoices.values():
            m = pattern.match(inv.invoice_number or "")
            if m:
                max_n = max(max_n, int(m.group(1)))
        return f"{head}{max_n + 1:03d}"

    # ----------- paiements -----------
    def _apply(self, invoice_id: str, op: Callable[[Invoice], Invoice]) -> Invoice:
        new_inv = op(self._require(invoice_id))
        # vue optimiste d'abord : l'UI n'attend pas l'aller-retour du store
        self._invoices[new_inv.id] = new_inv
        self.store.save(new_inv)
        return new_inv

    def add_payment(self, invoice_id: str, payment: PaymentInput) -> Invoice:
        inv = self._apply(invoice_id, lambda i: ledger_service.add_payment(i, payment))
        logger.info("Paiement %s ajouté sur %s -> %s", format_rupiah(payment.amount), inv.invoice_number, inv.status)
        return inv

    def edit_payment(self, invoice_id: str, payment_id: str, payment: PaymentInput) -> Invoice:
        inv = self._apply(invoice_id, lambda i: ledger_service.edit_payment(i, payment_id, payment))
        logger.info("Paiement %s modifié sur %s -> %s", payment_id, inv.invoice_number, inv.status)
        return inv

    def delete_payment(self, invoice_id: str, payment_id: str) -> Invoice:
        inv = self._apply(invoice_id, lambda i: ledger_service.delete_payment(i, payment_id))
        logger.info("Paiement %s supprimé sur %s -> %s", payment_id, inv.invoice_number, inv.status)
        return inv
