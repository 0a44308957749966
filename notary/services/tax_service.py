from __future__ import annotations
from pydantic import BaseModel

from notary.models.invoice import InvoiceItem

# PPh 21 : retenue de 2,5 % sur un montant brut majoré (diviseur 0,975).
# Taux exprimés en millièmes pour rester en arithmétique entière (arrondi plancher exact).
GROSS_UP_DIVISOR_PERMILLE = 975
WITHHOLDING_PERMILLE = 25


class ItemTax(BaseModel):
    gross_amount: int
    tax_amount: int


def gross_up(amount: int) -> int:
    """floor(amount / 0.975)"""
    return (int(amount) * 1000) // GROSS_UP_DIVISOR_PERMILLE


def withholding(gross_amount: int) -> int:
    """floor(gross_amount * 0.025)"""
    return (int(gross_amount) * WITHHOLDING_PERMILLE) // 1000


def compute_item_tax(item: InvoiceItem) -> ItemTax:
    if not item.is_taxed:
        return ItemTax(gross_amount=int(item.amount), tax_amount=0)
    gross = gross_up(item.amount)
    return ItemTax(gross_amount=gross, tax_amount=withholding(gross))
