from __future__ import annotations
from typing import Iterable
from pydantic import BaseModel

from notary.models.invoice import InvoiceItem
from notary.services.tax_service import compute_item_tax


class InvoiceTotals(BaseModel):
    sub_total: int = 0
    total_tax: int = 0
    grand_total: int = 0


def compute_totals(items: Iterable[InvoiceItem]) -> InvoiceTotals:
    # recalculé à chaque appel ; seul grand_total est persisté (total_amount)
    sub_total = 0
    total_tax = 0
    for item in items:
        t = compute_item_tax(item)
        sub_total += t.gross_amount
        total_tax += t.tax_amount
    return InvoiceTotals(sub_total=sub_total, total_tax=total_tax, grand_total=sub_total - total_tax)


def grand_total(items: Iterable[InvoiceItem]) -> int:
    return compute_totals(items).grand_total
