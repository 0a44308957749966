from __future__ import annotations
from typing import Iterable

from pydantic import BaseModel

from notary.models.common import parse_iso_date
from notary.models.invoice import Invoice
from notary.services.ledger_service import effective_history, remaining_balance


class MonthlySummary(BaseModel):
    year: int
    month: int  # 1-12
    invoice_count: int = 0
    revenue: int = 0  # total facturé sur le mois
    cash_received: int = 0  # encaissements datés du mois, toutes factures confondues
    outstanding: int = 0  # reste à encaisser sur les factures du mois


def _in_month(value: str, year: int, month: int) -> bool:
    d = parse_iso_date(value)
    return d is not None and d.year == year and d.month == month


def monthly_summary(invoices: Iterable[Invoice], year: int, month: int) -> MonthlySummary:
    out = MonthlySummary(year=year, month=month)
    for inv in invoices:
        if _in_month(inv.date, year, month):
            out.invoice_count += 1
            out.revenue += inv.total_amount
            out.outstanding += remaining_balance(inv)
        for p in effective_history(inv):
            if _in_month(p.date, year, month):
                out.cash_received += p.amount
    return out
