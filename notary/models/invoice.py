from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from .common import gen_id, now_ms, today_iso

InvoiceStatus = Literal["UNPAID", "PAID"]

# id réservé : paiement scalaire de l'ancien format migré dans l'historique
LEGACY_PAYMENT_ID = "legacy-payment"
LEGACY_PAYMENT_NOTE = "previous payment"


class InvoiceItem(BaseModel):
    description: str = ""
    amount: int = 0  # net, en roupies
    is_taxed: bool = False  # PPh 21


class ClientSnapshot(BaseModel):
    id: str
    name: str = "Unknown"
    address: str = ""


class PaymentRecord(BaseModel):
    id: str = Field(default_factory=gen_id)
    date: str
    amount: int
    note: Optional[str] = None


class PaymentInput(BaseModel):
    """Saisie utilisateur d'un paiement (ajout ou modification)."""
    date: str = Field(default_factory=today_iso)
    amount: int = 0
    note: Optional[str] = None


class Invoice(BaseModel):
    model_config = ConfigDict(extra="ignore")  # tolère d'anciennes clés dans les JSON

    id: str = Field(default_factory=gen_id)
    invoice_number: str = ""
    date: str = Field(default_factory=today_iso)
    due_date: Optional[str] = None
    client: ClientSnapshot

    items: List[InvoiceItem] = Field(default_factory=list)
    total_amount: int = 0  # dernier grand total calculé
    status: InvoiceStatus = "UNPAID"

    payment_history: List[PaymentRecord] = Field(default_factory=list)
    # champs dépréciés, maintenus pour compatibilité
    payment_amount: int = 0
    payment_date: str = ""

    notes: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)
