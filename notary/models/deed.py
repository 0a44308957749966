from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from .common import gen_id, now_ms, today_iso

AppearerRole = Literal["Self", "Proxy"]


class DeedGrantor(BaseModel):
    id: str = Field(default_factory=gen_id)
    name: str = ""


class DeedAppearer(BaseModel):
    id: str = Field(default_factory=gen_id)
    name: str = ""
    role: AppearerRole = "Self"
    grantors: List[DeedGrantor] = Field(default_factory=list)  # uniquement si role == Proxy


class Deed(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=gen_id)
    order_number: str = ""  # numéro d'ordre, remis à 1 chaque année
    deed_number: str = ""  # numéro d'acte, remis à 1 chaque mois
    deed_date: str = Field(default_factory=today_iso)
    title: str = ""
    appearers: List[DeedAppearer] = Field(default_factory=list)

    client_id: str = ""
    client_name: str = ""

    # séquences entières stockées à la création (absentes sur les anciens actes)
    order_seq: Optional[int] = None
    deed_seq: Optional[int] = None

    created_at: int = Field(default_factory=now_ms)
