"""
Calcul des frais d'une transaction foncière PPAT : BPHTB, PPh vendeur, frais administratifs.
Mêmes règles d'arrondi que tax_service : plancher, arithmétique entière.
"""
from __future__ import annotations
from typing import List

from pydantic import BaseModel, Field

# BPHTB : 5 % de la valeur imposable (transaction - NPOPTKP, jamais négative)
BPHTB_PERMILLE = 50
# PPh vendeur : 2,5 % de la base
PPH_PERMILLE = 25
DEFAULT_NPOPTKP = 80_000_000

DEFAULT_ADMIN_FEE_NAMES = (
    "PLOTING DAN VALIDASI",
    "PENGECEKAN DAN ZNT",
    "VALIDASI PAJAK",
    "PNBP & ADM PC BPN",
    "PC ALIH MEDIA",
    "Paket BPN Kelebihan Luas",
)


class AdminFee(BaseModel):
    name: str = ""
    amount: int = 0


def default_admin_fees() -> List[AdminFee]:
    # nouvelle liste à chaque appel
    return [AdminFee(name=n) for n in DEFAULT_ADMIN_FEE_NAMES]


class PPATInput(BaseModel):
    land_area: int = 0  # m²
    land_njop: int = 0  # NJOP par m²
    building_area: int = 0
    building_njop: int = 0
    transaction_value: int = 0
    npoptkp: int = DEFAULT_NPOPTKP
    pph_scale: int = 1  # > 1 : APHB, partage entre pph_scale parts
    admin_fees: List[AdminFee] = Field(default_factory=default_admin_fees)


class PphRow(BaseModel):
    label: str
    basis: int
    tax: int


class PPATCosts(BaseModel):
    total_land: int
    total_building: int
    total_njop: int
    npopkp: int
    bphtb: int
    pph_rows: List[PphRow]
    pph_total: int
    total_admin: int
    grand_total: int


def _permille(value: int, rate: int) -> int:
    return (int(value) * rate) // 1000


def pph_rows(transaction_value: int, scale: int) -> List[PphRow]:
    if scale <= 1:
        # vente classique : un seul vendeur
        return [PphRow(label="PPh 2,5 %", basis=transaction_value,
                       tax=_permille(transaction_value, PPH_PERMILLE))]
    # APHB : scale - 1 payeurs, chacun sur une part
    share = transaction_value // scale
    return [
        PphRow(label=f"PPh paiement n°{i}", basis=share, tax=_permille(share, PPH_PERMILLE))
        for i in range(1, scale)
    ]


def compute_ppat_costs(data: PPATInput) -> PPATCosts:
    total_land = data.land_area * data.land_njop
    total_building = data.building_area * data.building_njop
    npopkp = max(0, data.transaction_value - data.npoptkp)
    bphtb = _permille(npopkp, BPHTB_PERMILLE)

    rows = pph_rows(data.transaction_value, data.pph_scale)
    pph_total = sum(r.tax for r in rows)
    total_admin = sum(f.amount for f in data.admin_fees)

    return PPATCosts(
        total_land=total_land,
        total_building=total_building,
        total_njop=total_land + total_building,
        npopkp=npopkp,
        bphtb=bphtb,
        pph_rows=rows,
        pph_total=pph_total,
        total_admin=total_admin,
        grand_total=bphtb + pph_total + total_admin,
    )
