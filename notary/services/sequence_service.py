from __future__ import annotations
import re
from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel

from notary.models.common import parse_iso_date
from notary.models.deed import Deed

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_NON_DIGIT = re.compile(r"\D")


class DeedNumbers(BaseModel):
    order_number: str
    deed_number: str
    order_seq: int
    deed_seq: int


def _digits_value(text: Optional[str]) -> int:
    """'A-05/I' -> 5 ; aucune valeur exploitable -> 0."""
    digits = _NON_DIGIT.sub("", text or "")
    try:
        return int(digits)
    except ValueError:
        return 0


def _leading_value(text: Optional[str]) -> int:
    """'005/2024' -> 5 ; s'arrête au premier caractère non numérique."""
    m = _LEADING_INT.match(text or "")
    return int(m.group(1)) if m else 0


def deed_seq_of(deed: Deed) -> int:
    if deed.deed_seq is not None:
        return deed.deed_seq
    return _digits_value(deed.deed_number)


def order_seq_of(deed: Deed) -> int:
    if deed.order_seq is not None:
        return deed.order_seq
    return _leading_value(deed.order_number)


def format_deed_number(seq: int) -> str:
    # 2 chiffres sous 10 (01, 09), puis tel quel (10, 100)
    return f"{seq:02d}"


def format_order_number(seq: int) -> str:
    return f"{seq:03d}"


def next_deed_seq(deeds: Iterable[Deed], target: date) -> int:
    max_n = 0
    for d in deeds:
        dd = parse_iso_date(d.deed_date)
        if dd is None or (dd.year, dd.month) != (target.year, target.month):
            continue
        max_n = max(max_n, deed_seq_of(d))
    return max_n + 1


def next_order_seq(deeds: Iterable[Deed], target: date) -> int:
    max_n = 0
    for d in deeds:
        dd = parse_iso_date(d.deed_date)
        if dd is None or dd.year != target.year:
            continue
        max_n = max(max_n, order_seq_of(d))
    return max_n + 1


def next_deed_number(deeds: Iterable[Deed], target_date) -> str:
    return format_deed_number(next_deed_seq(deeds, _target(target_date)))


def next_order_number(deeds: Iterable[Deed], target_date) -> str:
    return format_order_number(next_order_seq(deeds, _target(target_date)))


def allocate_numbers(deeds: Iterable[Deed], target_date) -> DeedNumbers:
    """
    Numéros suggérés pour un nouvel acte daté de target_date.
    Calcul consultatif sur l'instantané local : deux postes peuvent obtenir le même numéro.
    """
    target = _target(target_date)
    deeds = list(deeds)
    deed_seq = next_deed_seq(deeds, target)
    order_seq = next_order_seq(deeds, target)
    return DeedNumbers(
        order_number=format_order_number(order_seq),
        deed_number=format_deed_number(deed_seq),
        order_seq=order_seq,
        deed_seq=deed_seq,
    )


def _target(value) -> date:
    d = parse_iso_date(value)
    if d is None:
        raise ValueError(f"Date d'acte invalide: {value!r}")
    return d
