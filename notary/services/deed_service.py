from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional

from pydantic import ValidationError

from notary import config
from notary.errors import DeedValidationError, RecordNotFoundError
from notary.models.common import parse_iso_date
from notary.models.deed import Deed
from notary.services.sequence_service import (
    DeedNumbers,
    allocate_numbers,
    deed_seq_of,
    order_seq_of,
)
from notary.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


def validate_deed(deed: Deed) -> None:
    if not deed.order_number:
        raise DeedValidationError("Numéro d'ordre obligatoire.")
    if not deed.client_id:
        raise DeedValidationError("Client obligatoire.")
    if not deed.deed_number:
        raise DeedValidationError("Numéro d'acte obligatoire.")
    if parse_iso_date(deed.deed_date) is None:
        raise DeedValidationError("Date d'acte obligatoire.")
    if not deed.title.strip():
        raise DeedValidationError("Titre de l'acte obligatoire.")
    for app in deed.appearers:
        if not app.name.strip():
            raise DeedValidationError("Nom du comparant obligatoire.")
        if app.role == "Proxy":
            if not app.grantors:
                raise DeedValidationError("Un comparant mandataire doit avoir au moins un mandant.")
            if any(not g.name.strip() for g in app.grantors):
                raise DeedValidationError("Tous les noms de mandants sont obligatoires.")


class DeedService:
    def __init__(self, path: Optional[os.PathLike | str] = None, *, store: Optional[JsonStore] = None):
        self.store = store or JsonStore(path or config.deeds_json(), entity_name="deed",
                                        backup_keep=config.BACKUP_KEEP)
        self._deeds: Dict[str, Deed] = {}
        self._unsubscribe = self.store.subscribe(self._on_snapshot)

    def _on_snapshot(self, rows) -> None:
        fresh: Dict[str, Deed] = {}
        for d in rows:
            try:
                deed = Deed(**d)
            except ValidationError as e:
                logger.warning("Acte ignoré (id=%s): %s", d.get("id"), e)
                continue
            fresh[deed.id] = deed
        self._deeds = fresh

    def close(self) -> None:
        self._unsubscribe()

    def list_deeds(self) -> List[Deed]:
        return sorted(self._deeds.values(), key=lambda d: d.created_at, reverse=True)

    def get_by_id(self, deed_id: str) -> Optional[Deed]:
        return self._deeds.get(deed_id)

    # ----- Numérotation ----- #

    def suggest_numbers(self, deed_date: str) -> DeedNumbers:
        """À rappeler à chaque changement de date, pour un nouvel acte uniquement."""
        return allocate_numbers(self._deeds.values(), deed_date)

    # ----- CRUD ----- #

    def add_deed(self, deed: Deed) -> Deed:
        if parse_iso_date(deed.deed_date) is None:
            # avant l'allocation, qui exige une date lisible
            raise DeedValidationError("Date d'acte obligatoire.")
        update = {}
        if not deed.order_number or not deed.deed_number:
            numbers = self.suggest_numbers(deed.deed_date)
            if not deed.order_number:
                update["order_number"] = numbers.order_number
            if not deed.deed_number:
                update["deed_number"] = numbers.deed_number
        deed = deed.model_copy(update=update)
        validate_deed(deed)
        # séquences entières figées à la création (saisies manuelles comprises)
        deed = deed.model_copy(update={
            "order_seq": deed.order_seq if deed.order_seq is not None else order_seq_of(deed),
            "deed_seq": deed.deed_seq if deed.deed_seq is not None else deed_seq_of(deed),
        })
        self._deeds[deed.id] = deed
        self.store.save(deed)
        logger.info("Acte n°%s (ordre %s) du %s enregistré", deed.deed_number, deed.order_number, deed.deed_date)
        return deed

    def update_deed(self, deed: Deed) -> Deed:
        """
        Pas de réallocation : les numéros saisis sont conservés tels quels.
        Une séquence n'est recalculée que si son numéro affiché a été modifié.
        """
        original = self.get_by_id(deed.id)
        if original is None:
            raise RecordNotFoundError("deed", deed.id)
        validate_deed(deed)
        order_seq = original.order_seq
        if deed.order_number != original.order_number or order_seq is None:
            order_seq = order_seq_of(deed.model_copy(update={"order_seq": None}))
        deed_seq = original.deed_seq
        if deed.deed_number != original.deed_number or deed_seq is None:
            deed_seq = deed_seq_of(deed.model_copy(update={"deed_seq": None}))
        deed = deed.model_copy(update={
            "order_seq": order_seq,
            "deed_seq": deed_seq,
            "created_at": original.created_at,
        })
        self._deeds[deed.id] = deed
        self.store.save(deed)
        if (deed.order_number, deed.deed_number) != (original.order_number, original.deed_number):
            logger.info("Acte %s renuméroté: n°%s (ordre %s)", deed.id, deed.deed_number, deed.order_number)
        return deed

    def delete_deed(self, deed_id: str) -> None:
        self.store.delete(deed_id)
        self._deeds.pop(deed_id, None)
