from __future__ import annotations
import logging
import os
from typing import Callable, List, Optional

from pydantic import ValidationError

from notary import config
from notary.models.settings import SETTINGS_DOC_ID, CompanySettings
from notary.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


class SettingsService:
    """
    Paramètres société. La valeur courante est un objet explicite, rafraîchi
    par l'abonnement au store, à passer aux calculs qui en ont besoin.
    """

    def __init__(self, path: Optional[os.PathLike | str] = None, *, store: Optional[JsonStore] = None):
        self.store = store or JsonStore(path or config.settings_json(), entity_name="settings",
                                        backup_keep=config.BACKUP_KEEP)
        self._current = CompanySettings()
        self._listeners: List[Callable[[CompanySettings], None]] = []
        self._unsubscribe = self.store.subscribe(self._on_snapshot)

    def _on_snapshot(self, rows) -> None:
        for d in rows:
            if d.get("id") != SETTINGS_DOC_ID:
                continue
            try:
                self._current = CompanySettings(**d)
            except ValidationError as e:
                logger.warning("Paramètres invalides ignorés: %s", e)
                return
            break
        else:
            self._current = CompanySettings()
        for cb in list(self._listeners):
            cb(self._current)

    def current(self) -> CompanySettings:
        return self._current

    def save(self, settings: CompanySettings) -> CompanySettings:
        settings = settings.model_copy(update={"id": SETTINGS_DOC_ID})
        self._current = settings
        self.store.save(settings)
        logger.info("Paramètres société enregistrés (%s)", settings.name)
        return settings

    def subscribe(self, callback: Callable[[CompanySettings], None]) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def close(self) -> None:
        self._unsubscribe()
