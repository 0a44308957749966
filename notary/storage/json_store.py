from __future__ import annotations

import glob
import json
import logging
import shutil
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from notary.errors import PersistenceError, RecordNotFoundError

logger = logging.getLogger(__name__)

Record = Union[BaseModel, Mapping[str, Any]]
Listener = Callable[[List[Dict[str, Any]]], None]


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


class JsonStore:
    """
    Store JSON générique (une collection par fichier).
    - save() remplace l'enregistrement entier (pas de fusion champ à champ)
    - subscribe() notifie la collection complète après chaque écriture
    - Rotation de backups (backup_enabled, backup_keep)
    - N'écrit pas si le contenu ne change pas
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        entity_name: str = "entity",
        key: str = "id",
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.filepath = Path(filepath)
        self.entity_name = entity_name
        self.key = key
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        if not self.filepath.exists():
            self._write_raw([])

    # ---------------- I/O bas niveau ---------------- #

    def _read_raw(self) -> List[Dict[str, Any]]:
        try:
            with self.filepath.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, list) else []
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            # Fichier corrompu → copie de côté et repart sur liste vide
            logger.warning("%s: fichier JSON corrompu (%s)", self.entity_name, self.filepath)
            try:
                shutil.copy2(self.filepath, self.filepath.with_suffix(".corrupt.json"))
            except OSError as e:
                logger.warning("Copie du fichier corrompu impossible: %s", e)
            return []

    def _rotate_backups(self) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        pattern = str(self.filepath.with_suffix(".*.bak.json"))
        files = sorted(glob.glob(pattern))
        # garde les plus récents
        if len(files) > self.backup_keep:
            for old in files[: len(files) - self.backup_keep]:
                Path(old).unlink(missing_ok=True)

    def _write_raw(self, data: Iterable[Mapping[str, Any]]) -> None:
        with self._lock:
            new_dump = json.dumps(list(data), ensure_ascii=False, indent=2, default=_json_default)

            # si contenu identique → ne rien faire
            if self.filepath.exists() and self.filepath.read_text(encoding="utf-8") == new_dump:
                return

            if self.backup_enabled and self.filepath.exists():
                ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                shutil.copy2(self.filepath, self.filepath.with_suffix(f".{ts}.bak.json"))
                self._rotate_backups()

            with self.filepath.open("w", encoding="utf-8") as f:
                f.write(new_dump)

    def _commit(self, data: List[Dict[str, Any]], record: Optional[Any] = None) -> None:
        try:
            self._write_raw(data)
        except OSError as e:
            logger.error("Échec d'écriture %s (%s)", self.entity_name, self.filepath, exc_info=True)
            raise PersistenceError(f"Impossible d'enregistrer {self.entity_name}: {e}", record=record) from e
        self._notify(data)

    def _notify(self, data: List[Dict[str, Any]]) -> None:
        for listener in list(self._listeners):
            listener([dict(d) for d in data])

    # ---------------- Helpers ---------------- #

    @staticmethod
    def _to_dict(item: Record) -> Dict[str, Any]:
        if isinstance(item, BaseModel):
            return item.model_dump(mode="json")
        return dict(item)

    # ---------------- Lecture ---------------- #

    def list_all(self) -> List[Dict[str, Any]]:
        return self._read_raw()

    def get_by_id(self, obj_id: Any) -> Optional[Dict[str, Any]]:
        k = self.key
        for it in self._read_raw():
            if str(it.get(k)) == str(obj_id):
                return it
        return None

    # ---------------- Écriture ---------------- #

    def save(self, item: Record) -> Dict[str, Any]:
        """Insère ou remplace l'enregistrement complet (dernier écrivain gagnant)."""
        record = self._to_dict(item)
        k = self.key
        if not record.get(k):
            raise ValueError(f"Cannot save {self.entity_name} without '{k}'")
        data = self._read_raw()
        for idx, existing in enumerate(data):
            if str(existing.get(k)) == str(record[k]):
                data[idx] = record
                break
        else:
            data.append(record)
        self._commit(data, record=item)
        return record

    def delete(self, obj_id: Any) -> None:
        k = self.key
        data = self._read_raw()
        new_data = [d for d in data if str(d.get(k)) != str(obj_id)]
        if len(new_data) == len(data):
            raise RecordNotFoundError(self.entity_name, obj_id)
        self._commit(new_data)

    # ---------------- Abonnement ---------------- #

    def subscribe(self, listener: Listener, *, immediate: bool = True) -> Callable[[], None]:
        """
        Enregistre un listener appelé avec la collection complète après chaque écriture.
        Retourne la fonction de désabonnement.
        """
        self._listeners.append(listener)
        if immediate:
            listener(self._read_raw())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
