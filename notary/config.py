from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Optional, Union

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[1]


def _env_int(name: str, default: int) -> int:
    val = os.environ.get(name)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def data_dir() -> Path:
    """Dossier data/ (surchargeable via NOTARY_DATA_DIR)."""
    env = os.environ.get("NOTARY_DATA_DIR")
    return Path(env) if env else ROOT_DIR / "data"


def invoices_json() -> Path:
    return data_dir() / "invoices.json"


def deeds_json() -> Path:
    return data_dir() / "deeds.json"


def settings_json() -> Path:
    return data_dir() / "settings.json"


BACKUP_KEEP = _env_int("NOTARY_BACKUP_KEEP", 5)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    if level is None:
        level = os.environ.get("NOTARY_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
