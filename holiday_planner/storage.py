"""
Design (storage.py)
- Purpose: Load and save the document store's collections to/from disk (JSON).
- Inputs: Path (from get_store_path()), {collection -> {doc_id -> data}} for save.
- Outputs: Collections dict on load; None on save.
- Side effects: Reads/writes file. On load failure returns empty collections; on save
                failure raises StoreError so the caller can surface it.
- Thread-safety: Not locked here; DocumentStore calls save under its own lock.
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from .config import APP_DATA_DIRNAME, STORE_FILENAME
from .exceptions import StoreError

logger = logging.getLogger(__name__)

Collections = Dict[str, Dict[str, Dict[str, Any]]]

# Marker used to round-trip timestamps through JSON
TIMESTAMP_TAG = "$timestamp"


def get_store_path() -> Path:
    """
    Resolve path for holidays.json. Prefer the per-user app data dir so data survives
    reinstalls. Fallback to the project dir (or next to the executable when frozen).
    """
    candidates = []
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            candidates.append(Path(appdata) / APP_DATA_DIRNAME)
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        data_home = Path(xdg) if xdg else Path.home() / ".local" / "share"
        candidates.append(data_home / APP_DATA_DIRNAME)
    for base in candidates:
        try:
            base.mkdir(parents=True, exist_ok=True)
            return base / STORE_FILENAME
        except OSError:
            logger.warning("Cannot use data directory %s", base)
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        base = Path(sys.executable).parent
    else:
        base = Path(__file__).resolve().parent.parent
    return base / STORE_FILENAME


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {TIMESTAMP_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {TIMESTAMP_TAG}:
            return datetime.fromisoformat(value[TIMESTAMP_TAG])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def load_documents(path: Path) -> Collections:
    """
    Load collections from JSON file. Returns empty collections on missing file or parse error.
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s (%s); starting empty", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is not an object", path)
        return {}
    collections: Collections = {}
    for name, docs in data.items():
        if not isinstance(docs, dict):
            continue
        try:
            collections[str(name)] = {
                str(doc_id): _decode(body) for doc_id, body in docs.items() if isinstance(body, dict)
            }
        except (TypeError, ValueError) as e:
            logger.warning("Skipping collection %r in %s: %s", name, path, e)
    return collections


def save_documents(collections: Collections, path: Path) -> None:
    """
    Save collections to JSON file. The data is written to a sibling temp file and swapped
    in with os.replace, so a failed save never leaves a half-written file behind.
    Raises: StoreError when the data cannot be encoded or the file cannot be written.
    """
    try:
        payload = json.dumps(_encode(collections), indent=2)
    except (TypeError, ValueError) as e:
        raise StoreError(f"Could not encode data for {path}: {e}") from e
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove %s", tmp_path)
        raise StoreError(f"Could not save {path}: {e}") from e
