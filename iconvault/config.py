"""Icon store locations and icon pack persistence."""
from __future__ import annotations

import json
import os
import shutil
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

PACK_VERSION = 1
PACK_FILENAME = "pack.json"
SYSTEM_DIRNAME = "system"

_RESOURCES_DIR = Path(__file__).resolve().parent / "resources"


class ConfigError(Exception):
    """Raised when icon pack operations fail."""


def resolve_icons_dir() -> Path:
    """Return the icon store root, creating it if needed."""
    override = os.environ.get("ICONVAULT_HOME")
    appdata = os.environ.get("APPDATA")
    if override:
        root = Path(override)
    elif appdata:
        root = Path(appdata) / "iconvault" / "icons"
    else:
        root = Path.home() / ".iconvault" / "icons"
    root.mkdir(parents=True, exist_ok=True)
    return root


def system_icons_dir(root: Path) -> Path:
    folder = Path(root) / SYSTEM_DIRNAME
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def resource_path(name: str) -> Path:
    """Path of an asset shipped with the package, e.g. ``icons/url.png``."""
    return _RESOURCES_DIR / name


def _default_pack() -> Dict[str, Any]:
    return {"version": PACK_VERSION, "app_icons": {}, "file_icons": {}}


def _normalize_loaded(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError("Icon pack must be a JSON object")
    app_icons = data.get("app_icons") or {}
    file_icons = data.get("file_icons") or {}
    if not isinstance(app_icons, dict) or not isinstance(file_icons, dict):
        raise ConfigError("Icon pack sections must be JSON objects")
    return {
        "version": data.get("version", PACK_VERSION),
        "app_icons": app_icons,
        "file_icons": file_icons,
    }


def load_pack(path: str | Path) -> Dict[str, Any]:
    """Load the icon pack document, or an empty one if it does not exist."""
    if not os.path.exists(path):
        return _default_pack()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError("Icon pack file is corrupted") from exc
    except OSError as exc:  # pragma: no cover - filesystem dependent
        raise ConfigError("Failed to read icon pack") from exc

    return _normalize_loaded(data)


def save_pack(path: str | Path, payload: Dict[str, Any], backup: bool = True) -> None:
    """Persist the icon pack atomically with optional backup."""
    path = str(path)
    if backup and os.path.exists(path):
        backup_path = f"{path}.bak"
        try:
            shutil.copyfile(path, backup_path)
        except OSError as exc:  # pragma: no cover - filesystem dependent
            logger.warning("Failed to back up icon pack: %s", exc)

    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise ConfigError("Failed to save icon pack") from exc


class JsonIconPackStore:
    """Icon pack persisted as a JSON document next to the stored icons."""

    def __init__(self, path: str | Path, backup: bool = True):
        self.path = Path(path)
        self.backup = backup

    @classmethod
    def in_store(cls, root: Path) -> "JsonIconPackStore":
        return cls(system_icons_dir(root) / PACK_FILENAME)

    def load(self) -> Dict[str, Any]:
        return load_pack(self.path)

    def save(self, payload: Dict[str, Any]) -> None:
        save_pack(self.path, payload, backup=self.backup)
