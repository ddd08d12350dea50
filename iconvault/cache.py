"""Shared mapping from source identities to stored icon descriptors."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from .collaborators import IconPackStore
from .config import PACK_VERSION, ConfigError
from .errors import IoError
from .imaging.utils import is_valid_png_file
from .models import (
    IconDescriptor,
    SourceKey,
    descriptor_filenames,
    descriptor_from_payload,
    descriptor_to_payload,
)

logger = logging.getLogger(__name__)

AppKey = Union[SourceKey, str]


def app_icon_key(key: AppKey) -> str:
    return key.value if isinstance(key, SourceKey) else str(key)


def file_icon_key(extension_or_path: Union[str, Path]) -> str:
    """Normalize ``"TXT"``, ``".txt"`` or ``"C:/a/b.txt"`` to ``"txt"``."""
    suffix = Path(extension_or_path).suffix
    if suffix:
        return suffix[1:].lower()
    return str(extension_or_path).lstrip(".").lower()


class IconCache:
    """Stores icon descriptors in an app namespace and a file-type namespace.

    One instance is shared by every caller and guarded by a single exclusive
    lock. Each call takes the lock on its own, so a check followed by an
    insert is not atomic: extraction checks for a hit, works without the
    lock, then records. Two callers racing on the same key may both extract;
    the last record wins and the maps stay consistent.
    """

    def __init__(self, store: Optional[IconPackStore] = None, icons_dir: Optional[Path] = None):
        self._store = store
        self._icons_dir = Path(icons_dir) if icons_dir is not None else None
        self._lock = threading.Lock()
        self._app_icons: Dict[str, IconDescriptor] = {}
        self._file_icons: Dict[str, IconDescriptor] = {}
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def load(self) -> None:
        """Replace the in-memory state with the persisted icon pack."""
        if self._store is None:
            return
        try:
            payload = self._store.load()
        except ConfigError as exc:
            raise IoError(str(exc)) from exc
        app_icons = self._parse_section(payload.get("app_icons", {}))
        file_icons = self._parse_section(payload.get("file_icons", {}))
        with self._lock:
            self._app_icons = app_icons
            self._file_icons = file_icons
            self._version += 1
        logger.debug("Loaded %d app icons and %d file icons", len(app_icons), len(file_icons))

    def get_app_icon(self, key: AppKey) -> Optional[IconDescriptor]:
        with self._lock:
            return self._app_icons.get(app_icon_key(key))

    def get_file_icon(self, extension_or_path: Union[str, Path]) -> Optional[IconDescriptor]:
        with self._lock:
            return self._file_icons.get(file_icon_key(extension_or_path))

    def add_system_app_icon(self, key: AppKey, descriptor: IconDescriptor) -> None:
        with self._lock:
            self._app_icons[app_icon_key(key)] = descriptor
            self._version += 1

    def add_system_file_icon(self, extension: str, descriptor: IconDescriptor) -> None:
        with self._lock:
            self._file_icons[file_icon_key(extension)] = descriptor
            self._version += 1

    def record_app_icon(self, key: AppKey, descriptor: IconDescriptor) -> None:
        """Insert and flush under one hold of the lock.

        If the flush fails the previous entry is restored and ``IoError`` is
        raised, so memory never holds an entry the store does not.
        """
        with self._lock:
            self._record_locked(self._app_icons, app_icon_key(key), descriptor)

    def record_file_icon(self, extension: str, descriptor: IconDescriptor) -> None:
        with self._lock:
            self._record_locked(self._file_icons, file_icon_key(extension), descriptor)

    def remove_app_icon(self, key: AppKey) -> bool:
        with self._lock:
            removed = self._app_icons.pop(app_icon_key(key), None) is not None
            if removed:
                self._version += 1
            return removed

    def remove_file_icon(self, extension_or_path: Union[str, Path]) -> bool:
        with self._lock:
            removed = self._file_icons.pop(file_icon_key(extension_or_path), None) is not None
            if removed:
                self._version += 1
            return removed

    def clear(self) -> None:
        with self._lock:
            if self._app_icons or self._file_icons:
                self._app_icons = {}
                self._file_icons = {}
                self._version += 1

    def write(self) -> None:
        """Flush the in-memory state to the icon pack store."""
        with self._lock:
            self._write_locked()

    def cleanup_broken_assets(self) -> int:
        """Drop entries whose stored files are missing or are not valid PNGs.

        Every file of a dropped entry is deleted from the icon store, valid
        or not. Returns the number of entries removed.
        """
        if self._icons_dir is None:
            return 0
        removed = 0
        with self._lock:
            for section in (self._app_icons, self._file_icons):
                for key, descriptor in list(section.items()):
                    filenames = descriptor_filenames(descriptor)
                    if all(is_valid_png_file(self._icons_dir / name) for name in filenames):
                        continue
                    del section[key]
                    for name in filenames:
                        self._delete_asset(name)
                    removed += 1
            if not removed:
                return 0
            self._version += 1
            self._write_locked()
        logger.warning("Removed %d icon entries with broken assets", removed)
        return removed

    def _delete_asset(self, filename: str) -> None:
        asset = self._icons_dir / filename
        try:
            asset.unlink(missing_ok=True)
        except OSError as err:  # pragma: no cover - filesystem dependent
            logger.warning("Failed to delete icon %s: %s", asset, err)

    def _record_locked(self, section: Dict[str, IconDescriptor], key: str, descriptor: IconDescriptor) -> None:
        previous = section.get(key)
        section[key] = descriptor
        try:
            self._write_locked()
        except IoError:
            if previous is None:
                del section[key]
            else:
                section[key] = previous
            raise
        self._version += 1

    def _write_locked(self) -> None:
        if self._store is None:
            return
        payload = {
            "version": PACK_VERSION,
            "app_icons": {k: descriptor_to_payload(v) for k, v in self._app_icons.items()},
            "file_icons": {k: descriptor_to_payload(v) for k, v in self._file_icons.items()},
        }
        try:
            self._store.save(payload)
        except ConfigError as exc:
            raise IoError(str(exc)) from exc

    @staticmethod
    def _parse_section(section: dict) -> Dict[str, IconDescriptor]:
        parsed: Dict[str, IconDescriptor] = {}
        for key, value in section.items():
            try:
                parsed[key] = descriptor_from_payload(value)
            except ValueError as err:
                logger.warning("Skipping icon entry %s: %s", key, err)
        return parsed
