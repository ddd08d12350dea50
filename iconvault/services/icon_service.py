"""Qt-facing service that runs icon extraction for a host application."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..adapters import StartMenuShortcutIndex, Win32IconProvider, Win32ShortcutResolver
from ..cache import IconCache
from ..config import JsonIconPackStore, resolve_icons_dir, system_icons_dir
from ..errors import IconError
from ..models import DynamicIcon, IconDescriptor, SourceKey
from ..orchestrator import ExtractionOrchestrator

logger = logging.getLogger(__name__)


class IconService(QObject):
    """Reports extraction results through signals instead of exceptions.

    Extraction runs synchronously on the calling thread; hosts that need a
    bounded wait put their own deadline around ``request_icon``.
    """

    iconReady = Signal(str, object)
    iconFailed = Signal(str, str)

    def __init__(self, orchestrator: ExtractionOrchestrator, cache: IconCache):
        super().__init__()
        self._orchestrator = orchestrator
        self._cache = cache

    @classmethod
    def create_default(cls, icons_root: Optional[Path] = None) -> "IconService":
        """Build a service over the user icon store with the Windows adapters."""
        root = Path(icons_root) if icons_root is not None else resolve_icons_dir()
        cache = IconCache(JsonIconPackStore.in_store(root), system_icons_dir(root))
        cache.load()
        orchestrator = ExtractionOrchestrator(
            cache,
            root,
            Win32IconProvider(),
            shortcut_resolver=Win32ShortcutResolver(),
            shortcut_index=StartMenuShortcutIndex(),
        )
        return cls(orchestrator, cache)

    def request_icon(self, key: SourceKey) -> Optional[IconDescriptor]:
        try:
            descriptor = self._orchestrator.extract(key)
        except IconError as err:
            logger.warning("Failed to extract icon for %s: %s", key, err)
            self.iconFailed.emit(str(key), str(err))
            return None
        if descriptor is not None:
            self.iconReady.emit(str(key), descriptor)
        return descriptor

    def request_file_icon(self, path: str | Path) -> Optional[IconDescriptor]:
        return self.request_icon(SourceKey.for_path(path))

    def icon_path(self, descriptor: IconDescriptor, dark: bool = False) -> Path:
        """Absolute path of the stored asset to display for ``descriptor``."""
        if isinstance(descriptor, DynamicIcon):
            filename = descriptor.dark if dark else descriptor.light
        else:
            filename = descriptor.filename
        return self._orchestrator.system_dir / filename

    def cleanup_broken_png_cache(self) -> int:
        """Remove malformed stored icons and drop the entries that used them."""
        return self._cache.cleanup_broken_assets()
