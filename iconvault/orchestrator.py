"""Icon extraction with per-source fallback chains and write-through caching."""
from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional

from . import resolver as strategies
from .cache import IconCache
from .collaborators import IconProvider, PackagedAppIcons, ShortcutIndex, ShortcutResolver
from .config import resource_path, system_icons_dir
from .errors import (
    ExtractionFailed,
    FormatError,
    IoError,
    NotFoundError,
    ResolutionError,
)
from .imaging import normalize_raw_image, save_png
from .imaging.pixels import ChannelSwapper
from .models import DynamicIcon, IconDescriptor, SourceKey, StaticIcon, descriptor_filenames
from .resolver import IconSource, IconSourceResolver

logger = logging.getLogger(__name__)

MAX_RESOLUTION_DEPTH = 8
URL_PLACEHOLDER_ICON = "icons/url.png"


class ExtractionOrchestrator:
    """Extracts, normalizes and stores the icon of a source key.

    Every request first checks ``cache``. On a miss the source is classified
    and handled by its strategy; the resulting asset is written under
    ``<icons_root>/system`` and recorded in the cache, which is flushed
    before the call returns. The cache lock is never held while an icon is
    being retrieved, so shortcut resolution can recurse freely.
    """

    def __init__(
        self,
        cache: IconCache,
        icons_root: Path,
        provider: IconProvider,
        shortcut_resolver: Optional[ShortcutResolver] = None,
        packaged_apps: Optional[PackagedAppIcons] = None,
        shortcut_index: Optional[ShortcutIndex] = None,
        source_resolver: Optional[IconSourceResolver] = None,
        swapper: Optional[ChannelSwapper] = None,
        url_placeholder: Optional[Path] = None,
    ):
        self._cache = cache
        self._system_dir = system_icons_dir(icons_root)
        self._provider = provider
        self._shortcut_resolver = shortcut_resolver
        self._packaged_apps = packaged_apps
        self._shortcut_index = shortcut_index
        self._source_resolver = source_resolver or IconSourceResolver()
        self._swapper = swapper
        self._url_placeholder = url_placeholder or resource_path(URL_PLACEHOLDER_ICON)
        self._handlers: Dict[str, Callable[[IconSource, FrozenSet[SourceKey]], IconDescriptor]] = {
            strategies.URL_PLACEHOLDER: self._extract_url_placeholder,
            strategies.FILE_TYPE: self._extract_direct,
            strategies.EXECUTABLE: self._extract_direct,
            strategies.SHORTCUT: self._extract_shortcut,
            strategies.PACKAGED_APP: self._extract_packaged_app,
            strategies.PROPERTY_STORE: self._extract_property_store,
        }

    @property
    def system_dir(self) -> Path:
        return self._system_dir

    def extract(self, key: SourceKey) -> Optional[IconDescriptor]:
        """Return the descriptor for ``key``, extracting it on a cache miss.

        Returns None for files without an extension, which carry no icon.
        """
        return self._extract(key, frozenset())

    def extract_icon_from_file(self, path: str | Path) -> Optional[IconDescriptor]:
        return self.extract(SourceKey.for_path(path))

    def extract_icon_for_app(self, app_id: str, packaged: bool = True) -> Optional[IconDescriptor]:
        if packaged:
            return self.extract(SourceKey.packaged_app(app_id))
        return self.extract(SourceKey.property_store(app_id))

    def _extract(self, key: SourceKey, visited: FrozenSet[SourceKey]) -> Optional[IconDescriptor]:
        if key in visited:
            raise ResolutionError(f"Resolution cycle detected at {key}")
        if len(visited) >= MAX_RESOLUTION_DEPTH:
            raise ResolutionError(f"Resolution of {key} exceeded {MAX_RESOLUTION_DEPTH} steps")
        visited = visited | {key}

        source = self._source_resolver.classify(key)
        if key.is_path and not source.path.is_file():
            raise NotFoundError(f"Path is not a file: {source.path}")
        if source.strategy == strategies.NO_ICON:
            return None

        cached = self._lookup(source)
        if cached is not None:
            return cached

        logger.debug("Extracting icon for %s (%s)", key, source.strategy)
        return self._handlers[source.strategy](source, visited)

    def _extract_url_placeholder(self, source: IconSource, visited) -> IconDescriptor:
        # .url files may name their own IconFile; every one of them shares one placeholder
        filename = self._new_filename()
        try:
            shutil.copyfile(self._url_placeholder, self._system_dir / filename)
        except OSError as exc:
            raise IoError(f"Failed to copy URL placeholder icon: {exc}") from exc
        return self._record(source, StaticIcon(filename))

    def _extract_direct(self, source: IconSource, visited) -> IconDescriptor:
        try:
            descriptor = self._retrieve_and_save(source.path)
        except NotFoundError as exc:
            raise ExtractionFailed(f"Failed to extract icon from {source.path}") from exc
        return self._record(source, descriptor)

    def _extract_shortcut(self, source: IconSource, visited) -> IconDescriptor:
        try:
            descriptor = self._retrieve_and_save(source.path)
        except (NotFoundError, FormatError) as err:
            logger.warning("Shortcut %s has no usable icon, trying its target: %s", source.path, err)
        else:
            return self._record(source, descriptor)

        if self._shortcut_resolver is None:
            raise ResolutionError(f"No shortcut resolver to follow {source.path}")
        target = self._shortcut_resolver.resolve_shortcut_target(source.path)
        descriptor = self._resolve_alias(
            SourceKey.for_path(target), visited, f"shortcut {source.path}"
        )
        return self._record(source, descriptor, owned=False)

    def _extract_packaged_app(self, source: IconSource, visited) -> IconDescriptor:
        if self._packaged_apps is None:
            raise NotFoundError(f"No packaged app icon source for {source.key}")
        light, dark = self._packaged_apps.packaged_app_theme_icons(source.key.value)

        name = uuid.uuid4()
        light_name = f"{name}_light.png"
        dark_name = f"{name}_dark.png"
        copied: list[Path] = []
        try:
            for origin, filename in ((light, light_name), (dark, dark_name)):
                destination = self._system_dir / filename
                shutil.copyfile(origin, destination)
                copied.append(destination)
        except OSError as exc:
            for leftover in copied:
                leftover.unlink(missing_ok=True)
            raise IoError(f"Failed to copy theme icons of {source.key}: {exc}") from exc
        return self._record(source, DynamicIcon(light_name, dark_name, None))

    def _extract_property_store(self, source: IconSource, visited) -> IconDescriptor:
        shortcut = None
        if self._shortcut_index is not None:
            shortcut = self._shortcut_index.shortcut_for_identity(source.key.value)
        if shortcut is None:
            raise ResolutionError(f"No shortcut found for app id {source.key}")
        descriptor = self._resolve_alias(
            SourceKey.for_path(shortcut), visited, f"app id {source.key}"
        )
        return self._record(source, descriptor, owned=False)

    def _resolve_alias(
        self, target: SourceKey, visited: FrozenSet[SourceKey], label: str
    ) -> IconDescriptor:
        """Extract ``target`` so that ``label`` can share its descriptor."""
        try:
            descriptor = self._extract(target, visited)
        except (NotFoundError, FormatError) as exc:
            raise ResolutionError(f"{label} resolves to {target}, which has no icon") from exc
        if descriptor is None:
            raise ResolutionError(f"{label} resolves to {target}, which has no icon")
        return descriptor

    def _retrieve_and_save(self, path: Path) -> StaticIcon:
        raw = self._provider.retrieve_icon_for_path(path)
        image = normalize_raw_image(raw, self._swapper)
        filename = self._new_filename()
        save_png(image, self._system_dir / filename)
        return StaticIcon(filename)

    def _lookup(self, source: IconSource) -> Optional[IconDescriptor]:
        if source.namespace == strategies.APP_NAMESPACE:
            return self._cache.get_app_icon(source.cache_key)
        return self._cache.get_file_icon(source.cache_key)

    def _record(
        self, source: IconSource, descriptor: IconDescriptor, owned: bool = True
    ) -> IconDescriptor:
        """Record ``descriptor`` for ``source``.

        Assets written for this request (``owned``) are deleted when the cache
        cannot be flushed. Aliased descriptors belong to another entry.
        """
        try:
            if source.namespace == strategies.APP_NAMESPACE:
                self._cache.record_app_icon(source.cache_key, descriptor)
            else:
                self._cache.record_file_icon(source.cache_key, descriptor)
        except IoError:
            if owned:
                for filename in descriptor_filenames(descriptor):
                    (self._system_dir / filename).unlink(missing_ok=True)
            raise
        logger.info("Stored icon for %s", source.key)
        return descriptor

    @staticmethod
    def _new_filename() -> str:
        return f"{uuid.uuid4()}.png"
