"""Classification of icon requests into retrieval strategies."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import models
from .models import SourceKey

NO_ICON = "none"
URL_PLACEHOLDER = "url"
FILE_TYPE = "file_type"
EXECUTABLE = "exe"
SHORTCUT = "lnk"
PACKAGED_APP = "packaged_app"
PROPERTY_STORE = "property_store"

APP_NAMESPACE = "app"
FILE_NAMESPACE = "file"

URL_ICON_KEY = "url"


@dataclass(frozen=True, slots=True)
class IconSource:
    """Where an icon comes from and where it is cached."""

    key: SourceKey
    strategy: str
    namespace: Optional[str] = None
    cache_key: Optional[str] = None

    @property
    def path(self) -> Path:
        return Path(self.key.value)


class IconSourceResolver:
    """Maps a source key to a strategy and a cache slot.

    Executables and shortcuts are cached per path, URL shortcuts share one
    placeholder, every other file is cached by its extension. App identities
    are cached under the identity itself.
    """

    executable_extensions = frozenset({"exe"})
    shortcut_extensions = frozenset({"lnk"})
    url_extensions = frozenset({"url"})

    def classify(self, key: SourceKey) -> IconSource:
        if key.kind == models.PACKAGED_APP:
            return IconSource(key, PACKAGED_APP, APP_NAMESPACE, key.value)
        if key.kind == models.PROPERTY_STORE:
            return IconSource(key, PROPERTY_STORE, APP_NAMESPACE, key.value)

        extension = Path(key.value).suffix[1:].lower()
        if not extension:
            return IconSource(key, NO_ICON)
        if extension in self.url_extensions:
            return IconSource(key, URL_PLACEHOLDER, FILE_NAMESPACE, URL_ICON_KEY)
        if extension in self.executable_extensions:
            return IconSource(key, EXECUTABLE, APP_NAMESPACE, key.value)
        if extension in self.shortcut_extensions:
            return IconSource(key, SHORTCUT, APP_NAMESPACE, key.value)
        return IconSource(key, FILE_TYPE, FILE_NAMESPACE, extension)
