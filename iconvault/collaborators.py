"""Interfaces of the platform services the orchestrator depends on."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

from .models import RawIconImage


class IconProvider(Protocol):
    def retrieve_icon_for_path(self, path: Path) -> RawIconImage:
        """Return the system icon of ``path`` or raise ``NotFoundError``."""
        ...


class ShortcutResolver(Protocol):
    def resolve_shortcut_target(self, path: Path) -> Path:
        """Return the target of a shortcut or raise ``ResolutionError``."""
        ...


class PackagedAppIcons(Protocol):
    def packaged_app_theme_icons(self, app_id: str) -> Tuple[Path, Path]:
        """Return (light, dark) icon paths or raise ``NotFoundError``."""
        ...


class ShortcutIndex(Protocol):
    def shortcut_for_identity(self, app_id: str) -> Optional[Path]:
        ...


class IconPackStore(Protocol):
    def load(self) -> Dict[str, Any]:
        ...

    def save(self, payload: Dict[str, Any]) -> None:
        ...
