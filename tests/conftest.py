"""Shared fixtures: a temporary icon store and recording fake collaborators."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from iconvault.cache import IconCache
from iconvault.config import JsonIconPackStore, system_icons_dir
from iconvault.errors import NotFoundError, ResolutionError
from iconvault.models import RawIconImage
from iconvault.orchestrator import ExtractionOrchestrator


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def make_raw(
    width: int,
    height: int,
    visible: Optional[Iterable[Tuple[int, int]]] = None,
    bgra: Tuple[int, int, int, int] = (10, 20, 30, 255),
    bit_count: int = 32,
) -> RawIconImage:
    """BGRA bitmap with ``bgra`` at ``visible`` pixels (all pixels if None)."""
    data = bytearray(width * height * 4)
    points = visible if visible is not None else [(x, y) for y in range(height) for x in range(width)]
    for x, y in points:
        offset = (y * width + x) * 4
        data[offset : offset + 4] = bytes(bgra)
    return RawIconImage(data, width, height, bit_count)


def touch(folder: Path, name: str) -> Path:
    path = folder / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


class FakeProvider:
    """Returns configured bitmaps per file name; unknown files have no icon."""

    def __init__(self, icons: Optional[Dict[str, object]] = None):
        self.icons = icons or {}
        self.calls: list[Path] = []

    def retrieve_icon_for_path(self, path: Path) -> RawIconImage:
        self.calls.append(Path(path))
        icon = self.icons.get(Path(path).name)
        if icon is None:
            raise NotFoundError(f"no icon for {path}")
        if isinstance(icon, Exception):
            raise icon
        if callable(icon):
            return icon()
        return RawIconImage(bytearray(icon.data), icon.width, icon.height, icon.bit_count)


class FakeShortcutResolver:
    def __init__(self, targets: Optional[Dict[str, Path]] = None):
        self.targets = targets or {}
        self.calls: list[Path] = []

    def resolve_shortcut_target(self, path: Path) -> Path:
        self.calls.append(Path(path))
        try:
            return self.targets[Path(path).name]
        except KeyError:
            raise ResolutionError(f"{path} has no target") from None


class FakePackagedApps:
    def __init__(self, icons: Optional[Dict[str, Tuple[Path, Path]]] = None):
        self.icons = icons or {}
        self.calls: list[str] = []

    def packaged_app_theme_icons(self, app_id: str) -> Tuple[Path, Path]:
        self.calls.append(app_id)
        if app_id not in self.icons:
            raise NotFoundError(f"no package for {app_id}")
        return self.icons[app_id]


class FakeShortcutIndex:
    def __init__(self, shortcuts: Optional[Dict[str, Path]] = None):
        self.shortcuts = shortcuts or {}

    def shortcut_for_identity(self, app_id: str) -> Optional[Path]:
        return self.shortcuts.get(app_id)


@pytest.fixture
def icons_root(tmp_path) -> Path:
    return tmp_path / "icons"


@pytest.fixture
def files_dir(tmp_path) -> Path:
    folder = tmp_path / "files"
    folder.mkdir()
    return folder


@pytest.fixture
def pack_store(icons_root) -> JsonIconPackStore:
    return JsonIconPackStore.in_store(icons_root)


@pytest.fixture
def cache(pack_store, icons_root) -> IconCache:
    return IconCache(pack_store, system_icons_dir(icons_root))


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def shortcut_resolver() -> FakeShortcutResolver:
    return FakeShortcutResolver()


@pytest.fixture
def packaged_apps() -> FakePackagedApps:
    return FakePackagedApps()


@pytest.fixture
def shortcut_index() -> FakeShortcutIndex:
    return FakeShortcutIndex()


@pytest.fixture
def orchestrator(
    cache, icons_root, provider, shortcut_resolver, packaged_apps, shortcut_index
) -> ExtractionOrchestrator:
    return ExtractionOrchestrator(
        cache,
        icons_root,
        provider,
        shortcut_resolver=shortcut_resolver,
        packaged_apps=packaged_apps,
        shortcut_index=shortcut_index,
    )
