"""Index of Start Menu shortcuts by the app id stored in their property store."""
from __future__ import annotations

import os
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

try:
    import pywintypes
    from win32com.propsys import propsys, pscon
    from win32com.shell import shellcon

    HAS_PROPSYS = True
except ImportError:  # pragma: no cover - platform specific
    HAS_PROPSYS = False


def default_shortcut_roots() -> list[Path]:
    roots: list[Path] = []
    appdata = os.environ.get("APPDATA")
    programdata = os.environ.get("PROGRAMDATA")
    if appdata:
        roots.append(Path(appdata) / "Microsoft" / "Windows" / "Start Menu" / "Programs")
    if programdata:
        roots.append(Path(programdata) / "Microsoft" / "Windows" / "Start Menu" / "Programs")
    return [root for root in roots if root.exists()]


def read_shortcut_app_id(path: Path) -> Optional[str]:
    """Return the AppUserModelID stored in a shortcut, if any."""
    if not HAS_PROPSYS:
        return None
    try:  # pragma: no cover - Windows only
        store = propsys.SHGetPropertyStoreFromParsingName(
            str(path), None, shellcon.GPS_DEFAULT, propsys.IID_IPropertyStore
        )
        value = store.GetValue(pscon.PKEY_AppUserModel_ID).GetValue()
    except pywintypes.com_error as err:  # pragma: no cover - Windows only
        logger.debug("No property store for %s: %s", path, err)
        return None
    return value or None  # pragma: no cover - Windows only


class StartMenuShortcutIndex:
    """Finds the shortcut carrying a given app id.

    The index is built lazily on first lookup and rebuilt by ``refresh``.
    """

    def __init__(
        self,
        roots: Optional[Iterable[Path]] = None,
        read_app_id: Callable[[Path], Optional[str]] = read_shortcut_app_id,
    ):
        self._roots = [Path(root) for root in roots] if roots is not None else None
        self._read_app_id = read_app_id
        self._lock = threading.Lock()
        self._by_app_id: Optional[Dict[str, Path]] = None

    def refresh(self) -> None:
        roots = self._roots if self._roots is not None else default_shortcut_roots()
        index: Dict[str, Path] = {}
        for path in self._collect_shortcut_paths(roots):
            app_id = self._read_app_id(path)
            if app_id and app_id not in index:
                index[app_id] = path
        with self._lock:
            self._by_app_id = index
        logger.debug("Indexed %d shortcuts with app ids", len(index))

    def shortcut_for_identity(self, app_id: str) -> Optional[Path]:
        with self._lock:
            built = self._by_app_id is not None
        if not built:
            self.refresh()
        with self._lock:
            return self._by_app_id.get(app_id)

    @staticmethod
    def _collect_shortcut_paths(roots: Iterable[Path]) -> list[Path]:
        shortcuts: list[Path] = []
        for root in roots:
            if not root.exists():
                continue
            for dirpath, _, filenames in os.walk(root):
                for filename in sorted(filenames):
                    if filename.lower().endswith(".lnk"):
                        shortcuts.append(Path(dirpath) / filename)
        return shortcuts
