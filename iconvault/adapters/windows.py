"""Windows icon provider and shortcut resolver backed by pywin32."""
from __future__ import annotations

import logging
from pathlib import Path

from ..errors import IoError, NotFoundError, ResolutionError
from ..imaging import decode_png, find_png_blob
from ..models import RawIconImage

try:
    import pywintypes
    import win32api
    import win32con
    import win32gui
    import win32ui
    from win32com.client import Dispatch
    from win32com.shell import shell, shellcon

    HAS_WIN32 = True
except ImportError:  # pragma: no cover - platform specific
    HAS_WIN32 = False

logger = logging.getLogger(__name__)

EMBEDDED_ICON_SUFFIXES = {".exe", ".dll"}


class Win32IconProvider:
    """Reads the shell icon of a file as a raw BGRA bitmap.

    The shell hands out icons at the system large-icon size (``SM_CXICON``,
    usually 32px). Without pywin32 the provider looks for a PNG embedded in
    executables and libraries, which covers PNG-compressed icon resources.
    Other files have no icon there.
    """

    def retrieve_icon_for_path(self, path: Path) -> RawIconImage:
        if HAS_WIN32:
            return self._retrieve_shell_icon(Path(path))
        return self._retrieve_embedded_png(Path(path))

    def _retrieve_shell_icon(self, path: Path) -> RawIconImage:  # pragma: no cover - Windows only
        flags = shellcon.SHGFI_ICON | shellcon.SHGFI_LARGEICON | shellcon.SHGFI_SYSICONINDEX
        try:
            result, info = shell.SHGetFileInfo(str(path), 0, flags)
        except pywintypes.error as exc:
            raise NotFoundError(f"Shell has no icon for {path}") from exc
        hicon, index = info[0], info[1]
        if not result or not hicon:
            raise NotFoundError(f"Shell has no icon for {path}")
        try:
            # index 0 is the generic file icon, stored copies of it are useless
            if index == 0:
                raise NotFoundError(f"{path} only has the default icon")
            return self._render_icon(hicon)
        finally:
            win32gui.DestroyIcon(hicon)

    @staticmethod
    def _render_icon(hicon) -> RawIconImage:  # pragma: no cover - Windows only
        ico_x = win32api.GetSystemMetrics(win32con.SM_CXICON)
        ico_y = win32api.GetSystemMetrics(win32con.SM_CYICON)

        screen_dc = win32gui.GetDC(0)
        hdc = win32ui.CreateDCFromHandle(screen_dc)
        hbmp = win32ui.CreateBitmap()
        hbmp.CreateCompatibleBitmap(hdc, ico_x, ico_y)
        mem_dc = hdc.CreateCompatibleDC()
        try:
            mem_dc.SelectObject(hbmp)
            mem_dc.DrawIcon((0, 0), hicon)
            bits = hbmp.GetBitmapBits(True)
            depth = hbmp.GetInfo()["bmBitsPixel"]
        except (pywintypes.error, win32ui.error) as exc:
            raise NotFoundError(f"Failed to render icon: {exc}") from exc
        finally:
            mem_dc.DeleteDC()
            hdc.DeleteDC()
            win32gui.ReleaseDC(0, screen_dc)
            win32gui.DeleteObject(hbmp.GetHandle())
        return RawIconImage(bytearray(bits), ico_x, ico_y, depth)

    @staticmethod
    def _retrieve_embedded_png(path: Path) -> RawIconImage:
        if path.suffix.lower() not in EMBEDDED_ICON_SUFFIXES:
            raise NotFoundError(f"No embedded icon in {path.name}: not an executable")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise IoError(f"Failed to read {path}: {exc}") from exc
        blob = find_png_blob(data)
        if blob is None:
            raise NotFoundError(f"No embedded icon in {path}")
        logger.debug("Using embedded PNG from %s", path.name)
        return decode_png(blob)


class Win32ShortcutResolver:
    """Resolves ``.lnk`` targets through the WScript.Shell COM object."""

    def resolve_shortcut_target(self, path: Path) -> Path:
        if not HAS_WIN32:
            raise ResolutionError(f"Cannot resolve {path}: pywin32 is not available")
        try:  # pragma: no cover - Windows only
            shortcut = Dispatch("WScript.Shell").CreateShortCut(str(path))
            target = shortcut.Targetpath
        except pywintypes.com_error as exc:  # pragma: no cover - Windows only
            raise ResolutionError(f"Failed to read shortcut {path}") from exc
        if not target:  # pragma: no cover - Windows only
            raise ResolutionError(f"Shortcut {path} has no target")
        return Path(target)
