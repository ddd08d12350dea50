"""Windows adapters for the extraction collaborators."""
from .start_menu import StartMenuShortcutIndex
from .windows import HAS_WIN32, Win32IconProvider, Win32ShortcutResolver

__all__ = [
    "HAS_WIN32",
    "StartMenuShortcutIndex",
    "Win32IconProvider",
    "Win32ShortcutResolver",
]
