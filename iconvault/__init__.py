"""Icon acquisition and caching engine."""
from .cache import IconCache
from .errors import (
    ExtractionFailed,
    FormatError,
    IconError,
    IoError,
    NotFoundError,
    ResolutionError,
)
from .models import DynamicIcon, IconDescriptor, RawIconImage, SourceKey, StaticIcon
from .orchestrator import ExtractionOrchestrator

__all__ = [
    "DynamicIcon",
    "ExtractionFailed",
    "ExtractionOrchestrator",
    "FormatError",
    "IconCache",
    "IconDescriptor",
    "IconError",
    "IoError",
    "NotFoundError",
    "RawIconImage",
    "ResolutionError",
    "SourceKey",
    "StaticIcon",
]
