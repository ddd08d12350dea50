"""Exceptions raised while acquiring and storing icons."""


class IconError(Exception):
    """Base class for icon acquisition failures."""


class IoError(IconError):
    """Raised when an icon asset or the icon pack cannot be read or written."""


class NotFoundError(IconError):
    """Raised when no icon is available for a source."""


class ExtractionFailed(NotFoundError):
    """Raised when direct retrieval failed and no fallback applies."""


class FormatError(IconError):
    """Raised when a retrieved bitmap is not a 32-bit image of the declared size."""


class ResolutionError(IconError):
    """Raised when a shortcut or app identity cannot be resolved to an icon source."""
