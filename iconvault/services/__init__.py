"""Host-facing services built on the extraction engine."""
from .icon_service import IconService

__all__ = ["IconService"]
