"""Imaging backends."""

from .base import Frame, ImagingBackend, TagValue
from .pillow_backend import PillowBackend, PillowFrame

_default_backend: ImagingBackend | None = None


def get_default_backend() -> ImagingBackend:
    """Get the shared PillowBackend instance."""
    global _default_backend
    if _default_backend is None:
        _default_backend = PillowBackend()
    return _default_backend


__all__ = [
    "Frame",
    "ImagingBackend",
    "PillowBackend",
    "PillowFrame",
    "TagValue",
    "get_default_backend",
]
