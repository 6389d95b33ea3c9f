"""cl_image_simple - Make common image read/scale/write use cases easy."""

from .backends import Frame, ImagingBackend, PillowBackend, PillowFrame, get_default_backend
from .common.schemas import ExportOptions, ScaleOptions, ScaleParams
from .common.sources import ImageSource, ImageTarget, IOKind
from .errors import BackendError, DecodeError, EncodeError, ScaleError, SimpleImageError
from .simple_image import SimpleImage

__version__ = "0.1.0"

__all__ = [
    "SimpleImage",
    "Frame",
    "ImagingBackend",
    "PillowBackend",
    "PillowFrame",
    "get_default_backend",
    "ScaleOptions",
    "ScaleParams",
    "ExportOptions",
    "ImageSource",
    "ImageTarget",
    "IOKind",
    "SimpleImageError",
    "DecodeError",
    "ScaleError",
    "EncodeError",
    "BackendError",
    "__version__",
]
