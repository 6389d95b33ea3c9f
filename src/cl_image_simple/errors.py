"""Exceptions raised by cl_image_simple.

Every error is a thin pass-through of the imaging backend's failure message.
"""


class SimpleImageError(Exception):
    """Base class for all cl_image_simple errors."""

    def __init__(self, message: str = "An unknown imaging error occurred."):
        self.message: str = message
        super().__init__(self.message)


class DecodeError(SimpleImageError):
    """The backend could not read the supplied source."""


class ScaleError(SimpleImageError):
    """The backend failed to scale one of the frames."""


class EncodeError(SimpleImageError):
    """The backend could not write the frames to the destination."""


class BackendError(Exception):
    """Raised by backends to report a failure in their own words."""

    def __init__(self, message: str):
        self.message: str = message
        super().__init__(self.message)
