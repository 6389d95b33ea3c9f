"""Tagged source/target descriptors for reading and writing images.

The public API accepts loosely shaped values (a path, some bytes, a file
object, a function). They are classified exactly once here so that backends
only ever switch on ``kind``.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable


class IOKind(StrEnum):
    CALLBACK = "callback"
    STREAM = "stream"
    BUFFER = "buffer"
    FILE = "file"


@runtime_checkable
class Readable(Protocol):
    def read(self, size: int = -1, /) -> bytes: ...


@runtime_checkable
class Writable(Protocol):
    def write(self, data: bytes, /) -> object: ...


Producer = Callable[[int], bytes]
Consumer = Callable[[bytes], object]


@dataclass(frozen=True)
class ImageSource:
    """Where image data is read from.

    Attributes:
        kind: Which of the four source shapes this is
        payload: ``Producer`` for CALLBACK, ``Readable`` for STREAM,
                 ``bytes`` for BUFFER and ``str`` path for FILE
    """

    kind: IOKind
    payload: object


@dataclass(frozen=True)
class ImageTarget:
    """Where encoded image data is delivered.

    Attributes:
        kind: Which of the four target shapes this is
        payload: ``Consumer`` for CALLBACK, ``Writable`` for STREAM,
                 ``bytearray`` for BUFFER and ``str`` path for FILE
    """

    kind: IOKind
    payload: object


def classify_source(value: object) -> ImageSource:
    """Classify a read source by its shape.

    Raises:
        TypeError: If the value matches none of the supported shapes
    """
    if isinstance(value, ImageSource):
        return value
    if isinstance(value, Readable):
        return ImageSource(IOKind.STREAM, value)
    if callable(value):
        return ImageSource(IOKind.CALLBACK, value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ImageSource(IOKind.BUFFER, bytes(value))
    if isinstance(value, (str, os.PathLike)):
        return ImageSource(IOKind.FILE, os.fspath(value))
    raise TypeError(f"Unsupported image source: {type(value).__name__}")


def classify_target(value: object) -> ImageTarget:
    """Classify a write destination by its shape.

    Raises:
        TypeError: If the value matches none of the supported shapes, or is an
            immutable buffer that cannot receive data
    """
    if isinstance(value, ImageTarget):
        return value
    if isinstance(value, Writable):
        return ImageTarget(IOKind.STREAM, value)
    if callable(value):
        return ImageTarget(IOKind.CALLBACK, value)
    if isinstance(value, bytearray):
        return ImageTarget(IOKind.BUFFER, value)
    if isinstance(value, (bytes, memoryview)):
        raise TypeError("Buffer destination must be a bytearray")
    if isinstance(value, (str, os.PathLike)):
        return ImageTarget(IOKind.FILE, os.fspath(value))
    raise TypeError(f"Unsupported image destination: {type(value).__name__}")
