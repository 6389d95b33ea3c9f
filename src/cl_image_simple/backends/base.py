"""Abstract imaging backend and frame contracts.

``SimpleImage`` never touches pixels. Everything it needs from an imaging
library goes through these two classes, so any library (or a test fake) can
stand behind it.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TypeAlias

from ..common.schemas import ExportOptions, ScaleParams
from ..common.sources import ImageSource, ImageTarget

TagValue: TypeAlias = str | int | float | bytes | tuple[int, ...]


class Frame(ABC):
    """One decoded image plane with multi-valued metadata tags."""

    @property
    @abstractmethod
    def width(self) -> int: ...

    @property
    @abstractmethod
    def height(self) -> int: ...

    @abstractmethod
    def tags(self, name: str) -> list[TagValue]:
        """Return every value stored under ``name`` (empty if absent)."""
        ...

    @abstractmethod
    def add_tag(self, name: str, value: TagValue) -> None: ...

    @abstractmethod
    def delete_tag(self, name: str) -> int:
        """Remove all values stored under ``name``; return how many were removed."""
        ...


class ImagingBackend(ABC):
    """
    Decode, scale and encode frames.

    Implementations report failures by raising ``BackendError`` with a
    human readable message.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def decode(self, source: ImageSource, format_hint: str | None = None) -> list[Frame]:
        """Read every frame from ``source`` in file order."""
        ...

    @abstractmethod
    def scale(self, frame: Frame, params: ScaleParams) -> Frame:
        """Return a new scaled frame; ``frame`` itself is left untouched."""
        ...

    @abstractmethod
    def encode(
        self,
        target: ImageTarget,
        format: str | None,
        frames: Sequence[Frame],
        options: ExportOptions,
    ) -> None:
        """Write ``frames`` to ``target``; BUFFER targets are extended in place."""
        ...
