"""Test configuration and fixtures for cl_image_simple.

This module provides:
- A fake imaging backend returning canned frames and tags
- Synthetic GIF/PNG images generated with Pillow
"""

from collections.abc import Sequence
from pathlib import Path
from typing import cast, override

import pytest
from PIL import Image, ImageDraw

from cl_image_simple.backends.base import Frame, ImagingBackend, TagValue
from cl_image_simple.common.schemas import ExportOptions, ScaleParams
from cl_image_simple.common.sources import ImageSource, ImageTarget, IOKind, Writable
from cl_image_simple.errors import BackendError

# ============================================================================
# Fake Backend
# ============================================================================


class FakeFrame(Frame):
    """Frame with a size and a tag store, no pixels."""

    def __init__(self, width: int, height: int, tags: dict[str, list[TagValue]] | None = None):
        self._width: int = width
        self._height: int = height
        self._tags: dict[str, list[TagValue]] = {k: list(v) for k, v in (tags or {}).items()}

    @property
    @override
    def width(self) -> int:
        return self._width

    @property
    @override
    def height(self) -> int:
        return self._height

    @override
    def tags(self, name: str) -> list[TagValue]:
        return list(self._tags.get(name, []))

    @override
    def add_tag(self, name: str, value: TagValue) -> None:
        self._tags.setdefault(name, []).append(value)

    @override
    def delete_tag(self, name: str) -> int:
        return len(self._tags.pop(name, []))

    def tag_names(self) -> set[str]:
        return set(self._tags)


class FakeBackend(ImagingBackend):
    """Backend returning canned frames and recording every call."""

    def __init__(
        self,
        frames: Sequence[FakeFrame] | None = None,
        decode_error: str | None = None,
        scale_error: str | None = None,
        fail_on_frame: int = 0,
        encode_error: str | None = None,
    ):
        self.frames: list[FakeFrame] = list(frames) if frames is not None else [
            FakeFrame(200, 100, {"i_format": ["gif"]})
        ]
        self.decode_error: str | None = decode_error
        self.scale_error: str | None = scale_error
        self.fail_on_frame: int = fail_on_frame
        self.encode_error: str | None = encode_error

        self.decode_calls: list[tuple[ImageSource, str | None]] = []
        self.scale_calls: list[ScaleParams] = []
        self.encode_calls: list[tuple[ImageTarget, str | None, list[Frame], ExportOptions]] = []

    @property
    @override
    def name(self) -> str:
        return "fake"

    @override
    def decode(self, source: ImageSource, format_hint: str | None = None) -> list[Frame]:
        self.decode_calls.append((source, format_hint))
        if self.decode_error is not None:
            raise BackendError(self.decode_error)
        return list(self.frames)

    @override
    def scale(self, frame: Frame, params: ScaleParams) -> Frame:
        index = len(self.scale_calls)
        self.scale_calls.append(params)
        if self.scale_error is not None and index >= self.fail_on_frame:
            raise BackendError(self.scale_error)
        return FakeFrame(
            params.xpixels or frame.width,
            params.ypixels or frame.height,
            {"fresh": ["yes"]},
        )

    @override
    def encode(
        self,
        target: ImageTarget,
        format: str | None,
        frames: Sequence[Frame],
        options: ExportOptions,
    ) -> None:
        self.encode_calls.append((target, format, list(frames), options))
        if self.encode_error is not None:
            raise BackendError(self.encode_error)

        data = f"{format}:{len(frames)}".encode()
        match target.kind:
            case IOKind.BUFFER:
                cast(bytearray, target.payload)[:] = data
            case IOKind.STREAM:
                _ = cast(Writable, target.payload).write(data)
            case IOKind.CALLBACK:
                _ = target.payload(data)  # pyright: ignore[reportCallIssue]
            case IOKind.FILE:
                _ = Path(cast(str, target.payload)).write_bytes(data)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


# ============================================================================
# Synthetic Images
# ============================================================================


def _draw_frame(size: tuple[int, int], color: tuple[int, int, int]) -> Image.Image:
    img = Image.new("RGB", size, color=(255, 255, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle([size[0] // 4, size[1] // 4, size[0] * 3 // 4, size[1] * 3 // 4], fill=color)
    return img


@pytest.fixture
def animated_gif_path(tmp_path: Path) -> Path:
    """Three frame 80x40 GIF with delay, loop and comment set."""
    output_path = tmp_path / "anim.gif"
    frames = [
        _draw_frame((80, 40), color)
        for color in ((255, 0, 0), (0, 255, 0), (0, 0, 255))
    ]
    frames[0].save(
        output_path,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=200,
        loop=3,
        comment=b"made by tests",
        disposal=2,
    )
    return output_path


@pytest.fixture
def png_path(tmp_path: Path) -> Path:
    """Single 120x60 PNG with 72 dpi."""
    output_path = tmp_path / "still.png"
    _draw_frame((120, 60), (10, 120, 200)).save(output_path, format="PNG", dpi=(72, 72))
    return output_path


@pytest.fixture
def rgba_image() -> Image.Image:
    """64x64 RGBA image, left half fully transparent, right half opaque."""
    img = Image.new("RGBA", (64, 64), color=(200, 30, 30, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, 31, 63], fill=(0, 0, 0, 0))
    return img
