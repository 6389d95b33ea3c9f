"""Pillow implementation of the imaging backend."""

from collections.abc import Sequence
from io import BytesIO
from pathlib import Path
from typing import cast, override

import numpy as np
from loguru import logger
from PIL import Image, ImageSequence

from ..common.schemas import ExportOptions, ScaleParams
from ..common.sources import ImageSource, ImageTarget, IOKind, Producer, Readable, Writable
from ..errors import BackendError
from .base import Frame, ImagingBackend, TagValue

READ_CHUNK_SIZE = 64 * 1024
DEFAULT_SCALE_FACTOR = 0.5
PALETTE_FORMATS = frozenset({"GIF"})
TRANSPARENT_INDEX = 255

RESAMPLING = {
    "normal": Image.Resampling.LANCZOS,
    "mixing": Image.Resampling.BILINEAR,
    "preview": Image.Resampling.NEAREST,
}

PILLOW_ERRORS = (OSError, ValueError, EOFError, KeyError, SyntaxError)


def get_pil_format(format_str: str) -> str:
    """Convert format string to PIL format name."""
    format_map = {
        "jpg": "JPEG",
        "jpeg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "gif": "GIF",
        "bmp": "BMP",
        "tif": "TIFF",
        "tiff": "TIFF",
    }
    return format_map.get(format_str.lower(), format_str.upper())


class PillowFrame(Frame):
    """A ``PIL.Image.Image`` plus its tag store."""

    def __init__(self, image: Image.Image, tags: dict[str, list[TagValue]] | None = None):
        self.image: Image.Image = image
        self._tags: dict[str, list[TagValue]] = {
            name: list(values) for name, values in (tags or {}).items()
        }

    @property
    @override
    def width(self) -> int:
        return self.image.width

    @property
    @override
    def height(self) -> int:
        return self.image.height

    @override
    def tags(self, name: str) -> list[TagValue]:
        return list(self._tags.get(name, []))

    @override
    def add_tag(self, name: str, value: TagValue) -> None:
        self._tags.setdefault(name, []).append(value)

    @override
    def delete_tag(self, name: str) -> int:
        return len(self._tags.pop(name, []))

    def tag(self, name: str) -> TagValue | None:
        """First value stored under ``name``, if any."""
        values = self._tags.get(name)
        return values[0] if values else None

    @override
    def __repr__(self) -> str:
        return f"PillowFrame(mode={self.image.mode!r}, size={self.image.size}, tags={sorted(self._tags)})"


# ─────────────────────────────────────────────────────────────
# Decoding helpers
# ─────────────────────────────────────────────────────────────


def _drain(producer: Producer) -> bytes:
    chunks: list[bytes] = []
    while True:
        chunk = producer(READ_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _open_source(source: ImageSource, format_hint: str | None) -> Image.Image:
    formats = [get_pil_format(format_hint)] if format_hint else None

    match source.kind:
        case IOKind.FILE:
            fp: str | BytesIO = cast(str, source.payload)
        case IOKind.BUFFER:
            fp = BytesIO(cast(bytes, source.payload))
        case IOKind.STREAM:
            fp = BytesIO(cast(Readable, source.payload).read())
        case IOKind.CALLBACK:
            fp = BytesIO(_drain(cast(Producer, source.payload)))

    return Image.open(fp, formats=formats)


def _frame_tags(image: Image.Image, image_format: str) -> dict[str, list[TagValue]]:
    """Translate Pillow's per-frame ``info`` into backend tag names."""
    info = image.info
    tags: dict[str, list[TagValue]] = {"i_format": [image_format]}

    dpi = info.get("dpi")
    if dpi:
        tags["i_xres"] = [float(dpi[0])]
        tags["i_yres"] = [float(dpi[1])]
    elif info.get("jfif_unit") == 0 and "jfif_density" in info:
        # density without a unit only describes the pixel aspect ratio
        density = info["jfif_density"]
        tags["i_xres"] = [float(density[0])]
        tags["i_yres"] = [float(density[1])]
        tags["i_aspect_only"] = [1]

    if image_format != "gif":
        return tags

    if "background" in info:
        # palette index, or an RGB tuple once Pillow has expanded the frame
        background = info["background"]
        tags["gif_background"] = [tuple(background) if isinstance(background, tuple) else int(background)]
    if "comment" in info:
        comment = info["comment"]
        tags["gif_comment"] = [comment.decode("latin-1") if isinstance(comment, bytes) else str(comment)]
    if "duration" in info:
        # Pillow counts milliseconds, GIF stores hundredths of a second
        tags["gif_delay"] = [int(info["duration"]) // 10]
    if "loop" in info:
        tags["gif_loop"] = [int(info["loop"])]

    disposal = getattr(image, "disposal_method", None)
    if disposal is not None:
        tags["gif_disposal"] = [int(disposal)]

    extent = getattr(image, "dispose_extent", None)
    if extent:
        tags["gif_left"] = [int(extent[0])]
        tags["gif_top"] = [int(extent[1])]
    tags["gif_screen_width"] = [image.width]
    tags["gif_screen_height"] = [image.height]

    return tags


# ─────────────────────────────────────────────────────────────
# Scaling helpers
# ─────────────────────────────────────────────────────────────


def target_size(width: int, height: int, params: ScaleParams) -> tuple[int, int]:
    """
    Work out the output size for a ``width`` x ``height`` frame.

    Precedence: ``constrain``, then explicit pixel sizes (``type`` decides
    between ``min``, ``max`` and ``nonprop`` when both are given), then
    scale factors. With nothing given the frame is halved.
    """
    if params.constrain is not None:
        new_width, new_height = params.constrain(width, height)
        return max(1, int(new_width)), max(1, int(new_height))

    if params.xpixels is not None and params.ypixels is not None:
        x_factor = params.xpixels / width
        y_factor = params.ypixels / height
        match params.type or "min":
            case "min":
                x_factor = y_factor = min(x_factor, y_factor)
            case "max":
                x_factor = y_factor = max(x_factor, y_factor)
            case "nonprop":
                pass
    elif params.xpixels is not None:
        x_factor = y_factor = params.xpixels / width
    elif params.ypixels is not None:
        x_factor = y_factor = params.ypixels / height
    else:
        factor = params.scalefactor or DEFAULT_SCALE_FACTOR
        x_factor = params.xscalefactor or factor
        y_factor = params.yscalefactor or factor

    return max(1, int(width * x_factor + 0.5)), max(1, int(height * y_factor + 0.5))


# ─────────────────────────────────────────────────────────────
# Encoding helpers
# ─────────────────────────────────────────────────────────────


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


def apply_threshold_transparency(image: Image.Image, threshold: int) -> Image.Image:
    """
    Reduce an alpha image to a palette image with one transparent index.

    Pixels whose alpha is below ``threshold`` become fully transparent, all
    others fully opaque.
    """
    rgba = image.convert("RGBA")
    alpha = np.asarray(rgba.getchannel("A"))
    mask = Image.fromarray(((alpha < threshold) * 255).astype(np.uint8))

    paletted = rgba.convert("RGB").convert(
        "P", palette=Image.Palette.ADAPTIVE, colors=TRANSPARENT_INDEX
    )
    paletted.paste(TRANSPARENT_INDEX, mask=mask)
    paletted.info["transparency"] = TRANSPARENT_INDEX
    return paletted


def _prepare_image(frame: PillowFrame, pil_format: str, options: ExportOptions) -> Image.Image:
    image = frame.image
    if pil_format in PALETTE_FORMATS and options.transp == "threshold" and _has_alpha(image):
        return apply_threshold_transparency(image, options.tr_threshold)
    # JPEG does not support alpha channel
    if pil_format == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
        return image.convert("RGB")
    return image


def _save_kwargs(frames: Sequence[PillowFrame], pil_format: str) -> dict[str, object]:
    first = frames[0]
    kwargs: dict[str, object] = {}

    xres, yres = first.tag("i_xres"), first.tag("i_yres")
    if xres is not None and yres is not None:
        kwargs["dpi"] = (float(cast(float, xres)), float(cast(float, yres)))

    if pil_format != "GIF":
        return kwargs

    delays = [frame.tag("gif_delay") for frame in frames]
    if any(delay is not None for delay in delays):
        kwargs["duration"] = [int(cast(int, delay or 0)) * 10 for delay in delays]
    disposals = [frame.tag("gif_disposal") for frame in frames]
    if any(disposal is not None for disposal in disposals):
        kwargs["disposal"] = [int(cast(int, disposal or 0)) for disposal in disposals]

    loop = first.tag("gif_loop")
    if loop is not None:
        kwargs["loop"] = int(cast(int, loop))
    background = first.tag("gif_background")
    if background is not None:
        kwargs["background"] = background
    comment = first.tag("gif_comment")
    if comment is not None:
        kwargs["comment"] = comment if isinstance(comment, bytes) else str(comment).encode("latin-1", errors="replace")
    interlace = first.tag("gif_interlace")
    if interlace is not None:
        kwargs["interlace"] = bool(interlace)
    if first.tag("gif_eliminate_unused") is not None:
        kwargs["optimize"] = bool(first.tag("gif_eliminate_unused"))

    return kwargs


def _deliver(target: ImageTarget, data: bytes) -> None:
    match target.kind:
        case IOKind.FILE:
            _ = Path(cast(str, target.payload)).write_bytes(data)
        case IOKind.BUFFER:
            cast(bytearray, target.payload)[:] = data
        case IOKind.STREAM:
            _ = cast(Writable, target.payload).write(data)
        case IOKind.CALLBACK:
            _ = target.payload(data)  # pyright: ignore[reportCallIssue]


class PillowBackend(ImagingBackend):
    """Imaging backend built on Pillow."""

    @property
    @override
    def name(self) -> str:
        return "pillow"

    @override
    def decode(self, source: ImageSource, format_hint: str | None = None) -> list[Frame]:
        try:
            with _open_source(source, format_hint) as img:
                image_format = (img.format or format_hint or "").lower()
                frames: list[Frame] = []
                for frame in ImageSequence.Iterator(img):
                    tags = _frame_tags(frame, image_format)
                    frames.append(PillowFrame(frame.copy(), tags))
        except PILLOW_ERRORS as exc:
            raise BackendError(str(exc) or type(exc).__name__) from exc

        logger.debug(f"Pillow decoded {len(frames)} frame(s) from {source.kind} source")
        return frames

    @override
    def scale(self, frame: Frame, params: ScaleParams) -> Frame:
        if not isinstance(frame, PillowFrame):
            raise BackendError(f"Cannot scale foreign frame type {type(frame).__name__}")

        try:
            size = target_size(frame.width, frame.height, params)
            resized = frame.image.resize(size, RESAMPLING[params.qtype or "normal"])
        except (*PILLOW_ERRORS, TypeError, ZeroDivisionError) as exc:
            raise BackendError(str(exc) or type(exc).__name__) from exc

        return PillowFrame(resized)

    @override
    def encode(
        self,
        target: ImageTarget,
        format: str | None,
        frames: Sequence[Frame],
        options: ExportOptions,
    ) -> None:
        if not frames:
            raise BackendError("No frames to write")
        pillow_frames = [frame for frame in frames if isinstance(frame, PillowFrame)]
        if len(pillow_frames) != len(frames):
            raise BackendError("Cannot encode frames from a different backend")

        image_format = format or cast(str | None, pillow_frames[0].tag("i_format"))
        if not image_format:
            raise BackendError("No output format set")
        pil_format = get_pil_format(image_format)

        Image.init()
        buffer = BytesIO()
        try:
            images = [_prepare_image(frame, pil_format, options) for frame in pillow_frames]
            kwargs = _save_kwargs(pillow_frames, pil_format)

            if len(images) > 1 and pil_format in Image.SAVE_ALL:
                kwargs["save_all"] = True
                kwargs["append_images"] = images[1:]
            elif len(images) > 1:
                logger.warning(f"{pil_format} cannot hold multiple frames; writing the first only")
                _ = kwargs.pop("duration", None)
                _ = kwargs.pop("disposal", None)

            if "transparency" in images[0].info:
                kwargs["transparency"] = images[0].info["transparency"]

            images[0].save(buffer, format=pil_format, **kwargs)
            data = buffer.getvalue()
            _deliver(target, data)
        except PILLOW_ERRORS as exc:
            raise BackendError(str(exc) or type(exc).__name__) from exc

        logger.debug(f"Pillow encoded {len(images)} frame(s) as {pil_format} ({len(data)} bytes)")
