"""SimpleImage - read, scale and write images with flexible argument shapes.

    # scale "anim.gif" and keep the encoded result in memory
    data = SimpleImage.read("anim.gif").scale(100, 100, "min").data()

All decoding, scaling and encoding is done by an ``ImagingBackend``
(Pillow unless another backend is passed to ``read``).
"""

from collections.abc import Sequence
from typing import Self

from loguru import logger

from .algo.scale_args import parse_scale_call
from .algo.tag_copy import copy_tags
from .backends import Frame, ImagingBackend, get_default_backend
from .common.schemas import ExportOptions
from .common.sources import IOKind, ImageTarget, classify_source, classify_target
from .errors import BackendError, DecodeError, EncodeError, ScaleError

FORMAT_TAG = "i_format"


class SimpleImage:
    """
    An ordered sequence of frames plus the format used when writing them.

    Not safe for concurrent mutation; use one instance per task.
    """

    def __init__(
        self,
        frames: Sequence[Frame],
        format: str | None = None,
        backend: ImagingBackend | None = None,
    ):
        self._frames: list[Frame] = list(frames)
        self._format: str | None = format
        self._backend: ImagingBackend = backend or get_default_backend()

    @property
    def frames(self) -> list[Frame]:
        return self._frames

    @property
    def format(self) -> str | None:
        """Output format, e.g. ``"gif"``. Defaults to the format read."""
        return self._format

    @format.setter
    def format(self, value: str | None) -> None:
        self._format = value

    @property
    def backend(self) -> ImagingBackend:
        return self._backend

    def __repr__(self) -> str:
        return f"SimpleImage(format={self._format!r}, frames={len(self._frames)}, backend={self._backend.name!r})"

    # ─────────────────────────────────────────────────────────
    # Reading
    # ─────────────────────────────────────────────────────────

    @classmethod
    def read(
        cls,
        source: object,
        type: str | None = None,
        *,
        backend: ImagingBackend | None = None,
    ) -> Self:
        """
        Read every frame of an image.

        Args:
            source: A path, a bytes-like buffer, a readable file object, or a
                    function ``f(size) -> bytes`` returning ``b""`` at the end
            type: Optional format hint such as ``"gif"``
            backend: Imaging backend to use (default: shared PillowBackend)

        Returns:
            New SimpleImage whose format is the one found in the first frame

        Raises:
            DecodeError: If the backend cannot read the source
            TypeError: If the source has an unsupported shape
        """
        image_source = classify_source(source)
        backend = backend or get_default_backend()

        try:
            frames = backend.decode(image_source, type)
        except BackendError as exc:
            logger.error(f"Failed to read image from {image_source.kind} source: {exc.message}")
            raise DecodeError(exc.message) from exc

        if not frames:
            raise DecodeError("No frames decoded from source")

        format_tags = frames[0].tags(FORMAT_TAG)
        image_format = str(format_tags[0]) if format_tags else None

        logger.debug(f"Read {len(frames)} frame(s) of {image_format} via {backend.name}")
        return cls(frames, image_format, backend)

    def clone(self) -> Self:
        raise NotImplementedError("SimpleImage.clone is not implemented yet")

    # ─────────────────────────────────────────────────────────
    # Scaling
    # ─────────────────────────────────────────────────────────

    def scale(self, *args: object, **options: object) -> Self:
        """
        Scale every frame in place.

            img.scale(100)
            img.scale(y=100)
            img.scale(100, 100, "min")
            img.scale(100, 100, {"type": "min"})
            img.scale(height=100, width=100, type="nonprop")

        Positional arguments are ``width, height, type``. Named arguments can
        be given as keywords or as a trailing mapping. Width may be named
        ``x``, ``xpixels`` or ``width`` and height ``y``, ``ypixels`` or
        ``height``. A positional value always wins over a named one. Other
        named arguments: ``constrain``, ``scalefactor``, ``xscalefactor``,
        ``yscalefactor``, ``qtype``.

        Image tags are copied from the old frames where applicable.

        Raises:
            ScaleError: If the backend fails on any frame. The image is left
                in an unspecified state and should be discarded.
            TypeError: On too many positional arguments
            pydantic.ValidationError: On unknown or malformed named arguments
        """
        params = parse_scale_call(args, options)

        scaled: list[Frame] = []
        for index, frame in enumerate(self._frames):
            try:
                out = self._backend.scale(frame, params)
            except BackendError as exc:
                logger.error(f"Failed to scale frame {index}: {exc.message}")
                raise ScaleError(exc.message) from exc

            copy_tags(frame, out)
            logger.debug(f"Scaled frame {index} from {frame.width}x{frame.height} to {out.width}x{out.height}")
            scaled.append(out)

        self._frames = scaled
        return self

    # ─────────────────────────────────────────────────────────
    # Writing
    # ─────────────────────────────────────────────────────────

    def write(self, destination: object = None) -> Self | bytes:
        """
        Write image data to ``destination``.

        ``destination`` can be a path, a writable file object opened in binary
        mode, a ``bytearray`` that receives the data, or a function called with
        the encoded bytes. Without a destination this is the same as
        ``data()`` and the encoded bytes are returned.

        Returns:
            self when a destination was given, the encoded bytes otherwise

        Raises:
            EncodeError: If the backend cannot encode or deliver the data
        """
        if destination is None:
            return self.data()

        self._encode(classify_target(destination))
        return self

    def data(self) -> bytes:
        """Return the encoded image."""
        buffer = bytearray()
        self._encode(ImageTarget(IOKind.BUFFER, buffer))
        return bytes(buffer)

    to_bytes = data

    def _encode(self, target: ImageTarget) -> None:
        try:
            self._backend.encode(target, self._format, self._frames, ExportOptions())
        except BackendError as exc:
            logger.error(f"Failed to write {self._format} image to {target.kind} target: {exc.message}")
            raise EncodeError(exc.message) from exc
