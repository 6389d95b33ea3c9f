"""Pydantic schemas for scale and export parameters."""

from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ScaleType = Literal["min", "max", "nonprop"]
QualityType = Literal["normal", "preview", "mixing"]
Constrain = Callable[[int, int], tuple[int, int]]

TRANSPARENCY_MODE = "threshold"
TRANSPARENCY_THRESHOLD = 50


# ─────────────────────────────────────────────────────────────
# Named scale options, as supplied by callers
# ─────────────────────────────────────────────────────────────


class ScaleOptions(BaseModel):
    """Named-only arguments accepted by ``SimpleImage.scale``.

    Width, height and type each have several accepted spellings. Which one is
    used is decided by ``resolve_scale_params``; this record only carries what
    the caller wrote.
    """

    x: int | None = None
    xpixels: int | None = None
    width: int | None = None
    y: int | None = None
    ypixels: int | None = None
    height: int | None = None
    type: ScaleType | None = None

    constrain: Constrain | None = None
    scalefactor: float | None = Field(default=None, gt=0)
    xscalefactor: float | None = Field(default=None, gt=0)
    yscalefactor: float | None = Field(default=None, gt=0)
    qtype: QualityType | None = None

    model_config = ConfigDict(extra="forbid")


# ─────────────────────────────────────────────────────────────
# Canonical parameter set handed to the backend
# ─────────────────────────────────────────────────────────────


class ScaleParams(BaseModel):
    """Normalized scale parameters, one field per meaning."""

    xpixels: int | None = Field(default=None, gt=0)
    ypixels: int | None = Field(default=None, gt=0)
    type: ScaleType | None = None
    constrain: Constrain | None = None
    scalefactor: float | None = None
    xscalefactor: float | None = None
    yscalefactor: float | None = None
    qtype: QualityType | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def present(self) -> dict[str, object]:
        """Return only the parameters that were explicitly given."""
        return {name: value for name, value in self if value is not None}


class ExportOptions(BaseModel):
    """Transparency handling applied to every export."""

    transp: str = TRANSPARENCY_MODE
    tr_threshold: int = Field(default=TRANSPARENCY_THRESHOLD, ge=0, le=255)

    model_config = ConfigDict(frozen=True)
