"""Resolve the flexible ``scale`` call shapes into one ``ScaleParams``."""

from collections.abc import Mapping

from ..common.schemas import ScaleOptions, ScaleParams

# Named aliases in priority order; a positional value always comes first.
WIDTH_ALIASES = ("x", "xpixels", "width")
HEIGHT_ALIASES = ("y", "ypixels", "height")
TYPE_ALIASES = ("type",)

PASSTHROUGH_OPTIONS = ("constrain", "scalefactor", "xscalefactor", "yscalefactor", "qtype")

MAX_POSITIONAL = 3


def _first_defined(positional: object, options: ScaleOptions, aliases: tuple[str, ...]) -> object:
    for candidate in (positional, *(getattr(options, name) for name in aliases)):
        if candidate is not None:
            return candidate
    return None


def resolve_scale_params(
    width: int | None = None,
    height: int | None = None,
    type: str | None = None,
    options: ScaleOptions | None = None,
) -> ScaleParams:
    """
    Build the canonical parameter set.

    For width, height and type the first defined value wins, checking the
    positional value and then each named alias in order. The losing values
    are dropped, never merged.

    Args:
        width: Positional width
        height: Positional height
        type: Positional scale type
        options: Named options

    Returns:
        ScaleParams with only the resolved fields set
    """
    options = options or ScaleOptions()

    resolved: dict[str, object] = {
        "xpixels": _first_defined(width, options, WIDTH_ALIASES),
        "ypixels": _first_defined(height, options, HEIGHT_ALIASES),
        "type": _first_defined(type, options, TYPE_ALIASES),
    }
    for name in PASSTHROUGH_OPTIONS:
        resolved[name] = getattr(options, name)

    return ScaleParams.model_validate(
        {name: value for name, value in resolved.items() if value is not None}
    )


def parse_scale_call(args: tuple[object, ...], named: Mapping[str, object]) -> ScaleParams:
    """
    Split a ``scale(*args, **named)`` call into positional values and options.

    A trailing ``Mapping`` or ``ScaleOptions`` among the positional arguments
    is the options record. Keyword arguments are laid over it.

    Raises:
        TypeError: If more than three positional values remain
        pydantic.ValidationError: If an option is unknown or malformed
    """
    positional = list(args)
    record: dict[str, object] = {}

    if positional and isinstance(positional[-1], ScaleOptions):
        record = positional.pop().model_dump(exclude_none=True)
    elif positional and isinstance(positional[-1], Mapping):
        record = dict(positional.pop())

    if len(positional) > MAX_POSITIONAL:
        raise TypeError(
            f"scale() takes at most {MAX_POSITIONAL} positional arguments "
            f"(width, height, type), got {len(positional)}"
        )

    record.update(named)
    options = ScaleOptions.model_validate(record)

    width, height, type_ = (positional + [None] * MAX_POSITIONAL)[:MAX_POSITIONAL]
    return resolve_scale_params(width, height, type_, options)  # type: ignore[arg-type]
