"""Carry frame metadata across a scale operation."""

import math

from ..backends.base import Frame

COPIED_TAGS: tuple[str, ...] = (
    "i_format",
    "i_xres",
    "i_yres",
    "i_aspect_only",
    "gif_background",
    "gif_comment",
    "gif_delay",
    "gif_disposal",
    "gif_eliminate_unused",
    "gif_interlace",
    "gif_loop",
)

# tag -> axis whose scale factor applies
RESCALED_TAGS: dict[str, str] = {
    "gif_left": "x",
    "gif_screen_width": "x",
    "gif_top": "y",
    "gif_screen_height": "y",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def copy_tags(source: Frame, output: Frame) -> None:
    """
    Copy allow-listed tags from ``source`` onto the scaled ``output`` frame.

    Tags in ``COPIED_TAGS`` replace whatever the output holds, keeping every
    value in order. Position and size tags in ``RESCALED_TAGS`` are multiplied
    by the width or height ratio between the two frames and rounded.
    Anything else on the source is left behind.

    Args:
        source: Frame before scaling (non-zero dimensions)
        output: Frame returned by the backend
    """
    for name in COPIED_TAGS:
        _ = output.delete_tag(name)
        for value in source.tags(name):
            output.add_tag(name, value)

    factors = {
        "x": output.width / source.width,
        "y": output.height / source.height,
    }
    for name, axis in RESCALED_TAGS.items():
        values = source.tags(name)
        if not values:
            continue
        _ = output.delete_tag(name)
        for value in values:
            output.add_tag(name, round_half_up(float(value) * factors[axis]))
