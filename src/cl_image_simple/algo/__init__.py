"""Argument normalization and tag propagation."""

from .scale_args import parse_scale_call, resolve_scale_params
from .tag_copy import COPIED_TAGS, RESCALED_TAGS, copy_tags, round_half_up

__all__ = [
    "COPIED_TAGS",
    "RESCALED_TAGS",
    "copy_tags",
    "parse_scale_call",
    "resolve_scale_params",
    "round_half_up",
]
