"""Unit tests for scale argument resolution.

Tests positional/named precedence, alias order, pass-through options and
malformed calls.
"""

import pytest
from pydantic import ValidationError

from cl_image_simple.algo.scale_args import parse_scale_call, resolve_scale_params
from cl_image_simple.common.schemas import ScaleOptions, ScaleParams

# ============================================================================
# resolve_scale_params
# ============================================================================


def test_resolve_positional_only():
    """Test positional width, height and type map to canonical names."""
    params = resolve_scale_params(100, 80, "nonprop")

    assert params.xpixels == 100
    assert params.ypixels == 80
    assert params.type == "nonprop"


def test_resolve_nothing_given():
    """Test an empty call resolves to an empty parameter set."""
    assert resolve_scale_params().present() == {}


@pytest.mark.parametrize("alias", ["x", "xpixels", "width"])
def test_positional_width_beats_every_alias(alias: str):
    """Test positional width wins over each named width alias."""
    params = resolve_scale_params(100, options=ScaleOptions.model_validate({alias: 50}))
    assert params.xpixels == 100


@pytest.mark.parametrize("alias", ["y", "ypixels", "height"])
def test_positional_height_beats_every_alias(alias: str):
    """Test positional height wins over each named height alias."""
    params = resolve_scale_params(None, 100, options=ScaleOptions.model_validate({alias: 50}))
    assert params.ypixels == 100


def test_positional_type_beats_named_type():
    """Test positional type wins over the named one."""
    params = resolve_scale_params(10, 10, "max", ScaleOptions(type="nonprop"))
    assert params.type == "max"


def test_width_alias_priority():
    """Test x beats xpixels beats width."""
    assert resolve_scale_params(options=ScaleOptions(x=1, xpixels=2, width=3)).xpixels == 1
    assert resolve_scale_params(options=ScaleOptions(xpixels=2, width=3)).xpixels == 2
    assert resolve_scale_params(options=ScaleOptions(width=3)).xpixels == 3


def test_height_alias_priority():
    """Test y beats ypixels beats height."""
    assert resolve_scale_params(options=ScaleOptions(y=1, ypixels=2, height=3)).ypixels == 1
    assert resolve_scale_params(options=ScaleOptions(ypixels=2, height=3)).ypixels == 2
    assert resolve_scale_params(options=ScaleOptions(height=3)).ypixels == 3


def test_passthrough_options_only_when_present():
    """Test named-only options appear only when given."""
    params = resolve_scale_params(options=ScaleOptions(scalefactor=0.25, qtype="preview"))

    assert params.present() == {"scalefactor": 0.25, "qtype": "preview"}


def test_constrain_passthrough():
    """Test a constrain callable is passed through untouched."""

    def constrain(w: int, h: int) -> tuple[int, int]:
        return w // 2, h // 2

    params = resolve_scale_params(options=ScaleOptions(constrain=constrain))
    assert params.constrain is constrain


def test_losing_alias_is_not_merged():
    """Test named values that lose precedence leave no trace."""
    params = resolve_scale_params(100, options=ScaleOptions(width=50, xpixels=60))

    assert params.present() == {"xpixels": 100}


# ============================================================================
# parse_scale_call
# ============================================================================


def test_parse_keywords():
    """Test keyword arguments act as named options."""
    params = parse_scale_call((), {"height": 100, "width": 120, "type": "nonprop"})

    assert params == ScaleParams(xpixels=120, ypixels=100, type="nonprop")


def test_parse_trailing_mapping():
    """Test a trailing dict is taken as the options record."""
    params = parse_scale_call((100, 100, {"type": "min"}), {})

    assert params.xpixels == 100
    assert params.ypixels == 100
    assert params.type == "min"


def test_parse_trailing_scale_options():
    """Test a trailing ScaleOptions is taken as the options record."""
    params = parse_scale_call((ScaleOptions(y=40),), {})

    assert params.ypixels == 40
    assert params.xpixels is None


def test_parse_keywords_override_record():
    """Test keyword options are laid over the options record."""
    params = parse_scale_call(({"width": 10, "qtype": "normal"},), {"qtype": "mixing"})

    assert params.xpixels == 10
    assert params.qtype == "mixing"


def test_parse_positional_beats_keyword():
    """Test scale(100, width=50) uses 100."""
    assert parse_scale_call((100,), {"width": 50}).xpixels == 100


def test_parse_too_many_positionals():
    """Test more than three positional values is rejected."""
    with pytest.raises(TypeError, match="at most 3"):
        _ = parse_scale_call((1, 2, "min", "extra"), {})


def test_parse_unknown_option():
    """Test unknown named options are rejected."""
    with pytest.raises(ValidationError):
        _ = parse_scale_call((), {"colour": "red"})


def test_parse_invalid_type():
    """Test an unknown scale type is rejected."""
    with pytest.raises(ValidationError):
        _ = parse_scale_call((10, 10, "sideways"), {})


def test_parse_non_positive_size():
    """Test zero pixel sizes are rejected."""
    with pytest.raises(ValidationError):
        _ = parse_scale_call((0,), {})
