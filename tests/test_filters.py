import pytest
from vpal import color_math
from vpal.filters import DEFAULT_FILTER, DefaultFilter, FunctionFilter, as_filter


def test_default_filter_rejects_extremes():
    assert not DEFAULT_FILTER.is_allowed(color_math.BLACK, [0.0, 0.0, 0.0])
    assert not DEFAULT_FILTER.is_allowed(color_math.WHITE, [0.0, 0.0, 1.0])
    assert not DEFAULT_FILTER.is_allowed(0, [0.0, 0.0, 0.05])
    assert not DEFAULT_FILTER.is_allowed(0, [0.0, 0.0, 0.95])


def test_default_filter_red_i_line():
    # skin-tone hue with moderate saturation
    assert not DEFAULT_FILTER.is_allowed(0, [20.0, 0.6, 0.5])
    assert not DEFAULT_FILTER.is_allowed(0, [10.0, 0.82, 0.5])
    assert not DEFAULT_FILTER.is_allowed(0, [37.0, 0.1, 0.5])
    # same hue but saturated enough
    assert DEFAULT_FILTER.is_allowed(0, [20.0, 0.9, 0.5])
    # just outside the hue band
    assert DEFAULT_FILTER.is_allowed(0, [9.9, 0.5, 0.5])
    assert DEFAULT_FILTER.is_allowed(0, [37.1, 0.5, 0.5])


def test_default_filter_accepts_ordinary_colors():
    blue = color_math.rgb(0, 0, 248)
    assert DEFAULT_FILTER.is_allowed(blue, color_math.color_to_hsl(blue))
    grey = color_math.rgb(24, 24, 24)
    assert DEFAULT_FILTER.is_allowed(grey, color_math.color_to_hsl(grey))


def test_function_filter_and_as_filter():
    no_blue = lambda rgb, hsl: color_math.blue(rgb) < 128
    wrapped = as_filter(no_blue)
    assert isinstance(wrapped, FunctionFilter)
    assert wrapped.is_allowed(color_math.rgb(10, 10, 10), [0, 0, 0])
    assert not wrapped.is_allowed(color_math.rgb(10, 10, 200), [0, 0, 0])

    existing = DefaultFilter()
    assert as_filter(existing) is existing

    with pytest.raises(TypeError):
        as_filter(42)
