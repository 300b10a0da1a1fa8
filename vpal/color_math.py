"""
Packed-ARGB color helpers: channel access, RGB <-> HSL, luminance and contrast.

Colors are plain ints laid out as 0xAARRGGBB (alpha in bits 24-31). HSL values
are 3-item lists of [hue in [0, 360), saturation in [0, 1], lightness in [0, 1]].
"""
import math
from typing import List, Sequence

from vpal.errors import InvalidArgumentError

WHITE = 0xFFFFFFFF
BLACK = 0xFF000000
TRANSPARENT = 0x00000000

# Returned by calculate_minimum_alpha when even an opaque foreground fails.
NO_ALPHA = -1

MIN_ALPHA_SEARCH_MAX_ITERATIONS = 10
MIN_ALPHA_SEARCH_PRECISION = 10


def red(color: int) -> int:
    return (color >> 16) & 0xFF


def green(color: int) -> int:
    return (color >> 8) & 0xFF


def blue(color: int) -> int:
    return color & 0xFF


def alpha(color: int) -> int:
    return (color >> 24) & 0xFF


def rgb(r: int, g: int, b: int) -> int:
    """Pack an opaque color."""
    return 0xFF000000 | ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def argb(a: int, r: int, g: int, b: int) -> int:
    return ((a & 0xFF) << 24) | ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def to_hex(color: int, include_alpha: bool = False) -> str:
    """Format a packed color as '#RRGGBB' (or '#AARRGGBB')."""
    if include_alpha:
        return f"#{alpha(color):02X}{red(color):02X}{green(color):02X}{blue(color):02X}"
    return f"#{red(color):02X}{green(color):02X}{blue(color):02X}"


def rgb_to_hsl(r: int, g: int, b: int) -> List[float]:
    """
    Convert 8-bit RGB components to HSL.

    Achromatic colors (max == min) get hue and saturation 0. When several
    channels share the maximum, red wins over green, and green over blue.
    """
    rf = r / 255.0
    gf = g / 255.0
    bf = b / 255.0
    max_c = max(rf, gf, bf)
    min_c = min(rf, gf, bf)
    delta = max_c - min_c
    lightness = (max_c + min_c) / 2.0

    if max_c == min_c:
        hue = saturation = 0.0
    else:
        if max_c == rf:
            hue = ((gf - bf) / delta) % 6.0
        elif max_c == gf:
            hue = ((bf - rf) / delta) + 2.0
        else:
            hue = ((rf - gf) / delta) + 4.0
        saturation = delta / (1.0 - abs(2.0 * lightness - 1.0))

    return [(hue * 60.0) % 360.0, saturation, lightness]


def color_to_hsl(color: int) -> List[float]:
    return rgb_to_hsl(red(color), green(color), blue(color))


def hsl_to_color(hsl: Sequence[float]) -> int:
    """Convert an HSL triple back to an opaque packed color."""
    h, s, l = hsl[0], hsl[1], hsl[2]
    c = (1.0 - abs(2.0 * l - 1.0)) * s
    m = l - 0.5 * c
    x = c * (1.0 - abs((h / 60.0 % 2.0) - 1.0))

    hue_segment = int(h) // 60
    r = g = b = 0
    if hue_segment == 0:
        r, g, b = round(255 * (c + m)), round(255 * (x + m)), round(255 * m)
    elif hue_segment == 1:
        r, g, b = round(255 * (x + m)), round(255 * (c + m)), round(255 * m)
    elif hue_segment == 2:
        r, g, b = round(255 * m), round(255 * (c + m)), round(255 * (x + m))
    elif hue_segment == 3:
        r, g, b = round(255 * m), round(255 * (x + m)), round(255 * (c + m))
    elif hue_segment == 4:
        r, g, b = round(255 * (x + m)), round(255 * m), round(255 * (c + m))
    elif hue_segment in (5, 6):
        # 6 only happens when a hue of 360 sneaks in through rounding
        r, g, b = round(255 * (c + m)), round(255 * m), round(255 * (x + m))

    r = max(0, min(255, r))
    g = max(0, min(255, g))
    b = max(0, min(255, b))
    return rgb(r, g, b)


def _linearize(component: int) -> float:
    value = component / 255.0
    if value < 0.03928:
        return value / 12.92
    return math.pow((value + 0.055) / 1.055, 2.4)


def calculate_luminance(color: int) -> float:
    """Relative luminance of a color, ignoring alpha."""
    return (0.2126 * _linearize(red(color))
            + 0.7152 * _linearize(green(color))
            + 0.0722 * _linearize(blue(color)))


def _require_opaque_background(background: int) -> None:
    if alpha(background) != 255:
        raise InvalidArgumentError(f"background can not be translucent: {to_hex(background, True)}")


def calculate_contrast(foreground: int, background: int) -> float:
    """
    Contrast ratio between two colors.

    A translucent foreground is composited over the (opaque) background first.

    Raises:
        InvalidArgumentError: If the background is not fully opaque.
    """
    _require_opaque_background(background)
    if alpha(foreground) < 255:
        foreground = composite_colors(foreground, background)

    luminance1 = calculate_luminance(foreground) + 0.05
    luminance2 = calculate_luminance(background) + 0.05
    return max(luminance1, luminance2) / min(luminance1, luminance2)


def composite_alpha(foreground_alpha: int, background_alpha: int) -> int:
    return 0xFF - (((0xFF - background_alpha) * (0xFF - foreground_alpha)) // 0xFF)


def composite_component(fg_c: int, fg_a: int, bg_c: int, bg_a: int, a: int) -> int:
    if a == 0:
        return 0
    return ((0xFF * fg_c * fg_a) + (bg_c * bg_a * (0xFF - fg_a))) // (a * 0xFF)


def composite_colors(foreground: int, background: int) -> int:
    """Composite foreground over background ("over" operator, integer math)."""
    bg_alpha = alpha(background)
    fg_alpha = alpha(foreground)
    a = composite_alpha(fg_alpha, bg_alpha)
    r = composite_component(red(foreground), fg_alpha, red(background), bg_alpha, a)
    g = composite_component(green(foreground), fg_alpha, green(background), bg_alpha, a)
    b = composite_component(blue(foreground), fg_alpha, blue(background), bg_alpha, a)
    return argb(a, r, g, b)


def set_alpha_component(color: int, alpha_value: int) -> int:
    if alpha_value < 0 or alpha_value > 255:
        raise InvalidArgumentError(f"alpha must be between 0 and 255, got {alpha_value}.")
    return (color & 0x00FFFFFF) | (alpha_value << 24)


def calculate_minimum_alpha(foreground: int, background: int, min_contrast_ratio: float) -> int:
    """
    Find the lowest alpha for `foreground` that still reaches `min_contrast_ratio`
    against `background`.

    The search is a bounded binary search; the upper end of the final window is
    returned, which always passes but is not necessarily the tightest value.

    Returns:
        int: Alpha in [0, 255], or NO_ALPHA if an opaque foreground already fails.

    Raises:
        InvalidArgumentError: If the background is not fully opaque.
    """
    _require_opaque_background(background)

    test_foreground = set_alpha_component(foreground, 255)
    if calculate_contrast(test_foreground, background) < min_contrast_ratio:
        return NO_ALPHA

    num_iterations = 0
    min_alpha = 0
    max_alpha = 255
    while (num_iterations < MIN_ALPHA_SEARCH_MAX_ITERATIONS
           and (max_alpha - min_alpha) > MIN_ALPHA_SEARCH_PRECISION):
        test_alpha = (min_alpha + max_alpha) // 2
        test_foreground = set_alpha_component(foreground, test_alpha)
        if calculate_contrast(test_foreground, background) < min_contrast_ratio:
            min_alpha = test_alpha
        else:
            max_alpha = test_alpha
        num_iterations += 1

    return max_alpha
