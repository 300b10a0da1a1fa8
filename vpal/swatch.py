from functools import cached_property
from typing import Optional, Sequence, Tuple

from vpal import color_math
from vpal.color_math import BLACK, WHITE, NO_ALPHA

MIN_CONTRAST_TITLE_TEXT = 3.0
MIN_CONTRAST_BODY_TEXT = 4.5


class Swatch:
    """
    A palette color together with the number of pixels it stands for.

    `hsl`, `title_text_color` and `body_text_color` are computed on first access
    and cached; they depend only on `rgb` (and on `hsl`, when one is given).
    """

    def __init__(self, rgb: int, population: int, hsl: Optional[Sequence[float]] = None):
        self._rgb = color_math.rgb(color_math.red(rgb), color_math.green(rgb), color_math.blue(rgb))
        self._population = int(population)
        self._hsl = (float(hsl[0]), float(hsl[1]), float(hsl[2])) if hsl is not None else None

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int, population: int) -> "Swatch":
        return cls(color_math.rgb(r, g, b), population)

    @classmethod
    def from_hsl(cls, hsl: Sequence[float], population: int) -> "Swatch":
        # keeps the caller's HSL rather than the round-tripped one
        return cls(color_math.hsl_to_color(hsl), population, hsl=hsl)

    @property
    def rgb(self) -> int:
        return self._rgb

    @property
    def population(self) -> int:
        return self._population

    @property
    def red(self) -> int:
        return color_math.red(self._rgb)

    @property
    def green(self) -> int:
        return color_math.green(self._rgb)

    @property
    def blue(self) -> int:
        return color_math.blue(self._rgb)

    @property
    def hex(self) -> str:
        return color_math.to_hex(self._rgb)

    @cached_property
    def hsl(self) -> Tuple[float, float, float]:
        """(hue [0, 360), saturation [0, 1], lightness [0, 1])"""
        if self._hsl is not None:
            return self._hsl
        h, s, l = color_math.color_to_hsl(self._rgb)
        return (h, s, l)

    @property
    def title_text_color(self) -> int:
        """A color for title text drawn over this swatch, with at least 3:1 contrast."""
        return self._text_colors[0]

    @property
    def body_text_color(self) -> int:
        """A color for body text drawn over this swatch, with at least 4.5:1 contrast."""
        return self._text_colors[1]

    @cached_property
    def _text_colors(self) -> Tuple[int, int]:
        # Try white first; most swatches are dark enough for it.
        light_body_alpha = color_math.calculate_minimum_alpha(WHITE, self._rgb, MIN_CONTRAST_BODY_TEXT)
        light_title_alpha = color_math.calculate_minimum_alpha(WHITE, self._rgb, MIN_CONTRAST_TITLE_TEXT)

        if light_body_alpha != NO_ALPHA and light_title_alpha != NO_ALPHA:
            return (color_math.set_alpha_component(WHITE, light_title_alpha),
                    color_math.set_alpha_component(WHITE, light_body_alpha))

        dark_body_alpha = color_math.calculate_minimum_alpha(BLACK, self._rgb, MIN_CONTRAST_BODY_TEXT)
        dark_title_alpha = color_math.calculate_minimum_alpha(BLACK, self._rgb, MIN_CONTRAST_TITLE_TEXT)

        if dark_body_alpha != NO_ALPHA and dark_title_alpha != NO_ALPHA:
            return (color_math.set_alpha_component(BLACK, dark_title_alpha),
                    color_math.set_alpha_component(BLACK, dark_body_alpha))

        # Neither base color works for both roles, so title and body may end up
        # with different base colors.
        if light_title_alpha != NO_ALPHA:
            title = color_math.set_alpha_component(WHITE, light_title_alpha)
        else:
            title = color_math.set_alpha_component(BLACK, dark_title_alpha)
        if light_body_alpha != NO_ALPHA:
            body = color_math.set_alpha_component(WHITE, light_body_alpha)
        else:
            body = color_math.set_alpha_component(BLACK, dark_body_alpha)
        return (title, body)

    def __eq__(self, other):
        if not isinstance(other, Swatch):
            return NotImplemented
        return self._rgb == other._rgb and self._population == other._population

    def __hash__(self):
        return hash((self._rgb, self._population))

    def __repr__(self):
        h, s, l = self.hsl
        return (f"Swatch(rgb={self.hex}, population={self._population}, "
                f"hsl=({h:.1f}, {s:.3f}, {l:.3f}))")
