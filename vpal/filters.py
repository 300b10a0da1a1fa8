from typing import Callable, Sequence


class SwatchFilter:
    """
    Decides whether a color may appear in a palette.

    Subclasses override `is_allowed`. Any object exposing the same method can be
    used in a filter list; plain callables can be wrapped with FunctionFilter.
    """

    def is_allowed(self, rgb: int, hsl: Sequence[float]) -> bool:
        raise NotImplementedError


class FunctionFilter(SwatchFilter):
    def __init__(self, func: Callable[[int, Sequence[float]], bool]):
        self.func = func

    def is_allowed(self, rgb: int, hsl: Sequence[float]) -> bool:
        return bool(self.func(rgb, hsl))

    def __repr__(self):
        return f"FunctionFilter({getattr(self.func, '__name__', self.func)!r})"


class DefaultFilter(SwatchFilter):
    """Rejects near-black, near-white, and colors close to the red side of the I line."""

    BLACK_MAX_LIGHTNESS = 0.05
    WHITE_MIN_LIGHTNESS = 0.95

    def is_allowed(self, rgb: int, hsl: Sequence[float]) -> bool:
        return not self.is_white(hsl) and not self.is_black(hsl) and not self.is_near_red_i_line(hsl)

    def is_black(self, hsl: Sequence[float]) -> bool:
        return hsl[2] <= self.BLACK_MAX_LIGHTNESS

    def is_white(self, hsl: Sequence[float]) -> bool:
        return hsl[2] >= self.WHITE_MIN_LIGHTNESS

    def is_near_red_i_line(self, hsl: Sequence[float]) -> bool:
        # skin tones
        return 10.0 <= hsl[0] <= 37.0 and hsl[1] <= 0.82

    def __repr__(self):
        return "DefaultFilter()"


DEFAULT_FILTER = DefaultFilter()


def as_filter(candidate) -> SwatchFilter:
    """Accept a filter object or a bare `(rgb, hsl) -> bool` callable."""
    if hasattr(candidate, "is_allowed"):
        return candidate
    if callable(candidate):
        return FunctionFilter(candidate)
    raise TypeError(f"Not a filter: {candidate!r}")
