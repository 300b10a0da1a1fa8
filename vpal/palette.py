import logging
from typing import Dict, Iterable, List, Optional, Sequence

from vpal.filters import DEFAULT_FILTER, as_filter
from vpal.quantize import ColorCutQuantizer
from vpal.swatch import Swatch
from vpal.target import (
    Target,
    DEFAULT_TARGETS,
    LIGHT_VIBRANT,
    VIBRANT,
    DARK_VIBRANT,
    LIGHT_MUTED,
    MUTED,
    DARK_MUTED,
)

logger = logging.getLogger(__name__)

DEFAULT_CALCULATE_NUMBER_COLORS = 16


class Palette:
    """
    Swatches extracted from an image plus the swatch picked for each target.

    `generate()` scores every target once, in list order. It is not reentrant;
    callers sharing a Palette across threads must serialize calls themselves.
    """

    def __init__(self, swatches: Sequence[Swatch], targets: Sequence[Target]):
        self._swatches: List[Swatch] = list(swatches)
        self._targets: List[Target] = list(targets)
        self._selected_swatches: Dict[Target, Optional[Swatch]] = {}
        self._used_colors: Dict[int, bool] = {}
        self._dominant_swatch = self._find_dominant_swatch()

    def generate(self) -> "Palette":
        for target in self._targets:
            target.normalize_weights()
            self._selected_swatches[target] = self._generate_scored_target(target)
        self._used_colors.clear()
        logger.debug("Selected swatches: " + ", ".join(
            f"{t.name or 'custom'}={s.hex if s else None}" for t, s in self._selected_swatches.items()))
        return self

    @property
    def swatches(self) -> List[Swatch]:
        return list(self._swatches)

    @property
    def targets(self) -> List[Target]:
        return list(self._targets)

    def swatch_colors(self) -> List[int]:
        return [s.rgb for s in self._swatches]

    def get_swatch_for_target(self, target: Target) -> Optional[Swatch]:
        return self._selected_swatches.get(target)

    def get_color_for_target(self, target: Target, default_color: int) -> int:
        swatch = self.get_swatch_for_target(target)
        return swatch.rgb if swatch is not None else default_color

    @property
    def dominant_swatch(self) -> Optional[Swatch]:
        return self._dominant_swatch

    def dominant_color(self, default_color: int) -> int:
        return self._dominant_swatch.rgb if self._dominant_swatch is not None else default_color

    @property
    def light_vibrant_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(LIGHT_VIBRANT)

    @property
    def vibrant_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(VIBRANT)

    @property
    def dark_vibrant_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(DARK_VIBRANT)

    @property
    def light_muted_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(LIGHT_MUTED)

    @property
    def muted_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(MUTED)

    @property
    def dark_muted_swatch(self) -> Optional[Swatch]:
        return self.get_swatch_for_target(DARK_MUTED)

    def light_vibrant_color(self, default_color: int) -> int:
        return self.get_color_for_target(LIGHT_VIBRANT, default_color)

    def vibrant_color(self, default_color: int) -> int:
        return self.get_color_for_target(VIBRANT, default_color)

    def dark_vibrant_color(self, default_color: int) -> int:
        return self.get_color_for_target(DARK_VIBRANT, default_color)

    def light_muted_color(self, default_color: int) -> int:
        return self.get_color_for_target(LIGHT_MUTED, default_color)

    def muted_color(self, default_color: int) -> int:
        return self.get_color_for_target(MUTED, default_color)

    def dark_muted_color(self, default_color: int) -> int:
        return self.get_color_for_target(DARK_MUTED, default_color)

    def _generate_scored_target(self, target: Target) -> Optional[Swatch]:
        max_score_swatch = self._get_max_scored_swatch_for_target(target)
        if max_score_swatch is not None and target.is_exclusive():
            self._used_colors[max_score_swatch.rgb] = True
        return max_score_swatch

    def _get_max_scored_swatch_for_target(self, target: Target) -> Optional[Swatch]:
        max_score = 0.0
        max_score_swatch = None
        for swatch in self._swatches:
            if self._should_be_scored_for_target(swatch, target):
                score = self._generate_score(swatch, target)
                if max_score_swatch is None or score > max_score:
                    max_score_swatch = swatch
                    max_score = score
        return max_score_swatch

    def _should_be_scored_for_target(self, swatch: Swatch, target: Target) -> bool:
        _, saturation, lightness = swatch.hsl
        return (target.minimum_saturation <= saturation <= target.maximum_saturation
                and target.minimum_lightness <= lightness <= target.maximum_lightness
                and not self._used_colors.get(swatch.rgb, False))

    def _generate_score(self, swatch: Swatch, target: Target) -> float:
        _, saturation, lightness = swatch.hsl
        max_population = self._dominant_swatch.population if self._dominant_swatch is not None else 1

        score = 0.0
        if target.saturation_weight > 0:
            score += target.saturation_weight * (1.0 - abs(saturation - target.target_saturation))
        if target.lightness_weight > 0:
            score += target.lightness_weight * (1.0 - abs(lightness - target.target_lightness))
        if target.population_weight > 0:
            score += target.population_weight * (swatch.population / max_population)
        return score

    def _find_dominant_swatch(self) -> Optional[Swatch]:
        max_swatch = None
        for swatch in self._swatches:
            if max_swatch is None or swatch.population > max_swatch.population:
                max_swatch = swatch
        return max_swatch


class PaletteBuilder:
    """
    Collects palette settings, then quantizes pixels and scores targets.

    Starts with max_colors=16, the default filter, and the six canonical targets.
    Setters return the builder so calls can be chained.
    """

    def __init__(self):
        self._max_colors = DEFAULT_CALCULATE_NUMBER_COLORS
        self._filters: list = [DEFAULT_FILTER]
        self._targets: List[Target] = list(DEFAULT_TARGETS)

    def maximum_color_count(self, colors: int) -> "PaletteBuilder":
        """Landscapes do well with 10-16; images dominated by faces want closer to 24."""
        self._max_colors = colors
        return self

    def add_filter(self, swatch_filter) -> "PaletteBuilder":
        if swatch_filter is not None:
            self._filters.append(as_filter(swatch_filter))
        return self

    def clear_filters(self) -> "PaletteBuilder":
        self._filters.clear()
        return self

    def add_target(self, target: Target) -> "PaletteBuilder":
        if not any(t is target for t in self._targets):
            self._targets.append(target)
        return self

    def clear_targets(self) -> "PaletteBuilder":
        self._targets.clear()
        return self

    @property
    def max_colors(self) -> int:
        return self._max_colors

    @property
    def filters(self) -> list:
        return list(self._filters)

    @property
    def targets(self) -> List[Target]:
        return list(self._targets)

    def generate(self, pixels) -> Palette:
        """
        Build a Palette from packed ARGB pixels.

        Args:
            pixels: A list or numpy array of packed ARGB ints, or a pixel source
                    object with a `get_pixels()` method. Lists and arrays are
                    overwritten with quantized values.
        """
        if pixels is None:
            raise ValueError("pixels must not be None")
        if hasattr(pixels, "get_pixels"):
            pixels = pixels.get_pixels()

        quantizer = ColorCutQuantizer(pixels, self._max_colors, self._filters or None)
        swatches = quantizer.get_quantized_colors()
        logger.debug(f"Quantizer produced {len(swatches)} swatches")

        return Palette(swatches, self._targets).generate()


def generate_palette(
    pixels,
    max_colors: int = DEFAULT_CALCULATE_NUMBER_COLORS,
    filters: Optional[Iterable] = None,
    targets: Optional[Iterable[Target]] = None,
) -> Palette:
    """
    One-call version of PaletteBuilder.

    Args:
        pixels: Packed ARGB pixels or a pixel source (see PaletteBuilder.generate).
        max_colors (int): Maximum swatch count. Default 16.
        filters: Filters to use instead of the default one. Pass [] to disable filtering.
        targets: Targets to use instead of the six canonical ones.
    """
    builder = PaletteBuilder().maximum_color_count(max_colors)
    if filters is not None:
        builder.clear_filters()
        for f in filters:
            builder.add_filter(f)
    if targets is not None:
        builder.clear_targets()
        for t in targets:
            builder.add_target(t)
    return builder.generate(pixels)
