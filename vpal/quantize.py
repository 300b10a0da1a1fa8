"""
Color-cut quantizer.

A median-cut variant tuned for picking out distinct colors rather than
representative ones: color space is treated as an RGB cube that is repeatedly
divided, always splitting the box with the largest volume (not the largest
population), until the requested number of boxes exists. Each box then
contributes its population-weighted average color.
"""
import heapq
import logging
from collections.abc import MutableSequence, Sequence
from typing import List, Optional

import numpy as np

from vpal import color_math
from vpal.errors import InvalidArgumentError, InvariantViolationError
from vpal.filters import as_filter
from vpal.swatch import Swatch

logger = logging.getLogger(__name__)

COMPONENT_RED = -3
COMPONENT_GREEN = -2
COMPONENT_BLUE = -1

QUANTIZE_WORD_WIDTH = 5


def modify_word_width(value, current_width: int, target_width: int):
    """Widen by left shift, narrow by keeping the most significant bits. Works on ints and arrays."""
    if target_width > current_width:
        new_value = value << (target_width - current_width)
    else:
        new_value = value >> (current_width - target_width)
    return new_value & ((1 << target_width) - 1)


def quantized_red(color, word_width: int = QUANTIZE_WORD_WIDTH):
    return (color >> (word_width + word_width)) & ((1 << word_width) - 1)


def quantized_green(color, word_width: int = QUANTIZE_WORD_WIDTH):
    return (color >> word_width) & ((1 << word_width) - 1)


def quantized_blue(color, word_width: int = QUANTIZE_WORD_WIDTH):
    return color & ((1 << word_width) - 1)


def quantize_from_rgb888(color, word_width: int = QUANTIZE_WORD_WIDTH):
    """Pack an ARGB color (or an array of them) into the reduced `r<<2w | g<<w | b` space."""
    r = modify_word_width((color >> 16) & 0xFF, 8, word_width)
    g = modify_word_width((color >> 8) & 0xFF, 8, word_width)
    b = modify_word_width(color & 0xFF, 8, word_width)
    return (r << (word_width + word_width)) | (g << word_width) | b


def approximate_components_to_rgb888(r: int, g: int, b: int, word_width: int = QUANTIZE_WORD_WIDTH) -> int:
    return color_math.rgb(
        int(modify_word_width(r, word_width, 8)),
        int(modify_word_width(g, word_width, 8)),
        int(modify_word_width(b, word_width, 8)),
    )


def approximate_to_rgb888(color: int, word_width: int = QUANTIZE_WORD_WIDTH) -> int:
    """Expand a quantized color back to opaque RGB888. Shifts only, no rounding."""
    color = int(color)
    return approximate_components_to_rgb888(
        quantized_red(color, word_width),
        quantized_green(color, word_width),
        quantized_blue(color, word_width),
        word_width,
    )


def modify_significant_octet(colors: np.ndarray, dimension: int, lower: int, upper: int,
                             word_width: int = QUANTIZE_WORD_WIDTH) -> None:
    """
    Re-key colors[lower:upper+1] in place so that the chosen component occupies
    the most significant bits. The swap is its own inverse.
    """
    if dimension == COMPONENT_RED:
        return
    segment = colors[lower:upper + 1]
    r = quantized_red(segment, word_width)
    g = quantized_green(segment, word_width)
    b = quantized_blue(segment, word_width)
    if dimension == COMPONENT_GREEN:
        colors[lower:upper + 1] = (g << (word_width + word_width)) | (r << word_width) | b
    elif dimension == COMPONENT_BLUE:
        colors[lower:upper + 1] = (b << (word_width + word_width)) | (g << word_width) | r


class QuantizeContext:
    """The distinct-color array and histogram shared by every box of one quantization run."""

    def __init__(self, colors: np.ndarray, histogram: np.ndarray, word_width: int = QUANTIZE_WORD_WIDTH):
        self.colors = colors
        self.histogram = histogram
        self.word_width = word_width


class Vbox:
    """A box tightly fitting colors[lower_index..upper_index] (both inclusive)."""

    def __init__(self, context: QuantizeContext, lower_index: int, upper_index: int):
        self.context = context
        self.lower_index = lower_index
        self.upper_index = upper_index
        self.population = 0
        self.min_red = self.max_red = 0
        self.min_green = self.max_green = 0
        self.min_blue = self.max_blue = 0
        self.fit_box()

    def get_volume(self) -> int:
        return ((self.max_red - self.min_red + 1)
                * (self.max_green - self.min_green + 1)
                * (self.max_blue - self.min_blue + 1))

    def get_color_count(self) -> int:
        return 1 + self.upper_index - self.lower_index

    def can_split(self) -> bool:
        return self.get_color_count() > 1

    def _segment(self) -> np.ndarray:
        return self.context.colors[self.lower_index:self.upper_index + 1]

    def fit_box(self) -> None:
        """Recompute bounds and population from the current index range."""
        w = self.context.word_width
        segment = self._segment()
        r = quantized_red(segment, w)
        g = quantized_green(segment, w)
        b = quantized_blue(segment, w)
        self.min_red, self.max_red = int(r.min()), int(r.max())
        self.min_green, self.max_green = int(g.min()), int(g.max())
        self.min_blue, self.max_blue = int(b.min()), int(b.max())
        self.population = int(self.context.histogram[segment].sum())

    def split_box(self) -> "Vbox":
        """
        Split at the population median along the longest dimension.

        This box keeps the lower part; the upper part is returned as a new box.

        Raises:
            InvariantViolationError: If the box holds a single color.
        """
        if not self.can_split():
            raise InvariantViolationError("Can not split a box with only 1 color")

        split_point = self.find_split_point()
        new_box = Vbox(self.context, split_point + 1, self.upper_index)

        self.upper_index = split_point
        self.fit_box()
        return new_box

    def get_longest_color_dimension(self) -> int:
        red_length = self.max_red - self.min_red
        green_length = self.max_green - self.min_green
        blue_length = self.max_blue - self.min_blue

        if red_length >= green_length and red_length >= blue_length:
            return COMPONENT_RED
        elif green_length >= red_length and green_length >= blue_length:
            return COMPONENT_GREEN
        else:
            return COMPONENT_BLUE

    def find_split_point(self) -> int:
        longest_dimension = self.get_longest_color_dimension()
        colors = self.context.colors
        w = self.context.word_width
        lower, upper = self.lower_index, self.upper_index

        # Sort the range by the longest dimension by temporarily moving that
        # component into the most significant bits.
        modify_significant_octet(colors, longest_dimension, lower, upper, w)
        colors[lower:upper + 1] = np.sort(colors[lower:upper + 1])
        modify_significant_octet(colors, longest_dimension, lower, upper, w)

        mid_point = self.population // 2
        running = np.cumsum(self.context.histogram[colors[lower:upper + 1]])
        reached = np.flatnonzero(running >= mid_point)
        if len(reached):
            # never split on upper_index, that would produce the same box
            return min(upper - 1, lower + int(reached[0]))
        return lower

    def get_average_color(self) -> Swatch:
        w = self.context.word_width
        segment = self._segment()
        populations = self.context.histogram[segment].astype(np.int64)
        total_population = int(populations.sum())

        red_sum = int((quantized_red(segment, w) * populations).sum())
        green_sum = int((quantized_green(segment, w) * populations).sum())
        blue_sum = int((quantized_blue(segment, w) * populations).sum())

        red_mean = round(red_sum / total_population)
        green_mean = round(green_sum / total_population)
        blue_mean = round(blue_sum / total_population)

        return Swatch(approximate_components_to_rgb888(red_mean, green_mean, blue_mean, w), total_population)

    def __repr__(self):
        return (f"Vbox([{self.lower_index}, {self.upper_index}], population={self.population}, "
                f"volume={self.get_volume()})")


class ColorCutQuantizer:
    """
    Reduce a pixel array to at most `max_colors` swatches.

    Args:
        pixels: Packed ARGB ints (numpy array, sequence or any iterable). A list or
                numpy array is overwritten in place with the quantized values.
        max_colors (int): Maximum number of swatches to produce, at least 1.
        filters: Ordered filters (objects with `is_allowed(rgb, hsl)` or plain
                 callables). None or empty disables filtering.
        word_width (int): Bits kept per channel, 1-8. Default 5.
    """

    def __init__(self, pixels, max_colors: int, filters: Optional[Sequence] = None,
                 word_width: int = QUANTIZE_WORD_WIDTH):
        if max_colors < 1:
            raise InvalidArgumentError(f"max_colors must be at least 1, got {max_colors}")
        if not (1 <= word_width <= 8):
            raise InvalidArgumentError(f"word_width must be between 1 and 8, got {word_width}")

        self.word_width = word_width
        self.filters = [as_filter(f) for f in filters] if filters else []
        self.vboxes: List[Vbox] = []

        if isinstance(pixels, (np.ndarray, Sequence)):
            pixel_array = np.asarray(pixels, dtype=np.int64).ravel() & 0xFFFFFFFF
        else:
            # one-shot iterables, e.g. a generator from a pixel source
            pixel_array = np.fromiter(pixels, dtype=np.int64) & 0xFFFFFFFF
        quantized = quantize_from_rgb888(pixel_array, word_width)
        if isinstance(pixels, np.ndarray):
            pixels[...] = quantized.reshape(pixels.shape)
        elif isinstance(pixels, MutableSequence):
            pixels[:] = quantized.tolist()

        histogram = np.bincount(quantized, minlength=1 << (word_width * 3)).astype(np.int64)
        logger.debug(f"Histogram built from {pixel_array.size} pixels, "
                     f"{np.count_nonzero(histogram)} occupied buckets")

        for color in np.flatnonzero(histogram):
            if self._should_ignore_quantized(int(color)):
                histogram[color] = 0

        colors = np.flatnonzero(histogram).astype(np.int64)
        self.context = QuantizeContext(colors, histogram, word_width)
        logger.debug(f"{len(colors)} distinct colors after filtering (max_colors={max_colors})")

        if len(colors) <= max_colors:
            # Few enough colors already, use them as they are
            self.quantized_colors = [
                Swatch(approximate_to_rgb888(color, word_width), int(histogram[color]))
                for color in colors
            ]
        else:
            self.quantized_colors = self._quantize_pixels(max_colors)

    def get_quantized_colors(self) -> List[Swatch]:
        return list(self.quantized_colors)

    def _quantize_pixels(self, max_colors: int) -> List[Swatch]:
        queue: list = []
        counter = 0

        def offer(box: Vbox):
            nonlocal counter
            # heapq is a min-heap; negate the volume, break ties by insertion order
            heapq.heappush(queue, (-box.get_volume(), counter, box))
            counter += 1

        offer(Vbox(self.context, 0, len(self.context.colors) - 1))
        self._split_boxes(queue, offer, max_colors)

        self.vboxes = [entry[2] for entry in queue]
        logger.debug(f"Split into {len(self.vboxes)} boxes")
        return self._generate_average_colors(self.vboxes)

    @staticmethod
    def _split_boxes(queue: list, offer, max_size: int) -> None:
        while len(queue) < max_size:
            _, _, vbox = heapq.heappop(queue)
            if not vbox.can_split():
                # The largest box is a single color, nothing left to split
                offer(vbox)
                return
            offer(vbox.split_box())
            offer(vbox)

    def _generate_average_colors(self, vboxes: List[Vbox]) -> List[Swatch]:
        colors = []
        for vbox in vboxes:
            swatch = vbox.get_average_color()
            # Averaging can land on a color the filters reject, so check again
            if not self._should_ignore_swatch(swatch):
                colors.append(swatch)
        return colors

    def _should_ignore_quantized(self, color: int) -> bool:
        rgb = approximate_to_rgb888(color, self.word_width)
        return self._should_ignore(rgb, color_math.color_to_hsl(rgb))

    def _should_ignore_swatch(self, swatch: Swatch) -> bool:
        return self._should_ignore(swatch.rgb, swatch.hsl)

    def _should_ignore(self, rgb: int, hsl) -> bool:
        for f in self.filters:
            if not f.is_allowed(rgb, hsl):
                return True
        return False
