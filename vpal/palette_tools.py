import math
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from vpal.errors import InvalidArgumentError
from vpal.palette import Palette, PaletteBuilder

DEFAULT_RESIZE_BITMAP_AREA = 112 * 112


def pack_argb(rgba: np.ndarray) -> np.ndarray:
    """
    Pack an (..., 4) RGBA uint8 array into flat 0xAARRGGBB uint32 values.

    Args:
        rgba (np.ndarray): HxWx4 (or Nx4) RGBA image data.

    Returns:
        np.ndarray: 1-D uint32 array of packed pixels.
    """
    flat = rgba.reshape((-1, 4)).astype(np.uint32)
    return (flat[:, 3] << 24) | (flat[:, 0] << 16) | (flat[:, 1] << 8) | flat[:, 2]


class ImagePixelSource:
    """
    Supplies packed ARGB pixels from an image file or a PIL Image, scaled down first.

    Exactly one resize strategy is active: by area (default 112x112) or by the
    longest side. Setting one disables the other. Images are only ever shrunk.

    Args:
        image: Path to an image file, or a PIL.Image.Image.
        resize_area (int, optional): Target pixel area. Default 112*112.
        resize_max_dimension (int, optional): Target longest side. Setting it
                                              disables area resizing.
        resample: PIL resampling filter used when shrinking.
    """

    def __init__(
        self,
        image: Union[str, Path, Image.Image],
        resize_area: Optional[int] = DEFAULT_RESIZE_BITMAP_AREA,
        resize_max_dimension: Optional[int] = None,
        resample=Image.Resampling.NEAREST,
    ):
        self.image = image
        self.resample = resample
        self._resize_area: Optional[int] = None
        self._resize_max_dimension: Optional[int] = None
        if resize_max_dimension is not None:
            self.resize_max_dimension = resize_max_dimension
        else:
            self.resize_area = resize_area

    @property
    def resize_area(self) -> Optional[int]:
        return self._resize_area

    @resize_area.setter
    def resize_area(self, area: Optional[int]):
        if area is not None and area < 0:
            raise InvalidArgumentError(f"resize_area must not be negative, got {area}")
        self._resize_area = area
        self._resize_max_dimension = None

    @property
    def resize_max_dimension(self) -> Optional[int]:
        return self._resize_max_dimension

    @resize_max_dimension.setter
    def resize_max_dimension(self, max_dimension: Optional[int]):
        if max_dimension is not None and max_dimension < 0:
            raise InvalidArgumentError(f"resize_max_dimension must not be negative, got {max_dimension}")
        self._resize_max_dimension = max_dimension
        self._resize_area = None

    def scale_ratio(self, size: Tuple[int, int]) -> Optional[float]:
        """Shrink ratio for an image of `size`, or None when no scaling is needed."""
        width, height = size
        if self._resize_area:
            area = width * height
            if area > self._resize_area:
                return math.sqrt(self._resize_area / area)
        elif self._resize_max_dimension:
            max_dimension = max(width, height)
            if max_dimension > self._resize_max_dimension:
                return self._resize_max_dimension / max_dimension
        return None

    def scale_down(self, image: Image.Image) -> Image.Image:
        ratio = self.scale_ratio(image.size)
        if ratio is None:
            return image
        new_size = (max(1, math.ceil(image.width * ratio)), max(1, math.ceil(image.height * ratio)))
        return image.resize(new_size, self.resample)

    def get_pixels(self) -> np.ndarray:
        """
        Returns:
            np.ndarray: Fresh, writable 1-D uint32 array of 0xAARRGGBB pixels.
        """
        if isinstance(self.image, Image.Image):
            scaled = self.scale_down(self.image).convert("RGBA")
        else:
            with Image.open(self.image) as opened:
                scaled = self.scale_down(opened).convert("RGBA")
        return pack_argb(np.array(scaled))


def palette_from_image(
    source: Union[str, Path, Image.Image],
    max_colors: int = 16,
    resize_area: Optional[int] = DEFAULT_RESIZE_BITMAP_AREA,
    resize_max_dimension: Optional[int] = None,
    builder: Optional[PaletteBuilder] = None,
) -> Palette:
    """
    Extract a Palette from an image (path or PIL Image).

    Args:
        source: Image file path or PIL Image.
        max_colors (int): Maximum number of swatches. Ignored if `builder` is given.
        resize_area (int, optional): Downscale target area.
        resize_max_dimension (int, optional): Downscale target for the longest side.
        builder (PaletteBuilder, optional): Pre-configured builder to use.

    Returns:
        Palette: The generated palette.

    Raises:
        FileNotFoundError: If `source` is a path that does not exist.
    """
    pixel_source = ImagePixelSource(source, resize_area=resize_area, resize_max_dimension=resize_max_dimension)
    if builder is None:
        builder = PaletteBuilder().maximum_color_count(max_colors)
    return builder.generate(pixel_source.get_pixels())
