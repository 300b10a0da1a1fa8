from PIL import Image, ImageDraw, ImageFont
import os
from typing import List, Optional, Tuple

from vpal import color_math
from vpal.palette import Palette
from vpal.swatch import Swatch

SHORT_LABELS = {
    "dominant": "Dom",
    "light_vibrant": "LV",
    "vibrant": "V",
    "dark_vibrant": "DV",
    "light_muted": "LM",
    "muted": "M",
    "dark_muted": "DM",
}


def legend_entries(palette: Palette, include_dominant: bool = True) -> List[Tuple[str, Swatch]]:
    """
    (label, swatch) pairs for the dominant swatch and every target that found one,
    in target order. Unnamed targets are labelled target_<index>.
    """
    entries = []
    if include_dominant and palette.dominant_swatch is not None:
        entries.append(("dominant", palette.dominant_swatch))
    for idx, target in enumerate(palette.targets):
        swatch = palette.get_swatch_for_target(target)
        if swatch is not None:
            entries.append((target.name or f"target_{idx}", swatch))
    return entries


def opaque_text_fill(swatch: Swatch, title: bool = True) -> Tuple[int, int, int]:
    """The swatch's text color composited over the swatch, as an RGB tuple for PIL."""
    text_color = swatch.title_text_color if title else swatch.body_text_color
    blended = color_math.composite_colors(text_color, swatch.rgb)
    return (color_math.red(blended), color_math.green(blended), color_math.blue(blended))


def _load_font(font_path: Optional[str], font_size: int):
    loaded_font = None
    try:
        if font_path and os.path.isfile(font_path):
            loaded_font = ImageFont.truetype(font_path, font_size)
    except IOError:
        pass # fall back to the default font

    if not loaded_font:
        try:
            loaded_font = ImageFont.load_default(size=font_size)
        except TypeError: # Pillow < 10.1 has no size argument
            loaded_font = ImageFont.load_default()
    return loaded_font


def create_legend_image(palette: Palette, font_path=None, font_size=14, swatch_size=40, padding=10,
                        include_dominant=True):
    """
    Creates a legend PIL Image showing the dominant swatch and each target's swatch.

    Each tile is filled with the swatch color and labelled with a short target
    name drawn in the swatch's title text color.

    Args:
        palette (Palette): A generated palette.
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for the labels.
        swatch_size (int): Width/height of each tile.
        padding (int): Space around elements and between tiles.
        include_dominant (bool): Prepend the dominant swatch.

    Returns:
        PIL.Image.Image: The legend image, or None if the palette has nothing to show.
    """
    entries = legend_entries(palette, include_dominant=include_dominant)
    num_tiles = len(entries)
    if num_tiles == 0:
        return None

    width = (swatch_size * num_tiles) + (padding * (num_tiles + 1))
    height = swatch_size + (2 * padding)

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)
    loaded_font = _load_font(font_path, font_size)

    for idx, (label, swatch) in enumerate(entries):
        x_start = padding + idx * (swatch_size + padding)
        y_start = padding

        draw.rectangle(
            [x_start, y_start, x_start + swatch_size, y_start + swatch_size],
            fill=(swatch.red, swatch.green, swatch.blue),
            outline=(0, 0, 0)
        )

        text_content = SHORT_LABELS.get(label, label[:3])
        bbox = draw.textbbox((0, 0), text_content, font=loaded_font)
        text_w = bbox[2] - bbox[0]
        text_h = bbox[3] - bbox[1]

        # Center within the tile, offset by the glyph origin
        text_x = x_start + (swatch_size - text_w) / 2.0 - bbox[0]
        text_y = y_start + (swatch_size - text_h) / 2.0 - bbox[1]
        draw.text((text_x, text_y), text_content, fill=opaque_text_fill(swatch), font=loaded_font)

    return image
