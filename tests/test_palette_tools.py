# tests/test_palette_tools.py
import numpy as np
from PIL import Image, ImageDraw
import pytest
from vpal import color_math, palette_tools
from vpal.errors import InvalidArgumentError
from vpal.palette import PaletteBuilder


def create_dummy_image():
    img = Image.new("RGB", (256, 256), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(50, 50), (150, 150)], fill=(200, 50, 50))
    draw.ellipse([(100, 100), (200, 200)], fill=(50, 200, 50))
    return img


def test_palette_from_dummy_image(tmp_path):
    img_path = tmp_path / "dummy_input.png"
    create_dummy_image().save(img_path)

    palette = palette_tools.palette_from_image(str(img_path))

    # Three flat colors, nothing to split
    assert len(palette.swatches) == 3

    expected_colors = [
        (150, 120, 200),  # background
        (200, 50, 50),    # red rectangle
        (50, 200, 50)     # green ellipse
    ]
    extracted = [(s.red, s.green, s.blue) for s in palette.swatches]
    for expected_color in expected_colors:
        assert any(
            np.linalg.norm(np.array(expected_color) - np.array(extracted_color)) < 15
            for extracted_color in extracted
        ), f"Expected color {expected_color} not close to any extracted palette color."

    # The background covers the most pixels
    assert palette.dominant_swatch.rgb == color_math.rgb(144, 120, 200)


def test_palette_from_image_accepts_pil_image_and_builder():
    builder = PaletteBuilder().maximum_color_count(2)
    palette = palette_tools.palette_from_image(create_dummy_image(), builder=builder)
    assert 1 <= len(palette.swatches) <= 2


def test_single_color_image_pixels():
    color = (123, 222, 64)
    img = Image.new("RGB", (10, 10), color=color)

    pixels = palette_tools.ImagePixelSource(img).get_pixels()
    assert pixels.dtype == np.uint32
    assert pixels.shape == (100,)
    assert int(pixels[0]) == 0xFF7BDE40

    palette = PaletteBuilder().generate(pixels)
    assert len(palette.swatches) == 1
    assert palette.swatches[0].population == 100
    swatch = palette.swatches[0]
    assert np.linalg.norm(np.array((swatch.red, swatch.green, swatch.blue)) - np.array(color)) < 10


def test_pack_argb():
    rgba = np.array([[[1, 2, 3, 255], [10, 20, 30, 0]]], dtype=np.uint8)
    packed = palette_tools.pack_argb(rgba)
    assert [int(p) for p in packed] == [0xFF010203, 0x000A141E]


def test_resize_by_area_keeps_aspect_ratio():
    source = palette_tools.ImagePixelSource(Image.new("RGB", (224, 224)))
    assert source.resize_area == palette_tools.DEFAULT_RESIZE_BITMAP_AREA
    assert source.scale_ratio((224, 224)) == pytest.approx(0.5)
    assert source.scale_ratio((100, 100)) is None  # never upscale
    assert len(source.get_pixels()) == 112 * 112


def test_resize_by_max_dimension_rounds_up():
    img = Image.new("RGB", (200, 101))
    source = palette_tools.ImagePixelSource(img, resize_max_dimension=50)
    assert source.resize_area is None
    assert source.scale_ratio(img.size) == pytest.approx(0.25)
    # 101 * 0.25 = 25.25, rounded up
    assert len(source.get_pixels()) == 50 * 26


def test_resize_strategies_are_mutually_exclusive():
    source = palette_tools.ImagePixelSource(Image.new("RGB", (4, 4)))
    source.resize_max_dimension = 64
    assert source.resize_area is None
    source.resize_area = 1000
    assert source.resize_max_dimension is None
    assert source.resize_area == 1000


def test_resize_disabled_reads_every_pixel():
    source = palette_tools.ImagePixelSource(Image.new("RGB", (300, 200)), resize_area=0)
    assert source.scale_ratio((300, 200)) is None
    assert len(source.get_pixels()) == 300 * 200


def test_negative_resize_values_are_rejected():
    with pytest.raises(InvalidArgumentError):
        palette_tools.ImagePixelSource(Image.new("RGB", (4, 4)), resize_area=-1)
    with pytest.raises(InvalidArgumentError):
        palette_tools.ImagePixelSource(Image.new("RGB", (4, 4)), resize_max_dimension=-5)


def test_palette_from_image_invalid_path():
    with pytest.raises(FileNotFoundError):
        palette_tools.palette_from_image("nonexistent_file.png", max_colors=3)
