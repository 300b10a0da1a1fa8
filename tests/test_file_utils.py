# tests/test_file_utils.py
import json
import xml.etree.ElementTree as ET
from PIL import Image
from vpal import color_math, file_utils
from vpal.palette import Palette, PaletteBuilder
from vpal.target import DEFAULT_TARGETS


def blue_and_grey_palette():
    pixels = [color_math.rgb(0, 0, 255)] * 500 + [color_math.rgb(24, 24, 24)] * 500
    return PaletteBuilder().generate(pixels)


def test_save_palette_png_creates_file_with_metadata(tmp_path):
    img = Image.new("RGB", (10, 10), color=(100, 150, 200))

    output_file = tmp_path / "nested" / "test_output.png"
    cmd_line = "vpalgen --max-colors 3 dummy.png"
    metadata = {"User Note": "Test run", "Extra_Key": "Extra value"}

    file_utils.save_palette_png(img, output_file, command_line_invocation=cmd_line, additional_metadata=metadata)

    assert output_file.exists()

    with Image.open(output_file) as im:
        pnginfo = im.info
        assert pnginfo["Software"] == file_utils.SOFTWARE_NAME
        assert pnginfo["vpal:command_line"] == cmd_line
        assert pnginfo["vpal:User_Note"] == "Test run"
        assert "vpal:Extra_Key" in pnginfo


def test_save_palette_svg_creates_valid_svg(tmp_path):
    output_file = tmp_path / "test_output.svg"
    cmd_line = "vpalgen --svg test_output.svg dummy.png"
    metadata = {"Author": "Tester"}

    written = file_utils.save_palette_svg(
        output_file,
        blue_and_grey_palette(),
        command_line_invocation=cmd_line,
        additional_metadata=metadata
    )

    assert written
    assert output_file.exists()

    root = ET.parse(output_file).getroot()
    assert root.tag.endswith("svg")

    rect_ids = [el.get("id") for el in root.iter() if el.tag.endswith("rect")]
    assert rect_ids == ["swatch-dominant", "swatch-vibrant", "swatch-dark_muted"]

    author = root.find(f".//{{{file_utils.VPAL_NS_URI}}}Author")
    assert author is not None and author.text == "Tester"
    cli = root.find(f".//{{{file_utils.VPAL_NS_URI}}}CommandLineInvocation")
    assert cli is not None and cli.text == cmd_line


def test_save_palette_svg_skips_empty_palette(tmp_path):
    output_file = tmp_path / "empty.svg"
    palette = Palette([], list(DEFAULT_TARGETS)).generate()
    assert file_utils.save_palette_svg(output_file, palette) is False
    assert not output_file.exists()


def test_save_palette_json_report(tmp_path):
    output_file = tmp_path / "palette.json"
    file_utils.save_palette_json(output_file, blue_and_grey_palette())

    with open(output_file, encoding="utf-8") as f:
        report = json.load(f)

    assert report["dominant"]["hex"] == "#0000F8"
    assert list(report["targets"]) == [t.name for t in DEFAULT_TARGETS]
    assert report["targets"]["vibrant"]["rgb"] == [0, 0, 248]
    assert report["targets"]["vibrant"]["population"] == 500
    assert report["targets"]["dark_muted"]["hex"] == "#181818"
    assert report["targets"]["muted"] is None
    assert [s["hex"] for s in report["swatches"]] == ["#0000F8", "#181818"]
    assert report["targets"]["vibrant"]["title_text_color"].startswith("#")


def test_verbatim_get_xml():
    xml_content = "<metadata><info>Test</info></metadata>"
    verbatim = file_utils.Verbatim(xml_string=xml_content, elementname="metadata")

    element = verbatim.get_xml()
    assert isinstance(element, ET.Element)
    assert element.find("info").text == "Test"


def test_clean_key():
    assert file_utils._clean_key("User Note") == "User_Note"
    assert file_utils._clean_key("9lives!") == "vpal_9lives"
    assert len(file_utils._clean_key("k" * 100)) == 70
