import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Optional
from xml.etree.ElementTree import Element, SubElement

import svgwrite
from PIL import Image, PngImagePlugin
from svgwrite.base import BaseElement

from vpal import color_math
from vpal.legend import legend_entries, SHORT_LABELS
from vpal.palette import Palette
from vpal.swatch import Swatch

VPAL_NS_URI = "urn:vpal:metadata"
PNG_METADATA_PREFIX = "vpal:"
SOFTWARE_NAME = "vibrantpal"


class Verbatim(BaseElement):
    """An SVG element serialized from a ready-made XML string (used for <metadata>)."""

    def __init__(self, xml_string="", elementname="metadata", **kwargs_for_base_element):
        self.elementname = elementname
        super(Verbatim, self).__init__(**kwargs_for_base_element)
        self.xml_string = xml_string

    def get_xml(self):
        # Drawing.tostring() appends whatever this returns to its own tree
        return ET.fromstring(self.xml_string)


def _clean_key(key: str) -> str:
    key_clean = re.sub(r'\s+', '_', key)
    key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
    if not key_clean or not re.match(r'^[a-zA-Z_]', key_clean):
        key_clean = "vpal_" + key_clean
    return key_clean[:70] # PNG tEXt keywords are capped at 79 bytes


def swatch_to_dict(swatch: Optional[Swatch]) -> Optional[dict]:
    if swatch is None:
        return None
    h, s, l = swatch.hsl
    return {
        "hex": swatch.hex,
        "rgb": [swatch.red, swatch.green, swatch.blue],
        "population": swatch.population,
        "hsl": [round(h, 2), round(s, 4), round(l, 4)],
        "title_text_color": color_math.to_hex(swatch.title_text_color, include_alpha=True),
        "body_text_color": color_math.to_hex(swatch.body_text_color, include_alpha=True),
    }


def palette_report(palette: Palette) -> dict:
    """Plain dict describing a palette, suitable for JSON."""
    return {
        "dominant": swatch_to_dict(palette.dominant_swatch),
        "targets": {
            (target.name or f"target_{idx}"): swatch_to_dict(palette.get_swatch_for_target(target))
            for idx, target in enumerate(palette.targets)
        },
        "swatches": [swatch_to_dict(s) for s in palette.swatches],
    }


def save_palette_json(output_path: Path, palette: Palette, indent: int = 2) -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(palette_report(palette), f, indent=indent)


def save_palette_png(
    image_to_save: Image.Image,
    output_path: Path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Saves a PIL Image (e.g. a legend) as PNG with `vpal:`-prefixed tEXt metadata.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    png_info = PngImagePlugin.PngInfo()
    png_info.add_text("Software", SOFTWARE_NAME)
    if command_line_invocation:
        png_info.add_text(f"{PNG_METADATA_PREFIX}command_line", command_line_invocation)
    if additional_metadata:
        for key, value in additional_metadata.items():
            png_info.add_text(f"{PNG_METADATA_PREFIX}{_clean_key(key)}", str(value))

    image_to_save.save(output_path, "PNG", pnginfo=png_info)


def _metadata_xml(command_line_invocation: Optional[str], additional_metadata: Optional[dict]) -> str:
    ET.register_namespace('vpal', VPAL_NS_URI)
    root = Element('metadata')
    root.set('id', 'vpalMetadataContainer')
    custom = SubElement(root, f'{{{VPAL_NS_URI}}}paletteMetadata')

    software_el = SubElement(custom, f'{{{VPAL_NS_URI}}}Software')
    software_el.text = SOFTWARE_NAME
    if command_line_invocation:
        cli_el = SubElement(custom, f'{{{VPAL_NS_URI}}}CommandLineInvocation')
        cli_el.text = command_line_invocation
    for key, value in (additional_metadata or {}).items():
        item = SubElement(custom, f'{{{VPAL_NS_URI}}}{_clean_key(key)}')
        item.text = str(value)
    return ET.tostring(root, encoding='unicode', method='xml')


def save_palette_svg(
    output_path: Path,
    palette: Palette,
    swatch_size: int = 40,
    padding: int = 10,
    font_size: int = 14,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[dict] = None,
) -> bool:
    """
    Writes an SVG swatch sheet: one labelled square per legend entry.

    Returns:
        bool: False (and nothing written) if the palette has no entries.
    """
    entries = legend_entries(palette)
    if not entries:
        return False

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    width = (swatch_size * len(entries)) + (padding * (len(entries) + 1))
    height = swatch_size + 2 * padding
    dwg = svgwrite.Drawing(filename=str(output_path), size=(f"{width}px", f"{height}px"), profile='full')

    dwg.add(Verbatim(
        xml_string=_metadata_xml(command_line_invocation, additional_metadata),
        elementname='metadata',
        profile=dwg.profile,
        debug=False,
    ))

    group = dwg.g(id="vpal-swatches", style=f"font-family:sans-serif; font-size:{font_size}px; text-anchor:middle;")
    for idx, (label, swatch) in enumerate(entries):
        x = padding + idx * (swatch_size + padding)
        group.add(dwg.rect(insert=(x, padding), size=(swatch_size, swatch_size),
                           fill=swatch.hex, stroke="#000000", id=f"swatch-{label}"))
        title_color = swatch.title_text_color
        group.add(dwg.text(
            SHORT_LABELS.get(label, label[:3]),
            insert=(x + swatch_size / 2, padding + swatch_size / 2 + font_size / 3),
            fill=color_math.to_hex(title_color),
            fill_opacity=round(color_math.alpha(title_color) / 255.0, 3),
        ))
    dwg.add(group)
    dwg.save(pretty=True)
    return True
