import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import rich.traceback
import typer
from PIL import ImageColor, UnidentifiedImageError

from vpal import color_math, file_utils, legend, palette_tools
from vpal.errors import PaletteError
from vpal.palette import PaletteBuilder, DEFAULT_CALCULATE_NUMBER_COLORS
from vpal.target import DEFAULT_TARGETS


def parse_color(color_str: str) -> int:
    """'#RRGGBB', '#RRGGBBAA', 'transparent' or a CSS color name -> packed ARGB."""
    if color_str.strip().lower() == "transparent":
        return color_math.TRANSPARENT
    try:
        parsed = ImageColor.getrgb(color_str)
    except ValueError:
        raise typer.BadParameter(f"Unrecognized color: '{color_str}'")
    if len(parsed) == 4:
        r, g, b, a = parsed
        return color_math.argb(a, r, g, b)
    r, g, b = parsed
    return color_math.rgb(r, g, b)


def check_clobber(paths: List[Optional[Path]], overwrite: bool) -> None:
    existing = [str(p) for p in paths if p is not None and p.exists()]
    if existing and not overwrite:
        typer.secho("Error: Files already exist:", fg=typer.colors.RED)
        for path_str in existing:
            typer.secho(f"  {path_str}", fg=typer.colors.RED)
        typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)


def echo_swatch_line(label: str, color: int, population: Optional[int], text_color: Optional[int]) -> None:
    chip = typer.style("      ", bg=(color_math.red(color), color_math.green(color), color_math.blue(color)))
    details = f"{label:<14} {color_math.to_hex(color, include_alpha=color_math.alpha(color) != 255)}"
    if population is not None:
        details += f"  population={population}"
    if text_color is not None:
        details += f"  title_text={color_math.to_hex(text_color, include_alpha=True)}"
    typer.echo(f"  {chip} {details}")


def palette_cli(
    input_path: Path = typer.Argument(
        ...,
        help="Input image file (e.g., image.jpg).",
        metavar="INPUT_FILE",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    max_colors: int = typer.Option(
        DEFAULT_CALCULATE_NUMBER_COLORS, "--max-colors", min=1,
        help="Maximum number of swatches produced by quantization. Default: 16."
    ),
    resize_area: Optional[int] = typer.Option(
        None, "--resize-area", min=0,
        help="Downscale the image to about this many pixels before quantizing. Default: 12544 (112x112)."
    ),
    resize_max_dimension: Optional[int] = typer.Option(
        None, "--resize-max-dimension", min=0,
        help="Downscale so the longest side is at most this many pixels. Overrides --resize-area."
    ),
    no_default_filter: bool = typer.Option(
        False, "--no-default-filter", help="Keep near-black, near-white and skin-tone colors."
    ),
    default_color: str = typer.Option(
        "transparent", "--default-color",
        help="Color reported for targets without a swatch (e.g. '#000000'). Default: transparent."
    ),
    legend_path: Optional[Path] = typer.Option(
        None, "--legend", help="Write a PNG legend of the selected swatches to this path.",
        dir_okay=False, resolve_path=True,
    ),
    svg_path: Optional[Path] = typer.Option(
        None, "--svg", help="Write an SVG swatch sheet to this path.",
        dir_okay=False, resolve_path=True,
    ),
    json_path: Optional[Path] = typer.Option(
        None, "--json", help="Write a JSON palette report to this path.",
        dir_okay=False, resolve_path=True,
    ),
    swatch_size: int = typer.Option(40, "--swatch-size", min=10, help="Legend swatch size. Default: 40px."),
    font_size: int = typer.Option(14, "--font-size", min=1, help="Legend label font size. Default: 14."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """
    Extracts a vibrant/muted color palette from an image.
    """
    command_line_str = " ".join(sys.argv)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    check_clobber([legend_path, svg_path, json_path], overwrite=yes)
    fallback_color = parse_color(default_color)

    builder = PaletteBuilder().maximum_color_count(max_colors)
    if no_default_filter:
        builder.clear_filters()
        typer.echo("Default filter disabled.")

    if resize_max_dimension is not None:
        source = palette_tools.ImagePixelSource(input_path, resize_max_dimension=resize_max_dimension)
        typer.echo(f"Scaling so the longest side is at most {resize_max_dimension}px.")
    else:
        area = resize_area if resize_area is not None else palette_tools.DEFAULT_RESIZE_BITMAP_AREA
        source = palette_tools.ImagePixelSource(input_path, resize_area=area)
        typer.echo(f"Scaling to an area of at most {area} pixels.")

    try:
        pixels = source.get_pixels()
        typer.echo(f"Read {len(pixels)} pixels from {input_path.name}.")
        palette = builder.generate(pixels)
    except (FileNotFoundError, UnidentifiedImageError) as e:
        typer.secho(f"Error reading image {input_path}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)
    except PaletteError as e:
        typer.secho(f"Error generating palette: {e}", fg=typer.colors.RED); traceback.print_exc(); raise typer.Exit(code=1)

    typer.echo(f"Quantized to {len(palette.swatches)} swatches (max {max_colors}).")

    dominant = palette.dominant_swatch
    if dominant is not None:
        echo_swatch_line("dominant", dominant.rgb, dominant.population, dominant.title_text_color)
    else:
        echo_swatch_line("dominant", palette.dominant_color(fallback_color), None, None)

    for target in DEFAULT_TARGETS:
        swatch = palette.get_swatch_for_target(target)
        if swatch is not None:
            echo_swatch_line(target.name, swatch.rgb, swatch.population, swatch.title_text_color)
        else:
            echo_swatch_line(target.name, palette.get_color_for_target(target, fallback_color), None, None)

    metadata = {
        "SourceImage": input_path.name,
        "MaxColors": str(max_colors),
        "Swatches": str(len(palette.swatches)),
    }

    if legend_path:
        legend_image = legend.create_legend_image(palette, font_size=font_size, swatch_size=swatch_size)
        if legend_image is not None:
            file_utils.save_palette_png(legend_image, legend_path, command_line_invocation=command_line_str,
                                        additional_metadata=metadata)
            typer.echo(f"Legend saved to: {legend_path}")
        else:
            typer.secho("Warning: Legend not written, the palette is empty.", fg=typer.colors.YELLOW)

    if svg_path:
        if file_utils.save_palette_svg(svg_path, palette, swatch_size=swatch_size, font_size=font_size,
                                       command_line_invocation=command_line_str, additional_metadata=metadata):
            typer.echo(f"SVG swatch sheet saved to: {svg_path}")
        else:
            typer.secho("Warning: SVG not written, the palette is empty.", fg=typer.colors.YELLOW)

    if json_path:
        file_utils.save_palette_json(json_path, palette)
        typer.echo(f"JSON report saved to: {json_path}")

    typer.secho("Completed.", fg=typer.colors.GREEN)


def main():
    rich.traceback.install(show_locals=False, suppress=[typer])
    typer.run(palette_cli)


if __name__ == "__main__":
    main()
