"""Prism CLI application.

Commands:
    apply     - Apply a LUT (.cube or Hald .png) to an image
    blend     - Blend two LUTs together
    convert   - Convert between .cube and Hald .png LUTs
    hald-gen  - Generate a Hald CLUT identity image
    info      - Show LUT size, domain and sample statistics
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from prismlut import __version__
from prismlut.config import DEFAULT_HALD_LEVEL, OUTPUT_INFIX
from prismlut.errors import PrismError

app = typer.Typer(
    name="prism",
    help="Apply, blend and convert 3D colour LUTs.",
    no_args_is_help=True,
)
console = Console()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

_CLI_ERRORS = (PrismError, OSError)


def version_callback(value: bool):
    if value:
        console.print(f"Prism v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit.",
        callback=version_callback, is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    if verbose:
        logging.getLogger("prismlut").setLevel(logging.DEBUG)


def parse_lut_spec(spec: str) -> tuple[Path, float]:
    """Split ``path[:intensity]`` into a path and an intensity (default 1).

    A suffix that is not a number is treated as part of the path.
    """
    head, sep, tail = spec.rpartition(":")
    if sep:
        try:
            return Path(head), float(tail)
        except ValueError:
            pass
    return Path(spec), 1.0


def default_output_path(image: Path) -> Path:
    """image.png -> image.prism.png"""
    return image.with_name(f"{image.stem}{OUTPUT_INFIX}{image.suffix}")


def _fail(exc: Exception) -> None:
    console.print(f"\n[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.command()
def apply(
    lut_spec: str = typer.Argument(
        ..., metavar="LUT[:INTENSITY]", help="LUT file (.cube or Hald .png), optional intensity 0-1.",
    ),
    image: Path = typer.Argument(..., help="Input image (PNG or JPEG)."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--out", help="Output image path (default: IMAGE.prism.EXT).",
    ),
):
    """Apply a LUT to an image."""
    from prismlut.core.apply import apply_lut
    from prismlut.io.image import load_image, save_image
    from prismlut.io.lut import load_lut

    lut_path, intensity = parse_lut_spec(lut_spec)
    output = output or default_output_path(image)

    console.print(f"\n[bold]Prism LUT Application[/bold]")
    console.print(f"  LUT:       {lut_path}")
    console.print(f"  Image:     {image}")
    console.print(f"  Intensity: {intensity:.2f}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Loading...", total=None)
        try:
            lut = load_lut(lut_path)
            img, _ = load_image(image, keep_alpha=True)
            progress.update(task, description=f"Applying {lut.level}^3 LUT...")
            result = apply_lut(lut, img, intensity=intensity)
            save_image(result, output, bit_depth=8)
            progress.update(task, description="Complete")
        except _CLI_ERRORS as e:
            _fail(e)

    console.print(f"[green]Saved:[/green] {output}\n")


@app.command()
def blend(
    first: str = typer.Argument(..., metavar="LUT1[:INTENSITY1]", help="First LUT with optional weight."),
    second: str = typer.Argument(..., metavar="LUT2[:INTENSITY2]", help="Second LUT with optional weight."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--out", help="Output LUT (.cube or .png). Prints .cube to stdout if omitted.",
    ),
    title: str = typer.Option("", "-t", "--title", help="Title for the blended LUT."),
    clamp: bool = typer.Option(
        False, "--clamp/--no-clamp", help="Normalize samples from the LUT domain to [0, 1].",
    ),
    rescale: bool = typer.Option(
        False, "--rescale/--no-rescale", help="Stretch the sample range onto the LUT domain.",
    ),
):
    """Blend two LUTs with optional weights."""
    from prismlut.io.cube import format_cube
    from prismlut.io.lut import load_lut, save_lut

    path1, w1 = parse_lut_spec(first)
    path2, w2 = parse_lut_spec(second)

    try:
        lut = load_lut(path1)
        other = load_lut(path2)
        lut.blend(other, w1, w2)
        if clamp:
            lut.clamp()
        if rescale:
            lut.rescale()
        if title:
            lut.title = title

        if output is None:
            typer.echo(format_cube(lut), nl=False)
            return
        save_lut(output, lut)
    except _CLI_ERRORS as e:
        _fail(e)

    console.print(f"[green]Saved:[/green] {output} ({lut.level}^3, weights {w1:g}:{w2:g})")


@app.command()
def convert(
    lut_file: Path = typer.Argument(..., help="Input LUT (.cube or Hald .png)."),
    output: Path = typer.Argument(..., help="Output LUT (.cube or Hald .png)."),
    title: str = typer.Option("", "-t", "--title", help="Title for the generated LUT."),
    level: Optional[int] = typer.Option(
        None, "-l", "--level", min=2, help="Hald level for .png output (default: native or 12).",
    ),
    size: int = typer.Option(
        0, "-s", "--size", min=0, help="Resample to this grid size (0 = keep).",
    ),
):
    """Convert between LUT formats (.cube <-> Hald .png)."""
    from prismlut.core.types import LUTFormat
    from prismlut.hald.codec import native_hald_level
    from prismlut.io.lut import detect_format, load_lut, save_lut

    console.print(f"\n[bold]Prism LUT Conversion[/bold]")
    console.print(f"  Input:  {lut_file}")
    console.print(f"  Output: {output}")

    try:
        out_format = detect_format(output)
        lut = load_lut(lut_file)
        if title:
            lut.title = title
        if size and size != lut.level:
            console.print(f"  Resampling: {lut.level}^3 -> {size}^3")
            lut = lut.resample(size)

        hald_level = None
        if out_format is LUTFormat.HALD:
            hald_level = level or native_hald_level(lut.level) or DEFAULT_HALD_LEVEL
            console.print(f"  Hald level: {hald_level}")

        save_lut(output, lut, hald_level=hald_level)
    except _CLI_ERRORS as e:
        _fail(e)

    console.print(f"\n[green]Saved:[/green] {output}\n")


@app.command("hald-gen")
def hald_generate(
    output: Path = typer.Option("hald_identity.png", "-o", "--output", help="Output image path."),
    level: int = typer.Option(
        DEFAULT_HALD_LEVEL, "-l", "--level", help="Hald level (12 = 1728x1728, 144^3 LUT).",
    ),
):
    """Write a neutral Hald CLUT image to grade in an external editor."""
    from prismlut.hald.identity import generate_hald_identity, hald_image_size, hald_lut_size
    from prismlut.io.image import save_image

    side = hald_image_size(level)
    nodes = hald_lut_size(level)
    console.print(
        f"\n[bold]Hald identity[/bold] level {level}: "
        f"{side}x{side} px, {nodes}^3 lattice"
    )

    try:
        save_image(generate_hald_identity(level), output, bit_depth=8)
    except _CLI_ERRORS as e:
        _fail(e)

    console.print(f"[green]Saved:[/green] {output}\n")


@app.command()
def info(
    lut_file: Path = typer.Argument(..., help="LUT file (.cube or Hald .png)."),
):
    """Show LUT size, domain and sample statistics."""
    from prismlut.io.lut import load_lut

    try:
        lut = load_lut(lut_file)
    except _CLI_ERRORS as e:
        _fail(e)

    stats = lut.stats()

    table = Table(title=str(lut_file), show_header=True, header_style="bold")
    table.add_column("Property", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Title", lut.title or "-")
    table.add_row("Size", f"{lut.level}^3 = {len(lut):,} nodes")
    table.add_row("Domain min", " ".join(f"{v:g}" for v in lut.domain_min))
    table.add_row("Domain max", " ".join(f"{v:g}" for v in lut.domain_max))
    table.add_row("", "")
    table.add_row("Min (R G B)", " ".join(f"{v:.4f}" for v in stats["min_per_channel"]))
    table.add_row("Max (R G B)", " ".join(f"{v:.4f}" for v in stats["max_per_channel"]))
    table.add_row("Mean (R G B)", " ".join(f"{v:.4f}" for v in stats["mean_per_channel"]))

    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
