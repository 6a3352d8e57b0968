"""
Print resolution command for exportflow CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from exportflow.cli.commands.common import load_catalog, load_settings, open_preferences
from exportflow.cli.ui.console import console, print_error
from exportflow.core.sizing import compute_ppi, parse_dimensions, parse_identify_output, print_size_mm
from exportflow.exceptions import UnknownPaperError
from exportflow.tools.runner import ShellRunner


def ppi_command(
    image: str = typer.Argument(
        ...,
        help="Image dimensions as WIDTHxHEIGHT, or an image file to probe with ImageMagick identify",
    ),
    paper: Optional[str] = typer.Option(
        None,
        "--paper",
        "-p",
        help="Paper name from the definition file",
    ),
    width_mm: Optional[float] = typer.Option(
        None,
        "--width-mm",
        "-m",
        help="Target print width in millimetres",
    ),
    ppi: Optional[int] = typer.Option(
        None,
        "--ppi",
        help="Fixed PPI; prints the resulting size only",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Workflow definition file, for --paper",
    ),
    settings_file: Optional[str] = typer.Option(
        None,
        "--settings",
        "-s",
        help="Settings file (default: exportflow.yaml)",
    ),
):
    """
    Compute the PPI for a paper width and the resulting print size.

    Example:
        exportflow ppi 4000x3000 --width-mm 210
        exportflow ppi photo.jpg --paper A4 --config workflows.txt
    """
    settings = load_settings(settings_file)

    try:
        if Path(image).is_file():
            result = ShellRunner(settings.runner.shell).run(f'identify "{image}"')
            if not result.success:
                print_error(f"identify failed with exit code {result.exit_code}")
                raise typer.Exit(1)
            width, height = parse_identify_output(result.output)
            label = "original"
        else:
            width, height = parse_dimensions(image)
            label = "given"
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if ppi is None:
        if paper is not None:
            catalog = load_catalog(config, settings, open_preferences(settings)).catalog
            try:
                width_mm = catalog.get_paper(paper).width_mm
            except UnknownPaperError as e:
                print_error(e.message)
                raise typer.Exit(1)
        if width_mm is None or width_mm <= 0:
            print_error("Give --paper, --width-mm or --ppi")
            raise typer.Exit(1)
        ppi = compute_ppi(width, height, width_mm)
    elif ppi <= 0:
        print_error("PPI must be positive")
        raise typer.Exit(1)

    size_w, size_h = print_size_mm(width, height, ppi)
    console.print(
        Panel.fit(
            f"[bold]Resolution ({label}):[/] {width} x {height} px\n"
            f"[bold]Pixels per inch:[/] {ppi}\n"
            f"[bold]Print size:[/] {size_w:.2f} x {size_h:.2f} mm",
            title="[bold blue]Print Size[/]",
        )
    )
