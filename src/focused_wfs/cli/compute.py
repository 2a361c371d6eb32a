"""Command-line tool for computing focused source driving parameters.

The focused-wfs command builds a loudspeaker array, selects the secondary
sources active for a focused source, evaluates the driving function and
prints the per-loudspeaker delay and weight. Results can be stored in an
HDF5 file for use by a renderer.
"""

import json
import sys
from pathlib import Path

import click
from rich.console import Console

from focused_wfs.core.config import ConfigurationError, Dimension, DrivingModel, WFSConfig
from focused_wfs.geometry.arrays import box_array, circular_array, linear_array
from focused_wfs.geometry.selection import driving_parameters_for_array
from focused_wfs.io.hdf5 import DrivingParametersWriter

from .report import print_driving_info, print_driving_table

console = Console()


def load_config(
    config_file: Path | None,
    speed_of_sound: float | None,
    dimension: str | None,
    model: str | None,
    xref: tuple[float, float, float] | None,
) -> WFSConfig:
    """Merge an optional JSON config file with command line overrides.

    Raises:
        ConfigurationError: For invalid values or unknown keys
        ValueError: If the file is not valid JSON
    """
    mapping = {}
    if config_file is not None:
        mapping = json.loads(config_file.read_text())
        if not isinstance(mapping, dict):
            raise ConfigurationError(f"{config_file} must contain a JSON object")

    return WFSConfig.from_mapping(
        mapping,
        speed_of_sound=speed_of_sound,
        dimension=dimension,
        driving_function_model=model,
        reference_point=xref,
    )


@click.command()
@click.option(
    "--array",
    "array_type",
    type=click.Choice(["linear", "circular", "box"]),
    default="linear",
    help="Secondary source layout (default: linear)",
)
@click.option("--number", "-n", type=int, default=32, help="Number of loudspeakers")
@click.option("--spacing", type=float, default=0.15, help="Linear array spacing in m")
@click.option("--radius", type=float, default=1.5, help="Circular array radius / box half size in m")
@click.option(
    "--focus",
    type=(float, float, float),
    default=(0.0, -1.0, 0.0),
    help="Focused source position in m",
)
@click.option(
    "--focus-direction",
    type=(float, float, float),
    default=(0.0, -1.0, 0.0),
    help="Direction the focused source radiates into",
)
@click.option(
    "--dimension",
    type=click.Choice([d.value for d in Dimension]),
    help="Synthesis dimension (default: 2.5D)",
)
@click.option(
    "--model",
    type=click.Choice([m.value for m in DrivingModel]),
    help="Driving function model (default: default)",
)
@click.option("--speed-of-sound", "-c", type=float, help="Speed of sound in m/s (default: 343)")
@click.option("--xref", type=(float, float, float), help="Reference point for 2.5D models")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with configuration values",
)
@click.option("--taper", type=float, default=0.2, help="Tapering window length (0 disables)")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Write results to HDF5 file")
@click.option("--all", "show_all", is_flag=True, help="Also list inactive loudspeakers")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with debug info")
@click.version_option(version="0.1.0", prog_name="focused-wfs")
def main(
    array_type: str,
    number: int,
    spacing: float,
    radius: float,
    focus: tuple[float, float, float],
    focus_direction: tuple[float, float, float],
    dimension: str | None,
    model: str | None,
    speed_of_sound: float | None,
    xref: tuple[float, float, float] | None,
    config_file: Path | None,
    taper: float,
    output: Path | None,
    show_all: bool,
    verbose: bool,
):
    """Compute WFS driving parameters for a focused source.

    Example:

    \b
        focused-wfs --array linear -n 24 --spacing 0.2 \\
            --focus 0 -1 0 --dimension 2.5D --model reference_point --xref 0 -2 0
    """
    try:
        conf = load_config(config_file, speed_of_sound, dimension, model, xref)
    except (ConfigurationError, ValueError) as e:
        console.print(f"\n[bold red]Configuration Error:[/bold red] {e}")
        sys.exit(1)

    try:
        if array_type == "linear":
            sources = linear_array(number, spacing)
        elif array_type == "circular":
            sources = circular_array(number, radius)
        else:
            sources = box_array(number, 2 * radius)

        params, active = driving_parameters_for_array(
            sources,
            focus,
            focus_direction,
            conf,
            taper=taper,
            closed=array_type != "linear",
        )
    except ValueError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    console.print("\n[bold]Focused source driving parameters[/bold]", style="blue")
    console.print("─" * 60)
    print_driving_info(console, conf, sources, focus, focus_direction, active, output)

    if not active.any():
        console.print("[yellow]Warning:[/yellow] no secondary source is active for this focus")

    print_driving_table(console, sources, params, active, show_inactive=show_all)

    if output is not None:
        with DrivingParametersWriter(output, conf) as writer:
            writer.write(
                sources, params, active, focus=focus, focus_direction=focus_direction
            )
        console.print(f"✓ [bold green]Saved[/bold green] {output}")
        if verbose:
            console.print("[dim]Results can be analyzed with HDF5 tools (h5py, HDFView)[/dim]")


if __name__ == "__main__":
    main()
