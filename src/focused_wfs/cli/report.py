"""Terminal output for the focused-wfs command.

Renders the configuration summary and the per-loudspeaker driving
parameters as rich tables.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from rich.console import Console
from rich.table import Table

from focused_wfs.core.config import WFSConfig
from focused_wfs.core.driving import DrivingParameters
from focused_wfs.geometry.arrays import SecondarySources


def format_delay(seconds: float) -> str:
    """Format a delay for display.

    Args:
        seconds: Delay in seconds

    Returns:
        Formatted string like "-2.915 ms" or "-12.0 µs"
    """
    if not np.isfinite(seconds):
        return str(seconds)
    if abs(seconds) >= 1e-3 or seconds == 0:
        return f"{seconds * 1e3:.3f} ms"
    return f"{seconds * 1e6:.1f} µs"


def format_vector(v) -> str:
    """Format a 3-vector as "(x, y, z)" with millimeter precision."""
    return "(" + ", ".join(f"{float(c):.3f}" for c in v) + ")"


def print_driving_info(
    console: Console,
    conf: WFSConfig,
    sources: SecondarySources,
    focus,
    focus_direction,
    active: NDArray[np.bool_],
    output_path=None,
):
    """Print the configuration and array summary.

    Args:
        console: Rich console instance
        conf: Configuration in use
        sources: Secondary source distribution
        focus: Focused source position
        focus_direction: Focused source direction
        active: Active secondary source mask
        output_path: HDF5 output path, if any
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Dimension", conf.dimension.value)
    model = conf.driving_function_model.value
    resolved = conf.resolved_model.value
    if resolved != model:
        model = f"{model} → {resolved}"
    table.add_row("Model", model)
    table.add_row("Speed of sound", f"{conf.speed_of_sound:.1f} m/s")
    table.add_row("Reference point", format_vector(conf.reference_point))
    table.add_row("Focus", format_vector(focus))
    table.add_row("Focus direction", format_vector(focus_direction))
    table.add_row("Secondary sources", f"{int(np.sum(active))} active of {len(sources)}")
    if output_path is not None:
        table.add_row("Output", str(output_path))

    console.print(table)
    console.print()


def print_driving_table(
    console: Console,
    sources: SecondarySources,
    params: DrivingParameters,
    active: NDArray[np.bool_],
    show_inactive: bool = False,
):
    """Print delay and weight for each secondary source.

    Args:
        console: Rich console instance
        sources: Secondary source distribution
        params: Driving parameters aligned with ``sources``
        active: Active secondary source mask
        show_inactive: Also list inactive secondary sources
    """
    table = Table(title="Driving parameters")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Position / m", style="cyan")
    table.add_column("Delay", justify="right")
    table.add_column("Weight", justify="right")

    for i in range(len(sources)):
        if not active[i] and not show_inactive:
            continue
        style = None if active[i] else "dim"
        table.add_row(
            str(i),
            format_vector(sources.positions[i]),
            format_delay(params.delay[i]),
            f"{params.weight[i]:+.5f}",
            style=style,
        )

    console.print(table)
