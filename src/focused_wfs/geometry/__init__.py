"""
Secondary source geometry for focused source synthesis.

Classes:
    SecondarySources: Positions, directions and integration weights

Functions:
    linear_array, circular_array, box_array: Array layouts
    focused_source_selection: Active secondary sources for a focus
    tapering_window, active_runs: Edge fade of runs of active sources
    driving_parameters_for_array: Full pipeline for one array and focus
"""

from focused_wfs.geometry.arrays import (
    SecondarySources,
    box_array,
    circular_array,
    linear_array,
)
from focused_wfs.geometry.selection import (
    active_runs,
    driving_parameters_for_array,
    focused_source_selection,
    tapering_window,
)

__all__ = [
    "SecondarySources",
    "linear_array",
    "circular_array",
    "box_array",
    "focused_source_selection",
    "tapering_window",
    "active_runs",
    "driving_parameters_for_array",
]
