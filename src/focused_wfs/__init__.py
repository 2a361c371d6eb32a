"""
Focused WFS - time-domain Wave Field Synthesis driving functions for focused sources.

Main exports:
- focused_source_driving: Delay and weight per secondary source
- WFSConfig: Speed of sound, dimension, driving model and reference point
- DrivingParameters: Delay/weight result arrays
- linear_array, circular_array, box_array: Secondary source distributions
- focused_source_selection, tapering_window, active_runs: Active sources and edge fade
- driving_parameters_for_array: Selection, driving function and tapering
"""

from focused_wfs.core.config import (
    ConfigurationError,
    Dimension,
    DrivingModel,
    WFSConfig,
)
from focused_wfs.core.driving import DrivingParameters, focused_source_driving
from focused_wfs.core.vectors import vector_norm, vector_product
from focused_wfs.geometry import (
    SecondarySources,
    active_runs,
    box_array,
    circular_array,
    driving_parameters_for_array,
    focused_source_selection,
    linear_array,
    tapering_window,
)

# Submodules for more specific imports
from . import core, geometry, io

__version__ = "0.1.0"

__all__ = [
    # Driving functions
    "focused_source_driving",
    "DrivingParameters",
    "WFSConfig",
    "Dimension",
    "DrivingModel",
    "ConfigurationError",
    "vector_norm",
    "vector_product",
    # Geometry
    "SecondarySources",
    "linear_array",
    "circular_array",
    "box_array",
    "focused_source_selection",
    "tapering_window",
    "active_runs",
    "driving_parameters_for_array",
    # Submodules
    "core",
    "geometry",
    "io",
]
