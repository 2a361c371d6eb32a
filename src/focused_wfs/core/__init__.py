"""Driving function engine: configuration, vector helpers and driving functions."""

from focused_wfs.core.config import (
    LEGAL_MODELS,
    ConfigurationError,
    Dimension,
    DrivingModel,
    WFSConfig,
    resolve_model,
)
from focused_wfs.core.driving import (
    DRIVING_FUNCTIONS,
    DrivingParameters,
    focused_source_driving,
    select_driving_function,
)
from focused_wfs.core.vectors import vector_norm, vector_product

__all__ = [
    "LEGAL_MODELS",
    "ConfigurationError",
    "Dimension",
    "DrivingModel",
    "WFSConfig",
    "resolve_model",
    "DRIVING_FUNCTIONS",
    "DrivingParameters",
    "focused_source_driving",
    "select_driving_function",
    "vector_norm",
    "vector_product",
]
