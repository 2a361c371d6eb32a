"""
Configuration for focused source driving functions.

The driving function engine reads only four settings: the speed of sound,
the synthesis dimension, the driving function model and the reference point
used by the 2.5D amplitude corrections. They are collected in WFSConfig and
validated once at construction, so an illegal dimension/model pairing never
reaches the engine.

Classes:
    Dimension: Synthesis dimension ("2D", "3D", "2.5D")
    DrivingModel: Closed-form driving function model
    WFSConfig: Validated configuration
    ConfigurationError: Unknown or illegal configuration value

Example:
    >>> from focused_wfs import WFSConfig
    >>> conf = WFSConfig(dimension="2.5D", driving_function_model="reference_point",
    ...                  reference_point=(0, 0, 5))
    >>> conf.resolved_model
    <DrivingModel.REFERENCE_POINT: 'reference_point'>
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np


class ConfigurationError(ValueError):
    """Raised for an unknown dimension, unknown model, or illegal pairing."""

    pass


class Dimension(Enum):
    """Dimensionality of the synthesis.

    TWO_D: Line sources in a plane.
    THREE_D: Point sources on a surface.
    TWO_AND_A_HALF_D: Point sources on a line or curve, correct on a
        reference point/curve only.
    """

    TWO_D = "2D"
    THREE_D = "3D"
    TWO_AND_A_HALF_D = "2.5D"


class DrivingModel(Enum):
    """Source model and amplitude correction of the driving function."""

    DEFAULT = "default"
    LINE_SINK = "line_sink"
    LEGACY = "legacy"
    REFERENCE_CIRCLE = "reference_circle"
    REFERENCE_POINT = "reference_point"
    REFERENCE_LINE = "reference_line"


LEGAL_MODELS: dict[Dimension, frozenset[DrivingModel]] = {
    Dimension.TWO_D: frozenset(
        {DrivingModel.DEFAULT, DrivingModel.LINE_SINK, DrivingModel.LEGACY}
    ),
    Dimension.THREE_D: frozenset(
        {DrivingModel.DEFAULT, DrivingModel.LINE_SINK, DrivingModel.LEGACY}
    ),
    Dimension.TWO_AND_A_HALF_D: frozenset(
        {
            DrivingModel.DEFAULT,
            DrivingModel.REFERENCE_CIRCLE,
            DrivingModel.REFERENCE_POINT,
            DrivingModel.REFERENCE_LINE,
            DrivingModel.LEGACY,
        }
    ),
}

# Keys accepted by WFSConfig.from_mapping, including the short names used in
# toolbox-style configuration files.
_MAPPING_KEYS = {
    "speed_of_sound": "speed_of_sound",
    "c": "speed_of_sound",
    "dimension": "dimension",
    "driving_function_model": "driving_function_model",
    "driving_functions": "driving_function_model",
    "reference_point": "reference_point",
    "xref": "reference_point",
}


def parse_dimension(value: Dimension | str) -> Dimension:
    """Convert a dimension string to a Dimension, raising ConfigurationError."""
    if isinstance(value, Dimension):
        return value
    try:
        return Dimension(value)
    except ValueError:
        allowed = ", ".join(d.value for d in Dimension)
        raise ConfigurationError(
            f"the dimension '{value}' is unknown (expected one of: {allowed})"
        ) from None


def parse_driving_model(value: DrivingModel | str) -> DrivingModel:
    """Convert a model string to a DrivingModel, raising ConfigurationError."""
    if isinstance(value, DrivingModel):
        return value
    try:
        return DrivingModel(value)
    except ValueError:
        allowed = ", ".join(m.value for m in DrivingModel)
        raise ConfigurationError(
            f"'{value}' is not a known driving function model (expected one of: {allowed})"
        ) from None


def check_model(dimension: Dimension, model: DrivingModel) -> None:
    """Raise ConfigurationError unless the model is implemented for the dimension."""
    if model not in LEGAL_MODELS[dimension]:
        allowed = ", ".join(sorted(m.value for m in LEGAL_MODELS[dimension]))
        raise ConfigurationError(
            f"'{model.value}' is not implemented for a {dimension.value} focused source "
            f"(available: {allowed})"
        )


def resolve_model(dimension: Dimension, model: DrivingModel) -> DrivingModel:
    """Resolve the default model for a dimension.

    A 2D focused source needs a line sink as source model, so "default"
    becomes "line_sink" in 2D. Every other pair is returned unchanged.
    """
    if dimension is Dimension.TWO_D and model is DrivingModel.DEFAULT:
        return DrivingModel.LINE_SINK
    return model


@dataclass(frozen=True)
class WFSConfig:
    """Settings read by the focused source driving function.

    Args:
        speed_of_sound: Speed of sound in m/s (must be positive)
        dimension: "2D", "3D" or "2.5D" (or a Dimension)
        driving_function_model: Model name (or a DrivingModel); the legal
            names depend on the dimension, see LEGAL_MODELS
        reference_point: (x, y, z) reference position in meters, used by the
            2.5D models only

    Raises:
        ConfigurationError: For unknown names, an illegal pairing, a
            non-positive speed of sound or a malformed reference point

    Example:
        >>> conf = WFSConfig(speed_of_sound=343.0, dimension="2D")
        >>> conf.resolved_model.value
        'line_sink'
    """

    speed_of_sound: float = 343.0
    dimension: Dimension | str = Dimension.TWO_AND_A_HALF_D
    driving_function_model: DrivingModel | str = DrivingModel.DEFAULT
    reference_point: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        """Coerce names to enums and validate values."""
        dimension = parse_dimension(self.dimension)
        model = parse_driving_model(self.driving_function_model)
        check_model(dimension, model)

        try:
            c = float(self.speed_of_sound)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"speed_of_sound must be a number, got {self.speed_of_sound!r}"
            ) from None
        if not np.isfinite(c) or c <= 0:
            raise ConfigurationError(f"speed_of_sound must be positive, got {c}")

        xref = np.asarray(self.reference_point, dtype=np.float64)
        if xref.shape != (3,):
            raise ConfigurationError(
                f"reference_point must be a 3D point, got shape {xref.shape}"
            )

        object.__setattr__(self, "dimension", dimension)
        object.__setattr__(self, "driving_function_model", model)
        object.__setattr__(self, "speed_of_sound", c)
        object.__setattr__(self, "reference_point", tuple(float(v) for v in xref))

    @property
    def resolved_model(self) -> DrivingModel:
        """Model actually evaluated after default resolution."""
        return resolve_model(self.dimension, self.driving_function_model)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], **overrides: Any) -> WFSConfig:
        """Build a configuration from a plain mapping (e.g. parsed JSON).

        Accepts the field names as well as the short names ``c``,
        ``driving_functions`` and ``xref``. Missing keys keep their defaults.
        Keyword overrides (by field name) that are not None replace the
        mapping values, e.g. command line options on top of a config file.

        Raises:
            ConfigurationError: For unknown keys or invalid values
        """
        kwargs: dict[str, Any] = {}
        for key, value in mapping.items():
            if key not in _MAPPING_KEYS:
                raise ConfigurationError(
                    f"unknown configuration key '{key}' "
                    f"(expected one of: {', '.join(sorted(_MAPPING_KEYS))})"
                )
            name = _MAPPING_KEYS[key]
            if name in kwargs:
                raise ConfigurationError(f"configuration key '{name}' given more than once")
            kwargs[name] = value
        for name, value in overrides.items():
            if name not in _MAPPING_KEYS.values():
                raise TypeError(f"unexpected override '{name}'")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Plain-value representation (round-trips through from_mapping)."""
        return {
            "speed_of_sound": self.speed_of_sound,
            "dimension": self.dimension.value,
            "driving_function_model": self.driving_function_model.value,
            "reference_point": list(self.reference_point),
        }
