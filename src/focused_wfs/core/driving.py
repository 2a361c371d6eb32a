"""
Time-domain WFS driving functions for a focused source.

For every secondary source x0 with normal nx0 the driving signal of a focused
source at xs is a weighted and delayed copy of a prototype (pre-filtered)
excitation:

    d(x0, t) = weight(x0) * h(t - delay(x0))

with delay = -|x0 - xs| / c, i.e. the secondary sources farthest from the
focus start first and the wavefronts converge at xs. The weight depends on
the source model and, for 2.5D synthesis, on the amplitude correction
referenced to a point, line or circle.

Dimension/model pairs and their weights (r = |x0 - xs|):

    2D/3D  default           1/(2pi)      (xs-x0)·nx0 / r^2
    2D/3D  line_sink         1/(2pi)      (x0-xs)·nx0 / r^(3/2)
    2D/3D  legacy            1/(2pi)      (xs-x0)·nx0 / r^(3/2)
    2.5D   default/ref_circ  g0/sqrt(2pi) (xs-x0)·nx0 / r^(3/2)
    2.5D   reference_point   g0/sqrt(2pi) (xs-x0)·nx0 / r^(3/2)
    2.5D   reference_line    g0/sqrt(2pi) (xs-x0)·nx0 / r^(3/2)
    2.5D   legacy            g0/(2pi)     (xs-x0)·nx0 / r^(3/2)

In 2D the default model is the line sink.

References:
    Start (1997), "Direct Sound Enhancement by Wave Field Synthesis",
    PhD thesis, TU Delft.
    Verheijen (1997), "Sound Reproduction by Wave Field Synthesis",
    PhD thesis, TU Delft.
    Wierstorf (2014), "Perceptual Assessment of Sound Field Synthesis",
    PhD thesis, TU Berlin.

Example:
    >>> import numpy as np
    >>> from focused_wfs import WFSConfig, focused_source_driving
    >>> x0 = np.array([[0.0, 0.0, 0.0]])
    >>> nx0 = np.array([[0.0, 0.0, 1.0]])
    >>> conf = WFSConfig(speed_of_sound=343.0, dimension="3D")
    >>> params = focused_source_driving(x0, nx0, (0.0, 0.0, 1.0), conf)
    >>> params.weight
    array([0.15915494])
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from focused_wfs.core.config import (
    ConfigurationError,
    Dimension,
    DrivingModel,
    check_model,
    parse_dimension,
    parse_driving_model,
    resolve_model,
)
from focused_wfs.core.vectors import vector_norm, vector_product

Vectors = NDArray[np.floating]
DrivingFunction = Callable[
    [Vectors, Vectors, Vectors, Vectors, float], tuple[Vectors, Vectors]
]


@dataclass(frozen=True, eq=False)
class DrivingParameters:
    """Delay and weight per secondary source.

    Both arrays are index-aligned with the secondary source rows passed to
    the driving function. Unpacks as ``delay, weight = params``.

    Attributes:
        delay: (N,) pre-delay in seconds, always <= 0
        weight: (N,) amplitude weight; the sign carries the polarity
    """

    delay: NDArray[np.floating]
    weight: NDArray[np.floating]

    def __len__(self) -> int:
        return len(self.delay)

    def __iter__(self) -> Iterator[NDArray[np.floating]]:
        return iter((self.delay, self.weight))


# =============================================================================
# 2D / 3D
# =============================================================================


def _point_sink(x0, nx0, xs, xref, c):
    # d(x0,t) = h(t) * 1/(2pi) * (xs-x0)nx0 / |x0-xs|^2 * delta(t + |x0-xs|/c)
    r = vector_norm(x0 - xs)
    delay = -1.0 / c * r
    weight = 1.0 / (2 * np.pi) * vector_product(xs - x0, nx0) / r**2
    return delay, weight


def _line_sink(x0, nx0, xs, xref, c):
    # Polarity follows (x0-xs)nx0, unlike every other branch.
    r = vector_norm(x0 - xs)
    delay = -1.0 / c * r
    weight = 1.0 / (2 * np.pi) * vector_product(x0 - xs, nx0) / r ** (3 / 2)
    return delay, weight


def _legacy(x0, nx0, xs, xref, c):
    # Wierstorf (2014), eq. (2.75)
    r = vector_norm(x0 - xs)
    delay = -1.0 / c * r
    weight = 1.0 / (2 * np.pi) * vector_product(xs - x0, nx0) / r ** (3 / 2)
    return delay, weight


# =============================================================================
# 2.5D
# =============================================================================


def _stationary_phase(x0, nx0, xs, g0, c):
    """Shared 2.5D weight g0/sqrt(2pi) * (xs-x0)nx0 / |x0-xs|^(3/2)."""
    r = vector_norm(x0 - xs)
    delay = -1.0 / c * r
    weight = g0 / np.sqrt(2 * np.pi) * vector_product(xs - x0, nx0) / r ** (3 / 2)
    return delay, weight


def _reference_circle(x0, nx0, xs, xref, c):
    # Two stationary phase approximations, correct on the circle around xs
    # with radius |xref-xs|.
    r = vector_norm(x0 - xs)
    g0 = np.sqrt(1 + r / vector_norm(xref - xs))
    return _stationary_phase(x0, nx0, xs, g0, c)


def _reference_point(x0, nx0, xs, xref, c):
    # One stationary phase approximation, correct at xref.
    # Verheijen (1997), eq. (A.14)
    r = vector_norm(x0 - xs)
    dref = vector_norm(xref - x0)
    g0 = np.sqrt(dref / np.abs(dref - r))
    return _stationary_phase(x0, nx0, xs, g0, c)


def _reference_line(x0, nx0, xs, xref, c):
    # Correct on a line through xref parallel to a linear array.
    # Start (1997), eq. (3.16)
    dref = np.abs(vector_product(xref - x0, nx0))
    ds = np.abs(vector_product(xs - x0, nx0))
    g0 = np.sqrt(dref / (dref - ds))
    return _stationary_phase(x0, nx0, xs, g0, c)


def _legacy_25d(x0, nx0, xs, xref, c):
    # Line sink with g0 = sqrt(2pi|xref-x0|), Wierstorf (2014), eq. (2.76)
    g0 = np.sqrt(2 * np.pi * vector_norm(xref - x0))
    r = vector_norm(xs - x0)
    delay = -1.0 / c * r
    weight = g0 / (2 * np.pi) * vector_product(xs - x0, nx0) / r ** (3 / 2)
    return delay, weight


DRIVING_FUNCTIONS: dict[tuple[Dimension, DrivingModel], DrivingFunction] = {
    (Dimension.TWO_D, DrivingModel.LINE_SINK): _line_sink,
    (Dimension.TWO_D, DrivingModel.LEGACY): _legacy,
    (Dimension.THREE_D, DrivingModel.DEFAULT): _point_sink,
    (Dimension.THREE_D, DrivingModel.LINE_SINK): _line_sink,
    (Dimension.THREE_D, DrivingModel.LEGACY): _legacy,
    (Dimension.TWO_AND_A_HALF_D, DrivingModel.DEFAULT): _reference_circle,
    (Dimension.TWO_AND_A_HALF_D, DrivingModel.REFERENCE_CIRCLE): _reference_circle,
    (Dimension.TWO_AND_A_HALF_D, DrivingModel.REFERENCE_POINT): _reference_point,
    (Dimension.TWO_AND_A_HALF_D, DrivingModel.REFERENCE_LINE): _reference_line,
    (Dimension.TWO_AND_A_HALF_D, DrivingModel.LEGACY): _legacy_25d,
}


def _as_vectors(name: str, v: ArrayLike) -> NDArray[np.floating]:
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        v = v.reshape(1, -1)
    if v.ndim != 2 or v.shape[1] != 3:
        raise ValueError(f"{name} must be Nx3 array, got shape {v.shape}")
    return v


def select_driving_function(dimension: Dimension | str, model: DrivingModel | str) -> DrivingFunction:
    """Look up the driving function for a dimension/model pair.

    The default model is resolved first, so ("2D", "default") returns the
    line sink.

    Raises:
        ConfigurationError: For unknown names or a model not implemented for
            the dimension
    """
    dimension = parse_dimension(dimension)
    model = parse_driving_model(model)
    check_model(dimension, model)
    key = (dimension, resolve_model(dimension, model))
    if key not in DRIVING_FUNCTIONS:
        raise ConfigurationError(
            f"'{model.value}' is not implemented for a {dimension.value} focused source"
        )
    return DRIVING_FUNCTIONS[key]


def focused_source_driving(
    x0: ArrayLike,
    nx0: ArrayLike,
    xs: ArrayLike,
    conf: Any,
) -> DrivingParameters:
    """Delays and weights of the secondary sources for a focused source.

    Rows are computed independently, so a batch of N secondary sources
    gives the same values as N single-row calls.

    Coincident secondary source and focus (r = 0), or a vanishing
    denominator of a 2.5D correction, give non-finite weights; callers are
    expected to avoid such geometry.

    Args:
        x0: (N, 3) secondary source positions in meters
        nx0: (N, 3) secondary source directions (unit vectors)
        xs: (x, y, z) focused source position in meters, or (N, 3)
        conf: WFSConfig, or any object with ``speed_of_sound``,
            ``dimension``, ``driving_function_model`` and
            ``reference_point`` attributes

    Returns:
        DrivingParameters with (N,) delay and weight arrays

    Raises:
        ConfigurationError: For an unknown dimension or model, or a model
            not implemented for the dimension
        ValueError: If the position/direction arrays are malformed
    """
    driving_function = select_driving_function(conf.dimension, conf.driving_function_model)

    x0 = _as_vectors("x0", x0)
    nx0 = _as_vectors("nx0", nx0)
    xs = _as_vectors("xs", xs)
    if x0.shape[0] == 0:
        raise ValueError("x0 must contain at least one secondary source")
    if nx0.shape != x0.shape:
        raise ValueError(
            f"nx0 must have the same shape as x0 {x0.shape}, got {nx0.shape}"
        )
    if xs.shape[0] not in (1, x0.shape[0]):
        raise ValueError(
            f"xs must be a single point or match x0 {x0.shape}, got shape {xs.shape}"
        )
    xref = np.asarray(conf.reference_point, dtype=np.float64).reshape(1, 3)
    c = float(conf.speed_of_sound)

    delay, weight = driving_function(x0, nx0, xs, xref, c)
    return DrivingParameters(delay=delay, weight=weight)
