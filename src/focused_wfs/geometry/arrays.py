"""
Secondary source distributions for WFS loudspeaker arrays.

Each generator returns a SecondarySources instance holding the positions,
the (inward facing) unit normals and the integration weights of the
loudspeakers, ready to be passed to the driving functions.

Classes:
    SecondarySources: Positions, directions and weights of an array

Functions:
    linear_array: Equally spaced line of loudspeakers
    circular_array: Loudspeakers on a circle facing its center
    box_array: Four linear arrays forming a square, facing inward
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass
class SecondarySources:
    """Positions and directions of a secondary source distribution.

    Attributes:
        positions: (N, 3) loudspeaker positions in meters
        directions: (N, 3) unit normals; normalized on construction
        weights: (N,) integration weights (spacing around each loudspeaker
            in meters); defaults to ones

    Example:
        >>> sources = linear_array(number=16, spacing=0.2)
        >>> len(sources)
        16
        >>> sources.directions[0]
        array([ 0., -1.,  0.])
    """

    positions: NDArray[np.floating]
    directions: NDArray[np.floating]
    weights: NDArray[np.floating] | None = None

    def __post_init__(self) -> None:
        """Validate shapes and normalize the directions."""
        self.positions = np.atleast_2d(np.asarray(self.positions, dtype=np.float64))
        self.directions = np.atleast_2d(np.asarray(self.directions, dtype=np.float64))

        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError(f"positions must be Nx3 array, got shape {self.positions.shape}")
        if self.directions.shape != self.positions.shape:
            raise ValueError(
                f"directions must have the same shape as positions {self.positions.shape}, "
                f"got {self.directions.shape}"
            )

        norms = np.linalg.norm(self.directions, axis=1)
        if np.any(norms == 0):
            raise ValueError("directions must be non-zero vectors")
        self.directions = self.directions / norms[:, np.newaxis]

        if self.weights is None:
            self.weights = np.ones(len(self.positions))
        else:
            self.weights = np.asarray(self.weights, dtype=np.float64)
            if self.weights.shape != (len(self.positions),):
                raise ValueError(
                    f"weights must have shape ({len(self.positions)},), got {self.weights.shape}"
                )

    def __len__(self) -> int:
        return len(self.positions)

    def subset(self, mask: ArrayLike) -> SecondarySources:
        """Return the secondary sources selected by a boolean mask or index array."""
        mask = np.asarray(mask)
        return SecondarySources(
            positions=self.positions[mask],
            directions=self.directions[mask],
            weights=self.weights[mask],
        )


def linear_array(
    number: int,
    spacing: float,
    center: ArrayLike = (0.0, 0.0, 0.0),
    orientation: ArrayLike = (0.0, -1.0, 0.0),
) -> SecondarySources:
    """Linear array of equally spaced loudspeakers in the xy plane.

    The loudspeakers lie on the line through ``center`` perpendicular to
    ``orientation`` and all face ``orientation``. With the default
    orientation the array runs along x and radiates towards -y.

    Args:
        number: Number of loudspeakers (>= 1)
        spacing: Distance between neighbouring loudspeakers in meters
        center: (x, y, z) center of the array
        orientation: Direction the loudspeakers face (xy components used)

    Returns:
        SecondarySources ordered along the array axis
    """
    if number < 1:
        raise ValueError(f"number must be >= 1, got {number}")
    if spacing <= 0:
        raise ValueError(f"spacing must be positive, got {spacing}")

    center = np.asarray(center, dtype=np.float64)
    if center.shape != (3,):
        raise ValueError(f"center must be 3D point, got shape {center.shape}")
    nx0 = np.asarray(orientation, dtype=np.float64)
    if nx0.shape != (3,):
        raise ValueError(f"orientation must be 3D vector, got shape {nx0.shape}")
    nx0 = np.array([nx0[0], nx0[1], 0.0])
    norm = np.linalg.norm(nx0)
    if norm == 0:
        raise ValueError("orientation must have a non-zero xy component")
    nx0 /= norm

    # Array axis: orientation rotated by +90 degrees in the xy plane
    axis = np.array([-nx0[1], nx0[0], 0.0])
    offsets = (np.arange(number) - (number - 1) / 2) * spacing

    positions = center + offsets[:, np.newaxis] * axis
    directions = np.tile(nx0, (number, 1))
    weights = np.full(number, float(spacing))
    return SecondarySources(positions=positions, directions=directions, weights=weights)


def circular_array(
    number: int,
    radius: float,
    center: ArrayLike = (0.0, 0.0, 0.0),
) -> SecondarySources:
    """Circular array in the xy plane with all loudspeakers facing the center.

    The first loudspeaker sits at angle 0 (on the +x side of the center);
    the others follow counter-clockwise.

    Args:
        number: Number of loudspeakers (>= 1)
        radius: Circle radius in meters
        center: (x, y, z) center of the circle

    Returns:
        SecondarySources ordered counter-clockwise
    """
    if number < 1:
        raise ValueError(f"number must be >= 1, got {number}")
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    center = np.asarray(center, dtype=np.float64)
    if center.shape != (3,):
        raise ValueError(f"center must be 3D point, got shape {center.shape}")

    phi = np.linspace(0, 2 * np.pi, number, endpoint=False)
    outward = np.stack([np.cos(phi), np.sin(phi), np.zeros(number)], axis=1)

    positions = center + radius * outward
    weights = np.full(number, 2 * np.pi * radius / number)
    return SecondarySources(positions=positions, directions=-outward, weights=weights)


def box_array(
    number: int,
    size: float,
    center: ArrayLike = (0.0, 0.0, 0.0),
) -> SecondarySources:
    """Square array made of four linear arrays facing inward.

    Loudspeakers are distributed evenly over the four sides (``number``
    must be a multiple of 4), ordered counter-clockwise starting with the
    side at -y. Corners are left empty.

    Args:
        number: Total number of loudspeakers (multiple of 4)
        size: Edge length of the square in meters
        center: (x, y, z) center of the square

    Returns:
        SecondarySources ordered side by side
    """
    if number < 4 or number % 4 != 0:
        raise ValueError(f"number must be a positive multiple of 4, got {number}")
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")

    center = np.asarray(center, dtype=np.float64)
    if center.shape != (3,):
        raise ValueError(f"center must be 3D point, got shape {center.shape}")

    per_side = number // 4
    spacing = size / per_side
    half = size / 2
    # (offset of the side from the center, inward normal)
    sides = [
        ((0.0, -half, 0.0), (0.0, 1.0, 0.0)),
        ((half, 0.0, 0.0), (-1.0, 0.0, 0.0)),
        ((0.0, half, 0.0), (0.0, -1.0, 0.0)),
        ((-half, 0.0, 0.0), (1.0, 0.0, 0.0)),
    ]
    arrays = [
        linear_array(per_side, spacing, center=center + np.asarray(offset), orientation=normal)
        for offset, normal in sides
    ]
    # linear_array runs clockwise around its normal; reverse each side so the
    # indices continue counter-clockwise from one side to the next
    return SecondarySources(
        positions=np.concatenate([a.positions[::-1] for a in arrays]),
        directions=np.concatenate([a.directions[::-1] for a in arrays]),
        weights=np.concatenate([a.weights[::-1] for a in arrays]),
    )
