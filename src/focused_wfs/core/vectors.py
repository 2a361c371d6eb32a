"""
Row-wise vector helpers for matrices of 3D vectors.

Secondary source positions and directions are stored as (N, 3) arrays, one
vector per row. These helpers reduce such matrices to one value per row.

Functions:
    vector_norm: Euclidean norm of each row
    vector_product: Dot product of corresponding rows
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def vector_norm(v: ArrayLike, axis: int = 1) -> NDArray[np.floating]:
    """Euclidean norm of each vector in a matrix of vectors.

    Args:
        v: (N, 3) matrix of vectors, or a single 3-vector
        axis: Axis holding the vector components

    Returns:
        (N,) array of norms (scalar array for a single vector)

    Example:
        >>> vector_norm([[3.0, 4.0, 0.0], [0.0, 0.0, 2.0]])
        array([5., 2.])
    """
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        axis = 0
    return np.sqrt(np.sum(v * v, axis=axis))


def vector_product(a: ArrayLike, b: ArrayLike, axis: int = 1) -> NDArray[np.floating]:
    """Dot product of corresponding vectors in two matrices of vectors.

    A single 3-vector is broadcast against every row of the other argument.

    Args:
        a: (N, 3) matrix of vectors, or a single 3-vector
        b: (N, 3) matrix of vectors, or a single 3-vector
        axis: Axis holding the vector components

    Returns:
        (N,) array of dot products
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.ndim == 1 and b.ndim == 1:
        axis = 0
    return np.sum(a * b, axis=axis)
