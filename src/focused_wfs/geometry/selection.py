"""
Secondary source selection and tapering for focused sources.

A focused source is synthesized by the part of the array "behind" it: only
loudspeakers whose wavefronts travel through the focus towards the
listening area contribute. The truncated edges of the active array are
faded with a tapering window to reduce diffraction artefacts.

Functions:
    focused_source_selection: Mask of active secondary sources
    tapering_window: Edge fade for a run of active sources
    active_runs: Runs of adjacent active sources
    driving_parameters_for_array: Selection, driving function and tapering
        in one call
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import signal

from focused_wfs.core.config import WFSConfig
from focused_wfs.core.driving import DrivingParameters, focused_source_driving
from focused_wfs.core.vectors import vector_product
from focused_wfs.geometry.arrays import SecondarySources


def focused_source_selection(
    sources: SecondarySources,
    xs: ArrayLike,
    nxs: ArrayLike,
) -> NDArray[np.bool_]:
    """Select the secondary sources active for a focused source.

    A secondary source x0 is active when the focused source radiates away
    from it, i.e. nxs·(xs - x0) > 0.

    Args:
        sources: Secondary source distribution
        xs: (x, y, z) focused source position in meters
        nxs: Direction the focused source radiates into

    Returns:
        (N,) boolean mask aligned with ``sources``
    """
    xs = np.asarray(xs, dtype=np.float64)
    nxs = np.asarray(nxs, dtype=np.float64)
    if xs.shape != (3,):
        raise ValueError(f"xs must be 3D point, got shape {xs.shape}")
    if nxs.shape != (3,):
        raise ValueError(f"nxs must be 3D vector, got shape {nxs.shape}")

    return vector_product(nxs, xs - sources.positions) > 0


def tapering_window(
    sources: SecondarySources | int,
    length: float = 0.2,
) -> NDArray[np.floating]:
    """Tapering window for a run of adjacent active secondary sources.

    A Tukey (tapered cosine) window whose raised-cosine flanks cover
    ``length`` of the run in total, half on each side. The window is
    evaluated on ``number + 2`` points with the two zero end points
    dropped, so the outermost loudspeakers keep a small non-zero weight.

    Args:
        sources: Active secondary sources, or their number
        length: Fraction of the run that is faded (0 disables tapering)

    Returns:
        (number,) window values in (0, 1]
    """
    number = len(sources) if isinstance(sources, SecondarySources) else int(sources)
    if number < 0:
        raise ValueError(f"number must be non-negative, got {number}")
    if not 0 <= length <= 1:
        raise ValueError(f"length must be in [0, 1], got {length}")

    if length == 0 or number <= 2:
        return np.ones(number)
    return signal.windows.tukey(number + 2, alpha=length)[1:-1]


def active_runs(active: ArrayLike, closed: bool = False) -> list[NDArray[np.intp]]:
    """Split an active mask into runs of adjacent secondary sources.

    For a closed array the last and the first secondary source are
    neighbours, so a run crossing index 0 is returned as one run starting
    at its first index before the wrap. A closed array with every source
    active has no edges and gives no runs.

    Args:
        active: (N,) boolean mask, ordered along the array
        closed: Whether index N-1 is adjacent to index 0

    Returns:
        List of index arrays, each ordered along its run
    """
    active = np.asarray(active, dtype=bool)
    if closed and active.all():
        return []

    indices = np.flatnonzero(active)
    if indices.size == 0:
        return []
    runs = np.split(indices, np.flatnonzero(np.diff(indices) > 1) + 1)
    if closed and len(runs) > 1 and runs[0][0] == 0 and runs[-1][-1] == len(active) - 1:
        runs[0] = np.concatenate([runs.pop(), runs[0]])
    return runs


def driving_parameters_for_array(
    sources: SecondarySources,
    xs: ArrayLike,
    nxs: ArrayLike,
    conf: WFSConfig,
    taper: float = 0.2,
    closed: bool = False,
) -> tuple[DrivingParameters, NDArray[np.bool_]]:
    """Driving parameters of a whole array for a focused source.

    Selects the active secondary sources, evaluates the driving function
    for them, and scales the weights by the integration weights and a
    tapering window over each run of adjacent active sources. Inactive
    secondary sources get delay 0 and weight 0.

    Args:
        sources: Secondary source distribution, ordered along the array
        xs: (x, y, z) focused source position in meters
        nxs: Direction the focused source radiates into
        conf: WFSConfig
        taper: Tapering length, see tapering_window
        closed: Whether the array is closed (circle, box), so that runs may
            wrap from the last to the first source

    Returns:
        (DrivingParameters for all N sources, (N,) active mask)
    """
    active = focused_source_selection(sources, xs, nxs)
    delay = np.zeros(len(sources))
    weight = np.zeros(len(sources))

    if np.any(active):
        selected = sources.subset(active)
        params = focused_source_driving(selected.positions, selected.directions, xs, conf)
        window = np.ones(len(sources))
        for run in active_runs(active, closed):
            window[run] = tapering_window(len(run), taper)
        delay[active] = params.delay
        weight[active] = params.weight * window[active] * selected.weights

    return DrivingParameters(delay=delay, weight=weight), active
