"""Recursive, axis-adaptive spatial sort over a square grid of bounding spheres.

Each window is ordered by projection onto a sorting axis, bisected along its
indexing orientation, and both halves are re-sorted along the next axis in
the X -> Y -> Z rotation with their orientation flipped. After the full
recursion every aligned 2x2 block of the grid holds spatially close spheres,
which is what the pyramid builder's 2x2 merges rely on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Tuple

import numpy as np

from spherequad import config as sq_config
from spherequad.algo._sort_numba import argsort_kernel
from spherequad.core.geometry import (
    POINT_WIDTH,
    as_point_buffer,
    farthest_measure,
    grid_side,
    normalised,
)
from spherequad.core.window import GridWindow
from spherequad.diagnostics import log_operation
from spherequad.exceptions import SortVerificationError
from spherequad.logging import get_logger

LOGGER = get_logger("algo.sort")

_UNIT_AXES = {
    "x": (1.0, 0.0, 0.0),
    "y": (0.0, 1.0, 0.0),
    "z": (0.0, 0.0, 1.0),
}


@dataclass(frozen=True)
class SortStep:
    """A window as it was sorted, with the axis used and its recursion depth."""

    window: GridWindow
    axis: Tuple[float, float, float]
    depth: int


@dataclass(frozen=True)
class SortResult:
    points: np.ndarray
    side: int
    windows_sorted: int
    max_depth: int
    steps: Tuple[SortStep, ...] = ()


@dataclass
class _SortState:
    kernel: Callable[[np.ndarray], np.ndarray]
    verify: bool
    record: bool
    windows_sorted: int = 0
    max_depth: int = 0
    steps: List[SortStep] = field(default_factory=list)


def _project(positions: np.ndarray, axis: np.ndarray) -> np.ndarray:
    return positions[:, 0] * axis[0] + positions[:, 1] * axis[1] + positions[:, 2] * axis[2]


def unit_axis(name: str, dtype: Any = np.float32) -> np.ndarray:
    try:
        return np.asarray(_UNIT_AXES[name], dtype=dtype)
    except KeyError as exc:
        raise ValueError(f"Unknown axis '{name}'. Expected one of {tuple(_UNIT_AXES)}.") from exc


def axis_of_greatest_deviation(
    points: np.ndarray,
    window: GridWindow | None = None,
    *,
    distance_mode: str = "proxy",
) -> np.ndarray:
    """Unit direction of the point farthest from the window centroid.

    "Farthest" uses ``distance_mode``; with the default proxy the choice is a
    cheap heuristic, not a principal axis.
    """

    positions = points[:, :3] if window is None else points[window.flat_indices(), :3]
    if positions.shape[0] == 0:
        return np.zeros(3, dtype=points.dtype)
    centroid = positions.mean(axis=0, dtype=points.dtype)
    scores = farthest_measure(distance_mode)(positions, centroid)
    farthest = positions[int(np.argmax(scores))]
    return normalised(farthest)


def next_sorting_axis(axis: np.ndarray) -> np.ndarray:
    """Rotate X -> Y -> Z -> X, classifying ``axis`` by its dominant component."""

    dtype = np.asarray(axis).dtype
    if axis[0] > 0.5:
        return unit_axis("y", dtype)
    if axis[1] > 0.5:
        return unit_axis("z", dtype)
    return unit_axis("x", dtype)


def sort_window(
    points: np.ndarray,
    window: GridWindow,
    axis: np.ndarray,
    *,
    kernel: Callable[[np.ndarray], np.ndarray] | None = None,
) -> None:
    """Reorder the cells of ``window`` in place by projection onto ``axis``."""

    if window.count < 2:
        return
    kernel = kernel or argsort_kernel(False)
    indices = window.flat_indices()
    keys = _project(points[indices, :3], np.asarray(axis, dtype=points.dtype))
    order = kernel(np.ascontiguousarray(keys))
    points[indices] = points[indices[order]]


def verify_window_sorted(points: np.ndarray, window: GridWindow, axis: np.ndarray) -> bool:
    if window.count < 2:
        return True
    keys = _project(points[window.flat_indices(), :3], np.asarray(axis, dtype=points.dtype))
    return bool(np.all(keys[:-1] <= keys[1:]))


def _sort_recursive(
    points: np.ndarray,
    window: GridWindow,
    axis: np.ndarray,
    depth: int,
    state: _SortState,
) -> None:
    sort_window(points, window, axis, kernel=state.kernel)
    state.windows_sorted += 1
    state.max_depth = max(state.max_depth, depth)
    if state.record:
        state.steps.append(
            SortStep(window=window, axis=tuple(float(a) for a in axis), depth=depth)
        )
    if state.verify and not verify_window_sorted(points, window, axis):
        raise SortVerificationError(
            f"Window {window} is not ordered along axis {tuple(axis)} after sorting."
        )

    child_axis = next_sorting_axis(axis)
    for half in window.bisect():
        if half.count >= 2:
            _sort_recursive(points, half.flipped(), child_axis, depth + 1, state)


def _resolve_buffer(points: Any, dtype: np.dtype) -> np.ndarray:
    if (
        isinstance(points, np.ndarray)
        and points.ndim == 2
        and points.shape[1] == POINT_WIDTH
        and np.issubdtype(points.dtype, np.floating)
    ):
        return points
    return as_point_buffer(points, dtype=dtype)


def sort_points(
    points: Any,
    *,
    initial_axis: str | None = None,
    distance_mode: str | None = None,
    verify: bool | None = None,
    record_steps: bool = False,
    use_numba: bool | None = None,
) -> SortResult:
    """Spatially sort a flat square grid of spheres.

    A floating ``(count, 4)`` numpy array is sorted in place; any other input
    is first copied into a new buffer. Options left as ``None`` fall back to
    the active runtime configuration.
    """

    runtime = sq_config.runtime_config()
    initial_axis = initial_axis or runtime.initial_axis
    distance_mode = distance_mode or runtime.distance_mode
    verify = runtime.verify_sort if verify is None else verify
    use_numba = runtime.enable_numba if use_numba is None else use_numba

    with log_operation(LOGGER, "sort_points") as op_log:
        buffer = _resolve_buffer(points, runtime.dtype)
        count = int(buffer.shape[0])
        if count == 0:
            op_log.add_metadata(points=0, windows=0)
            return SortResult(points=buffer, side=0, windows_sorted=0, max_depth=0)

        side = grid_side(count)
        window = GridWindow.full(side)
        if initial_axis == "deviation":
            axis = axis_of_greatest_deviation(buffer, window, distance_mode=distance_mode)
        else:
            axis = unit_axis(initial_axis, buffer.dtype)
        if not np.any(axis):
            LOGGER.debug("Sorting axis degenerated to zero; top-level order is kept.")

        state = _SortState(
            kernel=argsort_kernel(use_numba),
            verify=verify,
            record=record_steps,
        )
        if count >= 2:
            _sort_recursive(buffer, window, axis, 0, state)

        op_log.add_metadata(
            points=count,
            side=side,
            windows=state.windows_sorted,
            max_depth=state.max_depth,
            initial_axis=initial_axis,
            distance=distance_mode,
            numba=use_numba,
        )
        return SortResult(
            points=buffer,
            side=side,
            windows_sorted=state.windows_sorted,
            max_depth=state.max_depth,
            steps=tuple(state.steps),
        )


__all__ = [
    "SortStep",
    "SortResult",
    "unit_axis",
    "axis_of_greatest_deviation",
    "next_sorting_axis",
    "sort_window",
    "verify_window_sorted",
    "sort_points",
]
