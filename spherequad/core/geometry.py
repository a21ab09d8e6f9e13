"""Point buffers, grid dimensions and the distance measures shared by the sorter
and the pyramid builder.

A point buffer is a flat ``(N*N, 4)`` array of ``[x, y, z, radius]`` rows laid
out row-major, so grid cell ``(x, y)`` lives at row ``x + N*y``.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

import numpy as np

from spherequad.exceptions import InvalidDimensionError

POINT_WIDTH = 4
DISTANCE_MODES = ("proxy", "euclidean")

# Magnitude below which a direction normalises to the zero vector.
_NORMALISE_EPS = 1e-5


def as_point_buffer(points: Any, *, dtype: Any = np.float32, copy: bool = True) -> np.ndarray:
    """Coerce ``points`` into a contiguous ``(count, 4)`` buffer.

    ``(N, N, 4)`` grids are flattened row-major. Empty input yields a
    ``(0, 4)`` buffer.
    """

    arr = np.array(points, dtype=dtype, copy=copy) if copy else np.asarray(points, dtype=dtype)
    if arr.size == 0:
        return np.zeros((0, POINT_WIDTH), dtype=dtype)
    if arr.ndim == 3:
        if arr.shape[0] != arr.shape[1]:
            raise InvalidDimensionError(
                f"Point grid must be square; received shape {arr.shape}."
            )
        arr = arr.reshape(-1, arr.shape[2])
    if arr.ndim != 2 or arr.shape[1] != POINT_WIDTH:
        raise ValueError(
            f"Point buffers must have shape (count, {POINT_WIDTH}); received {arr.shape}."
        )
    return np.ascontiguousarray(arr)


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def validate_side(width: int, height: int | None = None) -> int:
    """Return ``width`` if it describes a square power-of-two grid."""

    height = width if height is None else height
    if width != height:
        raise InvalidDimensionError(f"Grid must be square; received {width}x{height}.")
    if not is_power_of_two(int(width)):
        raise InvalidDimensionError(
            f"Grid side must be a positive power of two; received {width}."
        )
    return int(width)


def grid_side(count: int) -> int:
    """Return the side of the square grid holding ``count`` points."""

    side = math.isqrt(int(count))
    if side * side != count:
        raise InvalidDimensionError(
            f"{count} points cannot be laid out as a square grid."
        )
    return side


def level_count(side: int) -> int:
    return validate_side(side).bit_length()


def level_widths(side: int) -> Tuple[int, ...]:
    """Widths of every pyramid level, finest first: ``(N, N/2, ..., 1)``."""

    side = validate_side(side)
    return tuple(side >> level for level in range(side.bit_length()))


def total_node_count(side: int) -> int:
    return sum(width * width for width in level_widths(side))


def proxy_distance(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Absolute difference of squared magnitudes, ``| |a|^2 - |b|^2 |``.

    This is not a metric: two distinct points on the same sphere around the
    origin are at "distance" zero. Selections made with it are kept as-is so
    that built pyramids stay numerically identical to existing consumers.
    """

    return np.abs(np.sum(a * a, axis=-1) - np.sum(b * b, axis=-1))


def squared_distance(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    diff = a - b
    return np.sum(diff * diff, axis=-1)


def farthest_measure(mode: str):
    """Return the distance function used for farthest-point selection."""

    if mode == "proxy":
        return proxy_distance
    if mode == "euclidean":
        return squared_distance
    raise ValueError(f"Unsupported distance mode '{mode}'. Expected one of {DISTANCE_MODES}.")


def normalised(vector: np.ndarray) -> np.ndarray:
    """Unit vector along ``vector``, or zeros when it is (nearly) zero-length."""

    magnitude = float(np.sqrt(np.sum(vector * vector)))
    if magnitude <= _NORMALISE_EPS:
        return np.zeros_like(vector)
    return vector / vector.dtype.type(magnitude)


__all__ = [
    "POINT_WIDTH",
    "DISTANCE_MODES",
    "as_point_buffer",
    "is_power_of_two",
    "validate_side",
    "grid_side",
    "level_count",
    "level_widths",
    "total_node_count",
    "proxy_distance",
    "squared_distance",
    "farthest_measure",
    "normalised",
]
