from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from spherequad import config as sq_config
from spherequad.core.geometry import (
    as_point_buffer,
    farthest_measure,
    grid_side,
    level_widths,
    validate_side,
)
from spherequad.diagnostics import log_operation
from spherequad.exceptions import InvalidDimensionError
from spherequad.logging import get_logger

LOGGER = get_logger("algo.pyramid")


@dataclass(frozen=True)
class SpherePyramid:
    """Bounding spheres for every level, finest (the points themselves) first.

    ``farthest_child[L]`` (for ``L >= 1``) records which member of each 2x2
    group set the parent radius, numbered ``s0=(2i, 2j)``, ``s1=(2i, 2j+1)``,
    ``s2=(2i+1, 2j+1)``, ``s3=(2i+1, 2j)``. Index 0 is an empty placeholder.
    """

    levels: Tuple[np.ndarray, ...]
    farthest_child: Tuple[np.ndarray, ...]

    @property
    def level_count(self) -> int:
        return len(self.levels)

    @property
    def widths(self) -> Tuple[int, ...]:
        side = int(round(np.sqrt(self.levels[0].shape[0])))
        return level_widths(side)

    @property
    def root(self) -> np.ndarray:
        return self.levels[-1][0]

    def grid(self, level: int) -> np.ndarray:
        """Level ``level`` as a ``(width, width, 4)`` array indexed ``[y, x]``."""

        width = self.widths[level]
        return self.levels[level].reshape(width, width, -1)

    def sphere(self, x: int, y: int, level: int) -> np.ndarray:
        width = self.widths[level]
        return self.levels[level][x + width * y]


def merge_spheres(
    children: np.ndarray,
    *,
    distance_mode: str = "proxy",
) -> Tuple[np.ndarray, np.ndarray]:
    """Merge groups of four spheres into one parent sphere each.

    ``children`` has shape ``(4, ..., 4)``: the four members along axis 0. The
    parent centre is the members' centroid; the parent radius reaches the
    farthest member's centre plus that member's radius. Only the farthest
    member is guaranteed to be contained. Returns ``(parents, choice)``.
    """

    positions = children[..., :3]
    centroid = (positions[0] + positions[1] + positions[2] + positions[3]) / children.dtype.type(4)
    scores = farthest_measure(distance_mode)(positions, centroid[None, ...])
    # argmax keeps the first member on ties.
    choice = np.argmax(scores, axis=0)
    farthest = np.take_along_axis(children, choice[None, ..., None], axis=0)[0]
    offset = farthest[..., :3] - centroid
    radius = np.sqrt(np.sum(offset * offset, axis=-1)) + farthest[..., 3]
    parents = np.concatenate([centroid, radius[..., None]], axis=-1).astype(children.dtype, copy=False)
    return parents, choice.astype(np.uint8)


def _reduce_level(level: np.ndarray, width: int, distance_mode: str) -> Tuple[np.ndarray, np.ndarray]:
    grid = level.reshape(width, width, -1)
    children = np.stack(
        [
            grid[0::2, 0::2],
            grid[1::2, 0::2],
            grid[1::2, 1::2],
            grid[0::2, 1::2],
        ]
    )
    parents, choice = merge_spheres(children, distance_mode=distance_mode)
    half = width // 2
    return (
        np.ascontiguousarray(parents.reshape(half * half, -1)),
        np.ascontiguousarray(choice.reshape(half * half)),
    )


def build_pyramid(
    points: Any,
    *,
    side: int | None = None,
    distance_mode: str | None = None,
) -> SpherePyramid:
    """Build every coarser level of bounding spheres over a sorted point grid.

    Raises :class:`InvalidDimensionError` before allocating anything when the
    grid is empty, not square or not a power of two.
    """

    runtime = sq_config.runtime_config()
    distance_mode = distance_mode or runtime.distance_mode
    with log_operation(LOGGER, "build_pyramid") as op_log:
        buffer = as_point_buffer(points, dtype=runtime.dtype)
        count = int(buffer.shape[0])
        if count == 0:
            raise InvalidDimensionError("Cannot build a pyramid over zero points.")
        if side is None:
            side = grid_side(count)
        elif side * side != count:
            raise InvalidDimensionError(
                f"Expected {side * side} points for a {side}x{side} grid; received {count}."
            )
        widths = level_widths(validate_side(side))
        if len(widths) == 1:
            LOGGER.debug("Single-point grid; pyramid has only the root level.")

        levels = [buffer]
        choices = [np.zeros(0, dtype=np.uint8)]
        for width in widths[:-1]:
            parents, choice = _reduce_level(levels[-1], width, distance_mode)
            levels.append(parents)
            choices.append(choice)
        for array in (*levels, *choices):
            array.setflags(write=False)

        op_log.add_metadata(side=side, levels=len(levels), distance=distance_mode)
        return SpherePyramid(levels=tuple(levels), farthest_child=tuple(choices))


__all__ = ["SpherePyramid", "merge_spheres", "build_pyramid"]
