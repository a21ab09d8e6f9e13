from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Tuple

import numpy as np

from spherequad import config as sq_config
from spherequad.algo.pyramid import SpherePyramid, build_pyramid
from spherequad.algo.sort import sort_points
from spherequad.algo.threader import thread_links
from spherequad.core.geometry import as_point_buffer, grid_side, total_node_count, validate_side
from spherequad.core.links import LinkPyramid
from spherequad.diagnostics import log_operation
from spherequad.exceptions import InvalidDimensionError
from spherequad.logging import get_logger
from spherequad.queries.walk import iter_preorder, overlapping_points

LOGGER = get_logger("algo.build")


@dataclass(frozen=True)
class SphereQuadtree:
    """Sorted points, their bounding-sphere pyramid and the two link pyramids."""

    points: np.ndarray
    spheres: SpherePyramid
    hit_links: LinkPyramid
    miss_links: LinkPyramid

    @property
    def side(self) -> int:
        return self.hit_links.widths[0]

    @property
    def level_count(self) -> int:
        return self.spheres.level_count

    @property
    def node_count(self) -> int:
        return total_node_count(self.side)

    def walk(self) -> Iterator[Tuple[int, int, int]]:
        return iter_preorder(self.hit_links, self.miss_links)

    def query_overlaps(self, center: Any, radius: float) -> np.ndarray:
        return overlapping_points(self, center, radius)


def build_index(
    points: Any,
    *,
    runtime_config: sq_config.RuntimeConfig | None = None,
) -> SphereQuadtree:
    """Sort a copy of ``points``, build its sphere pyramid and thread its links.

    The caller's array is never modified. Dimensions are validated before any
    sorting work starts.
    """

    if runtime_config is not None:
        sq_config.configure_runtime(runtime_config)
    runtime = sq_config.runtime_config()

    with log_operation(LOGGER, "build_index") as op_log:
        buffer = as_point_buffer(points, dtype=runtime.dtype)
        if buffer.shape[0] == 0:
            raise InvalidDimensionError("Cannot build an index over zero points.")
        side = validate_side(grid_side(int(buffer.shape[0])))

        sorted_points = sort_points(buffer).points
        spheres = build_pyramid(sorted_points, side=side)
        links = thread_links(side)

        op_log.add_metadata(side=side, levels=spheres.level_count, steps=links.steps)
        return SphereQuadtree(
            points=spheres.levels[0],
            spheres=spheres,
            hit_links=links.hit,
            miss_links=links.miss,
        )


__all__ = ["SphereQuadtree", "build_index"]
