from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Tuple

import numpy as np

from spherequad.core.links import LinkPyramid
from spherequad.diagnostics import log_operation
from spherequad.exceptions import TraversalLoopError
from spherequad.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from spherequad.algo.build import SphereQuadtree

LOGGER = get_logger("queries.walk")


def _node_budget(widths: Tuple[int, ...]) -> int:
    return sum(width * width for width in widths)


def iter_preorder(hit: LinkPyramid, miss: LinkPyramid) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(x, y, level)`` from the root, taking hit links before miss links.

    This is the walk a stack-free consumer performs when every node passes
    its test. Stops once both links of a node are null.
    """

    widths = hit.widths
    budget = _node_budget(widths)
    x, y, level = 0, 0, len(widths) - 1
    for _ in range(budget):
        yield x, y, level
        link = hit.link(x, y, level)
        if link.is_null:
            link = miss.link(x, y, level)
        if link.is_null:
            return
        x, y, level = link.target(widths)
    raise TraversalLoopError(f"Link walk visited more than {budget} nodes.")


def overlapping_points(tree: "SphereQuadtree", center: Any, radius: float) -> np.ndarray:
    """Rows of ``tree.points`` whose spheres overlap the query sphere.

    Walks the pyramid without a stack: a node that overlaps the query is
    entered through its hit link, otherwise the walk skips ahead through its
    miss link. Merged radii only guarantee containment of one child per
    group, so the result can be a subset of the brute-force answer.
    """

    with log_operation(LOGGER, "overlap_query") as op_log:
        query = np.asarray(center, dtype=np.float64).reshape(3)
        query_radius = float(radius)
        hit, miss = tree.hit_links, tree.miss_links
        widths = hit.widths
        budget = _node_budget(widths)
        found: list[int] = []
        visited = 0
        x, y, level = 0, 0, len(widths) - 1
        while True:
            visited += 1
            if visited > budget:
                raise TraversalLoopError(f"Overlap walk visited more than {budget} nodes.")
            sphere = np.asarray(tree.spheres.sphere(x, y, level), dtype=np.float64)
            offset = sphere[:3] - query
            overlaps = float(np.sqrt(np.dot(offset, offset))) <= query_radius + float(sphere[3])
            link = hit.link(x, y, level) if overlaps else miss.link(x, y, level)
            if overlaps and level == 0:
                found.append(x + widths[0] * y)
            if overlaps and link.is_null:
                link = miss.link(x, y, level)
            if link.is_null:
                break
            x, y, level = link.target(widths)
        op_log.add_metadata(visited=visited, matches=len(found))
        return np.asarray(sorted(found), dtype=np.int64)


__all__ = ["iter_preorder", "overlapping_points"]
