"""Spherequad: stack-free bounding-sphere quadtrees over square point grids.

Quick Start
-----------
>>> import numpy as np
>>> from spherequad import QuadtreeBuilder
>>>
>>> # 64 x 64 grid of [x, y, z, radius] rows
>>> points = np.random.rand(64 * 64, 4).astype(np.float32)
>>> points[:, 3] = 0.03
>>> tree = QuadtreeBuilder().fit(points)
>>> hits = tree.query_overlaps([0.5, 0.5, 0.5], 0.1)

Classes
-------
QuadtreeBuilder : Builds a threaded sphere quadtree from a point grid.
SphereQuadtree : Sorted points, sphere pyramid and hit/miss link pyramids.
Runtime : Configuration for precision, distance mode, numba and logging.
"""

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("spherequad")
except Exception:  # pragma: no cover - best effort during local development
    __version__ = "0.0.1"

# Primary user-facing API
from .api import QuadtreeBuilder, Runtime

# Pipeline stages
from .algo import (
    SpherePyramid,
    SphereQuadtree,
    SortResult,
    ThreadedLinks,
    build_index,
    build_pyramid,
    sort_points,
    thread_links,
)
from .core import GridWindow, IndexingOrder, LinkPyramid, NavigationLink
from .exceptions import (
    InvalidDimensionError,
    SortVerificationError,
    SphereQuadError,
    TraversalLoopError,
)
from .queries import iter_preorder, overlapping_points

__all__ = [
    # Primary API
    "__version__",
    "QuadtreeBuilder",
    "Runtime",
    # Pipeline
    "SphereQuadtree",
    "build_index",
    "SortResult",
    "sort_points",
    "SpherePyramid",
    "build_pyramid",
    "ThreadedLinks",
    "thread_links",
    "iter_preorder",
    "overlapping_points",
    # Data model
    "GridWindow",
    "IndexingOrder",
    "LinkPyramid",
    "NavigationLink",
    # Errors
    "SphereQuadError",
    "InvalidDimensionError",
    "SortVerificationError",
    "TraversalLoopError",
]
