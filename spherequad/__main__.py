#!/usr/bin/env python
"""Quick-start guide for spherequad library usage.

Run with: python -m spherequad

This module intentionally avoids importing spherequad internals to provide
a fast, clean startup for displaying help text.
"""

from __future__ import annotations

QUICKSTART = """\
================================================================================
                              SPHEREQUAD
     Stack-free bounding-sphere quadtrees for GPU-style overlap traversal
================================================================================

INSTALLATION
------------
    pip install spherequad

BASIC USAGE
-----------
    import numpy as np
    from spherequad import QuadtreeBuilder

    # N x N grid of [x, y, z, radius] rows; N must be a power of two
    points = np.random.rand(64 * 64, 4).astype(np.float32)
    points[:, 3] = 0.03

    tree = QuadtreeBuilder().fit(points)
    tree.level_count            # 7 levels for a 64 x 64 grid
    tree.spheres.root           # [cx, cy, cz, radius] enclosing the grid

    # Stack-free overlap query; returns rows of tree.points
    hits = tree.query_overlaps([0.5, 0.5, 0.5], 0.1)

PIPELINE STAGES
---------------
    from spherequad import sort_points, build_pyramid, thread_links

    result = sort_points(points.copy())          # in-place spatial sort
    spheres = build_pyramid(result.points)       # 2x2 bounding-sphere merges
    links = thread_links(result.side)            # hit/miss link pyramids

RUNTIME OPTIONS
---------------
    from spherequad import QuadtreeBuilder, Runtime

    runtime = Runtime(
        precision="float64",
        distance_mode="euclidean",   # default "proxy"
        initial_axis="x",            # default "deviation"
        enable_numba=True,           # compiled quicksort kernel
        verify_sort=True,
    )
    tree = QuadtreeBuilder(runtime).fit(points)

    Environment equivalents: SPHEREQUAD_PRECISION, SPHEREQUAD_DISTANCE,
    SPHEREQUAD_INITIAL_AXIS, SPHEREQUAD_ENABLE_NUMBA, SPHEREQUAD_VERIFY_SORT,
    SPHEREQUAD_ENABLE_DIAGNOSTICS, SPHEREQUAD_LOG_LEVEL.

BENCHMARKING
------------
    python -m benchmarks.build_index --sides 64 128 256 --repeat 3

================================================================================
"""


def main() -> None:
    """Print quick-start guide."""
    print(QUICKSTART)


if __name__ == "__main__":
    main()
