"""Algorithmic kernels: spatial sort, sphere pyramid and hit/miss link threading."""

from .build import SphereQuadtree, build_index
from .pyramid import SpherePyramid, build_pyramid, merge_spheres
from .sort import (
    SortResult,
    SortStep,
    axis_of_greatest_deviation,
    next_sorting_axis,
    sort_points,
    sort_window,
    verify_window_sorted,
)
from .threader import (
    LinkAssignment,
    QuadrantRole,
    ThreadedLinks,
    ThreaderState,
    WalkMode,
    iter_link_assignments,
    links_for_cell,
    step,
    thread_links,
)

__all__ = [
    "SphereQuadtree",
    "build_index",
    "SpherePyramid",
    "build_pyramid",
    "merge_spheres",
    "SortResult",
    "SortStep",
    "axis_of_greatest_deviation",
    "next_sorting_axis",
    "sort_points",
    "sort_window",
    "verify_window_sorted",
    "LinkAssignment",
    "QuadrantRole",
    "ThreadedLinks",
    "ThreaderState",
    "WalkMode",
    "iter_link_assignments",
    "links_for_cell",
    "step",
    "thread_links",
]
