"""Core data model: point buffers, grid windows and navigation links."""

from .geometry import (
    DISTANCE_MODES,
    POINT_WIDTH,
    as_point_buffer,
    farthest_measure,
    grid_side,
    is_power_of_two,
    level_count,
    level_widths,
    normalised,
    proxy_distance,
    squared_distance,
    total_node_count,
    validate_side,
)
from .links import LINK_DTYPE, LinkPyramid, NavigationLink
from .window import GridWindow, IndexingOrder

__all__ = [
    "DISTANCE_MODES",
    "POINT_WIDTH",
    "as_point_buffer",
    "farthest_measure",
    "grid_side",
    "is_power_of_two",
    "level_count",
    "level_widths",
    "normalised",
    "proxy_distance",
    "squared_distance",
    "total_node_count",
    "validate_side",
    "LINK_DTYPE",
    "LinkPyramid",
    "NavigationLink",
    "GridWindow",
    "IndexingOrder",
]
