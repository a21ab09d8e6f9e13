"""Stack-free consumers of a threaded sphere quadtree."""

from .walk import iter_preorder, overlapping_points

__all__ = ["iter_preorder", "overlapping_points"]
