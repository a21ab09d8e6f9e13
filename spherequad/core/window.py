from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np


class IndexingOrder(enum.Enum):
    """How a window's linear index maps onto its 2D cells."""

    ROW_MAJOR = "row"
    COLUMN_MAJOR = "column"

    def flipped(self) -> "IndexingOrder":
        if self is IndexingOrder.ROW_MAJOR:
            return IndexingOrder.COLUMN_MAJOR
        return IndexingOrder.ROW_MAJOR


@dataclass(frozen=True)
class GridWindow:
    """Rectangular view into a row-major grid buffer of width ``stride``.

    A window owns no data; several windows may address the same buffer.
    Linear index ``k`` walks row by row (``ROW_MAJOR``) or column by column
    (``COLUMN_MAJOR``) inside the window.
    """

    x: int
    y: int
    width: int
    height: int
    stride: int
    order: IndexingOrder = IndexingOrder.ROW_MAJOR

    @classmethod
    def full(cls, side: int) -> "GridWindow":
        return cls(x=0, y=0, width=side, height=side, stride=side)

    @property
    def count(self) -> int:
        return self.width * self.height

    def cell(self, k: int) -> Tuple[int, int]:
        """Window-relative ``(i, j)`` for linear index ``k``."""

        if self.order is IndexingOrder.ROW_MAJOR:
            return k % self.width, k // self.width
        return k // self.height, k % self.height

    def buffer_index(self, k: int) -> int:
        i, j = self.cell(k)
        return (self.x + i) + self.stride * (self.y + j)

    def flat_indices(self) -> np.ndarray:
        """Buffer row of every window cell, in the window's linear order."""

        k = np.arange(self.count, dtype=np.int64)
        if self.order is IndexingOrder.ROW_MAJOR:
            i, j = k % self.width, k // self.width
        else:
            i, j = k // self.height, k % self.height
        return (self.x + i) + self.stride * (self.y + j)

    def flipped(self) -> "GridWindow":
        return replace(self, order=self.order.flipped())

    def bisect(self) -> Tuple["GridWindow", "GridWindow"]:
        """Split into two halves that keep this window's indexing order.

        Row-major windows split into top and bottom halves, column-major
        windows into left and right halves. An odd extent gives the
        remainder to the second half.
        """

        if self.order is IndexingOrder.ROW_MAJOR:
            upper = self.height // 2
            half0 = replace(self, height=upper)
            half1 = replace(self, y=self.y + upper, height=self.height - upper)
        else:
            left = self.width // 2
            half0 = replace(self, width=left)
            half1 = replace(self, x=self.x + left, width=self.width - left)
        return half0, half1

    def overlaps(self, other: "GridWindow") -> bool:
        if self.count == 0 or other.count == 0:
            return False
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )


__all__ = ["IndexingOrder", "GridWindow"]
