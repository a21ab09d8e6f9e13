from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

LINK_DTYPE = np.dtype(
    [
        ("u", np.float32),
        ("v", np.float32),
        ("level", np.uint8),
        ("is_null", np.bool_),
    ]
)


@dataclass(frozen=True)
class NavigationLink:
    """Jump target into a pyramid level, addressed by cell-centre ``(u, v)``."""

    u: float
    v: float
    level: int
    is_null: bool = False

    @classmethod
    def null(cls) -> "NavigationLink":
        return _NULL_LINK

    @classmethod
    def to_cell(cls, x: int, y: int, level: int, width: int) -> "NavigationLink":
        return cls(u=(x + 0.5) / width, v=(y + 0.5) / width, level=int(level))

    def target(self, widths: Sequence[int]) -> Tuple[int, int, int]:
        """Decode the link back to ``(x, y, level)`` for a pyramid of ``widths``."""

        if self.is_null:
            raise ValueError("Cannot decode the target of a null link.")
        width = widths[self.level]
        return int(width * self.u), int(width * self.v), self.level

    def as_record(self) -> Tuple[float, float, int, bool]:
        return (self.u, self.v, self.level, self.is_null)


_NULL_LINK = NavigationLink(u=0.0, v=0.0, level=0, is_null=True)


def _null_level(width: int) -> np.ndarray:
    level = np.zeros(width * width, dtype=LINK_DTYPE)
    level["is_null"] = True
    return level


@dataclass(frozen=True)
class LinkPyramid:
    """One link per pyramid cell, stored level by level (finest first)."""

    widths: Tuple[int, ...]
    levels: Tuple[np.ndarray, ...]

    @classmethod
    def empty(cls, widths: Sequence[int]) -> "LinkPyramid":
        widths = tuple(int(width) for width in widths)
        return cls(widths=widths, levels=tuple(_null_level(width) for width in widths))

    @property
    def level_count(self) -> int:
        return len(self.levels)

    def set(self, x: int, y: int, level: int, link: NavigationLink) -> None:
        width = self.widths[level]
        self.levels[level][x + width * y] = link.as_record()

    def link(self, x: int, y: int, level: int) -> NavigationLink:
        width = self.widths[level]
        record = self.levels[level][x + width * y]
        if bool(record["is_null"]):
            return NavigationLink.null()
        return NavigationLink(
            u=float(record["u"]),
            v=float(record["v"]),
            level=int(record["level"]),
        )

    def freeze(self) -> "LinkPyramid":
        for level in self.levels:
            level.setflags(write=False)
        return self


__all__ = ["LINK_DTYPE", "NavigationLink", "LinkPyramid"]
