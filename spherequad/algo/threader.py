"""Hit/miss link threading for stack-free preorder traversal of the pyramid.

Every cell gets two links. The hit link descends to the cell's first child
``(2x, 2y)`` one level finer. The miss link skips to the next cell in
preorder. Inside a 2x2 group the order is::

    s0    s3 --> (climb until a non-upper-right ancestor, then its successor;
    |     ^       null once the climb reaches the root)
    v     |
    s1 -> s2

The walk is a small state machine. ``step`` is pure: it takes a state and
returns the next state plus the links assigned to the cell it just entered.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from spherequad.core.geometry import level_widths, total_node_count, validate_side
from spherequad.core.links import LinkPyramid, NavigationLink
from spherequad.diagnostics import log_operation
from spherequad.exceptions import TraversalLoopError
from spherequad.logging import get_logger

LOGGER = get_logger("algo.threader")


class WalkMode(enum.Enum):
    INIT = "init"
    DESCENDING = "descending"
    ASCENDING = "ascending"
    DONE = "done"


class QuadrantRole(enum.Enum):
    """Position of a cell inside its enclosing 2x2 group, from ``(x % 2, y % 2)``."""

    UPPER_LEFT = (0, 0)
    LOWER_LEFT = (0, 1)
    LOWER_RIGHT = (1, 1)
    UPPER_RIGHT = (1, 0)

    @classmethod
    def of(cls, x: int, y: int) -> "QuadrantRole":
        return cls((x % 2, y % 2))


@dataclass(frozen=True)
class LinkAssignment:
    x: int
    y: int
    level: int
    hit: NavigationLink
    miss: NavigationLink


@dataclass(frozen=True)
class ThreaderState:
    mode: WalkMode
    x: int = -1
    y: int = -1
    level: int = -1
    hit: NavigationLink = NavigationLink.null()
    miss: NavigationLink = NavigationLink.null()

    @classmethod
    def initial(cls) -> "ThreaderState":
        return cls(mode=WalkMode.INIT)

    @property
    def done(self) -> bool:
        return self.mode is WalkMode.DONE


def _link(x: int, y: int, level: int, widths: Sequence[int]) -> NavigationLink:
    if level < 0:
        return NavigationLink.null()
    return NavigationLink.to_cell(x, y, level, widths[level])


def _root_links(widths: Sequence[int]) -> Tuple[NavigationLink, NavigationLink]:
    root = len(widths) - 1
    if root == 0:
        return NavigationLink.null(), NavigationLink.null()
    return _link(0, 0, root - 1, widths), NavigationLink.null()


def _upper_right_miss(x: int, y: int, level: int, widths: Sequence[int]) -> NavigationLink:
    root = len(widths) - 1
    # The root (0, 0) is never upper-right, so this climb always stops.
    while True:
        x //= 2
        y //= 2
        level += 1
        if QuadrantRole.of(x, y) is not QuadrantRole.UPPER_RIGHT:
            break
    role = QuadrantRole.of(x, y)
    if role is QuadrantRole.UPPER_LEFT:
        if level == root:
            return NavigationLink.null()
        return _link(x, y + 1, level, widths)
    if role is QuadrantRole.LOWER_LEFT:
        return _link(x + 1, y, level, widths)
    return _link(x, y - 1, level, widths)


def links_for_cell(
    x: int, y: int, level: int, widths: Sequence[int]
) -> Tuple[NavigationLink, NavigationLink]:
    """Hit and miss links of cell ``(x, y)`` at ``level``."""

    if level == len(widths) - 1:
        return _root_links(widths)
    hit = _link(x * 2, y * 2, level - 1, widths)
    role = QuadrantRole.of(x, y)
    if role is QuadrantRole.UPPER_LEFT:
        miss = _link(x, y + 1, level, widths)
    elif role is QuadrantRole.LOWER_LEFT:
        miss = _link(x + 1, y, level, widths)
    elif role is QuadrantRole.LOWER_RIGHT:
        miss = _link(x, y - 1, level, widths)
    else:
        miss = _upper_right_miss(x, y, level, widths)
    return hit, miss


def _is_final_corner(x: int, y: int, level: int, widths: Sequence[int]) -> bool:
    return level == 0 and x == widths[0] - 1 and y == 0


def step(
    state: ThreaderState, widths: Sequence[int]
) -> Tuple[ThreaderState, LinkAssignment | None]:
    """Advance the walk by one cell.

    Returns the next state and the links assigned on entering it, or ``None``
    when nothing was assigned (the final climb onto the root, or an already
    finished walk).
    """

    root = len(widths) - 1

    if state.mode is WalkMode.DONE:
        return state, None

    if state.mode is WalkMode.INIT:
        hit, miss = _root_links(widths)
        mode = WalkMode.DONE if hit.is_null else WalkMode.DESCENDING
        if mode is WalkMode.DONE:
            LOGGER.debug("Single-cell pyramid; the root is the whole walk.")
        assignment = LinkAssignment(x=0, y=0, level=root, hit=hit, miss=miss)
        return ThreaderState(mode=mode, x=0, y=0, level=root, hit=hit, miss=miss), assignment

    if state.mode is WalkMode.DESCENDING:
        follow = state.miss if state.hit.is_null else state.hit
        if follow.is_null:
            raise TraversalLoopError(
                f"Walk dead-ended at ({state.x}, {state.y}, level {state.level}) before the final corner."
            )
        x, y, level = follow.target(widths)
        hit, miss = links_for_cell(x, y, level, widths)
        mode = WalkMode.ASCENDING if _is_final_corner(x, y, level, widths) else WalkMode.DESCENDING
        assignment = LinkAssignment(x=x, y=y, level=level, hit=hit, miss=miss)
        return ThreaderState(mode=mode, x=x, y=y, level=level, hit=hit, miss=miss), assignment

    # Ascending: close out the ancestors on the right-hand edge.
    x, y, level = state.x // 2, state.y // 2, state.level + 1
    if level >= root:
        return ThreaderState(mode=WalkMode.DONE, x=x, y=y, level=level), None
    hit = _link(x * 2, y * 2, level - 1, widths)
    miss = NavigationLink.null()
    assignment = LinkAssignment(x=x, y=y, level=level, hit=hit, miss=miss)
    return (
        ThreaderState(mode=WalkMode.ASCENDING, x=x, y=y, level=level, hit=hit, miss=miss),
        assignment,
    )


def iter_link_assignments(widths: Sequence[int]) -> Iterator[LinkAssignment]:
    """Run the walk to completion, yielding every link assignment in order."""

    widths = tuple(widths)
    # Each cell is entered once, plus at most one revisit per level on the way up.
    limit = sum(width * width for width in widths) + len(widths) + 1
    state = ThreaderState.initial()
    for _ in range(limit):
        state, assignment = step(state, widths)
        if assignment is not None:
            yield assignment
        if state.done:
            return
    raise TraversalLoopError(f"Link walk did not finish within {limit} steps.")


@dataclass(frozen=True)
class ThreadedLinks:
    hit: LinkPyramid
    miss: LinkPyramid
    steps: int

    @property
    def widths(self) -> Tuple[int, ...]:
        return self.hit.widths


def thread_links(width: int, height: int | None = None) -> ThreadedLinks:
    """Build the hit and miss link pyramids for a ``width`` x ``width`` grid.

    Only the grid dimensions matter; no point data is read.
    """

    with log_operation(LOGGER, "thread_links") as op_log:
        side = validate_side(width, height)
        widths = level_widths(side)
        hit = LinkPyramid.empty(widths)
        miss = LinkPyramid.empty(widths)
        steps = 0
        for assignment in iter_link_assignments(widths):
            hit.set(assignment.x, assignment.y, assignment.level, assignment.hit)
            miss.set(assignment.x, assignment.y, assignment.level, assignment.miss)
            steps += 1
        op_log.add_metadata(
            side=side,
            levels=len(widths),
            nodes=total_node_count(side),
            steps=steps,
        )
        return ThreadedLinks(hit=hit.freeze(), miss=miss.freeze(), steps=steps)


__all__ = [
    "WalkMode",
    "QuadrantRole",
    "LinkAssignment",
    "ThreaderState",
    "links_for_cell",
    "step",
    "iter_link_assignments",
    "ThreadedLinks",
    "thread_links",
]
