import numpy as np
import pytest

from spherequad.core import (
    GridWindow,
    IndexingOrder,
    as_point_buffer,
    grid_side,
    level_widths,
    normalised,
    proxy_distance,
    total_node_count,
    validate_side,
)
from spherequad.exceptions import InvalidDimensionError


def test_full_window_covers_the_grid_row_major():
    window = GridWindow.full(4)

    assert window.count == 16
    assert window.order is IndexingOrder.ROW_MAJOR
    np.testing.assert_array_equal(window.flat_indices(), np.arange(16))
    assert window.cell(5) == (1, 1)


def test_column_major_window_walks_columns():
    window = GridWindow.full(2).flipped()

    assert window.order is IndexingOrder.COLUMN_MAJOR
    np.testing.assert_array_equal(window.flat_indices(), [0, 2, 1, 3])
    assert [window.buffer_index(k) for k in range(4)] == [0, 2, 1, 3]


def test_bisect_row_major_splits_top_and_bottom():
    top, bottom = GridWindow.full(4).bisect()

    assert (top.x, top.y, top.width, top.height) == (0, 0, 4, 2)
    assert (bottom.x, bottom.y, bottom.width, bottom.height) == (0, 2, 4, 2)
    assert top.order is bottom.order is IndexingOrder.ROW_MAJOR


def test_bisect_column_major_splits_left_and_right():
    window = GridWindow(x=0, y=2, width=4, height=2, stride=4, order=IndexingOrder.COLUMN_MAJOR)

    left, right = window.bisect()

    assert (left.x, left.y, left.width, left.height) == (0, 2, 2, 2)
    assert (right.x, right.y, right.width, right.height) == (2, 2, 2, 2)


def test_bisect_odd_extent_gives_remainder_to_second_half():
    window = GridWindow(x=0, y=0, width=3, height=3, stride=3)

    first, second = window.bisect()

    assert first.height == 1
    assert second.height == 2
    assert first.count + second.count == window.count
    assert not first.overlaps(second)


def test_windows_over_same_buffer_index_disjoint_rows():
    top, bottom = GridWindow.full(8).bisect()

    rows_top = set(top.flat_indices().tolist())
    rows_bottom = set(bottom.flat_indices().tolist())

    assert rows_top.isdisjoint(rows_bottom)
    assert rows_top | rows_bottom == set(range(64))


def test_as_point_buffer_flattens_square_grids_row_major():
    grid = np.arange(2 * 2 * 4, dtype=np.float64).reshape(2, 2, 4)

    buffer = as_point_buffer(grid)

    assert buffer.shape == (4, 4)
    assert buffer.dtype == np.float32
    np.testing.assert_array_equal(buffer[1], grid[0, 1])


def test_as_point_buffer_rejects_bad_shapes():
    with pytest.raises(InvalidDimensionError):
        as_point_buffer(np.zeros((2, 3, 4)))
    with pytest.raises(ValueError):
        as_point_buffer(np.zeros((4, 3)))
    assert as_point_buffer([]).shape == (0, 4)


@pytest.mark.parametrize("side", [0, 3, 6, -4])
def test_validate_side_rejects_non_powers_of_two(side: int):
    with pytest.raises(InvalidDimensionError):
        validate_side(side)


def test_validate_side_rejects_rectangles():
    with pytest.raises(InvalidDimensionError):
        validate_side(4, 8)


def test_grid_side_requires_square_counts():
    assert grid_side(64) == 8
    assert grid_side(9) == 3
    with pytest.raises(InvalidDimensionError):
        grid_side(10)


def test_level_widths_and_node_count():
    assert level_widths(1) == (1,)
    assert level_widths(8) == (8, 4, 2, 1)
    assert total_node_count(1) == 1
    assert total_node_count(4) == 16 + 4 + 1
    assert len(level_widths(1024)) == 11
    assert level_widths(1024)[-1] == 1
    assert total_node_count(1024) == (4 ** 11 - 1) // 3


def test_proxy_distance_is_zero_on_a_common_shell():
    a = np.array([1.0, 0.0, 0.0])
    b = np.array([0.0, 1.0, 0.0])

    assert proxy_distance(a, b) == 0.0
    assert proxy_distance(a, np.zeros(3)) == pytest.approx(1.0)


def test_normalised_zero_vector_stays_zero():
    np.testing.assert_array_equal(normalised(np.zeros(3, dtype=np.float32)), np.zeros(3))
    np.testing.assert_allclose(normalised(np.array([3.0, 0.0, 4.0])), [0.6, 0.0, 0.8])
