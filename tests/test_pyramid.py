import numpy as np
import pytest

from spherequad import config as sq_config
from spherequad.algo import build_pyramid, merge_spheres, sort_points
from spherequad.exceptions import InvalidDimensionError
from tests.utils.datasets import random_spheres


@pytest.fixture(autouse=True)
def reset_runtime_context():
    sq_config.reset_runtime_context()
    yield
    sq_config.reset_runtime_context()


# Member offsets (dx, dy) of s0..s3 inside a 2x2 group.
_MEMBER_OFFSETS = ((0, 0), (0, 1), (1, 1), (1, 0))


@pytest.mark.parametrize("side", [1, 2, 4, 8, 16, 32, 64, 1024])
def test_level_count_and_widths(side: int):
    rng = np.random.default_rng(side)
    points = random_spheres(rng, side)

    pyramid = build_pyramid(points)

    assert pyramid.level_count == int(np.log2(side)) + 1
    for level, width in enumerate(pyramid.widths):
        assert width == side >> level
        assert pyramid.levels[level].shape == (width * width, 4)
    assert pyramid.levels[-1].shape == (1, 4)


def test_single_point_pyramid_is_the_point():
    points = np.array([[0.1, 0.2, 0.3, 0.05]], dtype=np.float32)

    pyramid = build_pyramid(points)

    assert pyramid.level_count == 1
    np.testing.assert_array_equal(pyramid.root, points[0])


def test_parent_contains_its_farthest_child_exactly():
    rng = np.random.default_rng(10)
    points = sort_points(random_spheres(rng, 16)).points

    pyramid = build_pyramid(points)

    for level in range(1, pyramid.level_count):
        width = pyramid.widths[level]
        for j in range(width):
            for i in range(width):
                parent = pyramid.sphere(i, j, level)
                member = int(pyramid.farthest_child[level][i + width * j])
                dx, dy = _MEMBER_OFFSETS[member]
                child = pyramid.sphere(2 * i + dx, 2 * j + dy, level - 1)
                # Same dtype and operation order as the merge: no tolerance.
                offset = child[:3] - parent[:3]
                reach = np.sqrt(np.sum(offset * offset)) + child[3]
                assert reach.dtype == parent.dtype
                assert reach <= parent[3]


def test_parent_centre_is_member_centroid():
    rng = np.random.default_rng(11)
    points = random_spheres(rng, 4)

    pyramid = build_pyramid(points)

    grid = pyramid.grid(0).astype(np.float64)
    expected = grid[0:2, 0:2, :3].reshape(4, 3).mean(axis=0)
    np.testing.assert_allclose(pyramid.sphere(0, 0, 1)[:3], expected, rtol=1e-5)


def test_merge_picks_first_member_on_ties():
    children = np.zeros((4, 1, 4), dtype=np.float32)
    children[..., 3] = 0.5

    parents, choice = merge_spheres(children)

    assert int(choice[0]) == 0
    np.testing.assert_allclose(parents[0], [0.0, 0.0, 0.0, 0.5])


def test_merge_euclidean_chooses_true_farthest_member():
    children = np.zeros((4, 1, 4), dtype=np.float32)
    children[0, 0, :3] = (1.0, 0.0, 0.0)
    children[1, 0, :3] = (-1.0, 0.0, 0.0)
    children[2, 0, :3] = (0.0, 3.0, 0.0)
    children[3, 0, :3] = (0.0, -1.0, 0.0)

    _, choice = merge_spheres(children, distance_mode="euclidean")

    assert int(choice[0]) == 2


def test_proxy_distance_mode_can_disagree_with_euclidean():
    # The proxy favours the member farthest from the origin, not the centroid.
    children = np.zeros((4, 1, 4), dtype=np.float32)
    children[0, 0, :3] = (10.0, 1.0, 0.0)
    children[1, 0, :3] = (10.0, -1.0, 0.0)
    children[2, 0, :3] = (10.0, 0.0, 3.0)
    children[3, 0, :3] = (11.0, 0.0, 0.0)

    proxy_parents, proxy_choice = merge_spheres(children, distance_mode="proxy")
    euclidean_parents, euclidean_choice = merge_spheres(children, distance_mode="euclidean")

    assert int(proxy_choice[0]) == 3
    assert int(euclidean_choice[0]) == 2
    assert euclidean_parents[0, 3] > proxy_parents[0, 3]


def test_levels_are_read_only():
    rng = np.random.default_rng(12)
    pyramid = build_pyramid(random_spheres(rng, 4))

    with pytest.raises(ValueError):
        pyramid.levels[1][0, 0] = 1.0


def test_input_is_not_modified():
    rng = np.random.default_rng(13)
    points = random_spheres(rng, 8)
    original = points.copy()

    build_pyramid(points)

    np.testing.assert_array_equal(points, original)


@pytest.mark.parametrize(
    "count, side",
    [
        (0, None),
        (9, None),
        (12, None),
        (16, 8),
    ],
)
def test_invalid_dimensions_raise(count: int, side):
    points = np.zeros((count, 4), dtype=np.float32)

    with pytest.raises(InvalidDimensionError):
        build_pyramid(points, side=side)


def test_precision_follows_runtime(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SPHEREQUAD_PRECISION", "float64")
    rng = np.random.default_rng(14)

    pyramid = build_pyramid(random_spheres(rng, 4, dtype=np.float64))

    assert all(level.dtype == np.float64 for level in pyramid.levels)
