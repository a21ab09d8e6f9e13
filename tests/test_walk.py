import logging

import numpy as np
import pytest

from spherequad import config as sq_config
from spherequad.algo import build_index
from spherequad.queries import overlapping_points
from tests.utils.datasets import brute_force_overlaps, random_spheres


@pytest.fixture(autouse=True)
def reset_runtime_context():
    sq_config.reset_runtime_context()
    yield
    sq_config.reset_runtime_context()


@pytest.mark.parametrize("side", [2, 8, 16])
def test_overlap_query_is_subset_of_brute_force(side: int):
    rng = np.random.default_rng(20 + side)
    tree = build_index(random_spheres(rng, side))

    for center in rng.uniform(0.2, 0.8, size=(5, 3)):
        found = overlapping_points(tree, center, 0.1)
        expected = brute_force_overlaps(tree.points, center, 0.1)
        assert set(found.tolist()) <= set(expected.tolist())


def test_huge_query_returns_every_point():
    rng = np.random.default_rng(30)
    tree = build_index(random_spheres(rng, 8))

    found = tree.query_overlaps([0.5, 0.5, 0.5], 100.0)

    np.testing.assert_array_equal(found, np.arange(64))


def test_distant_query_returns_nothing():
    rng = np.random.default_rng(31)
    tree = build_index(random_spheres(rng, 8))

    found = tree.query_overlaps([50.0, 50.0, 50.0], 0.5)

    assert found.dtype == np.int64
    assert found.size == 0


def test_query_on_single_point_tree():
    points = np.array([[0.0, 0.0, 0.0, 0.1]], dtype=np.float32)
    tree = build_index(points)

    np.testing.assert_array_equal(tree.query_overlaps([0.15, 0.0, 0.0], 0.1), [0])
    assert tree.query_overlaps([1.0, 0.0, 0.0], 0.1).size == 0


def test_overlap_query_logs_visit_counts(caplog: pytest.LogCaptureFixture):
    rng = np.random.default_rng(32)
    tree = build_index(random_spheres(rng, 4))
    caplog.set_level(logging.INFO, logger="spherequad.queries.walk")

    tree.query_overlaps([0.5, 0.5, 0.5], 0.2)

    records = [record for record in caplog.records if "op=overlap_query" in record.message]
    assert records, "expected overlap_query operation log"
    assert "visited=" in records[-1].message
    assert "matches=" in records[-1].message
