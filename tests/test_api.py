import numpy as np
import pytest

from spherequad import (
    InvalidDimensionError,
    QuadtreeBuilder,
    Runtime,
    SphereQuadtree,
    build_index,
)
from spherequad import config as sq_config
from spherequad.core import total_node_count
from tests.utils.datasets import random_spheres


@pytest.fixture(autouse=True)
def reset_runtime_context():
    sq_config.reset_runtime_context()
    yield
    sq_config.reset_runtime_context()


def _rows(points: np.ndarray) -> set:
    return {tuple(row) for row in points.tolist()}


def test_build_index_does_not_touch_caller_points():
    rng = np.random.default_rng(40)
    points = random_spheres(rng, 8)
    original = points.copy()

    tree = build_index(points)

    np.testing.assert_array_equal(points, original)
    assert isinstance(tree, SphereQuadtree)
    assert tree.side == 8
    assert tree.level_count == 4
    assert tree.node_count == total_node_count(8)
    assert _rows(tree.points) == _rows(original)
    assert tree.points is tree.spheres.levels[0]


def test_build_index_walk_visits_every_node():
    rng = np.random.default_rng(41)
    tree = build_index(random_spheres(rng, 16))

    visited = list(tree.walk())

    assert len(visited) == tree.node_count


@pytest.mark.parametrize("count", [0, 3, 36])
def test_build_index_rejects_bad_dimensions(count: int):
    with pytest.raises(InvalidDimensionError):
        build_index(np.zeros((count, 4), dtype=np.float32))


def test_build_index_with_explicit_runtime_config():
    rng = np.random.default_rng(42)
    config = Runtime(precision="float64", distance_mode="euclidean").to_config()

    tree = build_index(random_spheres(rng, 4), runtime_config=config)

    assert tree.points.dtype == np.float64
    assert sq_config.runtime_config().distance_mode == "euclidean"


def test_runtime_overlays_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SPHEREQUAD_DISTANCE", "euclidean")
    monkeypatch.setenv("SPHEREQUAD_VERIFY_SORT", "true")

    runtime = Runtime(initial_axis="X", diagnostics=False)
    config = runtime.to_config()

    assert config.distance_mode == "euclidean"
    assert config.verify_sort is True
    assert config.initial_axis == "x"
    assert config.enable_diagnostics is False


def test_runtime_rejects_invalid_values():
    with pytest.raises(ValueError):
        Runtime(precision="float16").to_config()
    with pytest.raises(ValueError):
        Runtime(extra={"backend": "jax"}).to_config()


def test_runtime_activate_installs_context():
    context = Runtime(precision="float64", log_level="warning").activate()

    assert sq_config.current_runtime_context() is context
    assert context.config.precision == "float64"
    assert context.config.log_level == "WARNING"


def test_runtime_describe_and_updates():
    runtime = Runtime(distance_mode="proxy")
    updated = runtime.with_updates(distance_mode="euclidean", verify_sort=True)

    assert runtime.describe()["distance_mode"] == "proxy"
    summary = updated.describe()
    assert summary["distance_mode"] == "euclidean"
    assert summary["verify_sort"] is True


def test_runtime_from_active_round_trips():
    Runtime(initial_axis="y").activate()

    runtime = Runtime.from_active()

    assert runtime.initial_axis == "y"
    assert runtime.to_config() == sq_config.runtime_config()


def test_builder_fit_uses_its_runtime():
    rng = np.random.default_rng(43)
    builder = QuadtreeBuilder(Runtime(precision="float64", verify_sort=True))

    tree = builder.fit(random_spheres(rng, 8))

    assert tree.points.dtype == np.float64
    assert sq_config.runtime_config().verify_sort is True


def test_builder_queries_require_a_tree():
    with pytest.raises(ValueError):
        QuadtreeBuilder().query_overlaps([0.0, 0.0, 0.0], 1.0)


def test_fitted_builder_answers_queries():
    rng = np.random.default_rng(44)
    builder = QuadtreeBuilder().fitted(random_spheres(rng, 4))

    found = builder.query_overlaps([0.5, 0.5, 0.5], 10.0)

    np.testing.assert_array_equal(found, np.arange(16))
