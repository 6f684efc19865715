"""Tests for k-nearest-neighbour queries."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from mimirax import IndexConfig, IndexNotBuiltError, KDTreeIndex


def _sample_points(n: int = 32, dim: int = 3, seed: int = 5) -> jnp.ndarray:
    key = jax.random.PRNGKey(seed)
    return jax.random.uniform(key, (n, dim), minval=-1.0, maxval=1.0, dtype=jnp.float64)


def _filled_index(points: jnp.ndarray, dim: int, config=None) -> KDTreeIndex:
    index = KDTreeIndex(dim, config=config)
    for i, row in enumerate(points):
        index.add(row, i)
    index.build()
    return index


def _distances(pairs, probe: np.ndarray) -> np.ndarray:
    return np.array([np.linalg.norm(np.asarray(p.location) - probe) for p in pairs])


@pytest.mark.parametrize("backend", ["tree", "dense"])
@pytest.mark.parametrize("k", [1, 4, 9])
def test_nearest_k_matches_sorted_brute_force(backend, k):
    points = _sample_points(n=80, dim=3)
    probes = np.asarray(_sample_points(n=12, dim=3, seed=77))
    index = _filled_index(points, 3)
    host = np.asarray(points)

    for probe in probes:
        result = index.nearest_k(probe, k, backend=backend)
        expected = np.sort(np.linalg.norm(host - probe[None, :], axis=1))[:k]

        assert len(result) == k
        assert np.allclose(_distances(result, probe), expected, atol=1e-12)


def test_nearest_k_is_ordered_by_distance():
    points = _sample_points(n=50, dim=2)
    index = _filled_index(points, 2)
    probe = np.array([0.1, -0.2])

    distances = _distances(index.nearest_k(probe, 10), probe)

    assert np.all(np.diff(distances) >= 0.0)


def test_nearest_k_first_entry_matches_nearest():
    points = _sample_points(n=50, dim=3, seed=21)
    index = _filled_index(points, 3)
    probe = np.array([0.3, 0.3, -0.4])

    top = index.nearest_k(probe, 1)[0]
    best = index.nearest(probe)

    assert np.linalg.norm(np.asarray(top.location) - probe) == pytest.approx(
        np.linalg.norm(np.asarray(best.location) - probe)
    )


def test_tree_and_dense_backends_agree():
    points = _sample_points(n=96, dim=3, seed=2)
    index = _filled_index(points, 3)
    probe = np.array([0.0, 0.5, -0.5])

    tree = index.nearest_k(probe, 6, backend="tree")
    dense = index.nearest_k(probe, 6, backend="dense")

    assert np.allclose(_distances(tree, probe), _distances(dense, probe), atol=1e-12)
    assert {p.value for p in tree} == {p.value for p in dense}


def test_k_larger_than_count_returns_everything():
    points = _sample_points(n=5, dim=2)
    index = _filled_index(points, 2)

    result = index.nearest_k([0.0, 0.0], 20)

    assert sorted(p.value for p in result) == list(range(5))


def test_nearest_k_includes_pending_pairs():
    index = _filled_index(_sample_points(n=10, dim=2), 2)
    index.add([4.0, 4.0], "late-1")
    index.add([4.1, 4.1], "late-2")

    for backend in ("tree", "dense"):
        result = index.nearest_k([4.0, 4.05], 2, backend=backend)
        assert {p.value for p in result} == {"late-1", "late-2"}


def test_nearest_k_rejects_non_positive_k():
    index = _filled_index(_sample_points(n=4, dim=2), 2)

    with pytest.raises(ValueError, match="k must be >= 1"):
        index.nearest_k([0.0, 0.0], 0)


def test_nearest_k_requires_build():
    index = KDTreeIndex(2)
    index.add([0.0, 0.0], "a")

    with pytest.raises(IndexNotBuiltError):
        index.nearest_k([0.0, 0.0], 1)


def test_config_selects_default_backend():
    config = IndexConfig(knn_backend="dense")
    index = _filled_index(_sample_points(n=20, dim=2), 2, config=config)
    probe = np.array([0.2, 0.2])

    assert index.config.knn_backend == "dense"
    assert [p.value for p in index.nearest_k(probe, 3)] == [
        p.value for p in index.nearest_k(probe, 3, backend="dense")
    ]
