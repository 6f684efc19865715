"""Tests that tree searches skip subtrees beyond the pruning radius."""

import time

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from mimirax import KDTreeIndex, LeafNode


def _grid_index(side: int = 16) -> KDTreeIndex:
    index = KDTreeIndex(2)
    for x in range(side):
        for y in range(side):
            index.add([float(x), float(y)], (x, y))
    index.build()
    return index


@pytest.fixture
def leaf_visits(monkeypatch):
    visits = {"count": 0}
    original = LeafNode.distance_bound

    def counting_distance_bound(self, probe):
        visits["count"] += 1
        return original(self, probe)

    monkeypatch.setattr(LeafNode, "distance_bound", counting_distance_bound)
    return visits


@pytest.mark.parametrize(
    ("probe", "expected"),
    [([7.3, 8.6], (7, 9)), ([2.2, 13.9], (2, 14)), ([12.6, 0.4], (13, 0))],
)
def test_nearest_visits_a_small_fraction_of_leaves(leaf_visits, probe, expected):
    index = _grid_index()

    result = index.nearest(probe)

    assert result.value == expected
    assert 0 < leaf_visits["count"] <= index.count // 4


def test_tree_nearest_k_visits_a_small_fraction_of_leaves(leaf_visits):
    index = _grid_index()

    result = index.nearest_k([7.3, 8.6], 4, backend="tree")

    assert [pair.value for pair in result][:2] == [(7, 9), (7, 8)]
    assert len(result) == 4
    assert 0 < leaf_visits["count"] <= index.count // 4


def test_large_build_finishes_quickly():
    key = jax.random.PRNGKey(17)
    points = np.asarray(jax.random.uniform(key, (5000, 3), dtype=jnp.float64))
    index = KDTreeIndex(3)
    for value, row in enumerate(points):
        index.add(row, value)

    start = time.perf_counter()
    index.build()
    elapsed = time.perf_counter() - start

    assert index.build_stats.leaf_count == 5000
    assert elapsed < 5.0
    probe = points[4321]
    assert index.nearest(probe).value == 4321
