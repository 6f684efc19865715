"""Tests for the index-type registry and bulk builders."""

import jax.numpy as jnp
import numpy as np
import pytest

import mimirax.registry as registry_api
from mimirax import (
    KDTreeIndex,
    LinearScanIndex,
    available_index_types,
    build_and_query,
    build_index,
    create_index,
    register_index_type,
)


def test_available_index_types_includes_builtins():
    assert available_index_types() == ("kdtree", "linear")


def test_create_index_dispatches_by_type():
    assert isinstance(create_index(3), KDTreeIndex)
    assert isinstance(create_index(3, index_type="linear"), LinearScanIndex)


def test_create_index_rejects_unknown_type():
    with pytest.raises(ValueError, match="Unsupported index_type 'ball'"):
        create_index(2, index_type="ball")


def test_register_index_type_adds_factory(monkeypatch):
    monkeypatch.setattr(registry_api, "_INDEX_TYPES", dict(registry_api._INDEX_TYPES))
    calls = {"count": 0}

    def factory(dimension, *, config=None):
        calls["count"] += 1
        return LinearScanIndex(dimension, config=config)

    register_index_type("custom", factory)
    index = create_index(2, index_type="custom")

    assert calls["count"] == 1
    assert isinstance(index, LinearScanIndex)
    assert "custom" in available_index_types()


def test_register_index_type_rejects_duplicate_without_overwrite(monkeypatch):
    monkeypatch.setattr(registry_api, "_INDEX_TYPES", dict(registry_api._INDEX_TYPES))

    with pytest.raises(ValueError, match="already registered"):
        register_index_type("kdtree", LinearScanIndex)
    register_index_type("kdtree", LinearScanIndex, overwrite=True)
    assert isinstance(create_index(2), LinearScanIndex)


def test_register_index_type_rejects_blank_name():
    with pytest.raises(ValueError, match="non-empty"):
        register_index_type("  ", KDTreeIndex)


def test_build_index_defaults_values_to_row_positions():
    vectors = np.array([[0.0, 0.0], [1.0, 1.0], [4.0, 4.0]])
    index = build_index(vectors)

    assert not index.build_required
    assert index.dimension == 2
    assert index.nearest([3.5, 3.9]).value == 2


def test_build_index_with_explicit_values_and_dimension():
    vectors = [[0.0, 0.0, 9.0], [1.0, 1.0, -9.0]]
    index = build_index(vectors, ["a", "b"], dimension=2, index_type="linear")

    assert isinstance(index, LinearScanIndex)
    assert index.nearest([0.9, 0.9, 9.0]).value == "b"


def test_build_index_validates_shapes():
    with pytest.raises(ValueError, match="one entry per vector"):
        build_index([[0.0, 1.0]], ["a", "b"])
    with pytest.raises(ValueError, match="shape"):
        build_index([0.0, 1.0])


def test_build_index_accepts_empty_input_with_dimension():
    index = build_index([], dimension=3)

    assert index.is_empty
    assert index.nearest([0.0, 0.0, 0.0]) is None


def test_build_and_query_returns_neighbours_per_probe():
    vectors = jnp.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [5.0, 5.0]])
    probes = [[0.1, 0.0], [4.0, 4.0]]

    results = build_and_query(vectors, probes, ["o", "x", "y", "far"], k=2)

    assert len(results) == 2
    assert results[0][0].value == "o"
    assert results[1][0].value == "far"
    assert all(len(row) == 2 for row in results)
