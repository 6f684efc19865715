"""Unit coverage for coordinate pairs."""

import jax.numpy as jnp
import numpy as np
import pytest

from mimirax import CoordinatePair, InvalidDimensionError


def test_pair_copies_vector_on_construction():
    source = np.array([1.0, 2.0, 3.0])
    pair = CoordinatePair("a", source)
    source[0] = 99.0

    assert np.allclose(np.asarray(pair.location), [1.0, 2.0, 3.0])
    assert pair.value == "a"
    assert pair.dimension == 3


def test_location_returns_fresh_copy_each_call():
    pair = CoordinatePair("a", [1.0, 2.0])
    first = pair.location
    second = pair.location

    assert first is not second
    assert jnp.array_equal(first, second)
    assert first.dtype == jnp.float64


def test_from_coordinates_matches_vector_constructor():
    loose = CoordinatePair.from_coordinates("p", 1, 2.5, -3)
    packed = CoordinatePair("q", [1.0, 2.5, -3.0])

    assert loose == packed
    assert loose.value == "p"


def test_equality_and_hash_ignore_value():
    a = CoordinatePair("first", [0.5, 0.25])
    b = CoordinatePair("second", [0.5, 0.25])
    c = CoordinatePair("first", [0.5, 0.26])

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_equality_requires_matching_length():
    assert CoordinatePair(None, [1.0, 2.0]) != CoordinatePair(None, [1.0, 2.0, 0.0])
    assert CoordinatePair(None, [1.0]) != (1.0,)


def test_key_truncates_to_indexed_dimensions():
    pair = CoordinatePair("x", [1.0, 2.0, 3.0, 4.0])

    assert jnp.array_equal(pair.key(2), jnp.array([1.0, 2.0]))
    assert pair.dimension == 4


def test_repr_renders_null_value():
    assert repr(CoordinatePair(None, [1.0, 2.0])) == "CoordinatePair((1, 2) : NULL)"
    assert "'city'" in repr(CoordinatePair("city", [0.5]))


def test_pair_rejects_non_vector_input():
    with pytest.raises(InvalidDimensionError):
        CoordinatePair("bad", [[1.0, 2.0], [3.0, 4.0]])
