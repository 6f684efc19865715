"""Brute-force distance kernels shared by the dense query paths."""

from __future__ import annotations

from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from .pair import CoordinatePair


def pairwise_squared_distances(queries: Array, points: Array) -> Array:
    """Return squared pairwise distances with shape ``(n_queries, n_points)``."""

    deltas = queries[:, None, :] - points[None, :, :]
    return jnp.sum(deltas * deltas, axis=-1)


def stack_keys(pairs: Sequence[CoordinatePair], dimension: int, dtype) -> Array:
    """Stack the indexed keys of ``pairs`` into a ``(n, dimension)`` matrix.

    Rows are gathered on the host and moved to the device in one transfer.
    """

    if not pairs:
        return jnp.zeros((0, dimension), dtype=dtype)
    rows = np.stack([pair.host_key(dimension) for pair in pairs])
    return jnp.asarray(rows, dtype=dtype)


def nearest_dense(points: Array, probe: Array) -> tuple[int, float]:
    """Return ``(row, distance)`` of the row of ``points`` closest to ``probe``."""

    d2 = pairwise_squared_distances(probe[None, :], points)[0]
    row = int(jnp.argmin(d2))
    return row, float(jnp.sqrt(jnp.maximum(d2[row], 0.0)))


def top_k_dense(points: Array, probe: Array, k: int) -> tuple[Array, Array]:
    """Return ``(rows, distances)`` of the ``k`` rows closest to ``probe``.

    ``k`` is clipped to the number of rows; results are ascending by distance.
    """

    k_eff = min(int(k), int(points.shape[0]))
    d2 = pairwise_squared_distances(probe[None, :], points)[0]
    top_scores, rows = jax.lax.top_k(-d2, k_eff)
    best_d2 = jnp.maximum(-top_scores, 0.0)
    return rows, jnp.sqrt(best_d2)


__all__ = [
    "nearest_dense",
    "pairwise_squared_distances",
    "stack_keys",
    "top_k_dense",
]
