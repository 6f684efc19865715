"""Mean-split KD-tree construction.

Each level splits on ``axis = level % dimension`` at the arithmetic mean of the
working set along that axis. The mean is accumulated incrementally, which
avoids a sort per level but does not guarantee a balanced tree: skewed inputs
can produce deep, near-linear subtrees.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from .nodes import InternalNode, LeafNode, Node
from .pair import CoordinatePair

logger = logging.getLogger(__name__)

_EXPAND = 0
_ASSEMBLE = 1


def _next_power_of_two(value: int) -> int:
    value = max(1, int(value))
    return 1 << (value - 1).bit_length()


@jax.jit
def _masked_running_mean(values: Array, mask: Array) -> Array:
    def step(carry, item):
        mean, count = carry
        value, valid = item
        next_count = count + 1.0
        next_mean = mean + (value - mean) / next_count
        return (
            jnp.where(valid, next_mean, mean),
            jnp.where(valid, next_count, count),
        ), None

    init = (jnp.zeros((), dtype=values.dtype), jnp.zeros((), dtype=values.dtype))
    (mean, _count), _ = jax.lax.scan(step, init, (values, mask))
    return mean


def running_mean(values: Array) -> float:
    """Return the incremental mean of a one-dimensional array.

    Inputs are padded to the next power of two so the compiled scan is shared
    between working sets of similar size.
    """

    n = int(values.shape[0])
    if n == 0:
        raise ValueError("running_mean requires at least one value")
    size = _next_power_of_two(n)
    padded = jnp.zeros((size,), dtype=values.dtype).at[:n].set(values)
    mask = jnp.arange(size) < n
    return float(_masked_running_mean(padded, mask))


class BuildStats(NamedTuple):
    """Shape summary of a freshly built tree."""

    pair_count: int
    leaf_count: int
    internal_count: int
    max_depth: int


def log_build_stats(
    stats: BuildStats,
    *,
    level: int = logging.INFO,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log build statistics using the provided (or module) logger."""

    target_logger = logger or logging.getLogger(__name__)
    target_logger.log(
        level,
        "Built mean-split tree: pairs=%d, leaves=%d, internal=%d, depth=%d",
        stats.pair_count,
        stats.leaf_count,
        stats.internal_count,
        stats.max_depth,
    )


def _online_mean(column: np.ndarray) -> float:
    """Host twin of ``running_mean`` for the per-node splits of a build."""

    mean = column.dtype.type(0)
    for count, value in enumerate(column, start=1):
        mean += (value - mean) / count
    return float(mean)


def build_mean_split_tree(
    pairs: Sequence[CoordinatePair],
    keys: Array,
    dimension: int,
) -> tuple[Optional[Node], BuildStats]:
    """Partition ``pairs`` into a node tree using an explicit job stack.

    Args:
        pairs: Pairs to index; ``pairs[i]`` is keyed by ``keys[i]``.
        keys: Matrix of shape ``(len(pairs), dimension)``.
        dimension: Number of axes to cycle through.

    Returns:
        Tuple ``(root, stats)``; ``root`` is ``None`` for an empty input.

    The key matrix is copied to the host once and every per-node split runs in
    NumPy, so a level costs one pass over its rows and no device dispatch.

    A split that leaves one side empty yields an internal node with a ``None``
    child and the working set moves on to the next axis. After ``dimension``
    such levels in a row the set is coincident on every axis and is halved by
    position instead, so construction always terminates.
    """

    n = len(pairs)
    if n == 0:
        return None, BuildStats(pair_count=0, leaf_count=0, internal_count=0, max_depth=0)

    host_keys = np.asarray(keys)
    jobs: list[tuple] = [(_EXPAND, np.arange(n), 0, 0)]
    results: list[Optional[Node]] = []
    leaf_count = 0
    internal_count = 0
    max_depth = 0

    while jobs:
        kind, payload, level, misses = jobs.pop()

        if kind == _ASSEMBLE:
            axis, threshold = payload
            right = results.pop()
            left = results.pop()
            results.append(InternalNode(axis=axis, threshold=threshold, left=left, right=right))
            internal_count += 1
            continue

        rows = payload
        size = int(rows.shape[0])
        if size == 0:
            results.append(None)
            continue
        if size == 1:
            row = int(rows[0])
            results.append(LeafNode(pair=pairs[row], key=jnp.asarray(host_keys[row])))
            leaf_count += 1
            max_depth = max(max_depth, level)
            continue

        axis = level % dimension
        column = host_keys[rows, axis]
        threshold = _online_mean(column)
        goes_right = column > threshold
        left_rows = rows[~goes_right]
        right_rows = rows[goes_right]

        if (left_rows.shape[0] == 0) or (right_rows.shape[0] == 0):
            misses += 1
            if misses >= dimension:
                half = size // 2
                left_rows, right_rows = rows[:half], rows[half:]
                misses = 0
        else:
            misses = 0

        # Left is expanded first, so its result sits below the right one.
        jobs.append((_ASSEMBLE, (axis, threshold), level, 0))
        jobs.append((_EXPAND, right_rows, level + 1, misses))
        jobs.append((_EXPAND, left_rows, level + 1, misses))

    root = results.pop()
    stats = BuildStats(
        pair_count=n,
        leaf_count=leaf_count,
        internal_count=internal_count,
        max_depth=max_depth,
    )
    return root, stats


__all__ = ["BuildStats", "build_mean_split_tree", "log_build_stats", "running_mean"]
