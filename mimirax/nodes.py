"""KD-tree node variants and the probe view used while searching them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Union

import jax
import jax.numpy as jnp
from jaxtyping import Array

from .dtypes import FLOAT_DTYPE, as_vector
from .errors import InvalidDimensionError
from .pair import CoordinatePair


@jax.jit
def _euclidean(a: Array, b: Array) -> Array:
    delta = a - b
    return jnp.sqrt(jnp.sum(delta * delta))


class Probe(NamedTuple):
    """A query vector truncated to the indexed dimensions.

    ``key`` stays on device for leaf distances; ``coords`` is a host copy so
    hyperplane tests do not dispatch a device op per internal node.
    """

    key: Array
    coords: tuple[float, ...]

    @classmethod
    def from_vector(cls, vector, dimension: int, dtype=FLOAT_DTYPE) -> "Probe":
        arr = as_vector(vector, dtype=dtype)
        if arr.shape[0] < dimension:
            raise InvalidDimensionError.for_length(int(arr.shape[0]), dimension)
        key = arr[:dimension]
        return cls(key=key, coords=tuple(key.tolist()))


def key_distance(key: Array, probe: Probe) -> float:
    """Return the Euclidean distance between an indexed key and ``probe``."""

    return float(_euclidean(key, probe.key))


@dataclass(frozen=True, eq=False)
class LeafNode:
    """Terminal node holding exactly one coordinate pair."""

    pair: CoordinatePair
    key: Array

    def distance_bound(self, probe: Probe) -> float:
        """Return the true Euclidean distance from ``probe`` to the stored key."""

        return key_distance(self.key, probe)


@dataclass(frozen=True, eq=False)
class InternalNode:
    """Splitting node: ``key[axis] > threshold`` lies in ``right``.

    A child is ``None`` only when the split left that side empty.
    """

    axis: int
    threshold: float
    left: Optional["Node"]
    right: Optional["Node"]

    def distance_bound(self, probe: Probe) -> float:
        """Return the distance from ``probe`` to the splitting hyperplane."""

        return abs(probe.coords[self.axis] - self.threshold)

    def trace(self, probe: Probe) -> tuple[Optional["Node"], Optional["Node"]]:
        """Return ``(near, far)`` children relative to ``probe``."""

        if probe.coords[self.axis] > self.threshold:
            return self.right, self.left
        return self.left, self.right


Node = Union[LeafNode, InternalNode]


def iter_leaves(root: Optional[Node]) -> Iterator[LeafNode]:
    """Yield leaves left to right without recursion."""

    if root is None:
        return
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, LeafNode):
            yield node
            continue
        # Push right first so the left subtree is visited first.
        if node.right is not None:
            stack.append(node.right)
        if node.left is not None:
            stack.append(node.left)


__all__ = [
    "InternalNode",
    "LeafNode",
    "Node",
    "Probe",
    "iter_leaves",
    "key_distance",
]
