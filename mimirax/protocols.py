"""Structural protocols for spatial index capabilities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Iterator, Optional, Protocol, SupportsFloat, Union

import numpy as np
from jaxtyping import Array

# Anything ``as_vector`` can turn into a one-dimensional key.
VectorLike = Union[Array, np.ndarray, Sequence[SupportsFloat]]


class SpatialIndexProtocol(Protocol):
    """Capability contract shared by every nearest-neighbour index."""

    @property
    def dimension(self) -> int: ...

    @property
    def build_required(self) -> bool: ...

    @property
    def count(self) -> int: ...

    @property
    def is_empty(self) -> bool: ...

    def add(self, vector: VectorLike, value: Any) -> None: ...

    def build(self) -> None: ...

    def clear(self) -> None: ...

    def nearest(self, probe: VectorLike) -> Optional[Any]: ...

    def nearest_k(self, probe: VectorLike, k: int) -> list[Any]: ...

    def values(self) -> Iterator[Any]: ...

    def vectors(self) -> Iterator[Array]: ...


__all__ = ["SpatialIndexProtocol", "VectorLike"]
