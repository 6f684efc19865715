"""Index-type registry and bulk convenience builders."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, jaxtyped

from .config import IndexConfig, KnnBackend, resolve_index_config
from .index import SpatialIndex
from .kdtree import KDTreeIndex
from .linear import LinearScanIndex
from .pair import CoordinatePair

IndexFactory = Callable[..., SpatialIndex]

_INDEX_TYPES: dict[str, IndexFactory] = {
    "kdtree": KDTreeIndex,
    "linear": LinearScanIndex,
}


def available_index_types() -> tuple[str, ...]:
    """Return registered index-type identifiers."""

    return tuple(sorted(_INDEX_TYPES.keys()))


def register_index_type(
    index_type: str, factory: IndexFactory, *, overwrite: bool = False
) -> None:
    """Register ``factory(dimension, *, config=...)`` under ``index_type``."""

    normalized = index_type.strip()
    if not normalized:
        raise ValueError("index_type must be a non-empty string")
    if (normalized in _INDEX_TYPES) and (not overwrite):
        raise ValueError(
            f"index_type '{normalized}' is already registered; "
            "pass overwrite=True to replace it"
        )
    _INDEX_TYPES[normalized] = factory


@jaxtyped(typechecker=beartype)
def create_index(
    dimension: int,
    *,
    index_type: str = "kdtree",
    config: Optional[IndexConfig] = None,
) -> SpatialIndex:
    """Instantiate an empty, unbuilt index of the registered ``index_type``."""

    factory = _INDEX_TYPES.get(index_type)
    if factory is None:
        supported = ", ".join(f"'{name}'" for name in available_index_types())
        raise ValueError(f"Unsupported index_type '{index_type}'. Supported: ({supported})")
    return factory(dimension, config=config)


def _validate_rows(vectors: Any, dimension: Optional[int], dtype) -> Array:
    rows = jnp.asarray(vectors, dtype=dtype)
    if (rows.size == 0) and (dimension is not None):
        return rows.reshape((0, dimension))
    if rows.ndim != 2:
        raise ValueError(
            "vectors must have shape (n_vectors, dim); "
            f"received ndim={rows.ndim}"
        )
    return rows


def build_index(
    vectors: Any,
    values: Optional[Sequence[Any]] = None,
    *,
    dimension: Optional[int] = None,
    index_type: str = "kdtree",
    config: Optional[IndexConfig] = None,
) -> SpatialIndex:
    """Add every row of ``vectors`` and build the index.

    Args:
        vectors: Matrix-like of shape ``(n_vectors, dim)``.
        values: One value per row; defaults to the row positions.
        dimension: Indexed dimensionality; defaults to the column count.
        index_type: Registered index type.
        config: Optional index configuration.
    """

    resolved = resolve_index_config(config)
    rows = _validate_rows(vectors, dimension, resolved.dtype)
    n_rows = int(rows.shape[0])
    if values is None:
        values = range(n_rows)
    elif len(values) != n_rows:
        raise ValueError(
            f"values must provide one entry per vector; received {len(values)} "
            f"for {n_rows} vectors"
        )

    index = create_index(
        int(rows.shape[1]) if dimension is None else dimension,
        index_type=index_type,
        config=resolved,
    )
    for row, value in zip(rows, values):
        index.add(row, value)
    index.build()
    return index


def build_and_query(
    vectors: Any,
    probes: Any,
    values: Optional[Sequence[Any]] = None,
    *,
    k: int = 1,
    index_type: str = "kdtree",
    backend: Optional[KnnBackend] = None,
    config: Optional[IndexConfig] = None,
) -> list[list[CoordinatePair]]:
    """Convenience function to build an index and run ``nearest_k`` per probe."""

    index = build_index(vectors, values, index_type=index_type, config=config)
    return [index.nearest_k(probe, k, backend=backend) for probe in probes]


__all__ = [
    "IndexFactory",
    "available_index_types",
    "build_and_query",
    "build_index",
    "create_index",
    "register_index_type",
]
