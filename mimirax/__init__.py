"""Mimirax: vector-keyed spatial indexes with nearest-neighbour queries."""

from jax import config as _jax_config

# Split thresholds and stored keys default to float64.
_jax_config.update("jax_enable_x64", True)

from ._partition import BuildStats, log_build_stats, running_mean
from .config import (
    IndexConfig,
    KnnBackend,
    resolve_index_config,
    set_default_index_config,
)
from .dtypes import FLOAT_DTYPE, as_vector
from .errors import IndexNotBuiltError, InvalidDimensionError, SpatialIndexError
from .index import SpatialIndex
from .kdtree import KDTreeIndex
from .linear import LinearScanIndex
from .nodes import InternalNode, LeafNode, Node, Probe, iter_leaves
from .pair import CoordinatePair
from .protocols import SpatialIndexProtocol, VectorLike
from .registry import (
    available_index_types,
    build_and_query,
    build_index,
    create_index,
    register_index_type,
)

__all__ = [
    "FLOAT_DTYPE",
    "BuildStats",
    "CoordinatePair",
    "IndexConfig",
    "IndexNotBuiltError",
    "InternalNode",
    "InvalidDimensionError",
    "KDTreeIndex",
    "KnnBackend",
    "LeafNode",
    "LinearScanIndex",
    "Node",
    "Probe",
    "SpatialIndex",
    "SpatialIndexError",
    "SpatialIndexProtocol",
    "VectorLike",
    "as_vector",
    "available_index_types",
    "build_and_query",
    "build_index",
    "create_index",
    "iter_leaves",
    "log_build_stats",
    "register_index_type",
    "resolve_index_config",
    "running_mean",
    "set_default_index_config",
]
