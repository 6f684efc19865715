"""Index configuration and the module-level default."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

from .dtypes import FLOAT_DTYPE, is_floating

KnnBackend = Literal["tree", "dense"]

_KNN_BACKENDS = ("tree", "dense")


@dataclass(frozen=True)
class IndexConfig:
    """Options shared by every spatial index strategy.

    Attributes:
        dtype: Floating dtype for stored keys, probes and split thresholds.
        knn_backend: Default ``nearest_k`` backend. ``tree`` walks the index
            with a bounded heap; ``dense`` scores every stored pair at once.
        log_level: Level used when logging build statistics.
    """

    dtype: Any = FLOAT_DTYPE
    knn_backend: KnnBackend = "tree"
    log_level: int = logging.DEBUG

    def __post_init__(self) -> None:
        if not is_floating(self.dtype):
            raise ValueError(f"dtype must be a floating dtype, received {self.dtype}")
        if self.knn_backend not in _KNN_BACKENDS:
            raise ValueError(
                "knn_backend must be one of: 'tree', 'dense'; "
                f"received {self.knn_backend!r}"
            )


_DEFAULT_INDEX_CONFIG = IndexConfig()
_GLOBAL_INDEX_CONFIG: Optional[IndexConfig] = None


def set_default_index_config(config: Optional[IndexConfig]) -> None:
    """Set the module-level fallback configuration for new indexes.

    Passing ``None`` restores the built-in defaults.
    """

    global _GLOBAL_INDEX_CONFIG
    _GLOBAL_INDEX_CONFIG = config


def resolve_index_config(config: Optional[IndexConfig]) -> IndexConfig:
    """Return ``config``, else the module default, else the built-in one."""

    if config is not None:
        return config
    if _GLOBAL_INDEX_CONFIG is not None:
        return _GLOBAL_INDEX_CONFIG
    return _DEFAULT_INDEX_CONFIG


__all__ = [
    "IndexConfig",
    "KnnBackend",
    "resolve_index_config",
    "set_default_index_config",
]
