"""Local dtype policy for Mimirax indexes."""

import jax.numpy as jnp

from .errors import InvalidDimensionError

# Keep keys, probes and split thresholds consistent across index artifacts.
FLOAT_DTYPE = jnp.float64


def as_vector(vector, dtype=FLOAT_DTYPE):
    """Copy ``vector`` into a fresh one-dimensional array of ``dtype``."""
    arr = jnp.array(vector, dtype=dtype)
    if arr.ndim != 1:
        raise InvalidDimensionError(
            f"vectors must be one-dimensional; received shape {tuple(arr.shape)}"
        )
    return arr


def is_floating(dtype) -> bool:
    """Return whether ``dtype`` is a real floating dtype."""
    return bool(jnp.issubdtype(jnp.dtype(dtype), jnp.floating))


__all__ = ["FLOAT_DTYPE", "as_vector", "is_floating"]
