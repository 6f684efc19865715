"""Exception types raised by Mimirax indexes."""

from __future__ import annotations


class SpatialIndexError(Exception):
    """Base class for spatial index failures."""


class IndexNotBuiltError(SpatialIndexError, RuntimeError):
    """Raised when an index is queried before ``build()`` has run."""

    def __init__(self, message: str = "index must be built before it can be queried"):
        super().__init__(message)


class InvalidDimensionError(SpatialIndexError, ValueError):
    """Raised when a vector is shorter than the index dimensionality."""

    def __init__(self, message: str, *, expected: int | None = None, actual: int | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual

    @classmethod
    def for_length(cls, actual: int, expected: int) -> "InvalidDimensionError":
        """Build the standard error for a vector of ``actual`` coordinates."""

        return cls(
            f"a vector of length {actual} was given, when a vector of "
            f"length >= {expected} was expected",
            expected=expected,
            actual=actual,
        )


__all__ = ["IndexNotBuiltError", "InvalidDimensionError", "SpatialIndexError"]
