"""Cache error hierarchy.

Backends translate their storage errors into these so the query pipeline can
recover from any cache failure with a single ``except CacheError``.
"""


class CacheError(Exception):
    """A cache read or write failed."""


class CacheUnavailableError(CacheError):
    """The cache store could not be reached or opened."""
