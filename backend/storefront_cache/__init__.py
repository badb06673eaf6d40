"""
Storefront Cache

Cache-aside layer for the storefront admin backend: a fail-open Redis client
and a domain cache service with per-namespace keys, TTLs and invalidation.
"""

from .constants import APP_VERSION as __version__

__all__ = ["__version__"]
