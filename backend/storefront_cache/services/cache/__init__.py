"""
Cache-aside service used by the storefront data-access layer.
"""

from .cache_service import CacheService

__all__ = ["CacheService"]
