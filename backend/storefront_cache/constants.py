"""
Storefront Cache Global Constants

Centralized location for system-wide constants used across the cache layer.
"""

# Application Constants
APP_NAME = "Storefront Cache"
APP_VERSION = "1.0.0"

# Every key written by this application lives under this prefix so the
# store can be shared with unrelated keyspaces.
KEY_PREFIX = "storefront:"

# Bounds for cache I/O (seconds)
DEFAULT_OPERATION_TIMEOUT = 1.0
DEFAULT_CONNECT_TIMEOUT = 3.0

# Default TTL applied by the low-level client when the caller passes none
DEFAULT_TTL_SECONDS = 300

# Feature flag value that turns caching on; anything else disables it
CACHE_ENABLED_VALUE = "true"
