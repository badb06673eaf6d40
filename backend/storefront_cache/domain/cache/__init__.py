"""
Cache Domain Module

Key derivation, TTL policy and invalidation fan-out for the cache-aside layer.
"""
