"""
Cache Domain Services

Invalidation strategies for the cache domain.

The backing store is not asked for pattern deletion. Each routine deletes an
entity key, its known dependent keys and a fixed set of common list filter
shapes. A list cached under any other filter combination is only refreshed
by TTL expiry.
"""

import asyncio
from typing import Any, Iterable, List, Optional

import structlog
from opentelemetry import trace

from .repository_interfaces import CacheStore
from .value_objects import (
    ALL_TENANTS_SCOPE,
    CUSTOMER_LIST_COMMON_PARAMS,
    CUSTOMER_SECTIONS,
    INVENTORY_LIST_COMMON_FILTERS,
    PRODUCT_LIST_COMMON_FILTERS,
    TRANSFER_LIST_COMMON_FILTERS,
    CacheKey,
)

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class CacheInvalidationService:
    """
    Domain service for cache invalidation fan-out.

    Deletes of one routine run concurrently, so a fan-out over N keys is
    bounded by a single store deadline rather than N of them. Every routine
    returns the number of records actually removed; invalidating keys that
    are already gone removes nothing and is not an error.
    """

    def __init__(self, store: CacheStore):
        self.store = store

    async def _delete_all(self, keys: Iterable[CacheKey]) -> int:
        results = await asyncio.gather(
            *(self.store.delete_cache(key.value) for key in keys)
        )
        return sum(1 for removed in results if removed)

    async def invalidate_product(
        self, product_id: Any, tenant_id: Optional[Any] = None
    ) -> int:
        """
        Invalidate a product, its variant list and common product lists.

        Args:
            product_id: Product ID
            tenant_id: Tenant whose lists to purge; defaults to the '*' scope

        Returns:
            Number of cache entries removed
        """
        with tracer.start_as_current_span("cache.invalidate_product") as span:
            span.set_attribute("product_id", str(product_id))

            scope = ALL_TENANTS_SCOPE if tenant_id is None else tenant_id
            keys: List[CacheKey] = [
                CacheKey.product(product_id),
                CacheKey.variants(product_id),
            ]
            keys.extend(
                CacheKey.products(scope, filters)
                for filters in PRODUCT_LIST_COMMON_FILTERS
            )

            removed = await self._delete_all(keys)
            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="product",
                product_id=str(product_id),
                keys=len(keys),
                removed=removed,
            )
            return removed

    async def invalidate_variant(self, variant_id: Any) -> int:
        """Invalidate a variant and its inventory levels."""
        with tracer.start_as_current_span("cache.invalidate_variant") as span:
            span.set_attribute("variant_id", str(variant_id))

            keys = [CacheKey.variant(variant_id), CacheKey.inventory_levels(variant_id)]
            removed = await self._delete_all(keys)

            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="variant",
                variant_id=str(variant_id),
                removed=removed,
            )
            return removed

    async def invalidate_inventory(
        self, tenant_id: Any, variant_id: Optional[Any] = None
    ) -> int:
        """
        Invalidate inventory lists of a tenant.

        Args:
            tenant_id: Tenant whose inventory lists to purge
            variant_id: Optional variant whose levels to purge as well

        Returns:
            Number of cache entries removed
        """
        with tracer.start_as_current_span("cache.invalidate_inventory") as span:
            span.set_attribute("tenant_id", str(tenant_id))

            keys: List[CacheKey] = []
            if variant_id:
                span.set_attribute("variant_id", str(variant_id))
                keys.append(CacheKey.inventory_levels(variant_id))
            keys.extend(
                CacheKey.inventory(tenant_id, filters)
                for filters in INVENTORY_LIST_COMMON_FILTERS
            )

            removed = await self._delete_all(keys)
            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="inventory",
                tenant_id=str(tenant_id),
                removed=removed,
            )
            return removed

    async def invalidate_locations(self, tenant_id: Any) -> int:
        """
        Invalidate a tenant's locations and, in cascade, its inventory lists.

        Inventory queries join on location, so location changes make the
        tenant's inventory lists stale too.
        """
        with tracer.start_as_current_span("cache.invalidate_locations") as span:
            span.set_attribute("tenant_id", str(tenant_id))

            results = await asyncio.gather(
                self._delete_all([CacheKey.locations(tenant_id)]),
                self.invalidate_inventory(tenant_id),
            )
            removed = sum(results)

            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="locations",
                tenant_id=str(tenant_id),
                removed=removed,
            )
            return removed

    async def invalidate_transfer(self, transfer_id: Any, tenant_id: Any) -> int:
        """Invalidate a transfer and the tenant's common transfer lists."""
        with tracer.start_as_current_span("cache.invalidate_transfer") as span:
            span.set_attribute("transfer_id", str(transfer_id))
            span.set_attribute("tenant_id", str(tenant_id))

            keys: List[CacheKey] = [CacheKey.transfer(transfer_id)]
            keys.extend(
                CacheKey.transfers(tenant_id, filters)
                for filters in TRANSFER_LIST_COMMON_FILTERS
            )

            removed = await self._delete_all(keys)
            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="transfer",
                transfer_id=str(transfer_id),
                tenant_id=str(tenant_id),
                removed=removed,
            )
            return removed

    async def invalidate_customers_list(self) -> int:
        """Invalidate customer lists cached under the common parameter sets."""
        keys = [CacheKey.customers_list(params) for params in CUSTOMER_LIST_COMMON_PARAMS]
        return await self._delete_all(keys)

    async def invalidate_customer(self, customer_id: Any) -> int:
        """Invalidate a customer, its sub-resources and the common lists."""
        with tracer.start_as_current_span("cache.invalidate_customer") as span:
            span.set_attribute("customer_id", str(customer_id))

            keys: List[CacheKey] = [
                CacheKey.customer(customer_id),
                CacheKey.customer_orders(customer_id),
            ]
            keys.extend(
                CacheKey.customer_section(customer_id, section)
                for section in CUSTOMER_SECTIONS
            )

            results = await asyncio.gather(
                self._delete_all(keys), self.invalidate_customers_list()
            )
            removed = sum(results)

            span.set_attribute("invalidated_count", removed)
            logger.info(
                "cache_invalidated",
                entity="customer",
                customer_id=str(customer_id),
                removed=removed,
            )
            return removed
