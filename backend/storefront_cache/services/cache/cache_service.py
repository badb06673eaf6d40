"""
Cache Service

High-level cache-aside service for the storefront data-access layer.

Callers read through ``get_*``; on a miss they load from the source of truth
and store the result with ``set_*``; on mutation they call ``invalidate_*``.
Every method forwards to the injected ``CacheStore`` and inherits its
fail-open behaviour: nothing here raises because the cache is unavailable.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Union

import structlog
from opentelemetry import trace

from ...domain.cache.domain_services import CacheInvalidationService
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.value_objects import TTL, CacheKey, Filters

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

TTLArg = Optional[Union[int, TTL]]
LocationsLoader = Callable[[Any], Awaitable[Any]]


class CacheService:
    """
    Entity-shaped cache operations over a flat key/value store.

    Each namespace has a key builder and a default TTL; an explicit ``ttl``
    argument always wins over the default.
    """

    def __init__(
        self,
        store: CacheStore,
        invalidation_service: Optional[CacheInvalidationService] = None,
    ):
        self.store = store
        self.invalidation_service = invalidation_service or CacheInvalidationService(
            store
        )

    async def _get(self, key: CacheKey) -> Optional[Any]:
        return await self.store.get_cached(key.value)

    async def _set(self, key: CacheKey, data: Any, ttl: TTLArg, default: TTL) -> bool:
        return await self.store.set_cache(
            key.value, data, TTL.resolve_seconds(ttl, default)
        )

    # Products

    async def get_products(self, tenant_id: Any, filters: Filters = "") -> Optional[Any]:
        return await self._get(CacheKey.products(tenant_id, filters))

    async def set_products(
        self, tenant_id: Any, filters: Filters, data: Any, ttl: TTLArg = None
    ) -> bool:
        return await self._set(
            CacheKey.products(tenant_id, filters), data, ttl, TTL.products()
        )

    async def get_product(self, product_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.product(product_id))

    async def set_product(self, product_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.product(product_id), data, ttl, TTL.products())

    # Variants

    async def get_variants(self, product_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.variants(product_id))

    async def set_variants(self, product_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.variants(product_id), data, ttl, TTL.variants())

    async def get_variant(self, variant_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.variant(variant_id))

    async def set_variant(self, variant_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.variant(variant_id), data, ttl, TTL.variants())

    # Inventory

    async def get_inventory(
        self, tenant_id: Any, filters: Filters = ""
    ) -> Optional[Any]:
        return await self._get(CacheKey.inventory(tenant_id, filters))

    async def set_inventory(
        self, tenant_id: Any, filters: Filters, data: Any, ttl: TTLArg = None
    ) -> bool:
        return await self._set(
            CacheKey.inventory(tenant_id, filters), data, ttl, TTL.inventory()
        )

    async def get_inventory_levels(self, variant_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.inventory_levels(variant_id))

    async def set_inventory_levels(
        self, variant_id: Any, data: Any, ttl: TTLArg = None
    ) -> bool:
        return await self._set(
            CacheKey.inventory_levels(variant_id), data, ttl, TTL.inventory()
        )

    # Locations

    async def get_locations(self, tenant_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.locations(tenant_id))

    async def set_locations(self, tenant_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.locations(tenant_id), data, ttl, TTL.locations())

    # Transfers

    async def get_transfers(
        self, tenant_id: Any, filters: Filters = ""
    ) -> Optional[Any]:
        return await self._get(CacheKey.transfers(tenant_id, filters))

    async def set_transfers(
        self, tenant_id: Any, filters: Filters, data: Any, ttl: TTLArg = None
    ) -> bool:
        return await self._set(
            CacheKey.transfers(tenant_id, filters), data, ttl, TTL.transfers()
        )

    async def get_transfer(self, transfer_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.transfer(transfer_id))

    async def set_transfer(self, transfer_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.transfer(transfer_id), data, ttl, TTL.transfers())

    # Customers

    async def get_customer(self, customer_id: Any) -> Optional[Any]:
        return await self._get(CacheKey.customer(customer_id))

    async def set_customer(self, customer_id: Any, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(CacheKey.customer(customer_id), data, ttl, TTL.customer())

    async def get_customers(self, params: Filters = None) -> Optional[Any]:
        return await self._get(CacheKey.customers_list(params))

    async def set_customers(self, params: Filters, data: Any, ttl: TTLArg = None) -> bool:
        return await self._set(
            CacheKey.customers_list(params), data, ttl, TTL.customers_list()
        )

    async def get_customer_orders(
        self, customer_id: Any, params: Filters = None
    ) -> Optional[Any]:
        return await self._get(CacheKey.customer_orders(customer_id, params))

    async def set_customer_orders(
        self, customer_id: Any, params: Filters, data: Any, ttl: TTLArg = None
    ) -> bool:
        return await self._set(
            CacheKey.customer_orders(customer_id, params),
            data,
            ttl,
            TTL.customer_orders(),
        )

    async def get_customer_section(
        self, customer_id: Any, section: str
    ) -> Optional[Any]:
        return await self._get(CacheKey.customer_section(customer_id, section))

    async def set_customer_section(
        self, customer_id: Any, section: str, data: Any, ttl: TTLArg = None
    ) -> bool:
        """
        Cache a customer sub-resource: waitlists, cart, credits or stats.

        Stats default to the customer stats TTL, the other sections to the
        customer orders TTL.

        Raises:
            ValueError: If section is not a known customer section
        """
        default = TTL.customer_stats() if section == "stats" else TTL.customer_orders()
        return await self._set(
            CacheKey.customer_section(customer_id, section), data, ttl, default
        )

    # Invalidation

    async def invalidate_product(
        self, product_id: Any, tenant_id: Optional[Any] = None
    ) -> int:
        return await self.invalidation_service.invalidate_product(product_id, tenant_id)

    async def invalidate_variant(self, variant_id: Any) -> int:
        return await self.invalidation_service.invalidate_variant(variant_id)

    async def invalidate_inventory(
        self, tenant_id: Any, variant_id: Optional[Any] = None
    ) -> int:
        return await self.invalidation_service.invalidate_inventory(
            tenant_id, variant_id
        )

    async def invalidate_locations(self, tenant_id: Any) -> int:
        return await self.invalidation_service.invalidate_locations(tenant_id)

    async def invalidate_transfer(self, transfer_id: Any, tenant_id: Any) -> int:
        return await self.invalidation_service.invalidate_transfer(
            transfer_id, tenant_id
        )

    async def invalidate_customer(self, customer_id: Any) -> int:
        return await self.invalidation_service.invalidate_customer(customer_id)

    async def invalidate_customers_list(self) -> int:
        return await self.invalidation_service.invalidate_customers_list()

    # Maintenance

    async def warmup(
        self, tenant_id: Any, locations_loader: Optional[LocationsLoader] = None
    ) -> bool:
        """
        Pre-load data that many other queries depend on.

        Locations are loaded first since inventory and transfer screens all
        read them. Without a loader this only logs the request.

        Returns:
            True unless the loader failed
        """
        with tracer.start_as_current_span("cache_service.warmup") as span:
            span.set_attribute("tenant_id", str(tenant_id))
            logger.info("cache_warmup_started", tenant_id=str(tenant_id))

            if locations_loader is None:
                return True

            try:
                locations = await locations_loader(tenant_id)
            except Exception as e:
                logger.error(
                    "cache_warmup_failed", tenant_id=str(tenant_id), error=str(e)
                )
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                return False

            stored = await self.set_locations(tenant_id, locations)
            span.set_attribute("locations_cached", stored)
            return True

    def get_cache_stats(self) -> Dict[str, Any]:
        """Get cache statistics from the underlying store when it has any."""
        get_stats = getattr(self.store, "get_stats", None)
        if get_stats is None:
            return {"enabled": None}
        return get_stats()
