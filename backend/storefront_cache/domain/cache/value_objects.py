"""
Cache Value Objects

Immutable value objects for the cache domain: namespaced keys, filter
normalization and per-namespace TTLs.

Key derivation is a pure function of (namespace, id, normalized filters) so
that a read and a later write for the same logical query always agree.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

Filters = Optional[Union[str, Mapping[str, Any]]]


class CacheNamespace(str, Enum):
    """Key namespaces owned by the cache layer."""

    PRODUCTS = "products"
    PRODUCT = "product"
    VARIANTS = "variants"
    VARIANT = "variant"
    INVENTORY = "inventory"
    INVENTORY_LEVELS = "inventory_levels"
    LOCATIONS = "locations"
    TRANSFERS = "transfers"
    TRANSFER = "transfer"
    CUSTOMER = "customer"
    CUSTOMERS = "customers"


def normalize_filters(filters: Filters) -> str:
    """
    Fold a filter value into a stable key fragment.

    Mappings are serialized as compact JSON with sorted keys, so
    ``{"status": "all", "location": "x"}`` and
    ``{"location": "x", "status": "all"}`` produce the same fragment.
    Strings are used as-is and ``None`` becomes the empty string.
    """
    if filters is None:
        return ""
    if isinstance(filters, Mapping):
        return json.dumps(
            dict(filters), sort_keys=True, separators=(",", ":"), default=str
        )
    return str(filters)


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Use the classmethod builders; each one fixes the namespace and shape.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

    @classmethod
    def compose(cls, *parts: Any) -> "CacheKey":
        """
        Build an ad-hoc key for data outside the fixed namespaces.

        Joins the non-empty parts with ':', e.g.
        ``CacheKey.compose("report", tenant_id, "daily")``. The namespace
        builders below do not use it because their list keys keep an empty
        trailing filter segment.

        Raises:
            ValueError: If every part is empty
        """
        return cls(":".join(str(part) for part in parts if part))

    @classmethod
    def _entity(cls, namespace: CacheNamespace, entity_id: Any) -> "CacheKey":
        return cls(f"{namespace.value}:{entity_id}")

    @classmethod
    def _scoped_list(
        cls, namespace: CacheNamespace, scope: Any, filters: Filters
    ) -> "CacheKey":
        return cls(f"{namespace.value}:{scope}:{normalize_filters(filters)}")

    # Catalog

    @classmethod
    def products(cls, tenant_id: Any, filters: Filters = "") -> "CacheKey":
        """Product list for a tenant and filter set."""
        return cls._scoped_list(CacheNamespace.PRODUCTS, tenant_id, filters)

    @classmethod
    def product(cls, product_id: Any) -> "CacheKey":
        return cls._entity(CacheNamespace.PRODUCT, product_id)

    @classmethod
    def variants(cls, product_id: Any) -> "CacheKey":
        """Variant list of one product."""
        return cls._entity(CacheNamespace.VARIANTS, product_id)

    @classmethod
    def variant(cls, variant_id: Any) -> "CacheKey":
        return cls._entity(CacheNamespace.VARIANT, variant_id)

    # Inventory

    @classmethod
    def inventory(cls, tenant_id: Any, filters: Filters = "") -> "CacheKey":
        """Inventory list for a tenant and filter set."""
        return cls._scoped_list(CacheNamespace.INVENTORY, tenant_id, filters)

    @classmethod
    def inventory_levels(cls, variant_id: Any) -> "CacheKey":
        """Per-location stock levels of one variant."""
        return cls._entity(CacheNamespace.INVENTORY_LEVELS, variant_id)

    @classmethod
    def locations(cls, tenant_id: Any) -> "CacheKey":
        return cls._entity(CacheNamespace.LOCATIONS, tenant_id)

    @classmethod
    def transfers(cls, tenant_id: Any, filters: Filters = "") -> "CacheKey":
        """Transfer list for a tenant and filter set."""
        return cls._scoped_list(CacheNamespace.TRANSFERS, tenant_id, filters)

    @classmethod
    def transfer(cls, transfer_id: Any) -> "CacheKey":
        return cls._entity(CacheNamespace.TRANSFER, transfer_id)

    # Customers

    @classmethod
    def customer(cls, customer_id: Any) -> "CacheKey":
        return cls._entity(CacheNamespace.CUSTOMER, customer_id)

    @classmethod
    def customers_list(cls, params: Filters = None) -> "CacheKey":
        return cls._scoped_list(CacheNamespace.CUSTOMERS, "list", params or {})

    @classmethod
    def customer_orders(cls, customer_id: Any, params: Filters = None) -> "CacheKey":
        return cls(
            f"{CacheNamespace.CUSTOMER.value}:{customer_id}:orders:"
            f"{normalize_filters(params or {})}"
        )

    @classmethod
    def customer_section(cls, customer_id: Any, section: str) -> "CacheKey":
        """Customer sub-resource: waitlists, cart, credits or stats."""
        if section not in CUSTOMER_SECTIONS:
            raise ValueError(f"Unknown customer cache section: {section}")
        return cls(f"{CacheNamespace.CUSTOMER.value}:{customer_id}:{section}")

    def __str__(self) -> str:
        return self.value


CUSTOMER_SECTIONS = ("waitlists", "cart", "credits", "stats")


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    The TTL is fixed when a record is written; reads never extend it.
    """

    seconds: int

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if self.seconds <= 0:
            raise ValueError("TTL must be positive")
        if self.seconds > 86400 * 365:  # Max 1 year
            raise ValueError("TTL too large (max 1 year)")

    @classmethod
    def minutes(cls, minutes: int) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60)

    @classmethod
    def hours(cls, hours: int) -> "TTL":
        """Create TTL from hours."""
        return cls(hours * 3600)

    # Namespace presets
    @classmethod
    def products(cls) -> "TTL":
        """Product data TTL (10 minutes)."""
        return cls.minutes(10)

    @classmethod
    def variants(cls) -> "TTL":
        """Variant data TTL (10 minutes)."""
        return cls.minutes(10)

    @classmethod
    def inventory(cls) -> "TTL":
        """Inventory lists and levels TTL (5 minutes)."""
        return cls.minutes(5)

    @classmethod
    def locations(cls) -> "TTL":
        """Locations TTL (30 minutes)."""
        return cls.minutes(30)

    @classmethod
    def transfers(cls) -> "TTL":
        """Transfers TTL (5 minutes)."""
        return cls.minutes(5)

    @classmethod
    def short(cls) -> "TTL":
        """Highly dynamic data (2 minutes)."""
        return cls.minutes(2)

    @classmethod
    def long(cls) -> "TTL":
        """Very stable data (1 hour)."""
        return cls.hours(1)

    @classmethod
    def customer(cls) -> "TTL":
        """Customer details TTL (5 minutes)."""
        return cls.minutes(5)

    @classmethod
    def customers_list(cls) -> "TTL":
        """Customers list TTL (3 minutes)."""
        return cls.minutes(3)

    @classmethod
    def customer_orders(cls) -> "TTL":
        """Customer orders TTL (5 minutes)."""
        return cls.minutes(5)

    @classmethod
    def customer_stats(cls) -> "TTL":
        """Customer statistics TTL (4 minutes)."""
        return cls.minutes(4)

    @staticmethod
    def resolve_seconds(ttl: Any, default: "TTL") -> Any:
        """Pick the explicit TTL when given, else the namespace default.

        Anything other than a TTL is passed through unvalidated; the cache
        client rejects unusable values without raising.
        """
        if ttl is None:
            return default.seconds
        if isinstance(ttl, TTL):
            return ttl.seconds
        return ttl

    def __str__(self) -> str:
        return f"{self.seconds}s"


# Filter shapes purged on invalidation. Lists cached under any other filter
# combination are only refreshed by TTL expiry.
PRODUCT_LIST_COMMON_FILTERS = ("", "status=active", "status=draft")

INVENTORY_LIST_COMMON_FILTERS = (
    "",
    "location=all",
    "status=all",
    normalize_filters({"location": "all"}),
    normalize_filters({"status": "all"}),
)

TRANSFER_LIST_COMMON_FILTERS = (
    "",
    "status=all",
    "status=pending",
    "status=in_transit",
    "status=completed",
)

CUSTOMER_LIST_COMMON_PARAMS = (
    {},
    {"page": 1},
    {"page": 1, "limit": 25},
    {"page": 1, "limit": 50},
    {"role": "customer"},
    {"status": "active"},
)

# Wildcard scope used for product lists when no tenant is known
ALL_TENANTS_SCOPE = "*"
