"""
Unit tests for cache value objects: keys, filter normalization and TTLs.
"""

import pytest

from storefront_cache.domain.cache.value_objects import (
    INVENTORY_LIST_COMMON_FILTERS,
    TTL,
    CacheKey,
    CacheNamespace,
    normalize_filters,
)


class TestNormalizeFilters:
    def test_dict_key_order_does_not_matter(self):
        a = normalize_filters({"status": "all", "location": "L1"})
        b = normalize_filters({"location": "L1", "status": "all"})

        assert a == b
        assert a == '{"location":"L1","status":"all"}'

    def test_string_passes_through(self):
        assert normalize_filters("status=active") == "status=active"

    def test_none_and_empty(self):
        assert normalize_filters(None) == ""
        assert normalize_filters("") == ""
        assert normalize_filters({}) == "{}"

    def test_non_json_values_are_stringified(self):
        from datetime import date

        assert normalize_filters({"since": date(2024, 1, 2)}) == '{"since":"2024-01-02"}'


class TestCacheKey:
    def test_entity_keys(self):
        assert CacheKey.product(42).value == "product:42"
        assert CacheKey.variants("P1").value == "variants:P1"
        assert CacheKey.variant("V1").value == "variant:V1"
        assert CacheKey.inventory_levels("V1").value == "inventory_levels:V1"
        assert CacheKey.locations("T1").value == "locations:T1"
        assert CacheKey.transfer("X1").value == "transfer:X1"
        assert CacheKey.customer("C1").value == "customer:C1"

    def test_list_keys(self):
        assert CacheKey.products("T1", "status=active").value == (
            "products:T1:status=active"
        )
        assert CacheKey.products("T1").value == "products:T1:"
        assert CacheKey.inventory("T1", {"location": "all"}).value == (
            'inventory:T1:{"location":"all"}'
        )
        assert CacheKey.transfers("T1", "status=pending").value == (
            "transfers:T1:status=pending"
        )

    def test_same_query_same_key(self):
        read = CacheKey.inventory("T1", {"status": "all", "location": "L1"})
        write = CacheKey.inventory("T1", {"location": "L1", "status": "all"})

        assert read == write
        assert hash(read) == hash(write)

    def test_customer_keys(self):
        assert CacheKey.customers_list().value == "customers:list:{}"
        assert CacheKey.customers_list({"page": 1, "limit": 25}).value == (
            'customers:list:{"limit":25,"page":1}'
        )
        assert CacheKey.customer_orders("C1").value == "customer:C1:orders:{}"
        assert CacheKey.customer_section("C1", "cart").value == "customer:C1:cart"

    def test_unknown_customer_section(self):
        with pytest.raises(ValueError):
            CacheKey.customer_section("C1", "wishlist")

    def test_compose_skips_empty_parts(self):
        assert CacheKey.compose("report", "", "T1", None).value == "report:T1"

    def test_compose_all_empty_raises(self):
        with pytest.raises(ValueError):
            CacheKey.compose("", None)

    def test_empty_key_raises(self):
        with pytest.raises(ValueError):
            CacheKey("")

    def test_immutable(self):
        key = CacheKey.product(1)
        with pytest.raises(AttributeError):
            key.value = "product:2"

    def test_str(self):
        assert str(CacheKey.product(1)) == "product:1"

    def test_namespaces_match_key_prefixes(self):
        assert CacheKey.product(1).value.startswith(CacheNamespace.PRODUCT.value + ":")
        assert CacheKey.products("T").value.startswith(
            CacheNamespace.PRODUCTS.value + ":"
        )


class TestTTL:
    @pytest.mark.parametrize(
        "preset, seconds",
        [
            (TTL.products, 600),
            (TTL.variants, 600),
            (TTL.inventory, 300),
            (TTL.locations, 1800),
            (TTL.transfers, 300),
            (TTL.short, 120),
            (TTL.long, 3600),
            (TTL.customer, 300),
            (TTL.customers_list, 180),
            (TTL.customer_orders, 300),
            (TTL.customer_stats, 240),
        ],
    )
    def test_presets(self, preset, seconds):
        assert preset().seconds == seconds

    def test_invalid(self):
        with pytest.raises(ValueError):
            TTL(0)
        with pytest.raises(ValueError):
            TTL(86400 * 366)

    def test_resolve_prefers_explicit(self):
        assert TTL.resolve_seconds(42, TTL.products()) == 42
        assert TTL.resolve_seconds(TTL.minutes(1), TTL.products()) == 60
        assert TTL.resolve_seconds(None, TTL.products()) == 600

    def test_resolve_passes_unusable_values_through(self):
        assert TTL.resolve_seconds("ten", TTL.products()) == "ten"

    def test_str(self):
        assert str(TTL.minutes(2)) == "120s"


def test_inventory_common_filters_cover_dict_forms():
    assert '{"location":"all"}' in INVENTORY_LIST_COMMON_FILTERS
    assert '{"status":"all"}' in INVENTORY_LIST_COMMON_FILTERS
    assert "" in INVENTORY_LIST_COMMON_FILTERS
