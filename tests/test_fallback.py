"""Fallback chain tests with in-memory collaborators."""

import httpx
import pytest

from shipquote.services.domain import (
    LegacySettings,
    Method,
    OptionSource,
    RateTier,
    ShippingRule,
    Zone,
)
from shipquote.services.errors import PlatformAPIError
from shipquote.services.fallback import (
    FallbackContext,
    resolve_store_options,
    try_advanced,
    try_default,
    try_legacy,
    try_platform,
)
from shipquote.services.shopify import ShopifyAdminClient


class FakeRepository:
    def __init__(self, zones=None, rules=None, legacy=None):
        self._zones = zones or []
        self._rules = rules or []
        self._legacy = legacy
        self.zone_loads = 0

    async def zones(self, store_id):
        self.zone_loads += 1
        return self._zones

    async def free_shipping_rules(self, store_id):
        return self._rules

    async def legacy_settings(self, store_id):
        return self._legacy


class FakePlatform:
    def __init__(self, zones=None, error=None):
        self.zones = zones or []
        self.error = error
        self.calls = 0

    async def shipping_zones(self, domain, access_token):
        self.calls += 1
        if self.error:
            raise self.error
        return self.zones


ADVANCED_ZONES = [
    Zone(code="RM", name="Metropolitana", base_price=3500, methods=[
        Method(name="Standard", code="standard", tiers=[RateTier(price=2990)]),
    ]),
]
LEGACY_ZONES = [Zone(code="RM", name="Metropolitana", base_price=3500)]
PLATFORM_ZONES = [{"price_based_shipping_rates": [{"id": 7, "name": "Shopify Std", "price": "4500"}]}]


def context(settings, repository=None, platform=None):
    return FallbackContext(
        repository=repository or FakeRepository(),
        platform=platform or FakePlatform(),
        settings=settings,
    )


class TestAttempts:
    @pytest.mark.asyncio
    async def test_advanced_needs_methods(self, settings, make_cart):
        ctx = context(settings, FakeRepository(zones=LEGACY_ZONES))
        assert await try_advanced(make_cart(), ctx) is None

    @pytest.mark.asyncio
    async def test_advanced_applies_rules(self, settings, make_cart):
        repo = FakeRepository(zones=ADVANCED_ZONES, rules=[ShippingRule(min_subtotal=10000)])
        [option] = await try_advanced(make_cart(), context(settings, repo))
        assert option.price == 0
        assert option.source == OptionSource.ADVANCED

    @pytest.mark.asyncio
    async def test_advanced_skipped_for_unknown_store(self, settings, make_cart):
        ctx = context(settings, FakeRepository(zones=ADVANCED_ZONES))
        assert await try_advanced(make_cart(store_id=None), ctx) is None

    @pytest.mark.asyncio
    async def test_legacy_zone_manual(self, settings, make_cart):
        repo = FakeRepository(zones=LEGACY_ZONES, legacy=LegacySettings(shipping_type="zone_manual"))
        [option] = await try_legacy(make_cart(), context(settings, repo))
        assert option.price == 3500
        assert option.source == OptionSource.LEGACY

    @pytest.mark.asyncio
    async def test_legacy_other_type(self, settings, make_cart):
        repo = FakeRepository(zones=LEGACY_ZONES, legacy=LegacySettings(shipping_type="flat_shopify"))
        assert await try_legacy(make_cart(), context(settings, repo)) is None

    @pytest.mark.asyncio
    async def test_platform_error_is_skipped(self, settings, make_cart):
        platform = FakePlatform(error=PlatformAPIError("boom", status_code=500))
        assert await try_platform(make_cart(), context(settings, platform=platform)) is None

    @pytest.mark.asyncio
    async def test_platform_rates(self, settings, make_cart):
        platform = FakePlatform(zones=PLATFORM_ZONES)
        [option] = await try_platform(make_cart(), context(settings, platform=platform))
        assert option.price == 4500
        assert option.source == OptionSource.EXTERNAL_PLATFORM

    @pytest.mark.asyncio
    async def test_default(self, settings, make_cart):
        [option] = await try_default(make_cart(), context(settings))
        assert option.price == settings.default_rate_price
        assert option.title == settings.default_rate_title
        assert option.source == OptionSource.DEFAULT


class TestResolveStoreOptions:
    @pytest.mark.asyncio
    async def test_advanced_short_circuits(self, settings, make_cart):
        repo = FakeRepository(zones=ADVANCED_ZONES, legacy=LegacySettings(shipping_type="zone_manual"))
        platform = FakePlatform(zones=PLATFORM_ZONES)
        options = await resolve_store_options(make_cart(), context(settings, repo, platform))
        assert {o.source for o in options} == {OptionSource.ADVANCED}
        assert platform.calls == 0

    @pytest.mark.asyncio
    async def test_zones_loaded_once(self, settings, make_cart):
        repo = FakeRepository(zones=LEGACY_ZONES, legacy=LegacySettings(shipping_type="zone_manual"))
        options = await resolve_store_options(make_cart(), context(settings, repo))
        assert options[0].source == OptionSource.LEGACY
        assert repo.zone_loads == 1

    @pytest.mark.asyncio
    async def test_falls_to_platform(self, settings, make_cart):
        platform = FakePlatform(zones=PLATFORM_ZONES)
        options = await resolve_store_options(make_cart(), context(settings, platform=platform))
        assert options[0].source == OptionSource.EXTERNAL_PLATFORM

    @pytest.mark.asyncio
    async def test_empty_platform_falls_to_default(self, settings, make_cart):
        options = await resolve_store_options(make_cart(), context(settings))
        assert [o.id for o in options] == ["default-standard"]

    @pytest.mark.asyncio
    async def test_all_inapplicable_methods_fall_through(self, settings, make_cart):
        zones = [Zone(code="RM", methods=[Method(name="Off", code="off", is_active=False, tiers=[RateTier(price=1)])])]
        options = await resolve_store_options(make_cart(), context(settings, FakeRepository(zones=zones)))
        assert options[0].source == OptionSource.DEFAULT

    @pytest.mark.asyncio
    async def test_custom_chain(self, settings, make_cart):
        async def nothing(cart, ctx):
            return None

        assert await resolve_store_options(make_cart(), context(settings), chain=(("none", nothing),)) == []


class TestChainWithPlatformClient:
    def client(self, handler):
        return ShopifyAdminClient(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_no_zones_flat_shopify_no_credential(self, settings, make_cart):
        def handler(request):
            raise AssertionError("no request expected")

        repo = FakeRepository(legacy=LegacySettings(shipping_type="flat_shopify"))
        ctx = context(settings, repo, self.client(handler))
        [option] = await resolve_store_options(make_cart(admin_api_token=None), ctx)
        assert option.source == OptionSource.DEFAULT
        assert option.price == settings.default_rate_price

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"[]", b"null"])
    async def test_non_object_payload_falls_to_default(self, settings, make_cart, body):
        client = self.client(lambda request: httpx.Response(200, content=body))
        ctx = context(settings, platform=client)
        [option] = await resolve_store_options(make_cart(admin_api_token="shpat_123"), ctx)
        assert option.source == OptionSource.DEFAULT

    @pytest.mark.asyncio
    async def test_non_finite_price_falls_to_default(self, settings, make_cart):
        zones = [{"price_based_shipping_rates": [{"id": 1, "name": "Std", "price": "Infinity"}]}]
        client = self.client(lambda request: httpx.Response(200, json={"shipping_zones": zones}))
        ctx = context(settings, platform=client)
        [option] = await resolve_store_options(make_cart(admin_api_token="shpat_123"), ctx)
        assert option.source == OptionSource.DEFAULT
