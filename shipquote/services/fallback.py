"""Ordered fallback chain for a store's shipping options.

Each attempt takes the store's cart and a context and returns a list of
options, or None when it cannot price the cart. The first non-empty result
wins and later attempts are not run, so a store never receives a mix of
two states' options.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from shipquote.config import Settings
from shipquote.services.domain import PricedOption, StoreCart, Zone
from shipquote.services.errors import PlatformAPIError
from shipquote.services.pricing import advanced_options, default_option, legacy_options
from shipquote.services.repository import ShippingRepository
from shipquote.services.shopify import ShopifyAdminClient, platform_rate_options

logger = logging.getLogger(__name__)


@dataclass
class FallbackContext:
    """Collaborators shared by the attempts of one store pipeline."""
    repository: ShippingRepository
    platform: ShopifyAdminClient
    settings: Settings
    _zones: Optional[list[Zone]] = field(default=None, repr=False)

    async def store_zones(self, store_id: int) -> list[Zone]:
        # Advanced and legacy both read the zone table; load it once.
        if self._zones is None:
            self._zones = await self.repository.zones(store_id)
        return self._zones


Attempt = Callable[[StoreCart, FallbackContext], Awaitable[Optional[list[PricedOption]]]]


async def try_advanced(cart: StoreCart, ctx: FallbackContext) -> Optional[list[PricedOption]]:
    if not cart.store.is_known:
        return None
    zones = await ctx.store_zones(cart.store.id)
    if not any(zone.methods for zone in zones):
        return None
    rules = await ctx.repository.free_shipping_rules(cart.store.id)
    return advanced_options(zones, rules, cart, free_label=ctx.settings.free_shipping_label)


async def try_legacy(cart: StoreCart, ctx: FallbackContext) -> Optional[list[PricedOption]]:
    if not cart.store.is_known:
        return None
    config = await ctx.repository.legacy_settings(cart.store.id)
    if config is None or config.shipping_type != "zone_manual":
        return None
    zones = await ctx.store_zones(cart.store.id)
    return legacy_options(config, zones, cart, free_title=ctx.settings.legacy_free_title)


async def try_platform(cart: StoreCart, ctx: FallbackContext) -> Optional[list[PricedOption]]:
    try:
        zones = await ctx.platform.shipping_zones(cart.store.domain, cart.store.admin_api_token)
    except PlatformAPIError as e:
        logger.warning(f"{cart.store.domain}: skipping platform rates: {e}")
        return None
    return platform_rate_options(
        zones,
        subtotal=cart.subtotal,
        weight_g=cart.weight_g,
        scale=ctx.settings.platform_amount_scale,
    )


async def try_default(cart: StoreCart, ctx: FallbackContext) -> Optional[list[PricedOption]]:
    s = ctx.settings
    return [default_option(s.default_rate_title, s.default_rate_price, s.default_rate_code)]


FALLBACK_CHAIN: tuple[tuple[str, Attempt], ...] = (
    ("advanced", try_advanced),
    ("legacy", try_legacy),
    ("external-platform", try_platform),
    ("default", try_default),
)


async def resolve_store_options(
    cart: StoreCart,
    ctx: FallbackContext,
    chain: tuple[tuple[str, Attempt], ...] = FALLBACK_CHAIN,
) -> list[PricedOption]:
    """Run the chain until one state yields options."""
    for name, attempt in chain:
        options = await attempt(cart, ctx)
        if options:
            logger.info(f"{cart.store.domain}: {len(options)} option(s) from {name}")
            return options
        logger.debug(f"{cart.store.domain}: {name} produced no options")
    return []
