"""Per-store option pricing from zone/method/tier configuration.

Pipeline for each active method of the resolved zone::

    tier (+ extra-weight surcharge) -> locality override/adjustment
        -> free-shipping rules -> titled option

Options are returned free first, then by ascending price.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from shipquote.services.domain import (
    LegacySettings,
    Method,
    OptionSource,
    PricedOption,
    ShippingRule,
    StoreCart,
    Zone,
)
from shipquote.services.free_shipping import CartFacts, matching_rule
from shipquote.services.matching import names_match
from shipquote.services.rates import (
    apply_locality,
    method_serves_locality,
    select_tier,
    tier_price,
)
from shipquote.services.zones import resolve_zone

logger = logging.getLogger(__name__)

FREE_LABEL = "Free"


def sort_options(options: Iterable[PricedOption]) -> list[PricedOption]:
    """Free options first, then ascending price; stable otherwise."""
    return sorted(options, key=lambda o: (not o.is_free, o.price))


def option_title(method: Method, free: bool, free_label: str = FREE_LABEL) -> str:
    title = method.name
    if method.estimated_delivery:
        title = f"{title} ({method.estimated_delivery})"
    if free:
        title = f"{title} - {free_label}"
    return title


def price_method(
    method: Method,
    zone: Zone,
    cart: StoreCart,
    rules: Sequence[ShippingRule] = (),
    free_label: str = FREE_LABEL,
) -> Optional[PricedOption]:
    """Price one method, or None when it has no selectable tier."""
    tier = select_tier(method.tiers, cart.weight_g, cart.subtotal)
    if tier is None:
        logger.debug(f"Method {method.code} has no active tiers, skipped")
        return None

    price = tier_price(tier, cart.weight_g)
    locality = apply_locality(price, method.locality_rates, cart.address.locality)
    if locality.rate is not None:
        kind = "override" if locality.overridden else "adjustment"
        logger.debug(
            f"Method {method.code}: locality {kind} for "
            f"{locality.rate.locality_name!r}, {price} -> {locality.price}"
        )
    price = locality.price

    facts = CartFacts(
        method_code=method.code,
        zone_code=zone.code,
        subtotal=cart.subtotal,
        weight_g=cart.weight_g,
        item_count=cart.item_count,
    )
    rule = matching_rule(rules, facts)
    if rule is not None:
        logger.debug(f"Free-shipping rule {rule.name!r} applies to {method.code}")
        price = 0

    return PricedOption(
        id=f"advanced-{method.code}",
        title=option_title(method, price == 0, free_label),
        price=price,
        code=method.code,
        source=OptionSource.ADVANCED,
        estimated_delivery=method.estimated_delivery or None,
    )


def advanced_options(
    zones: Sequence[Zone],
    rules: Sequence[ShippingRule],
    cart: StoreCart,
    free_label: str = FREE_LABEL,
) -> list[PricedOption]:
    """Options from the store's zone/method/tier configuration."""
    zone = resolve_zone([z for z in zones if z.is_active], cart.address.subdivision)
    if zone is None:
        return []

    methods = sorted(
        (m for m in zone.methods if m.is_active),
        key=lambda m: m.sort_order,
    )
    options = []
    for method in methods:
        if not method_serves_locality(method, cart.address.locality):
            continue
        option = price_method(method, zone, cart, rules, free_label)
        if option is not None:
            options.append(option)

    logger.info(
        f"{cart.store.domain}: zone {zone.code}, {len(options)} advanced option(s) "
        f"for {cart.weight_g}g / subtotal {cart.subtotal}"
    )
    return sort_options(options)


def legacy_options(
    config: Optional[LegacySettings],
    zones: Sequence[Zone],
    cart: StoreCart,
    free_title: str = "Free shipping",
) -> list[PricedOption]:
    """Single option from the legacy per-zone configuration.

    Only ``zone_manual`` stores are priced here; any other shipping type
    defers to the next fallback state.
    """
    if config is None or not config.is_active or config.shipping_type != "zone_manual":
        return []

    zone = resolve_zone([z for z in zones if z.is_active], cart.address.subdivision)
    if zone is None:
        logger.info(f"{cart.store.domain}: legacy config has no active zones")
        return []

    price = zone.base_price
    if zone.has_locality_breakdown:
        for locality in zone.localities:
            if locality.is_active and names_match(locality.name, cart.address.locality):
                price = locality.price
                break

    threshold = config.free_shipping_threshold
    if threshold and cart.subtotal >= threshold:
        return [PricedOption(
            id="legacy-free",
            title=free_title,
            price=0,
            code="FREE",
            source=OptionSource.LEGACY,
        )]

    title = config.default_shipping_name or "Standard shipping"
    if config.estimated_delivery:
        title = f"{title} ({config.estimated_delivery})"
    return [PricedOption(
        id=f"legacy-{zone.code}",
        title=title,
        price=price,
        code=zone.code,
        source=OptionSource.LEGACY,
        estimated_delivery=config.estimated_delivery or None,
    )]


def default_option(title: str, price: int, code: str = "STANDARD") -> PricedOption:
    return PricedOption(
        id="default-standard",
        title=title,
        price=price,
        code=code,
        source=OptionSource.DEFAULT,
    )
