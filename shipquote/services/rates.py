"""Tier selection, extra-weight surcharge and locality pricing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from shipquote.services.domain import LocalityRate, Method, RateTier
from shipquote.services.matching import names_match


def in_range(value: int, low: Optional[int], high: Optional[int]) -> bool:
    """Inclusive range check; a missing bound is unbounded."""
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def tier_matches(tier: RateTier, weight_g: int, subtotal: int) -> bool:
    return (
        in_range(weight_g, tier.min_weight, tier.max_weight)
        and in_range(subtotal, tier.min_subtotal, tier.max_subtotal)
    )


def active_tiers(tiers: Sequence[RateTier]) -> list[RateTier]:
    """Active tiers, highest priority first (storage order breaks ties)."""
    return sorted((t for t in tiers if t.is_active), key=lambda t: -t.priority)


def select_tier(tiers: Sequence[RateTier], weight_g: int, subtotal: int) -> Optional[RateTier]:
    """Choose the tier for a cart.

    First matching tier by priority, else the catch-all tier, else the
    lowest-priority tier. None only when there are no active tiers.
    """
    ordered = active_tiers(tiers)
    if not ordered:
        return None

    for tier in ordered:
        if tier_matches(tier, weight_g, subtotal):
            return tier

    for tier in ordered:
        if tier.is_catch_all:
            return tier

    return ordered[-1]


def extra_weight_surcharge(tier: RateTier, weight_g: int) -> int:
    """Per started kilogram above the tier's maximum weight."""
    if tier.price_per_extra_kg <= 0 or tier.max_weight is None:
        return 0
    excess = weight_g - tier.max_weight
    if excess <= 0:
        return 0
    return math.ceil(excess / 1000) * tier.price_per_extra_kg


def tier_price(tier: RateTier, weight_g: int) -> int:
    return tier.price + extra_weight_surcharge(tier, weight_g)


def find_locality_rate(rates: Sequence[LocalityRate], locality: str) -> Optional[LocalityRate]:
    for rate in rates:
        if rate.is_active and names_match(rate.locality_name, locality):
            return rate
    return None


@dataclass
class LocalityPricing:
    """Outcome of applying a locality rate to a computed price."""
    price: int
    rate: Optional[LocalityRate] = None
    overridden: bool = False


def apply_locality(price: int, rates: Sequence[LocalityRate], locality: str) -> LocalityPricing:
    """Override wins outright; otherwise a non-zero adjustment is added."""
    rate = find_locality_rate(rates, locality)
    if rate is None:
        return LocalityPricing(price=price)
    if rate.price_override is not None:
        return LocalityPricing(price=max(0, rate.price_override), rate=rate, overridden=True)
    if rate.price_adjustment:
        return LocalityPricing(price=max(0, price + rate.price_adjustment), rate=rate)
    return LocalityPricing(price=price, rate=rate)


def method_serves_locality(method: Method, locality: str) -> bool:
    """Methods without an explicit locality list serve the whole zone.

    Listed codes are compared with the destination locality directly and
    through the names of the method's locality rates carrying those codes.
    """
    if method.locality_codes is None:
        return True
    codes = set(method.locality_codes)
    if any(names_match(code, locality) for code in codes):
        return True
    return any(
        rate.locality_code in codes and names_match(rate.locality_name, locality)
        for rate in method.locality_rates
    )
