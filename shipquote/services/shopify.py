"""Shopify Admin API shipping zones.

Used as the external-platform fallback when a store has no usable shipping
configuration of its own.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from shipquote.services.domain import OptionSource, PricedOption
from shipquote.services.errors import PlatformAPIError

logger = logging.getLogger(__name__)


class ShopifyAdminClient:
    """Minimal async client for the shipping zones endpoint."""

    def __init__(
        self,
        api_version: str = "2024-10",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_version = api_version
        self.timeout = timeout
        self._transport = transport

    def shipping_zones_url(self, domain: str) -> str:
        return f"https://{domain}/admin/api/{self.api_version}/shipping_zones.json"

    async def shipping_zones(self, domain: str, access_token: Optional[str]) -> list[dict]:
        """List the store's shipping zones; raises PlatformAPIError on any failure."""
        if not access_token:
            raise PlatformAPIError(f"No Admin API token configured for {domain}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(
                    self.shipping_zones_url(domain),
                    headers={
                        "X-Shopify-Access-Token": access_token,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise PlatformAPIError(f"Shipping zones request failed for {domain}: {e}") from e

        if resp.status_code != 200:
            raise PlatformAPIError(
                f"Shipping zones request for {domain} returned {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise PlatformAPIError(f"Invalid shipping zones payload from {domain}") from e
        if not isinstance(data, dict):
            raise PlatformAPIError(f"Unexpected shipping zones payload from {domain}")
        zones = data.get("shipping_zones") or []
        if not isinstance(zones, list):
            raise PlatformAPIError(f"Unexpected shipping zones payload from {domain}")
        zones = [zone for zone in zones if isinstance(zone, dict)]
        logger.debug(f"{domain}: {len(zones)} platform shipping zone(s)")
        return zones


def to_minor_units(amount: Any, scale: int = 1) -> Optional[int]:
    """Decimal string from the API to integer minor units (None if unparsable)."""
    if amount is None or amount == "":
        return None
    try:
        value = Decimal(str(amount)) * scale
        if not value.is_finite():
            return None
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return None


def _within(value: int, low: Optional[int], high: Optional[int]) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


def platform_rate_options(
    zones: list[dict],
    subtotal: int,
    weight_g: int,
    scale: int = 1,
) -> list[PricedOption]:
    """Collapse the store's platform rates into priced options.

    Price-based rates are filtered by the order subtotal. Weight-based rates
    are only considered when the store has no price-based rates at all.
    The cheapest rate is kept for each rate name.
    """
    by_name: dict[str, PricedOption] = {}
    zones = [zone for zone in zones if isinstance(zone, dict)]
    has_price_based = any(_rates(zone, "price_based_shipping_rates") for zone in zones)

    for zone in zones:
        if has_price_based:
            for rate in _rates(zone, "price_based_shipping_rates"):
                price = to_minor_units(rate.get("price"), scale)
                if price is None:
                    continue
                low = to_minor_units(rate.get("min_order_subtotal"), scale) or 0
                high = to_minor_units(rate.get("max_order_subtotal"), scale)
                if not _within(subtotal, low, high):
                    continue
                _keep_cheapest(by_name, PricedOption(
                    id=f"platform-{rate.get('id')}",
                    title=rate.get("name") or "Shipping",
                    price=price,
                    code=str(rate.get("id")),
                    source=OptionSource.EXTERNAL_PLATFORM,
                ))
        else:
            for rate in _rates(zone, "weight_based_shipping_rates"):
                price = to_minor_units(rate.get("price"), scale)
                if price is None:
                    continue
                # Weight bounds are kilograms on the platform side.
                low = to_minor_units(rate.get("weight_low"), 1000)
                high = to_minor_units(rate.get("weight_high"), 1000)
                if not _within(weight_g, low, high):
                    continue
                _keep_cheapest(by_name, PricedOption(
                    id=f"platform-weight-{rate.get('id')}",
                    title=rate.get("name") or "Shipping",
                    price=price,
                    code=str(rate.get("id")),
                    source=OptionSource.EXTERNAL_PLATFORM,
                ))

    return sorted(by_name.values(), key=lambda o: o.price)


def _rates(zone: dict, key: str) -> list[dict]:
    rates = zone.get(key)
    if not isinstance(rates, list):
        return []
    return [rate for rate in rates if isinstance(rate, dict)]


def _keep_cheapest(by_name: dict[str, PricedOption], option: PricedOption) -> None:
    current = by_name.get(option.title)
    if current is None or option.price < current.price:
        by_name[option.title] = option
