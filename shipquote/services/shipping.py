"""Shipping rate calculation for multi-store carts.

Splits the cart by store and prices every store independently: one store's
failure is recorded in ``errors`` and never aborts the others.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shipquote.config import Settings, get_settings
from shipquote.services.domain import Address, CartLine, PricedOption, StoreAccount, StoreCart
from shipquote.services.errors import DataStoreUnavailable
from shipquote.services.fallback import FallbackContext, resolve_store_options
from shipquote.services.repository import ShippingRepository
from shipquote.services.shopify import ShopifyAdminClient
from shipquote.services.weight import estimate_weight, variant_key

logger = logging.getLogger(__name__)

STOREFRONT_PREFIX = "real-"


def store_domain(store_id: str) -> str:
    """Cart store ids may carry the storefront's ``real-`` prefix."""
    store_id = (store_id or "").strip()
    if store_id.startswith(STOREFRONT_PREFIX):
        return store_id[len(STOREFRONT_PREFIX):]
    return store_id


def group_by_store(lines: Sequence[CartLine]) -> dict[str, list[CartLine]]:
    """Partition cart lines by store domain, preserving cart order."""
    grouped: dict[str, list[CartLine]] = {}
    for line in lines:
        grouped.setdefault(store_domain(line.store_id), []).append(line)
    return grouped


@dataclass
class StoreOutcome:
    """Options for one store, or the error that stopped its pipeline."""
    domain: str
    options: list[PricedOption] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class ShippingResult:
    """Per-store options and per-store errors for one request."""
    shipping_rates: dict[str, list[PricedOption]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return any(self.shipping_rates.values())

    def to_dict(self) -> dict:
        data: dict = {
            "success": self.success,
            "shippingRates": {
                domain: [o.to_dict() for o in options]
                for domain, options in self.shipping_rates.items()
            },
        }
        if self.errors:
            data["errors"] = dict(self.errors)
        return data


class ShippingService:
    """Computes per-store shipping options for a cart and destination."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        platform: Optional[ShopifyAdminClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self._session_factory = session_factory
        self.platform = platform or ShopifyAdminClient(
            api_version=self.settings.shopify_api_version,
            timeout=self.settings.platform_timeout_seconds,
        )

    async def calculate(self, lines: Sequence[CartLine], address: Address) -> ShippingResult:
        if not lines:
            raise ValueError("Cart is empty")

        by_store = group_by_store(lines)
        logger.info(f"Calculating shipping for {len(lines)} item(s) across {len(by_store)} store(s)")

        stores = await self._load_stores(by_store.keys())
        semaphore = asyncio.Semaphore(max(1, self.settings.max_concurrent_stores))

        async def bounded(domain: str, store_lines: list[CartLine]) -> StoreOutcome:
            async with semaphore:
                account = stores.get(domain) or StoreAccount(domain=domain)
                return await self._price_store(account, store_lines, address)

        outcomes = await asyncio.gather(
            *(bounded(domain, store_lines) for domain, store_lines in by_store.items())
        )

        result = ShippingResult()
        for outcome in outcomes:
            if outcome.error is not None:
                result.errors[outcome.domain] = outcome.error
            else:
                result.shipping_rates[outcome.domain] = outcome.options
        logger.info(f"Shipping calculated. Success: {result.success}, errors: {len(result.errors)}")
        return result

    async def _load_stores(self, domains) -> dict[str, StoreAccount]:
        try:
            async with self._session_factory() as session:
                return await ShippingRepository(session).stores_by_domain(domains)
        except SQLAlchemyError as e:
            logger.error(f"Store lookup failed: {e}")
            raise DataStoreUnavailable("Could not load stores for this cart") from e

    async def _price_store(
        self,
        store: StoreAccount,
        lines: list[CartLine],
        address: Address,
    ) -> StoreOutcome:
        try:
            async with self._session_factory() as session:
                repo = ShippingRepository(session)
                if not store.is_known:
                    logger.warning(f"{store.domain}: store not registered, only platform/default rates apply")
                    variants = {}
                else:
                    variants = await repo.variant_weights(
                        store.id, (variant_key(line.variant_ref) for line in lines)
                    )
                cart = StoreCart(
                    store=store,
                    lines=lines,
                    address=address,
                    weight_g=estimate_weight(lines, variants, self.settings.default_item_weight_g),
                )
                ctx = FallbackContext(repository=repo, platform=self.platform, settings=self.settings)
                options = await resolve_store_options(cart, ctx)
            return StoreOutcome(domain=store.domain, options=options)
        except Exception as e:
            logger.exception(f"{store.domain}: shipping calculation failed")
            return StoreOutcome(domain=store.domain, error=str(e) or e.__class__.__name__)
