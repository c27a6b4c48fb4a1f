"""Read-only lookups of store, catalog and shipping configuration."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shipquote.models import (
    FreeShippingRule,
    ProductVariant,
    ShippingMethod,
    ShippingZone,
    Store,
    StoreShippingConfig,
)
from shipquote.services.domain import (
    LegacyLocality,
    LegacySettings,
    LocalityRate,
    Method,
    RateTier,
    ShippingRule,
    StoreAccount,
    VariantWeight,
    Zone,
)


class ShippingRepository:
    """Loads shipping data for one store pipeline from a single session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def stores_by_domain(self, domains: Iterable[str]) -> dict[str, StoreAccount]:
        domains = list(domains)
        if not domains:
            return {}
        result = await self.session.execute(select(Store).where(Store.domain.in_(domains)))
        return {
            s.domain: StoreAccount(
                domain=s.domain,
                id=s.id,
                name=s.name or "",
                access_token=s.access_token,
                admin_api_token=s.admin_api_token,
            )
            for s in result.scalars().all()
        }

    async def variant_weights(self, store_id: int, keys: Iterable[str]) -> dict[str, VariantWeight]:
        keys = [k for k in set(keys) if k]
        if not keys:
            return {}
        stmt = select(ProductVariant).where(
            ProductVariant.store_id == store_id,
            ProductVariant.id.in_(keys),
        )
        result = await self.session.execute(stmt)
        return {
            v.id: VariantWeight(variant_id=v.id, weight=v.weight, unit=v.weight_unit)
            for v in result.scalars().all()
        }

    async def zones(self, store_id: int) -> list[Zone]:
        """All zones of a store in storage order, with methods, tiers and localities."""
        stmt = (
            select(ShippingZone)
            .where(ShippingZone.store_id == store_id)
            .options(
                selectinload(ShippingZone.localities),
                selectinload(ShippingZone.methods).selectinload(ShippingMethod.rates),
                selectinload(ShippingZone.methods).selectinload(ShippingMethod.locality_rates),
            )
            .order_by(ShippingZone.id)
        )
        result = await self.session.execute(stmt)
        return [_zone_from_row(z) for z in result.scalars().all()]

    async def free_shipping_rules(self, store_id: int) -> list[ShippingRule]:
        stmt = (
            select(FreeShippingRule)
            .where(FreeShippingRule.store_id == store_id, FreeShippingRule.is_active.is_(True))
            .order_by(FreeShippingRule.priority.desc(), FreeShippingRule.id)
        )
        result = await self.session.execute(stmt)
        return [
            ShippingRule(
                id=r.id,
                name=r.name or "",
                min_subtotal=r.min_subtotal,
                max_subtotal=r.max_subtotal,
                min_weight=r.min_weight,
                max_weight=r.max_weight,
                min_items=r.min_items,
                method_codes=r.method_codes,
                zone_codes=r.zone_codes,
                priority=r.priority or 0,
                is_active=bool(r.is_active),
            )
            for r in result.scalars().all()
        ]

    async def legacy_settings(self, store_id: int) -> Optional[LegacySettings]:
        stmt = select(StoreShippingConfig).where(
            StoreShippingConfig.store_id == store_id,
            StoreShippingConfig.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return LegacySettings(
            shipping_type=row.shipping_type,
            free_shipping_threshold=row.free_shipping_threshold,
            default_shipping_name=row.default_shipping_name or "",
            estimated_delivery=row.estimated_delivery or "",
            is_active=bool(row.is_active),
        )


def _zone_from_row(row: ShippingZone) -> Zone:
    return Zone(
        id=row.id,
        code=row.region_code,
        name=row.region_name or "",
        base_price=row.base_price or 0,
        has_locality_breakdown=bool(row.has_commune_breakdown),
        is_active=bool(row.is_active),
        localities=[
            LegacyLocality(
                name=c.commune_name,
                price=c.price or 0,
                code=c.commune_code or "",
                is_active=bool(c.is_active),
            )
            for c in row.localities
        ],
        methods=[_method_from_row(m) for m in row.methods],
    )


def _method_from_row(row: ShippingMethod) -> Method:
    return Method(
        id=row.id,
        name=row.name,
        code=row.code,
        description=row.description or "",
        estimated_delivery=row.estimated_delivery or "",
        sort_order=row.sort_order or 0,
        is_active=bool(row.is_active),
        locality_codes=row.locality_codes,
        tiers=[
            RateTier(
                id=t.id,
                name=t.name or "",
                min_weight=t.min_weight or 0,
                max_weight=t.max_weight,
                min_subtotal=t.min_subtotal or 0,
                max_subtotal=t.max_subtotal,
                price=t.price,
                price_per_extra_kg=t.price_per_extra_kg or 0,
                priority=t.priority or 0,
                is_active=bool(t.is_active),
            )
            for t in row.rates
        ],
        locality_rates=[
            LocalityRate(
                locality_name=lr.locality_name,
                locality_code=lr.locality_code or "",
                price_override=lr.price_override,
                price_adjustment=lr.price_adjustment or 0,
                is_active=bool(lr.is_active),
            )
            for lr in row.locality_rates
        ],
    )
