"""In-memory shipping data structures.

The repository converts database rows into these dataclasses so every
pricing stage works on plain values and can be tested without a database.
All prices are integers in the smallest currency unit, weights are grams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OptionSource(str, Enum):
    """Which fallback state produced a priced option."""
    ADVANCED = "advanced"
    LEGACY = "legacy"
    EXTERNAL_PLATFORM = "external-platform"
    DEFAULT = "default"


@dataclass
class Address:
    """Destination address."""
    line1: str = ""
    locality: str = ""
    subdivision: str = ""
    postal_code: str = ""
    country_code: str = "CL"


@dataclass
class CartLine:
    """One cart line, already scoped to a store."""
    store_id: str
    variant_ref: Optional[str]
    unit_price: int
    quantity: int = 1

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass
class VariantWeight:
    """Declared weight of a catalog variant."""
    variant_id: str
    weight: Optional[float] = None
    unit: Optional[str] = None


@dataclass
class RateTier:
    """Priced bracket of a method, bounded by weight and subtotal."""
    price: int
    name: str = ""
    min_weight: int = 0
    max_weight: Optional[int] = None
    min_subtotal: int = 0
    max_subtotal: Optional[int] = None
    price_per_extra_kg: int = 0
    priority: int = 0
    is_active: bool = True
    id: Optional[int] = None

    @property
    def is_catch_all(self) -> bool:
        return (
            not self.min_weight
            and self.max_weight is None
            and not self.min_subtotal
            and self.max_subtotal is None
        )


@dataclass
class LocalityRate:
    """Per-locality price override or adjustment."""
    locality_name: str
    locality_code: str = ""
    price_override: Optional[int] = None
    price_adjustment: int = 0
    is_active: bool = True


@dataclass
class Method:
    """Shipping method inside a zone."""
    name: str
    code: str
    description: str = ""
    estimated_delivery: str = ""
    sort_order: int = 0
    is_active: bool = True
    locality_codes: Optional[list[str]] = None
    tiers: list[RateTier] = field(default_factory=list)
    locality_rates: list[LocalityRate] = field(default_factory=list)
    id: Optional[int] = None


@dataclass
class LegacyLocality:
    """Legacy flat price for one locality of a zone."""
    name: str
    price: int
    code: str = ""
    is_active: bool = True


@dataclass
class Zone:
    """Store-defined geographic zone."""
    code: str
    name: str = ""
    base_price: int = 0
    has_locality_breakdown: bool = False
    is_active: bool = True
    localities: list[LegacyLocality] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    id: Optional[int] = None


@dataclass
class ShippingRule:
    """Free-shipping rule; absent bounds impose no constraint."""
    name: str = ""
    min_subtotal: Optional[int] = None
    max_subtotal: Optional[int] = None
    min_weight: Optional[int] = None
    max_weight: Optional[int] = None
    min_items: Optional[int] = None
    method_codes: Optional[list[str]] = None
    zone_codes: Optional[list[str]] = None
    priority: int = 0
    is_active: bool = True
    id: Optional[int] = None


@dataclass
class LegacySettings:
    """Single-record legacy configuration of a store."""
    shipping_type: str = "flat_shopify"
    free_shipping_threshold: Optional[int] = None
    default_shipping_name: str = "Standard shipping"
    estimated_delivery: str = ""
    is_active: bool = True


@dataclass
class StoreAccount:
    """Store identity and platform credentials."""
    domain: str
    id: Optional[int] = None
    name: str = ""
    access_token: Optional[str] = None
    admin_api_token: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.id is not None


@dataclass
class StoreCart:
    """Everything one store's pipeline needs to price its sub-cart."""
    store: StoreAccount
    lines: list[CartLine]
    address: Address
    weight_g: int = 0

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass
class PricedOption:
    """Priced shipping option returned to the caller."""
    id: str
    title: str
    price: int
    code: str
    source: OptionSource
    estimated_delivery: Optional[str] = None

    @property
    def is_free(self) -> bool:
        return self.price == 0

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "code": self.code,
            "source": self.source.value,
        }
        if self.estimated_delivery:
            data["estimatedDelivery"] = self.estimated_delivery
        return data
