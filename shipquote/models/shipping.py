"""Shipping configuration models (authored by the store dashboard)."""

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text, JSON,
)
from sqlalchemy.orm import relationship

from shipquote.database import Base, utcnow


class StoreShippingConfig(Base):
    """Legacy single-record shipping configuration per store."""
    __tablename__ = "store_shipping_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, unique=True)
    shipping_type = Column(
        Enum("flat_shopify", "zone_manual", "grumo_logistics", name="shipping_type"),
        default="flat_shopify",
    )
    free_shipping_threshold = Column(Integer, nullable=True)
    default_shipping_name = Column(String(200), default="Standard shipping")
    estimated_delivery = Column(String(200), default="")
    is_active = Column(Boolean, default=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ShippingZone(Base):
    """Geographic zone keyed by administrative subdivision code."""
    __tablename__ = "shipping_zones"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    region_code = Column(String(20), nullable=False)
    region_name = Column(String(200), default="")
    base_price = Column(Integer, default=0)  # legacy flat price
    has_commune_breakdown = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    localities = relationship(
        "ShippingZoneLocality", back_populates="zone", order_by="ShippingZoneLocality.id",
    )
    methods = relationship(
        "ShippingMethod", back_populates="zone", order_by="ShippingMethod.sort_order",
    )


class ShippingZoneLocality(Base):
    """Legacy per-locality flat price inside a zone."""
    __tablename__ = "shipping_zone_localities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    zone_id = Column(Integer, ForeignKey("shipping_zones.id"), nullable=False, index=True)
    commune_code = Column(String(50), default="")
    commune_name = Column(String(200), nullable=False)
    price = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    zone = relationship("ShippingZone", back_populates="localities")


class ShippingMethod(Base):
    """Named shipping service offered in a zone."""
    __tablename__ = "shipping_methods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    zone_id = Column(Integer, ForeignKey("shipping_zones.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    code = Column(String(100), nullable=False)
    description = Column(Text, default="")
    estimated_delivery = Column(String(200), default="")
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    locality_codes = Column(JSON, nullable=True)  # None = every locality in the zone

    zone = relationship("ShippingZone", back_populates="methods")
    rates = relationship("ShippingRate", back_populates="method", order_by="ShippingRate.id")
    locality_rates = relationship(
        "ShippingLocalityRate", back_populates="method", order_by="ShippingLocalityRate.id",
    )


class ShippingRate(Base):
    """Weight/subtotal tier of a shipping method."""
    __tablename__ = "shipping_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    method_id = Column(Integer, ForeignKey("shipping_methods.id"), nullable=False, index=True)
    name = Column(String(200), default="")
    min_weight = Column(Integer, default=0)  # grams
    max_weight = Column(Integer, nullable=True)
    min_subtotal = Column(Integer, default=0)
    max_subtotal = Column(Integer, nullable=True)
    price = Column(Integer, nullable=False)
    price_per_extra_kg = Column(Integer, default=0)
    priority = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    method = relationship("ShippingMethod", back_populates="rates")


class ShippingLocalityRate(Base):
    """Per-locality override or adjustment for a shipping method."""
    __tablename__ = "shipping_locality_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    method_id = Column(Integer, ForeignKey("shipping_methods.id"), nullable=False, index=True)
    locality_code = Column(String(50), default="")
    locality_name = Column(String(200), nullable=False)
    price_override = Column(Integer, nullable=True)
    price_adjustment = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    method = relationship("ShippingMethod", back_populates="locality_rates")


class FreeShippingRule(Base):
    """Conditional free-shipping rule, all present bounds combined with AND."""
    __tablename__ = "free_shipping_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    name = Column(String(200), default="")
    min_subtotal = Column(Integer, nullable=True)
    max_subtotal = Column(Integer, nullable=True)
    min_weight = Column(Integer, nullable=True)
    max_weight = Column(Integer, nullable=True)
    min_items = Column(Integer, nullable=True)
    method_codes = Column(JSON, nullable=True)
    zone_codes = Column(JSON, nullable=True)
    priority = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
