"""Storefront data models read by the shipping engine."""

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String,
)
from sqlalchemy.orm import relationship

from shipquote.database import Base, utcnow


class Store(Base):
    """Independently operated store connected to the marketplace."""
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(300), default="")
    access_token = Column(String(255), nullable=True)  # Storefront API
    admin_api_token = Column(String(255), nullable=True)  # Admin API, used for shipping zones
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    variants = relationship("ProductVariant", back_populates="store")


class ProductVariant(Base):
    """Variant synced from the commerce platform catalog."""
    __tablename__ = "product_variants"

    id = Column(String(100), primary_key=True)  # platform variant id
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    title = Column(String(500), default="")
    price = Column(Integer, default=0)
    weight = Column(Numeric(12, 4), nullable=True)
    weight_unit = Column(String(20), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    store = relationship("Store", back_populates="variants")


from shipquote.models.shipping import (  # noqa: E402
    FreeShippingRule,
    ShippingLocalityRate,
    ShippingMethod,
    ShippingRate,
    ShippingZone,
    ShippingZoneLocality,
    StoreShippingConfig,
)

__all__ = [
    "Store",
    "ProductVariant",
    "StoreShippingConfig",
    "ShippingZone",
    "ShippingZoneLocality",
    "ShippingMethod",
    "ShippingRate",
    "ShippingLocalityRate",
    "FreeShippingRule",
]
