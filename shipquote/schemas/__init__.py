"""Pydantic schemas for the shipping API."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from shipquote.services.domain import Address, CartLine


# ── Request ──────────────────────────────────────────────
class CartItemIn(BaseModel):
    variant_ref: Optional[str] = Field(
        None, validation_alias=AliasChoices("variantRef", "variant_ref"),
    )
    quantity: int = Field(1, ge=1)
    unit_price: int = Field(
        ..., ge=0, validation_alias=AliasChoices("unitPrice", "unit_price", "price"),
    )
    store_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("storeId", "store_id"),
    )

    @model_validator(mode="before")
    @classmethod
    def _variant_from_storefront_item(cls, data: Any) -> Any:
        # Storefront cart items carry the variant as selectedVariant.id or the item id.
        if not isinstance(data, dict):
            return data
        ref = data.get("variantRef") or data.get("variant_ref")
        if not ref:
            selected = data.get("selectedVariant")
            if isinstance(selected, dict):
                ref = selected.get("id")
            ref = ref or data.get("id")
        if ref is not None:
            data = {**data, "variantRef": str(ref)}
        return data

    def to_line(self) -> CartLine:
        return CartLine(
            store_id=self.store_id,
            variant_ref=self.variant_ref,
            unit_price=self.unit_price,
            quantity=self.quantity,
        )


class ShippingAddressIn(BaseModel):
    line1: str = Field("", validation_alias=AliasChoices("line1", "address1"))
    locality: str = Field("", validation_alias=AliasChoices("locality", "city"))
    subdivision: str = Field(
        ..., validation_alias=AliasChoices("subdivision", "province", "region"),
    )
    postal_code: str = Field(
        "", validation_alias=AliasChoices("postalCode", "postal_code", "zip"),
    )
    country_code: Optional[str] = Field(
        None, validation_alias=AliasChoices("countryCode", "country_code"),
    )

    def to_address(self, default_country: str = "CL") -> Address:
        return Address(
            line1=self.line1,
            locality=self.locality,
            subdivision=self.subdivision,
            postal_code=self.postal_code,
            country_code=(self.country_code or default_country).upper(),
        )


class ShippingRequest(BaseModel):
    cart_items: list[CartItemIn] = Field(
        ..., validation_alias=AliasChoices("cartItems", "cart_items"),
    )
    shipping_address: ShippingAddressIn = Field(
        ..., validation_alias=AliasChoices("shippingAddress", "shipping_address"),
    )


# ── Response ─────────────────────────────────────────────
class ShippingOptionOut(BaseModel):
    id: str
    title: str
    price: int
    code: str
    source: str
    estimated_delivery: Optional[str] = Field(None, alias="estimatedDelivery")

    model_config = {"populate_by_name": True}


class ShippingResponse(BaseModel):
    success: bool
    shipping_rates: dict[str, list[ShippingOptionOut]] = Field(
        default_factory=dict, alias="shippingRates",
    )
    errors: Optional[dict[str, str]] = None

    model_config = {"populate_by_name": True}
