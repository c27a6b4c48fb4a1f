"""Shipping rate API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shipquote.database import get_session_factory
from shipquote.schemas import ShippingRequest, ShippingResponse
from shipquote.services.errors import DataStoreUnavailable
from shipquote.services.shipping import ShippingService

router = APIRouter(prefix="/shipping", tags=["shipping"])


def get_shipping_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ShippingService:
    return ShippingService(session_factory)


@router.post("/calculate", response_model=ShippingResponse, response_model_exclude_none=True)
async def calculate_shipping(
    body: ShippingRequest,
    service: ShippingService = Depends(get_shipping_service),
):
    if not body.cart_items:
        raise HTTPException(400, "Cart is empty")

    lines = [item.to_line() for item in body.cart_items]
    address = body.shipping_address.to_address(service.settings.default_country_code)
    try:
        result = await service.calculate(lines, address)
    except DataStoreUnavailable as e:
        raise HTTPException(503, str(e))

    return ShippingResponse.model_validate(result.to_dict())
