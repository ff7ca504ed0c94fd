"""Gold spot price series"""

from typing import List

from fastapi import APIRouter, Depends, Query

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import GoldPriceCreate, GoldPriceResponse
from rahnu_gateway.config import settings
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.get("/gold-price", response_model=GoldPriceResponse)
def current_gold_price(services: Services = Depends(get_services)):
    return services.gold_prices.current_price()


@router.get("/gold-price/history", response_model=List[GoldPriceResponse])
def gold_price_history(
    days: int = Query(settings.default_price_history_days, ge=0),
    services: Services = Depends(get_services),
):
    return services.gold_prices.price_history(days)


@router.post("/gold-price", response_model=GoldPriceResponse, status_code=201)
def record_gold_price(body: GoldPriceCreate, services: Services = Depends(get_services)):
    return services.gold_prices.record_price(body.model_dump(exclude_none=True))
