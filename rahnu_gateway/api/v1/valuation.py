"""POST /v1/valuation - Gold collateral calculator"""

from fastapi import APIRouter, Depends

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import ValuationRequest, ValuationResponse
from rahnu_gateway.domain.valuation import quantize_money
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.post("/valuation", response_model=ValuationResponse)
def value_gold(body: ValuationRequest, services: Services = Depends(get_services)):
    """
    Value pledged gold at the given price, or at the current quote.

    Amounts are rounded to the sen for display only.
    """
    price = body.price_per_ounce
    if price is None:
        price = services.gold_prices.current_price().price_per_ounce
    valuation = services.gold_prices.value_gold(body.weight, body.purity, body.financing_ratio, price)
    return ValuationResponse(
        weight=body.weight,
        purity=body.purity,
        price_per_ounce=price,
        financing_ratio=body.financing_ratio,
        gold_value=quantize_money(valuation.gold_value),
        financing_amount=quantize_money(valuation.financing_amount),
    )
