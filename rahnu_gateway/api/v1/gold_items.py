"""Pledged gold items"""

from typing import List

from fastapi import APIRouter, Depends

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import GoldItemCreate, GoldItemResponse
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.get("/gold-items", response_model=List[GoldItemResponse])
def list_gold_items(services: Services = Depends(get_services)):
    return services.gold_items.list_gold_items()


@router.post("/gold-items", response_model=GoldItemResponse, status_code=201)
def create_gold_item(body: GoldItemCreate, services: Services = Depends(get_services)):
    return services.gold_items.create_gold_item(body.model_dump())


@router.get("/gold-items/{item_id}", response_model=GoldItemResponse)
def get_gold_item(item_id: int, services: Services = Depends(get_services)):
    return services.gold_items.get_gold_item(item_id)
