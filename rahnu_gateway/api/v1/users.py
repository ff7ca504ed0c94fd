"""User accounts for officers, admins and customers"""

from fastapi import APIRouter, Depends

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import UserCreate, UserResponse
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(body: UserCreate, services: Services = Depends(get_services)):
    return services.users.create_user(body.model_dump())


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, services: Services = Depends(get_services)):
    return services.users.get_user(user_id)
