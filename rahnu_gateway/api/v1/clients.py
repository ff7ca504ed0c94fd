"""Client (pledger) registry"""

from typing import List

from fastapi import APIRouter, Depends

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import ClientCreate, ClientResponse, ClientUpdate, LoanResponse
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.get("/clients", response_model=List[ClientResponse])
def list_clients(services: Services = Depends(get_services)):
    return services.clients.list_clients()


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(body: ClientCreate, services: Services = Depends(get_services)):
    return services.clients.create_client(body.model_dump())


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, services: Services = Depends(get_services)):
    return services.clients.get_client(client_id)


@router.patch("/clients/{client_id}", response_model=ClientResponse)
def update_client(client_id: int, body: ClientUpdate, services: Services = Depends(get_services)):
    return services.clients.update_client(client_id, body.model_dump(exclude_unset=True))


@router.get("/clients/{client_id}/loans", response_model=List[LoanResponse])
def list_client_loans(client_id: int, services: Services = Depends(get_services)):
    return services.loans.list_loans_by_client(client_id)
