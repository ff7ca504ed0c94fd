"""Loan origination and status lifecycle"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from rahnu_gateway.api.dependencies import get_request_id, get_services
from rahnu_gateway.api.v1.schemas import LoanCreate, LoanResponse, LoanStatusUpdate, LoanUpdate
from rahnu_gateway.domain.models import LoanStatus
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(status: Optional[LoanStatus] = None, services: Services = Depends(get_services)):
    return services.loans.list_loans(status)


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(body: LoanCreate, services: Services = Depends(get_services)):
    """
    Originate a loan in pending status.

    total_gold_value and financing_amount default to the estimated value of the
    pledged items and that value times the ratio; supplied values must agree with
    financing_ratio.
    """
    return services.loans.create_loan(body.model_dump(exclude_none=True))


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: int, services: Services = Depends(get_services)):
    return services.loans.get_loan(loan_id)


@router.patch("/loans/{loan_id}", response_model=LoanResponse)
def update_loan(loan_id: int, body: LoanUpdate, services: Services = Depends(get_services)):
    return services.loans.update_loan(loan_id, body.model_dump(exclude_unset=True))


@router.patch("/loans/{loan_id}/status", response_model=LoanResponse)
def update_loan_status(
    loan_id: int,
    body: LoanStatusUpdate,
    request: Request,
    services: Services = Depends(get_services),
):
    """
    Move a loan through its lifecycle.

    Activation generates the repayment schedule in the same unit of work.
    """
    return services.loans.update_loan_status(loan_id, body.status, request_id=get_request_id(request))
