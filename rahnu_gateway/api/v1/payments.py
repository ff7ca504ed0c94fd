"""Repayment tracking and reminders"""

from datetime import date
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from rahnu_gateway.api.dependencies import get_messaging_client, get_services
from rahnu_gateway.api.v1.schemas import (
    PaymentCreate,
    PaymentResponse,
    PaymentStatusUpdate,
    PaymentSummaryResponse,
    ReminderRequest,
    ReminderResponse,
)
from rahnu_gateway.config import settings
from rahnu_gateway.domain.models import Payment
from rahnu_gateway.infrastructure.clients.messaging import MessagingClient
from rahnu_gateway.services.container import Services

router = APIRouter()


def to_response(payment: Payment, today: date) -> PaymentResponse:
    """Attach the overdue state derived at read time"""
    return PaymentResponse(
        id=payment.id,
        loan_id=payment.loan_id,
        amount=payment.amount,
        due_date=payment.due_date,
        paid_date=payment.paid_date,
        status=payment.status,
        effective_status=payment.effective_status(today),
        is_overdue=payment.is_overdue(today),
        payment_method=payment.payment_method,
        reference_number=payment.reference_number,
        created_at=payment.created_at,
    )


@router.get("/loans/{loan_id}/payments", response_model=List[PaymentResponse])
def list_loan_payments(loan_id: int, services: Services = Depends(get_services)):
    today = services.payments.today()
    return [to_response(p, today) for p in services.payments.list_payments_by_loan(loan_id)]


@router.get("/payments/upcoming", response_model=List[PaymentResponse])
def list_upcoming_payments(
    days: int = Query(settings.default_upcoming_days, ge=0),
    services: Services = Depends(get_services),
):
    today = services.payments.today()
    return [to_response(p, today) for p in services.payments.list_upcoming_payments(days)]


@router.get("/payments/overdue", response_model=List[PaymentResponse])
def list_overdue_payments(services: Services = Depends(get_services)):
    today = services.payments.today()
    return [to_response(p, today) for p in services.payments.list_overdue_payments()]


@router.post("/payments/overdue/mark", response_model=List[PaymentResponse])
def mark_overdue_payments(services: Services = Depends(get_services)):
    """Persist overdue status for pending installments past due"""
    today = services.payments.today()
    return [to_response(p, today) for p in services.payments.mark_overdue_payments()]


@router.get("/payments/summary", response_model=PaymentSummaryResponse)
def summarize_payments(
    days: int = Query(settings.default_upcoming_days, ge=0),
    services: Services = Depends(get_services),
):
    return services.payments.summarize_payments(days)


@router.post("/payments", response_model=PaymentResponse, status_code=201)
def create_payment(body: PaymentCreate, services: Services = Depends(get_services)):
    payment = services.payments.create_payment(body.model_dump())
    return to_response(payment, services.payments.today())


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, services: Services = Depends(get_services)):
    return to_response(services.payments.get_payment(payment_id), services.payments.today())


@router.patch("/payments/{payment_id}/status", response_model=PaymentResponse)
def update_payment_status(
    payment_id: int,
    body: PaymentStatusUpdate,
    services: Services = Depends(get_services),
):
    payment = services.payments.update_payment_status(payment_id, body.status, body.paid_date)
    return to_response(payment, services.payments.today())


@router.post("/payments/{payment_id}/reminder", response_model=ReminderResponse, status_code=202)
def send_payment_reminder(
    payment_id: int,
    body: ReminderRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
    messaging_client: MessagingClient = Depends(get_messaging_client),
):
    """
    Queue a reminder for delivery.

    Delivery runs after the response is sent; gateway failures are logged
    and never change the response.
    """
    reminder = services.payments.send_payment_reminder(payment_id, body.method, body.message)
    background_tasks.add_task(messaging_client.dispatch, reminder)
    return ReminderResponse(payment_id=reminder.payment_id, channel=reminder.channel, recipient=reminder.recipient)
