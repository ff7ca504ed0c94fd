"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from rahnu_gateway.config import settings
from rahnu_gateway.domain.models import (
    DocumentStatus,
    LoanStatus,
    NotificationStatus,
    PaymentFrequency,
    PaymentStatus,
    ReminderChannel,
    UserRole,
)


def _check_policy_ratio(value: Decimal) -> Decimal:
    if value not in settings.allowed_financing_ratios:
        allowed = ", ".join(str(r) for r in settings.allowed_financing_ratios)
        raise ValueError(f"financing_ratio must be one of {allowed}")
    return value


# Business policy restricts ratios to a configured discrete set
PolicyRatio = Annotated[Decimal, AfterValidator(_check_policy_ratio)]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Users


class UserCreate(BaseModel):
    """Request body for POST /v1/users"""

    username: str = Field(..., min_length=3, max_length=80)
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER


class UserResponse(ORMModel):
    """User without credentials"""

    id: int
    username: str
    full_name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime


# Clients


class ClientCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: Optional[str] = None
    identification_number: str = Field(..., min_length=1)
    identification_type: str = Field(..., min_length=1, description="national_id, passport, ...")
    nationality: str = "Malaysian"
    state_of_residence: Optional[str] = None
    religion: Optional[str] = None
    race: Optional[str] = None
    regulatory_consent: bool = False


class ClientUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    identification_number: Optional[str] = Field(None, min_length=1)
    identification_type: Optional[str] = Field(None, min_length=1)
    nationality: Optional[str] = None
    state_of_residence: Optional[str] = None
    religion: Optional[str] = None
    race: Optional[str] = None
    regulatory_consent: Optional[bool] = None


class ClientResponse(ORMModel):
    id: int
    full_name: str
    email: str
    phone: str
    address: Optional[str] = None
    identification_number: str
    identification_type: str
    nationality: str
    state_of_residence: Optional[str] = None
    religion: Optional[str] = None
    race: Optional[str] = None
    regulatory_consent: bool
    created_at: datetime


# Gold items


class GoldItemCreate(BaseModel):
    type: str = Field(..., min_length=1, description="jewelry, coin, bar, ...")
    weight: Decimal = Field(..., gt=0, description="Weight in grams")
    purity: int = Field(..., description="Karat: 24, 22, 18 or 14")
    description: Optional[str] = None
    estimated_value: Decimal = Field(..., ge=0)


class GoldItemResponse(ORMModel):
    id: int
    type: str
    weight: Decimal
    purity: int
    description: Optional[str] = None
    estimated_value: Decimal
    created_at: datetime


# Loans


class LoanCreate(BaseModel):
    """Request body for POST /v1/loans"""

    client_id: int
    gold_item_ids: List[int] = Field(..., min_length=1)
    financing_ratio: PolicyRatio
    profit_rate: Decimal = Field(..., ge=0, description="Islamic profit rate, percent per annum")
    term_months: int = Field(..., gt=0)
    payment_frequency: PaymentFrequency
    created_by: int
    contract_number: Optional[str] = None
    total_gold_value: Optional[Decimal] = Field(None, gt=0)
    financing_amount: Optional[Decimal] = Field(None, gt=0)
    shariah_contract_type: str = "murabaha"
    assigned_to: Optional[int] = None
    aqad_date: Optional[datetime] = None
    regulator_approval_status: str = "pending"
    regulator_reference_number: Optional[str] = None
    stamp_duty: Optional[Decimal] = Field(None, ge=0)


class LoanUpdate(BaseModel):
    """Request body for PATCH /v1/loans/{id}; status has its own endpoint"""

    model_config = ConfigDict(extra="forbid")

    client_id: Optional[int] = None
    contract_number: Optional[str] = None
    gold_item_ids: Optional[List[int]] = Field(None, min_length=1)
    total_gold_value: Optional[Decimal] = Field(None, gt=0)
    financing_amount: Optional[Decimal] = Field(None, gt=0)
    financing_ratio: Optional[PolicyRatio] = None
    profit_rate: Optional[Decimal] = Field(None, ge=0)
    term_months: Optional[int] = Field(None, gt=0)
    payment_frequency: Optional[PaymentFrequency] = None
    shariah_contract_type: Optional[str] = None
    assigned_to: Optional[int] = None
    aqad_date: Optional[datetime] = None
    regulator_approval_status: Optional[str] = None
    regulator_reference_number: Optional[str] = None
    stamp_duty: Optional[Decimal] = Field(None, ge=0)


class LoanStatusUpdate(BaseModel):
    status: LoanStatus


class LoanResponse(ORMModel):
    id: int
    client_id: int
    contract_number: str
    gold_item_ids: List[int]
    total_gold_value: Decimal
    financing_amount: Decimal
    financing_ratio: Decimal
    status: LoanStatus
    profit_rate: Decimal
    term_months: int
    payment_frequency: PaymentFrequency
    shariah_contract_type: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    aqad_date: Optional[datetime] = None
    regulator_approval_status: str
    regulator_reference_number: Optional[str] = None
    stamp_duty: Optional[Decimal] = None
    created_by: int
    assigned_to: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# Payments


class PaymentCreate(BaseModel):
    loan_id: int
    amount: Decimal = Field(..., gt=0)
    due_date: date
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    paid_date: Optional[datetime] = None


class PaymentResponse(ORMModel):
    id: int
    loan_id: int
    amount: Decimal
    due_date: date
    paid_date: Optional[datetime] = None
    status: PaymentStatus
    effective_status: PaymentStatus
    is_overdue: bool
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    created_at: datetime


class ReminderRequest(BaseModel):
    """Request body for POST /v1/payments/{id}/reminder"""

    method: ReminderChannel
    message: str = Field(..., min_length=10)


class ReminderResponse(BaseModel):
    payment_id: int
    channel: ReminderChannel
    recipient: str
    status: str = "queued"


class PaymentBucket(BaseModel):
    count: int
    total: Decimal


class PaymentSummaryResponse(BaseModel):
    upcoming: PaymentBucket
    collected: PaymentBucket
    overdue: PaymentBucket


# Documents


class DocumentCreate(BaseModel):
    loan_id: int
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="contract, identification, gold_appraisal, ...")
    status: DocumentStatus = DocumentStatus.PENDING
    document_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    expiry_date: Optional[datetime] = None


class DocumentGenerate(BaseModel):
    loan_id: int
    template_type: str = Field(..., min_length=1)


class DocumentStatusUpdate(BaseModel):
    status: DocumentStatus


class DocumentResponse(ORMModel):
    id: int
    loan_id: int
    name: str
    type: str
    status: DocumentStatus
    document_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    expiry_date: Optional[datetime] = None
    created_at: datetime


# Notifications


class NotificationCreate(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="system, payment, contract, ...")


class NotificationResponse(ORMModel):
    id: int
    user_id: int
    title: str
    message: str
    type: str
    status: NotificationStatus
    created_at: datetime


# Gold price and valuation


class GoldPriceCreate(BaseModel):
    price_per_ounce: Decimal = Field(..., gt=0)
    date: Optional[datetime] = None


class GoldPriceResponse(ORMModel):
    id: int
    price_per_ounce: Decimal
    date: datetime
    created_at: datetime


class ValuationRequest(BaseModel):
    """Request body for POST /v1/valuation"""

    weight: Decimal = Field(..., gt=0, description="Weight in grams")
    purity: int
    financing_ratio: PolicyRatio
    price_per_ounce: Optional[Decimal] = Field(None, gt=0, description="Defaults to the current quote")


class ValuationResponse(BaseModel):
    weight: Decimal
    purity: int
    price_per_ounce: Decimal
    financing_ratio: Decimal
    gold_value: Decimal
    financing_amount: Decimal


class ErrorResponse(BaseModel):
    detail: str
    error: str
    fields: Optional[List[str]] = None
