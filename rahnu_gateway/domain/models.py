"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class UserRole(str, Enum):
    ADMIN = "admin"
    LOAN_OFFICER = "loan_officer"
    CUSTOMER = "customer"


class LoanStatus(str, Enum):
    """Loan lifecycle states, see domain.lifecycle for allowed transitions"""

    PENDING = "pending"
    VERIFICATION = "verification"
    DOCUMENTATION = "documentation"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUALLY = "biannually"
    ANNUALLY = "annually"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


class ReminderChannel(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    WHATSAPP = "whatsapp"


# Recognized gold denominations in karat
VALID_PURITIES = (24, 22, 18, 14)


@dataclass
class User:
    """Back-office or customer account; role is an opaque attribute"""

    id: int
    username: str
    password_hash: str
    full_name: str
    email: str
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    created_at: Optional[datetime] = None


@dataclass
class Client:
    """Financing applicant onboarded with KYC details"""

    id: int
    full_name: str
    email: str
    phone: str
    identification_number: str
    identification_type: str  # national_id, passport, ...
    address: Optional[str] = None
    nationality: str = "Malaysian"
    state_of_residence: Optional[str] = None
    religion: Optional[str] = None
    race: Optional[str] = None
    regulatory_consent: bool = False
    created_at: Optional[datetime] = None


@dataclass
class GoldItem:
    """One physical unit of pledged gold collateral"""

    id: int
    type: str  # jewelry, coin, bar, ...
    weight: Decimal  # grams
    purity: int  # karat
    estimated_value: Decimal
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Loan:
    """Gold-backed financing contract"""

    id: int
    client_id: int
    contract_number: str
    total_gold_value: Decimal
    financing_amount: Decimal
    financing_ratio: Decimal
    profit_rate: Decimal  # Islamic profit, percent per annum
    term_months: int
    payment_frequency: PaymentFrequency
    created_by: int
    gold_item_ids: List[int] = field(default_factory=list)
    status: LoanStatus = LoanStatus.PENDING
    shariah_contract_type: str = "murabaha"
    assigned_to: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    aqad_date: Optional[datetime] = None  # contract execution date
    regulator_approval_status: str = "pending"
    regulator_reference_number: Optional[str] = None
    stamp_duty: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Payment:
    """Single installment in a loan's repayment schedule"""

    id: int
    loan_id: int
    amount: Decimal
    due_date: date
    status: PaymentStatus = PaymentStatus.PENDING
    paid_date: Optional[datetime] = None
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_overdue(self, today: date) -> bool:
        """Overdue is derived on read, never required to be stored"""
        return self.status != PaymentStatus.PAID and self.due_date < today

    def effective_status(self, today: date) -> PaymentStatus:
        if self.is_overdue(today):
            return PaymentStatus.OVERDUE
        return self.status


@dataclass
class Document:
    """Paperwork attached to exactly one loan"""

    id: int
    loan_id: int
    name: str
    type: str  # contract, identification, gold_appraisal, ...
    status: DocumentStatus = DocumentStatus.PENDING
    document_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    expiry_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass
class Notification:
    id: int
    user_id: int
    title: str
    message: str
    type: str  # system, payment, contract, ...
    status: NotificationStatus = NotificationStatus.UNREAD
    created_at: Optional[datetime] = None


@dataclass
class GoldPriceQuote:
    """Spot price observation; the series is append-only"""

    id: int
    price_per_ounce: Decimal
    date: datetime
    created_at: Optional[datetime] = None


@dataclass
class Valuation:
    """Output of the gold valuation calculator"""

    gold_value: Decimal
    financing_amount: Decimal


@dataclass
class ScheduledInstallment:
    """Installment produced by schedule generation, before persistence"""

    due_date: date
    amount: Decimal


@dataclass
class Reminder:
    """Outbound payment reminder handed to the messaging gateway"""

    payment_id: int
    loan_id: int
    contract_number: str
    channel: ReminderChannel
    message: str
    recipient: str
    amount: Decimal
    due_date: date
