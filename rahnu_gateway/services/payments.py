"""Repayment tracking, overdue detection and reminders"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rahnu_gateway.domain.exceptions import AlreadyPaidError, InvalidTransitionError, ValidationError
from rahnu_gateway.domain.models import Payment, PaymentStatus, Reminder, ReminderChannel
from rahnu_gateway.domain.valuation import quantize_money, to_decimal
from rahnu_gateway.infrastructure.observability.logging import log_payment_recorded
from rahnu_gateway.infrastructure.observability.metrics import payments_recorded_counter
from rahnu_gateway.services.common import Service, parse_enum
from rahnu_gateway.services.notifications import NotificationService
from rahnu_gateway.utils.date_utils import ensure_utc

logger = logging.getLogger(__name__)

MIN_REMINDER_LENGTH = 10
UNPAID = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)


def _by_due_date(payments: List[Payment]) -> List[Payment]:
    return sorted(payments, key=lambda p: (p.due_date, p.id))


class PaymentService(Service):
    def get_payment(self, payment_id: int) -> Payment:
        return self.storage.payments.get(payment_id)

    def list_payments_by_loan(self, loan_id: int) -> List[Payment]:
        self.storage.loans.get(loan_id)
        return _by_due_date(self.storage.payments.list(loan_id=loan_id))

    def create_payment(self, fields: Dict[str, Any]) -> Payment:
        fields = dict(fields)
        amount = to_decimal(fields.get("amount"), "amount")
        if amount <= 0:
            raise ValidationError("amount must be greater than zero", ["amount"])
        if fields.get("due_date") is None:
            raise ValidationError("due_date is required", ["due_date"])
        status = parse_enum(PaymentStatus, fields.get("status", PaymentStatus.PENDING), "status")
        if status != PaymentStatus.PENDING:
            raise ValidationError("New payments start as pending; record them to mark paid", ["status"])
        fields.update(amount=quantize_money(amount), status=status)

        with self.storage.transaction():
            self.storage.loans.get(fields.get("loan_id"))
            return self.storage.payments.create(fields)

    def record_payment(
        self,
        payment_id: int,
        paid_date: Optional[datetime] = None,
        payment_method: Optional[str] = None,
        reference_number: Optional[str] = None,
    ) -> Payment:
        """
        Mark an installment as paid.

        paid_date defaults to now. Recording twice is rejected so the first
        paid_date is never overwritten.

        Raises:
            NotFoundError: Payment does not exist
            AlreadyPaidError: Payment was already recorded
        """
        with self.storage.transaction():
            payment = self.storage.payments.get(payment_id)
            if payment.status == PaymentStatus.PAID:
                raise AlreadyPaidError(payment_id)

            changes: Dict[str, Any] = {
                "status": PaymentStatus.PAID,
                "paid_date": ensure_utc(paid_date) if paid_date else self.now(),
            }
            if payment_method is not None:
                changes["payment_method"] = payment_method
            if reference_number is not None:
                changes["reference_number"] = reference_number
            payment = self.storage.payments.update(payment_id, changes)

        payments_recorded_counter.inc()
        log_payment_recorded(payment.id, payment.loan_id, str(payment.amount), payment.paid_date.isoformat())
        return payment

    def update_payment_status(
        self,
        payment_id: int,
        status: Any,
        paid_date: Optional[datetime] = None,
    ) -> Payment:
        """
        Status endpoint semantics.

        - paid: same as record_payment
        - pending: only confirms a pending payment, never un-pays one
        - overdue: persists the derived state for a pending, past-due payment
        """
        target = parse_enum(PaymentStatus, status, "status")
        if target == PaymentStatus.PAID:
            return self.record_payment(payment_id, paid_date)

        with self.storage.transaction():
            payment = self.storage.payments.get(payment_id)
            if payment.status == PaymentStatus.PAID:
                raise InvalidTransitionError("Payment", payment.status.value, target.value)
            if target == PaymentStatus.OVERDUE and not payment.is_overdue(self.today()):
                raise InvalidTransitionError("Payment", payment.status.value, target.value)
            if target == PaymentStatus.PENDING and payment.status == PaymentStatus.OVERDUE:
                raise InvalidTransitionError("Payment", payment.status.value, target.value)
            if payment.status == target:
                return payment
            return self.storage.payments.update(payment_id, {"status": target})

    def list_upcoming_payments(self, within_days: int) -> List[Payment]:
        """Pending payments due between today and today + within_days, inclusive"""
        if within_days < 0:
            raise ValidationError("days must not be negative", ["days"])
        today = self.today()
        horizon = today + timedelta(days=within_days)
        return _by_due_date(
            [
                p
                for p in self.storage.payments.list(status=PaymentStatus.PENDING)
                if today <= p.due_date <= horizon
            ]
        )

    def list_overdue_payments(self) -> List[Payment]:
        """Unpaid payments past their due date, whether or not the sweep has run"""
        today = self.today()
        unpaid: List[Payment] = []
        for status in UNPAID:
            unpaid.extend(self.storage.payments.list(status=status))
        return _by_due_date([p for p in unpaid if p.due_date < today])

    def mark_overdue_payments(self) -> List[Payment]:
        """Persist the overdue status for pending, past-due payments"""
        today = self.today()
        with self.storage.transaction():
            marked = [
                self.storage.payments.update(p.id, {"status": PaymentStatus.OVERDUE})
                for p in self.storage.payments.list(status=PaymentStatus.PENDING)
                if p.due_date < today
            ]
        if marked:
            logger.info("Marked payments overdue", extra={"count": len(marked)})
        return _by_due_date(marked)

    def summarize_payments(self, within_days: int = 7) -> Dict[str, Dict[str, Any]]:
        """Counts and totals for the servicing dashboard"""

        def bucket(payments: List[Payment]) -> Dict[str, Any]:
            return {
                "count": len(payments),
                "total": sum((p.amount for p in payments), Decimal("0.00")),
            }

        return {
            "upcoming": bucket(self.list_upcoming_payments(within_days)),
            "collected": bucket(self.storage.payments.list(status=PaymentStatus.PAID)),
            "overdue": bucket(self.list_overdue_payments()),
        }

    def send_payment_reminder(self, payment_id: int, channel: Any, message: str) -> Reminder:
        """
        Prepare a reminder for an unpaid installment.

        Records a notification for the loan's officer and returns the reminder
        for delivery through the messaging gateway.

        Raises:
            NotFoundError: Payment does not exist
            InvalidTransitionError: Payment is already paid
            ValidationError: Unknown channel or message too short
        """
        channel = parse_enum(ReminderChannel, channel, "method")
        message = (message or "").strip()
        if len(message) < MIN_REMINDER_LENGTH:
            raise ValidationError(
                f"message must be at least {MIN_REMINDER_LENGTH} characters", ["message"]
            )

        with self.storage.transaction():
            payment = self.storage.payments.get(payment_id)
            if payment.status == PaymentStatus.PAID:
                raise InvalidTransitionError("Payment", payment.status.value, "reminded")
            loan = self.storage.loans.get(payment.loan_id)
            client = self.storage.clients.get(loan.client_id)

            recipient = client.email if channel == ReminderChannel.EMAIL else client.phone
            NotificationService(self.storage, self.clock).notify_loan_owner(
                loan,
                title=f"Payment reminder sent for {loan.contract_number}",
                message=(
                    f"{channel.value} reminder sent to {client.full_name} for RM {payment.amount} "
                    f"due {payment.due_date.isoformat()}."
                ),
                type="payment",
            )

        return Reminder(
            payment_id=payment.id,
            loan_id=loan.id,
            contract_number=loan.contract_number,
            channel=channel,
            message=message,
            recipient=recipient,
            amount=payment.amount,
            due_date=payment.due_date,
        )
