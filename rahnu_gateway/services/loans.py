"""Loan origination and lifecycle"""

import logging
import secrets
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rahnu_gateway.domain.exceptions import ConflictError, InvalidTransitionError, ValidationError
from rahnu_gateway.domain.lifecycle import INITIAL_STATUS, ensure_transition
from rahnu_gateway.domain.models import Loan, LoanStatus, PaymentFrequency, PaymentStatus
from rahnu_gateway.domain.schedule import generate_payment_schedule
from rahnu_gateway.domain.valuation import (
    ensure_financing_consistent,
    quantize_money,
    to_decimal,
    validate_financing_ratio,
)
from rahnu_gateway.infrastructure.observability.logging import log_loan_transition
from rahnu_gateway.infrastructure.observability.metrics import record_loan_created, record_transition
from rahnu_gateway.services.common import Service, parse_enum, reject_nulls
from rahnu_gateway.services.notifications import NotificationService
from rahnu_gateway.utils.date_utils import add_months

logger = logging.getLogger(__name__)

# Changed only through update_loan_status
LIFECYCLE_FIELDS = frozenset({"status", "start_date", "end_date"})
VALUATION_FIELDS = ("total_gold_value", "financing_amount", "financing_ratio")
# Editable only while the application is under review
TERM_FIELDS = frozenset(
    {"gold_item_ids", "term_months", "profit_rate", "payment_frequency"} | set(VALUATION_FIELDS)
)
AMENDABLE_STATUSES = frozenset({LoanStatus.PENDING, LoanStatus.VERIFICATION, LoanStatus.DOCUMENTATION})
OPTIONAL_LOAN_FIELDS = frozenset({"assigned_to", "aqad_date", "regulator_reference_number", "stamp_duty"})


def generate_contract_number(now: datetime) -> str:
    return f"GF-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


class LoanService(Service):
    """Owns the loan status state machine and repayment schedule creation"""

    def get_loan(self, loan_id: int) -> Loan:
        return self.storage.loans.get(loan_id)

    def get_loan_by_contract_number(self, contract_number: str) -> Optional[Loan]:
        return self.storage.loans.find_one(contract_number=contract_number)

    def list_loans(self, status: Optional[str] = None) -> List[Loan]:
        if status is None:
            return self.storage.loans.list()
        return self.storage.loans.list(status=parse_enum(LoanStatus, status, "status"))

    def list_loans_by_client(self, client_id: int) -> List[Loan]:
        self.storage.clients.get(client_id)
        return self.storage.loans.list(client_id=client_id)

    def _check_gold_items(self, gold_item_ids: Any) -> List[int]:
        if not gold_item_ids:
            raise ValidationError("At least one gold item is required", ["gold_item_ids"])
        ids = [int(item_id) for item_id in gold_item_ids]
        if len(set(ids)) != len(ids):
            raise ValidationError("gold_item_ids must not repeat", ["gold_item_ids"])
        for item_id in ids:
            self.storage.gold_items.get(item_id)
        return ids

    def _check_terms(self, fields: Dict[str, Any]) -> None:
        if "term_months" in fields:
            if int(fields["term_months"]) <= 0:
                raise ValidationError("term_months must be greater than zero", ["term_months"])
            fields["term_months"] = int(fields["term_months"])
        if "profit_rate" in fields:
            rate = to_decimal(fields["profit_rate"], "profit_rate")
            if rate < 0:
                raise ValidationError("profit_rate must not be negative", ["profit_rate"])
            fields["profit_rate"] = rate
        if "payment_frequency" in fields:
            fields["payment_frequency"] = parse_enum(
                PaymentFrequency, fields["payment_frequency"], "payment_frequency"
            )
        if fields.get("stamp_duty") is not None:
            duty = to_decimal(fields["stamp_duty"], "stamp_duty")
            if duty < 0:
                raise ValidationError("stamp_duty must not be negative", ["stamp_duty"])
            fields["stamp_duty"] = quantize_money(duty)

    def _check_people(self, fields: Dict[str, Any]) -> None:
        if "created_by" in fields:
            self.storage.users.get(fields["created_by"])
        if fields.get("assigned_to") is not None:
            self.storage.users.get(fields["assigned_to"])

    def create_loan(self, fields: Dict[str, Any]) -> Loan:
        """
        Submit a financing application.

        total_gold_value defaults to the sum of the items' estimated values and
        financing_amount to total_gold_value * financing_ratio. Supplied
        amounts must agree with the ratio to within one sen.

        Raises:
            NotFoundError: Client, user or gold item does not exist
            ValidationError: Constraint violated
            ConflictError: Contract number already in use
        """
        fields = dict(fields)
        status = fields.pop("status", INITIAL_STATUS)
        if parse_enum(LoanStatus, status, "status") != INITIAL_STATUS:
            raise ValidationError("New loans always start as pending", ["status"])
        forbidden = sorted(LIFECYCLE_FIELDS & fields.keys())
        if forbidden:
            raise ValidationError(f"Fields are set by the loan lifecycle: {', '.join(forbidden)}", forbidden)
        for required in ("client_id", "created_by", "financing_ratio", "term_months", "profit_rate", "payment_frequency"):
            if fields.get(required) is None:
                raise ValidationError(f"{required} is required", [required])

        with self.storage.transaction():
            self.storage.clients.get(fields["client_id"])
            self._check_people(fields)
            fields["gold_item_ids"] = self._check_gold_items(fields.get("gold_item_ids"))
            self._check_terms(fields)

            ratio = validate_financing_ratio(fields["financing_ratio"])
            if fields.get("total_gold_value") is None:
                items = [self.storage.gold_items.get(item_id) for item_id in fields["gold_item_ids"]]
                total = sum((item.estimated_value for item in items), Decimal("0"))
            else:
                total = to_decimal(fields["total_gold_value"], "total_gold_value")
            total = quantize_money(total)
            if fields.get("financing_amount") is None:
                financing = quantize_money(total * ratio)
            else:
                financing = to_decimal(fields["financing_amount"], "financing_amount")
            ensure_financing_consistent(total, ratio, financing)
            fields.update(
                total_gold_value=total,
                financing_amount=quantize_money(financing),
                financing_ratio=ratio,
                status=INITIAL_STATUS,
            )

            if not fields.get("contract_number"):
                fields["contract_number"] = generate_contract_number(self.now())
            if self.storage.loans.find_one(contract_number=fields["contract_number"]) is not None:
                raise ConflictError(f"Contract number '{fields['contract_number']}' already exists")

            loan = self.storage.loans.create(fields)

        record_loan_created(loan.financing_amount)
        logger.info(
            "Loan application submitted",
            extra={"loan_id": loan.id, "contract_number": loan.contract_number, "client_id": loan.client_id},
        )
        return loan

    def update_loan(self, loan_id: int, fields: Dict[str, Any]) -> Loan:
        """
        Partially update loan terms.

        The financing invariant is re-checked whenever a valuation field
        changes; financing_amount is recomputed when only the value or ratio
        is supplied.

        Financial terms can only change before the loan is approved.

        Raises:
            NotFoundError: Loan or referenced entity does not exist
            ValidationError: Constraint violated or required field set to null
            InvalidTransitionError: Terms changed after approval
        """
        fields = dict(fields)
        if not fields:
            raise ValidationError("No fields to update")
        forbidden = sorted(LIFECYCLE_FIELDS & fields.keys())
        if forbidden:
            raise ValidationError(
                f"Use the status endpoint to change: {', '.join(forbidden)}", forbidden
            )
        reject_nulls(fields, OPTIONAL_LOAN_FIELDS)

        with self.storage.transaction():
            loan = self.storage.loans.get(loan_id)
            if loan.status not in AMENDABLE_STATUSES and TERM_FIELDS & fields.keys():
                raise InvalidTransitionError("Loan", loan.status.value, "amended")
            if "client_id" in fields:
                self.storage.clients.get(fields["client_id"])
            self._check_people(fields)
            if "gold_item_ids" in fields:
                fields["gold_item_ids"] = self._check_gold_items(fields["gold_item_ids"])
            self._check_terms(fields)
            if "contract_number" in fields and fields["contract_number"] != loan.contract_number:
                if self.storage.loans.find_one(contract_number=fields["contract_number"]) is not None:
                    raise ConflictError(f"Contract number '{fields['contract_number']}' already exists")

            if any(name in fields for name in VALUATION_FIELDS):
                ratio = validate_financing_ratio(fields.get("financing_ratio", loan.financing_ratio))
                total = quantize_money(
                    to_decimal(fields.get("total_gold_value", loan.total_gold_value), "total_gold_value")
                )
                if "financing_amount" in fields:
                    financing = to_decimal(fields["financing_amount"], "financing_amount")
                else:
                    financing = quantize_money(total * ratio)
                ensure_financing_consistent(total, ratio, financing)
                fields.update(
                    total_gold_value=total,
                    financing_amount=quantize_money(financing),
                    financing_ratio=ratio,
                )

            return self.storage.loans.update(loan_id, fields)

    def update_loan_status(self, loan_id: int, target_status: Any, request_id: Optional[str] = None) -> Loan:
        """
        Move a loan along the lifecycle.

        Activation stamps start/end dates and creates the repayment schedule
        in the same unit of work.

        Raises:
            NotFoundError: Loan does not exist
            InvalidTransitionError: Target not reachable from the current status
        """
        target = parse_enum(LoanStatus, target_status, "status")

        with self.storage.transaction():
            loan = self.storage.loans.get(loan_id)
            previous = loan.status
            ensure_transition(previous, target)

            changes: Dict[str, Any] = {"status": target}
            if target == LoanStatus.ACTIVE:
                changes.update(self._activate(loan))

            updated = self.storage.loans.update(loan_id, changes)
            NotificationService(self.storage, self.clock).notify_loan_owner(
                updated,
                title=f"Loan {updated.contract_number} {target.value}",
                message=f"Loan {updated.contract_number} moved from {previous.value} to {target.value}.",
                type="loan",
            )

        record_transition(previous.value, target.value)
        log_loan_transition(updated.id, updated.contract_number, previous.value, target.value, request_id)
        return updated

    def _activate(self, loan: Loan) -> Dict[str, Any]:
        if self.storage.payments.list(loan_id=loan.id):
            raise ConflictError(f"Loan {loan.id} already has a repayment schedule")

        start = self.now()
        schedule = generate_payment_schedule(
            loan.financing_amount,
            loan.profit_rate,
            loan.term_months,
            loan.payment_frequency,
            start.date(),
        )
        for installment in schedule:
            self.storage.payments.create(
                {
                    "loan_id": loan.id,
                    "amount": installment.amount,
                    "due_date": installment.due_date,
                    "status": PaymentStatus.PENDING,
                }
            )

        return {"start_date": start, "end_date": add_months(start, loan.term_months)}

