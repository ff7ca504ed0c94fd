"""Repayment schedule generation for activated loans"""

import math
from datetime import date
from decimal import Decimal
from typing import Dict, List

from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.models import PaymentFrequency, ScheduledInstallment
from rahnu_gateway.domain.valuation import SEN, quantize_money, to_decimal
from rahnu_gateway.utils.date_utils import add_months

FREQUENCY_INTERVAL_MONTHS: Dict[PaymentFrequency, int] = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
    PaymentFrequency.BIANNUALLY: 6,
    PaymentFrequency.ANNUALLY: 12,
}


def installment_count(term_months: int, payment_frequency: PaymentFrequency) -> int:
    """Number of installments covering the term; a partial period counts as one"""
    interval = FREQUENCY_INTERVAL_MONTHS[PaymentFrequency(payment_frequency)]
    return max(1, math.ceil(term_months / interval))


def total_payable(financing_amount: Decimal, profit_rate: Decimal, term_months: int) -> Decimal:
    """
    Murabaha selling price: cost plus a profit fixed upfront.

    profit_rate is a percentage per annum applied flat over the term.
    """
    profit = financing_amount * (profit_rate / Decimal(100)) * (Decimal(term_months) / Decimal(12))
    return quantize_money(financing_amount + profit)


def generate_payment_schedule(
    financing_amount: Decimal,
    profit_rate: Decimal,
    term_months: int,
    payment_frequency: PaymentFrequency,
    start_date: date,
) -> List[ScheduledInstallment]:
    """
    Split the total payable into equal installments at fixed month intervals.

    Requirements:
    - One installment per frequency interval within the term
    - First due date is one interval after start_date
    - Last installment absorbs the rounding remainder so the sum is exact

    Example:
        RM 1000.00, 0% profit, 3 months monthly → [333.33, 333.33, 333.34]
    """
    financing = to_decimal(financing_amount, "financing_amount")
    rate = to_decimal(profit_rate, "profit_rate")
    if financing <= 0:
        raise ValidationError("financing_amount must be greater than zero", ["financing_amount"])
    if rate < 0:
        raise ValidationError("profit_rate must not be negative", ["profit_rate"])
    if term_months <= 0:
        raise ValidationError("term_months must be greater than zero", ["term_months"])

    frequency = PaymentFrequency(payment_frequency)
    interval = FREQUENCY_INTERVAL_MONTHS[frequency]
    count = installment_count(term_months, frequency)
    total = total_payable(financing, rate, term_months)

    # Work in whole sen so the split is exact
    total_sen = int(total / SEN)
    base_sen = total_sen // count
    remainder_sen = total_sen % count

    installments = []
    for i in range(count):
        amount_sen = base_sen + (remainder_sen if i == count - 1 else 0)
        installments.append(
            ScheduledInstallment(
                due_date=add_months(start_date, (i + 1) * interval),
                amount=Decimal(amount_sen) * SEN,
            )
        )

    return installments
