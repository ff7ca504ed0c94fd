"""Unit tests for repayment tracking and reminders"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from rahnu_gateway.domain.exceptions import AlreadyPaidError, InvalidTransitionError, NotFoundError, ValidationError
from rahnu_gateway.domain.models import PaymentStatus, ReminderChannel


def _at(year, month, day):
    return datetime(year, month, day, 9, 0, tzinfo=timezone.utc)


def test_record_payment_sets_paid(services, active_loan, clock):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]

    paid = services.payments.record_payment(first.id, payment_method="fpx", reference_number="FPX-001")

    assert paid.status == PaymentStatus.PAID
    assert paid.paid_date == clock()
    assert paid.payment_method == "fpx"
    assert paid.reference_number == "FPX-001"


def test_record_payment_twice_keeps_first_paid_date(services, active_loan, clock):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]
    services.payments.record_payment(first.id)
    original = services.payments.get_payment(first.id).paid_date

    clock.advance(3)
    with pytest.raises(AlreadyPaidError):
        services.payments.record_payment(first.id)

    assert services.payments.get_payment(first.id).paid_date == original


def test_record_payment_unknown_id(services):
    with pytest.raises(NotFoundError):
        services.payments.record_payment(404)


def test_naive_paid_date_is_treated_as_utc(services, active_loan):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]
    paid = services.payments.record_payment(first.id, paid_date=datetime(2025, 2, 14, 12, 0))
    assert paid.paid_date == datetime(2025, 2, 14, 12, 0, tzinfo=timezone.utc)


def test_upcoming_window(services, active_loan, clock):
    clock.set(_at(2025, 2, 10))

    upcoming = services.payments.list_upcoming_payments(7)

    assert [p.due_date for p in upcoming] == [date(2025, 2, 15)]


def test_upcoming_excludes_paid_and_past_due(services, active_loan, clock):
    payments = services.payments.list_payments_by_loan(active_loan.id)
    services.payments.record_payment(payments[1].id)
    clock.set(_at(2025, 2, 20))

    upcoming = services.payments.list_upcoming_payments(60)

    # Feb 15 is past due, Mar 15 is paid
    assert [p.due_date for p in upcoming] == [date(2025, 4, 15)]


def test_upcoming_zero_days_returns_only_today(services, active_loan, clock):
    clock.set(_at(2025, 3, 15))

    upcoming = services.payments.list_upcoming_payments(0)

    assert [p.due_date for p in upcoming] == [date(2025, 3, 15)]


def test_upcoming_rejects_negative_window(services):
    with pytest.raises(ValidationError):
        services.payments.list_upcoming_payments(-1)


def test_overdue_is_derived_without_sweep(services, active_loan, clock):
    payments = services.payments.list_payments_by_loan(active_loan.id)
    services.payments.record_payment(payments[0].id)
    clock.set(_at(2025, 4, 20))

    overdue = services.payments.list_overdue_payments()

    assert [p.due_date for p in overdue] == [date(2025, 3, 15), date(2025, 4, 15)]
    assert all(p.status == PaymentStatus.PENDING for p in overdue)
    assert all(p.effective_status(clock().date()) == PaymentStatus.OVERDUE for p in overdue)


def test_mark_overdue_payments_persists_status(services, active_loan, clock):
    clock.set(_at(2025, 3, 16))

    marked = services.payments.mark_overdue_payments()

    assert [p.due_date for p in marked] == [date(2025, 2, 15), date(2025, 3, 15)]
    assert len(services.payments.list_overdue_payments()) == 2
    assert services.payments.mark_overdue_payments() == []


def test_overdue_payment_can_still_be_paid(services, active_loan, clock):
    clock.set(_at(2025, 3, 1))
    (overdue,) = services.payments.mark_overdue_payments()

    paid = services.payments.record_payment(overdue.id)

    assert paid.status == PaymentStatus.PAID
    assert services.payments.list_overdue_payments() == []


def test_update_status_rules(services, active_loan, clock):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]

    # Not yet due
    with pytest.raises(InvalidTransitionError):
        services.payments.update_payment_status(first.id, "overdue")

    clock.set(_at(2025, 2, 20))
    assert services.payments.update_payment_status(first.id, "overdue").status == PaymentStatus.OVERDUE
    with pytest.raises(InvalidTransitionError):
        services.payments.update_payment_status(first.id, "pending")

    assert services.payments.update_payment_status(first.id, "paid").status == PaymentStatus.PAID
    with pytest.raises(InvalidTransitionError):
        services.payments.update_payment_status(first.id, "pending")
    with pytest.raises(AlreadyPaidError):
        services.payments.update_payment_status(first.id, "paid")


def test_create_payment_validation(services, loan):
    with pytest.raises(ValidationError):
        services.payments.create_payment({"loan_id": loan.id, "amount": Decimal("0"), "due_date": date(2025, 2, 1)})
    with pytest.raises(ValidationError):
        services.payments.create_payment(
            {"loan_id": loan.id, "amount": Decimal("10"), "due_date": date(2025, 2, 1), "status": "paid"}
        )
    with pytest.raises(NotFoundError):
        services.payments.create_payment({"loan_id": 999, "amount": Decimal("10"), "due_date": date(2025, 2, 1)})


def test_summarize_payments(services, active_loan, clock):
    payments = services.payments.list_payments_by_loan(active_loan.id)
    services.payments.record_payment(payments[0].id)
    clock.set(_at(2025, 4, 10))

    summary = services.payments.summarize_payments(7)

    assert summary["collected"] == {"count": 1, "total": Decimal("306.25")}
    assert summary["overdue"] == {"count": 1, "total": Decimal("306.25")}
    assert summary["upcoming"] == {"count": 1, "total": Decimal("306.25")}


def test_reminder_recipient_follows_channel(services, active_loan, applicant):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]

    sms = services.payments.send_payment_reminder(first.id, "sms", "Your installment is due soon.")
    email = services.payments.send_payment_reminder(first.id, ReminderChannel.EMAIL, "Your installment is due soon.")

    assert sms.recipient == applicant.phone
    assert email.recipient == applicant.email
    assert sms.contract_number == active_loan.contract_number
    assert sms.amount == Decimal("306.25")


def test_reminder_records_notification(services, active_loan, officer):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]
    before = len(services.notifications.list_for_user(officer.id))

    services.payments.send_payment_reminder(first.id, "whatsapp", "Your installment is due soon.")

    notifications = services.notifications.list_for_user(officer.id)
    assert len(notifications) == before + 1
    assert notifications[-1].type == "payment"


def test_reminder_validation(services, active_loan):
    first = services.payments.list_payments_by_loan(active_loan.id)[0]

    with pytest.raises(ValidationError) as exc_info:
        services.payments.send_payment_reminder(first.id, "sms", "Pay now")
    assert exc_info.value.fields == ["message"]

    with pytest.raises(ValidationError) as exc_info:
        services.payments.send_payment_reminder(first.id, "pigeon", "Your installment is due soon.")
    assert exc_info.value.fields == ["method"]

    services.payments.record_payment(first.id)
    with pytest.raises(InvalidTransitionError):
        services.payments.send_payment_reminder(first.id, "sms", "Your installment is due soon.")
