"""Loan status state machine"""

from typing import Dict, FrozenSet

from rahnu_gateway.domain.exceptions import InvalidTransitionError
from rahnu_gateway.domain.models import DocumentStatus, LoanStatus

# current status -> statuses reachable in one step
LOAN_TRANSITIONS: Dict[LoanStatus, FrozenSet[LoanStatus]] = {
    LoanStatus.PENDING: frozenset({LoanStatus.VERIFICATION}),
    LoanStatus.VERIFICATION: frozenset(
        {LoanStatus.APPROVED, LoanStatus.DOCUMENTATION, LoanStatus.REJECTED}
    ),
    LoanStatus.DOCUMENTATION: frozenset({LoanStatus.APPROVED, LoanStatus.REJECTED}),
    LoanStatus.APPROVED: frozenset({LoanStatus.ACTIVE}),
    LoanStatus.ACTIVE: frozenset({LoanStatus.COMPLETED}),
    LoanStatus.COMPLETED: frozenset(),
    LoanStatus.REJECTED: frozenset(),
}

INITIAL_STATUS = LoanStatus.PENDING


def can_transition(current: LoanStatus, target: LoanStatus) -> bool:
    return LoanStatus(target) in LOAN_TRANSITIONS[LoanStatus(current)]


def ensure_transition(current: LoanStatus, target: LoanStatus) -> LoanStatus:
    """
    Validate a loan status change against the transition table.

    Returns the target status as a LoanStatus member.

    Raises:
        InvalidTransitionError: When target is not reachable from current
    """
    current = LoanStatus(current)
    target = LoanStatus(target)
    if not can_transition(current, target):
        raise InvalidTransitionError("Loan", current.value, target.value)
    return target


# Documents may be re-submitted after rejection; approval is final
DOCUMENT_TRANSITIONS: Dict[DocumentStatus, FrozenSet[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset({DocumentStatus.APPROVED, DocumentStatus.REJECTED}),
    DocumentStatus.REJECTED: frozenset({DocumentStatus.PENDING}),
    DocumentStatus.APPROVED: frozenset(),
}


def ensure_document_transition(current: DocumentStatus, target: DocumentStatus) -> DocumentStatus:
    current = DocumentStatus(current)
    target = DocumentStatus(target)
    if target not in DOCUMENT_TRANSITIONS[current]:
        raise InvalidTransitionError("Document", current.value, target.value)
    return target
