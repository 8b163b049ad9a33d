from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Submission and review workflow models.

A submission moves through the reviewer workflow:

    pending -> in_review -> completed
    pending | in_review -> rejected

Review may only start once the fixed fee has been paid.
"""

__all__ = [
    "ReviewStatus",
    "PaymentStatus",
    "ComplianceOutcome",
    "InvalidTransition",
    "FormulationSubmission",
    "ReviewReport",
    "advance_status",
    "complete_review",
]


class ReviewStatus(Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    REJECTED = "rejected"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class ComplianceOutcome(Enum):
    """Verdict recorded in the reviewer's report."""
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    PARTIALLY_COMPLIANT = "partially_compliant"


class InvalidTransition(Exception):
    """Raised when a status change is not allowed by the review workflow."""


_ALLOWED: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.PENDING: {ReviewStatus.IN_REVIEW, ReviewStatus.REJECTED},
    ReviewStatus.IN_REVIEW: {ReviewStatus.COMPLETED, ReviewStatus.REJECTED},
    ReviewStatus.COMPLETED: set(),
    ReviewStatus.REJECTED: set(),
}


@dataclass(frozen=True)
class FormulationSubmission:
    """Upload form contents: metadata plus the raw workbook bytes."""
    name: str
    product_type: str
    file_name: str
    payload: bytes
    description: str | None = None
    review_status: ReviewStatus = ReviewStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    @property
    def size_bytes(self) -> int:
        return len(self.payload)


def advance_status(
    current: ReviewStatus, target: ReviewStatus, payment: PaymentStatus
) -> ReviewStatus:
    """Return target if the workflow allows current -> target, else raise InvalidTransition."""
    if target not in _ALLOWED[current]:
        raise InvalidTransition(f"cannot move submission from {current.value} to {target.value}")
    if target is ReviewStatus.IN_REVIEW and payment is not PaymentStatus.PAID:
        raise InvalidTransition("review cannot start before payment is received")
    return target


@dataclass(frozen=True)
class ReviewReport:
    """Reviewer verdict filed against a submission."""
    formulation_id: str
    reviewer_id: str
    outcome: ComplianceOutcome
    summary: str
    details: str = ""

    def __post_init__(self) -> None:
        if not self.summary.strip():
            raise ValueError("report summary must not be empty")

    def to_row(self) -> dict[str, str]:
        return {
            "formulation_id": self.formulation_id,
            "reviewer_id": self.reviewer_id,
            "status": self.outcome.value,
            "summary": self.summary,
            "details": self.details,
        }


def complete_review(
    current: ReviewStatus, payment: PaymentStatus, report: ReviewReport
) -> tuple[ReviewStatus, ReviewReport]:
    """File a report and close the review (in_review -> completed).

    The transition is checked before the report is returned, so a report is
    never accepted for a submission that cannot be completed.
    """
    status = advance_status(current, ReviewStatus.COMPLETED, payment)
    return status, report
