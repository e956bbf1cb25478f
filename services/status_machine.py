"""
Status vocabulary shared by loan applications and documents.

Both lifecycles run the same graph shape: PENDING may go to review or straight
to a decision, UNDER_REVIEW goes to a decision, decisions are terminal.
``StatusMachine`` is the single parametrized implementation; ``LOAN_STATUSES``
and ``DOCUMENT_STATUSES`` are its two configurations.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Mapping, TypeVar

from models.enums import DocumentStatus, LoanStatus
from services.errors import IllegalTransition, ValidationError

S = TypeVar("S", bound=Enum)


@dataclass(frozen=True)
class StatusMachine(Generic[S]):
    name: str
    statuses: type[S]
    initial: S
    edges: Mapping[S, frozenset[S]]
    # Self-loops accepted as no-ops rather than errors
    idempotent: frozenset[S] = field(default_factory=frozenset)
    reason_required: frozenset[S] = field(default_factory=frozenset)

    def parse(self, value: str | S) -> S:
        """Coerce a raw status string; unknown values are a ValidationError."""
        if isinstance(value, self.statuses):
            return value
        try:
            return self.statuses(str(value).upper())
        except ValueError:
            valid = ", ".join(s.value for s in self.statuses)
            raise ValidationError(f"Unknown {self.name} status '{value}'; expected one of {valid}", field="status")

    @property
    def terminal(self) -> frozenset[S]:
        return frozenset(s for s in self.statuses if not self.edges.get(s))

    def is_terminal(self, status: S) -> bool:
        return status in self.terminal

    def allowed_targets(self, current: S) -> frozenset[S]:
        targets = set(self.edges.get(current, frozenset()))
        if current in self.idempotent:
            targets.add(current)
        return frozenset(targets)

    def is_noop(self, current: S, target: S) -> bool:
        return current == target and current in self.idempotent

    def requires_reason(self, target: S) -> bool:
        return target in self.reason_required

    def check(self, current: S, target: S) -> None:
        if target not in self.allowed_targets(current):
            raise IllegalTransition(
                current.value,
                target.value,
                [s.value for s in self.allowed_targets(current)],
            )


LOAN_STATUSES: StatusMachine[LoanStatus] = StatusMachine(
    name="loan",
    statuses=LoanStatus,
    initial=LoanStatus.PENDING,
    edges={
        LoanStatus.PENDING: frozenset({LoanStatus.UNDER_REVIEW, LoanStatus.APPROVED, LoanStatus.REJECTED}),
        LoanStatus.UNDER_REVIEW: frozenset({LoanStatus.APPROVED, LoanStatus.REJECTED}),
        LoanStatus.APPROVED: frozenset(),
        LoanStatus.REJECTED: frozenset(),
    },
    idempotent=frozenset({LoanStatus.UNDER_REVIEW}),
    reason_required=frozenset({LoanStatus.REJECTED}),
)

DOCUMENT_STATUSES: StatusMachine[DocumentStatus] = StatusMachine(
    name="document",
    statuses=DocumentStatus,
    initial=DocumentStatus.PENDING,
    edges={
        DocumentStatus.PENDING: frozenset(
            {DocumentStatus.UNDER_REVIEW, DocumentStatus.VERIFIED, DocumentStatus.REJECTED}
        ),
        DocumentStatus.UNDER_REVIEW: frozenset({DocumentStatus.VERIFIED, DocumentStatus.REJECTED}),
        DocumentStatus.VERIFIED: frozenset(),
        DocumentStatus.REJECTED: frozenset(),
    },
    idempotent=frozenset({DocumentStatus.UNDER_REVIEW}),
    reason_required=frozenset({DocumentStatus.REJECTED}),
)
