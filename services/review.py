"""
Officer review session.

Holds what the officer is looking at: loaded applications and documents, the
score map for the loaded applications, the active status filters and at most
one pending transition intent. Loaded state is replaced only after a reload
fully succeeds, so a failing store never leaves a half-refreshed view.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from models.enums import DocumentType
from schemas.document import DocumentSummary
from services.document_lifecycle import DEFAULT_REQUIRED_TYPES, DocumentLifecycle, summarize_documents
from services.errors import ValidationError
from services.lifecycle import StatusLifecycle
from services.loan_lifecycle import LoanApplicationLifecycle
from services.scoring import ScoreResult, ScoringIntegration

logger = logging.getLogger(__name__)

ALL = "ALL"


class ReviewKind(str, enum.Enum):
    LOAN = "loan"
    DOCUMENT = "document"


@dataclass
class TransitionIntent:
    kind: ReviewKind
    record_id: str
    new_status: enum.Enum
    reason_required: bool = False
    rejection_reason: str = ""

    @property
    def committable(self) -> bool:
        return not self.reason_required or bool(self.rejection_reason.strip())


class ReviewSession:
    def __init__(
        self,
        officer: str,
        loans: LoanApplicationLifecycle,
        documents: DocumentLifecycle,
        scoring: Optional[ScoringIntegration] = None,
        required_document_types: Sequence[DocumentType] = DEFAULT_REQUIRED_TYPES,
    ):
        self.officer = officer
        self.loans = loans
        self.documents = documents
        self.scoring = scoring
        self.required_document_types = tuple(required_document_types)

        self.applications: list = []
        self.document_list: list = []
        self.scores: dict[str, ScoreResult] = {}
        self.loan_filter: str = ALL
        self.document_filter: str = ALL
        self.pending: Optional[TransitionIntent] = None
        self.last_error: Optional[Exception] = None

    def _lifecycle(self, kind: ReviewKind) -> StatusLifecycle:
        return self.loans if kind is ReviewKind.LOAN else self.documents

    def _loaded(self, kind: ReviewKind) -> list:
        return self.applications if kind is ReviewKind.LOAN else self.document_list

    async def refresh(self) -> None:
        try:
            applications = await self.loans.list()
            documents = await self.documents.list_all()
            scores = {}
            if self.scoring is not None:
                scores = await self.scoring.list_scores(a.id for a in applications)
        except Exception as e:
            self.last_error = e
            logger.error("Review refresh for %s failed: %s", self.officer, e)
            raise
        self.applications = applications
        self.document_list = documents
        self.scores = scores
        self.last_error = None

    def filter_by_status(self, status: str, kind: ReviewKind | str = ReviewKind.LOAN) -> list:
        """Client-side filter over what is already loaded; never re-queries."""
        kind = ReviewKind(kind)
        value = ALL if str(status).upper() == ALL else self._lifecycle(kind).machine.parse(status).value
        if kind is ReviewKind.LOAN:
            self.loan_filter = value
            return self.visible_applications
        self.document_filter = value
        return self.visible_documents

    @property
    def visible_applications(self) -> list:
        if self.loan_filter == ALL:
            return list(self.applications)
        return [a for a in self.applications if a.status == self.loan_filter]

    @property
    def visible_documents(self) -> list:
        if self.document_filter == ALL:
            return list(self.document_list)
        return [d for d in self.document_list if d.status == self.document_filter]

    def request_transition(self, kind: ReviewKind | str, record_id: str, new_status: str) -> TransitionIntent:
        kind = ReviewKind(kind)
        machine = self._lifecycle(kind).machine
        target = machine.parse(new_status)
        loaded = next((r for r in self._loaded(kind) if r.id == record_id), None)
        if loaded is not None:
            current = machine.parse(loaded.status)
            if not machine.is_noop(current, target):
                machine.check(current, target)
        self.pending = TransitionIntent(
            kind=kind,
            record_id=record_id,
            new_status=target,
            reason_required=machine.requires_reason(target),
        )
        return self.pending

    def set_rejection_reason(self, reason: str) -> None:
        if self.pending is None:
            raise ValidationError("No transition is pending")
        self.pending.rejection_reason = reason or ""

    def cancel_transition(self) -> None:
        self.pending = None

    async def commit_transition(self):
        intent = self.pending
        if intent is None:
            raise ValidationError("No transition is pending")
        if not intent.committable:
            raise ValidationError("A rejection reason is required", field="rejectionReason")
        try:
            record = await self._lifecycle(intent.kind).transition(
                intent.record_id, intent.new_status, self.officer, intent.rejection_reason or None
            )
        except Exception as e:
            self.last_error = e
            raise
        # Committed; a failing reload below must not leave the intent re-committable
        self.pending = None
        await self.refresh()
        return record

    def status_counts(self, kind: ReviewKind | str = ReviewKind.LOAN) -> dict[str, int]:
        kind = ReviewKind(kind)
        machine = self._lifecycle(kind).machine
        counts = {s.value: 0 for s in machine.statuses}
        for record in self._loaded(kind):
            counts[record.status] = counts.get(record.status, 0) + 1
        return counts

    def document_summary(self, application_id: str) -> DocumentSummary:
        docs = [d for d in self.document_list if d.loan_application_id == application_id]
        return summarize_documents(application_id, docs, self.required_document_types)

    def score_for(self, application_id: str) -> Optional[ScoreResult]:
        return self.scores.get(application_id)
