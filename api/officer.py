from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_document_lifecycle, get_loan_lifecycle, get_scoring
from schemas.application import LoanApplicationResponse, StatusUpdate
from schemas.document import DocumentResponse, DocumentSummary
from schemas.score import ScoreBatchRequest, ScoreResponse, ServiceStatusResponse
from services.document_lifecycle import DocumentLifecycle
from services.loan_lifecycle import LoanApplicationLifecycle
from services.review import ReviewKind, ReviewSession
from services.scoring import ScoringIntegration
from services.status_machine import DOCUMENT_STATUSES, LOAN_STATUSES, StatusMachine

router = APIRouter(prefix="/admin", tags=["officer"])


def _vocabulary(machine: StatusMachine) -> list[dict[str, Any]]:
    """Each status with its legal next statuses, so clients never guess-and-check."""
    return [
        {
            "status": s.value,
            "terminal": machine.is_terminal(s),
            "allowedNext": sorted(t.value for t in machine.allowed_targets(s)),
            "requiresReason": machine.requires_reason(s),
        }
        for s in machine.statuses
    ]


# --- loans -----------------------------------------------------------------

@router.get("/loans", response_model=list[LoanApplicationResponse])
async def list_loans(
    status: Optional[str] = Query(None),
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
):
    return [LoanApplicationResponse.from_model(a) for a in await loans.list(status)]


@router.get("/loans/status/{status}", response_model=list[LoanApplicationResponse])
async def list_loans_by_status(status: str, loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle)):
    return [LoanApplicationResponse.from_model(a) for a in await loans.list(status)]


@router.get("/loans/{loan_id}", response_model=LoanApplicationResponse)
async def get_loan(loan_id: str, loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle)):
    return LoanApplicationResponse.from_model(await loans.get(loan_id))


@router.put("/loans/{loan_id}/status", response_model=LoanApplicationResponse)
async def update_loan_status(
    loan_id: str,
    body: StatusUpdate,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
):
    app = await loans.transition(loan_id, body.new_status, body.updated_by, body.rejection_reason)
    return LoanApplicationResponse.from_model(app)


@router.get("/loans/{loan_id}/documents", response_model=list[DocumentResponse])
async def list_loan_documents(loan_id: str, documents: DocumentLifecycle = Depends(get_document_lifecycle)):
    return await documents.list_for_application(loan_id)


@router.get("/loans/{loan_id}/documents/summary", response_model=DocumentSummary)
async def loan_document_summary(loan_id: str, documents: DocumentLifecycle = Depends(get_document_lifecycle)):
    return await documents.summarize(loan_id)


@router.get("/loans/{loan_id}/score", response_model=ScoreResponse)
async def get_loan_score(
    loan_id: str,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
    scoring: ScoringIntegration = Depends(get_scoring),
):
    await loans.get(loan_id)
    result = await scoring.get_score(loan_id)
    return result.to_response()


# --- documents ---------------------------------------------------------------

@router.get("/documents", response_model=list[DocumentResponse])
async def list_documents(
    status: Optional[str] = Query(None),
    documents: DocumentLifecycle = Depends(get_document_lifecycle),
):
    return await documents.list_all(status)


@router.get("/documents/status/{status}", response_model=list[DocumentResponse])
async def list_documents_by_status(status: str, documents: DocumentLifecycle = Depends(get_document_lifecycle)):
    return await documents.list_all(status)


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, documents: DocumentLifecycle = Depends(get_document_lifecycle)):
    return await documents.get(document_id)


@router.put("/documents/{document_id}/status", response_model=DocumentResponse)
async def update_document_status(
    document_id: str,
    body: StatusUpdate,
    documents: DocumentLifecycle = Depends(get_document_lifecycle),
):
    return await documents.transition(document_id, body.new_status, body.updated_by, body.rejection_reason)


# --- scores & vocabulary ---------------------------------------------------------

@router.post("/scores", response_model=dict[str, ScoreResponse])
async def batch_scores(body: ScoreBatchRequest, scoring: ScoringIntegration = Depends(get_scoring)):
    results = await scoring.list_scores(body.application_ids)
    return {app_id: r.to_response() for app_id, r in results.items()}


@router.get("/borrowers/{borrower_id}/scores", response_model=list[ScoreResponse])
async def borrower_scores(
    borrower_id: str,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
    scoring: ScoringIntegration = Depends(get_scoring),
):
    await loans.borrowers.get(borrower_id)
    apps = await loans.list_for_borrower(borrower_id)
    results = await scoring.list_scores(a.id for a in apps)
    return [r.to_response() for r in results.values()]


@router.get("/scores/grade/{grade}", response_model=list[ScoreResponse])
async def scores_by_grade(
    grade: str,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
    scoring: ScoringIntegration = Depends(get_scoring),
):
    apps = await loans.list()
    return [r.to_response() for r in await scoring.scores_matching((a.id for a in apps), grade=grade)]


@router.get("/scores/risk/{risk}", response_model=list[ScoreResponse])
async def scores_by_risk(
    risk: str,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
    scoring: ScoringIntegration = Depends(get_scoring),
):
    apps = await loans.list()
    return [r.to_response() for r in await scoring.scores_matching((a.id for a in apps), risk=risk)]


@router.get("/scores/service-status", response_model=ServiceStatusResponse)
async def score_service_status(scoring: ScoringIntegration = Depends(get_scoring)):
    return await scoring.service_status()


@router.get("/status/loan-statuses")
async def loan_statuses():
    return _vocabulary(LOAN_STATUSES)


@router.get("/status/document-statuses")
async def document_statuses():
    return _vocabulary(DOCUMENT_STATUSES)


# --- dashboard -----------------------------------------------------------------

@router.get("/dashboard")
async def dashboard(
    officer: str = Query("officer"),
    loan_status: str = Query("ALL", alias="loanStatus"),
    document_status: str = Query("ALL", alias="documentStatus"),
    with_scores: bool = Query(True, alias="withScores"),
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
    documents: DocumentLifecycle = Depends(get_document_lifecycle),
    scoring: ScoringIntegration = Depends(get_scoring),
):
    """One review-session load: counts, filtered lists, per-application documents and scores."""
    session = ReviewSession(officer, loans, documents, scoring if with_scores else None)
    await session.refresh()
    visible_loans = session.filter_by_status(loan_status, ReviewKind.LOAN)
    visible_docs = session.filter_by_status(document_status, ReviewKind.DOCUMENT)
    return {
        "loanCounts": session.status_counts(ReviewKind.LOAN),
        "documentCounts": session.status_counts(ReviewKind.DOCUMENT),
        "loans": [
            {
                **LoanApplicationResponse.from_model(a).model_dump(mode="json", by_alias=True),
                "documents": session.document_summary(a.id).model_dump(mode="json", by_alias=True),
                "score": (
                    session.score_for(a.id).to_response().model_dump(mode="json", by_alias=True)
                    if session.score_for(a.id) is not None
                    else None
                ),
            }
            for a in visible_loans
        ],
        "documents": [
            DocumentResponse.model_validate(d).model_dump(mode="json", by_alias=True) for d in visible_docs
        ],
    }
