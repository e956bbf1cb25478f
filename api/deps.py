"""FastAPI dependencies wiring stores, lifecycles and scoring onto the request session."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from services.borrowers import BorrowerProfileService
from services.document_lifecycle import DocumentLifecycle
from services.loan_lifecycle import LoanApplicationLifecycle
from services.score_providers import HttpScoreProvider, LocalScoreProvider
from services.scoring import ScoringIntegration
from services.stores import ApplicationStore, BorrowerStore, DocumentStore


def get_borrower_service(db: AsyncSession = Depends(get_db)) -> BorrowerProfileService:
    return BorrowerProfileService(BorrowerStore(db))


def get_loan_lifecycle(db: AsyncSession = Depends(get_db)) -> LoanApplicationLifecycle:
    return LoanApplicationLifecycle(ApplicationStore(db), BorrowerStore(db))


def get_document_lifecycle(db: AsyncSession = Depends(get_db)) -> DocumentLifecycle:
    return DocumentLifecycle(
        DocumentStore(db),
        ApplicationStore(db),
        BorrowerStore(db),
        max_upload_bytes=settings.max_upload_bytes,
        allowed_content_types=settings.content_types,
    )


def get_scoring(db: AsyncSession = Depends(get_db)) -> ScoringIntegration:
    if settings.uses_remote_scoring:
        provider = HttpScoreProvider(settings.scoring_service_url, settings.scoring_timeout_seconds)
    else:
        provider = LocalScoreProvider(ApplicationStore(db), BorrowerStore(db))
    return ScoringIntegration(provider)
