from schemas.application import (
    LoanApplicationCreate,
    LoanApplicationResponse,
    LoanCalculationRequest,
    LoanCalculationResponse,
    StatusUpdate,
)
from schemas.borrower import BorrowerProfileCreate, BorrowerProfileResponse
from schemas.document import DocumentResponse, DocumentSummary, FileMeta
from schemas.score import LoanScore, ScoreBatchRequest, ScoreBreakdown, ScoreResponse, ServiceStatusResponse

__all__ = [
    "BorrowerProfileCreate",
    "BorrowerProfileResponse",
    "DocumentResponse",
    "DocumentSummary",
    "FileMeta",
    "LoanApplicationCreate",
    "LoanApplicationResponse",
    "LoanCalculationRequest",
    "LoanCalculationResponse",
    "LoanScore",
    "ScoreBatchRequest",
    "ScoreBreakdown",
    "ScoreResponse",
    "ServiceStatusResponse",
    "StatusUpdate",
]
