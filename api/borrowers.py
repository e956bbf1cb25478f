from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from api.deps import get_borrower_service, get_document_lifecycle, get_loan_lifecycle
from schemas.application import (
    LoanApplicationCreate,
    LoanApplicationResponse,
    LoanCalculationRequest,
    LoanCalculationResponse,
)
from schemas.borrower import BorrowerProfileCreate, BorrowerProfileResponse
from schemas.document import DocumentResponse, FileMeta
from services.borrowers import BorrowerProfileService
from services.document_lifecycle import DocumentLifecycle
from services.errors import NotFound
from services.loan_lifecycle import LoanApplicationLifecycle, loan_totals

router = APIRouter(prefix="/api/borrowers", tags=["borrowers"])


@router.post("", response_model=BorrowerProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: BorrowerProfileCreate,
    response: Response,
    borrowers: BorrowerProfileService = Depends(get_borrower_service),
):
    """Idempotent: an existing profile for the same user or email is returned with 200."""
    profile, created = await borrowers.get_or_create(body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return profile


@router.post("/calculate-loan", response_model=LoanCalculationResponse)
async def calculate_loan(body: LoanCalculationRequest):
    totals = loan_totals(body.loan_amount, body.interest_rate, body.loan_term_months)
    return LoanCalculationResponse(
        loan_amount=float(body.loan_amount),
        loan_term_months=body.loan_term_months,
        interest_rate=float(body.interest_rate),
        **{k: float(v) for k, v in totals.items()},
    )


@router.get("/user/{user_id}", response_model=BorrowerProfileResponse)
async def get_by_user(user_id: str, borrowers: BorrowerProfileService = Depends(get_borrower_service)):
    return await borrowers.get_by_user_id(user_id)


@router.get("/email/{email}", response_model=BorrowerProfileResponse)
async def get_by_email(email: str, borrowers: BorrowerProfileService = Depends(get_borrower_service)):
    return await borrowers.get_by_email(email)


@router.get("/{borrower_id}", response_model=BorrowerProfileResponse)
async def get_profile(borrower_id: str, borrowers: BorrowerProfileService = Depends(get_borrower_service)):
    return await borrowers.get(borrower_id)


@router.post("/{borrower_id}/loans", response_model=LoanApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_loan(
    borrower_id: str,
    body: LoanApplicationCreate,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
):
    app = await loans.submit(
        borrower_id,
        body.loan_amount,
        body.loan_term_months,
        body.interest_rate,
        body.purpose,
        loan_type=body.loan_type,
    )
    return LoanApplicationResponse.from_model(app)


@router.get("/{borrower_id}/loans", response_model=list[LoanApplicationResponse])
async def list_loans(
    borrower_id: str,
    borrowers: BorrowerProfileService = Depends(get_borrower_service),
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
):
    await borrowers.get(borrower_id)
    return [LoanApplicationResponse.from_model(a) for a in await loans.list_for_borrower(borrower_id)]


@router.get("/{borrower_id}/loans/{loan_id}", response_model=LoanApplicationResponse)
async def get_loan(
    borrower_id: str,
    loan_id: str,
    loans: LoanApplicationLifecycle = Depends(get_loan_lifecycle),
):
    app = await loans.get(loan_id)
    if app.borrower_id != borrower_id:
        raise NotFound("Loan application", loan_id)
    return LoanApplicationResponse.from_model(app)


@router.post("/{borrower_id}/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    borrower_id: str,
    document_type: str = Form(..., alias="documentType"),
    loan_application_id: Optional[str] = Form(None, alias="loanApplicationId"),
    file: UploadFile = File(...),
    documents: DocumentLifecycle = Depends(get_document_lifecycle),
):
    size = file.size
    if size is None:
        size = len(await file.read())
    meta = FileMeta(file_name=file.filename or "", file_size=size, content_type=file.content_type)
    return await documents.upload(borrower_id, loan_application_id, document_type, meta)


@router.get("/{borrower_id}/documents", response_model=list[DocumentResponse])
async def list_documents(
    borrower_id: str,
    borrowers: BorrowerProfileService = Depends(get_borrower_service),
    documents: DocumentLifecycle = Depends(get_document_lifecycle),
):
    await borrowers.get(borrower_id)
    return await documents.list_for_borrower(borrower_id)
