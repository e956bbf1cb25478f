from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from models.enums import LoanStatus, LoanType
from schemas.base import CamelModel

LOAN_TERMS = (12, 24, 36, 48, 60)
MIN_LOAN_AMOUNT = Decimal("1000")
MAX_LOAN_AMOUNT = Decimal("1000000")
MAX_INTEREST_RATE = Decimal("30")


class LoanTermsSchema(CamelModel):
    """Amount / term / rate with the ranges every submission must satisfy."""

    loan_amount: Decimal = Field(..., ge=MIN_LOAN_AMOUNT, le=MAX_LOAN_AMOUNT, decimal_places=2)
    loan_term_months: int
    interest_rate: Decimal = Field(..., ge=0, le=MAX_INTEREST_RATE, decimal_places=2)

    @field_validator("loan_term_months")
    @classmethod
    def _known_term(cls, v: int) -> int:
        if v not in LOAN_TERMS:
            raise ValueError(f"must be one of {', '.join(str(t) for t in LOAN_TERMS)}")
        return v


class LoanApplicationCreate(LoanTermsSchema):
    loan_type: LoanType = LoanType.PERSONAL
    purpose: str

    @field_validator("purpose")
    @classmethod
    def _purpose_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StatusUpdate(CamelModel):
    """Body of PUT .../status for both loans and documents."""

    new_status: str
    updated_by: str
    rejection_reason: Optional[str] = None


class LoanApplicationResponse(CamelModel):
    id: str
    borrower_id: str
    loan_type: LoanType
    loan_amount: float
    loan_term_months: int
    interest_rate: float
    purpose: str
    status: LoanStatus
    status_updated_by: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    applied_at: datetime
    monthly_payment: float
    allowed_next_statuses: list[LoanStatus] = Field(default_factory=list)

    @classmethod
    def from_model(cls, app: Any) -> "LoanApplicationResponse":
        """Attach the derived monthly payment and next legal statuses."""
        from services.loan_lifecycle import monthly_payment
        from services.status_machine import LOAN_STATUSES

        status = LOAN_STATUSES.parse(app.status)
        return cls(
            id=app.id,
            borrower_id=app.borrower_id,
            loan_type=app.loan_type,
            loan_amount=float(app.loan_amount),
            loan_term_months=app.loan_term_months,
            interest_rate=float(app.interest_rate),
            purpose=app.purpose,
            status=status,
            status_updated_by=app.status_updated_by,
            status_updated_at=app.status_updated_at,
            rejection_reason=app.rejection_reason,
            applied_at=app.applied_at,
            monthly_payment=float(monthly_payment(app.loan_amount, app.interest_rate, app.loan_term_months)),
            allowed_next_statuses=sorted(LOAN_STATUSES.allowed_targets(status), key=lambda s: s.value),
        )


class LoanCalculationRequest(LoanTermsSchema):
    pass


class LoanCalculationResponse(CamelModel):
    loan_amount: float
    loan_term_months: int
    interest_rate: float
    monthly_payment: float
    total_payment: float
    total_interest: float
