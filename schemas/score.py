from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from models.enums import RiskLevel, ScoreGrade
from schemas.base import CamelModel

SERVICE_DOWN = "SERVICE_DOWN"


class ScoreBreakdown(CamelModel):
    employment: int = Field(..., ge=0)
    income: int = Field(..., ge=0)
    loan_to_value: int = Field(..., ge=0)
    debt_to_income: int = Field(..., ge=0)
    employment_years: int = Field(..., ge=0)
    loan_term: Optional[int] = Field(None, ge=0)


class LoanScore(CamelModel):
    application_id: str
    borrower_id: str
    total_score: int = Field(..., ge=0, le=1000)
    score_grade: ScoreGrade
    risk_assessment: RiskLevel
    score_breakdown: ScoreBreakdown
    calculated_at: datetime
    service_available: bool = True
    notes: Optional[str] = None


class ScoreResponse(CamelModel):
    """Wire shape for one score-or-sentinel; ``scoreGrade`` is SERVICE_DOWN when degraded."""

    application_id: str
    borrower_id: Optional[str] = None
    total_score: Optional[int] = None
    score_grade: ScoreGrade | Literal["SERVICE_DOWN"]
    risk_assessment: Optional[RiskLevel] = None
    score_breakdown: Optional[ScoreBreakdown] = None
    calculated_at: Optional[datetime] = None
    service_available: bool
    notes: Optional[str] = None


class ScoreBatchRequest(CamelModel):
    application_ids: list[str] = Field(..., min_length=1, max_length=200)


class ServiceStatusResponse(CamelModel):
    available: bool
    provider: str
    checked_at: datetime
    notes: Optional[str] = None
