"""
Reference creditworthiness scorer.

Weighted sum on a 0-1000 scale: employment 35%, income 25%, loan-to-value 20%,
debt-to-income 15%, employment years 5%, plus a short-term bonus. The total is
clamped to 1000. Loan-to-value uses annual income as the value base since
unsecured applications carry no collateral appraisal.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from models.enums import EmploymentStatus, RiskLevel, ScoreGrade
from schemas.score import LoanScore, ScoreBreakdown
from services.loan_lifecycle import monthly_payment

MAX_TOTAL = 1000

EMPLOYMENT_POINTS = {
    EmploymentStatus.EMPLOYED: 350,
    EmploymentStatus.SELF_EMPLOYED: 280,
    EmploymentStatus.RETIRED: 210,
    EmploymentStatus.UNEMPLOYED: 70,
}

# (lower bound of annual income, points), highest first
INCOME_TIERS = ((100_000, 250), (75_000, 200), (50_000, 150), (30_000, 100), (1, 50))

# (max loan / annual income, points)
LOAN_TO_VALUE_TIERS = ((0.5, 200), (1.0, 160), (2.0, 110), (3.0, 60))
LOAN_TO_VALUE_FLOOR = 20

# (max monthly payment / monthly income, points)
DEBT_TO_INCOME_TIERS = ((0.10, 150), (0.20, 120), (0.30, 80), (0.40, 40))

TERM_BONUS = {12: 30, 24: 20, 36: 10}

GRADE_FLOORS = ((800, ScoreGrade.EXCELLENT), (650, ScoreGrade.GOOD), (500, ScoreGrade.FAIR))

RISK_BY_GRADE = {
    ScoreGrade.EXCELLENT: RiskLevel.LOW,
    ScoreGrade.GOOD: RiskLevel.LOW,
    ScoreGrade.FAIR: RiskLevel.MEDIUM,
    ScoreGrade.POOR: RiskLevel.HIGH,
}


def grade_for(total: int) -> ScoreGrade:
    for floor, grade in GRADE_FLOORS:
        if total >= floor:
            return grade
    return ScoreGrade.POOR


def risk_for(grade: ScoreGrade) -> RiskLevel:
    return RISK_BY_GRADE[grade]


def _tiered(value: float, tiers, floor: int = 0) -> int:
    for limit, points in tiers:
        if value <= limit:
            return points
    return floor


def _income_points(income: float) -> int:
    for lower, points in INCOME_TIERS:
        if income >= lower:
            return points
    return 0


def score_breakdown(
    employment_status: str,
    annual_income: Optional[Decimal],
    employment_years: Optional[int],
    loan_amount: Decimal,
    interest_rate: Decimal,
    term_months: int,
) -> ScoreBreakdown:
    income = float(annual_income or 0)
    employment = EMPLOYMENT_POINTS.get(EmploymentStatus(employment_status), 0)
    if income > 0:
        ltv = _tiered(float(loan_amount) / income, LOAN_TO_VALUE_TIERS, LOAN_TO_VALUE_FLOOR)
        payment = float(monthly_payment(loan_amount, interest_rate, term_months))
        dti = _tiered(payment / (income / 12), DEBT_TO_INCOME_TIERS)
    else:
        ltv = dti = 0
    return ScoreBreakdown(
        employment=employment,
        income=_income_points(income),
        loan_to_value=ltv,
        debt_to_income=dti,
        employment_years=min(max(employment_years or 0, 0), 10) * 5,
        loan_term=TERM_BONUS.get(int(term_months)),
    )


def calculate_score(application: Any, borrower: Any, now: datetime) -> LoanScore:
    breakdown = score_breakdown(
        employment_status=borrower.employment_status,
        annual_income=borrower.annual_income,
        employment_years=borrower.employment_years,
        loan_amount=application.loan_amount,
        interest_rate=application.interest_rate,
        term_months=application.loan_term_months,
    )
    raw = (
        breakdown.employment
        + breakdown.income
        + breakdown.loan_to_value
        + breakdown.debt_to_income
        + breakdown.employment_years
        + (breakdown.loan_term or 0)
    )
    total = min(raw, MAX_TOTAL)
    grade = grade_for(total)
    notes = None
    if not borrower.annual_income:
        notes = "No declared income; income-based components scored as zero"
    return LoanScore(
        application_id=application.id,
        borrower_id=application.borrower_id,
        total_score=total,
        score_grade=grade,
        risk_assessment=risk_for(grade),
        score_breakdown=breakdown,
        calculated_at=now,
        service_available=True,
        notes=notes,
    )
