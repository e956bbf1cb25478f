"""Loan application lifecycle: submission, officer decisions, derived payment."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from models import LoanApplication
from models.enums import LoanType
from schemas.application import LoanApplicationCreate
from schemas.base import first_error
from services.lifecycle import StatusLifecycle, utcnow
from services.status_machine import LOAN_STATUSES
from services.stores import ApplicationStore, BorrowerStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def monthly_payment(amount, annual_rate, term_months: int) -> Decimal:
    """
    Fixed-rate amortized payment, rounded half-up to cents.
    payment = P * i / (1 - (1 + i) ** -n) with i = rate / 100 / 12; zero rate is P / n.
    """
    principal = Decimal(str(amount))
    n = int(term_months)
    if n <= 0:
        raise ValueError("term_months must be positive")
    i = float(Decimal(str(annual_rate))) / 100 / 12
    if i == 0:
        return (principal / n).quantize(CENTS, rounding=ROUND_HALF_UP)
    payment = float(principal) * i / (1 - (1 + i) ** -n)
    return Decimal(repr(payment)).quantize(CENTS, rounding=ROUND_HALF_UP)


def loan_totals(amount, annual_rate, term_months: int) -> dict[str, Decimal]:
    payment = monthly_payment(amount, annual_rate, term_months)
    total = (payment * int(term_months)).quantize(CENTS)
    return {
        "monthly_payment": payment,
        "total_payment": total,
        "total_interest": (total - Decimal(str(amount))).quantize(CENTS),
    }


class LoanApplicationLifecycle(StatusLifecycle):
    def __init__(self, applications: ApplicationStore, borrowers: BorrowerStore, clock=utcnow):
        super().__init__(applications, LOAN_STATUSES, clock)
        self.borrowers = borrowers

    async def submit(
        self,
        borrower_id: str,
        amount,
        term_months: int,
        rate,
        purpose: str,
        loan_type: LoanType | str = LoanType.PERSONAL,
    ) -> LoanApplication:
        try:
            terms = LoanApplicationCreate(
                loan_amount=amount,
                loan_term_months=term_months,
                interest_rate=rate,
                purpose=purpose or "",
                loan_type=loan_type,
            )
        except SchemaValidationError as e:
            raise first_error(e) from e

        await self.borrowers.get(borrower_id)
        app = await self.store.create({
            "borrower_id": borrower_id,
            "loan_type": terms.loan_type.value,
            "loan_amount": terms.loan_amount,
            "loan_term_months": terms.loan_term_months,
            "interest_rate": terms.interest_rate,
            "purpose": terms.purpose,
            "status": self.machine.initial.value,
            "applied_at": self.clock(),
        })
        logger.info("Loan application %s submitted by borrower %s (%s)", app.id, borrower_id, terms.loan_amount)
        return app

    async def list(self, status: Optional[str] = None) -> list[LoanApplication]:
        """Newest first by appliedAt."""
        if status is not None:
            status = self.machine.parse(status).value
        return await self.store.list(status)

    async def list_for_borrower(self, borrower_id: str) -> list[LoanApplication]:
        return await self.store.list(borrower_id=borrower_id)
