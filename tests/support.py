"""
Shared fixtures for the async test cases: an in-memory SQLite database per
test, stores and lifecycles bound to one session, and a deterministic clock.
"""
import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from database import build_engine, build_sessionmaker, create_tables
from schemas.borrower import BorrowerProfileCreate
from schemas.document import FileMeta
from services.borrowers import BorrowerProfileService
from services.document_lifecycle import DocumentLifecycle
from services.loan_lifecycle import LoanApplicationLifecycle
from services.stores import ApplicationStore, BorrowerStore, DocumentStore

MAX_UPLOAD = 1_000_000


class StepClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(minutes=1)
        return self.current


def borrower_payload(**overrides) -> BorrowerProfileCreate:
    data = {
        "user_id": "user-1",
        "first_name": "Ada",
        "last_name": "Moyo",
        "email": "ada@example.com",
        "annual_income": Decimal("96000"),
        "employment_status": "EMPLOYED",
        "employment_years": 7,
    }
    data.update(overrides)
    return BorrowerProfileCreate(**data)


def pdf(name: str = "passport.pdf", size: int = 2048) -> FileMeta:
    return FileMeta(file_name=name, file_size=size, content_type="application/pdf")


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = build_engine("sqlite+aiosqlite://")
        await create_tables(self.engine)
        self.sessionmaker = build_sessionmaker(self.engine)
        self.session = self.sessionmaker()
        self.clock = StepClock()

        self.application_store = ApplicationStore(self.session)
        self.document_store = DocumentStore(self.session)
        self.borrower_store = BorrowerStore(self.session)
        self.borrowers = BorrowerProfileService(self.borrower_store)
        self.loans = LoanApplicationLifecycle(self.application_store, self.borrower_store, clock=self.clock)
        self.documents = DocumentLifecycle(
            self.document_store,
            self.application_store,
            self.borrower_store,
            max_upload_bytes=MAX_UPLOAD,
            allowed_content_types={"application/pdf", "image/png"},
            clock=self.clock,
        )
        self.borrower, _ = await self.borrowers.get_or_create(borrower_payload())

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def submit(self, amount="50000", term=36, rate="6.5", purpose="debt consolidation", borrower_id=None):
        return await self.loans.submit(
            borrower_id or self.borrower.id, Decimal(amount), term, Decimal(rate), purpose
        )
