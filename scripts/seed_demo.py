"""
Seed demo borrowers, loan applications and documents through the lifecycles.
Run: python -m scripts.seed_demo (from the project root).
"""
import asyncio
import logging
import os
import sys

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from database import build_sessionmaker, create_tables, init_db, session_scope
from logging_setup import configure_logging
from schemas.borrower import BorrowerProfileCreate
from schemas.document import FileMeta
from services.borrowers import BorrowerProfileService
from services.document_lifecycle import DocumentLifecycle
from services.loan_lifecycle import LoanApplicationLifecycle
from services.stores import ApplicationStore, BorrowerStore, DocumentStore

logger = logging.getLogger("scripts.seed_demo")

SEED_OFFICER = "Officer Jane (seed)"

BORROWERS_DATA = [
    {
        "profile": {
            "user_id": "user-ada",
            "first_name": "Ada",
            "last_name": "Moyo",
            "email": "ada.moyo@example.com",
            "annual_income": 96000,
            "employment_status": "EMPLOYED",
            "employer_name": "Northwind Logistics",
            "employment_years": 7,
        },
        "loans": [
            {"amount": 50000, "term": 36, "rate": 6.5, "purpose": "debt consolidation", "type": "PERSONAL",
             "decision": ("APPROVED", None)},
        ],
        "documents": [("ID_PROOF", "passport.pdf", 240_000), ("INCOME_PROOF", "payslip-march.pdf", 88_000)],
    },
    {
        "profile": {
            "user_id": "user-tomas",
            "first_name": "Tomas",
            "last_name": "Reyes",
            "email": "tomas.reyes@example.com",
            "annual_income": 41000,
            "employment_status": "SELF_EMPLOYED",
            "employment_years": 2,
        },
        "loans": [
            {"amount": 18000, "term": 60, "rate": 11.9, "purpose": "delivery van", "type": "AUTO",
             "decision": ("REJECTED", "Debt-to-income too high for a 60-month term")},
            {"amount": 6000, "term": 12, "rate": 9.25, "purpose": "workshop tools", "type": "PERSONAL"},
        ],
        "documents": [("BANK_STATEMENT", "statement-q1.pdf", 512_000)],
    },
]


async def seed(bind=None):
    """Seed the configured database, or ``bind`` when given."""
    if bind is None:
        await init_db()
        factory = None
    else:
        await create_tables(bind)
        factory = build_sessionmaker(bind)
    async with session_scope(factory) as session:
        applications, borrowers_store = ApplicationStore(session), BorrowerStore(session)
        borrowers = BorrowerProfileService(borrowers_store)
        loans = LoanApplicationLifecycle(applications, borrowers_store)
        documents = DocumentLifecycle(
            DocumentStore(session), applications, borrowers_store, max_upload_bytes=settings.max_upload_bytes
        )
        for data in BORROWERS_DATA:
            profile, created = await borrowers.get_or_create(BorrowerProfileCreate(**data["profile"]))
            if not created:
                logger.info("Borrower %s already exists, skipping", profile.email)
                continue
            for loan in data["loans"]:
                app = await loans.submit(
                    profile.id, loan["amount"], loan["term"], loan["rate"], loan["purpose"], loan["type"]
                )
                for doc_type, name, size in data["documents"]:
                    await documents.upload(
                        profile.id, app.id, doc_type, FileMeta(file_name=name, file_size=size,
                                                              content_type="application/pdf")
                    )
                if loan.get("decision"):
                    new_status, reason = loan["decision"]
                    await loans.transition(app.id, new_status, SEED_OFFICER, reason)
            logger.info("Seeded borrower: %s", profile.email)
    logger.info("Seed complete.")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed())
