"""
Document lifecycle: upload checks, verification decisions, completeness summary.
Run from project root: python -m pytest tests/test_document_lifecycle.py -v
"""
import unittest
from types import SimpleNamespace

from models.enums import DocumentType
from schemas.document import FileMeta
from services.document_lifecycle import summarize_documents
from services.errors import IllegalTransition, NotFound, ValidationError

from support import MAX_UPLOAD, DatabaseTestCase, borrower_payload, pdf


class TestUpload(DatabaseTestCase):
    async def test_upload_for_application(self):
        app = await self.submit()
        doc = await self.documents.upload(self.borrower.id, app.id, "id_proof", pdf())
        self.assertEqual(doc.status, "PENDING")
        self.assertEqual(doc.document_type, "ID_PROOF")
        self.assertEqual(doc.loan_application_id, app.id)

    async def test_profile_level_document(self):
        doc = await self.documents.upload(self.borrower.id, None, DocumentType.ADDRESS_PROOF, pdf("bill.pdf"))
        self.assertIsNone(doc.loan_application_id)
        self.assertEqual([d.id for d in await self.documents.list_for_borrower(self.borrower.id)], [doc.id])

    async def test_rejects_bad_files_before_touching_the_store(self):
        cases = [
            ("ID_PROOF", pdf(size=MAX_UPLOAD + 1)),
            ("ID_PROOF", pdf(size=0)),
            ("ID_PROOF", pdf(name="  ")),
            ("SELFIE", pdf()),
            ("ID_PROOF", FileMeta(file_name="run.exe", file_size=10, content_type="application/x-msdownload")),
        ]
        for doc_type, meta in cases:
            with self.subTest(doc_type=doc_type, meta=meta):
                with self.assertRaises(ValidationError):
                    # Unknown borrower would be NotFound if the store were consulted first
                    await self.documents.upload("brw-missing", None, doc_type, meta)

    async def test_size_limit_is_inclusive(self):
        doc = await self.documents.upload(self.borrower.id, None, "OTHER", pdf(size=MAX_UPLOAD))
        self.assertEqual(doc.file_size, MAX_UPLOAD)

    async def test_application_must_belong_to_borrower(self):
        other, _ = await self.borrowers.get_or_create(borrower_payload(user_id="user-2", email="bo@example.com"))
        app = await self.submit(borrower_id=other.id)
        with self.assertRaises(ValidationError):
            await self.documents.upload(self.borrower.id, app.id, "ID_PROOF", pdf())
        with self.assertRaises(NotFound):
            await self.documents.upload(self.borrower.id, "loan-missing", "ID_PROOF", pdf())


class TestDocumentTransitions(DatabaseTestCase):
    async def test_verify_and_terminality(self):
        doc = await self.documents.upload(self.borrower.id, None, "ID_PROOF", pdf())
        await self.documents.transition(doc.id, "UNDER_REVIEW", "Officer Jane")
        await self.documents.transition(doc.id, "UNDER_REVIEW", "Officer Jane")
        verified = await self.documents.transition(doc.id, "VERIFIED", "Officer Jane")
        self.assertEqual(verified.status, "VERIFIED")
        with self.assertRaises(IllegalTransition):
            await self.documents.transition(doc.id, "REJECTED", "Officer Jane", "blurry")
        with self.assertRaises(ValidationError):
            await self.documents.transition(doc.id, "APPROVED", "Officer Jane")

    async def test_reject_needs_reason(self):
        doc = await self.documents.upload(self.borrower.id, None, "ID_PROOF", pdf())
        with self.assertRaises(ValidationError):
            await self.documents.transition(doc.id, "REJECTED", "Officer Jane", "")
        rejected = await self.documents.transition(doc.id, "REJECTED", "Officer Jane", "Expired passport")
        self.assertEqual(rejected.rejection_reason, "Expired passport")

    async def test_does_not_touch_parent_application(self):
        app = await self.submit()
        doc = await self.documents.upload(self.borrower.id, app.id, "ID_PROOF", pdf())
        await self.loans.transition(app.id, "APPROVED", "Officer Jane")
        await self.documents.transition(doc.id, "REJECTED", "Officer Jane", "Unreadable")
        self.assertEqual((await self.loans.get(app.id)).status, "APPROVED")

    async def test_list_all_with_filter(self):
        a = await self.documents.upload(self.borrower.id, None, "ID_PROOF", pdf("a.pdf"))
        b = await self.documents.upload(self.borrower.id, None, "OTHER", pdf("b.pdf"))
        await self.documents.transition(a.id, "VERIFIED", "Officer Jane")
        self.assertEqual([d.id for d in await self.documents.list_all()], [b.id, a.id])
        self.assertEqual([d.id for d in await self.documents.list_all("VERIFIED")], [a.id])


class TestSummary(DatabaseTestCase):
    async def test_counts_and_completeness(self):
        app = await self.submit()
        id_doc = await self.documents.upload(self.borrower.id, app.id, "ID_PROOF", pdf("id.pdf"))
        income = await self.documents.upload(self.borrower.id, app.id, "INCOME_PROOF", pdf("pay.pdf"))
        extra = await self.documents.upload(self.borrower.id, app.id, "OTHER", pdf("misc.pdf"))

        summary = await self.documents.summarize(app.id)
        self.assertEqual((summary.total, summary.verified, summary.pending), (3, 0, 3))
        self.assertFalse(summary.complete)

        await self.documents.transition(id_doc.id, "VERIFIED", "Officer Jane")
        await self.documents.transition(income.id, "VERIFIED", "Officer Jane")
        summary = await self.documents.summarize(app.id)
        self.assertEqual(summary.pending, 1)
        self.assertFalse(summary.complete)

        await self.documents.transition(extra.id, "REJECTED", "Officer Jane", "Not relevant")
        summary = await self.documents.summarize(app.id)
        self.assertEqual((summary.verified, summary.rejected, summary.pending), (2, 1, 0))
        self.assertTrue(summary.complete)
        self.assertEqual(summary.missing_types, [])

    async def test_unknown_application(self):
        with self.assertRaises(NotFound):
            await self.documents.summarize("loan-missing")


class TestSummarizeDocuments(unittest.TestCase):
    def test_rejected_required_type_is_missing(self):
        docs = [
            SimpleNamespace(status="VERIFIED", document_type="ID_PROOF"),
            SimpleNamespace(status="REJECTED", document_type="INCOME_PROOF"),
        ]
        summary = summarize_documents("loan-1", docs)
        self.assertFalse(summary.complete)
        self.assertEqual(summary.missing_types, [DocumentType.INCOME_PROOF])

    def test_no_required_types(self):
        self.assertTrue(summarize_documents("loan-1", [], required_types=()).complete)
        self.assertFalse(summarize_documents("loan-1", []).complete)


if __name__ == "__main__":
    unittest.main()
