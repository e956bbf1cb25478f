"""Document lifecycle: upload metadata, verification decisions, per-application aggregation."""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from models import Document
from models.enums import DocumentStatus, DocumentType
from schemas.document import DocumentSummary, FileMeta
from services.errors import ValidationError
from services.lifecycle import StatusLifecycle, utcnow
from services.status_machine import DOCUMENT_STATUSES
from services.stores import ApplicationStore, BorrowerStore, DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_TYPES = (DocumentType.ID_PROOF, DocumentType.INCOME_PROOF)


def summarize_documents(
    application_id: str,
    documents: Iterable,
    required_types: Sequence[DocumentType] = DEFAULT_REQUIRED_TYPES,
) -> DocumentSummary:
    """
    Counts plus the "documents complete" predicate: every document is terminal
    and each required type has at least one VERIFIED document. Advisory only;
    approval is not gated on it.
    """
    docs = list(documents)
    statuses = [DOCUMENT_STATUSES.parse(d.status) for d in docs]
    verified_types = {
        DocumentType(d.document_type) for d, s in zip(docs, statuses) if s is DocumentStatus.VERIFIED
    }
    missing = [t for t in required_types if t not in verified_types]
    all_terminal = all(DOCUMENT_STATUSES.is_terminal(s) for s in statuses)
    return DocumentSummary(
        application_id=application_id,
        total=len(docs),
        verified=sum(1 for s in statuses if s is DocumentStatus.VERIFIED),
        pending=sum(1 for s in statuses if not DOCUMENT_STATUSES.is_terminal(s)),
        rejected=sum(1 for s in statuses if s is DocumentStatus.REJECTED),
        missing_types=missing,
        complete=all_terminal and not missing,
    )


class DocumentLifecycle(StatusLifecycle):
    def __init__(
        self,
        documents: DocumentStore,
        applications: ApplicationStore,
        borrowers: BorrowerStore,
        max_upload_bytes: int,
        allowed_types: Iterable[DocumentType] = tuple(DocumentType),
        allowed_content_types: Optional[Iterable[str]] = None,
        clock=utcnow,
    ):
        super().__init__(documents, DOCUMENT_STATUSES, clock)
        self.applications = applications
        self.borrowers = borrowers
        self.max_upload_bytes = max_upload_bytes
        self.allowed_types = frozenset(allowed_types)
        self.allowed_content_types = frozenset(allowed_content_types) if allowed_content_types else None

    def _validate_upload(self, document_type, file_meta: FileMeta) -> DocumentType:
        try:
            doc_type = DocumentType(str(getattr(document_type, "value", document_type)).upper())
        except ValueError:
            doc_type = None
        if doc_type is None or doc_type not in self.allowed_types:
            allowed = ", ".join(sorted(t.value for t in self.allowed_types))
            raise ValidationError(f"Document type '{document_type}' is not allowed; expected one of {allowed}",
                                  field="documentType")
        if not (file_meta.file_name or "").strip():
            raise ValidationError("File name is required", field="fileName")
        if file_meta.file_size <= 0:
            raise ValidationError("File is empty", field="fileSize")
        if file_meta.file_size > self.max_upload_bytes:
            raise ValidationError(
                f"File is {file_meta.file_size} bytes; the limit is {self.max_upload_bytes}", field="fileSize"
            )
        if (
            self.allowed_content_types is not None
            and file_meta.content_type
            and file_meta.content_type not in self.allowed_content_types
        ):
            raise ValidationError(f"Content type {file_meta.content_type} is not accepted", field="contentType")
        return doc_type

    async def upload(
        self,
        borrower_id: str,
        application_id: Optional[str],
        document_type,
        file_meta: FileMeta,
    ) -> Document:
        doc_type = self._validate_upload(document_type, file_meta)

        await self.borrowers.get(borrower_id)
        if application_id:
            application = await self.applications.get(application_id)
            if application.borrower_id != borrower_id:
                raise ValidationError(
                    f"Loan application {application_id} does not belong to borrower {borrower_id}",
                    field="loanApplicationId",
                )

        doc = await self.store.create({
            "borrower_id": borrower_id,
            "loan_application_id": application_id or None,
            "document_type": doc_type.value,
            "file_name": file_meta.file_name.strip(),
            "file_size": file_meta.file_size,
            "content_type": file_meta.content_type,
            "status": self.machine.initial.value,
            "uploaded_at": self.clock(),
        })
        logger.info("Document %s (%s) uploaded for borrower %s", doc.id, doc_type.value, borrower_id)
        return doc

    async def list_for_application(self, application_id: str) -> list[Document]:
        await self.applications.get(application_id)
        return await self.store.list(loan_application_id=application_id)

    async def list_for_borrower(self, borrower_id: str) -> list[Document]:
        return await self.store.list(borrower_id=borrower_id)

    async def list_all(self, status: Optional[str] = None) -> list[Document]:
        if status is not None:
            status = self.machine.parse(status).value
        return await self.store.list(status)

    async def summarize(
        self, application_id: str, required_types: Sequence[DocumentType] = DEFAULT_REQUIRED_TYPES
    ) -> DocumentSummary:
        docs = await self.list_for_application(application_id)
        return summarize_documents(application_id, docs, required_types)
