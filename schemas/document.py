from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.enums import DocumentStatus, DocumentType
from schemas.base import CamelModel


class FileMeta(CamelModel):
    """What the core records about an uploaded file; the bytes live in file storage."""

    file_name: str
    file_size: int
    content_type: Optional[str] = None


class DocumentResponse(CamelModel):
    id: str
    borrower_id: str
    loan_application_id: Optional[str] = None
    document_type: DocumentType
    file_name: str
    file_size: int
    content_type: Optional[str] = None
    status: DocumentStatus
    status_updated_by: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    uploaded_at: datetime


class DocumentSummary(CamelModel):
    application_id: str
    total: int = 0
    verified: int = 0
    pending: int = 0
    rejected: int = 0
    missing_types: list[DocumentType] = Field(default_factory=list)
    complete: bool = False
