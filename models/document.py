from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True, index=True)
    borrower_id = Column(String(64), ForeignKey("borrower_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null for profile-level documents
    loan_application_id = Column(
        String(64), ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=True, index=True
    )
    document_type = Column(String(32), nullable=False)
    file_name = Column(String(512), nullable=False)
    file_size = Column(Integer, nullable=False)
    content_type = Column(String(128), nullable=True)
    status = Column(String(32), nullable=False, default="PENDING", index=True)
    status_updated_by = Column(String(256), nullable=True)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, index=True)
