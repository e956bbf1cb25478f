from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    borrower_id = Column(String(64), ForeignKey("borrower_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    loan_type = Column(String(32), nullable=False, default="PERSONAL")
    loan_amount = Column(Numeric(14, 2), nullable=False)
    loan_term_months = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    purpose = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default="PENDING", index=True)
    status_updated_by = Column(String(256), nullable=True)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    # Set only while status == REJECTED
    rejection_reason = Column(Text, nullable=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
