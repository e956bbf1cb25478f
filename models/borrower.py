from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, func

from database import Base


class BorrowerProfile(Base):
    __tablename__ = "borrower_profiles"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), unique=True, nullable=True, index=True)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    phone_number = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(String(256), nullable=True)
    city = Column(String(128), nullable=True)
    state = Column(String(64), nullable=True)
    zip_code = Column(String(16), nullable=True)
    # Employment / income feed the reference scorer
    annual_income = Column(Numeric(14, 2), nullable=True)
    employment_status = Column(String(32), nullable=False, default="EMPLOYED")
    employer_name = Column(String(256), nullable=True)
    employment_years = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
