from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from models.enums import EmploymentStatus
from schemas.base import CamelModel


class BorrowerProfileCreate(CamelModel):
    user_id: Optional[str] = None
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    email: str = Field(..., max_length=256)
    phone_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    annual_income: Optional[Decimal] = Field(None, ge=0)
    employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED
    employer_name: Optional[str] = None
    employment_years: Optional[int] = Field(None, ge=0, le=70)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("must be a valid email address")
        return v


class BorrowerProfileResponse(CamelModel):
    id: str
    user_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    annual_income: Optional[float] = None
    employment_status: EmploymentStatus
    employer_name: Optional[str] = None
    employment_years: Optional[int] = None
    created_at: Optional[datetime] = None
