"""
Stores over the async SQLAlchemy session.

The lifecycles only ever talk to these classes. Every database error is
re-raised as ``StoreFailure`` so callers see one failure kind per store
call; unknown ids become ``NotFound``.
"""
from __future__ import annotations

import functools
import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import BorrowerProfile, Document, LoanApplication
from services.errors import NotFound, StoreFailure

logger = logging.getLogger(__name__)

M = TypeVar("M")


def _guarded(method):
    """Translate SQLAlchemy errors raised inside a store method into StoreFailure."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("%s store call %s failed: %s", self.kind, method.__name__, e)
            raise StoreFailure(f"{self.kind} store unavailable") from e

    return wrapper


@dataclass(frozen=True)
class StatusChange:
    new_status: str
    updated_by: str
    at: datetime
    # Status the caller validated against; the write only lands if it still holds
    expected_status: str
    rejection_reason: Optional[str] = None


class SqlStore(Generic[M]):
    model: Any = None
    kind: str = "record"
    id_prefix: str = "rec"

    def __init__(self, session: AsyncSession):
        self.session = session

    def new_id(self) -> str:
        return f"{self.id_prefix}-{uuid.uuid4().hex[:12]}"

    @_guarded
    async def find(self, record_id: str) -> Optional[M]:
        result = await self.session.execute(
            select(self.model).where(self.model.id == record_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, record_id: str) -> M:
        record = await self.find(record_id)
        if record is None:
            raise NotFound(self.kind, record_id)
        return record

    @_guarded
    async def create(self, payload: dict[str, Any]) -> M:
        record = self.model(id=payload.pop("id", None) or self.new_id(), **payload)
        self.session.add(record)
        await self.session.flush()
        return record


class StatusStore(SqlStore[M]):
    """Store for entities carrying the status / statusUpdatedBy / rejectionReason quartet."""

    order_column: str = "id"

    def _ordered(self, stmt):
        return stmt.order_by(getattr(self.model, self.order_column).desc(), self.model.id.desc())

    @_guarded
    async def list(self, status: Optional[str] = None, **filters: Any) -> list[M]:
        stmt = select(self.model)
        if status is not None:
            stmt = stmt.where(self.model.status == status)
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.model, column) == value)
        result = await self.session.execute(self._ordered(stmt))
        return list(result.scalars().all())

    @_guarded
    async def count_by_status(self) -> Counter:
        result = await self.session.execute(
            select(self.model.status, func.count()).group_by(self.model.status)
        )
        return Counter({status: n for status, n in result.all()})

    @_guarded
    async def set_status(self, record_id: str, change: StatusChange) -> Optional[M]:
        """
        Compare-and-set the status. Returns the updated record, or None when the
        stored status no longer equals ``change.expected_status``.
        """
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == record_id, self.model.status == change.expected_status)
            .values(
                status=change.new_status,
                status_updated_by=change.updated_by,
                status_updated_at=change.at,
                rejection_reason=change.rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        await self.session.flush()
        return await self.find(record_id)


class ApplicationStore(StatusStore[LoanApplication]):
    model = LoanApplication
    kind = "Loan application"
    id_prefix = "loan"
    order_column = "applied_at"


class DocumentStore(StatusStore[Document]):
    model = Document
    kind = "Document"
    id_prefix = "doc"
    order_column = "uploaded_at"


class BorrowerStore(SqlStore[BorrowerProfile]):
    model = BorrowerProfile
    kind = "Borrower"
    id_prefix = "brw"

    @_guarded
    async def find_by_user_id(self, user_id: str) -> Optional[BorrowerProfile]:
        result = await self.session.execute(select(BorrowerProfile).where(BorrowerProfile.user_id == user_id))
        return result.scalar_one_or_none()

    @_guarded
    async def find_by_email(self, email: str) -> Optional[BorrowerProfile]:
        result = await self.session.execute(
            select(BorrowerProfile).where(func.lower(BorrowerProfile.email) == email.lower())
        )
        return result.scalar_one_or_none()
