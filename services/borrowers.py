from __future__ import annotations

import logging

from models import BorrowerProfile
from schemas.borrower import BorrowerProfileCreate
from services.errors import NotFound
from services.stores import BorrowerStore

logger = logging.getLogger(__name__)


class BorrowerProfileService:
    def __init__(self, store: BorrowerStore):
        self.store = store

    async def get_or_create(self, payload: BorrowerProfileCreate) -> tuple[BorrowerProfile, bool]:
        """
        One profile per borrower: look up by user id, then email, before creating.
        Returns (profile, created).
        """
        existing = None
        if payload.user_id:
            existing = await self.store.find_by_user_id(payload.user_id)
        if existing is None:
            existing = await self.store.find_by_email(payload.email)
        if existing is not None:
            return existing, False

        data = payload.model_dump()
        data["employment_status"] = payload.employment_status.value
        profile = await self.store.create(data)
        logger.info("Borrower profile %s created for %s", profile.id, payload.email)
        return profile, True

    async def get(self, borrower_id: str) -> BorrowerProfile:
        return await self.store.get(borrower_id)

    async def get_by_user_id(self, user_id: str) -> BorrowerProfile:
        profile = await self.store.find_by_user_id(user_id)
        if profile is None:
            raise NotFound("Borrower for user", user_id)
        return profile

    async def get_by_email(self, email: str) -> BorrowerProfile:
        profile = await self.store.find_by_email(email)
        if profile is None:
            raise NotFound("Borrower with email", email)
        return profile
