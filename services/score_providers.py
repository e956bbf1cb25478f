"""
Score providers: where a LoanScore comes from.

Providers raise on failure (``ServiceUnavailable`` for outages, anything else
for bugs); ``ScoringIntegration`` is the layer that turns failures into the
degraded result.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError as SchemaValidationError

from schemas.score import LoanScore
from services.errors import ServiceUnavailable
from services.lifecycle import utcnow
from services.score_calculator import calculate_score
from services.stores import ApplicationStore, BorrowerStore


class ScoreProvider(Protocol):
    name: str

    async def get(self, application_id: str) -> LoanScore: ...

    async def ping(self) -> bool: ...


class HttpScoreProvider:
    """Client for the external scoring service (GET {base}/scores/{applicationId})."""

    name = "http"

    def __init__(self, base_url: str, timeout_s: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client

    async def _request(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return await self._client.get(url, timeout=self.timeout_s)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await client.get(url)

    async def get(self, application_id: str) -> LoanScore:
        try:
            r = await self._request(f"/scores/{application_id}")
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ServiceUnavailable(f"scoring service request failed: {e}") from e
        if not isinstance(data, dict):
            raise ServiceUnavailable("malformed score payload")
        if data.get("serviceAvailable") is False:
            raise ServiceUnavailable(data.get("notes") or "scoring service reported itself unavailable")
        try:
            score = LoanScore.model_validate(data)
        except SchemaValidationError as e:
            raise ServiceUnavailable(f"malformed score payload: {e.error_count()} error(s)") from e
        if score.application_id != application_id:
            raise ServiceUnavailable(f"score payload is for {score.application_id}, not {application_id}")
        return score

    async def ping(self) -> bool:
        try:
            r = await self._request("/health")
        except httpx.HTTPError:
            return False
        return r.is_success


class LocalScoreProvider:
    """
    In-process reference scorer reading the application and borrower from the stores.
    Store access is serialized because the stores share one AsyncSession, which
    does not allow concurrent operations.
    """

    name = "local"

    def __init__(self, applications: ApplicationStore, borrowers: BorrowerStore, clock=utcnow):
        self.applications = applications
        self.borrowers = borrowers
        self.clock = clock
        self._lock = asyncio.Lock()

    async def get(self, application_id: str) -> LoanScore:
        async with self._lock:
            application = await self.applications.get(application_id)
            borrower = await self.borrowers.get(application.borrower_id)
        return calculate_score(application, borrower, self.clock())

    async def ping(self) -> bool:
        return True
