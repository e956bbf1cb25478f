"""
Scoring integration: the non-throwing contract around a ScoreProvider.

``get_score`` and ``list_scores`` never raise for downstream trouble. Any
provider failure becomes ``UnavailableScore`` with the same fixed reason, so
callers render one "service down, retry" state instead of branching on error
types. Nothing is cached; every call re-fetches.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from models.enums import RiskLevel, ScoreGrade
from schemas.score import SERVICE_DOWN, LoanScore, ScoreResponse, ServiceStatusResponse
from services.errors import ValidationError
from services.lifecycle import utcnow
from services.score_providers import ScoreProvider

logger = logging.getLogger(__name__)

UNAVAILABLE_REASON = "Loan score service is currently unavailable. Please retry later."


@dataclass(frozen=True)
class AvailableScore:
    score: LoanScore

    available = True

    @property
    def application_id(self) -> str:
        return self.score.application_id

    def to_response(self) -> ScoreResponse:
        return ScoreResponse.model_validate(self.score.model_dump())


@dataclass(frozen=True)
class UnavailableScore:
    application_id: str
    reason: str = UNAVAILABLE_REASON

    available = False

    def to_response(self) -> ScoreResponse:
        return ScoreResponse(
            application_id=self.application_id,
            score_grade=SERVICE_DOWN,
            service_available=False,
            notes=self.reason,
        )


ScoreResult = Union[AvailableScore, UnavailableScore]


class ScoringIntegration:
    def __init__(self, provider: ScoreProvider):
        self.provider = provider

    async def get_score(self, application_id: str) -> ScoreResult:
        try:
            score = await self.provider.get(application_id)
        except Exception as e:  # noqa: BLE001 - every downstream failure degrades
            logger.warning("Score for %s unavailable via %s provider: %s", application_id, self.provider.name, e)
            return UnavailableScore(application_id)
        return AvailableScore(score)

    async def list_scores(self, application_ids: Iterable[str]) -> dict[str, ScoreResult]:
        """
        Fetch every score concurrently and wait for all of them. One failed fetch
        maps to its own UnavailableScore and does not affect the others.
        """
        ids = list(dict.fromkeys(application_ids))
        if not ids:
            return {}
        results = await asyncio.gather(*(self.get_score(app_id) for app_id in ids))
        return dict(zip(ids, results))

    async def service_status(self) -> ServiceStatusResponse:
        try:
            available = await self.provider.ping()
        except Exception as e:  # noqa: BLE001
            logger.warning("Scoring service ping failed: %s", e)
            available = False
        return ServiceStatusResponse(
            available=available,
            provider=self.provider.name,
            checked_at=utcnow(),
            notes=None if available else UNAVAILABLE_REASON,
        )

    async def scores_matching(
        self,
        application_ids: Iterable[str],
        grade: Optional[str] = None,
        risk: Optional[str] = None,
    ) -> list[ScoreResult]:
        """
        Available scores whose grade and/or risk level match. Degraded results
        are dropped because their grade is unknown.
        """
        wanted_grade = _parse(ScoreGrade, grade, "grade")
        wanted_risk = _parse(RiskLevel, risk, "risk")
        results = await self.list_scores(application_ids)
        return [
            r for r in results.values()
            if r.available
            and (wanted_grade is None or r.score.score_grade == wanted_grade)
            and (wanted_risk is None or r.score.risk_assessment == wanted_risk)
        ]


def _parse(enum_cls, value, field):
    if value is None:
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Unknown {field} '{value}'; expected one of {valid}", field=field) from None
