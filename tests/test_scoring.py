"""
Scoring integration: degraded results, per-id isolation in batch fetches,
HTTP provider failure mapping, and the reference scorer.
Run from project root: python -m pytest tests/test_scoring.py -v
"""
import asyncio
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import httpx

from models.enums import RiskLevel, ScoreGrade
from schemas.score import LoanScore, ScoreBreakdown
from services.errors import ServiceUnavailable, ValidationError
from services.score_calculator import MAX_TOTAL, calculate_score, grade_for, risk_for
from services.score_providers import HttpScoreProvider, LocalScoreProvider
from services.scoring import UNAVAILABLE_REASON, AvailableScore, ScoringIntegration, UnavailableScore

from support import DatabaseTestCase

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _score(application_id: str, total: int = 720) -> LoanScore:
    return LoanScore(
        application_id=application_id,
        borrower_id="brw-1",
        total_score=total,
        score_grade=grade_for(total),
        risk_assessment=risk_for(grade_for(total)),
        score_breakdown=ScoreBreakdown(
            employment=350, income=200, loan_to_value=110, debt_to_income=40, employment_years=20
        ),
        calculated_at=NOW,
    )


class FakeProvider:
    name = "fake"

    def __init__(self, failing=(), error=ServiceUnavailable("down")):
        self.failing = set(failing)
        self.error = error
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, application_id):
        self.calls.append(application_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if application_id in self.failing:
                raise self.error
            return _score(application_id)
        finally:
            self.in_flight -= 1

    async def ping(self):
        raise ConnectionError("refused")


class TestScoringIntegration(unittest.IsolatedAsyncioTestCase):
    async def test_outage_becomes_degraded_result(self):
        scoring = ScoringIntegration(FakeProvider(failing={"A"}))
        result = await scoring.get_score("A")
        self.assertIsInstance(result, UnavailableScore)
        self.assertFalse(result.available)
        self.assertEqual(result.reason, UNAVAILABLE_REASON)

        wire = result.to_response().model_dump(by_alias=True)
        self.assertEqual(wire["scoreGrade"], "SERVICE_DOWN")
        self.assertFalse(wire["serviceAvailable"])
        self.assertEqual(wire["notes"], UNAVAILABLE_REASON)

    async def test_any_exception_degrades_identically(self):
        timeout = await ScoringIntegration(FakeProvider(failing={"A"}, error=TimeoutError())).get_score("A")
        bug = await ScoringIntegration(FakeProvider(failing={"A"}, error=KeyError("x"))).get_score("A")
        self.assertEqual(timeout, bug)

    async def test_list_scores_isolates_failures(self):
        provider = FakeProvider(failing={"B"})
        results = await ScoringIntegration(provider).list_scores(["A", "B", "C"])
        self.assertEqual(list(results), ["A", "B", "C"])
        self.assertIsInstance(results["A"], AvailableScore)
        self.assertIsInstance(results["B"], UnavailableScore)
        self.assertIsInstance(results["C"], AvailableScore)
        self.assertEqual(results["C"].score.total_score, 720)

    async def test_list_scores_runs_concurrently_and_dedupes(self):
        provider = FakeProvider()
        results = await ScoringIntegration(provider).list_scores(["A", "B", "A", "C"])
        self.assertEqual(sorted(provider.calls), ["A", "B", "C"])
        self.assertEqual(provider.max_in_flight, 3)
        self.assertEqual(len(results), 3)

    async def test_everything_down(self):
        results = await ScoringIntegration(FakeProvider(failing={"A", "B"})).list_scores(["A", "B"])
        self.assertTrue(all(not r.available for r in results.values()))

    async def test_empty_batch(self):
        self.assertEqual(await ScoringIntegration(FakeProvider()).list_scores([]), {})

    async def test_scores_matching_grade_and_risk(self):
        scoring = ScoringIntegration(FakeProvider(failing={"B"}))
        good = await scoring.scores_matching(["A", "B", "C"], grade="good")
        self.assertEqual([r.application_id for r in good], ["A", "C"])
        self.assertEqual(await scoring.scores_matching(["A"], risk="HIGH"), [])
        with self.assertRaises(ValidationError):
            await scoring.scores_matching(["A"], grade="SUPERB")

    async def test_service_status_when_ping_fails(self):
        status = await ScoringIntegration(FakeProvider()).service_status()
        self.assertFalse(status.available)
        self.assertEqual(status.provider, "fake")


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpScoreProvider(unittest.IsolatedAsyncioTestCase):
    async def test_parses_camel_case_payload(self):
        def handler(request):
            self.assertEqual(request.url.path, "/scores/loan-1")
            return httpx.Response(200, json=_score("loan-1").model_dump(mode="json", by_alias=True))

        async with _client(handler) as client:
            score = await HttpScoreProvider("http://scoring", client=client).get("loan-1")
        self.assertEqual(score.total_score, 720)
        self.assertEqual(score.score_grade, ScoreGrade.GOOD)

    async def test_failures_raise_service_unavailable(self):
        def server_error(request):
            return httpx.Response(503, json={"detail": "maintenance"})

        def refused(request):
            raise httpx.ConnectError("refused", request=request)

        def garbage(request):
            return httpx.Response(200, content=b"<html>")

        def self_reported(request):
            return httpx.Response(200, json={"serviceAvailable": False, "notes": "model reloading"})

        def wrong_shape(request):
            return httpx.Response(200, json={"totalScore": 4000})

        for handler in (server_error, refused, garbage, self_reported, wrong_shape):
            with self.subTest(handler=handler.__name__):
                async with _client(handler) as client:
                    with self.assertRaises(ServiceUnavailable):
                        await HttpScoreProvider("http://scoring", client=client).get("loan-1")

    async def test_score_for_another_application_is_refused(self):
        def handler(request):
            return httpx.Response(200, json=_score("loan-2").model_dump(mode="json", by_alias=True))

        async with _client(handler) as client:
            provider = HttpScoreProvider("http://scoring", client=client)
            with self.assertRaises(ServiceUnavailable):
                await provider.get("loan-1")
            results = await ScoringIntegration(provider).list_scores(["loan-1"])
        self.assertEqual(results, {"loan-1": UnavailableScore("loan-1")})

    async def test_integration_over_http_outage(self):
        def refused(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async with _client(refused) as client:
            scoring = ScoringIntegration(HttpScoreProvider("http://scoring", client=client))
            results = await scoring.list_scores(["loan-1", "loan-2"])
            status = await scoring.service_status()
        self.assertEqual(results["loan-1"], UnavailableScore("loan-1"))
        self.assertFalse(status.available)


class TestReferenceScorer(unittest.TestCase):
    def _app(self, amount="50000", rate="6.5", term=36):
        return SimpleNamespace(
            id="loan-1", borrower_id="brw-1", loan_amount=Decimal(amount),
            interest_rate=Decimal(rate), loan_term_months=term,
        )

    def _borrower(self, income="96000", status="EMPLOYED", years=7):
        return SimpleNamespace(
            annual_income=Decimal(income) if income else None, employment_status=status, employment_years=years
        )

    def test_breakdown_and_grade(self):
        score = calculate_score(self._app(), self._borrower(), NOW)
        b = score.score_breakdown
        # payment 1532.45 vs monthly income 8000 -> dti 0.19
        self.assertEqual(
            (b.employment, b.income, b.loan_to_value, b.debt_to_income, b.employment_years, b.loan_term),
            (350, 200, 160, 120, 35, 10),
        )
        self.assertEqual(score.total_score, 875)
        self.assertEqual(score.score_grade, ScoreGrade.EXCELLENT)
        self.assertEqual(score.risk_assessment, RiskLevel.LOW)

    def test_total_is_clamped(self):
        score = calculate_score(
            self._app(amount="5000", term=12), self._borrower(income="250000", years=20), NOW
        )
        self.assertEqual(score.total_score, MAX_TOTAL)

    def test_no_income(self):
        score = calculate_score(self._app(), self._borrower(income=None, status="UNEMPLOYED", years=0), NOW)
        self.assertEqual(score.score_grade, ScoreGrade.POOR)
        self.assertEqual(score.risk_assessment, RiskLevel.HIGH)
        self.assertIsNotNone(score.notes)

    def test_grade_floors(self):
        self.assertEqual(grade_for(800), ScoreGrade.EXCELLENT)
        self.assertEqual(grade_for(650), ScoreGrade.GOOD)
        self.assertEqual(grade_for(500), ScoreGrade.FAIR)
        self.assertEqual(grade_for(499), ScoreGrade.POOR)
        self.assertEqual(risk_for(ScoreGrade.FAIR), RiskLevel.MEDIUM)


class TestLocalScoreProvider(DatabaseTestCase):
    async def test_scores_stored_applications(self):
        app = await self.submit()
        scoring = ScoringIntegration(LocalScoreProvider(self.application_store, self.borrower_store))
        results = await scoring.list_scores([app.id, "loan-missing"])
        self.assertEqual(results[app.id].score.total_score, 875)
        self.assertEqual(results[app.id].score.borrower_id, self.borrower.id)
        self.assertIsInstance(results["loan-missing"], UnavailableScore)
        self.assertTrue((await scoring.service_status()).available)


if __name__ == "__main__":
    unittest.main()
