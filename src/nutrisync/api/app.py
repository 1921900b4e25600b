"""FastAPI application factory."""

import logging
from dataclasses import asdict
from datetime import date
from uuid import UUID

from fastapi import Depends, FastAPI, Request

from nutrisync.api.admin import router as admin_router
from nutrisync.api.dependencies import resolve_timezone
from nutrisync.api.score_models import ScoreRequest
from nutrisync.app_logging import configure_logging
from nutrisync.containers import AppContainer
from nutrisync.domain.scoring import ScoreBreakdown
from nutrisync.services.scores import (
    DailyScoreResult,
    LeaderboardEntry,
    MealScoreSummary,
    WeeklySummary,
)
from nutrisync.services.scoring import calculate_unified_score


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="NutriSync scoring")
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/scores/calculate")
    async def calculate_score(body: ScoreRequest) -> dict[str, object]:
        """Score a fully specified day without touching storage."""
        return _format_breakdown(calculate_unified_score(body.to_context()))

    @app.get("/users/{user_id}/scores/{day}")
    def daily_score(
        user_id: UUID,
        day: date,
        request: Request,
        tz: str = Depends(resolve_timezone),
    ) -> dict[str, object]:
        """Compute, persist and return a user's score for a day."""
        state_container: AppContainer = request.app.state.container
        result = state_container.score_service.get_daily_score(user_id, day, tz)
        logger.info("Daily score served: user=%s day=%s", user_id, day)
        return _format_daily(result)

    @app.get("/users/{user_id}/meal-scores/{day}")
    def meal_scores(
        user_id: UUID,
        day: date,
        request: Request,
        tz: str = Depends(resolve_timezone),
    ) -> dict[str, object]:
        """Return per-meal scores for a day."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.score_service.get_meal_scores(user_id, day, tz)
        return _format_meal_scores(summary)

    @app.get("/users/{user_id}/weekly-score")
    def weekly(
        user_id: UUID, request: Request, week_start: date | None = None
    ) -> dict[str, object]:
        """Return the persisted scores for a week."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.score_service.get_weekly_summary(user_id, week_start)
        return _format_weekly(summary)

    @app.get("/leaderboard/weekly")
    def leaderboard(request: Request, week_start: date | None = None) -> dict[str, object]:
        """Return every user's weekly average, best first."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.score_service.get_leaderboard(week_start)
        return {"scores": [_format_leaderboard_entry(entry) for entry in entries]}

    return app


def _format_breakdown(breakdown: ScoreBreakdown) -> dict[str, object]:
    return {
        "total": breakdown.total,
        "nutrition": {
            key: round(value, 1) for key, value in asdict(breakdown.nutrition).items()
        },
        "training": {
            key: round(value, 1) for key, value in asdict(breakdown.training).items()
        },
        "bonuses": breakdown.bonuses,
        "penalties": breakdown.penalties,
        "weights": asdict(breakdown.weights),
        "data_completeness": asdict(breakdown.data_completeness),
    }


def _format_daily(result: DailyScoreResult) -> dict[str, object]:
    return {
        "date": result.day.isoformat(),
        "score": result.breakdown.total,
        "load": result.context.load,
        "breakdown": _format_breakdown(result.breakdown),
    }


def _format_meal_scores(summary: MealScoreSummary) -> dict[str, object]:
    return {
        "date": summary.day.isoformat(),
        "average": summary.average,
        "scores": [asdict(score) for score in summary.scores],
    }


def _format_weekly(summary: WeeklySummary) -> dict[str, object]:
    return {
        "week_start": summary.week_start.isoformat(),
        "week_end": summary.week_end.isoformat(),
        "average": summary.average,
        "total": summary.total,
        "daily_scores": [
            {"date": entry.day.isoformat(), "score": entry.score}
            for entry in summary.daily
        ],
    }


def _format_leaderboard_entry(entry: LeaderboardEntry) -> dict[str, object]:
    return {
        "user_id": str(entry.user_id),
        "weekly_score": entry.weekly_score,
        "daily_scores": [
            {"date": day.day.isoformat(), "score": day.score} for day in entry.daily
        ],
    }
