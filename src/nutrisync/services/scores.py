"""Score service: gathers a day's rows, scores it, and persists the result."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrisync.domain.records import (
    DailyScoreRecord,
    FoodLogRow,
    MealPlanRow,
    ProfileRecord,
    TrainingActivityRow,
)
from nutrisync.domain.scoring import MealScore, ScoreBreakdown, ScoringContext
from nutrisync.services.aggregation import (
    DayInputs,
    build_scoring_context,
    sum_food_log_actuals,
    sum_meal_plan_targets,
)
from nutrisync.services.cache import Cache
from nutrisync.services.scoring import (
    average_positive_scores,
    calculate_meal_scores,
    calculate_unified_score,
    round_half_up,
    weekly_score,
)

STREAK_LOOKBACK_DAYS = 30

_logger = logging.getLogger(__name__)


class ScoreRepository(Protocol):
    """Persistence interface for score inputs and results."""

    def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        """Return the user's body metrics."""

    def list_meal_plans(self, user_id: UUID, day: date) -> list[MealPlanRow]:
        """Return planned meals for a day."""

    def list_food_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodLogRow]:
        """Return food logs in [start, end)."""

    def list_training_activities(
        self, user_id: UUID, day: date
    ) -> list[TrainingActivityRow]:
        """Return training activities for a day."""

    def upsert_daily_score(self, record: DailyScoreRecord) -> None:
        """Insert or replace the score for (user, day)."""

    def list_daily_scores(
        self, user_id: UUID, start: date, end: date
    ) -> list[DailyScoreRecord]:
        """Return a user's persisted scores with start <= day <= end."""

    def list_all_daily_scores(self, start: date, end: date) -> list[DailyScoreRecord]:
        """Return every user's persisted scores with start <= day <= end."""


@dataclass(frozen=True)
class DailyScoreResult:
    """Score for one day and the context it was computed from."""

    day: date
    breakdown: ScoreBreakdown
    context: ScoringContext


@dataclass(frozen=True)
class MealScoreSummary:
    """Per-meal scores with their rounded average."""

    day: date
    scores: list[MealScore]
    average: int


@dataclass(frozen=True)
class DayScore:
    """Persisted score for a single day."""

    day: date
    score: int


@dataclass(frozen=True)
class WeeklySummary:
    """Monday-to-Sunday persisted scores."""

    week_start: date
    week_end: date
    daily: list[DayScore]
    average: int
    total: int


@dataclass(frozen=True)
class LeaderboardEntry:
    """A user's averaged score for a week."""

    user_id: UUID
    weekly_score: int
    daily: list[DayScore]


@dataclass
class ScoreService:
    """Service for computing, storing and reading daily scores."""

    repository: ScoreRepository
    cache: Cache
    default_weight_kg: float = 70.0
    weekly_ttl_seconds: int = 300
    debug: bool = False

    def get_daily_score(
        self, user_id: UUID, day: date, timezone_name: str = "UTC"
    ) -> DailyScoreResult:
        """Score a day, persist it, and return the breakdown."""
        inputs = self._load_day(user_id, day, timezone_name)
        context = build_scoring_context(inputs, self.default_weight_kg)
        breakdown = calculate_unified_score(context)
        if not inputs.logs:
            # Nothing logged: the day scores 0 but keeps its breakdown.
            breakdown = replace(breakdown, total=0)
        self._persist(user_id, day, inputs, breakdown)
        if self.debug:
            _logger.info(
                "Scored day: user=%s day=%s load=%s score=%s nutrition=%.1f "
                "training=%.1f bonuses=%s penalties=%s",
                user_id,
                day,
                context.load,
                breakdown.total,
                breakdown.nutrition.total,
                breakdown.training.total,
                breakdown.bonuses,
                breakdown.penalties,
            )
        return DailyScoreResult(day=day, breakdown=breakdown, context=context)

    def get_meal_scores(
        self, user_id: UUID, day: date, timezone_name: str = "UTC"
    ) -> MealScoreSummary:
        """Score each planned meal against what was logged for it."""
        plans = self.repository.list_meal_plans(user_id, day)
        if not plans:
            return MealScoreSummary(day=day, scores=[], average=0)
        start, end = _day_bounds(day, timezone_name)
        logs = self.repository.list_food_logs(user_id, start, end)
        scores = calculate_meal_scores(plans, logs)
        average = round_half_up(sum(score.score for score in scores) / len(scores))
        return MealScoreSummary(day=day, scores=scores, average=average)

    def get_weekly_summary(
        self, user_id: UUID, week_start: date | None = None
    ) -> WeeklySummary:
        """Return persisted scores for the week containing `week_start`."""
        start = _monday(week_start or datetime.now(tz=UTC).date())
        cache_key = f"weekly:user:{user_id}:{start.isoformat()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, WeeklySummary):
            return cached

        end = start + timedelta(days=6)
        records = self.repository.list_daily_scores(user_id, start, end)
        daily = [DayScore(day=record.day, score=record.daily_score) for record in records]
        values = [entry.score for entry in daily]
        summary = WeeklySummary(
            week_start=start,
            week_end=end,
            daily=daily,
            average=average_positive_scores(values),
            total=weekly_score(values),
        )
        self.cache.set(cache_key, summary, ttl_seconds=self.weekly_ttl_seconds)
        return summary

    def get_leaderboard(self, week_start: date | None = None) -> list[LeaderboardEntry]:
        """Return every user's weekly average, best first."""
        start = _monday(week_start or datetime.now(tz=UTC).date())
        cache_key = f"weekly:leaderboard:{start.isoformat()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        end = start + timedelta(days=6)
        by_user: dict[UUID, list[DayScore]] = {}
        for record in self.repository.list_all_daily_scores(start, end):
            by_user.setdefault(record.user_id, []).append(
                DayScore(day=record.day, score=record.daily_score)
            )
        entries = [
            LeaderboardEntry(
                user_id=user_id,
                weekly_score=average_positive_scores(entry.score for entry in daily),
                daily=sorted(daily, key=lambda entry: entry.day),
            )
            for user_id, daily in by_user.items()
        ]
        entries.sort(key=lambda entry: entry.weekly_score, reverse=True)
        self.cache.set(cache_key, entries, ttl_seconds=self.weekly_ttl_seconds)
        return entries

    def recalculate(
        self,
        user_id: UUID,
        days_back: int,
        today: date | None = None,
        timezone_name: str = "UTC",
    ) -> list[DailyScoreResult]:
        """Rescore each day from `days_back` days ago through today.

        A day that fails is logged and skipped so one bad row does not stop
        the batch.
        """
        end = today or datetime.now(tz=ZoneInfo(timezone_name)).date()
        results = []
        for offset in range(days_back, -1, -1):
            day = end - timedelta(days=offset)
            try:
                results.append(self.get_daily_score(user_id, day, timezone_name))
            except Exception:
                _logger.exception(
                    "Score recalculation failed: user=%s day=%s", user_id, day
                )
        _logger.info(
            "Recalculated scores: user=%s days=%s succeeded=%s",
            user_id,
            days_back + 1,
            len(results),
        )
        return results

    def _load_day(self, user_id: UUID, day: date, timezone_name: str) -> DayInputs:
        start, end = _day_bounds(day, timezone_name)
        return DayInputs(
            profile=self.repository.get_profile(user_id),
            plans=self.repository.list_meal_plans(user_id, day),
            logs=self.repository.list_food_logs(user_id, start, end),
            activities=self.repository.list_training_activities(user_id, day),
            streak_days=self._streak_days(user_id, day),
        )

    def _streak_days(self, user_id: UUID, day: date) -> int:
        """Count consecutive days before `day` with a positive stored score."""
        records = self.repository.list_daily_scores(
            user_id, day - timedelta(days=STREAK_LOOKBACK_DAYS), day - timedelta(days=1)
        )
        scored = {record.day for record in records if record.daily_score > 0}
        streak = 0
        cursor = day - timedelta(days=1)
        while cursor in scored:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    def _persist(
        self, user_id: UUID, day: date, inputs: DayInputs, breakdown: ScoreBreakdown
    ) -> None:
        planned = sum_meal_plan_targets(inputs.plans)
        consumed = sum_food_log_actuals(inputs.logs)
        self.repository.upsert_daily_score(
            DailyScoreRecord(
                user_id=user_id,
                day=day,
                daily_score=breakdown.total,
                calories_consumed=consumed.calories,
                protein_g=consumed.protein,
                carbs_g=consumed.carbs,
                fat_g=consumed.fat,
                meals_logged=len(inputs.logs),
                planned_calories=planned.calories,
                planned_protein_g=planned.protein,
                planned_carbs_g=planned.carbs,
                planned_fat_g=planned.fat,
            )
        )
        self.cache.invalidate_prefix(f"weekly:user:{user_id}:")
        self.cache.invalidate_prefix("weekly:leaderboard:")


def _day_bounds(day: date, timezone_name: str) -> tuple[datetime, datetime]:
    tz = ZoneInfo(timezone_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(UTC), end.astimezone(UTC)


def _monday(day: date) -> date:
    return day - timedelta(days=day.weekday())
