"""Supabase repository for score inputs and persisted scores."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from nutrisync.domain.records import (
    DailyScoreRecord,
    FoodLogRow,
    MealPlanRow,
    ProfileRecord,
    TrainingActivityRow,
)
from nutrisync.services.scores import ScoreRepository

_SCORE_COLUMNS = (
    "user_id, date, daily_score, calories_consumed, protein_grams, carbs_grams, "
    "fat_grams, meals_logged, planned_calories, planned_protein_grams, "
    "planned_carbs_grams, planned_fat_grams"
)


@dataclass
class SupabaseScoreRepository(ScoreRepository):
    """Supabase implementation for scoring queries."""

    client: Client

    def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        """Return the user's weight, if a profile exists."""
        response = (
            self.client.table("profiles")
            .select("user_id, weight_kg")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        weight = row.get("weight_kg")
        return ProfileRecord(
            user_id=user_id,
            weight_kg=float(weight) if weight is not None else None,
        )

    def list_meal_plans(self, user_id: UUID, day: date) -> list[MealPlanRow]:
        """Return planned meals for a day."""
        response = (
            self.client.table("daily_meal_plans")
            .select(
                "meal_type, recommended_calories, recommended_protein_grams, "
                "recommended_carbs_grams, recommended_fat_grams"
            )
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .execute()
        )
        return [
            MealPlanRow(
                meal_type=str(row.get("meal_type") or ""),
                calories=_float(row.get("recommended_calories")),
                protein_g=_float(row.get("recommended_protein_grams")),
                carbs_g=_float(row.get("recommended_carbs_grams")),
                fat_g=_float(row.get("recommended_fat_grams")),
            )
            for row in response.data or []
        ]

    def list_food_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodLogRow]:
        """Return food logs in [start, end)."""
        response = (
            self.client.table("food_logs")
            .select(
                "meal_type, calories, protein_grams, carbs_grams, fat_grams, logged_at"
            )
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [
            FoodLogRow(
                meal_type=row.get("meal_type"),
                logged_at=_parse_datetime(row.get("logged_at")) or start,
                calories=_float(row.get("calories")),
                protein_g=_float(row.get("protein_grams")),
                carbs_g=_float(row.get("carbs_grams")),
                fat_g=_float(row.get("fat_grams")),
            )
            for row in response.data or []
        ]

    def list_training_activities(
        self, user_id: UUID, day: date
    ) -> list[TrainingActivityRow]:
        """Return training activities for a day, earliest first."""
        response = (
            self.client.table("training_activities")
            .select(
                "activity_type, duration_minutes, intensity, start_time, avg_heart_rate"
            )
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .order("start_time", desc=False)
            .execute()
        )
        return [
            TrainingActivityRow(
                activity_type=row.get("activity_type"),
                duration_minutes=_float(row.get("duration_minutes")),
                intensity=row.get("intensity"),
                start_time=_parse_datetime(row.get("start_time")),
                avg_heart_rate=(
                    _float(row["avg_heart_rate"])
                    if row.get("avg_heart_rate") is not None
                    else None
                ),
            )
            for row in response.data or []
        ]

    def upsert_daily_score(self, record: DailyScoreRecord) -> None:
        """Insert or replace the score row keyed on (user_id, date)."""
        response = (
            self.client.table("nutrition_scores")
            .upsert(
                {
                    "user_id": str(record.user_id),
                    "date": record.day.isoformat(),
                    "daily_score": record.daily_score,
                    "calories_consumed": record.calories_consumed,
                    "protein_grams": record.protein_g,
                    "carbs_grams": record.carbs_g,
                    "fat_grams": record.fat_g,
                    "meals_logged": record.meals_logged,
                    "planned_calories": record.planned_calories,
                    "planned_protein_grams": record.planned_protein_g,
                    "planned_carbs_grams": record.planned_carbs_g,
                    "planned_fat_grams": record.planned_fat_g,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id,date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert nutrition score")

    def list_daily_scores(
        self, user_id: UUID, start: date, end: date
    ) -> list[DailyScoreRecord]:
        """Return a user's scores between start and end inclusive."""
        response = (
            self.client.table("nutrition_scores")
            .select(_SCORE_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_score(row) for row in response.data or []]

    def list_all_daily_scores(self, start: date, end: date) -> list[DailyScoreRecord]:
        """Return all users' scores between start and end inclusive."""
        response = (
            self.client.table("nutrition_scores")
            .select(_SCORE_COLUMNS)
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_score(row) for row in response.data or []]


def _float(value: object) -> float:
    if value is None:
        return 0.0
    return float(value)  # type: ignore[arg-type]


def _parse_datetime(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    # Postgres may return a trailing "Z", which older fromisoformat rejects.
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def _parse_score(row: dict[str, object]) -> DailyScoreRecord:
    return DailyScoreRecord(
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["date"])),
        daily_score=int(_float(row.get("daily_score"))),
        calories_consumed=_float(row.get("calories_consumed")),
        protein_g=_float(row.get("protein_grams")),
        carbs_g=_float(row.get("carbs_grams")),
        fat_g=_float(row.get("fat_grams")),
        meals_logged=int(_float(row.get("meals_logged"))),
        planned_calories=_float(row.get("planned_calories")),
        planned_protein_g=_float(row.get("planned_protein_grams")),
        planned_carbs_g=_float(row.get("planned_carbs_grams")),
        planned_fat_g=_float(row.get("planned_fat_grams")),
    )
