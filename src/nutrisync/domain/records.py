"""Domain models for rows read from and written to the database."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class ProfileRecord:
    """Body metrics used to derive fueling targets."""

    user_id: UUID
    weight_kg: float | None


@dataclass(frozen=True)
class MealPlanRow:
    """Recommended macros for one planned meal."""

    meal_type: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class FoodLogRow:
    """A logged food entry."""

    meal_type: str | None
    logged_at: datetime
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class TrainingActivityRow:
    """A completed training activity."""

    activity_type: str | None
    duration_minutes: float
    intensity: str | None
    start_time: datetime | None
    avg_heart_rate: float | None = None


@dataclass(frozen=True)
class DailyScoreRecord:
    """Persisted daily score with the totals it was computed from."""

    user_id: UUID
    day: date
    daily_score: int
    calories_consumed: float
    protein_g: float
    carbs_g: float
    fat_g: float
    meals_logged: int
    planned_calories: float
    planned_protein_g: float
    planned_carbs_g: float
    planned_fat_g: float
