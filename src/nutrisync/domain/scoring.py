"""Domain models for the unified daily score."""

from dataclasses import dataclass, field
from typing import Literal

TrainingLoad = Literal["rest", "easy", "moderate", "long", "quality"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]

TRAINING_LOADS: tuple[TrainingLoad, ...] = ("rest", "easy", "moderate", "long", "quality")
MEAL_TYPES: tuple[MealType, ...] = ("breakfast", "lunch", "dinner", "snack")


@dataclass(frozen=True)
class MacroTargets:
    """Planned macros and fueling-window targets for a day."""

    calories: float
    protein: float
    carbs: float
    fat: float
    pre_carbs: float | None = None
    during_carbs_per_hour: float | None = None
    post_carbs: float | None = None
    post_protein: float | None = None
    fat_min: float | None = None


@dataclass(frozen=True)
class MacroActuals:
    """Consumed macros and fueling-window intake for a day."""

    calories: float
    protein: float
    carbs: float
    fat: float
    pre_carbs: float | None = None
    during_carbs_per_hour: float | None = None
    post_carbs: float | None = None
    post_protein: float | None = None


@dataclass(frozen=True)
class WindowState:
    """Whether a fueling window applies and whether intake landed inside it."""

    applicable: bool = False
    in_window: bool = False


@dataclass(frozen=True)
class FuelingWindows:
    """Pre, during and post session fueling windows."""

    pre: WindowState = field(default_factory=WindowState)
    during: WindowState = field(default_factory=WindowState)
    post: WindowState = field(default_factory=WindowState)


@dataclass(frozen=True)
class NutritionContext:
    """Nutrition side of the scoring input."""

    target: MacroTargets
    actual: MacroActuals
    windows: FuelingWindows = field(default_factory=FuelingWindows)
    meals_present: tuple[MealType, ...] = ()
    single_meal_over_60pct: bool = False


@dataclass(frozen=True)
class TrainingSession:
    """A planned or completed training session."""

    duration_min: float | None = None
    type: str | None = None
    intensity: str | None = None
    avg_hr: float | None = None


@dataclass(frozen=True)
class TrainingContext:
    """Training side of the scoring input."""

    plan: TrainingSession | None = None
    actual: TrainingSession | None = None
    type_family_match: bool = False
    intensity_ok: bool = False
    intensity_near: bool = False


@dataclass(frozen=True)
class ScoreFlags:
    """Modifiers that add bonuses or penalties."""

    window_sync_all: bool = False
    streak_days: int = 0
    hydration_ok: bool = False
    big_deficit: bool = False
    is_hard_day: bool = False
    missed_post_window: bool = False


@dataclass(frozen=True)
class ScoringContext:
    """Everything needed to score one day."""

    load: TrainingLoad
    nutrition: NutritionContext
    training: TrainingContext = field(default_factory=TrainingContext)
    flags: ScoreFlags = field(default_factory=ScoreFlags)


@dataclass(frozen=True)
class LoadWeights:
    """Relative weight of nutrition and training for a load."""

    nutrition: float
    training: float


@dataclass(frozen=True)
class NutritionBreakdown:
    """Nutrition component scores."""

    total: float
    macros: float
    timing: float
    structure: float


@dataclass(frozen=True)
class TrainingBreakdown:
    """Training component scores."""

    total: float
    completion: float
    type_match: float
    intensity: float


@dataclass(frozen=True)
class DataCompleteness:
    """Report on which inputs were available when scoring."""

    has_meal_plan: bool
    has_food_logs: bool
    meals_logged: int
    reliable: bool
    missing_data: list[str]


@dataclass(frozen=True)
class ScoreBreakdown:
    """Final score with its components."""

    total: int
    nutrition: NutritionBreakdown
    training: TrainingBreakdown
    bonuses: int
    penalties: int
    weights: LoadWeights
    data_completeness: DataCompleteness


@dataclass(frozen=True)
class MealScore:
    """Score for a single planned meal compared to what was logged."""

    meal_type: MealType
    score: int
    calories: int
    protein: int
    carbs: int
    fat: int
