"""Pydantic models for score calculation requests."""

from typing import Literal

from pydantic import BaseModel, Field

from nutrisync.domain.scoring import (
    FuelingWindows,
    MacroActuals,
    MacroTargets,
    NutritionContext,
    ScoreFlags,
    ScoringContext,
    TrainingContext,
    TrainingSession,
    WindowState,
)


class MacroTargetsModel(BaseModel):
    """Planned macros in grams and kcal."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    pre_carbs: float | None = Field(default=None, ge=0)
    during_carbs_per_hour: float | None = Field(default=None, ge=0)
    post_carbs: float | None = Field(default=None, ge=0)
    post_protein: float | None = Field(default=None, ge=0)
    fat_min: float | None = Field(default=None, ge=0)


class MacroActualsModel(BaseModel):
    """Consumed macros in grams and kcal."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    pre_carbs: float | None = Field(default=None, ge=0)
    during_carbs_per_hour: float | None = Field(default=None, ge=0)
    post_carbs: float | None = Field(default=None, ge=0)
    post_protein: float | None = Field(default=None, ge=0)


class WindowModel(BaseModel):
    """Fueling window state."""

    applicable: bool = False
    in_window: bool = False


class WindowsModel(BaseModel):
    """Pre, during and post fueling windows."""

    pre: WindowModel = Field(default_factory=WindowModel)
    during: WindowModel = Field(default_factory=WindowModel)
    post: WindowModel = Field(default_factory=WindowModel)


class NutritionModel(BaseModel):
    """Nutrition inputs."""

    target: MacroTargetsModel
    actual: MacroActualsModel
    windows: WindowsModel = Field(default_factory=WindowsModel)
    meals_present: list[Literal["breakfast", "lunch", "dinner", "snack"]] = Field(
        default_factory=list
    )
    single_meal_over_60pct: bool = False


class TrainingSessionModel(BaseModel):
    """Planned or completed session."""

    duration_min: float | None = Field(default=None, ge=0)
    type: str | None = None
    intensity: str | None = None
    avg_hr: float | None = Field(default=None, ge=0)


class TrainingModel(BaseModel):
    """Training inputs."""

    plan: TrainingSessionModel | None = None
    actual: TrainingSessionModel | None = None
    type_family_match: bool = False
    intensity_ok: bool = False
    intensity_near: bool = False


class FlagsModel(BaseModel):
    """Bonus and penalty modifiers."""

    window_sync_all: bool = False
    streak_days: int = Field(default=0, ge=0)
    hydration_ok: bool = False
    big_deficit: bool = False
    is_hard_day: bool = False
    missed_post_window: bool = False


class ScoreRequest(BaseModel):
    """Request body for a stateless score calculation."""

    load: Literal["rest", "easy", "moderate", "long", "quality"]
    nutrition: NutritionModel
    training: TrainingModel = Field(default_factory=TrainingModel)
    flags: FlagsModel = Field(default_factory=FlagsModel)

    def to_context(self) -> ScoringContext:
        """Convert the request into a domain scoring context."""
        windows = self.nutrition.windows
        return ScoringContext(
            load=self.load,
            nutrition=NutritionContext(
                target=MacroTargets(**self.nutrition.target.model_dump()),
                actual=MacroActuals(**self.nutrition.actual.model_dump()),
                windows=FuelingWindows(
                    pre=WindowState(**windows.pre.model_dump()),
                    during=WindowState(**windows.during.model_dump()),
                    post=WindowState(**windows.post.model_dump()),
                ),
                meals_present=tuple(self.nutrition.meals_present),
                single_meal_over_60pct=self.nutrition.single_meal_over_60pct,
            ),
            training=TrainingContext(
                plan=_session(self.training.plan),
                actual=_session(self.training.actual),
                type_family_match=self.training.type_family_match,
                intensity_ok=self.training.intensity_ok,
                intensity_near=self.training.intensity_near,
            ),
            flags=ScoreFlags(**self.flags.model_dump()),
        )


def _session(model: TrainingSessionModel | None) -> TrainingSession | None:
    if model is None:
        return None
    return TrainingSession(**model.model_dump())
