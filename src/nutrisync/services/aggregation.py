"""Build scoring contexts from database rows."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from nutrisync.domain.records import (
    FoodLogRow,
    MealPlanRow,
    ProfileRecord,
    TrainingActivityRow,
)
from nutrisync.domain.scoring import (
    MEAL_TYPES,
    FuelingWindows,
    MacroActuals,
    MacroTargets,
    MealType,
    NutritionContext,
    ScoreFlags,
    ScoringContext,
    TrainingContext,
    TrainingLoad,
    TrainingSession,
    WindowState,
)
from nutrisync.services.scoring import determine_training_load, round_half_up

PRE_CARBS_PER_KG = 1.5
POST_CARBS_PER_KG = 1.0
POST_PROTEIN_PER_KG = 0.3
LONG_DAY_DURING_CARBS_PER_HOUR = 60
FAT_MIN_KCAL_SHARE = 0.2
KCAL_PER_G_CARBS = 4
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_FAT = 9
SINGLE_MEAL_SHARE = 0.6
BIG_DEFICIT_SHARE = 0.75

PRE_WINDOW_START = timedelta(hours=4)
PRE_WINDOW_END = timedelta(hours=1)
POST_WINDOW = timedelta(minutes=90)

HARD_LOADS = {"long", "quality"}


@dataclass(frozen=True)
class DayInputs:
    """Rows gathered for one user and day."""

    profile: ProfileRecord | None
    plans: list[MealPlanRow]
    logs: list[FoodLogRow]
    activities: list[TrainingActivityRow]
    streak_days: int = 0


@dataclass(frozen=True)
class WindowIntake:
    """Carbs and protein logged inside one fueling window."""

    logged: bool
    carbs_g: float
    protein_g: float


def sum_meal_plan_targets(plans: list[MealPlanRow]) -> MacroTargets:
    """Sum planned macros across the day's meals."""
    return MacroTargets(
        calories=sum(plan.calories for plan in plans),
        protein=sum(plan.protein_g for plan in plans),
        carbs=sum(plan.carbs_g for plan in plans),
        fat=sum(plan.fat_g for plan in plans),
    )


def sum_food_log_actuals(logs: list[FoodLogRow]) -> MacroActuals:
    """Sum consumed macros across the day's food logs."""
    return MacroActuals(
        calories=sum(log.calories for log in logs),
        protein=sum(log.protein_g for log in logs),
        carbs=sum(log.carbs_g for log in logs),
        fat=sum(log.fat_g for log in logs),
    )


def fueling_targets(
    base: MacroTargets, weight_kg: float, load: TrainingLoad
) -> MacroTargets:
    """Add body-weight based fueling-window targets and the fat floor."""
    planned_kcal = (
        base.carbs * KCAL_PER_G_CARBS
        + base.protein * KCAL_PER_G_PROTEIN
        + base.fat * KCAL_PER_G_FAT
    )
    return MacroTargets(
        calories=base.calories,
        protein=base.protein,
        carbs=base.carbs,
        fat=base.fat,
        pre_carbs=round_half_up(weight_kg * PRE_CARBS_PER_KG),
        during_carbs_per_hour=(
            LONG_DAY_DURING_CARBS_PER_HOUR if load == "long" else 0
        ),
        post_carbs=round_half_up(weight_kg * POST_CARBS_PER_KG),
        post_protein=round_half_up(weight_kg * POST_PROTEIN_PER_KG),
        fat_min=round_half_up(planned_kcal * FAT_MIN_KCAL_SHARE / KCAL_PER_G_FAT),
    )


def meals_present(logs: list[FoodLogRow]) -> tuple[MealType, ...]:
    """Return the distinct known meal types that were logged."""
    logged = {log.meal_type for log in logs}
    return tuple(meal for meal in MEAL_TYPES if meal in logged)


def single_meal_over_share(
    logs: list[FoodLogRow], share: float = SINGLE_MEAL_SHARE
) -> bool:
    """Return True when one meal holds more than `share` of the day's calories."""
    total = sum(log.calories for log in logs)
    if total <= 0:
        return False
    per_meal: dict[str, float] = {}
    for log in logs:
        key = log.meal_type or "unspecified"
        per_meal[key] = per_meal.get(key, 0.0) + log.calories
    return max(per_meal.values()) / total > share


def window_intake(
    logs: list[FoodLogRow], start: datetime, end: datetime
) -> WindowIntake:
    """Sum the food logged within [start, end]."""
    inside = [log for log in logs if start <= _as_utc(log.logged_at) <= end]
    return WindowIntake(
        logged=bool(inside),
        carbs_g=sum(log.carbs_g for log in inside),
        protein_g=sum(log.protein_g for log in inside),
    )


def build_scoring_context(inputs: DayInputs, default_weight_kg: float) -> ScoringContext:
    """Assemble a scoring context from one day's rows."""
    load = determine_training_load(inputs.activities)
    weight = (
        inputs.profile.weight_kg
        if inputs.profile and inputs.profile.weight_kg
        else default_weight_kg
    )
    planned = sum_meal_plan_targets(inputs.plans)
    target = fueling_targets(planned, weight, load)
    consumed = sum_food_log_actuals(inputs.logs)
    windows, actual = _infer_windows(inputs.logs, inputs.activities, load, consumed)

    nutrition = NutritionContext(
        target=target,
        actual=actual,
        windows=windows,
        meals_present=meals_present(inputs.logs),
        single_meal_over_60pct=single_meal_over_share(inputs.logs),
    )
    training = _training_context(inputs.activities)
    applicable = [
        window
        for window in (windows.pre, windows.during, windows.post)
        if window.applicable
    ]
    flags = ScoreFlags(
        window_sync_all=bool(applicable)
        and all(window.in_window for window in applicable),
        streak_days=inputs.streak_days,
        hydration_ok=False,
        big_deficit=planned.calories > 0
        and consumed.calories < planned.calories * BIG_DEFICIT_SHARE,
        is_hard_day=load in HARD_LOADS,
        missed_post_window=windows.post.applicable and not windows.post.in_window,
    )
    return ScoringContext(
        load=load, nutrition=nutrition, training=training, flags=flags
    )


def _infer_windows(
    logs: list[FoodLogRow],
    activities: list[TrainingActivityRow],
    load: TrainingLoad,
    consumed: MacroActuals,
) -> tuple[FuelingWindows, MacroActuals]:
    starts = [
        (_as_utc(activity.start_time), activity.duration_minutes)
        for activity in activities
        if activity.start_time is not None
    ]
    if load == "rest" or not starts:
        return FuelingWindows(), consumed

    first_start = min(start for start, _ in starts)
    last_end = max(start + timedelta(minutes=minutes) for start, minutes in starts)
    pre = window_intake(logs, first_start - PRE_WINDOW_START, first_start - PRE_WINDOW_END)
    during = window_intake(logs, first_start, last_end)
    post = window_intake(logs, last_end, last_end + POST_WINDOW)
    hours = (last_end - first_start).total_seconds() / 3600
    during_rate = during.carbs_g / hours if hours > 0 else 0.0

    windows = FuelingWindows(
        pre=WindowState(applicable=True, in_window=pre.logged),
        during=WindowState(applicable=load == "long", in_window=during.logged),
        post=WindowState(applicable=True, in_window=post.logged),
    )
    actual = MacroActuals(
        calories=consumed.calories,
        protein=consumed.protein,
        carbs=consumed.carbs,
        fat=consumed.fat,
        pre_carbs=pre.carbs_g,
        during_carbs_per_hour=during_rate,
        post_carbs=post.carbs_g,
        post_protein=post.protein_g,
    )
    return windows, actual


def _training_context(activities: list[TrainingActivityRow]) -> TrainingContext:
    if not activities:
        return TrainingContext(type_family_match=True)
    duration = sum(activity.duration_minutes for activity in activities)
    first = activities[0]
    avg_hr = next(
        (activity.avg_heart_rate for activity in activities if activity.avg_heart_rate),
        None,
    )
    plan = TrainingSession(
        duration_min=duration, type=first.activity_type, intensity=first.intensity
    )
    actual = TrainingSession(
        duration_min=duration, type=first.activity_type, avg_hr=avg_hr
    )
    return TrainingContext(plan=plan, actual=actual, type_family_match=True)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
