"""Unified daily score calculation.

The score combines nutrition (macro accuracy, fueling-window timing, meal
structure) and training (completion, type match, intensity) into a single
0-100 value. The two halves are weighted by the day's training load, then
capped bonuses and penalties are applied.

Everything in this module is pure: no I/O, no clock, no randomness.
"""

import math
from collections.abc import Iterable, Sequence

from nutrisync.domain.records import FoodLogRow, MealPlanRow, TrainingActivityRow
from nutrisync.domain.scoring import (
    DataCompleteness,
    FuelingWindows,
    LoadWeights,
    MacroActuals,
    MacroTargets,
    MealScore,
    NutritionBreakdown,
    NutritionContext,
    ScoreBreakdown,
    ScoreFlags,
    ScoringContext,
    TrainingBreakdown,
    TrainingContext,
    TrainingLoad,
)

LOAD_WEIGHTS: dict[str, LoadWeights] = {
    "rest": LoadWeights(nutrition=1.0, training=0.0),
    "easy": LoadWeights(nutrition=0.7, training=0.3),
    "moderate": LoadWeights(nutrition=0.6, training=0.4),
    "long": LoadWeights(nutrition=0.55, training=0.45),
    "quality": LoadWeights(nutrition=0.6, training=0.4),
}

MACRO_WEIGHTS = {"carbs": 0.5, "protein": 0.3, "fat": 0.2}
NUTRITION_WEIGHTS = {"macros": 0.50, "timing": 0.35, "structure": 0.15}
TIMING_WEIGHTS = {"pre": 0.4, "during": 0.4, "post": 0.2}

WINDOW_TARGET_SHARE = 0.8
DURING_TOLERANCE_G_PER_HOUR = 10
DURING_FAIL_G_PER_HOUR = 30
MEAL_POINTS = 25
SINGLE_MEAL_STRUCTURE_CAP = 70

TYPE_MATCH_WEIGHT = 0.25
HEART_RATE_INTENSITY_WEIGHT = 0.15
BASE_COMPLETION_WEIGHT = 0.60

MAX_BONUS = 10
MAX_PENALTY = -15
LONG_SESSION_MINUTES = 90
HIGH_INTENSITY = "high"
MODERATE_LOAD_MINUTES = 60

WEEK_DAYS = 7
MIN_SCORE = 0
MAX_SCORE = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    """Round a raw score and clamp it to 0-100."""
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


def weights_for_load(load: TrainingLoad) -> LoadWeights:
    """Return nutrition and training weights for a training load."""
    try:
        return LOAD_WEIGHTS[load]
    except KeyError:
        raise ValueError(f"Unknown training load: {load!r}") from None


def piecewise_error_score(error: float) -> int:
    """Map an absolute relative error to 100/60/20/0."""
    if error <= 0.05:
        return 100
    if error <= 0.10:
        return 60
    if error <= 0.20:
        return 20
    return 0


def macro_accuracy_score(actual: float, target: float) -> int:
    """Score one macro against its target; a missing target counts as exact."""
    error = abs(actual - target) / target if target > 0 else 0.0
    return piecewise_error_score(error)


def macros_score(target: MacroTargets, actual: MacroActuals) -> float:
    """Weighted carbs/protein/fat score with the minimum-fat floor."""
    fat_min = target.fat_min
    if fat_min is None:
        fat_min = round_half_up(target.fat * 0.2)
    carbs = macro_accuracy_score(actual.carbs, target.carbs)
    protein = macro_accuracy_score(actual.protein, target.protein)
    fat = 0 if actual.fat < fat_min else macro_accuracy_score(actual.fat, target.fat)
    return (
        carbs * MACRO_WEIGHTS["carbs"]
        + protein * MACRO_WEIGHTS["protein"]
        + fat * MACRO_WEIGHTS["fat"]
    )


def timing_score(
    target: MacroTargets, actual: MacroActuals, windows: FuelingWindows
) -> float:
    """Score fueling-window timing; windows that don't apply score 100."""
    pre = 100
    if windows.pre.applicable:
        need = (target.pre_carbs or 0) * WINDOW_TARGET_SHARE
        got = actual.pre_carbs or 0
        pre = 100 if windows.pre.in_window and got >= need and need > 0 else 0

    during = 100
    if windows.during.applicable:
        during = _during_score(
            target.during_carbs_per_hour or 0, actual.during_carbs_per_hour or 0
        )

    post = 100
    if windows.post.applicable:
        need_carbs = (target.post_carbs or 0) * WINDOW_TARGET_SHARE
        need_protein = (target.post_protein or 0) * WINDOW_TARGET_SHARE
        met = (
            windows.post.in_window
            and (actual.post_carbs or 0) >= need_carbs
            and (actual.post_protein or 0) >= need_protein
            and need_carbs + need_protein > 0
        )
        post = 100 if met else 0

    return (
        pre * TIMING_WEIGHTS["pre"]
        + during * TIMING_WEIGHTS["during"]
        + post * TIMING_WEIGHTS["post"]
    )


def _during_score(need: float, got: float) -> int:
    if need <= 0:
        return 100
    delta = abs(got - need)
    if delta >= DURING_FAIL_G_PER_HOUR:
        return 0
    if delta <= DURING_TOLERANCE_G_PER_HOUR:
        return 100
    span = DURING_FAIL_G_PER_HOUR - DURING_TOLERANCE_G_PER_HOUR
    return round_half_up(100 * (1 - (delta - DURING_TOLERANCE_G_PER_HOUR) / span))


def structure_score(nutrition: NutritionContext, load: TrainingLoad) -> int:
    """Score meal structure; a snack only counts when the day needs one."""
    needs_snack = nutrition.windows.during.applicable or load != "rest"
    meals = set(nutrition.meals_present)
    score = sum(MEAL_POINTS for meal in ("breakfast", "lunch", "dinner") if meal in meals)
    if needs_snack and "snack" in meals:
        score += MEAL_POINTS
    if nutrition.single_meal_over_60pct:
        score = min(score, SINGLE_MEAL_STRUCTURE_CAP)
    return score


def nutrition_breakdown(
    nutrition: NutritionContext, load: TrainingLoad
) -> NutritionBreakdown:
    """Compute the nutrition half of the score."""
    macros = macros_score(nutrition.target, nutrition.actual)
    timing = timing_score(nutrition.target, nutrition.actual, nutrition.windows)
    structure = structure_score(nutrition, load)
    total = (
        macros * NUTRITION_WEIGHTS["macros"]
        + timing * NUTRITION_WEIGHTS["timing"]
        + structure * NUTRITION_WEIGHTS["structure"]
    )
    return NutritionBreakdown(
        total=total, macros=macros, timing=timing, structure=structure
    )


def completion_score(planned_min: float, actual_min: float) -> int:
    """Score how closely the session duration matched the plan."""
    if planned_min <= 0 and actual_min <= 0:
        return 100
    ratio = actual_min / planned_min if planned_min > 0 else 1.0
    if 0.9 <= ratio <= 1.1:
        return 100
    if 0.75 <= ratio <= 1.25:
        return 60
    return 0


def training_breakdown(training: TrainingContext) -> TrainingBreakdown:
    """Compute the training half of the score.

    Intensity only carries weight when the actual session has heart-rate
    data; otherwise its share moves to completion.
    """
    planned = (training.plan.duration_min if training.plan else None) or 0
    actual = (training.actual.duration_min if training.actual else None) or 0
    completion = completion_score(planned, actual)
    type_match = 100 if training.type_family_match else 0
    if training.intensity_ok:
        intensity = 100
    elif training.intensity_near:
        intensity = 60
    else:
        intensity = 0

    has_heart_rate = bool(training.actual and training.actual.avg_hr)
    intensity_weight = HEART_RATE_INTENSITY_WEIGHT if has_heart_rate else 0.0
    completion_weight = BASE_COMPLETION_WEIGHT + (
        HEART_RATE_INTENSITY_WEIGHT - intensity_weight
    )
    total = (
        completion * completion_weight
        + type_match * TYPE_MATCH_WEIGHT
        + intensity * intensity_weight
    )
    return TrainingBreakdown(
        total=total, completion=completion, type_match=type_match, intensity=intensity
    )


def bonus_points(flags: ScoreFlags) -> int:
    """Sum bonuses, capped at +10."""
    bonus = 0
    if flags.window_sync_all:
        bonus += 5
    if flags.streak_days > 0:
        bonus += min(5, flags.streak_days)
    if flags.hydration_ok:
        bonus += 2
    return min(MAX_BONUS, bonus)


def penalty_points(
    flags: ScoreFlags, target: MacroTargets, actual: MacroActuals, actual_min: float
) -> int:
    """Sum penalties (negative), floored at -15."""
    penalty = 0
    if flags.is_hard_day and actual.carbs < target.carbs * WINDOW_TARGET_SHARE:
        penalty -= 5
    if flags.big_deficit and actual_min >= LONG_SESSION_MINUTES:
        penalty -= 10
    if flags.missed_post_window:
        penalty -= 3
    return max(MAX_PENALTY, penalty)


def data_completeness(nutrition: NutritionContext) -> DataCompleteness:
    """Describe which inputs were present; does not affect the score."""
    target = nutrition.target
    has_meal_plan = (
        target.calories > 0 or target.carbs > 0 or target.protein > 0 or target.fat > 0
    )
    meals_logged = len(set(nutrition.meals_present))
    has_food_logs = nutrition.actual.calories > 0 or meals_logged > 0
    missing = []
    if not has_meal_plan:
        missing.append("meal plan")
    if not has_food_logs:
        missing.append("food logs")
    elif meals_logged == 0:
        missing.append("structured meals")
    return DataCompleteness(
        has_meal_plan=has_meal_plan,
        has_food_logs=has_food_logs,
        meals_logged=meals_logged,
        reliable=has_food_logs and meals_logged > 0,
        missing_data=missing,
    )


def calculate_unified_score(context: ScoringContext) -> ScoreBreakdown:
    """Score one day and return every component."""
    weights = weights_for_load(context.load)
    nutrition = nutrition_breakdown(context.nutrition, context.load)
    training = training_breakdown(context.training)
    actual_min = (
        context.training.actual.duration_min if context.training.actual else None
    ) or 0
    bonuses = bonus_points(context.flags)
    penalties = penalty_points(
        context.flags, context.nutrition.target, context.nutrition.actual, actual_min
    )
    raw = (
        nutrition.total * weights.nutrition
        + training.total * weights.training
        + bonuses
        + penalties
    )
    return ScoreBreakdown(
        total=clamp_score(raw),
        nutrition=nutrition,
        training=training,
        bonuses=bonuses,
        penalties=penalties,
        weights=weights,
        data_completeness=data_completeness(context.nutrition),
    )


def daily_score(context: ScoringContext) -> int:
    """Return the 0-100 score for one day."""
    return calculate_unified_score(context).total


def weekly_score(scores: Sequence[float]) -> int:
    """Return the SUM of up to seven clamped daily scores.

    The result is a sum, not an average, even though it is labelled a weekly
    score elsewhere. Kept as-is until the intended meaning is confirmed; use
    `average_positive_scores` for the averaged figure.
    """
    return sum(clamp_score(value) for value in scores[:WEEK_DAYS])


def average_positive_scores(scores: Iterable[float]) -> int:
    """Average the scores above zero, rounded; 0 when none are positive."""
    positive = [value for value in scores if value > 0]
    if not positive:
        return 0
    return round_half_up(sum(positive) / len(positive))


def determine_training_load(activities: Sequence[TrainingActivityRow]) -> TrainingLoad:
    """Classify the day's training load from its activities."""
    if not activities:
        return "rest"
    if any(activity.duration_minutes >= LONG_SESSION_MINUTES for activity in activities):
        return "long"
    if any(activity.intensity == HIGH_INTENSITY for activity in activities):
        return "quality"
    total = sum(activity.duration_minutes for activity in activities)
    if total >= MODERATE_LOAD_MINUTES:
        return "moderate"
    return "easy"


def _meal_macro_score(actual: float, target: float) -> int:
    # A zero target here means the plan is missing, so nothing is rewarded.
    if target <= 0:
        return 0
    return piecewise_error_score(abs(actual - target) / target)


def calculate_meal_scores(
    plans: Sequence[MealPlanRow], logs: Sequence[FoodLogRow]
) -> list[MealScore]:
    """Score each planned meal against the food logged for that meal type."""
    scores = []
    for plan in plans:
        matching = [log for log in logs if log.meal_type == plan.meal_type]
        if not matching:
            scores.append(
                MealScore(
                    meal_type=plan.meal_type,  # type: ignore[arg-type]
                    score=0,
                    calories=0,
                    protein=0,
                    carbs=0,
                    fat=0,
                )
            )
            continue
        calories = _meal_macro_score(sum(log.calories for log in matching), plan.calories)
        protein = _meal_macro_score(
            sum(log.protein_g for log in matching), plan.protein_g
        )
        carbs = _meal_macro_score(sum(log.carbs_g for log in matching), plan.carbs_g)
        fat = _meal_macro_score(sum(log.fat_g for log in matching), plan.fat_g)
        score = round_half_up(calories * 0.4 + (protein + carbs + fat) / 3 * 0.6)
        scores.append(
            MealScore(
                meal_type=plan.meal_type,  # type: ignore[arg-type]
                score=score,
                calories=calories,
                protein=protein,
                carbs=carbs,
                fat=fat,
            )
        )
    return scores
