"""Calorie Target Calculator - Pure functions for goal suggestions.

All functions are pure: same input always produces same output, no side effects.
"""

import math

from .errors import InvalidGoal, InvalidProfile
from .models import ActivityLevel, Gender, HealthGoal, MacroGoals, Profile, UserProfile


ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
}

GOAL_ADJUSTMENTS = {
    HealthGoal.WEIGHT_LOSS: -500,
    HealthGoal.MAINTAIN: 0,
    HealthGoal.MUSCLE_GAIN: 300,
}

# Share of daily calories per macro, and kcal per gram
PROTEIN_SHARE, CARBS_SHARE, FAT_SHARE = 0.30, 0.40, 0.30
PROTEIN_KCAL_PER_G, CARBS_KCAL_PER_G, FAT_KCAL_PER_G = 4, 4, 9


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def validate_profile(profile: Profile) -> None:
    """Check that the biometric fields can produce a meaningful BMR.

    Raises:
        InvalidProfile: If weight, height or age is not positive
    """
    for field in ("weight", "height", "age"):
        value = getattr(profile, field)
        if value <= 0:
            raise InvalidProfile(f"{field} must be positive, got {value}")


def calculate_bmr(profile: Profile) -> float:
    """Estimate basal metabolic rate with the revised Harris-Benedict equation.

    The female coefficients are used for both Female and Other.

    Args:
        profile: Biometric profile

    Returns:
        BMR in kcal/day (unrounded)
    """
    validate_profile(profile)

    if profile.gender == Gender.MALE:
        return 88.362 + 13.397 * profile.weight + 4.799 * profile.height - 5.677 * profile.age
    return 447.593 + 9.247 * profile.weight + 3.098 * profile.height - 4.330 * profile.age


def calculate_daily_calorie_target(profile: Profile) -> int:
    """Calculate the recommended daily calorie budget.

    BMR is scaled by the activity multiplier, then shifted by the goal
    adjustment. No lower bound is applied, so extreme profiles with a
    weight loss goal can produce a negative number.

    Args:
        profile: Biometric profile

    Returns:
        Daily calorie target in kcal
    """
    maintenance = calculate_bmr(profile) * ACTIVITY_MULTIPLIERS[profile.activity_level]
    maintenance += GOAL_ADJUSTMENTS[profile.goal]
    return round_half_up(maintenance)


def derive_macro_targets(daily_calorie_target: int) -> MacroGoals:
    """Split a calorie target 30/40/30 into protein, carbs and fat grams.

    Args:
        daily_calorie_target: Daily calorie budget in kcal

    Returns:
        MacroGoals carrying the target and the derived gram goals
    """
    return MacroGoals(
        daily_calorie_goal=daily_calorie_target,
        protein_goal=round_half_up(daily_calorie_target * PROTEIN_SHARE / PROTEIN_KCAL_PER_G),
        carbs_goal=round_half_up(daily_calorie_target * CARBS_SHARE / CARBS_KCAL_PER_G),
        fat_goal=round_half_up(daily_calorie_target * FAT_SHARE / FAT_KCAL_PER_G),
    )


def suggest_goals(profile: Profile) -> MacroGoals:
    """Suggest a full goal set for a biometric profile."""
    return derive_macro_targets(calculate_daily_calorie_target(profile))


def apply_suggested_goals(user_profile: UserProfile) -> UserProfile:
    """Return a copy of the profile with all four goals replaced by the suggestion.

    The four fields are replaced together; the input profile is not modified.

    Raises:
        InvalidProfile: If the biometrics are not positive
        InvalidGoal: If the suggestion contains a non-positive goal
    """
    suggested = suggest_goals(user_profile.biometrics())

    for field, value in suggested.model_dump().items():
        if value <= 0:
            raise InvalidGoal(f"Suggested {field} is not positive: {value}")

    return user_profile.model_copy(update=suggested.model_dump())
