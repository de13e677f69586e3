"""Macro Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from typing import Iterable

from .calculator import round_half_up
from .errors import InvalidGoal
from .models import DailyRecord, DailySummary, FoodEntry, MacroGoals, MacroTotals


WATER_GOAL_GLASSES = 8


def calculate_daily_totals(entries: Iterable[FoodEntry]) -> MacroTotals:
    """Calculate total macros from a list of food entries.

    Args:
        entries: Food entries for a day, in any order

    Returns:
        MacroTotals (all zero for no entries)
    """
    entries = list(entries)

    return MacroTotals(
        calories=sum(e.calories for e in entries),
        protein=sum(e.protein for e in entries),
        carbs=sum(e.carbs for e in entries),
        fat=sum(e.fat for e in entries),
    )


def progress(value: float, goal: float) -> float:
    """Percentage of a goal reached, clamped to [0, 100].

    Args:
        value: Amount consumed
        goal: Target amount

    Returns:
        Percentage between 0 and 100

    Raises:
        InvalidGoal: If goal is zero or negative
    """
    if goal <= 0:
        raise InvalidGoal(f"Goal must be positive, got {goal}")
    return max(0.0, min(100.0, value / goal * 100))


def remaining(daily_goal: float, consumed: float) -> float:
    """Amount left before reaching the goal; never negative."""
    return max(0, daily_goal - consumed)


def calculate_calories_from_macros(protein: float, carbs: float, fat: float) -> int:
    """Calculate calories from macronutrients.

    Uses standard conversion: 4 cal/g protein, 4 cal/g carbs, 9 cal/g fat.

    Args:
        protein: Grams of protein
        carbs: Grams of carbohydrates
        fat: Grams of fat

    Returns:
        Estimated calories (halves round up)
    """
    return round_half_up(protein * 4 + carbs * 4 + fat * 9)


def calculate_daily_summary(record: DailyRecord, goals: MacroGoals) -> DailySummary:
    """Calculate daily summary with totals, progress and remaining calories.

    Args:
        record: The day's record
        goals: User's goal settings

    Returns:
        DailySummary for the record's date

    Raises:
        InvalidGoal: If any goal is zero or negative
    """
    totals = calculate_daily_totals(record.entries)

    return DailySummary(
        record_date=record.record_date,
        totals=MacroTotals(
            calories=totals.calories,
            protein=round(totals.protein, 1),
            carbs=round(totals.carbs, 1),
            fat=round(totals.fat, 1),
        ),
        goals=goals,
        calorie_progress=round(progress(totals.calories, goals.daily_calorie_goal), 1),
        protein_progress=round(progress(totals.protein, goals.protein_goal), 1),
        carbs_progress=round(progress(totals.carbs, goals.carbs_goal), 1),
        fat_progress=round(progress(totals.fat, goals.fat_goal), 1),
        calories_remaining=remaining(goals.daily_calorie_goal, totals.calories),
        calories_over=max(0, totals.calories - goals.daily_calorie_goal),
        water=record.water,
        water_goal=WATER_GOAL_GLASSES,
        water_progress=round(progress(record.water, WATER_GOAL_GLASSES), 1),
        entry_count=len(record.entries),
    )
