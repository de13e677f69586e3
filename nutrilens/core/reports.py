"""Report Generation - Pure functions for generating reports.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta

from .models import DailyRecord, WeeklyReport, DaySummary
from .macros import calculate_daily_totals


def generate_day_summary(record: DailyRecord) -> DaySummary:
    """Generate a summary for a single day's record.

    Args:
        record: The daily record to summarize

    Returns:
        DaySummary with totals for the day
    """
    totals = calculate_daily_totals(record.entries)

    return DaySummary(
        record_date=record.record_date,
        total_calories=totals.calories,
        total_protein=round(totals.protein, 1),
        total_carbs=round(totals.carbs, 1),
        total_fat=round(totals.fat, 1),
        water=record.water,
        entry_count=len(record.entries),
    )


def calculate_calorie_balance(total_calories: int, days: int, daily_calorie_goal: int) -> int:
    """Calculate intake relative to the calorie goal over a period.

    Positive value = ate above goal
    Negative value = ate below goal

    Args:
        total_calories: Total calories consumed over the period
        days: Number of days in the period
        daily_calorie_goal: Daily calorie target

    Returns:
        Net calories (surplus or deficit)
    """
    return total_calories - days * daily_calorie_goal


def generate_weekly_report(
    records: list[DailyRecord],
    daily_calorie_goal: int,
    week_start: date | None = None,
) -> WeeklyReport:
    """Generate a seven-day report from daily records.

    Args:
        records: Daily records (may be empty or partial week)
        daily_calorie_goal: Goal used for the calorie balance
        week_start: Start date of the window (defaults to 6 days ago)

    Returns:
        WeeklyReport with daily summaries and aggregate metrics
    """
    if week_start is None:
        week_start = date.today() - timedelta(days=6)

    week_end = week_start + timedelta(days=6)

    week_records = [
        record for record in records
        if week_start <= record.record_date <= week_end
    ]

    daily_summaries = [
        generate_day_summary(record)
        for record in sorted(week_records, key=lambda r: r.record_date)
    ]

    total_calories = sum(s.total_calories for s in daily_summaries)
    total_protein = sum(s.total_protein for s in daily_summaries)
    total_carbs = sum(s.total_carbs for s in daily_summaries)
    total_fat = sum(s.total_fat for s in daily_summaries)
    days_logged = len(daily_summaries)

    avg_daily_calories = total_calories / days_logged if days_logged > 0 else 0

    # Balance over days actually logged, not the full window
    calorie_balance = calculate_calorie_balance(total_calories, days_logged, daily_calorie_goal)

    return WeeklyReport(
        week_start=week_start,
        week_end=week_end,
        daily_summaries=daily_summaries,
        total_calories=total_calories,
        avg_daily_calories=round(avg_daily_calories, 1),
        total_protein=round(total_protein, 1),
        total_carbs=round(total_carbs, 1),
        total_fat=round(total_fat, 1),
        calorie_balance=calorie_balance,
        days_logged=days_logged,
    )
