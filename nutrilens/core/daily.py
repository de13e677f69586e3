"""Daily Record - Pure transitions for a day's food and water log.

A record is Active for its date until the caller observes a different
"today", at which point it is replaced by an empty record for that date.
Every function returns a new record and leaves its input untouched.
"""

from datetime import date

from .models import DailyRecord, FoodEntry


def is_same_day(record: DailyRecord, reference_date: date) -> bool:
    """Check whether a record belongs to the given calendar date."""
    return record.record_date == reference_date


def new_daily_record(record_date: date) -> DailyRecord:
    """Create an empty record for a date."""
    return DailyRecord(record_date=record_date, calories=0, water=0, entries=[])


def ensure_current_record(record: DailyRecord | None, today: date) -> DailyRecord:
    """Return the record if it is still today's, else a fresh one for today.

    The stale record is not carried over; archiving it is up to the caller.

    Args:
        record: Last known record, or None if nothing is stored
        today: The caller's current date key

    Returns:
        A record whose date is today
    """
    if record is not None and is_same_day(record, today):
        return record
    return new_daily_record(today)


def log_food(record: DailyRecord, entry: FoodEntry) -> DailyRecord:
    """Append an entry and keep the calorie cache in step."""
    return record.model_copy(update={
        "entries": [*record.entries, entry],
        "calories": record.calories + entry.calories,
    })


def add_water(record: DailyRecord) -> DailyRecord:
    return record.model_copy(update={"water": record.water + 1})


def remove_water(record: DailyRecord) -> DailyRecord:
    return record.model_copy(update={"water": max(0, record.water - 1)})


def recent_entries(record: DailyRecord, limit: int | None = 3) -> list[FoodEntry]:
    """Entries ordered most recent first, for display.

    Args:
        record: The day's record
        limit: Maximum entries to return (None for all)

    Returns:
        Newest-first list; the record's own order is unchanged
    """
    newest_first = list(reversed(record.entries))
    if limit is None:
        return newest_first
    return newest_first[:limit]
