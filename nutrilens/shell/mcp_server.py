"""MCP Server - Tool definitions for the nutrition assistant.

Defines all MCP tools an assistant can invoke to manage the user's profile,
log meals and water, and read progress.
Handles authentication via API key in Authorization header.
"""

import logging
import os
from contextvars import ContextVar
from datetime import date, timedelta

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError

from ..core.errors import NutritionError
from ..core.models import FoodEntry, UserProfile
from ..core.calculator import suggest_goals, apply_suggested_goals
from ..core.daily import recent_entries
from ..core.macros import calculate_daily_summary
from ..core.reports import generate_weekly_report
from .firestore_client import NutritionFirestoreClient, FirestoreConfig
from .auth import AuthClient


logger = logging.getLogger(__name__)

# Context variable to store current user_id per request
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "nutrilens",
    instructions="""NutriLens - Personal nutrition tracker.

Use these tools to keep the user's health profile current, log meals and
water, and report progress against their daily goals.

On first use, call get_profile and update_profile with the user's biometrics.
Offer suggest_targets before changing goals; apply_suggested_targets replaces
all four goals at once.
After logging food or water, show the returned daily summary.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_firestore_client: NutritionFirestoreClient | None = None
_auth_client: AuthClient | None = None

PROFILE_FIELDS = set(UserProfile.model_fields) - {"updated_at"}


def get_firestore_client() -> NutritionFirestoreClient:
    """Get or create Firestore client."""
    global _firestore_client
    if _firestore_client is None:
        config = FirestoreConfig(
            project_id=os.environ.get("GOOGLE_CLOUD_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE", "nutrilens"),
        )
        _firestore_client = NutritionFirestoreClient(config)
    return _firestore_client


def get_auth_client() -> AuthClient:
    """Get or create Auth client."""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient(get_firestore_client().client)
    return _auth_client


def get_user_id() -> str:
    """Get current authenticated user ID.

    Raises:
        RuntimeError: If no user is authenticated
    """
    user_id = current_user_id.get()
    if user_id is None:
        raise RuntimeError("No authenticated user. Ensure API key is provided.")
    return user_id


def _load_profile(db: NutritionFirestoreClient, user_id: str) -> UserProfile | None:
    name = None
    user = get_auth_client().get_user(user_id)
    if user is not None:
        name = user.name
    return db.get_or_create_profile(user_id, name)


def _entry_dict(entry: FoodEntry) -> dict:
    return {
        "id": entry.id,
        "name": entry.name,
        "calories": entry.calories,
        "protein": entry.protein,
        "carbs": entry.carbs,
        "fat": entry.fat,
        "ingredients": entry.ingredients,
        "timestamp": entry.timestamp.isoformat(),
        "image_url": entry.image_url,
    }


# ==================== Profile Tools ====================


@mcp.tool()
def get_profile() -> dict:
    """Retrieve the user's profile, biometrics and goals.

    A default profile is created on first use.

    Returns:
        Dictionary with all profile fields, or error message
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = _load_profile(db, user_id)
    if profile is None:
        return {"error": "Failed to load profile. Please try again."}

    return profile.model_dump(mode="json", exclude={"updated_at"})


@mcp.tool()
def update_profile(updates: dict) -> dict:
    """Update profile fields. Only provided fields change.

    Goals are stored as given; they do not need to match the suggestion.

    Args:
        updates: Mapping of field name to new value, e.g.
            {"weight": 72, "activity_level": "Very Active", "fat_goal": 60}

    Returns:
        The updated profile, or error message
    """
    user_id = get_user_id()
    db = get_firestore_client()

    unknown = set(updates) - PROFILE_FIELDS
    if unknown:
        return {"error": f"Unknown profile fields: {', '.join(sorted(unknown))}"}

    profile = _load_profile(db, user_id)
    if profile is None:
        return {"error": "Failed to load profile. Please try again."}

    try:
        profile = UserProfile(**{**profile.model_dump(), **updates})
    except ValidationError as e:
        return {"error": f"Invalid profile values: {e.errors(include_url=False)}"}

    if not db.save_profile(user_id, profile):
        return {"error": "Failed to save profile. Please try again."}

    return profile.model_dump(mode="json", exclude={"updated_at"})


@mcp.tool()
def suggest_targets() -> dict:
    """Calculate recommended calorie and macro goals from the profile.

    Nothing is saved; use apply_suggested_targets to store them.

    Returns:
        Suggested goals next to the current goals
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = _load_profile(db, user_id)
    if profile is None:
        return {"error": "Failed to load profile. Please try again."}

    try:
        suggested = suggest_goals(profile.biometrics())
    except NutritionError as e:
        return {"error": str(e)}

    return {
        "suggested": suggested.model_dump(),
        "current": profile.goals().model_dump(),
    }


@mcp.tool()
def apply_suggested_targets() -> dict:
    """Replace all four daily goals with the calculated suggestion.

    Returns:
        The new goals, or error message
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = _load_profile(db, user_id)
    if profile is None:
        return {"error": "Failed to load profile. Please try again."}

    try:
        profile = apply_suggested_goals(profile)
    except NutritionError as e:
        return {"error": str(e)}

    if not db.save_profile(user_id, profile):
        return {"error": "Failed to save profile. Please try again."}

    return {"success": True, "goals": profile.goals().model_dump()}


# ==================== Logging Tools ====================


@mcp.tool()
def log_food(
    name: str,
    calories: int,
    protein: float,
    carbs: float,
    fat: float,
    ingredients: list[str] | None = None,
    image_url: str | None = None,
) -> dict:
    """Add a food entry to today's record.

    Args:
        name: Name of the food (e.g., "Avocado toast")
        calories: Total calories for this serving
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Fat in grams
        ingredients: Optional list of recognized ingredients
        image_url: Optional reference to the meal photo

    Returns:
        The created entry and updated daily summary
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry = FoodEntry(
            name=name,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            ingredients=ingredients or [],
            image_url=image_url,
        )
    except ValidationError as e:
        return {"error": f"Invalid food entry: {e.errors(include_url=False)}"}

    record = db.add_entry(user_id, entry)
    if record is None:
        return {"error": "Failed to log food. Please try again."}

    profile = _load_profile(db, user_id)
    if profile is None:
        return {
            "entry": _entry_dict(entry),
            "warning": "Profile unavailable; daily summary not calculated.",
        }

    summary = calculate_daily_summary(record, profile.goals())

    return {
        "entry": _entry_dict(entry),
        "daily_summary": summary.model_dump(mode="json"),
    }


@mcp.tool()
def add_water() -> dict:
    """Record one glass of water today.

    Returns:
        Today's water count
    """
    return _change_water(1)


@mcp.tool()
def remove_water() -> dict:
    """Remove one glass of water from today (never below zero).

    Returns:
        Today's water count
    """
    return _change_water(-1)


def _change_water(delta: int) -> dict:
    user_id = get_user_id()
    db = get_firestore_client()

    record = db.change_water(user_id, delta)
    if record is None:
        return {"error": "Failed to update water. Please try again."}

    return {"date": record.record_date.isoformat(), "water": record.water}


# ==================== Query Tools ====================


@mcp.tool()
def get_today(limit: int | None = None) -> dict:
    """Get today's record with summary.

    Args:
        limit: Only return this many of the most recent entries (0 or more)

    Returns:
        Dictionary with date, entries (newest first), goals and summary
    """
    if limit is not None and limit < 0:
        return {"error": "limit must be zero or more."}

    user_id = get_user_id()
    db = get_firestore_client()

    record = db.get_today(user_id)
    if record is None:
        return {"error": "Failed to load today's record. Please try again."}

    entries = [_entry_dict(e) for e in recent_entries(record, limit)]

    profile = _load_profile(db, user_id)
    if profile is None:
        return {
            "date": record.record_date.isoformat(),
            "entries": entries,
            "warning": "Profile unavailable; daily summary not calculated.",
        }

    summary = calculate_daily_summary(record, profile.goals())

    return {
        "date": record.record_date.isoformat(),
        "entries": entries,
        "summary": summary.model_dump(mode="json"),
    }


@mcp.tool()
def get_weekly_report() -> dict:
    """Summarize the last seven days against the daily calorie goal.

    The 'calorie_balance' metric = total calories - days logged * calorie goal.
    Negative values mean the user ate below goal.

    Returns:
        Dictionary with week dates, daily summaries, weekly totals,
        calorie_balance and avg_daily_calories
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = _load_profile(db, user_id)
    if profile is None:
        return {"error": "Failed to load profile. Please try again."}

    end_date = date.today()
    start_date = end_date - timedelta(days=6)

    records = db.get_records_range(user_id, start_date, end_date)
    report = generate_weekly_report(records, profile.daily_calorie_goal, start_date)

    return {
        "week_start": report.week_start.isoformat(),
        "week_end": report.week_end.isoformat(),
        "days_logged": report.days_logged,
        "daily_summaries": [
            {
                "date": s.record_date.isoformat(),
                "calories": s.total_calories,
                "protein": s.total_protein,
                "carbs": s.total_carbs,
                "fat": s.total_fat,
                "water": s.water,
                "entry_count": s.entry_count,
            }
            for s in report.daily_summaries
        ],
        "weekly_totals": {
            "calories": report.total_calories,
            "protein": report.total_protein,
            "carbs": report.total_carbs,
            "fat": report.total_fat,
        },
        "avg_daily_calories": report.avg_daily_calories,
        "calorie_balance": report.calorie_balance,
    }


# ==================== Account Tools ====================


@mcp.tool()
def reset_account() -> dict:
    """Delete the user's profile and all daily records.

    The API key stays valid; a default profile is created on next use.

    Returns:
        Confirmation or error message
    """
    user_id = get_user_id()
    db = get_firestore_client()

    if not db.delete_user_data(user_id):
        return {"error": "Failed to reset account. Please try again."}
    return {"success": True}
