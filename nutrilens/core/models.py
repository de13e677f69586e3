"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation and
simple projections.
"""

from datetime import datetime
from datetime import date as DateType
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
import uuid


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ActivityLevel(str, Enum):
    SEDENTARY = "Sedentary"
    LIGHTLY_ACTIVE = "Lightly Active"
    MODERATELY_ACTIVE = "Moderately Active"
    VERY_ACTIVE = "Very Active"


class HealthGoal(str, Enum):
    WEIGHT_LOSS = "Weight Loss"
    MAINTAIN = "Maintain"
    MUSCLE_GAIN = "Muscle Gain"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Profile(BaseModel):
    """Biometric inputs to the calorie target calculator.

    Positivity of weight, height and age is checked by the calculator,
    not here, so stored profiles with placeholder zeros still load.
    """

    model_config = ConfigDict(frozen=True)

    gender: Gender
    weight: float = Field(description="Body weight in kilograms")
    height: float = Field(description="Height in centimeters")
    age: int = Field(description="Age in years")
    activity_level: ActivityLevel
    goal: HealthGoal


class MacroGoals(BaseModel):
    """Daily calorie and macronutrient goals."""

    model_config = ConfigDict(frozen=True)

    daily_calorie_goal: int = Field(description="Daily calorie target")
    protein_goal: int = Field(description="Daily protein target in grams")
    carbs_goal: int = Field(description="Daily carbohydrate target in grams")
    fat_goal: int = Field(description="Daily fat target in grams")


WATER_REMINDER_INTERVALS = (30, 60, 120, 180)


class UserProfile(BaseModel):
    """The stored user profile: biometrics, goals and preferences."""

    name: str = "Alex"
    gender: Gender = Gender.MALE
    weight: float = 75
    height: float = 180
    age: int = 28
    activity_level: ActivityLevel = ActivityLevel.MODERATELY_ACTIVE
    goal: HealthGoal = HealthGoal.MAINTAIN
    daily_calorie_goal: int = Field(default=2200, gt=0, description="Daily calorie target")
    protein_goal: int = Field(default=150, gt=0, description="Daily protein target in grams")
    carbs_goal: int = Field(default=250, gt=0, description="Daily carbohydrate target in grams")
    fat_goal: int = Field(default=70, gt=0, description="Daily fat target in grams")
    allergies: list[str] = Field(default_factory=list)
    preferences: list[str] = Field(default_factory=list)
    water_reminder_enabled: bool = False
    water_reminder_interval: int = Field(default=60, description="Minutes between water reminders")
    theme: Theme = Theme.LIGHT
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _check_reminder_interval(self) -> "UserProfile":
        if self.water_reminder_interval not in WATER_REMINDER_INTERVALS:
            raise ValueError(
                f"water_reminder_interval must be one of {WATER_REMINDER_INTERVALS}"
            )
        return self

    def biometrics(self) -> Profile:
        """Project the calculator inputs out of the stored profile."""
        return Profile(
            gender=self.gender,
            weight=self.weight,
            height=self.height,
            age=self.age,
            activity_level=self.activity_level,
            goal=self.goal,
        )

    def goals(self) -> MacroGoals:
        return MacroGoals(
            daily_calorie_goal=self.daily_calorie_goal,
            protein_goal=self.protein_goal,
            carbs_goal=self.carbs_goal,
            fat_goal=self.fat_goal,
        )


class FoodEntry(BaseModel):
    """A single food item logged by the user. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1, description="Name of the food")
    calories: int = Field(ge=0, description="Total calories")
    protein: float = Field(ge=0, description="Protein in grams")
    carbs: float = Field(ge=0, description="Carbohydrates in grams")
    fat: float = Field(ge=0, description="Fat in grams")
    ingredients: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    image_url: Optional[str] = Field(default=None, description="Reference to the meal photo")


class DailyRecord(BaseModel):
    """One calendar day's logged food and water."""

    record_date: DateType = Field(description="Date key of this record (YYYY-MM-DD)")
    calories: int = Field(default=0, ge=0, description="Cached sum of entry calories")
    water: int = Field(default=0, ge=0, description="Glasses of water")
    entries: list[FoodEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_calorie_cache(self) -> "DailyRecord":
        expected = sum(e.calories for e in self.entries)
        if self.calories != expected:
            raise ValueError(
                f"calories ({self.calories}) does not match sum of entries ({expected})"
            )
        return self


class MacroTotals(BaseModel):
    """Summed calories and macros over a set of entries."""

    calories: int = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class DailySummary(BaseModel):
    """Totals, progress and remaining amounts for one day."""

    record_date: DateType
    totals: MacroTotals
    goals: MacroGoals
    calorie_progress: float = Field(ge=0, le=100)
    protein_progress: float = Field(ge=0, le=100)
    carbs_progress: float = Field(ge=0, le=100)
    fat_progress: float = Field(ge=0, le=100)
    calories_remaining: int = Field(ge=0, description="Zero once the goal is reached")
    calories_over: int = Field(ge=0, description="Calories consumed beyond the goal")
    water: int = Field(ge=0)
    water_goal: int
    water_progress: float = Field(ge=0, le=100)
    entry_count: int


class DaySummary(BaseModel):
    """Summary for a single day in weekly report."""

    record_date: DateType
    total_calories: int
    total_protein: float
    total_carbs: float
    total_fat: float
    water: int
    entry_count: int


class WeeklyReport(BaseModel):
    """Weekly report with daily summaries and aggregate metrics."""

    week_start: DateType
    week_end: DateType
    daily_summaries: list[DaySummary]
    total_calories: int
    avg_daily_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    calorie_balance: int = Field(description="Total calories - (days * calorie goal). Negative = under goal.")
    days_logged: int


class User(BaseModel):
    """User record stored in Firestore."""

    email: str
    name: str
    api_key_hash: str = Field(description="SHA256 hash of API key - never store plaintext")
    created_at: datetime = Field(default_factory=datetime.utcnow)
