"""Core Errors - Precondition failures raised by the pure functions."""


class NutritionError(ValueError):
    """Base class for nutrition core errors."""


class InvalidGoal(NutritionError):
    """A goal used as a progress denominator is zero or negative."""


class InvalidProfile(NutritionError):
    """A profile has non-positive weight, height or age."""
