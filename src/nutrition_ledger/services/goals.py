"""Daily calorie and macro goal derivation."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.errors import ValidationError
from nutrition_ledger.domain.goals import HealthProfile, ManualGoals, NutritionGoals
from nutrition_ledger.services.persistence import persist

_logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2
FALLBACK_CALORIE_GOAL = 2000
DEFAULT_FIBER_G = 25
DEFAULT_MANUAL_MACROS = {
    "protein_g": 125,
    "carbs_g": 225,
    "fat_g": 67,
    "fiber_g": DEFAULT_FIBER_G,
}
MIN_MANUAL_CALORIES = 1000
MAX_MANUAL_CALORIES = 5000


class GoalRepository(Protocol):
    """Persistence interface for health profiles and goal overrides."""

    def get_health_profile(self, user_id: UUID) -> HealthProfile | None:
        """Return the user's health profile, if any."""

    def get_manual_goals(self, user_id: UUID) -> ManualGoals | None:
        """Return the user's manual goal record, if any."""

    def save_manual_goals(self, user_id: UUID, goals: ManualGoals) -> None:
        """Insert or replace the user's manual goal record."""

    def set_use_manual(self, user_id: UUID, use_manual: bool) -> None:
        """Toggle whether the manual record is in effect."""


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values."""
    return math.floor(value + 0.5)


def compute_derived_goal(profile: HealthProfile | None) -> int:
    """Return a daily calorie goal from weight, height, age and activity.

    The BMR formula does not take gender into account.
    """
    if (
        profile is None
        or not profile.weight_kg
        or not profile.height_cm
        or not profile.age
    ):
        return FALLBACK_CALORIE_GOAL
    bmr = (
        88.362
        + 13.397 * profile.weight_kg
        + 4.799 * profile.height_cm
        - 5.677 * profile.age
    )
    multiplier = ACTIVITY_MULTIPLIERS.get(
        profile.activity_level or "", DEFAULT_ACTIVITY_MULTIPLIER
    )
    return round_half_up(bmr * multiplier)


def derive_macro_goals(calories: float) -> dict[str, int]:
    """Split a calorie goal into 25/45/30 protein/carbs/fat grams."""
    return {
        "protein_g": round_half_up(calories * 0.25 / 4),
        "carbs_g": round_half_up(calories * 0.45 / 4),
        "fat_g": round_half_up(calories * 0.30 / 9),
        "fiber_g": DEFAULT_FIBER_G,
    }


@dataclass
class GoalService:
    """Looks up manual goals or derives them from the health profile."""

    repository: GoalRepository

    def resolve_goals(self, user_id: UUID) -> NutritionGoals:
        """Return the goals in effect for the user."""
        manual = self.repository.get_manual_goals(user_id)
        if manual is not None and manual.use_manual and manual.calories:
            return NutritionGoals(
                calories=manual.calories,
                protein_g=_or_default(manual.protein_g, "protein_g"),
                carbs_g=_or_default(manual.carbs_g, "carbs_g"),
                fat_g=_or_default(manual.fat_g, "fat_g"),
                fiber_g=_or_default(manual.fiber_g, "fiber_g"),
                source="manual",
            )
        calories = compute_derived_goal(self.repository.get_health_profile(user_id))
        macros = derive_macro_goals(calories)
        return NutritionGoals(calories=calories, source="derived", **macros)

    def set_manual_goals(
        self, user_id: UUID, payload: dict[str, object]
    ) -> NutritionGoals:
        """Validate and store a manual override, returning the new goals."""
        calories = _optional_number(payload.get("calories"), "calories")
        if calories is None or not (
            MIN_MANUAL_CALORIES <= calories <= MAX_MANUAL_CALORIES
        ):
            raise ValidationError(
                f"calories must be between {MIN_MANUAL_CALORIES} "
                f"and {MAX_MANUAL_CALORIES}"
            )
        goals = ManualGoals(
            calories=calories,
            protein_g=_optional_number(payload.get("protein"), "protein"),
            carbs_g=_optional_number(payload.get("carbs"), "carbs"),
            fat_g=_optional_number(payload.get("fat"), "fat"),
            fiber_g=_optional_number(payload.get("fiber"), "fiber"),
            use_manual=True,
        )
        persist(
            "save manual goals",
            lambda: self.repository.save_manual_goals(user_id, goals),
        )
        _logger.info("Manual goals set for user %s: %s kcal", user_id, calories)
        return self.resolve_goals(user_id)

    def clear_manual_goals(self, user_id: UUID) -> NutritionGoals:
        """Switch the user back to derived goals."""
        persist(
            "clear manual goals",
            lambda: self.repository.set_use_manual(user_id, False),
        )
        return self.resolve_goals(user_id)


def _or_default(value: float | None, name: str) -> float:
    return value if value is not None else DEFAULT_MANUAL_MACROS[name]


def _optional_number(value: object, name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise ValidationError(f"{name} must be a number")
    try:
        number = float(value)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number") from exc
    if not math.isfinite(number) or number < 0:
        raise ValidationError(f"{name} must be a non-negative number")
    return number
