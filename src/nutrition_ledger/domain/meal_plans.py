"""Domain models for daily meal plans."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from nutrition_ledger.domain.ledger import MealType
from nutrition_ledger.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class PlannedItem:
    """Ingredient selected for a meal with its per-unit nutrition."""

    ingredient_id: str
    name: str
    quantity: float
    nutrition: MacroProfile


@dataclass(frozen=True)
class PlannedMeal:
    """Items selected for one meal slot."""

    meal_type: MealType
    items: list[PlannedItem]
    subtotal: MacroProfile


@dataclass(frozen=True)
class MealPlan:
    """Generated or user-composed plan for one user and day."""

    id: UUID | None
    user_id: UUID
    day: date
    target_calories: float
    meals: list[PlannedMeal]
    total: MacroProfile
    generated_at: datetime
    notes: str = ""


@dataclass(frozen=True)
class PlanItemRequest:
    """Catalog ingredient a user wants in a planned meal."""

    ingredient_id: str
    quantity: object = 1


@dataclass(frozen=True)
class PlanMealRequest:
    """User-composed meal before its nutrition is looked up."""

    meal_type: str
    items: list[PlanItemRequest]
