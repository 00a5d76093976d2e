"""Ledger mutation events and meal summaries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from nutrition_ledger.domain.goals import NutritionGoals
from nutrition_ledger.domain.ledger import Ledger, LedgerEntry, MealType
from nutrition_ledger.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class LedgerEvent:
    """Emitted after a ledger mutation has been persisted."""

    type: str
    user_id: UUID
    ledger: Ledger
    entry: LedgerEntry | None = None
    removed_id: str | None = None


@dataclass(frozen=True)
class MealSummary:
    """Progress against daily goals when a meal is finalized."""

    meal_type: MealType
    day: date
    consumed: MacroProfile
    remaining: MacroProfile
    exceeded: MacroProfile
    daily_goals: NutritionGoals
