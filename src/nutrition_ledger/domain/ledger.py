"""Domain models for the daily nutrition ledger."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from nutrition_ledger.domain.nutrition import MacroProfile


class SourceKind(StrEnum):
    """Where a logged entry's nutrition came from."""

    CATALOG_INGREDIENT = "catalog_ingredient"
    RECIPE = "recipe"
    SCANNED = "scanned"
    MANUAL = "manual"


class MealType(StrEnum):
    """Meal slot of a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable nutrition snapshot taken when food is logged."""

    id: UUID
    source_kind: SourceKind
    source_ref: str | None
    name: str
    quantity: float
    meal_type: MealType
    nutrition: MacroProfile
    logged_at: datetime


@dataclass(frozen=True)
class Ledger:
    """Per-user, per-day record of logged entries and their running totals."""

    id: UUID
    user_id: UUID
    day: date
    entries: list[LedgerEntry]
    totals: MacroProfile


@dataclass(frozen=True)
class EntryRequest:
    """Food logging request before normalization."""

    source_kind: str
    quantity: object
    meal_type: str
    source_ref: str | None = None
    name: str | None = None
    day: date | None = None
    raw_nutrition: dict[str, object] | None = None
