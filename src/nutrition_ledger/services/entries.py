"""Normalization of food logging requests into ledger entries."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from nutrition_ledger.domain.catalog import CatalogIngredient, CatalogRecipe
from nutrition_ledger.domain.errors import NotFoundError, ValidationError
from nutrition_ledger.domain.ledger import (
    EntryRequest,
    LedgerEntry,
    MealType,
    SourceKind,
)
from nutrition_ledger.domain.nutrition import MacroProfile

_FIELD_ALIASES = {
    "protein_g": ("protein", "proteins", "protein_g"),
    "carbs_g": ("carbs", "carbohydrates", "carbs_g"),
    "fat_g": ("fat", "fat_g"),
    "fiber_g": ("fiber", "fiber_g"),
    "sugar_g": ("sugar", "sugar_g"),
    "sodium_mg": ("sodium", "sodium_mg"),
}


class CatalogRepository(Protocol):
    """Read access to the ingredient and recipe catalog."""

    def get_ingredient(self, ingredient_id: str) -> CatalogIngredient | None:
        """Return a catalog ingredient by id, if present."""

    def get_recipe(self, recipe_id: str) -> CatalogRecipe | None:
        """Return a catalog recipe by id, if present."""


@dataclass
class EntryNormalizer:
    """Turns heterogeneous logging requests into nutrition snapshots."""

    catalog: CatalogRepository

    def normalize(self, request: EntryRequest) -> LedgerEntry:
        """Validate a logging request and return the entry to append."""
        source_kind = _parse_source_kind(request.source_kind)
        quantity = _parse_quantity(request.quantity)
        meal_type = _parse_meal_type(request.meal_type)

        if source_kind is SourceKind.CATALOG_INGREDIENT:
            ingredient = self.catalog.get_ingredient(_require_ref(request))
            if ingredient is None:
                raise NotFoundError(f"Ingredient not found: {request.source_ref}")
            name = ingredient.name
            nutrition = ingredient.nutrition.scaled(quantity)
        elif source_kind is SourceKind.RECIPE:
            recipe = self.catalog.get_recipe(_require_ref(request))
            if recipe is None:
                raise NotFoundError(f"Recipe not found: {request.source_ref}")
            name = recipe.name
            nutrition = recipe.nutrition.scaled(quantity)
        elif source_kind is SourceKind.SCANNED:
            name = request.name or "Scanned food"
            scanned = parse_nutrition(request.raw_nutrition or {})
            # Sugar and sodium are never recorded for scanned foods.
            nutrition = MacroProfile(
                calories=scanned.calories,
                protein_g=scanned.protein_g,
                carbs_g=scanned.carbs_g,
                fat_g=scanned.fat_g,
                fiber_g=scanned.fiber_g,
            ).scaled(quantity)
        else:
            name = request.name or "Manual entry"
            raw = request.raw_nutrition or {}
            calories = _parse_number(raw.get("calories"))
            if calories is None or calories <= 0:
                raise ValidationError("Manual entries require calories greater than 0")
            nutrition = parse_nutrition(raw).scaled(quantity)

        return LedgerEntry(
            id=uuid4(),
            source_kind=source_kind,
            source_ref=request.source_ref,
            name=name,
            quantity=quantity,
            meal_type=meal_type,
            nutrition=nutrition,
            logged_at=datetime.now(tz=UTC),
        )


def parse_nutrition(raw: dict[str, object]) -> MacroProfile:
    """Read a loosely keyed nutrition payload, defaulting unknown fields to 0."""
    values: dict[str, float] = {}
    for field_name, aliases in _FIELD_ALIASES.items():
        values[field_name] = 0.0
        for alias in aliases:
            parsed = _parse_number(raw.get(alias))
            if parsed is not None:
                values[field_name] = parsed
                break
    return MacroProfile(calories=_parse_number(raw.get("calories")) or 0.0, **values)


def _parse_source_kind(value: str) -> SourceKind:
    try:
        return SourceKind(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown source kind: {value}") from exc


def _parse_meal_type(value: str) -> MealType:
    try:
        return MealType(value)
    except ValueError as exc:
        raise ValidationError(
            "mealType must be one of breakfast, lunch, dinner, snack"
        ) from exc


def _parse_quantity(value: object) -> float:
    quantity = _parse_number(value)
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be a number greater than 0")
    return quantity


def _require_ref(request: EntryRequest) -> str:
    if not request.source_ref:
        raise ValidationError(f"sourceRef is required for {request.source_kind}")
    return request.source_ref


def _parse_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number
