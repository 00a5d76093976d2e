"""Tests for entry normalization."""

import pytest

from nutrition_ledger.domain.catalog import CatalogIngredient
from nutrition_ledger.domain.errors import NotFoundError, ValidationError
from nutrition_ledger.domain.ledger import EntryRequest, MealType, SourceKind
from nutrition_ledger.services.entries import EntryNormalizer, parse_nutrition
from tests.conftest import InMemoryCatalogRepository, macros


def _normalizer() -> EntryNormalizer:
    catalog = InMemoryCatalogRepository()
    catalog.ingredients["a"] = CatalogIngredient(
        id="a",
        name="Almonds",
        category="nuts",
        tags=[],
        nutrition=macros(50.0, 2.0, 5.0, 1.0, 1.0),
    )
    return EntryNormalizer(catalog)


def test_catalog_ingredient_scaled_by_quantity() -> None:
    entry = _normalizer().normalize(
        EntryRequest(
            source_kind="catalog_ingredient",
            source_ref="a",
            quantity=2,
            meal_type="breakfast",
        )
    )

    assert entry.source_kind is SourceKind.CATALOG_INGREDIENT
    assert entry.meal_type is MealType.BREAKFAST
    assert entry.name == "Almonds"
    assert entry.nutrition.macros() == {
        "calories": 100.0,
        "protein_g": 4.0,
        "carbs_g": 10.0,
        "fat_g": 2.0,
        "fiber_g": 2.0,
    }
    assert entry.logged_at.tzinfo is not None


def test_recipe_uses_catalog_nutrition(catalog: InMemoryCatalogRepository) -> None:
    entry = EntryNormalizer(catalog).normalize(
        EntryRequest(
            source_kind="recipe", source_ref="salad", quantity=1, meal_type="lunch"
        )
    )

    assert entry.name == "Green Salad"
    assert entry.nutrition.calories == 180.0


def test_unknown_catalog_reference_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        _normalizer().normalize(
            EntryRequest(
                source_kind="catalog_ingredient",
                source_ref="missing",
                quantity=1,
                meal_type="lunch",
            )
        )


def test_catalog_entry_requires_reference() -> None:
    with pytest.raises(ValidationError):
        _normalizer().normalize(
            EntryRequest(source_kind="recipe", quantity=1, meal_type="lunch")
        )


def test_scanned_entry_drops_sugar_and_sodium() -> None:
    entry = _normalizer().normalize(
        EntryRequest(
            source_kind="scanned",
            quantity=1,
            meal_type="snack",
            name="Granola bar",
            raw_nutrition={
                "calories": 190,
                "proteins": 4,
                "carbohydrates": 29,
                "fat": 7,
                "sugar": 12,
                "sodium": 140,
            },
        )
    )

    assert entry.nutrition.sugar_g == 0
    assert entry.nutrition.sodium_mg == 0
    assert entry.nutrition.protein_g == 4
    assert entry.nutrition.carbs_g == 29


def test_manual_entry_aliases_and_defaults() -> None:
    entry = _normalizer().normalize(
        EntryRequest(
            source_kind="manual",
            quantity=2,
            meal_type="dinner",
            raw_nutrition={"calories": "250", "protein": 20, "unknown": 5},
        )
    )

    assert entry.name == "Manual entry"
    assert entry.nutrition.calories == 500
    assert entry.nutrition.protein_g == 40
    assert entry.nutrition.fat_g == 0


@pytest.mark.parametrize("calories", [None, 0, -10, "abc"])
def test_manual_entry_requires_positive_calories(calories: object) -> None:
    raw = {} if calories is None else {"calories": calories}
    with pytest.raises(ValidationError):
        _normalizer().normalize(
            EntryRequest(
                source_kind="manual", quantity=1, meal_type="dinner", raw_nutrition=raw
            )
        )


@pytest.mark.parametrize("quantity", [0, -1, "two", None, True])
def test_quantity_must_be_positive(quantity: object) -> None:
    with pytest.raises(ValidationError):
        _normalizer().normalize(
            EntryRequest(
                source_kind="catalog_ingredient",
                source_ref="a",
                quantity=quantity,
                meal_type="lunch",
            )
        )


def test_meal_type_and_source_kind_are_validated() -> None:
    normalizer = _normalizer()
    with pytest.raises(ValidationError):
        normalizer.normalize(
            EntryRequest(
                source_kind="catalog_ingredient",
                source_ref="a",
                quantity=1,
                meal_type="brunch",
            )
        )
    with pytest.raises(ValidationError):
        normalizer.normalize(
            EntryRequest(source_kind="photo", quantity=1, meal_type="lunch")
        )


def test_parse_nutrition_prefers_first_alias() -> None:
    profile = parse_nutrition({"calories": 10, "protein": 3, "protein_g": 9})

    assert profile.protein_g == 3
