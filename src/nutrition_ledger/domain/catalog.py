"""Domain models for catalog foods referenced by the ledger."""

from dataclasses import dataclass

from nutrition_ledger.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class CatalogIngredient:
    """Catalog ingredient with per-unit nutrition."""

    id: str
    name: str
    category: str
    tags: list[str]
    nutrition: MacroProfile


@dataclass(frozen=True)
class CatalogRecipe:
    """Catalog recipe with per-serving nutrition."""

    id: str
    name: str
    nutrition: MacroProfile
