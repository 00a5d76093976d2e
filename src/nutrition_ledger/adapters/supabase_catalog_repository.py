"""Supabase repository for the ingredient and recipe catalog."""

from dataclasses import dataclass

from supabase import Client

from nutrition_ledger.domain.catalog import CatalogIngredient, CatalogRecipe
from nutrition_ledger.services.entries import CatalogRepository, parse_nutrition
from nutrition_ledger.services.meal_plans import CandidatePoolRepository

_INGREDIENT_COLUMNS = "id, name, category, tags, nutrition"


@dataclass
class SupabaseCatalogRepository(CatalogRepository, CandidatePoolRepository):
    """Supabase-backed catalog lookups and candidate pools."""

    client: Client

    def get_ingredient(self, ingredient_id: str) -> CatalogIngredient | None:
        """Return a catalog ingredient by id, if present."""
        response = (
            self.client.table("ingredients")
            .select(_INGREDIENT_COLUMNS)
            .eq("id", ingredient_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def get_recipe(self, recipe_id: str) -> CatalogRecipe | None:
        """Return a catalog recipe by id, if present."""
        response = (
            self.client.table("recipes")
            .select("id, name, nutrition")
            .eq("id", recipe_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return CatalogRecipe(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            nutrition=parse_nutrition(row.get("nutrition") or {}),
        )

    def list_candidates(
        self, required_tags: list[str], limit: int
    ) -> list[CatalogIngredient]:
        """Return up to limit ingredients carrying every required tag."""
        query = self.client.table("ingredients").select(_INGREDIENT_COLUMNS)
        if required_tags:
            query = query.contains("tags", required_tags)
        response = query.limit(limit).execute()
        return [_parse_ingredient(row) for row in response.data or []]


def _parse_ingredient(row: dict[str, object]) -> CatalogIngredient:
    return CatalogIngredient(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        category=str(row.get("category") or ""),
        tags=[str(tag) for tag in row.get("tags") or []],
        nutrition=parse_nutrition(row.get("nutrition") or {}),
    )
