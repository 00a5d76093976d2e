"""Supabase repository for daily meal plans."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nutrition_ledger.domain.errors import UpstreamFailure
from nutrition_ledger.domain.ledger import MealType
from nutrition_ledger.domain.meal_plans import MealPlan, PlannedItem, PlannedMeal
from nutrition_ledger.domain.nutrition import MacroProfile
from nutrition_ledger.services.entries import parse_nutrition
from nutrition_ledger.services.meal_plans import MealPlanRepository

_PLAN_COLUMNS = (
    "id, user_id, day, target_calories, meals, total, generated_at, notes"
)


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for meal plans, one row per user and day."""

    client: Client

    def get_plan(self, user_id: UUID, day: date) -> MealPlan | None:
        """Return the user's plan for a day, if any."""
        response = (
            self.client.table("meal_plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_plan(response.data[0])

    def upsert_plan(self, plan: MealPlan) -> MealPlan:
        """Insert or replace the plan for (user, day) and return it."""
        response = (
            self.client.table("meal_plans")
            .upsert(
                {
                    "user_id": str(plan.user_id),
                    "day": plan.day.isoformat(),
                    "target_calories": plan.target_calories,
                    "meals": [_meal_payload(meal) for meal in plan.meals],
                    "total": plan.total.macros(),
                    "generated_at": plan.generated_at.isoformat(),
                    "notes": plan.notes,
                },
                on_conflict="user_id,day",
            )
            .execute()
        )
        if not response.data:
            raise UpstreamFailure("Failed to save meal plan")
        return _parse_plan(response.data[0])

    def list_plans(self, user_id: UUID, start: date, end: date) -> list[MealPlan]:
        """Return plans for days in [start, end], newest first."""
        response = (
            self.client.table("meal_plans")
            .select(_PLAN_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("day", start.isoformat())
            .lte("day", end.isoformat())
            .order("day", desc=True)
            .execute()
        )
        return [_parse_plan(row) for row in response.data or []]


def _meal_payload(meal: PlannedMeal) -> dict[str, object]:
    return {
        "meal_type": meal.meal_type.value,
        "items": [
            {
                "ingredient_id": item.ingredient_id,
                "name": item.name,
                "quantity": item.quantity,
                "nutrition": item.nutrition.macros(),
            }
            for item in meal.items
        ],
        "subtotal": meal.subtotal.macros(),
    }


def _parse_meal(raw: dict[str, object]) -> PlannedMeal:
    return PlannedMeal(
        meal_type=MealType(str(raw["meal_type"])),
        items=[
            PlannedItem(
                ingredient_id=str(item["ingredient_id"]),
                name=str(item.get("name") or ""),
                quantity=float(item.get("quantity") or 0.0),
                nutrition=parse_nutrition(item.get("nutrition") or {}),
            )
            for item in raw.get("items") or []
        ],
        subtotal=parse_nutrition(raw.get("subtotal") or {}),
    )


def _parse_plan(row: dict[str, object]) -> MealPlan:
    return MealPlan(
        id=UUID(str(row["id"])) if row.get("id") else None,
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["day"])),
        target_calories=float(row.get("target_calories") or 0.0),
        meals=[_parse_meal(meal) for meal in row.get("meals") or []],
        total=(
            parse_nutrition(row["total"]) if row.get("total") else MacroProfile.zero()
        ),
        generated_at=datetime.fromisoformat(str(row["generated_at"])),
        notes=str(row.get("notes") or ""),
    )
