"""JSON-ready representations of ledger domain objects."""

from nutrition_ledger.domain.events import LedgerEvent, MealSummary
from nutrition_ledger.domain.goals import NutritionGoals
from nutrition_ledger.domain.ledger import Ledger, LedgerEntry
from nutrition_ledger.domain.meal_plans import MealPlan, PlannedMeal
from nutrition_ledger.domain.nutrition import MacroProfile


def _round(value: float) -> float:
    return round(value, 2)


def macros_to_dict(profile: MacroProfile) -> dict[str, float]:
    """Return the aggregated macro fields rounded for display."""
    return {name: _round(value) for name, value in profile.macros().items()}


def entry_to_dict(entry: LedgerEntry) -> dict[str, object]:
    nutrition = macros_to_dict(entry.nutrition)
    nutrition["sugar_g"] = _round(entry.nutrition.sugar_g)
    nutrition["sodium_mg"] = _round(entry.nutrition.sodium_mg)
    return {
        "id": str(entry.id),
        "source_kind": entry.source_kind.value,
        "source_ref": entry.source_ref,
        "name": entry.name,
        "quantity": entry.quantity,
        "meal_type": entry.meal_type.value,
        "nutrition": nutrition,
        "logged_at": entry.logged_at.isoformat(),
    }


def ledger_to_dict(ledger: Ledger) -> dict[str, object]:
    return {
        "id": str(ledger.id),
        "user_id": str(ledger.user_id),
        "day": ledger.day.isoformat(),
        "entries": [entry_to_dict(entry) for entry in ledger.entries],
        "totals": macros_to_dict(ledger.totals),
    }


def goals_to_dict(goals: NutritionGoals) -> dict[str, object]:
    return {
        "calories": goals.calories,
        "protein_g": goals.protein_g,
        "carbs_g": goals.carbs_g,
        "fat_g": goals.fat_g,
        "fiber_g": goals.fiber_g,
        "source": goals.source,
    }


def _meal_to_dict(meal: PlannedMeal) -> dict[str, object]:
    return {
        "meal_type": meal.meal_type.value,
        "items": [
            {
                "ingredient_id": item.ingredient_id,
                "name": item.name,
                "quantity": item.quantity,
                "nutrition": macros_to_dict(item.nutrition),
            }
            for item in meal.items
        ],
        "subtotal": macros_to_dict(meal.subtotal),
    }


def plan_to_dict(plan: MealPlan) -> dict[str, object]:
    return {
        "id": str(plan.id) if plan.id else None,
        "user_id": str(plan.user_id),
        "day": plan.day.isoformat(),
        "target_calories": plan.target_calories,
        "meals": [_meal_to_dict(meal) for meal in plan.meals],
        "total": macros_to_dict(plan.total),
        "generated_at": plan.generated_at.isoformat(),
        "notes": plan.notes,
    }


def summary_to_dict(summary: MealSummary) -> dict[str, object]:
    return {
        "meal_type": summary.meal_type.value,
        "day": summary.day.isoformat(),
        "consumed": macros_to_dict(summary.consumed),
        "remaining": macros_to_dict(summary.remaining),
        "exceeded": macros_to_dict(summary.exceeded),
        "daily_goals": goals_to_dict(summary.daily_goals),
    }


def event_to_dict(event: LedgerEvent) -> dict[str, object]:
    """Return the message pushed to real-time subscribers."""
    payload: dict[str, object] = {
        "type": event.type,
        "ledger": ledger_to_dict(event.ledger),
    }
    if event.entry is not None:
        payload["entry"] = entry_to_dict(event.entry)
    if event.removed_id is not None:
        payload["removed_id"] = event.removed_id
    return payload
