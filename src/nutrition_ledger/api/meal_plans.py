"""Meal plan endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from nutrition_ledger.api.dependencies import require_user
from nutrition_ledger.api.models import (  # noqa: TC001
    GenerateMealPlanRequest,
    SaveMealPlanRequest,
)
from nutrition_ledger.domain.meal_plans import PlanItemRequest, PlanMealRequest
from nutrition_ledger.serializers import plan_to_dict

if TYPE_CHECKING:
    from nutrition_ledger.containers import AppContainer

router = APIRouter(prefix="/meal-plans", tags=["meal-plans"])


@router.post("/generate")
async def generate_meal_plan(
    body: GenerateMealPlanRequest,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Generate and store a plan for the day, replacing any existing one."""
    container: AppContainer = request.app.state.container
    plan = await container.meal_plan_service.generate_meal_plan(user_id, body.day)
    return plan_to_dict(plan)


@router.post("")
async def save_meal_plan(
    body: SaveMealPlanRequest,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Store a plan composed by the user from catalog ingredients."""
    container: AppContainer = request.app.state.container
    meals = [
        PlanMealRequest(
            meal_type=meal.meal_type,
            items=[
                PlanItemRequest(
                    ingredient_id=item.ingredient_id, quantity=item.quantity
                )
                for item in meal.items
            ],
        )
        for meal in body.meals
    ]
    plan = container.meal_plan_service.save_meal_plan(
        user_id, body.day, meals, body.notes
    )
    return plan_to_dict(plan)


@router.get("")
async def list_meal_plans(
    start: date, end: date, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    plans = container.meal_plan_service.list_meal_plans(user_id, start, end)
    return {"meal_plans": [plan_to_dict(plan) for plan in plans]}


@router.get("/{day}")
async def get_meal_plan(
    day: date, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return plan_to_dict(container.meal_plan_service.get_meal_plan(user_id, day))


@router.post("/{day}/notify")
async def send_meal_plan(
    day: date, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, bool]:
    """Send the day's plan through the configured notification channel."""
    container: AppContainer = request.app.state.container
    delivered = await container.meal_plan_service.send_meal_plan(user_id, day)
    return {"delivered": delivered}
