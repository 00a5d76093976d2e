"""Daily ledger, goal and meal finalization endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from nutrition_ledger.api.dependencies import require_user
from nutrition_ledger.api.models import (  # noqa: TC001
    AddEntryRequest,
    FinalizeMealRequest,
    GoalsRequest,
)
from nutrition_ledger.domain.ledger import EntryRequest
from nutrition_ledger.serializers import (
    entry_to_dict,
    goals_to_dict,
    ledger_to_dict,
    summary_to_dict,
)

if TYPE_CHECKING:
    from nutrition_ledger.containers import AppContainer

router = APIRouter(prefix="/tracking", tags=["tracking"])


@router.post("/entries")
async def add_entry(
    body: AddEntryRequest, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Log a food entry into the day's ledger."""
    container: AppContainer = request.app.state.container
    ledger, entry = await container.ledger_service.add_entry(
        user_id,
        EntryRequest(
            source_kind=body.source_kind,
            quantity=body.quantity,
            meal_type=body.meal_type,
            source_ref=body.source_ref,
            name=body.name,
            day=body.day,
            raw_nutrition=body.nutrition,
        ),
    )
    return {"ledger": ledger_to_dict(ledger), "entry": entry_to_dict(entry)}


@router.delete("/entries")
async def remove_entry(
    ledger_id: UUID,
    entry_identifier: str,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Remove an entry by id, source reference or position."""
    container: AppContainer = request.app.state.container
    ledger = await container.ledger_service.remove_entry(
        user_id, ledger_id, entry_identifier
    )
    return ledger_to_dict(ledger)


@router.post("/finalize-meal")
async def finalize_meal(
    body: FinalizeMealRequest, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Summarize progress against goals after a meal."""
    container: AppContainer = request.app.state.container
    summary = await container.meal_finalizer.finalize_meal(
        user_id, body.meal_type, body.day
    )
    return summary_to_dict(summary)


@router.get("/goals")
async def get_goals(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return the goals currently in effect."""
    container: AppContainer = request.app.state.container
    return goals_to_dict(container.goal_service.resolve_goals(user_id))


@router.post("/goals")
async def set_goals(
    body: GoalsRequest, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Store a manual goal override."""
    container: AppContainer = request.app.state.container
    goals = container.goal_service.set_manual_goals(
        user_id, body.model_dump(exclude_none=True)
    )
    return goals_to_dict(goals)


@router.delete("/goals")
async def clear_goals(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return to goals derived from the health profile."""
    container: AppContainer = request.app.state.container
    return goals_to_dict(container.goal_service.clear_manual_goals(user_id))


@router.get("")
async def list_ledgers(
    start: date, end: date, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return the user's ledgers between two days."""
    container: AppContainer = request.app.state.container
    ledgers = container.ledger_service.list_ledgers(user_id, start, end)
    return {"ledgers": [ledger_to_dict(ledger) for ledger in ledgers]}


@router.get("/{day}")
async def get_ledger(
    day: date, request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return the day's ledger, creating an empty one on first read."""
    container: AppContainer = request.app.state.container
    return ledger_to_dict(container.ledger_service.get_or_create(user_id, day))
