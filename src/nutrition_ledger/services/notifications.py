"""Meal finalization summaries and their delivery."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.errors import ValidationError
from nutrition_ledger.domain.events import MealSummary
from nutrition_ledger.domain.goals import NutritionGoals
from nutrition_ledger.domain.ledger import MealType
from nutrition_ledger.domain.meal_plans import MealPlan
from nutrition_ledger.domain.nutrition import MACRO_FIELDS, MacroProfile
from nutrition_ledger.services.goals import GoalService
from nutrition_ledger.services.ledger import LedgerService

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outbound channel for meal summaries and meal plans."""

    async def send_meal_summary(self, user_id: UUID, summary: MealSummary) -> None:
        """Deliver a finalized meal summary to the user."""

    async def send_meal_plan(self, user_id: UUID, plan: MealPlan) -> None:
        """Deliver a day's meal plan to the user."""


@dataclass
class LoggingNotifier(Notifier):
    """Notifier used when no delivery channel is configured."""

    async def send_meal_summary(self, user_id: UUID, summary: MealSummary) -> None:
        """Log the summary instead of sending it."""
        _logger.info(
            "Notification channel not configured; %s summary for user %s: "
            "%.0f of %.0f kcal",
            summary.meal_type,
            user_id,
            summary.consumed.calories,
            summary.daily_goals.calories,
        )

    async def send_meal_plan(self, user_id: UUID, plan: MealPlan) -> None:
        _logger.info(
            "Notification channel not configured; meal plan for user %s on %s: "
            "%.0f kcal",
            user_id,
            plan.day,
            plan.total.calories,
        )


def build_summary(
    meal_type: MealType, day: date, consumed: MacroProfile, goals: NutritionGoals
) -> MealSummary:
    """Compare consumed totals with goals, clamping each side at zero."""
    remaining: dict[str, float] = {}
    exceeded: dict[str, float] = {}
    for name in MACRO_FIELDS:
        delta = getattr(goals, name) - getattr(consumed, name)
        remaining[name] = max(0.0, delta)
        exceeded[name] = max(0.0, -delta)
    return MealSummary(
        meal_type=meal_type,
        day=day,
        consumed=consumed,
        remaining=MacroProfile(**remaining),
        exceeded=MacroProfile(**exceeded),
        daily_goals=goals,
    )


@dataclass
class MealFinalizer:
    """Summarizes the day's progress when a meal is marked finished."""

    ledger_service: LedgerService
    goal_service: GoalService
    notifier: Notifier

    async def finalize_meal(
        self, user_id: UUID, meal_type: str, day: date | None = None
    ) -> MealSummary:
        """Compute the summary and hand it to the notifier.

        Notifier failures are logged and never reach the caller.
        """
        try:
            parsed_meal_type = MealType(meal_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown meal type: {meal_type}") from exc
        ledger = self.ledger_service.get_or_create(user_id, day)
        goals = self.goal_service.resolve_goals(user_id)
        summary = build_summary(parsed_meal_type, ledger.day, ledger.totals, goals)
        try:
            await self.notifier.send_meal_summary(user_id, summary)
        except Exception:
            _logger.exception(
                "Failed to send %s summary", meal_type, extra={"user": user_id}
            )
        return summary
