"""Webhook notifier adapter."""

from dataclasses import dataclass
from uuid import UUID

import httpx

from nutrition_ledger.domain.errors import NotificationFailure
from nutrition_ledger.domain.events import MealSummary
from nutrition_ledger.domain.meal_plans import MealPlan
from nutrition_ledger.serializers import plan_to_dict, summary_to_dict
from nutrition_ledger.services.notifications import Notifier


@dataclass
class HttpxWebhookNotifier(Notifier):
    """Posts meal summaries and meal plans to a webhook using httpx."""

    webhook_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, webhook_url: str) -> "HttpxWebhookNotifier":
        """Create a notifier with a managed httpx session."""
        return cls(webhook_url=webhook_url, http_client=httpx.AsyncClient())

    async def send_meal_summary(self, user_id: UUID, summary: MealSummary) -> None:
        """Send the summary as a JSON payload."""
        await self._post(
            {
                "type": "meal_summary",
                "user_id": str(user_id),
                "summary": summary_to_dict(summary),
            },
            f"{summary.meal_type} summary",
        )

    async def send_meal_plan(self, user_id: UUID, plan: MealPlan) -> None:
        """Send the day's plan as a JSON payload."""
        await self._post(
            {
                "type": "meal_plan",
                "user_id": str(user_id),
                "meal_plan": plan_to_dict(plan),
            },
            f"meal plan for {plan.day.isoformat()}",
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _post(self, payload: dict[str, object], description: str) -> None:
        try:
            response = await self.http_client.post(
                self.webhook_url, json=payload, timeout=10
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationFailure(f"Failed to deliver {description}") from exc
