"""Tests for container wiring and settings helpers."""

import asyncio

from nutrition_ledger.adapters.httpx_notification_client import HttpxWebhookNotifier
from nutrition_ledger.config import parse_health_conditions
from nutrition_ledger.containers import build_container
from nutrition_ledger.services.notifications import LoggingNotifier


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.ledger_service.broadcaster is container.broadcaster
    assert isinstance(container.meal_finalizer.notifier, LoggingNotifier)
    assert container.meal_plan_service.pool_limit == 50
    asyncio.run(container.close_resources())


def test_build_container_uses_webhook_when_configured(settings) -> None:
    configured = settings.model_copy(
        update={"notification_webhook_url": "https://notify.example.com/hook"}
    )

    container = build_container(configured)

    assert isinstance(container.meal_finalizer.notifier, HttpxWebhookNotifier)
    asyncio.run(container.close_resources())


def test_parse_health_conditions() -> None:
    assert parse_health_conditions(None) == []
    assert parse_health_conditions(" Diabetes ,, Heart Disease,diabetes") == [
        "diabetes",
        "heart_disease",
    ]
