"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_ledger.adapters.httpx_notification_client import HttpxWebhookNotifier
from nutrition_ledger.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from nutrition_ledger.adapters.supabase_goal_repository import SupabaseGoalRepository
from nutrition_ledger.adapters.supabase_ledger_repository import (
    SupabaseLedgerRepository,
)
from nutrition_ledger.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from nutrition_ledger.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from nutrition_ledger.config import Settings
from nutrition_ledger.services.broadcast import TopicBroadcaster
from nutrition_ledger.services.entries import EntryNormalizer
from nutrition_ledger.services.goals import GoalService
from nutrition_ledger.services.ledger import LedgerService
from nutrition_ledger.services.meal_plans import MealPlanService
from nutrition_ledger.services.notifications import (
    LoggingNotifier,
    MealFinalizer,
    Notifier,
)
from nutrition_ledger.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    broadcaster: TopicBroadcaster
    user_settings_service: UserSettingsService
    ledger_service: LedgerService
    goal_service: GoalService
    meal_plan_service: MealPlanService
    meal_finalizer: MealFinalizer
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    broadcaster = TopicBroadcaster()
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client),
        default_timezone=resolved_settings.default_timezone,
    )
    ledger_service = LedgerService(
        repository=SupabaseLedgerRepository(supabase_client),
        normalizer=EntryNormalizer(catalog_repository),
        user_settings=user_settings_service,
        broadcaster=broadcaster,
    )
    goal_service = GoalService(SupabaseGoalRepository(supabase_client))
    webhook_notifier: HttpxWebhookNotifier | None = None
    notifier: Notifier = LoggingNotifier()
    if resolved_settings.notification_webhook_url:
        webhook_notifier = HttpxWebhookNotifier.create(
            resolved_settings.notification_webhook_url
        )
        notifier = webhook_notifier
    meal_plan_service = MealPlanService(
        goal_service=goal_service,
        candidates=catalog_repository,
        repository=SupabaseMealPlanRepository(supabase_client),
        catalog=catalog_repository,
        notifier=notifier,
        pool_limit=resolved_settings.candidate_pool_limit,
    )
    meal_finalizer = MealFinalizer(
        ledger_service=ledger_service,
        goal_service=goal_service,
        notifier=notifier,
    )

    async def close_resources() -> None:
        if webhook_notifier is not None:
            await webhook_notifier.close()

    return AppContainer(
        settings=resolved_settings,
        broadcaster=broadcaster,
        user_settings_service=user_settings_service,
        ledger_service=ledger_service,
        goal_service=goal_service,
        meal_plan_service=meal_plan_service,
        meal_finalizer=meal_finalizer,
        close_resources=close_resources,
    )
