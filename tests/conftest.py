"""Shared test fixtures."""

import random
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from uuid import UUID, uuid4

import pytest

from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.catalog import CatalogIngredient, CatalogRecipe
from nutrition_ledger.domain.events import MealSummary
from nutrition_ledger.domain.goals import HealthProfile, ManualGoals
from nutrition_ledger.domain.ledger import Ledger, LedgerEntry
from nutrition_ledger.domain.meal_plans import MealPlan
from nutrition_ledger.domain.nutrition import MacroProfile
from nutrition_ledger.services.broadcast import TopicBroadcaster
from nutrition_ledger.services.entries import CatalogRepository, EntryNormalizer
from nutrition_ledger.services.goals import GoalRepository, GoalService
from nutrition_ledger.services.ledger import LedgerRepository, LedgerService
from nutrition_ledger.services.meal_plans import (
    CandidatePoolRepository,
    MealPlanGenerator,
    MealPlanRepository,
    MealPlanService,
)
from nutrition_ledger.services.notifications import MealFinalizer, Notifier
from nutrition_ledger.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)


def macros(
    calories: float,
    protein_g: float = 0.0,
    carbs_g: float = 0.0,
    fat_g: float = 0.0,
    fiber_g: float = 0.0,
) -> MacroProfile:
    return MacroProfile(calories, protein_g, carbs_g, fat_g, fiber_g)


@dataclass
class InMemoryLedgerRepository(LedgerRepository):
    """In-memory ledger repository for tests."""

    ledgers: dict[UUID, Ledger] = field(default_factory=dict)
    day_starts: dict[UUID, datetime] = field(default_factory=dict)
    fail_on: set[str] = field(default_factory=set)

    def find_ledger(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> Ledger | None:
        for ledger in self.ledgers.values():
            if (
                ledger.user_id == user_id
                and start <= self.day_starts[ledger.id] < end
            ):
                return ledger
        return None

    def create_ledger(self, user_id: UUID, day: date, day_start: datetime) -> Ledger:
        ledger = Ledger(
            id=uuid4(),
            user_id=user_id,
            day=day,
            entries=[],
            totals=MacroProfile.zero(),
        )
        self.ledgers[ledger.id] = ledger
        self.day_starts[ledger.id] = day_start
        return ledger

    def get_ledger(self, ledger_id: UUID, user_id: UUID) -> Ledger | None:
        ledger = self.ledgers.get(ledger_id)
        if ledger is None or ledger.user_id != user_id:
            return None
        return ledger

    def list_ledgers(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Ledger]:
        found = [
            ledger
            for ledger in self.ledgers.values()
            if ledger.user_id == user_id
            and start <= self.day_starts[ledger.id] < end
        ]
        return sorted(found, key=lambda ledger: ledger.day, reverse=True)

    def insert_entry(self, ledger_id: UUID, entry: LedgerEntry) -> None:
        self._check("insert_entry")
        ledger = self.ledgers[ledger_id]
        entries = sorted([*ledger.entries, entry], key=lambda item: item.logged_at)
        self.ledgers[ledger_id] = replace(ledger, entries=entries)

    def delete_entry(self, ledger_id: UUID, entry_id: UUID) -> None:
        self._check("delete_entry")
        ledger = self.ledgers[ledger_id]
        self.ledgers[ledger_id] = replace(
            ledger,
            entries=[entry for entry in ledger.entries if entry.id != entry_id],
        )

    def update_totals(self, ledger_id: UUID, totals: MacroProfile) -> None:
        self._check("update_totals")
        self.ledgers[ledger_id] = replace(self.ledgers[ledger_id], totals=totals)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise ConnectionError("database unavailable")


@dataclass
class InMemoryCatalogRepository(CatalogRepository, CandidatePoolRepository):
    """In-memory catalog for tests."""

    ingredients: dict[str, CatalogIngredient] = field(default_factory=dict)
    recipes: dict[str, CatalogRecipe] = field(default_factory=dict)
    requested_tags: list[list[str]] = field(default_factory=list)

    def add_ingredient(
        self,
        ingredient_id: str,
        calories: float,
        category: str = "protein",
        tags: list[str] | None = None,
        name: str | None = None,
    ) -> CatalogIngredient:
        ingredient = CatalogIngredient(
            id=ingredient_id,
            name=name or ingredient_id.title(),
            category=category,
            tags=tags or [],
            nutrition=macros(calories, 10.0, 20.0, 5.0, 2.0),
        )
        self.ingredients[ingredient_id] = ingredient
        return ingredient

    def get_ingredient(self, ingredient_id: str) -> CatalogIngredient | None:
        return self.ingredients.get(ingredient_id)

    def get_recipe(self, recipe_id: str) -> CatalogRecipe | None:
        return self.recipes.get(recipe_id)

    def list_candidates(
        self, required_tags: list[str], limit: int
    ) -> list[CatalogIngredient]:
        self.requested_tags.append(required_tags)
        matches = [
            ingredient
            for ingredient in self.ingredients.values()
            if all(tag in ingredient.tags for tag in required_tags)
        ]
        return matches[:limit]


@dataclass
class InMemoryGoalRepository(GoalRepository):
    """In-memory goal repository for tests."""

    profiles: dict[UUID, HealthProfile] = field(default_factory=dict)
    manual: dict[UUID, ManualGoals] = field(default_factory=dict)
    unavailable: bool = False

    def get_health_profile(self, user_id: UUID) -> HealthProfile | None:
        return self.profiles.get(user_id)

    def get_manual_goals(self, user_id: UUID) -> ManualGoals | None:
        return self.manual.get(user_id)

    def save_manual_goals(self, user_id: UUID, goals: ManualGoals) -> None:
        if self.unavailable:
            raise ConnectionError("database unavailable")
        self.manual[user_id] = goals

    def set_use_manual(self, user_id: UUID, use_manual: bool) -> None:
        if self.unavailable:
            raise ConnectionError("database unavailable")
        current = self.manual.get(user_id)
        if current is not None:
            self.manual[user_id] = replace(current, use_manual=use_manual)


@dataclass
class InMemoryMealPlanRepository(MealPlanRepository):
    """In-memory meal plan repository for tests."""

    plans: dict[tuple[UUID, date], MealPlan] = field(default_factory=dict)

    def get_plan(self, user_id: UUID, day: date) -> MealPlan | None:
        return self.plans.get((user_id, day))

    def upsert_plan(self, plan: MealPlan) -> MealPlan:
        stored = replace(plan, id=plan.id or uuid4())
        self.plans[(plan.user_id, plan.day)] = stored
        return stored

    def list_plans(self, user_id: UUID, start: date, end: date) -> list[MealPlan]:
        found = [
            plan
            for (owner, day), plan in self.plans.items()
            if owner == user_id and start <= day <= end
        ]
        return sorted(found, key=lambda plan: plan.day, reverse=True)


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    timezones: dict[UUID, str] = field(default_factory=dict)

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        self.timezones[user_id] = timezone


@dataclass
class FakeNotifier(Notifier):
    """Notifier that records summaries and plans, optionally failing."""

    sent: list[tuple[UUID, MealSummary]] = field(default_factory=list)
    plans: list[tuple[UUID, MealPlan]] = field(default_factory=list)
    error: Exception | None = None

    async def send_meal_summary(self, user_id: UUID, summary: MealSummary) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((user_id, summary))

    async def send_meal_plan(self, user_id: UUID, plan: MealPlan) -> None:
        if self.error is not None:
            raise self.error
        self.plans.append((user_id, plan))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def catalog() -> InMemoryCatalogRepository:
    catalog = InMemoryCatalogRepository()
    catalog.add_ingredient("oats", 150.0, category="grains")
    catalog.add_ingredient("yogurt", 100.0, category="dairy")
    catalog.add_ingredient("chicken", 200.0, category="protein")
    catalog.add_ingredient("apple", 80.0, category="fruit", tags=["breakfast"])
    catalog.recipes["salad"] = CatalogRecipe(
        id="salad", name="Green Salad", nutrition=macros(180.0, 6.0, 12.0, 11.0, 5.0)
    )
    return catalog


@pytest.fixture
def ledger_repository() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def goal_repository() -> InMemoryGoalRepository:
    return InMemoryGoalRepository()


@pytest.fixture
def broadcaster() -> TopicBroadcaster:
    return TopicBroadcaster()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def user_settings_service() -> UserSettingsService:
    return UserSettingsService(InMemoryUserSettingsRepository())


@pytest.fixture
def ledger_service(
    ledger_repository: InMemoryLedgerRepository,
    catalog: InMemoryCatalogRepository,
    user_settings_service: UserSettingsService,
    broadcaster: TopicBroadcaster,
) -> LedgerService:
    return LedgerService(
        repository=ledger_repository,
        normalizer=EntryNormalizer(catalog),
        user_settings=user_settings_service,
        broadcaster=broadcaster,
    )


@pytest.fixture
def goal_service(goal_repository: InMemoryGoalRepository) -> GoalService:
    return GoalService(goal_repository)


@pytest.fixture
def container(
    settings: Settings,
    catalog: InMemoryCatalogRepository,
    broadcaster: TopicBroadcaster,
    user_settings_service: UserSettingsService,
    ledger_service: LedgerService,
    goal_service: GoalService,
    notifier: FakeNotifier,
) -> AppContainer:
    meal_plan_service = MealPlanService(
        goal_service=goal_service,
        candidates=catalog,
        repository=InMemoryMealPlanRepository(),
        catalog=catalog,
        generator=MealPlanGenerator(random.Random(7)),
        notifier=notifier,
    )
    meal_finalizer = MealFinalizer(
        ledger_service=ledger_service,
        goal_service=goal_service,
        notifier=notifier,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        broadcaster=broadcaster,
        user_settings_service=user_settings_service,
        ledger_service=ledger_service,
        goal_service=goal_service,
        meal_plan_service=meal_plan_service,
        meal_finalizer=meal_finalizer,
        close_resources=close_resources,
    )
