"""Meal plan generation, storage and delivery."""

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.catalog import CatalogIngredient
from nutrition_ledger.domain.errors import (
    NoSuitableIngredientsError,
    NotFoundError,
    ValidationError,
)
from nutrition_ledger.domain.ledger import MealType
from nutrition_ledger.domain.meal_plans import (
    MealPlan,
    PlanMealRequest,
    PlannedItem,
    PlannedMeal,
)
from nutrition_ledger.domain.nutrition import MacroProfile
from nutrition_ledger.services.entries import CatalogRepository
from nutrition_ledger.services.goals import GoalService
from nutrition_ledger.services.notifications import LoggingNotifier, Notifier
from nutrition_ledger.services.persistence import persist
from nutrition_ledger.services.user_settings import require_ordered_range

_logger = logging.getLogger(__name__)

MEAL_DISTRIBUTION = {
    MealType.BREAKFAST: 0.25,
    MealType.LUNCH: 0.35,
    MealType.DINNER: 0.30,
    MealType.SNACK: 0.10,
}
BREAKFAST_CATEGORIES = frozenset({"grains", "dairy"})
BREAKFAST_TAG = "breakfast"
MAX_UNITS_PER_ITEM = 2
FILL_RATIO = 0.9
CONDITION_TAGS = {
    "diabetes": "diabetes-friendly",
    "heart_disease": "heart-healthy",
}


class CandidatePoolRepository(Protocol):
    """Read access to ingredients eligible for plan generation."""

    def list_candidates(
        self, required_tags: list[str], limit: int
    ) -> list[CatalogIngredient]:
        """Return up to limit ingredients carrying every required tag."""


class MealPlanRepository(Protocol):
    """Persistence interface for generated meal plans."""

    def get_plan(self, user_id: UUID, day: date) -> MealPlan | None:
        """Return the user's plan for a day, if any."""

    def upsert_plan(self, plan: MealPlan) -> MealPlan:
        """Insert or replace the plan for (user, day) and return it."""

    def list_plans(self, user_id: UUID, start: date, end: date) -> list[MealPlan]:
        """Return plans for days in [start, end], newest first."""


def is_slot_candidate(meal_type: MealType, ingredient: CatalogIngredient) -> bool:
    """Return True when the ingredient may be served in the meal slot."""
    if meal_type is MealType.BREAKFAST:
        return (
            ingredient.category in BREAKFAST_CATEGORIES
            or BREAKFAST_TAG in ingredient.tags
        )
    return True


def tags_for_conditions(conditions: list[str]) -> list[str]:
    """Map health conditions to the tags candidates must carry."""
    tags = []
    for condition in conditions:
        tag = CONDITION_TAGS.get(condition.strip().lower())
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _subtotal(items: list[PlannedItem]) -> MacroProfile:
    total = MacroProfile.zero()
    for item in items:
        total = total.plus(item.nutrition.scaled(item.quantity))
    return total


@dataclass
class MealPlanGenerator:
    """Fills each meal slot's calorie budget from a shuffled candidate pool.

    Two calls with identical input may select different items; pass a seeded
    random.Random for reproducible output.
    """

    rng: random.Random = field(default_factory=random.Random)

    def generate(
        self, target_calories: float, candidates: list[CatalogIngredient]
    ) -> list[PlannedMeal]:
        """Return one planned meal per slot in breakfast-to-snack order."""
        meals = []
        for meal_type, share in MEAL_DISTRIBUTION.items():
            items = self.select_for_meal(candidates, target_calories * share, meal_type)
            meals.append(
                PlannedMeal(meal_type=meal_type, items=items, subtotal=_subtotal(items))
            )
        return meals

    def select_for_meal(
        self,
        candidates: list[CatalogIngredient],
        target_calories: float,
        meal_type: MealType,
    ) -> list[PlannedItem]:
        """Greedily pick items until 90% of the slot target is reached."""
        pool = [
            candidate
            for candidate in candidates
            if is_slot_candidate(meal_type, candidate)
        ]
        if not pool:
            raise NoSuitableIngredientsError(
                f"No suitable ingredients for {meal_type}"
            )
        self.rng.shuffle(pool)

        items: list[PlannedItem] = []
        selected: set[str] = set()
        current = 0.0
        for candidate in pool:
            if current >= target_calories * FILL_RATIO:
                break
            if candidate.id in selected:
                continue
            per_unit = candidate.nutrition.calories
            # Zero-calorie items would never move the running total.
            if per_unit <= 0:
                continue
            quantity = min(
                MAX_UNITS_PER_ITEM, math.ceil((target_calories - current) / per_unit)
            )
            if quantity > 0:
                items.append(
                    PlannedItem(
                        ingredient_id=candidate.id,
                        name=candidate.name,
                        quantity=quantity,
                        nutrition=candidate.nutrition,
                    )
                )
                current += per_unit * quantity
                selected.add(candidate.id)
        return items


@dataclass
class MealPlanService:
    """Generates, stores, reads and sends daily meal plans."""

    goal_service: GoalService
    candidates: CandidatePoolRepository
    repository: MealPlanRepository
    catalog: CatalogRepository
    generator: MealPlanGenerator = field(default_factory=MealPlanGenerator)
    notifier: Notifier = field(default_factory=LoggingNotifier)
    pool_limit: int = 50

    async def generate_meal_plan(self, user_id: UUID, day: date) -> MealPlan:
        """Generate a plan for the day, replacing any existing one."""
        goals = self.goal_service.resolve_goals(user_id)
        profile = self.goal_service.repository.get_health_profile(user_id)
        conditions = profile.health_conditions if profile else []
        required_tags = tags_for_conditions(conditions)
        pool = self.candidates.list_candidates(required_tags, self.pool_limit)
        if not pool:
            raise NoSuitableIngredientsError(
                "No suitable ingredients found for your health profile"
            )
        meals = self.generator.generate(goals.calories, pool)
        saved = self._store(user_id, day, goals.calories, meals, notes=None)
        _logger.info(
            "Generated meal plan for user %s on %s: %.0f kcal of %.0f target",
            user_id,
            day,
            saved.total.calories,
            goals.calories,
        )
        return saved

    def save_meal_plan(
        self,
        user_id: UUID,
        day: date,
        meals: list[PlanMealRequest],
        notes: str | None = None,
    ) -> MealPlan:
        """Store a user-composed plan, pricing each item from the catalog.

        Replaces any existing plan for the day. Existing notes are kept when
        none are given.
        """
        planned = [self._plan_meal(meal) for meal in meals]
        target = self.goal_service.resolve_goals(user_id).calories
        saved = self._store(user_id, day, target, planned, notes)
        _logger.info(
            "Saved meal plan for user %s on %s: %d meals, %.0f kcal",
            user_id,
            day,
            len(planned),
            saved.total.calories,
        )
        return saved

    def get_meal_plan(self, user_id: UUID, day: date) -> MealPlan:
        """Return the stored plan for the day."""
        plan = self.repository.get_plan(user_id, day)
        if plan is None:
            raise NotFoundError(f"Meal plan not found for {day.isoformat()}")
        return plan

    def list_meal_plans(self, user_id: UUID, start: date, end: date) -> list[MealPlan]:
        """Return stored plans between two days, inclusive."""
        require_ordered_range(start, end)
        return self.repository.list_plans(user_id, start, end)

    async def send_meal_plan(self, user_id: UUID, day: date) -> bool:
        """Hand the day's plan to the notifier; return whether it was delivered."""
        plan = self.get_meal_plan(user_id, day)
        try:
            await self.notifier.send_meal_plan(user_id, plan)
        except Exception:
            _logger.exception(
                "Failed to send meal plan for %s", day, extra={"user": user_id}
            )
            return False
        return True

    def _plan_meal(self, meal: PlanMealRequest) -> PlannedMeal:
        try:
            meal_type = MealType(meal.meal_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown meal type: {meal.meal_type}") from exc
        items = []
        for requested in meal.items:
            ingredient = self.catalog.get_ingredient(requested.ingredient_id)
            if ingredient is None:
                raise NotFoundError(
                    f"Ingredient not found: {requested.ingredient_id}"
                )
            items.append(
                PlannedItem(
                    ingredient_id=ingredient.id,
                    name=ingredient.name,
                    quantity=_item_quantity(requested.quantity),
                    nutrition=ingredient.nutrition,
                )
            )
        return PlannedMeal(meal_type=meal_type, items=items, subtotal=_subtotal(items))

    def _store(
        self,
        user_id: UUID,
        day: date,
        target_calories: float,
        meals: list[PlannedMeal],
        notes: str | None,
    ) -> MealPlan:
        existing = self.repository.get_plan(user_id, day)
        if existing is not None:
            _logger.info("Replacing meal plan for user %s on %s", user_id, day)
        total = MacroProfile.zero()
        for meal in meals:
            total = total.plus(meal.subtotal)
        plan = MealPlan(
            id=None,
            user_id=user_id,
            day=day,
            target_calories=target_calories,
            meals=meals,
            total=total,
            generated_at=datetime.now(tz=UTC),
            notes=notes or (existing.notes if existing else ""),
        )
        return persist("save meal plan", lambda: self.repository.upsert_plan(plan))


def _item_quantity(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError("Item quantity must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Item quantity must be greater than 0")
    return float(value)
