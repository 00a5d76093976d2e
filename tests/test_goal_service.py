"""Tests for goal derivation and manual overrides."""

from uuid import UUID

import pytest

from nutrition_ledger.domain.errors import UpstreamFailure, ValidationError
from nutrition_ledger.domain.goals import HealthProfile, ManualGoals
from nutrition_ledger.services.goals import (
    GoalService,
    compute_derived_goal,
    derive_macro_goals,
    round_half_up,
)
from tests.conftest import InMemoryGoalRepository


def test_derive_macro_goals_for_2000() -> None:
    assert derive_macro_goals(2000) == {
        "protein_g": 125,
        "carbs_g": 225,
        "fat_g": 67,
        "fiber_g": 25,
    }


def test_round_half_up_matches_half_away_from_zero() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(66.66) == 67
    assert round_half_up(0.4) == 0


def test_incomplete_profile_falls_back_to_2000() -> None:
    assert compute_derived_goal(None) == 2000
    assert compute_derived_goal(HealthProfile(weight_kg=70, height_cm=175)) == 2000


def test_derived_goal_uses_activity_multiplier() -> None:
    profile = HealthProfile(weight_kg=70, height_cm=175, age=30)
    bmr = 88.362 + 13.397 * 70 + 4.799 * 175 - 5.677 * 30

    assert compute_derived_goal(profile) == round_half_up(bmr * 1.2)
    assert compute_derived_goal(
        HealthProfile(weight_kg=70, height_cm=175, age=30, activity_level="active")
    ) == round_half_up(bmr * 1.725)
    assert compute_derived_goal(
        HealthProfile(weight_kg=70, height_cm=175, age=30, activity_level="unknown")
    ) == round_half_up(bmr * 1.2)


def test_set_goals_defaults_missing_macros(
    goal_service: GoalService, user_id: UUID
) -> None:
    goal_service.set_manual_goals(user_id, {"calories": 1800})
    goals = goal_service.resolve_goals(user_id)

    assert goals.source == "manual"
    assert (goals.calories, goals.protein_g, goals.carbs_g, goals.fat_g) == (
        1800,
        125,
        225,
        67,
    )
    assert goals.fiber_g == 25


def test_set_goals_keeps_supplied_macros(
    goal_service: GoalService, user_id: UUID
) -> None:
    goals = goal_service.set_manual_goals(
        user_id, {"calories": 2200, "protein": 150, "fiber": 30}
    )

    assert goals.protein_g == 150
    assert goals.fiber_g == 30
    assert goals.carbs_g == 225


@pytest.mark.parametrize(
    "payload",
    [{}, {"calories": 999}, {"calories": 5001}, {"calories": "lots"}],
)
def test_set_goals_rejects_out_of_range_calories(
    goal_service: GoalService,
    goal_repository: InMemoryGoalRepository,
    user_id: UUID,
    payload: dict[str, object],
) -> None:
    with pytest.raises(ValidationError):
        goal_service.set_manual_goals(user_id, payload)

    assert user_id not in goal_repository.manual


def test_set_goals_rejects_negative_macro(
    goal_service: GoalService, user_id: UUID
) -> None:
    with pytest.raises(ValidationError):
        goal_service.set_manual_goals(user_id, {"calories": 2000, "fat": -1})


def test_clear_goals_returns_to_derived(
    goal_service: GoalService,
    goal_repository: InMemoryGoalRepository,
    user_id: UUID,
) -> None:
    goal_service.set_manual_goals(user_id, {"calories": 1800})

    goals = goal_service.clear_manual_goals(user_id)

    assert goals.source == "derived"
    assert goals.calories == 2000
    assert goal_repository.manual[user_id].calories == 1800


def test_manual_record_ignored_unless_enabled(
    goal_service: GoalService,
    goal_repository: InMemoryGoalRepository,
    user_id: UUID,
) -> None:
    goal_repository.manual[user_id] = ManualGoals(calories=1500, use_manual=False)
    assert goal_service.resolve_goals(user_id).source == "derived"

    goal_repository.manual[user_id] = ManualGoals(calories=None, use_manual=True)
    assert goal_service.resolve_goals(user_id).source == "derived"


def test_goal_write_failures_surface_as_upstream_failure(
    goal_service: GoalService,
    goal_repository: InMemoryGoalRepository,
    user_id: UUID,
) -> None:
    goal_repository.unavailable = True

    with pytest.raises(UpstreamFailure):
        goal_service.set_manual_goals(user_id, {"calories": 1800})
    with pytest.raises(UpstreamFailure):
        goal_service.clear_manual_goals(user_id)

    assert goal_repository.manual == {}
