"""Supabase repository for health profiles and manual goals."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutrition_ledger.config import parse_health_conditions
from nutrition_ledger.domain.goals import HealthProfile, ManualGoals
from nutrition_ledger.services.goals import GoalRepository


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goal inputs."""

    client: Client

    def get_health_profile(self, user_id: UUID) -> HealthProfile | None:
        """Return the user's health profile, if any."""
        response = (
            self.client.table("health_profiles")
            .select("weight_kg, height_cm, age, activity_level, health_conditions")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        conditions = row.get("health_conditions")
        return HealthProfile(
            weight_kg=_optional_float(row.get("weight_kg")),
            height_cm=_optional_float(row.get("height_cm")),
            age=int(row["age"]) if row.get("age") is not None else None,
            activity_level=row.get("activity_level"),
            health_conditions=(
                [str(item) for item in conditions]
                if isinstance(conditions, list)
                else parse_health_conditions(conditions)
            ),
        )

    def get_manual_goals(self, user_id: UUID) -> ManualGoals | None:
        """Return the user's manual goal record, if any."""
        response = (
            self.client.table("nutrition_goals")
            .select("calories, protein_g, carbs_g, fat_g, fiber_g, use_manual")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ManualGoals(
            calories=_optional_float(row.get("calories")),
            protein_g=_optional_float(row.get("protein_g")),
            carbs_g=_optional_float(row.get("carbs_g")),
            fat_g=_optional_float(row.get("fat_g")),
            fiber_g=_optional_float(row.get("fiber_g")),
            use_manual=bool(row.get("use_manual")),
        )

    def save_manual_goals(self, user_id: UUID, goals: ManualGoals) -> None:
        """Insert or replace the user's manual goal record."""
        self.client.table("nutrition_goals").upsert(
            {
                "user_id": str(user_id),
                "calories": goals.calories,
                "protein_g": goals.protein_g,
                "carbs_g": goals.carbs_g,
                "fat_g": goals.fat_g,
                "fiber_g": goals.fiber_g,
                "use_manual": goals.use_manual,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    def set_use_manual(self, user_id: UUID, use_manual: bool) -> None:
        """Toggle whether the manual record is in effect."""
        self.client.table("nutrition_goals").update(
            {
                "use_manual": use_manual,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("user_id", str(user_id)).execute()


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
