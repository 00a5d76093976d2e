"""Domain models for daily nutrition goals."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HealthProfile:
    """Health profile fields used to derive a calorie goal."""

    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    activity_level: str | None = None
    health_conditions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ManualGoals:
    """User-entered goal override."""

    calories: float | None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    use_manual: bool = False


@dataclass(frozen=True)
class NutritionGoals:
    """Resolved daily calorie and macro targets."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    source: str
