"""Pydantic models for API request payloads."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class AddEntryRequest(BaseModel):
    """Food logging payload."""

    model_config = ConfigDict(populate_by_name=True)

    source_kind: str = Field(alias="sourceKind")
    source_ref: str | None = Field(default=None, alias="sourceRef")
    name: str | None = None
    quantity: float = 1.0
    meal_type: str = Field(alias="mealType")
    day: date | None = Field(default=None, alias="date")
    nutrition: dict[str, object] | None = None


class GoalsRequest(BaseModel):
    """Manual goal override payload."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None


class FinalizeMealRequest(BaseModel):
    """Meal finalization payload."""

    model_config = ConfigDict(populate_by_name=True)

    meal_type: str = Field(alias="mealType")
    day: date | None = Field(default=None, alias="date")


class GenerateMealPlanRequest(BaseModel):
    """Meal plan generation payload."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")


class TimezoneRequest(BaseModel):
    """Timezone update payload."""

    timezone: str


class PlanItemPayload(BaseModel):
    """Ingredient line of a user-composed meal plan."""

    model_config = ConfigDict(populate_by_name=True)

    ingredient_id: str = Field(alias="ingredientId")
    quantity: float = 1.0


class PlanMealPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    meal_type: str = Field(alias="mealType")
    items: list[PlanItemPayload] = Field(default_factory=list)


class SaveMealPlanRequest(BaseModel):
    """User-composed meal plan payload."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")
    meals: list[PlanMealPayload]
    notes: str | None = None
