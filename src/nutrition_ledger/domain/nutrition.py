"""Nutrition domain models."""

from dataclasses import dataclass

MACRO_FIELDS = ("calories", "protein_g", "carbs_g", "fat_g", "fiber_g")


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrients for a food, entry or day."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    sugar_g: float = 0.0
    sodium_mg: float = 0.0

    @classmethod
    def zero(cls) -> "MacroProfile":
        """Return an all-zero profile."""
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)

    def scaled(self, factor: float) -> "MacroProfile":
        """Return every field multiplied by factor."""
        return MacroProfile(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
            fiber_g=self.fiber_g * factor,
            sugar_g=self.sugar_g * factor,
            sodium_mg=self.sodium_mg * factor,
        )

    def plus(self, other: "MacroProfile") -> "MacroProfile":
        """Add the macro fields of other into a new profile."""
        return MacroProfile(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
            fiber_g=self.fiber_g + other.fiber_g,
        )

    def macros(self) -> dict[str, float]:
        """Return the aggregated macro fields as a dict."""
        return {name: getattr(self, name) for name in MACRO_FIELDS}
