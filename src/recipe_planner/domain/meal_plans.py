"""Daily meal plan domain models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NutritionPlan:
    """Per-meal calorie targets and dietary restrictions for a day."""

    meal_targets: dict[str, float]
    diet_type: str = "none"
    disliked_food: frozenset[str] = frozenset()
    allergies: frozenset[str] = frozenset()


@dataclass(frozen=True)
class FoodItem:
    """A single recipe placed in a meal slot."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    consumed: bool = False


@dataclass(frozen=True)
class DailyMeal:
    """A scheduled meal slot with its suggested items."""

    id: str
    time: str
    label: str
    calories: float
    target_calories: float
    items: list[FoodItem] = field(default_factory=list)
    completed: bool = False
