"""Pydantic request models for the HTTP API."""

from pydantic import BaseModel, Field

from recipe_planner.domain.meal_plans import NutritionPlan
from recipe_planner.domain.recipes import (
    MAX_TARGET_CALORIES,
    MealPlanRequest,
    MealType,
    UserPreferences,
)


class PreferencesPayload(BaseModel):
    """Dietary preferences payload."""

    diet_type: str = "none"
    disliked_food: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    cooking_time_preference: int = 30

    def to_preferences(self) -> UserPreferences:
        """Convert into the domain preferences value."""
        return UserPreferences(
            diet_type=self.diet_type or "none",
            disliked_food=frozenset(self.disliked_food),
            allergies=frozenset(self.allergies),
            cooking_time_preference=self.cooking_time_preference,
        )


class RecipeRequestPayload(BaseModel):
    """Body for recipe generation."""

    meal_type: MealType
    target_calories: float = Field(
        gt=0, le=MAX_TARGET_CALORIES, allow_inf_nan=False
    )
    preferences: PreferencesPayload = Field(default_factory=PreferencesPayload)
    exclude_recipe_ids: list[str] = Field(default_factory=list)

    def to_request(self) -> MealPlanRequest:
        """Convert into a domain request."""
        return MealPlanRequest(
            meal_type=self.meal_type,
            target_calories=self.target_calories,
            preferences=self.preferences.to_preferences(),
            exclude_recipe_ids=frozenset(self.exclude_recipe_ids),
        )


class MarkUsedPayload(BaseModel):
    """Body for marking a recipe as served."""

    meal_type: MealType


class MealTargetPayload(BaseModel):
    """Calorie target for one meal."""

    target_calories: float = Field(
        gt=0, le=MAX_TARGET_CALORIES, allow_inf_nan=False
    )


class DailyPlanPayload(BaseModel):
    """Body for daily meal plan generation."""

    meals: dict[MealType, MealTargetPayload]
    diet_type: str = "none"
    disliked_food: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    completed_meals: list[str] = Field(default_factory=list)

    def to_plan(self) -> NutritionPlan:
        """Convert into a domain nutrition plan."""
        return NutritionPlan(
            meal_targets={
                meal_type.value: target.target_calories
                for meal_type, target in self.meals.items()
            },
            diet_type=self.diet_type or "none",
            disliked_food=frozenset(self.disliked_food),
            allergies=frozenset(self.allergies),
        )
