"""Daily meal plan assembly on top of recipe acquisition."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from recipe_planner.domain.meal_plans import DailyMeal, FoodItem, NutritionPlan
from recipe_planner.domain.recipes import (
    MealPlanRequest,
    MealType,
    Recipe,
    UserPreferences,
)
from recipe_planner.services.recipes import RecipeService

MORNING_SNACK_SHARE = 0.4
AFTERNOON_SNACK_SHARE = 0.6
DEFAULT_COOKING_TIME_MINUTES = 30

_MAIN_MEALS = (
    (MealType.BREAKFAST, "07:00", "Breakfast"),
    (MealType.LUNCH, "13:30", "Lunch"),
    (MealType.DINNER, "20:00", "Dinner"),
)
_SNACK_SLOTS = (
    ("morning-snack", "10:30", "Morning snack", MORNING_SNACK_SHARE),
    ("afternoon-snack", "16:00", "Afternoon snack", AFTERNOON_SNACK_SHARE),
)

_logger = logging.getLogger(__name__)


@dataclass
class MealPlanService:
    """Builds a day of meal slots from per-meal calorie targets."""

    recipe_service: RecipeService

    async def build_daily_meals(
        self, plan: NutritionPlan, completed_meals: Iterable[str] = ()
    ) -> list[DailyMeal]:
        """Return the scheduled meals for a plan, skipping slots without recipes."""
        completed = set(completed_meals)
        preferences = UserPreferences(
            diet_type=plan.diet_type or "none",
            disliked_food=plan.disliked_food,
            allergies=plan.allergies,
            cooking_time_preference=DEFAULT_COOKING_TIME_MINUTES,
        )
        meals: list[DailyMeal] = []

        for meal_type, time, label in _MAIN_MEALS:
            target = plan.meal_targets.get(meal_type)
            if not target:
                continue
            recipes = await self.recipe_service.generate_recipes_for_meal(
                MealPlanRequest(
                    meal_type=meal_type, target_calories=target, preferences=preferences
                )
            )
            if not recipes:
                continue
            meals.append(
                DailyMeal(
                    id=meal_type.value,
                    time=time,
                    label=label,
                    calories=target,
                    target_calories=target,
                    items=[
                        _to_food_item(meal_type.value, recipe, index)
                        for index, recipe in enumerate(recipes)
                    ],
                    completed=meal_type.value in completed,
                )
            )

        snack_target = plan.meal_targets.get(MealType.SNACKS)
        if snack_target:
            recipes = await self.recipe_service.generate_recipes_for_meal(
                MealPlanRequest(
                    meal_type=MealType.SNACKS,
                    target_calories=snack_target,
                    preferences=preferences,
                )
            )
            for (slot_id, time, label, share), recipe in zip(
                _SNACK_SLOTS, recipes, strict=False
            ):
                slot_target = round(snack_target * share)
                meals.append(
                    DailyMeal(
                        id=slot_id,
                        time=time,
                        label=label,
                        calories=slot_target,
                        target_calories=slot_target,
                        items=[_to_food_item(slot_id, recipe.scaled(share), 0)],
                        completed=slot_id in completed,
                    )
                )

        _logger.info("Built daily plan with %s meals", len(meals))
        return meals


def generate_item_id(slot_id: str, name: str, index: int) -> str:
    """Return a stable item id from the slot, recipe name and position."""
    slug = re.sub(r"\s+", "_", name.lower())
    return f"{slot_id}_{slug}_{index}"


def _to_food_item(slot_id: str, recipe: Recipe, index: int) -> FoodItem:
    return FoodItem(
        id=generate_item_id(slot_id, recipe.name, index),
        name=recipe.name,
        calories=recipe.calories,
        protein=recipe.protein,
        carbs=recipe.carbs,
        fat=recipe.fat,
    )
