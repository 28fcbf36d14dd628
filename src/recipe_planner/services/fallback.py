"""Static recipe catalog used when live recipes are unavailable."""

import itertools
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from recipe_planner.domain.recipes import MealPlanRequest, MealType, Recipe

CALORIE_TOLERANCE = 0.3
MAX_FALLBACK_RECIPES = 3
DEFAULT_READY_IN_MINUTES = 30
DEFAULT_SERVINGS = 1


@dataclass(frozen=True)
class CatalogRecipe:
    """A hand-curated recipe with literal nutrition values."""

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float


FALLBACK_RECIPES: dict[MealType, tuple[CatalogRecipe, ...]] = {
    MealType.BREAKFAST: (
        CatalogRecipe("Avena con frutos rojos y almendras", 320, 12, 45, 8),
        CatalogRecipe("Tostada integral con aguacate y huevo", 380, 18, 25, 22),
        CatalogRecipe("Smoothie verde con espinacas y plátano", 280, 15, 35, 6),
        CatalogRecipe("Yogurt griego con granola casera", 350, 20, 30, 12),
        CatalogRecipe("Pancakes de avena con miel", 420, 16, 55, 10),
        CatalogRecipe("Bowl de açaí con coco y semillas", 390, 8, 48, 18),
        CatalogRecipe("Tortilla francesa con verduras", 310, 22, 8, 20),
        CatalogRecipe("Muesli con leche de almendras", 340, 11, 42, 14),
    ),
    MealType.LUNCH: (
        CatalogRecipe("Ensalada de quinoa con pollo y verduras", 520, 35, 45, 18),
        CatalogRecipe("Salmón a la plancha con arroz integral", 580, 42, 38, 24),
        CatalogRecipe("Bowl mediterráneo con hummus", 480, 18, 52, 22),
        CatalogRecipe("Pasta integral con pesto y tomates cherry", 510, 16, 68, 16),
        CatalogRecipe("Curry de lentejas con arroz basmati", 490, 22, 72, 8),
        CatalogRecipe("Wrap de pavo con vegetales frescos", 450, 28, 42, 16),
        CatalogRecipe("Risotto de champiñones y espárragos", 470, 14, 58, 18),
        CatalogRecipe("Poke bowl con atún y edamame", 540, 38, 44, 20),
    ),
    MealType.DINNER: (
        CatalogRecipe("Pescado blanco al horno con verduras", 380, 32, 15, 18),
        CatalogRecipe("Pechuga de pollo con puré de coliflor", 420, 38, 12, 22),
        CatalogRecipe("Tofu salteado con brócoli y sésamo", 340, 24, 18, 20),
        CatalogRecipe("Merluza en papillote con limón", 360, 35, 8, 16),
        CatalogRecipe("Ensalada de salmón ahumado y aguacate", 450, 28, 12, 32),
        CatalogRecipe("Calabacín relleno de quinoa y verduras", 320, 15, 35, 12),
        CatalogRecipe("Sepia a la plancha con espinacas", 290, 30, 8, 14),
        CatalogRecipe("Crema de calabaza con semillas", 280, 8, 25, 16),
    ),
    MealType.SNACKS: (
        CatalogRecipe("Mix de frutos secos y dátiles", 180, 6, 15, 12),
        CatalogRecipe("Yogurt natural con arándanos", 120, 8, 18, 2),
        CatalogRecipe("Hummus con bastones de zanahoria", 150, 6, 12, 8),
        CatalogRecipe("Manzana con mantequilla de almendra", 200, 6, 20, 12),
        CatalogRecipe("Batido de proteínas con plátano", 220, 25, 18, 4),
        CatalogRecipe("Tostada de centeno con queso fresco", 160, 12, 15, 6),
        CatalogRecipe("Smoothie de mango y coco", 190, 4, 28, 8),
        CatalogRecipe("Pudding de chía con frutas", 210, 8, 22, 10),
    ),
}


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class FallbackCatalog:
    """Samples recipes from the static catalog near a calorie target."""

    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = _utc_now
    recipes: dict[MealType, tuple[CatalogRecipe, ...]] = field(
        default_factory=lambda: FALLBACK_RECIPES
    )
    _sequence: "itertools.count[int]" = field(
        init=False, default_factory=itertools.count
    )

    def sample(self, request: MealPlanRequest) -> list[Recipe]:
        """Return up to three random catalog recipes for the request."""
        category = self.recipes.get(request.meal_type, self.recipes[MealType.SNACKS])
        target = request.target_calories
        suitable = [
            item
            for item in category
            if abs(item.calories - target) <= target * CALORIE_TOLERANCE
        ]
        pool = suitable or list(category)
        self.rng.shuffle(pool)
        chosen = pool[: min(MAX_FALLBACK_RECIPES, len(pool))]
        millis = int(self.clock().timestamp() * 1000)
        return [
            Recipe(
                id=f"fallback_{request.meal_type}_{next(self._sequence)}_{millis}",
                name=item.name,
                calories=item.calories,
                protein=item.protein,
                carbs=item.carbs,
                fat=item.fat,
                image=None,
                ready_in_minutes=DEFAULT_READY_IN_MINUTES,
                servings=DEFAULT_SERVINGS,
            )
            for item in chosen
        ]
