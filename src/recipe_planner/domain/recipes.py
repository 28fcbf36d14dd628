"""Recipe domain models."""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import NamedTuple
from urllib.parse import quote, unquote

_FINGERPRINT_SEPARATOR = "|"
MAX_TARGET_CALORIES = 20_000


class MealType(StrEnum):
    """Meal slots a recipe can be requested for."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"


@dataclass(frozen=True)
class UserPreferences:
    """Dietary preferences attached to a recipe request."""

    diet_type: str = "none"
    disliked_food: frozenset[str] = frozenset()
    allergies: frozenset[str] = frozenset()
    cooking_time_preference: int = 30


@dataclass(frozen=True)
class MealPlanRequest:
    """Request for recipes matching a meal slot and calorie target."""

    meal_type: MealType
    target_calories: float
    preferences: UserPreferences = field(default_factory=UserPreferences)
    exclude_recipe_ids: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not math.isfinite(self.target_calories) or self.target_calories <= 0:
            raise ValueError("target_calories must be a positive finite number")
        if self.target_calories > MAX_TARGET_CALORIES:
            raise ValueError(f"target_calories must not exceed {MAX_TARGET_CALORIES}")


@dataclass(frozen=True)
class Recipe:
    """A recipe with per-serving nutrition."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    image: str | None = None
    ready_in_minutes: int | None = None
    servings: int | None = None
    source_url: str | None = None
    provider_id: int | None = None

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbs", "fat"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def scaled(self, factor: float, id: str | None = None) -> "Recipe":  # noqa: A002
        """Return a portion-scaled copy with rounded nutrition values."""
        return replace(
            self,
            id=id or self.id,
            calories=round(self.calories * factor),
            protein=round(self.protein * factor),
            carbs=round(self.carbs * factor),
            fat=round(self.fat * factor),
        )


class CacheFingerprint(NamedTuple):
    """Cache key identifying a (meal type, diet type, calorie target) class."""

    meal_type: MealType
    diet_type: str
    calorie_target: int

    @classmethod
    def for_request(cls, request: MealPlanRequest) -> "CacheFingerprint":
        """Build the fingerprint for a request."""
        return cls(
            meal_type=request.meal_type,
            diet_type=request.preferences.diet_type or "none",
            calorie_target=round(request.target_calories),
        )

    def serialize(self) -> str:
        """Return the stable string form used for persistence.

        The diet type is percent-encoded so a separator inside it survives
        a round trip through ``parse``.
        """
        return _FINGERPRINT_SEPARATOR.join(
            (
                self.meal_type.value,
                quote(self.diet_type, safe=" "),
                str(self.calorie_target),
            )
        )

    @classmethod
    def parse(cls, raw: str) -> "CacheFingerprint":
        """Parse a serialized fingerprint, raising ValueError when malformed."""
        parts = raw.split(_FINGERPRINT_SEPARATOR)
        if len(parts) != 3:
            raise ValueError(f"Malformed cache fingerprint: {raw!r}")
        meal_type, diet_type, calorie_target = parts
        return cls(
            meal_type=MealType(meal_type),
            diet_type=unquote(diet_type),
            calorie_target=int(calorie_target),
        )


@dataclass(frozen=True)
class CacheEntry:
    """Cached recipes for one fingerprint."""

    recipes: tuple[Recipe, ...]
    timestamp: datetime
    last_used: dict[str, datetime] = field(default_factory=dict)
