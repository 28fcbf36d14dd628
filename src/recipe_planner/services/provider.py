"""Recipe provider integration with retry and response normalization."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import ValidationError

from recipe_planner.adapters.spoonacular_client import SpoonacularClient
from recipe_planner.adapters.spoonacular_models import (
    SpoonacularNutrient,
    SpoonacularRecipe,
    SpoonacularSearchResponse,
)
from recipe_planner.domain.recipes import MealPlanRequest, MealType, Recipe

DEFAULT_CALORIES_WHEN_MISSING = 300.0
DEFAULT_MACRO_WHEN_MISSING = 0.0
RESULTS_PER_QUERY = 8
CALORIE_WINDOW = 0.2
RATE_LIMIT_STATUS_CODES = frozenset({402, 429})

_MEAL_TYPE_QUERY = {
    MealType.BREAKFAST: "breakfast",
    MealType.LUNCH: "main course",
    MealType.DINNER: "main course",
    MealType.SNACKS: "snack",
}

_logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base error for recipe provider failures."""


class ProviderTransientError(ProviderError):
    """A single provider attempt failed and may be retried."""


class ProviderRateLimitError(ProviderTransientError):
    """The provider rejected the call because of quota or rate limits."""


class ProviderMalformedError(ProviderTransientError):
    """The provider returned data that does not match the expected schema."""


class ProviderExhaustedError(ProviderError):
    """Every provider attempt failed."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Recipe provider failed after {attempts} attempts")
        self.attempts = attempts


@dataclass(frozen=True)
class ValidRecord:
    """A provider record normalized into a recipe."""

    recipe: Recipe


@dataclass(frozen=True)
class MalformedRecord:
    """A provider record that could not be normalized."""

    raw: object
    reason: str


ParsedRecord = ValidRecord | MalformedRecord


@dataclass
class RecipeProvider:
    """Fetches recipe candidates from Spoonacular with linear backoff."""

    client: SpoonacularClient
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def fetch_candidates(self, request: MealPlanRequest) -> list[Recipe]:
        """Return normalized candidates, raising ProviderExhaustedError on failure."""
        params = build_search_params(request)
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._fetch_once(params)
            except ProviderTransientError as exc:
                _logger.warning(
                    "Recipe provider failed (attempt %s/%s, meal=%s): %s",
                    attempt,
                    self.max_attempts,
                    request.meal_type,
                    exc,
                )
                if attempt >= self.max_attempts:
                    raise ProviderExhaustedError(attempt) from exc
                await self.sleep(self.retry_delay_seconds * attempt)

    async def _fetch_once(self, params: dict[str, object]) -> list[Recipe]:
        try:
            payload = await self.client.search_recipes(params)
        except Exception as exc:
            status_code = _status_code_from_exception(exc)
            if status_code in RATE_LIMIT_STATUS_CODES:
                raise ProviderRateLimitError(
                    f"Provider quota exceeded (status={status_code})"
                ) from exc
            raise ProviderTransientError(
                f"Provider call failed (status={status_code or 'n/a'}): {exc}"
            ) from exc

        try:
            response = SpoonacularSearchResponse.model_validate(payload)
        except ValidationError as exc:
            raise ProviderMalformedError("Provider response is malformed") from exc

        recipes: list[Recipe] = []
        for raw in response.results:
            parsed = parse_record(raw)
            if isinstance(parsed, MalformedRecord):
                raise ProviderMalformedError(parsed.reason)
            recipes.append(parsed.recipe)
        return recipes


def build_search_params(request: MealPlanRequest) -> dict[str, object]:
    """Translate a recipe request into complexSearch query parameters."""
    preferences = request.preferences
    params: dict[str, object] = {
        "type": _MEAL_TYPE_QUERY.get(request.meal_type, "main course"),
        "number": RESULTS_PER_QUERY,
        "addRecipeInformation": "true",
        "addRecipeNutrition": "true",
        "minCalories": round(request.target_calories * (1 - CALORIE_WINDOW)),
        "maxCalories": round(request.target_calories * (1 + CALORIE_WINDOW)),
    }
    if preferences.diet_type and preferences.diet_type != "none":
        params["diet"] = preferences.diet_type
    excluded = (
        set(preferences.disliked_food)
        | set(preferences.allergies)
        | set(request.exclude_recipe_ids)
    )
    if excluded:
        params["excludeIngredients"] = ",".join(sorted(excluded))
    return params


def parse_record(raw: object) -> ParsedRecord:
    """Validate a provider record and normalize it into a recipe."""
    try:
        record = SpoonacularRecipe.model_validate(raw)
    except ValidationError as exc:
        fields = sorted(
            {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
        )
        return MalformedRecord(
            raw=raw, reason=f"Invalid provider record: {', '.join(fields) or 'record'}"
        )
    nutrients = record.nutrition.nutrients if record.nutrition else []
    recipe = Recipe(
        id=f"spoon_{record.id}",
        name=record.title,
        calories=_nutrient_amount(nutrients, "calories", DEFAULT_CALORIES_WHEN_MISSING),
        protein=_nutrient_amount(nutrients, "protein", DEFAULT_MACRO_WHEN_MISSING),
        carbs=_nutrient_amount(nutrients, "carbohydrates", DEFAULT_MACRO_WHEN_MISSING),
        fat=_nutrient_amount(nutrients, "fat", DEFAULT_MACRO_WHEN_MISSING),
        image=record.image,
        ready_in_minutes=record.ready_in_minutes,
        servings=record.servings,
        source_url=record.source_url,
        provider_id=record.id,
    )
    return ValidRecord(recipe=recipe)


def _nutrient_amount(
    nutrients: list[SpoonacularNutrient], name: str, default: float
) -> float:
    """Return the first amount whose name matches case-insensitively."""
    for nutrient in nutrients:
        if nutrient.name.lower() == name and nutrient.amount is not None:
            return max(0.0, float(nutrient.amount))
    return default


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None
