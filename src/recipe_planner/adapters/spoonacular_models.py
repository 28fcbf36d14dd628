"""Pydantic models for Spoonacular search payloads."""

from pydantic import BaseModel, Field


class SpoonacularNutrient(BaseModel):
    """A single nutrient amount."""

    name: str
    amount: float | None = None
    unit: str | None = None


class SpoonacularNutrition(BaseModel):
    """Nutrition block attached to a recipe."""

    nutrients: list[SpoonacularNutrient] = Field(default_factory=list)


class SpoonacularRecipe(BaseModel):
    """Recipe record returned by complexSearch."""

    id: int
    title: str
    image: str | None = None
    ready_in_minutes: int | None = Field(default=None, alias="readyInMinutes")
    servings: int | None = None
    source_url: str | None = Field(default=None, alias="sourceUrl")
    nutrition: SpoonacularNutrition | None = None


class SpoonacularSearchResponse(BaseModel):
    """Top-level complexSearch payload."""

    results: list[dict[str, object]] = Field(default_factory=list)
    total_results: int | None = Field(default=None, alias="totalResults")
