"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request

from recipe_planner.api.admin import router as admin_router
from recipe_planner.api.models import (
    DailyPlanPayload,
    MarkUsedPayload,
    RecipeRequestPayload,
)
from recipe_planner.app_logging import configure_logging
from recipe_planner.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/recipes/generate")
    async def generate_recipes(
        payload: RecipeRequestPayload, request: Request
    ) -> dict[str, object]:
        """Return recipes for a meal slot."""
        state_container: AppContainer = request.app.state.container
        recipes = await state_container.recipe_service.generate_recipes_for_meal(
            payload.to_request()
        )
        return {"recipes": [asdict(recipe) for recipe in recipes]}

    @app.post("/recipes/{recipe_id}/used")
    async def mark_recipe_used(
        recipe_id: str, payload: MarkUsedPayload, request: Request
    ) -> dict[str, str]:
        """Record that a recipe was shown to the user."""
        state_container: AppContainer = request.app.state.container
        state_container.recipe_service.mark_recipe_as_used(recipe_id, payload.meal_type)
        return {"status": "ok"}

    @app.post("/meal-plans/daily")
    async def daily_meal_plan(
        payload: DailyPlanPayload, request: Request
    ) -> dict[str, object]:
        """Build a day of meals from per-meal calorie targets."""
        state_container: AppContainer = request.app.state.container
        meals = await state_container.meal_plan_service.build_daily_meals(
            payload.to_plan(), completed_meals=payload.completed_meals
        )
        return {"meals": [asdict(meal) for meal in meals]}

    return app
