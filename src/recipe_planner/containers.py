"""Dependency container wiring for the application."""

import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from recipe_planner.adapters.spoonacular_client import HttpxSpoonacularClient
from recipe_planner.adapters.supabase_kv_storage import SupabaseKeyValueStorage
from recipe_planner.config import Settings
from recipe_planner.services.cache import (
    InMemoryKeyValueStorage,
    KeyValueStorage,
    RecipeCacheStore,
)
from recipe_planner.services.fallback import FallbackCatalog
from recipe_planner.services.meal_plans import MealPlanService
from recipe_planner.services.provider import RecipeProvider
from recipe_planner.services.recipes import RecipeService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    recipe_service: RecipeService
    meal_plan_service: MealPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage: KeyValueStorage
    if resolved_settings.supabase_enabled:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        storage = SupabaseKeyValueStorage(
            supabase_client, table_name=resolved_settings.recipe_cache_table
        )
    else:
        storage = InMemoryKeyValueStorage()
    spoonacular_client = HttpxSpoonacularClient.create(
        api_key=resolved_settings.spoonacular_api_key,
        base_url=resolved_settings.spoonacular_base_url,
    )
    recipe_service = RecipeService(
        cache=RecipeCacheStore(storage),
        provider=RecipeProvider(
            client=spoonacular_client,
            max_attempts=resolved_settings.provider_max_attempts,
            retry_delay_seconds=resolved_settings.provider_retry_delay_seconds,
        ),
        fallback=FallbackCatalog(rng=random.Random(resolved_settings.fallback_seed)),
        fetch_deadline_seconds=resolved_settings.fetch_deadline_seconds,
    )
    meal_plan_service = MealPlanService(recipe_service)

    async def close_resources() -> None:
        await spoonacular_client.close()

    return AppContainer(
        settings=resolved_settings,
        recipe_service=recipe_service,
        meal_plan_service=meal_plan_service,
        close_resources=close_resources,
    )
