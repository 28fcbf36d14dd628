"""Shared test fixtures."""

import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from recipe_planner.adapters.spoonacular_client import SpoonacularClient
from recipe_planner.config import Settings
from recipe_planner.containers import AppContainer
from recipe_planner.services.cache import InMemoryKeyValueStorage, RecipeCacheStore
from recipe_planner.services.fallback import FallbackCatalog
from recipe_planner.services.meal_plans import MealPlanService
from recipe_planner.services.provider import RecipeProvider
from recipe_planner.services.recipes import RecipeService


def make_record(  # noqa: PLR0913
    recipe_id: int,
    title: str,
    calories: float,
    protein: float = 20,
    carbs: float = 40,
    fat: float = 15,
) -> dict[str, object]:
    """Build a Spoonacular complexSearch result record."""
    return {
        "id": recipe_id,
        "title": title,
        "image": f"https://img.spoonacular.com/recipes/{recipe_id}-312x231.jpg",
        "readyInMinutes": 25,
        "servings": 2,
        "sourceUrl": f"https://example.com/recipes/{recipe_id}",
        "nutrition": {
            "nutrients": [
                {"name": "Calories", "amount": calories, "unit": "kcal"},
                {"name": "Protein", "amount": protein, "unit": "g"},
                {"name": "Carbohydrates", "amount": carbs, "unit": "g"},
                {"name": "Fat", "amount": fat, "unit": "g"},
            ]
        },
    }


def default_search_payload() -> dict[str, object]:
    return {
        "results": [
            make_record(1, "Grilled Chicken Salad", 480),
            make_record(2, "Grilled Chicken Salad Bowl", 505),
            make_record(3, "Lentil Curry", 530),
            make_record(4, "Salmon Teriyaki", 700),
            make_record(5, "Veggie Pasta", 450),
        ],
        "totalResults": 5,
    }


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = field(default_factory=lambda: datetime(2025, 3, 3, 12, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@dataclass
class RecordingSleep:
    """Sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@dataclass
class FakeSpoonacularClient(SpoonacularClient):
    """Fake Spoonacular client that fails a number of times, then answers."""

    payload: dict[str, object] = field(default_factory=default_search_payload)
    failures: int = 0
    error: Exception = field(default_factory=lambda: httpx.ConnectError("offline"))
    calls: list[dict[str, object]] = field(default_factory=list)

    async def search_recipes(self, params: dict[str, object]) -> dict[str, object]:
        self.calls.append(params)
        if len(self.calls) <= self.failures:
            raise self.error
        return self.payload


@dataclass
class BrokenKeyValueStorage:
    """Storage whose reads and writes always fail."""

    saves: int = 0

    def load(self, key: str) -> str | None:
        raise ConnectionError("storage offline")

    def save(self, key: str, value: str) -> None:
        self.saves += 1
        raise ConnectionError("storage offline")


def build_recipe_service(
    client: SpoonacularClient,
    *,
    storage: InMemoryKeyValueStorage | None = None,
    clock: FakeClock | None = None,
    sleep: RecordingSleep | None = None,
    seed: int = 7,
    fetch_deadline_seconds: float | None = 30.0,
) -> RecipeService:
    """Wire a recipe service with deterministic collaborators."""
    resolved_clock = clock or FakeClock()
    return RecipeService(
        cache=RecipeCacheStore(
            storage if storage is not None else InMemoryKeyValueStorage(),
            clock=resolved_clock,
        ),
        provider=RecipeProvider(client=client, sleep=sleep or RecordingSleep()),
        fallback=FallbackCatalog(rng=random.Random(seed), clock=resolved_clock),
        fetch_deadline_seconds=fetch_deadline_seconds,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        spoonacular_api_key="spoon-key",
        admin_token="admin-token",
        supabase_url=None,
        supabase_service_key=None,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def spoonacular_client() -> FakeSpoonacularClient:
    return FakeSpoonacularClient()


@pytest.fixture
def recipe_service(
    spoonacular_client: FakeSpoonacularClient,
    storage: InMemoryKeyValueStorage,
    clock: FakeClock,
) -> RecipeService:
    return build_recipe_service(spoonacular_client, storage=storage, clock=clock)


@pytest.fixture
def container(settings: Settings, recipe_service: RecipeService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        recipe_service=recipe_service,
        meal_plan_service=MealPlanService(recipe_service),
        close_resources=close_resources,
    )
