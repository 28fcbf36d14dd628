"""Recipe acquisition service combining cache, provider and fallback."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from recipe_planner.domain.recipes import (
    CacheFingerprint,
    MealPlanRequest,
    MealType,
    Recipe,
)
from recipe_planner.services.cache import RecipeCacheStore
from recipe_planner.services.fallback import FallbackCatalog
from recipe_planner.services.provider import ProviderError, RecipeProvider
from recipe_planner.services.selection import select_recipes

_logger = logging.getLogger(__name__)


@dataclass
class _FetchLock:
    """Lock shared by requests for one fingerprint, with a user count."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@dataclass
class RecipeService:
    """Resolves recipes for a meal slot.

    Lookup order is cache, then provider (with retries), then the static
    fallback catalog. Acquisition failures never propagate to the caller.
    """

    cache: RecipeCacheStore
    provider: RecipeProvider
    fallback: FallbackCatalog
    fetch_deadline_seconds: float | None = 30.0
    _locks: dict[CacheFingerprint, _FetchLock] = field(
        init=False, default_factory=dict
    )

    async def generate_recipes_for_meal(self, request: MealPlanRequest) -> list[Recipe]:
        """Return up to three recipes for the request."""
        fingerprint = self.cache.fingerprint_for(request)
        cached = self.cache.lookup(fingerprint)
        if cached:
            self._log_cache_hit(fingerprint, cached)
            return cached

        async with self._exclusive(fingerprint):
            # Another request may have filled the entry while we waited.
            cached = self.cache.lookup(fingerprint)
            if cached:
                self._log_cache_hit(fingerprint, cached)
                return cached

            candidates = await self._fetch_candidates(request)
            if candidates:
                selected = select_recipes(candidates, request.target_calories)
                self.cache.store(fingerprint, selected)
                _logger.debug(
                    "Fetched recipes: fingerprint=%s candidates=%s selected=%s",
                    fingerprint.serialize(),
                    len(candidates),
                    len(selected),
                )
                return selected

        _logger.warning(
            "Using fallback recipes: meal=%s target=%s",
            request.meal_type,
            request.target_calories,
        )
        return self.fallback.sample(request)

    def mark_recipe_as_used(self, recipe_id: str, meal_type: MealType | str) -> None:
        """Start the repeat cooldown for a recipe served to the user."""
        self.cache.mark_used(recipe_id, meal_type)

    def clean_expired_cache(self) -> int:
        """Drop expired cache entries and return how many were removed."""
        removed = self.cache.sweep_expired()
        if removed:
            _logger.info("Removed %s expired recipe cache entries", removed)
        return removed

    async def _fetch_candidates(self, request: MealPlanRequest) -> list[Recipe]:
        try:
            async with asyncio.timeout(self.fetch_deadline_seconds):
                return await self.provider.fetch_candidates(request)
        except ProviderError as exc:
            _logger.warning("Recipe provider unavailable: %s", exc)
        except TimeoutError:
            _logger.warning(
                "Recipe provider exceeded %ss deadline", self.fetch_deadline_seconds
            )
        return []

    @asynccontextmanager
    async def _exclusive(self, fingerprint: CacheFingerprint) -> AsyncIterator[None]:
        # Entries live only while a request holds or waits on them.
        slot = self._locks.get(fingerprint)
        if slot is None:
            slot = self._locks[fingerprint] = _FetchLock()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if not slot.users:
                del self._locks[fingerprint]

    @staticmethod
    def _log_cache_hit(fingerprint: CacheFingerprint, cached: list[Recipe]) -> None:
        _logger.debug(
            "Recipe cache hit: fingerprint=%s recipes=%s",
            fingerprint.serialize(),
            len(cached),
        )
