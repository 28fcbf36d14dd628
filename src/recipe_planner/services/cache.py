"""Persistent recipe cache with expiry and cooldown windows."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

from recipe_planner.domain.recipes import (
    CacheEntry,
    CacheFingerprint,
    MealPlanRequest,
    MealType,
    Recipe,
)

CACHE_STORAGE_KEY = "recipe_cache"
CACHE_DURATION = timedelta(hours=24)
RECIPE_COOLDOWN = timedelta(days=7)
MAX_CACHED_RESULTS = 3

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Durable string storage addressed by key."""

    def load(self, key: str) -> str | None:
        """Return the stored value for a key, if any."""

    def save(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


@dataclass
class InMemoryKeyValueStorage(KeyValueStorage):
    """Process-local storage used when no database is configured."""

    values: dict[str, str] = field(default_factory=dict)

    def load(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self.values.get(key)

    def save(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self.values[key] = value


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RecipeCacheStore:
    """Recipe cache keyed by request fingerprint.

    Entries expire after ``CACHE_DURATION`` and individual recipes are hidden
    for ``RECIPE_COOLDOWN`` after being served. Every mutation replaces whole
    entries and is written back to storage immediately.
    """

    storage: KeyValueStorage
    clock: Callable[[], datetime] = _utc_now
    storage_key: str = CACHE_STORAGE_KEY
    cache_duration: timedelta = CACHE_DURATION
    recipe_cooldown: timedelta = RECIPE_COOLDOWN
    _entries: dict[CacheFingerprint, CacheEntry] = field(
        init=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._entries = self._load()

    @staticmethod
    def fingerprint_for(request: MealPlanRequest) -> CacheFingerprint:
        """Return the cache fingerprint for a request."""
        return CacheFingerprint.for_request(request)

    def lookup(self, fingerprint: CacheFingerprint) -> list[Recipe]:
        """Return up to three fresh recipes that are not cooling down."""
        entry = self._entries.get(fingerprint)
        now = self.clock()
        if entry is None or self._is_expired(entry, now):
            return []
        available = [
            recipe
            for recipe in entry.recipes
            if not self._is_cooling_down(entry.last_used.get(recipe.id), now)
        ]
        return available[:MAX_CACHED_RESULTS]

    def store(self, fingerprint: CacheFingerprint, recipes: list[Recipe]) -> None:
        """Replace the entry for a fingerprint with freshly fetched recipes."""
        self._entries[fingerprint] = CacheEntry(
            recipes=tuple(recipes), timestamp=self.clock(), last_used={}
        )
        self._persist()

    def mark_used(self, recipe_id: str, meal_type: MealType | str) -> None:
        """Start the cooldown for a recipe in every entry of a meal type."""
        resolved = MealType(meal_type)
        now = self.clock()
        for fingerprint, entry in list(self._entries.items()):
            if fingerprint.meal_type != resolved:
                continue
            self._entries[fingerprint] = replace(
                entry, last_used={**entry.last_used, recipe_id: now}
            )
        self._persist()

    def sweep_expired(self) -> int:
        """Remove expired entries and return how many were dropped."""
        now = self.clock()
        expired = [
            fingerprint
            for fingerprint, entry in self._entries.items()
            if self._is_expired(entry, now)
        ]
        for fingerprint in expired:
            del self._entries[fingerprint]
        self._persist()
        return len(expired)

    def entry(self, fingerprint: CacheFingerprint) -> CacheEntry | None:
        """Return the raw entry for a fingerprint, expired or not."""
        return self._entries.get(fingerprint)

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry, now: datetime) -> bool:
        return now - entry.timestamp > self.cache_duration

    def _is_cooling_down(self, last_used: datetime | None, now: datetime) -> bool:
        return last_used is not None and now - last_used <= self.recipe_cooldown

    def _load(self) -> dict[CacheFingerprint, CacheEntry]:
        try:
            raw = self.storage.load(self.storage_key)
            if not raw:
                return {}
            return _parse_entries(json.loads(raw))
        except Exception:
            _logger.exception("Failed to load recipe cache, starting empty")
            return {}

    def _persist(self) -> None:
        payload = {
            fingerprint.serialize(): _entry_to_payload(entry)
            for fingerprint, entry in self._entries.items()
        }
        try:
            self.storage.save(self.storage_key, json.dumps(payload))
        except Exception:
            _logger.exception("Failed to save recipe cache")


def _entry_to_payload(entry: CacheEntry) -> dict[str, object]:
    return {
        "recipes": [_recipe_to_payload(recipe) for recipe in entry.recipes],
        "timestamp": entry.timestamp.isoformat(),
        "last_used": {
            recipe_id: used_at.isoformat()
            for recipe_id, used_at in entry.last_used.items()
        },
    }


def _recipe_to_payload(recipe: Recipe) -> dict[str, object]:
    return {
        "id": recipe.id,
        "name": recipe.name,
        "calories": recipe.calories,
        "protein": recipe.protein,
        "carbs": recipe.carbs,
        "fat": recipe.fat,
        "image": recipe.image,
        "ready_in_minutes": recipe.ready_in_minutes,
        "servings": recipe.servings,
        "source_url": recipe.source_url,
        "provider_id": recipe.provider_id,
    }


def _parse_entries(payload: object) -> dict[CacheFingerprint, CacheEntry]:
    """Parse a persisted cache payload into entries."""
    if not isinstance(payload, dict):
        raise ValueError("Recipe cache payload must be an object")
    entries: dict[CacheFingerprint, CacheEntry] = {}
    for key, value in payload.items():
        try:
            entries[CacheFingerprint.parse(key)] = _parse_entry(value)
        except (KeyError, TypeError, ValueError, AttributeError):
            _logger.warning("Skipping unreadable recipe cache entry: %r", key)
    return entries


def _parse_entry(row: dict[str, object]) -> CacheEntry:
    last_used_raw = row.get("last_used") or {}
    return CacheEntry(
        recipes=tuple(_parse_recipe(item) for item in row["recipes"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        last_used={
            str(recipe_id): datetime.fromisoformat(used_at)
            for recipe_id, used_at in last_used_raw.items()
        },
    )


def _parse_recipe(row: dict[str, object]) -> Recipe:
    return Recipe(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        fat=float(row.get("fat", 0.0)),
        image=row.get("image"),
        ready_in_minutes=row.get("ready_in_minutes"),
        servings=row.get("servings"),
        source_url=row.get("source_url"),
        provider_id=row.get("provider_id"),
    )
