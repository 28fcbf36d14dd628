"""Tests for the recipe cache store."""

import json
from datetime import timedelta

from recipe_planner.domain.recipes import (
    CacheFingerprint,
    MealPlanRequest,
    MealType,
    Recipe,
    UserPreferences,
)
from recipe_planner.services.cache import (
    CACHE_STORAGE_KEY,
    InMemoryKeyValueStorage,
    RecipeCacheStore,
)
from tests.conftest import BrokenKeyValueStorage, FakeClock

LUNCH = CacheFingerprint(MealType.LUNCH, "none", 500)
DINNER = CacheFingerprint(MealType.DINNER, "none", 500)


def _recipes(count: int, prefix: str = "spoon") -> list[Recipe]:
    return [
        Recipe(
            id=f"{prefix}_{index}",
            name=f"Recipe {index}",
            calories=400 + index * 10,
            protein=20,
            carbs=40,
            fat=10,
        )
        for index in range(count)
    ]


def test_lookup_returns_at_most_three_in_stored_order() -> None:
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=FakeClock())
    store.store(LUNCH, _recipes(4))

    result = store.lookup(LUNCH)

    assert [recipe.id for recipe in result] == ["spoon_0", "spoon_1", "spoon_2"]


def test_lookup_misses_unknown_fingerprint() -> None:
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=FakeClock())

    assert store.lookup(LUNCH) == []


def test_expired_entry_is_treated_as_absent_but_kept() -> None:
    clock = FakeClock()
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=clock)
    store.store(LUNCH, _recipes(2))

    clock.advance(timedelta(hours=24))
    assert len(store.lookup(LUNCH)) == 2

    clock.advance(timedelta(seconds=1))
    assert store.lookup(LUNCH) == []
    assert store.entry(LUNCH) is not None


def test_cooldown_hides_recipe_for_seven_days() -> None:
    clock = FakeClock()
    store = RecipeCacheStore(
        InMemoryKeyValueStorage(), clock=clock, cache_duration=timedelta(days=30)
    )
    store.store(LUNCH, _recipes(3))

    store.mark_used("spoon_1", MealType.LUNCH)
    assert [recipe.id for recipe in store.lookup(LUNCH)] == ["spoon_0", "spoon_2"]

    clock.advance(timedelta(days=7))
    assert "spoon_1" not in [recipe.id for recipe in store.lookup(LUNCH)]

    clock.advance(timedelta(seconds=1))
    assert "spoon_1" in [recipe.id for recipe in store.lookup(LUNCH)]


def test_cooldown_applies_to_fresh_entry() -> None:
    clock = FakeClock()
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=clock)
    store.store(LUNCH, _recipes(1))
    store.mark_used("spoon_0", "lunch")

    clock.advance(timedelta(hours=1))

    assert store.lookup(LUNCH) == []


def test_mark_used_only_touches_matching_meal_type() -> None:
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=FakeClock())
    store.store(LUNCH, _recipes(2))
    store.store(DINNER, _recipes(2))
    lunch_vegan = CacheFingerprint(MealType.LUNCH, "vegan", 650)
    store.store(lunch_vegan, _recipes(2))

    store.mark_used("spoon_0", MealType.DINNER)

    assert len(store.lookup(LUNCH)) == 2
    assert len(store.lookup(lunch_vegan)) == 2
    assert [recipe.id for recipe in store.lookup(DINNER)] == ["spoon_1"]


def test_mark_used_replaces_whole_entry() -> None:
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=FakeClock())
    store.store(LUNCH, _recipes(2))
    before = store.entry(LUNCH)

    store.mark_used("spoon_0", MealType.LUNCH)
    after = store.entry(LUNCH)

    assert before is not None and after is not None
    assert before is not after
    assert before.last_used == {}
    assert "spoon_0" in after.last_used
    assert after.timestamp == before.timestamp


def test_store_resets_last_used() -> None:
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=FakeClock())
    store.store(LUNCH, _recipes(1))
    store.mark_used("spoon_0", MealType.LUNCH)

    store.store(LUNCH, _recipes(1))

    assert [recipe.id for recipe in store.lookup(LUNCH)] == ["spoon_0"]


def test_sweep_expired_removes_old_entries_and_is_idempotent() -> None:
    clock = FakeClock()
    store = RecipeCacheStore(InMemoryKeyValueStorage(), clock=clock)
    store.store(LUNCH, _recipes(1))
    clock.advance(timedelta(hours=25))
    store.store(DINNER, _recipes(1))

    assert store.sweep_expired() == 1
    assert store.entry(LUNCH) is None
    assert store.entry(DINNER) is not None
    assert store.sweep_expired() == 0
    assert len(store) == 1


def test_state_survives_reload_from_storage() -> None:
    clock = FakeClock()
    storage = InMemoryKeyValueStorage()
    store = RecipeCacheStore(storage, clock=clock)
    recipes = [
        Recipe(
            id="spoon_42",
            name="Lentil Curry",
            calories=530,
            protein=22,
            carbs=60,
            fat=12,
            image="https://img.example/42.jpg",
            ready_in_minutes=35,
            servings=4,
            source_url="https://example.com/42",
            provider_id=42,
        ),
        *_recipes(1),
    ]
    store.store(LUNCH, recipes)
    store.mark_used("spoon_0", MealType.LUNCH)

    reloaded = RecipeCacheStore(storage, clock=clock)

    assert reloaded.lookup(LUNCH) == [recipes[0]]
    entry = reloaded.entry(LUNCH)
    assert entry is not None
    assert entry.last_used == {"spoon_0": clock.now}
    assert "lunch|none|500" in json.loads(storage.values[CACHE_STORAGE_KEY])


def test_corrupt_payload_loads_as_empty_cache() -> None:
    storage = InMemoryKeyValueStorage(values={CACHE_STORAGE_KEY: "{not json"})

    store = RecipeCacheStore(storage, clock=FakeClock())

    assert len(store) == 0


def test_malformed_entry_loads_as_empty_cache() -> None:
    storage = InMemoryKeyValueStorage(
        values={CACHE_STORAGE_KEY: json.dumps({"lunch_none_500": {"recipes": []}})}
    )

    store = RecipeCacheStore(storage, clock=FakeClock())

    assert len(store) == 0


def test_storage_failures_do_not_break_the_cache() -> None:
    storage = BrokenKeyValueStorage()
    store = RecipeCacheStore(storage, clock=FakeClock())

    store.store(LUNCH, _recipes(2))

    assert storage.saves == 1
    assert len(store.lookup(LUNCH)) == 2


def test_fingerprint_rounds_calories_and_defaults_diet() -> None:
    first = RecipeCacheStore.fingerprint_for(
        MealPlanRequest(MealType.LUNCH, 500.2, UserPreferences(diet_type=""))
    )
    second = RecipeCacheStore.fingerprint_for(MealPlanRequest(MealType.LUNCH, 500))
    other = RecipeCacheStore.fingerprint_for(MealPlanRequest(MealType.LUNCH, 501))

    assert first == second
    assert first != other
    assert first.serialize() == "lunch|none|500"
    assert CacheFingerprint.parse(first.serialize()) == first


def test_diet_type_with_separator_survives_reload() -> None:
    storage = InMemoryKeyValueStorage()
    clock = FakeClock()
    mixed_diet = CacheFingerprint(MealType.DINNER, "vegan|gluten free", 600)
    store = RecipeCacheStore(storage, clock=clock)
    store.store(LUNCH, _recipes(2))
    store.store(mixed_diet, _recipes(2, prefix="mixed"))

    reloaded = RecipeCacheStore(storage, clock=clock)

    assert len(reloaded) == 2
    assert [recipe.id for recipe in reloaded.lookup(mixed_diet)] == [
        "mixed_0",
        "mixed_1",
    ]
    assert CacheFingerprint.parse(mixed_diet.serialize()) == mixed_diet


def test_unreadable_entry_does_not_drop_the_others() -> None:
    clock = FakeClock()
    source = InMemoryKeyValueStorage()
    RecipeCacheStore(source, clock=clock).store(LUNCH, _recipes(1))
    payload = json.loads(source.values[CACHE_STORAGE_KEY])
    payload["dinner|a|b|600"] = payload["lunch|none|500"]
    payload["snacks|none|150"] = {"timestamp": "yesterday"}
    storage = InMemoryKeyValueStorage(
        values={CACHE_STORAGE_KEY: json.dumps(payload)}
    )

    store = RecipeCacheStore(storage, clock=clock)

    assert len(store) == 1
    assert store.lookup(LUNCH) == _recipes(1)
