"""Ranking and diversity filtering for recipe candidates."""

from collections.abc import Iterable

from recipe_planner.domain.recipes import Recipe

MAX_SELECTED_RECIPES = 3
_MIN_TOKEN_LENGTH = 4
_MIN_SHARED_TOKENS = 2


def select_recipes(
    candidates: Iterable[Recipe],
    target_calories: float,
    limit: int = MAX_SELECTED_RECIPES,
) -> list[Recipe]:
    """Pick up to ``limit`` calorie-appropriate recipes with distinct names.

    Candidates are ranked by distance to the calorie target (stable, so ties
    keep their input order) and accepted greedily unless their name is
    similar to one already accepted.
    """
    ranked = sorted(
        candidates, key=lambda recipe: abs(recipe.calories - target_calories)
    )
    selected: list[Recipe] = []
    for recipe in ranked:
        if len(selected) >= limit:
            break
        if any(are_similar_names(recipe.name, chosen.name) for chosen in selected):
            continue
        selected.append(recipe)
    return selected


def are_similar_names(first: str, second: str) -> bool:
    """Return True when two names share at least two significant words."""
    shared = _significant_tokens(first) & _significant_tokens(second)
    return len(shared) >= _MIN_SHARED_TOKENS


def _significant_tokens(name: str) -> set[str]:
    return {
        token for token in name.lower().split() if len(token) >= _MIN_TOKEN_LENGTH
    }
