"""
Read-time aggregates for recipes.

Nothing here is persisted. Every call scans ``rating_<recipeKey>_`` and
``comment_<recipeKey>_`` and recomputes from scratch, so a replaced rating
can never leave a stale running average behind. Cost is O(recipes x related
records) per list call, which is fine for a small catalog.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List

from recipe_catalog.core import keys
from recipe_catalog.core.abstractions import KeyValueStore
from recipe_catalog.models import Recipe, RecipeStats, RecipeWithStats

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def average_rating(values: Iterable[int]) -> float:
    """Arithmetic mean rounded half-up to one decimal; 0.0 for no ratings."""
    values = list(values)
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _rating_values(records: List[dict[str, Any]]) -> List[int]:
    values = []
    for record in records:
        value = record.get("rating")
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning("Skipping rating record with non-integer value: %r", value)
            continue
        values.append(value)
    return values


def compute_stats(store: KeyValueStore, recipe_key: str) -> RecipeStats:
    """Scan the ratings and comments attached to one recipe."""
    ratings = _rating_values(store.get_by_prefix(keys.ratings_prefix(recipe_key)))
    comments = store.scan_prefix(keys.comments_prefix(recipe_key))
    return RecipeStats(
        average_rating=average_rating(ratings),
        total_ratings=len(ratings),
        total_comments=len(comments),
    )


def with_stats(store: KeyValueStore, recipe: Recipe) -> RecipeWithStats:
    stats = compute_stats(store, recipe.key)
    return RecipeWithStats(**recipe.model_dump(), **stats.model_dump())


def with_stats_all(store: KeyValueStore, recipes: Iterable[Recipe]) -> List[RecipeWithStats]:
    return [with_stats(store, recipe) for recipe in recipes]
