"""
Catalog service: recipe CRUD, rating upsert, comment append.

Owns the encoding of all three entity kinds into the flat KV namespace.
Authorization is not checked here; routes resolve the principal and apply
the role guard before calling in.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from recipe_catalog.core import keys
from recipe_catalog.core.abstractions import KeyValueStore
from recipe_catalog.core.errors import NotFoundError, StorageError, ValidationError
from recipe_catalog.models import (
    MAX_RATING,
    MIN_RATING,
    Comment,
    Principal,
    Rating,
    Recipe,
    RecipeCreate,
    RecipeUpdate,
    RecipeWithStats,
)
from recipe_catalog.services import aggregation
from recipe_catalog.services.prometheus_metrics import record_comment, record_rating

logger = logging.getLogger(__name__)

# Attempts at drawing a recipe key that is not already taken
MAX_KEY_ATTEMPTS = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _decode(model, key: str, value: dict[str, Any]):
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        logger.error("Stored value under %s does not decode: %s", key, e)
        raise StorageError(f"corrupt record {key}") from e


def _decode_all(model, pairs) -> list:
    """Decode a scan result, skipping records that no longer match the model."""
    decoded = []
    for key, value in pairs:
        try:
            decoded.append(model.model_validate(value))
        except PydanticValidationError as e:
            logger.error("Skipping undecodable record %s: %s", key, e)
    return decoded


class CatalogService:
    """Recipe catalog over a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self._clock = clock or utcnow

    # --- recipes ---

    def _load_recipes(self) -> List[Recipe]:
        pairs = []
        for key, value in self.store.scan_prefix(keys.RECIPE_PREFIX):
            if not keys.is_recipe_key(key):
                logger.warning("Ignoring malformed recipe key %s", key)
                continue
            pairs.append((key, value))
        return _decode_all(Recipe, pairs)

    def _require_recipe(self, recipe_key: str) -> Recipe:
        if not keys.is_recipe_key(recipe_key):
            raise NotFoundError("recipe not found")
        value = self.store.get(recipe_key)
        if value is None:
            raise NotFoundError("recipe not found")
        return _decode(Recipe, recipe_key, value)

    def _new_recipe_key(self, moment: datetime) -> str:
        for _ in range(MAX_KEY_ATTEMPTS):
            key = keys.recipe_key(moment)
            if self.store.get(key) is None:
                return key
            logger.warning("Recipe key collision on %s, drawing again", key)
        raise StorageError("could not allocate a recipe key")

    def list_recipes(self) -> List[RecipeWithStats]:
        """All recipes with their aggregates, in store order."""
        return aggregation.with_stats_all(self.store, self._load_recipes())

    def get_recipe(self, recipe_key: str) -> RecipeWithStats:
        return aggregation.with_stats(self.store, self._require_recipe(recipe_key))

    def create_recipe(self, data: RecipeCreate) -> Recipe:
        now = self._clock()
        recipe = Recipe(
            **data.model_dump(),
            key=self._new_recipe_key(now),
            created_at=now,
        )
        self.store.set(recipe.key, recipe.to_json())
        logger.info("Created recipe %s (%s)", recipe.key, recipe.title)
        return recipe

    def update_recipe(self, recipe_key: str, data: RecipeUpdate) -> Recipe:
        existing = self._require_recipe(recipe_key)
        recipe = Recipe(
            **data.model_dump(),
            key=existing.key,
            created_at=existing.created_at,
            updated_at=self._clock(),
        )
        self.store.set(recipe.key, recipe.to_json())
        logger.info("Updated recipe %s", recipe.key)
        return recipe

    def delete_recipe(self, recipe_key: str) -> None:
        """Remove the recipe only. Its ratings and comments stay behind as orphans."""
        self._require_recipe(recipe_key)
        self.store.delete(recipe_key)
        logger.info("Deleted recipe %s", recipe_key)

    def seed(self, recipes: List[RecipeCreate]) -> int:
        """Insert the example dataset. Returns 0 without writing if any recipe exists."""
        if self._load_recipes():
            return 0
        for data in recipes:
            self.create_recipe(data)
        logger.info("Seeded %d example recipes", len(recipes))
        return len(recipes)

    # --- ratings ---

    def submit_rating(self, recipe_key: str, principal: Principal, value: int) -> Rating:
        """Upsert the caller's rating. A second submission replaces the first."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("rating must be an integer")
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
        self._require_recipe(recipe_key)

        key = keys.rating_key(recipe_key, principal.user_id)
        replaced = self.store.get(key) is not None
        rating = Rating(
            recipe_key=recipe_key,
            user_id=principal.user_id,
            user_name=principal.display_name,
            rating=value,
            created_at=self._clock(),
        )
        self.store.set(key, rating.to_json())
        record_rating(replaced)
        return rating

    def get_user_rating(self, recipe_key: str, principal: Optional[Principal]) -> Optional[int]:
        if principal is None:
            return None
        value = self.store.get(keys.rating_key(recipe_key, principal.user_id))
        if value is None:
            return None
        return value.get("rating")

    # --- comments ---

    def add_comment(self, recipe_key: str, principal: Principal, body: str) -> Comment:
        if not body or not body.strip():
            raise ValidationError("comment cannot be empty")
        self._require_recipe(recipe_key)

        now = self._clock()
        key = keys.comment_key(recipe_key, now, principal.user_id)
        comment = Comment(
            key=key,
            recipe_key=recipe_key,
            user_id=principal.user_id,
            user_name=principal.display_name,
            comment=body,
            created_at=now,
        )
        self.store.set(key, comment.to_json())
        record_comment()
        return comment

    def list_comments(self, recipe_key: str) -> List[Comment]:
        """Comments for a recipe, newest first."""
        comments = _decode_all(
            Comment, self.store.scan_prefix(keys.comments_prefix(recipe_key))
        )
        comments.sort(key=lambda c: (c.created_at, c.key), reverse=True)
        return comments

    def delete_comment(self, comment_key: str) -> None:
        parsed = keys.parse_key(comment_key)
        if parsed is None or parsed.kind != keys.KeyKind.COMMENT:
            raise NotFoundError("comment not found")
        if not self.store.delete(comment_key):
            raise NotFoundError("comment not found")
        logger.info("Deleted comment %s", comment_key)

    # --- maintenance ---

    def purge_orphans(self) -> int:
        """Delete ratings and comments whose recipe no longer exists."""
        live = {key for key, _ in self.store.scan_prefix(keys.RECIPE_PREFIX)}
        removed = 0
        for prefix in (keys.RATING_PREFIX, keys.COMMENT_PREFIX):
            for key, _ in self.store.scan_prefix(prefix):
                parsed = keys.parse_key(key)
                if parsed is None or parsed.recipe_key in live:
                    continue
                if self.store.delete(key):
                    removed += 1
        logger.info("Purged %d orphaned records", removed)
        return removed
