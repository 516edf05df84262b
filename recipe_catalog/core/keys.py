"""
Key scheme for the flat KV namespace.

The key is the only index: entity kind is the leading tag and related
records embed the recipe key, so a prefix scan over ``rating_<recipeKey>_``
or ``comment_<recipeKey>_`` finds everything attached to one recipe.

    recipe_<epochMillis>_<suffix>
    rating_<recipeKey>_<userId>
    comment_<recipeKey>_<epochMillis>_<userId>
"""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

RECIPE_PREFIX = "recipe_"
RATING_PREFIX = "rating_"
COMMENT_PREFIX = "comment_"

SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class KeyKind:
    RECIPE = "recipe"
    RATING = "rating"
    COMMENT = "comment"


@dataclass(frozen=True)
class ParsedKey:
    kind: str
    recipe_key: str
    user_id: Optional[str] = None
    millis: Optional[int] = None


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def recipe_key(moment: datetime, suffix: Optional[str] = None) -> str:
    """Build a recipe key. Uniqueness is best effort: millis plus a random suffix."""
    return f"{RECIPE_PREFIX}{epoch_millis(moment)}_{suffix or random_suffix()}"


def rating_key(recipe_key: str, user_id: str) -> str:
    """Deterministic per (recipe, user), so a second write replaces the first."""
    return f"{RATING_PREFIX}{recipe_key}_{user_id}"


def comment_key(recipe_key: str, moment: datetime, user_id: str) -> str:
    return f"{COMMENT_PREFIX}{recipe_key}_{epoch_millis(moment)}_{user_id}"


def ratings_prefix(recipe_key: str) -> str:
    return f"{RATING_PREFIX}{recipe_key}_"


def comments_prefix(recipe_key: str) -> str:
    return f"{COMMENT_PREFIX}{recipe_key}_"


def is_recipe_key(key: str) -> bool:
    parsed = parse_key(key)
    return parsed is not None and parsed.kind == KeyKind.RECIPE


def _split_recipe_key(text: str) -> Optional[tuple[str, str]]:
    """Split ``recipe_<millis>_<suffix>[_rest]`` into (recipe key, rest)."""
    if not text.startswith(RECIPE_PREFIX):
        return None
    parts = text[len(RECIPE_PREFIX):].split("_", 2)
    if len(parts) < 2 or not parts[0].isdigit() or not parts[1]:
        return None
    key = f"{RECIPE_PREFIX}{parts[0]}_{parts[1]}"
    rest = parts[2] if len(parts) == 3 else ""
    return key, rest


def parse_key(key: str) -> Optional[ParsedKey]:
    """Recover kind and owning recipe from a key without reading its value."""
    if key.startswith(RATING_PREFIX):
        split = _split_recipe_key(key[len(RATING_PREFIX):])
        if split is None or not split[1]:
            return None
        return ParsedKey(KeyKind.RATING, split[0], user_id=split[1])

    if key.startswith(COMMENT_PREFIX):
        split = _split_recipe_key(key[len(COMMENT_PREFIX):])
        if split is None:
            return None
        millis, _, user_id = split[1].partition("_")
        if not millis.isdigit() or not user_id:
            return None
        return ParsedKey(KeyKind.COMMENT, split[0], user_id=user_id, millis=int(millis))

    split = _split_recipe_key(key)
    if split is None or split[1]:
        return None
    millis = int(key[len(RECIPE_PREFIX):].split("_", 1)[0])
    return ParsedKey(KeyKind.RECIPE, split[0], millis=millis)
