"""
Tests for the key scheme: construction, prefix relationships, and parsing.
"""
from datetime import datetime, timezone

from recipe_catalog.core import keys

MOMENT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
MILLIS = 1709294400000


def test_recipe_key_format():
    key = keys.recipe_key(MOMENT, suffix="abc123xyz")
    assert key == f"recipe_{MILLIS}_abc123xyz"


def test_recipe_key_random_suffix():
    first = keys.recipe_key(MOMENT)
    second = keys.recipe_key(MOMENT)
    assert first != second
    suffix = first.rsplit("_", 1)[1]
    assert len(suffix) == keys.SUFFIX_LENGTH
    assert "_" not in suffix


def test_rating_key_is_deterministic():
    recipe = keys.recipe_key(MOMENT, suffix="abc")
    assert keys.rating_key(recipe, "u1") == keys.rating_key(recipe, "u1")
    assert keys.rating_key(recipe, "u1") == f"rating_recipe_{MILLIS}_abc_u1"


def test_comment_key_format():
    recipe = keys.recipe_key(MOMENT, suffix="abc")
    assert keys.comment_key(recipe, MOMENT, "u1") == f"comment_recipe_{MILLIS}_abc_{MILLIS}_u1"


def test_related_keys_fall_under_recipe_prefixes():
    recipe = keys.recipe_key(MOMENT, suffix="abc")
    other = keys.recipe_key(MOMENT, suffix="abd")
    assert keys.rating_key(recipe, "u1").startswith(keys.ratings_prefix(recipe))
    assert keys.comment_key(recipe, MOMENT, "u1").startswith(keys.comments_prefix(recipe))
    assert not keys.rating_key(other, "u1").startswith(keys.ratings_prefix(recipe))


def test_parse_recipe_key():
    parsed = keys.parse_key(f"recipe_{MILLIS}_abc")
    assert parsed.kind == keys.KeyKind.RECIPE
    assert parsed.recipe_key == f"recipe_{MILLIS}_abc"
    assert parsed.millis == MILLIS


def test_parse_rating_key():
    parsed = keys.parse_key(f"rating_recipe_{MILLIS}_abc_user-42")
    assert parsed.kind == keys.KeyKind.RATING
    assert parsed.recipe_key == f"recipe_{MILLIS}_abc"
    assert parsed.user_id == "user-42"


def test_parse_comment_key():
    parsed = keys.parse_key(f"comment_recipe_{MILLIS}_abc_{MILLIS + 7}_user-42")
    assert parsed.kind == keys.KeyKind.COMMENT
    assert parsed.recipe_key == f"recipe_{MILLIS}_abc"
    assert parsed.millis == MILLIS + 7
    assert parsed.user_id == "user-42"


def test_parse_rejects_malformed():
    assert keys.parse_key("recipe_") is None
    assert keys.parse_key("recipe_notanumber_abc") is None
    assert keys.parse_key(f"rating_recipe_{MILLIS}_abc") is None
    assert keys.parse_key(f"comment_recipe_{MILLIS}_abc_u1") is None
    assert keys.parse_key("user_1") is None


def test_is_recipe_key():
    assert keys.is_recipe_key(f"recipe_{MILLIS}_abc")
    assert not keys.is_recipe_key(f"rating_recipe_{MILLIS}_abc_u1")
    assert not keys.is_recipe_key(f"recipe_{MILLIS}_abc_extra")
