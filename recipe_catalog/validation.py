"""
Recipe validation utilities for schema compliance.

Used by the seed endpoint and the validate_recipes CLI script.
"""

import json
import re
from pathlib import Path
from typing import List

from pydantic import ValidationError

from recipe_catalog.core.errors import ValidationError as CatalogValidationError
from recipe_catalog.models import RecipeCreate, Unit

SAMPLE_DATA_PATH = Path(__file__).parent / "data" / "sample-recipes.json"

# Abbreviations and plurals seen in free-text ingredient lines
_UNIT_ALIASES = {
    "g": Unit.GRAMS,
    "gr": Unit.GRAMS,
    "gramo": Unit.GRAMS,
    "gramos": Unit.GRAMS,
    "kg": Unit.KILOGRAMS,
    "l": Unit.LITERS,
    "litro": Unit.LITERS,
    "litros": Unit.LITERS,
    "ml": Unit.MILLILITERS,
    "taza": Unit.CUPS,
    "tazas": Unit.CUPS,
    "cucharada": Unit.TABLESPOONS,
    "cucharadas": Unit.TABLESPOONS,
    "cucharadita": Unit.TEASPOONS,
    "cucharaditas": Unit.TEASPOONS,
    "pizca": Unit.PINCH,
}

_INGREDIENT_LINE = re.compile(
    r"^(?P<qty>\d+(?:[.,]\d+)?)\s*(?P<unit>[^\W\d_]+)?\s*(?:de\s+)?(?P<name>.*)$",
    re.IGNORECASE,
)


def parse_ingredient_line(line: str) -> dict:
    """
    Turn a free-text line like "400g de espagueti" into a structured ingredient.
    Lines without a leading quantity ("Sal al gusto") get quantity 0.
    """
    text = line.strip()
    match = _INGREDIENT_LINE.match(text)
    if not match:
        return {"name": text, "quantity": 0, "unit": Unit.UNITS.value}

    quantity = float(match.group("qty").replace(",", "."))
    unit_word = (match.group("unit") or "").lower()
    name = match.group("name").strip()
    unit = _UNIT_ALIASES.get(unit_word)
    if unit is None:
        # "4 huevos": the word is part of the name, not a unit
        name = text[match.end("qty"):].strip()
        unit = Unit.UNITS
    if quantity.is_integer():
        quantity = int(quantity)
    return {"name": name or text, "quantity": quantity, "unit": unit.value}


def migrate_legacy_recipe_format(recipe_dict: dict) -> dict:
    """Normalize legacy recipe formats for validation."""
    data = dict(recipe_dict)

    # Migrate instructions: string -> list
    if isinstance(data.get("instructions"), str):
        steps = [
            s.strip()
            for s in data["instructions"].split("\n\n")
            if s.strip()
        ]
        data["instructions"] = steps if steps else [data["instructions"]]

    # Migrate ingredients: free-text lines -> structured
    if isinstance(data.get("ingredients"), list):
        data["ingredients"] = [
            parse_ingredient_line(item) if isinstance(item, str) and item.strip() else item
            for item in data["ingredients"]
        ]

    # Keys are always generated on insert
    data.pop("key", None)

    return data


def validate_recipe_for_import(recipe_dict: dict) -> tuple[RecipeCreate | None, list[dict]]:
    """
    Validate a single recipe dict for import.

    Returns:
        Tuple of (RecipeCreate instance or None, list of error dicts).
    """
    if not isinstance(recipe_dict, dict):
        return None, [
            {
                "loc": ("body",),
                "msg": f"Each item must be an object, got {type(recipe_dict).__name__}",
                "type": "type_error",
            }
        ]

    try:
        migrated = migrate_legacy_recipe_format(recipe_dict)
        recipe = RecipeCreate.model_validate(migrated)
        return recipe, []
    except ValidationError as e:
        errors = []
        for err in e.errors():
            errors.append(
                {
                    "loc": ("body",) + tuple(err["loc"]),
                    "msg": err["msg"],
                    "type": err.get("type", "value_error"),
                }
            )
        return None, errors


def validate_recipes_for_import(
    recipes_data: list,
) -> tuple[list[RecipeCreate], list[dict]]:
    """
    Validate all recipes for import. Collects all validation errors.

    Returns:
        Tuple of (valid_recipes, all_errors).
    """
    valid: list[RecipeCreate] = []
    all_errors: list[dict] = []

    for i, item in enumerate(recipes_data):
        recipe, errs = validate_recipe_for_import(item)
        if errs:
            for e in errs:
                err_copy = dict(e)
                err_copy["index"] = i
                err_copy["recipe_title"] = item.get("title", "<no title>") if isinstance(item, dict) else "<no title>"
                all_errors.append(err_copy)
        elif recipe:
            valid.append(recipe)

    return valid, all_errors


def load_sample_recipes(path: Path = SAMPLE_DATA_PATH) -> List[RecipeCreate]:
    """Load and validate the example dataset. Any invalid entry rejects the file."""
    with open(path, "r", encoding="utf-8") as sample_file:
        data = json.load(sample_file)
    if not isinstance(data, list):
        raise CatalogValidationError(f"{path.name} must hold a JSON array")
    recipes, errors = validate_recipes_for_import(data)
    if errors:
        first = errors[0]
        raise CatalogValidationError(
            f"{path.name} entry {first['index']} is invalid: {first['msg']}"
        )
    return recipes
