"""
Tests for the recipe schema validation script and the shared validation helpers.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from recipe_catalog.core.errors import ValidationError
from recipe_catalog.validation import (
    load_sample_recipes,
    parse_ingredient_line,
    validate_recipe_for_import,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SCRIPT_PATH = PROJECT_ROOT / "scripts" / "validate_recipes.py"
SAMPLE_FILE = "recipe_catalog/data/sample-recipes.json"


def run_validate(args: list[str]) -> tuple[int, str, str]:
    """Run validate_recipes.py and return (exit_code, stdout, stderr)."""
    result = subprocess.run(
        [sys.executable, str(SCRIPT_PATH)] + args,
        capture_output=True,
        text=True,
        cwd=str(PROJECT_ROOT),
    )
    return result.returncode, result.stdout, result.stderr


def test_validate_valid_file():
    """Validation script passes for the bundled sample recipes"""
    exit_code, stdout, _ = run_validate([SAMPLE_FILE])
    assert exit_code == 0
    assert "passed schema validation" in stdout


def test_validate_invalid_json(tmp_path):
    """Validation script fails for invalid JSON"""
    bad_file = tmp_path / "bad.json"
    bad_file.write_text("{ invalid json")
    exit_code, stdout, _ = run_validate([str(bad_file)])
    assert exit_code == 1
    assert "Invalid JSON" in stdout


def test_validate_not_array(tmp_path):
    """Validation script fails when root is not an array"""
    bad_file = tmp_path / "object.json"
    bad_file.write_text('{"key": "value"}')
    exit_code, stdout, _ = run_validate([str(bad_file)])
    assert exit_code == 1
    assert "array" in stdout.lower()


def test_validate_invalid_recipe_schema(tmp_path):
    """Validation script fails for recipe with no usable instructions"""
    invalid = [
        {
            "title": "Test",
            "description": "Desc",
            "category": "Pasta",
            "difficulty": "Fácil",
            "image": "https://example.com/x.jpg",
            "ingredients": [{"name": "harina", "quantity": 1, "unit": "kg"}],
            "instructions": ["   "],
        }
    ]
    bad_file = tmp_path / "invalid.json"
    bad_file.write_text(json.dumps(invalid))
    exit_code, stdout, _ = run_validate([str(bad_file)])
    assert exit_code == 1
    assert "index 0" in stdout
    assert "instructions" in stdout


def test_validate_legacy_free_text_ingredients(tmp_path):
    """Free-text ingredient lines are normalized before validation"""
    legacy = [
        {
            "title": "Brownie",
            "description": "Postre",
            "category": "Postres",
            "difficulty": "Fácil",
            "image": "https://example.com/b.jpg",
            "ingredients": ["200g de chocolate negro", "3 huevos", "Pizca de sal"],
            "instructions": "Derrite el chocolate\n\nHornea 25 minutos",
        }
    ]
    legacy_file = tmp_path / "legacy.json"
    legacy_file.write_text(json.dumps(legacy))
    exit_code, stdout, _ = run_validate([str(legacy_file)])
    assert exit_code == 0


@pytest.mark.parametrize(
    "line, expected",
    [
        ("400g de espagueti", {"name": "espagueti", "quantity": 400, "unit": "gramos"}),
        ("1 litro de caldo de carne", {"name": "caldo de carne", "quantity": 1, "unit": "litros"}),
        ("3 cucharadas de mayonesa", {"name": "mayonesa", "quantity": 3, "unit": "cucharadas"}),
        ("2 pechugas de pollo", {"name": "pechugas de pollo", "quantity": 2, "unit": "unidades"}),
        ("0,5 kg de harina", {"name": "harina", "quantity": 0.5, "unit": "kg"}),
        ("Sal al gusto", {"name": "Sal al gusto", "quantity": 0, "unit": "unidades"}),
    ],
)
def test_parse_ingredient_line(line, expected):
    assert parse_ingredient_line(line) == expected


def test_validate_recipe_rejects_non_object():
    recipe, errors = validate_recipe_for_import(["not", "a", "recipe"])
    assert recipe is None
    assert errors[0]["type"] == "type_error"


def test_load_sample_recipes():
    recipes = load_sample_recipes()
    assert len(recipes) == 6
    assert {r.category.value for r in recipes} == {
        "Pasta", "Ensaladas", "Postres", "Guisos", "Sopas", "Carnes"
    }


def test_load_sample_recipes_rejects_invalid_file(tmp_path):
    bad_file = tmp_path / "seed.json"
    bad_file.write_text(json.dumps([{"title": "incomplete"}]))
    with pytest.raises(ValidationError):
        load_sample_recipes(bad_file)
