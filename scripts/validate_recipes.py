#!/usr/bin/env python3
"""
Validation script for recipe schema compliance.

Validates JSON files containing recipe data against the recipe-create schema
used by POST /recipes and the seed endpoint. Free-text ingredient lines
("400g de espagueti") are normalized first, as on import.

Usage:
    python scripts/validate_recipes.py recipe_catalog/data/sample-recipes.json
    python scripts/validate_recipes.py path/to/recipes.json

Exit codes:
    0 - All recipes pass validation
    1 - Validation failed (schema errors or invalid JSON)
"""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from recipe_catalog.validation import validate_recipe_for_import


def validate_recipes_file(file_path: Path) -> tuple[list[dict], list[str]]:
    """
    Validate a JSON file against the recipe schema.

    Returns:
        Tuple of (validation_errors, error_messages).
    """
    errors: list[dict] = []
    messages: list[str] = []

    if not file_path.exists():
        messages.append(f"Error: File not found: {file_path}")
        return [{"file": str(file_path), "error": "File not found"}], messages

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        messages.append(f"Error: Cannot read file: {e}")
        return [{"file": str(file_path), "error": str(e)}], messages

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        messages.append(f"Error: Invalid JSON at line {e.lineno}: {e.msg}")
        return [{"file": str(file_path), "error": f"Invalid JSON: {e.msg}"}], messages

    if not isinstance(data, list):
        messages.append("Error: Root must be a JSON array of recipes")
        return [{"file": str(file_path), "error": "Root must be an array"}], messages

    for i, item in enumerate(data):
        _, errs = validate_recipe_for_import(item)
        if errs:
            title = (
                item.get("title", "<no title>")
                if isinstance(item, dict)
                else "<no title>"
            )
            err_details = [f"  - {'.'.join(str(p) for p in e.get('loc', ()))}: {e['msg']}" for e in errs]
            messages.append(
                f"Recipe at index {i} (title={title!r}):\n" + "\n".join(err_details)
            )
            errors.append({"index": i, "title": title, "errors": errs})

    return errors, messages


def main() -> int:
    """Run validation on given file(s)."""
    if len(sys.argv) < 2:
        print(__doc__, file=sys.stderr)
        return 1

    root = Path(__file__).resolve().parent.parent
    all_errors: list[dict] = []
    all_messages: list[str] = []

    for arg in sys.argv[1:]:
        path = Path(arg)
        if not path.is_absolute():
            path = root / path
        errs, msgs = validate_recipes_file(path)
        all_errors.extend(errs)
        all_messages.extend(msgs)

    for msg in all_messages:
        print(msg)

    if all_errors:
        print("\nValidation failed.", file=sys.stderr)
        return 1

    print("All recipes passed schema validation.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
