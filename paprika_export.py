"""Renders recipes in the YAML layout that Paprika imports."""

import json
from pathlib import Path
from typing import Iterable, Union

from models import BLOCK_FIELDS, Recipe


def format_recipe(recipe: Recipe) -> str:
    """One list item: name first, then each present field in export order."""
    lines = [f"- name: {recipe.name}\n"]

    for key, value in recipe.present_fields():
        if key in BLOCK_FIELDS:
            if not value:
                continue
            lines.append(f"  {key}: |\n")
            for item in value:
                # Each line of a multi-line element stays inside the block
                lines.extend(f"    {line}\n" for line in item.split("\n"))
            continue

        if key == 'categories':
            value = json.dumps(list(value), ensure_ascii=False)
        lines.append(f"  {key}: {value}\n")

    return "".join(lines)


def render(recipes: Iterable[Recipe]) -> str:
    return "".join(format_recipe(recipe) for recipe in recipes)


def write_recipes(recipes: Iterable[Recipe], path: Union[str, Path]) -> Path:
    """Render recipes and overwrite path with the result, UTF-8."""
    text = render(recipes)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
