import dataclasses

import pytest

from models import Recipe, RecipeCollection


def test_recipe_requires_name():
    with pytest.raises(ValueError):
        Recipe(name="")


@pytest.mark.parametrize("source, source_url", [("Grandma", None), (None, "https://example.com")])
def test_source_and_source_url_come_together(source, source_url):
    with pytest.raises(ValueError):
        Recipe(name="Toast", source=source, source_url=source_url)


def test_recipe_is_immutable():
    recipe = Recipe(name="Toast", ingredients=["bread"])

    assert recipe.ingredients == ("bread",)
    with pytest.raises(dataclasses.FrozenInstanceError):
        recipe.name = "Jam"


def test_present_fields_skips_absent_and_keeps_order():
    recipe = Recipe(name="Toast", prep_time="2 min", description="Crisp", notes=["Butter"])

    assert [key for key, _ in recipe.present_fields()] == [
        "description", "prep_time", "notes", "ingredients", "directions",
    ]


def test_collection_is_ordered_and_typed():
    collection = RecipeCollection()
    collection.append(Recipe(name="A")).append(Recipe(name="B"))

    assert [r.name for r in collection] == ["A", "B"]
    assert len(collection) == 2
    with pytest.raises(TypeError):
        collection.append({"name": "C"})
