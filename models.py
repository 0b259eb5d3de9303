"""
Data models for PepperPlate to Paprika migration.

This module contains the dataclass definitions for Recipe and RecipeCollection objects.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Any


# Order in which the optional keys follow "name" in the exported file
FIELD_ORDER = (
    'source',
    'source_url',
    'description',
    'servings',
    'prep_time',
    'categories',
    'notes',
    'photo',
    'ingredients',
    'directions',
)

# Keys written as "key: |" blocks, one element per line
BLOCK_FIELDS = frozenset(('ingredients', 'directions', 'notes'))


@dataclass(frozen=True)
class Recipe:
    name: str

    # Attribution, present as a pair or not at all
    source: Optional[str] = None
    source_url: Optional[str] = None

    # Optional text fields; None means absent, never ""
    description: Optional[str] = None
    servings: Optional[str] = None
    prep_time: Optional[str] = None
    categories: Optional[Tuple[str, ...]] = None
    notes: Optional[Tuple[str, ...]] = None

    # Base64 encoded image data
    photo: Optional[str] = None

    # Content
    ingredients: Tuple[str, ...] = ()
    directions: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError("Recipe name must not be empty")
        if (self.source is None) != (self.source_url is None):
            raise ValueError(f"Recipe {self.name!r} needs both source and source_url, or neither")
        # Freeze sequences handed in as lists
        for key in ('categories', 'notes', 'ingredients', 'directions'):
            value = getattr(self, key)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, key, tuple(value))

    def present_fields(self) -> Iterator[Tuple[str, Any]]:
        """Yield (key, value) for every present field except name, in export order."""
        for key in FIELD_ORDER:
            value = getattr(self, key)
            if value is not None:
                yield key, value


@dataclass
class RecipeCollection:
    """Recipes gathered during one run, in extraction order. Append-only."""

    recipes: List[Recipe] = field(default_factory=list)

    def append(self, recipe: Recipe) -> 'RecipeCollection':
        if not isinstance(recipe, Recipe):
            raise TypeError(f"Expected Recipe, got {type(recipe).__name__}")
        self.recipes.append(recipe)
        return self

    def extend(self, recipes: Iterable[Recipe]) -> 'RecipeCollection':
        for recipe in recipes:
            self.append(recipe)
        return self

    def __iter__(self) -> Iterator[Recipe]:
        return iter(tuple(self.recipes))

    def __len__(self) -> int:
        return len(self.recipes)
