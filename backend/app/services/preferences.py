"""Taste profile from a user's saved recipes, used to personalize the home feed."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from app.schemas.recipe import Recipe

TOP_CUISINES = 2
TOP_DIETS = 1


@dataclass
class UserPreferences:
    top_cuisines: list[str] = field(default_factory=list)
    top_diets: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.top_cuisines and not self.top_diets


def analyze_user_preferences(saved_recipes: Iterable[Recipe]) -> UserPreferences:
    """Most frequent cuisines and diets across saved recipes; ties keep first-seen order."""
    cuisines: Counter[str] = Counter()
    diets: Counter[str] = Counter()
    for recipe in saved_recipes:
        cuisines.update(recipe.cuisines or [])
        diets.update(recipe.diets or [])
    return UserPreferences(
        top_cuisines=[name for name, _ in cuisines.most_common(TOP_CUISINES)],
        top_diets=[name for name, _ in diets.most_common(TOP_DIETS)],
    )
