"""
Allergen list and per-recipe allergen warnings.

Recipes only carry sparse dietary flags (glutenFree, dairyFree, ...), so a
warning is raised only when a flag is explicitly False. True or missing flags
never warn. Wheat is read from the gluten flag. The remaining allergens have no
signal in the recipe data and never warn.
"""

from enum import Enum
from typing import Iterable

from app.logging import get_logger
from app.schemas.recipe import Recipe

logger = get_logger(__name__)


class Allergen(str, Enum):
    DAIRY = "Dairy"
    EGG = "Egg"
    GLUTEN = "Gluten"
    PEANUT = "Peanut"
    TREE_NUT = "Tree Nut"
    SOY = "Soy"
    SHELLFISH = "Shellfish"
    FISH = "Fish"
    WHEAT = "Wheat"


COMMON_ALLERGENS: list[Allergen] = list(Allergen)

# Allergen -> recipe flag that must be explicitly False to trigger a warning
ALLERGEN_FLAG_RULES: dict[Allergen, str] = {
    Allergen.GLUTEN: "gluten_free",
    Allergen.DAIRY: "dairy_free",
    Allergen.WHEAT: "gluten_free",
}


def get_all_allergen_labels() -> list[str]:
    """Return all allergen labels for the profile UI."""
    return [a.value for a in COMMON_ALLERGENS]


def parse_allergen(label: str) -> Allergen | None:
    try:
        return Allergen(label)
    except ValueError:
        return None


def allergen_query_value(allergen: Allergen) -> str:
    """Value for the recipe API's `intolerances` filter."""
    # Labels currently match the provider's intolerance names one to one.
    return allergen.value


def match_allergens(recipe: Recipe, allergies: Iterable[Allergen | str]) -> list[str]:
    """
    Allergen labels from `allergies` that `recipe` may trigger.
    Deduplicated, in the order the allergies were given.
    """
    triggered: dict[str, None] = {}
    for raw in allergies:
        allergen = raw if isinstance(raw, Allergen) else parse_allergen(raw)
        if allergen is None:
            logger.debug("allergens.unknown_label label=%s", raw)
            continue
        flag = ALLERGEN_FLAG_RULES.get(allergen)
        if flag is None:
            continue
        if getattr(recipe, flag) is False:
            triggered[allergen.value] = None
    return list(triggered)
