"""
Shopping list generation: merge the ingredients of several recipes into one list.

Ingredients are grouped by (canonical name, unit), both lowercased. Amounts
with the same key are summed; a missing amount ("to taste") never adds to the
total but marks the item as indeterminate. Different units are never converted
or merged.
"""

import re
import unicodedata
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from app.config import settings
from app.logging import get_logger
from app.schemas.recipe import IngredientLineItem, Recipe
from app.schemas.shopping import RecipeSource, ShoppingListItem, UnavailableRecipe
from app.utils.timing import time_span

logger = get_logger(__name__)

UNKNOWN_CANONICAL_NAME = "unknown_ingredient"
UNKNOWN_DISPLAY_NAME = "Unknown Ingredient"
NO_SOURCE_TEXT = "N/A"
AS_NEEDED = "As needed / To taste"

_WORD = re.compile(r"\S+")


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def capitalize_words(text: str) -> str:
    """'ALL-purpose  flour' -> 'All-purpose  Flour'. Whitespace is kept as is."""
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), text)


def canonical_name(item: IngredientLineItem) -> str:
    return (_first(item.name_clean, item.name, item.original) or UNKNOWN_CANONICAL_NAME).lower()


def canonical_unit(item: IngredientLineItem) -> str:
    return (item.unit or "").lower()


def ingredient_key(item: IngredientLineItem) -> str:
    return f"{canonical_name(item)}_{canonical_unit(item)}"


def display_name(item: IngredientLineItem) -> str:
    return capitalize_words(
        _first(item.original_name, item.name, item.name_clean) or UNKNOWN_DISPLAY_NAME
    )


def sort_key(name: str) -> tuple[str, str]:
    # accents and case only break ties
    folded = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in folded if not unicodedata.combining(c))
    return base.casefold(), name.casefold()


def aggregate_ingredients(recipes: Iterable[Recipe]) -> list[ShoppingListItem]:
    """
    Build a deduplicated shopping list from the recipes' ingredient line items.
    Recipes without ingredients contribute nothing. Sorted by display name,
    ignoring case and accents.
    """
    items: dict[str, ShoppingListItem] = {}
    for recipe in recipes:
        for line in recipe.extended_ingredients or []:
            key = ingredient_key(line)
            source = RecipeSource(
                recipe_title=recipe.title,
                original_text=_first(line.original, line.name) or NO_SOURCE_TEXT,
            )
            existing = items.get(key)
            if existing is not None:
                if line.amount is not None:
                    existing.total_amount += line.amount
                else:
                    existing.has_indeterminate_amount = True
                existing.recipe_sources.append(source)
                continue
            items[key] = ShoppingListItem(
                key=key,
                display_name=display_name(line),
                total_amount=line.amount if line.amount is not None else 0,
                unit=line.unit or "",
                has_indeterminate_amount=line.amount is None,
                recipe_sources=[source],
            )
    return sorted(items.values(), key=lambda item: sort_key(item.display_name))


def _format_amount(amount: float) -> str:
    rounded = round(amount, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def format_quantity(item: ShoppingListItem) -> str:
    """'3 cup', '2 cup (+ some)' or 'As needed / To taste'."""
    if item.total_amount == 0 and item.has_indeterminate_amount:
        return AS_NEEDED
    quantity = " ".join(part for part in (_format_amount(item.total_amount), item.unit) if part)
    if item.has_indeterminate_amount:
        quantity += " (+ some)"
    return quantity


def render_shopping_list_text(items: Iterable[ShoppingListItem]) -> str:
    """Plain-text list for copy/print."""
    return "\n".join(f"- {item.display_name}: {format_quantity(item)}" for item in items)


class RecipeDetailSource(Protocol):
    def get_recipe_details(self, recipe_id: int) -> Recipe | None: ...


@dataclass
class ShoppingListResult:
    items: list[ShoppingListItem]
    unavailable_recipes: list[UnavailableRecipe] = field(default_factory=list)


def fill_missing_ingredients(
    recipes: list[Recipe], client: RecipeDetailSource
) -> tuple[list[Recipe], list[UnavailableRecipe]]:
    """
    Fetch full details for recipes whose ingredient list is empty.
    One attempt per recipe, concurrently. A failed or empty fetch leaves the
    recipe without ingredients and reports it as unavailable.
    """
    missing = [i for i, r in enumerate(recipes) if not r.extended_ingredients]
    if not missing:
        return list(recipes), []

    filled = list(recipes)
    unavailable: dict[int, UnavailableRecipe] = {}
    max_workers = min(settings.detail_fetch_max_workers, len(missing))
    logger.info("shopping_list.details.start count=%s workers=%s", len(missing), max_workers)
    with time_span("shopping_list.details.parallel", count=len(missing), workers=max_workers):
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futures = {
                ex.submit(client.get_recipe_details, recipes[i].id): i for i in missing
            }
            for fut in as_completed(futures):
                i = futures[fut]
                recipe = recipes[i]
                try:
                    details = fut.result()
                except Exception as e:
                    logger.warning("shopping_list.details.failed recipe_id=%s error=%s", recipe.id, e)
                    unavailable[i] = UnavailableRecipe(
                        recipe_id=recipe.id, title=recipe.title, reason=str(e) or "fetch failed"
                    )
                    continue
                if details is None or not details.extended_ingredients:
                    logger.info("shopping_list.details.empty recipe_id=%s", recipe.id)
                    unavailable[i] = UnavailableRecipe(
                        recipe_id=recipe.id,
                        title=recipe.title,
                        reason="Ingredient details are not available.",
                    )
                    continue
                filled[i] = details
    return filled, [unavailable[i] for i in sorted(unavailable)]


def generate_shopping_list(recipes: list[Recipe], client: RecipeDetailSource) -> ShoppingListResult:
    with time_span("shopping_list.generate", recipes=len(recipes)):
        prepared, unavailable = fill_missing_ingredients(recipes, client)
        items = aggregate_ingredients(prepared)
    logger.info(
        "shopping_list.generate.end recipes=%s items=%s unavailable=%s",
        len(recipes),
        len(items),
        len(unavailable),
    )
    return ShoppingListResult(items=items, unavailable_recipes=unavailable)
