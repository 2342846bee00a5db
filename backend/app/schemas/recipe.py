"""Recipe payloads as returned by the recipe content API.

Field names follow the provider's camelCase on the wire; unknown keys are kept
so a saved snapshot stores exactly what the provider sent.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class IngredientLineItem(_ApiModel):
    id: int | None = None
    name: str | None = None
    name_clean: str | None = None
    original: str | None = None
    original_name: str | None = None
    amount: float | None = None
    unit: str | None = None
    aisle: str | None = None
    image: str | None = None
    meta: list[str] = []


class InstructionStep(_ApiModel):
    number: int | None = None
    step: str = ""


class InstructionGroup(_ApiModel):
    name: str = ""
    steps: list[InstructionStep] = []


class Recipe(_ApiModel):
    id: int
    title: str = ""
    image: str | None = None
    image_type: str | None = None
    ready_in_minutes: int | None = None
    servings: int | None = None
    summary: str | None = None
    extended_ingredients: list[IngredientLineItem] = []
    analyzed_instructions: list[InstructionGroup] = []
    vegetarian: bool | None = None
    vegan: bool | None = None
    gluten_free: bool | None = None
    dairy_free: bool | None = None
    diets: list[str] = []
    cuisines: list[str] = []
    dish_types: list[str] = []

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready dict in the provider's shape, for the saved-recipes store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RecipeCard(BaseModel):
    """A recipe as served to the client, with per-user annotations."""

    recipe: Recipe
    allergen_warnings: list[str] = []
    is_saved: bool = False
    has_ingredients: bool = False
    has_instructions: bool = False


class RecipePage(BaseModel):
    recipes: list[RecipeCard]
    total_results: int | None = None
    offset: int = 0
    next_offset: int = 0
    has_more: bool = False


class CuisineEntry(BaseModel):
    name: str
    slug: str


class CatalogResponse(BaseModel):
    cuisines: list[CuisineEntry]
    diets: list[str]
    meal_types: list[str]
    allergens: list[str] = Field(default_factory=list)
