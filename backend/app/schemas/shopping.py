from pydantic import BaseModel, Field


class RecipeSource(BaseModel):
    recipe_title: str
    original_text: str


class ShoppingListItem(BaseModel):
    key: str  # "<canonical name>_<canonical unit>", both lowercased
    display_name: str
    total_amount: float = 0
    unit: str = ""
    has_indeterminate_amount: bool = False
    recipe_sources: list[RecipeSource] = []


class UnavailableRecipe(BaseModel):
    recipe_id: int
    title: str
    reason: str


class ShoppingListRequest(BaseModel):
    recipe_ids: list[int] = Field(min_length=1)


class ShoppingListEntry(ShoppingListItem):
    quantity_display: str


class ShoppingListResponse(BaseModel):
    items: list[ShoppingListEntry]
    unavailable_recipes: list[UnavailableRecipe] = []
    text: str = ""
