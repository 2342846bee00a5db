from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.deps import current_user_id
from app.logging import get_logger
from app.schemas.recipe import Recipe
from app.schemas.shopping import ShoppingListEntry, ShoppingListRequest, ShoppingListResponse
from app.services.recipes.spoonacular_client import recipe_client
from app.services.shopping_list import format_quantity, generate_shopping_list, render_shopping_list_text
from app.storage.db import session_dependency
from app.storage.repositories import list_saved_recipes

router = APIRouter()
logger = get_logger(__name__)


def _selected_recipes(saved: list[Recipe], recipe_ids: list[int]) -> list[Recipe]:
    """
    Selected recipes in request order. Ids that are not saved become bare
    recipes, so their details get fetched like any snapshot without ingredients.
    """
    saved_by_id = {r.id: r for r in saved}
    selected = []
    for rid in dict.fromkeys(recipe_ids):
        selected.append(saved_by_id.get(rid) or Recipe(id=rid, title=f"Recipe {rid}"))
    return selected


@router.post("/shopping-list", response_model=ShoppingListResponse)
def create_shopping_list(
    body: ShoppingListRequest,
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> ShoppingListResponse:
    """
    Build a shopping list from the selected saved recipes. Nothing is stored;
    each call produces a fresh list. Recipes whose ingredients could not be
    loaded are listed in `unavailable_recipes`.
    """
    try:
        saved = list_saved_recipes(session, user_id)
    except SQLAlchemyError as e:
        logger.error("shopping_list.saved_load_failed user_id=%s error=%s", user_id, e)
        raise HTTPException(status_code=503, detail="Could not load your saved recipes.")

    recipes = _selected_recipes(saved, body.recipe_ids)
    logger.info("shopping_list.request user_id=%s recipes=%s", user_id, [r.id for r in recipes])
    result = generate_shopping_list(recipes, recipe_client)
    return ShoppingListResponse(
        items=[
            ShoppingListEntry(**item.model_dump(), quantity_display=format_quantity(item))
            for item in result.items
        ],
        unavailable_recipes=result.unavailable_recipes,
        text=render_shopping_list_text(result.items),
    )
