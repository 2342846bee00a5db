"""Saved recipes of the current user."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.deps import current_allergies, current_user_id
from app.api.recipes import build_recipe_cards
from app.logging import get_logger
from app.schemas.recipe import Recipe, RecipeCard
from app.schemas.saved import AlreadySaved, Failed, Saved, SavedStatusResponse, SaveResult, UnsaveResponse
from app.services.allergens import Allergen
from app.storage.db import session_dependency
from app.storage.repositories import is_recipe_saved, list_saved_recipes, save_recipe, unsave_recipe

router = APIRouter(prefix="/saved")
logger = get_logger(__name__)

_SAVE_STATUS_CODES = {Saved: 201, AlreadySaved: 200, Failed: 500}


@router.get("", response_model=list[RecipeCard])
def get_saved(
    user_id: str = Depends(current_user_id),
    allergies: list[Allergen] = Depends(current_allergies),
    session: Session = Depends(session_dependency),
) -> list[RecipeCard]:
    try:
        recipes = list_saved_recipes(session, user_id)
    except SQLAlchemyError as e:
        logger.error("saved.list_failed user_id=%s error=%s", user_id, e)
        raise HTTPException(status_code=503, detail="Could not load your saved recipes.")
    return build_recipe_cards(session, user_id, allergies, recipes, saved_ids={r.id for r in recipes})


@router.post("", response_model=SaveResult)
def post_saved(
    recipe: Recipe,
    response: Response,
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> SaveResult:
    result = save_recipe(session, user_id, recipe)
    response.status_code = _SAVE_STATUS_CODES[type(result)]
    return result


@router.delete("/{recipe_id}", response_model=UnsaveResponse)
def delete_saved(
    recipe_id: int,
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> UnsaveResponse:
    try:
        removed = unsave_recipe(session, user_id, recipe_id)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("saved.unsave_failed user_id=%s recipe_id=%s error=%s", user_id, recipe_id, e)
        raise HTTPException(status_code=503, detail="Could not unsave recipe.")
    return UnsaveResponse(recipe_id=recipe_id, success=removed)


@router.get("/{recipe_id}", response_model=SavedStatusResponse)
def get_saved_status(
    recipe_id: int,
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> SavedStatusResponse:
    return SavedStatusResponse(recipe_id=recipe_id, is_saved=is_recipe_saved(session, user_id, recipe_id))
