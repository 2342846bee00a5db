from typing import Callable, TypeVar

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.deps import current_allergies, optional_user_id
from app.config import settings
from app.logging import get_logger
from app.schemas.recipe import CatalogResponse, CuisineEntry, Recipe, RecipeCard, RecipePage
from app.services.allergens import Allergen, allergen_query_value, get_all_allergen_labels, match_allergens
from app.services.preferences import UserPreferences, analyze_user_preferences
from app.services.recipes.spoonacular_client import (
    CUISINES,
    DIETS,
    MEAL_TYPES,
    RecipeApiError,
    SearchParams,
    cuisine_from_slug,
    cuisine_slug,
    recipe_client,
)
from app.storage.db import session_dependency
from app.storage.repositories import list_saved_recipes, saved_recipe_ids

router = APIRouter()
logger = get_logger(__name__)

T = TypeVar("T")


def call_recipe_api(fn: Callable[..., T], *args, **kwargs) -> T:
    """Run a recipe API call, mapping provider/network failures to 502."""
    try:
        return fn(*args, **kwargs)
    except RecipeApiError as e:
        logger.warning("recipes.api_error status=%s message=%s", e.status_code, e.message)
        raise HTTPException(status_code=502, detail=str(e))
    except httpx.HTTPError as e:
        logger.warning("recipes.api_unreachable error=%s", e)
        raise HTTPException(status_code=502, detail="Could not reach the recipe service. Please try again later.")


def build_recipe_cards(
    session: Session,
    user_id: str | None,
    allergies: list[Allergen],
    recipes: list[Recipe],
    saved_ids: set[int] | None = None,
) -> list[RecipeCard]:
    """Attach allergen warnings and saved state for the current user."""
    if saved_ids is None:
        saved_ids = saved_recipe_ids(session, user_id, (r.id for r in recipes)) if user_id else set()
    return [
        RecipeCard(
            recipe=recipe,
            allergen_warnings=match_allergens(recipe, allergies),
            is_saved=recipe.id in saved_ids,
            has_ingredients=bool(recipe.extended_ingredients),
            has_instructions=any(group.steps for group in recipe.analyzed_instructions),
        )
        for recipe in recipes
    ]


def _unique(recipes: list[Recipe]) -> list[Recipe]:
    seen: set[int] = set()
    out = []
    for recipe in recipes:
        if recipe.id in seen:
            continue
        seen.add(recipe.id)
        out.append(recipe)
    return out


def _page(
    cards: list[RecipeCard], offset: int, fetched: int, total_results: int | None
) -> RecipePage:
    next_offset = offset + fetched
    has_more = fetched > 0 and (total_results is None or next_offset < total_results)
    return RecipePage(
        recipes=cards,
        total_results=total_results,
        offset=offset,
        next_offset=next_offset,
        has_more=has_more,
    )


@router.get("/allergens")
def list_allergens():
    """Return allergen labels for the profile UI."""
    return {"allergens": get_all_allergen_labels()}


@router.get("/catalog", response_model=CatalogResponse)
def catalog() -> CatalogResponse:
    return CatalogResponse(
        cuisines=[CuisineEntry(name=c, slug=cuisine_slug(c)) for c in CUISINES],
        diets=DIETS,
        meal_types=MEAL_TYPES,
        allergens=get_all_allergen_labels(),
    )


@router.get("/recipes/search", response_model=RecipePage)
def search_recipes(
    query: str | None = None,
    cuisine: str | None = None,
    diet: str | None = None,
    type: str | None = None,
    max_ready_time: int | None = Query(default=None, gt=0),
    offset: int = Query(default=0, ge=0),
    number: int | None = Query(default=None, ge=1, le=100),
    user_id: str | None = Depends(optional_user_id),
    allergies: list[Allergen] = Depends(current_allergies),
    session: Session = Depends(session_dependency),
) -> RecipePage:
    params = SearchParams(
        query=query,
        cuisine=cuisine,
        diet=diet,
        type=type,
        max_ready_time=max_ready_time,
        number=number or settings.default_page_size,
        offset=offset,
    )
    result = call_recipe_api(recipe_client.search_recipes, params)
    cards = build_recipe_cards(session, user_id, allergies, result.recipes)
    return _page(cards, offset, len(result.recipes), result.total_results)


@router.get("/recipes/cuisine/{slug}", response_model=RecipePage)
def recipes_by_cuisine(
    slug: str,
    offset: int = Query(default=0, ge=0),
    number: int | None = Query(default=None, ge=1, le=100),
    user_id: str | None = Depends(optional_user_id),
    allergies: list[Allergen] = Depends(current_allergies),
    session: Session = Depends(session_dependency),
) -> RecipePage:
    cuisine = cuisine_from_slug(slug)
    if cuisine is None:
        raise HTTPException(status_code=404, detail=f"Unknown cuisine: {slug}")
    result = call_recipe_api(
        recipe_client.get_recipes_by_cuisine,
        cuisine,
        count=number or settings.default_page_size,
        offset=offset,
    )
    cards = build_recipe_cards(session, user_id, allergies, result.recipes)
    return _page(cards, offset, len(result.recipes), result.total_results)


def _user_preferences(session: Session, user_id: str | None) -> UserPreferences:
    if not user_id:
        return UserPreferences()
    try:
        return analyze_user_preferences(list_saved_recipes(session, user_id))
    except SQLAlchemyError as e:
        logger.warning("recommendations.saved_load_failed user_id=%s error=%s", user_id, e)
        return UserPreferences()


@router.get("/recipes/recommendations", response_model=RecipePage)
def recommendations(
    offset: int = Query(default=0, ge=0),
    number: int | None = Query(default=None, ge=1, le=100),
    user_id: str | None = Depends(optional_user_id),
    allergies: list[Allergen] = Depends(current_allergies),
    session: Session = Depends(session_dependency),
) -> RecipePage:
    """
    Home feed. Users with saved recipes get recipes from their top cuisines and
    diet; everyone else (or an empty personalized first page) gets random ones.
    Declared allergies are sent as intolerance filters, so matching recipes are
    left out of the feed instead of only carrying a warning.
    """
    count = number or settings.default_page_size
    intolerances = [allergen_query_value(a) for a in allergies]
    prefs = _user_preferences(session, user_id)

    if not prefs.is_empty:
        logger.info(
            "recommendations.personalized user_id=%s cuisines=%s diets=%s offset=%s",
            user_id,
            prefs.top_cuisines,
            prefs.top_diets,
            offset,
        )
        result = call_recipe_api(
            recipe_client.fetch_personalized_recipes,
            cuisines=prefs.top_cuisines,
            diets=prefs.top_diets,
            intolerances=intolerances,
            count=count + settings.recommendation_overfetch,
            offset=offset,
        )
        recipes = _unique(result.recipes)[:count]
        if recipes or offset > 0:
            cards = build_recipe_cards(session, user_id, allergies, recipes)
            return _page(cards, offset, len(result.recipes), result.total_results)
        logger.info("recommendations.personalized_empty user_id=%s falling back to random", user_id)

    recipes = _unique(call_recipe_api(recipe_client.get_random_recipes, count, intolerances=intolerances))
    cards = build_recipe_cards(session, user_id, allergies, recipes)
    return _page(cards, offset, len(recipes), None)


@router.get("/recipes/{recipe_id}", response_model=RecipeCard)
def recipe_detail(
    recipe_id: int,
    user_id: str | None = Depends(optional_user_id),
    allergies: list[Allergen] = Depends(current_allergies),
    session: Session = Depends(session_dependency),
) -> RecipeCard:
    recipe = call_recipe_api(recipe_client.get_recipe_details, recipe_id)
    if recipe is None:
        raise HTTPException(
            status_code=404,
            detail="Could not fetch recipe details. The recipe might not exist.",
        )
    return build_recipe_cards(session, user_id, allergies, [recipe])[0]
