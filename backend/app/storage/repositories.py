from typing import Iterable

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.logging import get_logger
from app.schemas.recipe import Recipe
from app.schemas.saved import AlreadySaved, Failed, Saved, SaveResult
from app.services.allergens import Allergen, parse_allergen
from app.storage.models import Profile, SavedRecipe, utcnow

logger = get_logger(__name__)


def save_recipe(session: Session, user_id: str, recipe: Recipe) -> SaveResult:
    """Store a snapshot of the recipe. Saving an already saved recipe is not an error."""
    if not user_id or not recipe.id:
        return Failed(
            recipe_id=recipe.id or None,
            reason="User ID and recipe with ID are required to save.",
        )
    session.add(SavedRecipe(user_id=user_id, recipe_id=recipe.id, recipe_data=recipe.snapshot()))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info("saved_recipe.exists user_id=%s recipe_id=%s", user_id, recipe.id)
        return AlreadySaved(recipe_id=recipe.id)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("saved_recipe.save_failed user_id=%s recipe_id=%s error=%s", user_id, recipe.id, e)
        return Failed(recipe_id=recipe.id, reason="Could not save recipe.")
    logger.info("saved_recipe.created user_id=%s recipe_id=%s title=%s", user_id, recipe.id, recipe.title)
    return Saved(recipe_id=recipe.id)


def unsave_recipe(session: Session, user_id: str, recipe_id: int) -> bool:
    rows = list(
        session.exec(
            select(SavedRecipe).where(SavedRecipe.user_id == user_id, SavedRecipe.recipe_id == recipe_id)
        )
    )
    for row in rows:
        session.delete(row)
    session.commit()
    logger.info("saved_recipe.deleted user_id=%s recipe_id=%s count=%s", user_id, recipe_id, len(rows))
    return bool(rows)


def list_saved_recipes(session: Session, user_id: str) -> list[Recipe]:
    """Saved snapshots, newest first, one per recipe id."""
    rows = session.exec(
        select(SavedRecipe)
        .where(SavedRecipe.user_id == user_id)
        .order_by(SavedRecipe.saved_at.desc(), SavedRecipe.id.desc())
    )
    recipes: list[Recipe] = []
    seen: set[int] = set()
    for row in rows:
        if row.recipe_id in seen:
            logger.warning("saved_recipe.duplicate user_id=%s recipe_id=%s", user_id, row.recipe_id)
            continue
        try:
            recipe = Recipe.model_validate(row.recipe_data)
        except ValidationError as e:
            logger.warning("saved_recipe.bad_snapshot user_id=%s recipe_id=%s error=%s", user_id, row.recipe_id, e)
            continue
        seen.add(row.recipe_id)
        recipes.append(recipe)
    return recipes


def is_recipe_saved(session: Session, user_id: str, recipe_id: int) -> bool:
    row = session.exec(
        select(SavedRecipe.id).where(SavedRecipe.user_id == user_id, SavedRecipe.recipe_id == recipe_id)
    ).first()
    return row is not None


def saved_recipe_ids(session: Session, user_id: str, recipe_ids: Iterable[int]) -> set[int]:
    """Which of `recipe_ids` the user has saved, in one query."""
    ids = list(set(recipe_ids))
    if not ids:
        return set()
    rows = session.exec(
        select(SavedRecipe.recipe_id).where(
            SavedRecipe.user_id == user_id, SavedRecipe.recipe_id.in_(ids)
        )
    )
    return set(rows)


def get_user_allergies(session: Session, user_id: str) -> list[Allergen]:
    """Declared allergies; a user without a profile has none."""
    profile = session.get(Profile, user_id)
    if profile is None:
        return []
    allergies: list[Allergen] = []
    for label in profile.allergies or []:
        allergen = parse_allergen(label)
        if allergen is None:
            logger.warning("profile.unknown_allergen user_id=%s label=%s", user_id, label)
            continue
        if allergen not in allergies:
            allergies.append(allergen)
    return allergies


def update_user_allergies(session: Session, user_id: str, allergies: Iterable[Allergen]) -> list[Allergen]:
    labels = list(dict.fromkeys(a.value for a in allergies))
    profile = session.get(Profile, user_id)
    if profile is None:
        profile = Profile(user_id=user_id, allergies=labels)
    else:
        profile.allergies = labels
        profile.updated_at = utcnow()
    session.add(profile)
    session.commit()
    logger.info("profile.allergies_updated user_id=%s allergies=%s", user_id, labels)
    return [Allergen(label) for label in labels]
