from datetime import datetime, timedelta, timezone

from app.schemas.saved import AlreadySaved, Failed, Saved
from app.services.allergens import Allergen
from app.storage.models import Profile, SavedRecipe
from app.storage.repositories import (
    get_user_allergies,
    is_recipe_saved,
    list_saved_recipes,
    save_recipe,
    saved_recipe_ids,
    unsave_recipe,
    update_user_allergies,
)
from fakes import make_recipe


def test_save_recipe_then_already_saved(session):
    recipe = make_recipe(10, "Soup", [{"name": "leek", "amount": 2}], gluten_free=True)
    assert save_recipe(session, "user-1", recipe) == Saved(recipe_id=10)
    result = save_recipe(session, "user-1", recipe)
    assert isinstance(result, AlreadySaved)
    assert result.recipe_id == 10
    assert is_recipe_saved(session, "user-1", 10)


def test_same_recipe_for_two_users(session):
    recipe = make_recipe(10, "Soup")
    assert isinstance(save_recipe(session, "user-1", recipe), Saved)
    assert isinstance(save_recipe(session, "user-2", recipe), Saved)


def test_save_requires_user(session):
    result = save_recipe(session, "", make_recipe(1, "X"))
    assert isinstance(result, Failed)
    assert "required" in result.reason


def test_snapshot_round_trip(session):
    recipe = make_recipe(3, "Tacos", [{"name": "tortilla", "unit": "", "amount": 8}], dairy_free=False)
    save_recipe(session, "u", recipe)
    [loaded] = list_saved_recipes(session, "u")
    assert loaded.title == "Tacos"
    assert loaded.dairy_free is False
    assert loaded.extended_ingredients[0].amount == 8


def test_list_saved_newest_first(session):
    now = datetime.now(timezone.utc)
    for i, rid in enumerate([1, 2, 3]):
        session.add(
            SavedRecipe(
                user_id="u",
                recipe_id=rid,
                recipe_data={"id": rid, "title": f"R{rid}"},
                saved_at=now + timedelta(minutes=i),
            )
        )
    session.add(SavedRecipe(user_id="other", recipe_id=9, recipe_data={"id": 9, "title": "R9"}))
    session.commit()
    assert [r.id for r in list_saved_recipes(session, "u")] == [3, 2, 1]


def test_unsave(session):
    save_recipe(session, "u", make_recipe(5, "Stew"))
    assert unsave_recipe(session, "u", 5) is True
    assert not is_recipe_saved(session, "u", 5)
    assert unsave_recipe(session, "u", 5) is False


def test_saved_recipe_ids_batch(session):
    for rid in (1, 2, 3):
        save_recipe(session, "u", make_recipe(rid, f"R{rid}"))
    assert saved_recipe_ids(session, "u", [2, 3, 4]) == {2, 3}
    assert saved_recipe_ids(session, "u", []) == set()
    assert saved_recipe_ids(session, "nobody", [1]) == set()


def test_allergies_default_empty(session):
    assert get_user_allergies(session, "new-user") == []


def test_allergies_upsert(session):
    update_user_allergies(session, "u", [Allergen.GLUTEN, Allergen.PEANUT, Allergen.GLUTEN])
    assert get_user_allergies(session, "u") == [Allergen.GLUTEN, Allergen.PEANUT]
    update_user_allergies(session, "u", [Allergen.DAIRY])
    assert get_user_allergies(session, "u") == [Allergen.DAIRY]
    assert session.get(Profile, "u").allergies == ["Dairy"]


def test_allergies_drop_unknown_labels(session):
    session.add(Profile(user_id="u", allergies=["Gluten", "Sesame"]))
    session.commit()
    assert get_user_allergies(session, "u") == [Allergen.GLUTEN]


def test_new_rows_carry_aware_utc_timestamps(session):
    save_recipe(session, "u", make_recipe(7, "Curry"))
    update_user_allergies(session, "u", [Allergen.SOY])
    row = SavedRecipe(user_id="u", recipe_id=8, recipe_data={"id": 8, "title": "R8"})
    assert row.saved_at.tzinfo is not None
    assert row.saved_at.utcoffset() == timedelta(0)
    assert Profile(user_id="v").updated_at.tzinfo is not None
    assert is_recipe_saved(session, "u", 7)


def test_allergies_update_twice_touches_existing_profile(session):
    update_user_allergies(session, "u", [Allergen.FISH])
    assert update_user_allergies(session, "u", [Allergen.EGG]) == [Allergen.EGG]
    assert get_user_allergies(session, "u") == [Allergen.EGG]
