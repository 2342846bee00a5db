"""Tests for allergen labels and recipe allergen warnings."""

from app.services.allergens import (
    COMMON_ALLERGENS,
    Allergen,
    allergen_query_value,
    get_all_allergen_labels,
    match_allergens,
    parse_allergen,
)
from fakes import make_recipe


def test_get_all_allergen_labels():
    labels = get_all_allergen_labels()
    assert labels == [
        "Dairy",
        "Egg",
        "Gluten",
        "Peanut",
        "Tree Nut",
        "Soy",
        "Shellfish",
        "Fish",
        "Wheat",
    ]
    assert len(COMMON_ALLERGENS) == 9


def test_gluten_triggers_only_on_explicit_false():
    recipe = make_recipe(1, "Bread", gluten_free=False)
    assert match_allergens(recipe, ["Gluten", "Peanut"]) == ["Gluten"]


def test_explicit_true_never_triggers():
    assert match_allergens(make_recipe(1, "Rice", gluten_free=True), ["Gluten"]) == []


def test_absent_flags_never_trigger():
    assert match_allergens(make_recipe(1, "Mystery"), ["Dairy"]) == []
    assert match_allergens(make_recipe(1, "Mystery"), list(Allergen)) == []


def test_dairy_rule():
    recipe = make_recipe(1, "Cheese Plate", dairy_free=False, gluten_free=True)
    assert match_allergens(recipe, [Allergen.DAIRY, Allergen.GLUTEN]) == ["Dairy"]


def test_wheat_follows_gluten_flag():
    recipe = make_recipe(1, "Pasta", gluten_free=False)
    assert match_allergens(recipe, ["Wheat"]) == ["Wheat"]
    assert match_allergens(make_recipe(2, "Salad", gluten_free=True), ["Wheat"]) == []


def test_allergens_without_signal_never_trigger():
    recipe = make_recipe(1, "Everything", gluten_free=False, dairy_free=False, vegan=False, vegetarian=False)
    no_signal = ["Egg", "Peanut", "Tree Nut", "Soy", "Shellfish", "Fish"]
    assert match_allergens(recipe, no_signal) == []


def test_result_has_no_duplicates():
    recipe = make_recipe(1, "Pizza", gluten_free=False, dairy_free=False)
    result = match_allergens(recipe, ["Gluten", "Gluten", "Wheat", "Dairy", "Wheat"])
    assert result == ["Gluten", "Wheat", "Dairy"]
    assert len(result) == len(set(result))


def test_unknown_labels_are_ignored():
    recipe = make_recipe(1, "Bread", gluten_free=False)
    assert match_allergens(recipe, ["Sesame", "Gluten"]) == ["Gluten"]
    assert parse_allergen("Sesame") is None
    assert parse_allergen("Tree Nut") is Allergen.TREE_NUT


def test_empty_allergies():
    assert match_allergens(make_recipe(1, "Bread", gluten_free=False), []) == []


def test_allergen_query_value():
    assert allergen_query_value(Allergen.TREE_NUT) == "Tree Nut"
    assert [allergen_query_value(a) for a in COMMON_ALLERGENS] == get_all_allergen_labels()
