from app.services.preferences import analyze_user_preferences
from fakes import make_recipe


def test_no_saved_recipes():
    prefs = analyze_user_preferences([])
    assert prefs.top_cuisines == []
    assert prefs.top_diets == []
    assert prefs.is_empty


def test_top_cuisines_and_diet():
    saved = [
        make_recipe(1, "A", cuisines=["Italian", "Mediterranean"], diets=["vegetarian"]),
        make_recipe(2, "B", cuisines=["Mexican"], diets=["vegan", "vegetarian"]),
        make_recipe(3, "C", cuisines=["Italian"]),
        make_recipe(4, "D", cuisines=["Mexican", "Thai"]),
    ]
    prefs = analyze_user_preferences(saved)
    assert prefs.top_cuisines == ["Italian", "Mexican"]
    assert prefs.top_diets == ["vegetarian"]
    assert not prefs.is_empty


def test_ties_keep_first_seen_order():
    saved = [
        make_recipe(1, "A", cuisines=["Thai"]),
        make_recipe(2, "B", cuisines=["Greek"]),
        make_recipe(3, "C", cuisines=["Korean"]),
    ]
    assert analyze_user_preferences(saved).top_cuisines == ["Thai", "Greek"]
