from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from app.config import settings
from app.logging import get_logger
from app.schemas.recipe import Recipe

logger = get_logger(__name__)

CUISINES = [
    "African",
    "Asian",
    "American",
    "British",
    "Cajun",
    "Caribbean",
    "Chinese",
    "Eastern European",
    "European",
    "French",
    "German",
    "Greek",
    "Indian",
    "Irish",
    "Italian",
    "Japanese",
    "Jewish",
    "Korean",
    "Latin American",
    "Mediterranean",
    "Mexican",
    "Middle Eastern",
    "Nordic",
    "Southern",
    "Spanish",
    "Thai",
    "Vietnamese",
]

DIETS = [
    "Gluten Free",
    "Ketogenic",
    "Vegetarian",
    "Lacto-Vegetarian",
    "Ovo-Vegetarian",
    "Vegan",
    "Pescetarian",
    "Paleo",
    "Primal",
    "Low FODMAP",
    "Whole30",
]

MEAL_TYPES = [
    "main course",
    "side dish",
    "dessert",
    "appetizer",
    "salad",
    "bread",
    "breakfast",
    "soup",
    "beverage",
    "sauce",
    "marinade",
    "fingerfood",
    "snack",
    "drink",
]


def cuisine_slug(cuisine: str) -> str:
    return "-".join(cuisine.lower().split())


def cuisine_from_slug(slug: str) -> str | None:
    """'latin-american' -> 'Latin American'; None for unknown slugs."""
    for cuisine in CUISINES:
        if cuisine_slug(cuisine) == slug.lower():
            return cuisine
    return None


class RecipeApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"API request failed with status {status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class SearchParams:
    query: str | None = None
    cuisine: str | list[str] | None = None
    diet: str | list[str] | None = None
    type: str | None = None
    max_ready_time: int | None = None
    number: int | None = None
    offset: int = 0
    intolerances: str | list[str] | None = None


@dataclass
class SearchResult:
    recipes: list[Recipe] = field(default_factory=list)
    total_results: int = 0


def _join(value: str | list[str] | None) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value
    return ",".join(v for v in value if v)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    message = body.get("message") if isinstance(body, dict) else None
    return message or resp.reason_phrase or "Unknown error"


def _parse_json(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError as e:
        logger.error("spoonacular.bad_body status=%s error=%s", resp.status_code, e)
        raise RecipeApiError(resp.status_code, "Invalid response from recipe service") from e
    if not isinstance(data, dict):
        raise RecipeApiError(resp.status_code, "Invalid response from recipe service")
    return data


def _parse_recipes(items: list[Any], status_code: int = 200) -> list[Recipe]:
    try:
        return [Recipe.model_validate(r) for r in items]
    except ValidationError as e:
        logger.error("spoonacular.bad_recipe error_count=%s", e.error_count())
        raise RecipeApiError(status_code, "Invalid recipe data from recipe service") from e


class SpoonacularClient:
    def __init__(self) -> None:
        self._base_url = settings.spoonacular_base_url.rstrip("/")
        self._api_key = settings.spoonacular_api_key
        self._timeout = settings.spoonacular_timeout_s
        if not self._api_key:
            logger.warning(
                "spoonacular.missing_api_key set SPOONACULAR_API_KEY to enable recipe search"
            )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        return httpx.get(
            f"{self._base_url}{path}",
            params={"apiKey": self._api_key, **params},
            timeout=self._timeout,
        )

    def _get_json(self, path: str, params: dict[str, Any]) -> dict:
        resp = self._get(path, params)
        if resp.is_error:
            raise RecipeApiError(resp.status_code, _error_message(resp))
        return _parse_json(resp)

    def search_recipes(self, params: SearchParams) -> SearchResult:
        if not self.enabled:
            return SearchResult()
        query: dict[str, Any] = {
            "addRecipeInformation": "true",
            "number": params.number or settings.default_page_size,
            "offset": params.offset or 0,
        }
        if params.query:
            query["query"] = params.query
        for name, value in (
            ("cuisine", params.cuisine),
            ("diet", params.diet),
            ("intolerances", params.intolerances),
        ):
            joined = _join(value)
            if joined:
                query[name] = joined
        if params.type:
            query["type"] = params.type
        if params.max_ready_time:
            query["maxReadyTime"] = params.max_ready_time
        logger.info(
            "spoonacular.search query=%s cuisine=%s diet=%s type=%s offset=%s number=%s",
            params.query,
            query.get("cuisine"),
            query.get("diet"),
            params.type,
            query["offset"],
            query["number"],
        )
        data = self._get_json("/recipes/complexSearch", query)
        return SearchResult(
            recipes=_parse_recipes(data.get("results") or []),
            total_results=data.get("totalResults") or 0,
        )

    def fetch_personalized_recipes(
        self,
        cuisines: list[str] | None = None,
        diets: list[str] | None = None,
        intolerances: list[str] | None = None,
        count: int | None = None,
        offset: int = 0,
    ) -> SearchResult:
        return self.search_recipes(
            SearchParams(
                cuisine=cuisines,
                diet=diets,
                intolerances=intolerances,
                number=count,
                offset=offset,
            )
        )

    def get_recipes_by_cuisine(
        self,
        cuisine: str,
        count: int | None = None,
        offset: int = 0,
        intolerances: list[str] | None = None,
    ) -> SearchResult:
        return self.search_recipes(
            SearchParams(cuisine=cuisine, number=count, offset=offset, intolerances=intolerances)
        )

    def get_random_recipes(
        self,
        count: int | None = None,
        tags: str | None = None,
        intolerances: list[str] | None = None,
    ) -> list[Recipe]:
        if not self.enabled:
            return []
        query: dict[str, Any] = {
            "number": count or settings.default_page_size,
            "addRecipeInformation": "true",
        }
        if tags:
            query["tags"] = tags
        if intolerances:
            query["intolerances"] = _join(intolerances)
        logger.info("spoonacular.random number=%s tags=%s", query["number"], tags)
        data = self._get_json("/recipes/random", query)
        return _parse_recipes(data.get("recipes") or [])

    def get_recipe_details(self, recipe_id: int) -> Recipe | None:
        """Full recipe with ingredients and instructions; None when not found."""
        if not self.enabled:
            return None
        logger.info("spoonacular.details recipe_id=%s", recipe_id)
        resp = self._get(f"/recipes/{recipe_id}/information", {"includeNutrition": "false"})
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise RecipeApiError(resp.status_code, _error_message(resp))
        [recipe] = _parse_recipes([_parse_json(resp)], resp.status_code)
        return recipe


recipe_client = SpoonacularClient()
