from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "recipe-finder"
    env: str = "local"
    log_level: str = "INFO"

    # Per-user record store (saved recipes, allergy preferences)
    database_dsn: str = "sqlite:///./recipe_finder.db"

    spoonacular_api_key: str = ""
    spoonacular_base_url: str = "https://api.spoonacular.com"
    spoonacular_timeout_s: float = 15.0

    default_page_size: int = 12
    # Personalized feed asks for a few extra recipes per page
    recommendation_overfetch: int = 5

    # ThreadPoolExecutor workers for recipe detail fetches during shopping list generation.
    # Set DETAIL_FETCH_MAX_WORKERS in .env to override.
    detail_fetch_max_workers: int = 8

    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"


settings = Settings()
