from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import router as api_router
from app.config import settings
from app.logging import configure_logging, get_logger
from app.storage.db import create_db_and_tables

app = FastAPI(title="Recipe Finder API")
logger = get_logger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)
    logger.info(
        "startup: env=%s store=%s recipe_api_enabled=%s creating record store tables",
        settings.env,
        settings.database_dsn.split(":", 1)[0],
        bool(settings.spoonacular_api_key),
    )
    create_db_and_tables()


app.include_router(api_router)
