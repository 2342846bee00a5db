from fastapi import APIRouter

from app.api.health import router as health_router
from app.api.profile import router as profile_router
from app.api.recipes import router as recipes_router
from app.api.saved import router as saved_router
from app.api.shopping import router as shopping_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(recipes_router)
router.include_router(saved_router)
router.include_router(profile_router)
router.include_router(shopping_router)
