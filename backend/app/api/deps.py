"""Request-scoped dependencies shared by the routers."""

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from app.logging import get_logger
from app.services.allergens import Allergen
from app.storage.db import session_dependency
from app.storage.repositories import get_user_allergies

logger = get_logger(__name__)


def optional_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """User id injected by the identity gateway; None for anonymous requests."""
    user_id = (x_user_id or "").strip()
    return user_id or None


def current_user_id(user_id: str | None = Depends(optional_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Please log in to continue.")
    return user_id


def current_allergies(
    user_id: str | None = Depends(optional_user_id),
    session: Session = Depends(session_dependency),
) -> list[Allergen]:
    """The user's allergies for warnings; empty when anonymous or the store is unreachable."""
    if not user_id:
        return []
    try:
        return get_user_allergies(session, user_id)
    except Exception as e:
        logger.warning("profile.allergies_load_failed user_id=%s error=%s", user_id, e)
        return []
