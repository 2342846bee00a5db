from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.deps import current_user_id
from app.logging import get_logger
from app.schemas.profile import AllergiesResponse, AllergiesUpdate
from app.storage.db import session_dependency
from app.storage.repositories import get_user_allergies, update_user_allergies

router = APIRouter(prefix="/profile")
logger = get_logger(__name__)


@router.get("/allergies", response_model=AllergiesResponse)
def get_allergies(
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> AllergiesResponse:
    try:
        allergies = get_user_allergies(session, user_id)
    except SQLAlchemyError as e:
        logger.warning("profile.allergies_load_failed user_id=%s error=%s", user_id, e)
        allergies = []
    return AllergiesResponse(user_id=user_id, allergies=allergies)


@router.put("/allergies", response_model=AllergiesResponse)
def put_allergies(
    body: AllergiesUpdate,
    user_id: str = Depends(current_user_id),
    session: Session = Depends(session_dependency),
) -> AllergiesResponse:
    try:
        allergies = update_user_allergies(session, user_id, body.allergies)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("profile.allergies_update_failed user_id=%s error=%s", user_id, e)
        raise HTTPException(
            status_code=503, detail="Failed to save allergy preferences. Please try again."
        )
    return AllergiesResponse(user_id=user_id, allergies=allergies)
