from typing import Literal, Union

from pydantic import BaseModel


class Saved(BaseModel):
    status: Literal["saved"] = "saved"
    recipe_id: int


class AlreadySaved(BaseModel):
    status: Literal["already_saved"] = "already_saved"
    recipe_id: int
    message: str = "This recipe is already in your saved list."


class Failed(BaseModel):
    status: Literal["failed"] = "failed"
    recipe_id: int | None = None
    reason: str


SaveResult = Union[Saved, AlreadySaved, Failed]


class UnsaveResponse(BaseModel):
    recipe_id: int
    success: bool


class SavedStatusResponse(BaseModel):
    recipe_id: int
    is_saved: bool
