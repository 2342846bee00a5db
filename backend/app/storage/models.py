from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_column() -> Column:
    return Column(DateTime(timezone=True), nullable=False)


class SavedRecipe(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_savedrecipe_user_recipe"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    recipe_id: int
    recipe_data: dict = Field(sa_column=Column(JSON, nullable=False))  # snapshot at save time
    saved_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp_column())


class Profile(SQLModel, table=True):
    user_id: str = Field(primary_key=True)
    allergies: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=_timestamp_column())
