from pydantic import BaseModel

from app.services.allergens import Allergen


class AllergiesUpdate(BaseModel):
    allergies: list[Allergen]


class AllergiesResponse(BaseModel):
    user_id: str
    allergies: list[Allergen]
