from typing import Optional
from pydantic import Field

from app.models.base import ApiModel, Document


class ReviewCreate(ApiModel):
    user_id: Optional[str] = None
    dealer_id: Optional[str] = None
    car_id: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class Review(Document, ReviewCreate):
    user_id: str
