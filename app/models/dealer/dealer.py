from typing import Optional
from pydantic import EmailStr, Field

from app.models.base import ApiModel, Document


class DealerCreate(ApiModel):
    name: str = Field(..., min_length=1)
    location: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    rating: float = Field(0.0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    verified: bool = False
    user_id: Optional[str] = None


class Dealer(Document, DealerCreate):
    pass
