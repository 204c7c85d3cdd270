from typing import Optional

from app.models.base import ApiModel, Document


class FavoriteCreate(ApiModel):
    user_id: Optional[str] = None
    car_id: str


class FavoriteCar(Document):
    user_id: str
    car_id: str
