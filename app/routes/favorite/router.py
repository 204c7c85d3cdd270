import logging
from fastapi import APIRouter, Depends, HTTPException, Response

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.favorite.favorite import FavoriteCar, FavoriteCreate
from app.models.user.user import User
from app.services.json import dump, return_json
from app.utilities.security import get_current_user

logger = logging.getLogger(__name__)

favorite_router = APIRouter(
    prefix="/api/favorites",
    tags=["Favorites"],
)


@favorite_router.get("/{user_id}")
async def get_favorites(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        favorites = []
        for favorite in storage.get_user_favorites(user_id):
            car = storage.get_car(favorite.car_id)
            favorites.append({**dump(favorite), "car": dump(car) if car else None})
        return return_json(favorites)
    except Exception as e:
        logger.exception(f"Error fetching favorites: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch favorites")


@favorite_router.post("")
async def add_favorite(
    data: FavoriteCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        user_id = data.user_id or current_user.id
        existing = storage.get_favorite(user_id, data.car_id)
        if existing:
            return return_json(existing)

        favorite = storage.add_to_favorites(FavoriteCar(user_id=user_id, car_id=data.car_id))
        return return_json(favorite, 201)
    except Exception as e:
        logger.exception(f"Error adding to favorites: {e}")
        raise HTTPException(status_code=500, detail="Failed to add to favorites")


@favorite_router.delete("/{user_id}/{car_id}", status_code=204)
async def remove_favorite(
    user_id: str,
    car_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        storage.remove_from_favorites(user_id, car_id)
        return Response(status_code=204)
    except Exception as e:
        logger.exception(f"Error removing from favorites: {e}")
        raise HTTPException(status_code=500, detail="Failed to remove from favorites")
