import logging
from fastapi import APIRouter, Depends, HTTPException

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.review.review import Review, ReviewCreate
from app.models.user.user import User
from app.services.json import dump_all, return_json
from app.utilities.helper import refresh_dealer_rating
from app.utilities.security import get_current_user

logger = logging.getLogger(__name__)

review_router = APIRouter(
    prefix="/api/reviews",
    tags=["Reviews"],
)


@review_router.get("/dealer/{dealer_id}")
async def get_dealer_reviews(dealer_id: str, storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.get_reviews_by_dealer(dealer_id)))
    except Exception as e:
        logger.exception(f"Error fetching dealer reviews: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dealer reviews")


@review_router.get("/car/{car_id}")
async def get_car_reviews(car_id: str, storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.get_reviews_by_car(car_id)))
    except Exception as e:
        logger.exception(f"Error fetching car reviews: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch car reviews")


@review_router.get("/user/{user_id}")
async def get_user_reviews(
    user_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        return return_json(dump_all(storage.get_reviews_by_user(user_id)))
    except Exception as e:
        logger.exception(f"Error fetching user reviews: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user reviews")


@review_router.post("")
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        if not data.dealer_id and not data.car_id:
            raise HTTPException(status_code=400, detail="A review needs a dealerId or a carId")

        review = storage.create_review(Review.model_validate({
            **data.model_dump(),
            "user_id": data.user_id or current_user.id,
        }))
        if review.dealer_id:
            refresh_dealer_rating(storage, review.dealer_id)
        return return_json(review, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating review: {e}")
        raise HTTPException(status_code=500, detail="Failed to create review")
