import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.dealer.dealer import Dealer, DealerCreate
from app.models.user.user import User
from app.services.json import dump_all, return_json
from app.utilities.security import require_seller

logger = logging.getLogger(__name__)

dealer_router = APIRouter(
    prefix="/api/dealers",
    tags=["Dealers"],
)


@dealer_router.get("")
async def get_dealers(
    location: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
):
    try:
        if location:
            dealers = storage.get_dealers_by_location(location)
        else:
            dealers = storage.get_all_dealers()
        return return_json(dump_all(dealers))
    except Exception as e:
        logger.exception(f"Error fetching dealers: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dealers")


@dealer_router.get("/{dealer_id}")
async def get_dealer(dealer_id: str, storage: Storage = Depends(get_storage)):
    try:
        dealer = storage.get_dealer(dealer_id)
        if not dealer:
            raise HTTPException(status_code=404, detail="Dealer not found")
        return return_json(dealer)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching dealer: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dealer")


@dealer_router.get("/{dealer_id}/cars")
async def get_dealer_cars(dealer_id: str, storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.get_cars_by_dealer(dealer_id)))
    except Exception as e:
        logger.exception(f"Error fetching dealer cars: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dealer cars")


@dealer_router.post("")
async def create_dealer(
    data: DealerCreate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        dealer = Dealer.model_validate(data.model_dump())
        if not dealer.user_id:
            dealer.user_id = current_user.id
        dealer = storage.create_dealer(dealer)
        logger.info(f"🏪 Dealer {dealer.name} created by {current_user.username}")
        return return_json(dealer, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating dealer: {e}")
        raise HTTPException(status_code=500, detail="Failed to create dealer")
