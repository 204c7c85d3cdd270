import logging
import time
from typing import Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.car.car import Car, CarCreate, CarSearchFilters, CarUpdate
from app.models.user.user import User
from app.services.json import dump, dump_all, return_json, return_message
from app.socketio.socket_server import broadcast_car_event, broadcast_update
from app.utilities.helper import log_inventory
from app.utilities.security import require_seller

logger = logging.getLogger(__name__)

car_router = APIRouter(
    prefix="/api",
    tags=["Cars"],
)


@car_router.get("/cars")
async def get_cars(storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.get_all_cars()))
    except Exception as e:
        logger.exception(f"Error fetching cars: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch cars")


@car_router.get("/cars/featured")
async def get_featured_cars(storage: Storage = Depends(get_storage)):
    try:
        return return_json(dump_all(storage.get_featured_cars()))
    except Exception as e:
        logger.exception(f"Error fetching featured cars: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch featured cars")


@car_router.get("/cars/search")
async def search_cars(
    q: Optional[str] = Query(None, description="Free-text search from the hero search bar"),
    make: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    min_year: Optional[int] = Query(None, alias="minYear"),
    max_year: Optional[int] = Query(None, alias="maxYear"),
    fuel_type: Optional[str] = Query(None, alias="fuelType"),
    transmission: Optional[str] = Query(None),
    body_type: Optional[str] = Query(None, alias="bodyType"),
    max_mileage: Optional[int] = Query(None, alias="maxMileage"),
    storage: Storage = Depends(get_storage),
):
    try:
        if q and q.strip():
            return return_json(dump_all(storage.search_cars_by_text(q)))

        filters = CarSearchFilters(
            make=make,
            model=model,
            min_price=min_price,
            max_price=max_price,
            min_year=min_year,
            max_year=max_year,
            fuel_type=fuel_type,
            transmission=transmission,
            body_type=body_type,
            max_mileage=max_mileage,
        )
        return return_json(dump_all(storage.search_cars(filters.active())))
    except Exception as e:
        logger.exception(f"Search error: {e}")
        raise HTTPException(status_code=500, detail="Failed to search cars")


@car_router.get("/cars/{car_id}")
async def get_car(car_id: str, storage: Storage = Depends(get_storage)):
    try:
        car = storage.get_car(car_id)
        if not car:
            raise HTTPException(status_code=404, detail="Car not found")
        return return_json(car)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error fetching car: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch car")


@car_router.post("/cars")
async def create_car(
    data: CarCreate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        car = storage.create_car(Car.model_validate(data.model_dump()))
        log_inventory(storage, "added", car, new_data=dump(car), notes=f"Listed by {current_user.username}")
        await broadcast_car_event("CAR_ADDED", dump(car), car.dealer_id)
        logger.info(f"🚗 Car {car.id} ({car.full_name}) added for dealer {car.dealer_id}")
        return return_json(car, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error creating car: {e}")
        raise HTTPException(status_code=500, detail="Failed to create car")


@car_router.patch("/cars/{car_id}")
async def update_car(
    car_id: str,
    data: CarUpdate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        existing = storage.get_car(car_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Car not found")

        car = storage.update_car(car_id, data.model_dump(exclude_none=True))
        log_inventory(storage, "updated", car, old_data=dump(existing), new_data=dump(car))
        await broadcast_car_event("CAR_UPDATED", dump(car), car.dealer_id)
        return return_json(car)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating car: {e}")
        raise HTTPException(status_code=500, detail="Failed to update car")


# Listings are never hard-deleted, they leave the inventory as unavailable
@car_router.delete("/cars/{car_id}")
async def remove_car(
    car_id: str,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        existing = storage.get_car(car_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Car not found")

        car = storage.update_car(car_id, {"available": False})
        log_inventory(storage, "removed", car, old_data=dump(existing), new_data=dump(car))
        await broadcast_car_event("CAR_REMOVED", dump(car), car.dealer_id)
        return return_message("Car removed successfully", car=dump(car))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error removing car: {e}")
        raise HTTPException(status_code=500, detail="Failed to remove car")


# Simulates a listing so dashboards can check their live feed
@car_router.post("/test/car-update")
async def test_car_update(payload: Optional[dict] = Body(None)):
    try:
        dealer_id = (payload or {}).get("dealerId") or "test-dealer"
        await broadcast_update({
            "type": "CAR_ADDED",
            "data": {
                "make": "Test",
                "model": "Demo Car",
                "year": 2024,
                "price": 30000,
                "_id": f"test-{int(time.time() * 1000)}",
            },
            "dealerId": dealer_id,
        })
        return return_message("Test update broadcasted")
    except Exception as e:
        logger.exception(f"Error broadcasting test update: {e}")
        raise HTTPException(status_code=500, detail="Failed to broadcast test update")


@car_router.get("/makes")
async def get_makes(storage: Storage = Depends(get_storage)):
    try:
        return return_json(sorted({car.make for car in storage.get_all_cars()}))
    except Exception as e:
        logger.exception(f"Error fetching makes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch makes")


@car_router.get("/models/{make}")
async def get_models(make: str, storage: Storage = Depends(get_storage)):
    try:
        models = {car.model for car in storage.get_all_cars() if car.make == make}
        return return_json(sorted(models))
    except Exception as e:
        logger.exception(f"Error fetching models: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch models")
