import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.inventory.inventory import DealerAnalytics, DealerAnalyticsCreate, Period, Sale, SaleCreate, SaleUpdate
from app.models.user.user import User
from app.services.json import dump, dump_all, return_json
from app.socketio.socket_server import broadcast_car_event
from app.utilities.helper import dealer_summary, log_inventory
from app.utilities.security import require_seller

logger = logging.getLogger(__name__)

inventory_router = APIRouter(
    prefix="/api",
    tags=["Inventory"],
)


@inventory_router.get("/dealers/{dealer_id}/inventory-logs")
async def get_inventory_logs(
    dealer_id: str,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        return return_json(dump_all(storage.get_inventory_logs(dealer_id)))
    except Exception as e:
        logger.exception(f"Error fetching inventory logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch inventory logs")


# Record a sale: the car leaves the listings and subscribers hear about it
@inventory_router.post("/sales")
async def create_sale(
    data: SaleCreate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        car = storage.get_car(data.car_id)
        if not car:
            raise HTTPException(status_code=404, detail="Car not found")
        if not car.available:
            raise HTTPException(status_code=400, detail="Car is not available")

        sale = storage.create_sale(Sale.model_validate({**data.model_dump(), "dealer_id": car.dealer_id}))
        sold = storage.update_car(car.id, {"available": False})
        log_inventory(
            storage, "sold", sold,
            old_data=dump(car), new_data=dump(sold),
            notes=f"Sold to {sale.buyer_name} for {sale.sale_price}",
        )
        await broadcast_car_event("CAR_SOLD", dump(sold), sold.dealer_id)
        logger.info(f"💰 Car {car.id} sold by dealer {car.dealer_id}")
        return return_json(sale, 201)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error recording sale: {e}")
        raise HTTPException(status_code=500, detail="Failed to record sale")


@inventory_router.get("/dealers/{dealer_id}/sales")
async def get_dealer_sales(
    dealer_id: str,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        return return_json(dump_all(storage.get_sales_by_dealer(dealer_id)))
    except Exception as e:
        logger.exception(f"Error fetching sales: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch sales")


@inventory_router.patch("/sales/{sale_id}")
async def update_sale(
    sale_id: str,
    data: SaleUpdate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        existing = storage.get_sale(sale_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Sale not found")

        car = storage.get_car(existing.car_id)
        reopened = existing.status == "cancelled" and data.status not in (None, "cancelled")
        # a reopened sale takes the car off the market again
        if reopened and car and not car.available:
            raise HTTPException(status_code=400, detail="Car is not available")

        sale = storage.update_sale(sale_id, data.model_dump(exclude_none=True))

        # cancelling puts the car back on the market
        if sale.status == "cancelled" and existing.status != "cancelled" and car:
            relisted = storage.update_car(car.id, {"available": True})
            log_inventory(
                storage, "updated", relisted,
                old_data=dump(car), new_data=dump(relisted), notes="Sale cancelled",
            )
            await broadcast_car_event("CAR_UPDATED", dump(relisted), relisted.dealer_id)
        elif reopened and car:
            sold = storage.update_car(car.id, {"available": False})
            log_inventory(
                storage, "sold", sold,
                old_data=dump(car), new_data=dump(sold), notes=f"Sale reopened as {sale.status}",
            )
            await broadcast_car_event("CAR_SOLD", dump(sold), sold.dealer_id)
        return return_json(sale)
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error updating sale: {e}")
        raise HTTPException(status_code=500, detail="Failed to update sale")


@inventory_router.get("/dealers/{dealer_id}/analytics")
async def get_dealer_analytics(
    dealer_id: str,
    period: Optional[Period] = Query(None),
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        period_value = period.value if period else None
        return return_json(dump_all(storage.get_dealer_analytics(dealer_id, period_value)))
    except Exception as e:
        logger.exception(f"Error fetching analytics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")


@inventory_router.post("/dealers/{dealer_id}/analytics")
async def create_dealer_analytics(
    dealer_id: str,
    data: DealerAnalyticsCreate,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        analytics = storage.create_dealer_analytics(
            DealerAnalytics.model_validate({**data.model_dump(), "dealer_id": dealer_id})
        )
        return return_json(analytics, 201)
    except Exception as e:
        logger.exception(f"Error saving analytics: {e}")
        raise HTTPException(status_code=500, detail="Failed to save analytics")


@inventory_router.get("/dealers/{dealer_id}/analytics/summary")
async def get_dealer_summary(
    dealer_id: str,
    current_user: User = Depends(require_seller),
    storage: Storage = Depends(get_storage),
):
    try:
        if not storage.get_dealer(dealer_id):
            raise HTTPException(status_code=404, detail="Dealer not found")
        return return_json(dealer_summary(storage, dealer_id))
    except HTTPException as e:
        raise e
    except Exception as e:
        logger.exception(f"Error building dealer summary: {e}")
        raise HTTPException(status_code=500, detail="Failed to build dealer summary")
