import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from app.database.connections import get_storage
from app.database.storage import Storage
from app.models.calculator.calculator import FinanceRequest, PricingRequest
from app.services.calculators import CalculatorError, calculate_finance, estimate_rate, suggest_price
from app.services.json import return_json

logger = logging.getLogger(__name__)

calculator_router = APIRouter(
    prefix="/api/calculators",
    tags=["Calculators"],
)


@calculator_router.get("/rate")
async def get_rate(credit_score: int = Query(..., alias="creditScore", ge=300, le=850)):
    return return_json({"creditScore": credit_score, "interestRate": estimate_rate(credit_score)})


@calculator_router.post("/finance")
async def finance(data: FinanceRequest):
    try:
        return return_json(calculate_finance(
            data.car_price,
            data.down_payment,
            data.loan_term_months,
            data.interest_rate,
            data.credit_score,
        ))
    except CalculatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Finance calculation error: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate financing")


@calculator_router.post("/pricing")
async def pricing(data: PricingRequest, storage: Storage = Depends(get_storage)):
    try:
        price, year = data.price, data.year
        if data.car_id:
            car = storage.get_car(data.car_id)
            if not car:
                raise HTTPException(status_code=404, detail="Car not found")
            price = price or car.price
            year = year or car.year
        if price is None or year is None:
            raise HTTPException(status_code=400, detail="Provide a carId or both price and year")

        return return_json(suggest_price(
            price, year, data.mileage, data.condition, data.market_position, data.reference_year,
        ))
    except HTTPException as e:
        raise e
    except CalculatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Pricing calculation error: {e}")
        raise HTTPException(status_code=500, detail="Failed to suggest a price")
