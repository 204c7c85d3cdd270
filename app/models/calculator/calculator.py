from typing import Literal, Optional
from pydantic import Field

from app.models.base import ApiModel

MAX_LOAN_TERM_MONTHS = 600


class FinanceRequest(ApiModel):
    car_price: float = Field(..., gt=0)
    down_payment: float = Field(0, ge=0)
    loan_term_months: int = Field(60, gt=0, le=MAX_LOAN_TERM_MONTHS)
    interest_rate: Optional[float] = Field(None, ge=0, description="APR in percent")
    credit_score: Optional[int] = Field(None, ge=300, le=850)


class PricingRequest(ApiModel):
    car_id: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    year: Optional[int] = None
    mileage: int = Field(..., ge=0)
    condition: Literal["excellent", "good", "fair", "poor"] = "good"
    market_position: Literal["premium", "competitive", "value"] = "competitive"
    reference_year: Optional[int] = None
