from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import EmailStr, Field

from app.models.base import ApiModel, Document, utcnow


class InventoryAction(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    SOLD = "sold"
    REMOVED = "removed"


class InventoryLog(Document):
    dealer_id: str
    car_id: str
    action: InventoryAction
    old_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None


class FinanceType(str, Enum):
    CASH = "cash"
    FINANCE = "finance"
    LEASE = "lease"


class SaleStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SaleCreate(ApiModel):
    car_id: str
    buyer_name: str = Field(..., min_length=1)
    buyer_email: EmailStr
    buyer_phone: Optional[str] = None
    sale_price: float = Field(..., ge=0)
    finance_type: Optional[FinanceType] = None
    payment_method: Optional[str] = None
    status: SaleStatus = SaleStatus.PENDING
    notes: Optional[str] = None


class SaleUpdate(ApiModel):
    buyer_name: Optional[str] = None
    buyer_email: Optional[EmailStr] = None
    buyer_phone: Optional[str] = None
    sale_price: Optional[float] = Field(None, ge=0)
    finance_type: Optional[FinanceType] = None
    payment_method: Optional[str] = None
    status: Optional[SaleStatus] = None
    notes: Optional[str] = None


class Sale(Document, SaleCreate):
    dealer_id: str


class Period(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DealerAnalyticsCreate(ApiModel):
    period: Period
    date: datetime = Field(default_factory=utcnow)
    total_views: int = Field(0, ge=0)
    total_inquiries: int = Field(0, ge=0)
    total_sales: int = Field(0, ge=0)
    total_revenue: float = Field(0, ge=0)
    cars_listed: int = Field(0, ge=0)
    cars_sold: int = Field(0, ge=0)
    average_time_to_sale: float = Field(0, ge=0)
    top_performing_cars: List[str] = Field(default_factory=list)


class DealerAnalytics(Document, DealerAnalyticsCreate):
    dealer_id: str
