from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator

from app.models.base import ApiModel, Document


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    ELECTRIC = "electric"
    HYBRID = "hybrid"
    DIESEL = "diesel"


class Transmission(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    CVT = "cvt"


class BodyType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    HATCHBACK = "hatchback"
    CONVERTIBLE = "convertible"
    PICKUP = "pickup"
    COUPE = "coupe"


class Drivetrain(str, Enum):
    FWD = "fwd"
    RWD = "rwd"
    AWD = "awd"
    FOUR_WD = "4wd"


class Condition(str, Enum):
    NEW = "new"
    USED = "used"
    CERTIFIED = "certified"


def _split_features(value):
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


# AddCar
class CarCreate(ApiModel):
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1886, le=2100)
    price: float = Field(..., ge=0)
    mileage: int = Field(..., ge=0)
    fuel_type: FuelType
    transmission: Transmission
    body_type: BodyType
    drivetrain: Drivetrain
    engine: Optional[str] = None
    horsepower: Optional[int] = Field(None, ge=0)
    mpg_city: Optional[int] = Field(None, ge=0)
    mpg_highway: Optional[int] = Field(None, ge=0)
    safety_rating: Optional[int] = Field(None, ge=1, le=5)
    color: Optional[str] = None
    vin: Optional[str] = None
    condition: Condition = Condition.USED
    features: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    dealer_id: str
    available: bool = True

    @field_validator("features", mode="before")
    @classmethod
    def split_features(cls, value):
        return _split_features(value)


# Update car model
class CarUpdate(ApiModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1886, le=2100)
    price: Optional[float] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None
    transmission: Optional[Transmission] = None
    body_type: Optional[BodyType] = None
    drivetrain: Optional[Drivetrain] = None
    engine: Optional[str] = None
    horsepower: Optional[int] = Field(None, ge=0)
    mpg_city: Optional[int] = Field(None, ge=0)
    mpg_highway: Optional[int] = Field(None, ge=0)
    safety_rating: Optional[int] = Field(None, ge=1, le=5)
    color: Optional[str] = None
    vin: Optional[str] = None
    condition: Optional[Condition] = None
    features: Optional[List[str]] = None
    image_urls: Optional[List[str]] = None
    description: Optional[str] = None
    dealer_id: Optional[str] = None
    available: Optional[bool] = None

    @field_validator("features", mode="before")
    @classmethod
    def parse_features(cls, value):
        return _split_features(value)


class Car(Document, CarCreate):
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.make} {self.model}"


class CarSearchFilters(ApiModel):
    make: Optional[str] = None
    model: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    body_type: Optional[str] = None
    max_mileage: Optional[int] = None

    def active(self) -> dict:
        """Filters that were actually supplied. Blank and "all" mean no filter."""
        return {
            key: value
            for key, value in self.model_dump().items()
            if value is not None and value != "" and value != "all"
        }
