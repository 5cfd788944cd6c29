from pydantic import EmailStr, Field, model_validator
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal
from schemas.base import CamelModel, utc_now

ServiceType = Literal["nurse", "electrician", "plumber", "beautician", "cab_driver"]
SERVICE_TYPES = ("nurse", "electrician", "plumber", "beautician", "cab_driver")


class ServiceProviderBase(CamelModel):
    name: str = Field(min_length=1)
    service_type: ServiceType
    phone: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    experience: Optional[int] = Field(None, ge=0)  # years
    hourly_rate: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    location: str = Field(min_length=1)
    available_from: int = Field(9, ge=0, le=23, description="Hour of day the provider starts work")
    available_to: int = Field(18, ge=1, le=24, description="Hour of day the provider stops work")
    is_active: bool = True
    specialization: Optional[str] = None
    profile_image_url: Optional[str] = None

    @model_validator(mode="after")
    def check_availability_window(self):
        if self.available_from >= self.available_to:
            raise ValueError("availableFrom must be earlier than availableTo")
        return self


class ServiceProviderCreate(ServiceProviderBase):
    pass


class ServiceProviderUpdate(CamelModel):
    """Rating fields are written only by the rating aggregator."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    experience: Optional[int] = Field(None, ge=0)
    hourly_rate: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    location: Optional[str] = None
    available_from: Optional[int] = Field(None, ge=0, le=23)
    available_to: Optional[int] = Field(None, ge=1, le=24)
    is_active: Optional[bool] = None
    specialization: Optional[str] = None
    profile_image_url: Optional[str] = None


class ServiceProvider(ServiceProviderBase):
    id: int
    rating: float = Field(0.0, ge=0.0, le=5.0)
    total_reviews: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
