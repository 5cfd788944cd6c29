from pydantic import Field, field_validator
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal
from schemas.base import CamelModel, utc_now
from schemas.provider import ServiceProvider

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
TERMINAL_STATUSES = ("completed", "cancelled")

MIN_ADDRESS_LENGTH = 10


class BookingCreate(CamelModel):
    provider_id: int = Field(gt=0)
    booking_date: datetime = Field(..., description="Scheduled date and time of the visit")
    duration: int = Field(ge=1, description="Duration in whole hours")
    address: str
    special_instructions: Optional[str] = None
    booked_by_relative: bool = False
    relative_id: Optional[str] = None

    @field_validator("address")
    @classmethod
    def address_must_be_meaningful(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_ADDRESS_LENGTH:
            raise ValueError(f"Address must be at least {MIN_ADDRESS_LENGTH} characters")
        return value

    @field_validator("special_instructions", "relative_id")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class Booking(CamelModel):
    id: int
    user_id: str
    provider_id: int
    booking_date: datetime
    duration: int = Field(ge=1)
    total_amount: Decimal
    address: str
    special_instructions: Optional[str] = None
    status: BookingStatus = "pending"
    booked_by_relative: bool = False
    relative_id: Optional[str] = None
    sms_notification_sent: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class BookingWithProvider(Booking):
    provider: ServiceProvider


class BookingStatusUpdate(CamelModel):
    status: BookingStatus
