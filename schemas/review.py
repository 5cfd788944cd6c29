from pydantic import Field
from typing import Optional
from datetime import datetime
from schemas.base import CamelModel, utc_now
from schemas.user import User


class ReviewCreate(CamelModel):
    booking_id: int = Field(gt=0)
    provider_id: int = Field(gt=0)
    rating: int = Field(ge=1, le=5)  # Rating between 1 and 5
    comment: Optional[str] = None


class Review(ReviewCreate):
    id: int
    user_id: str
    created_at: datetime = Field(default_factory=utc_now)


class ReviewWithUser(Review):
    user: User
