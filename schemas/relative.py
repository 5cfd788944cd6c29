from pydantic import Field
from datetime import datetime
from schemas.base import CamelModel, utc_now
from schemas.user import User


class RelativeCreate(CamelModel):
    relative_id: str = Field(min_length=1)
    relationship: str = Field(min_length=1, description="e.g. son, daughter, spouse")
    can_book_services: bool = True


class Relative(RelativeCreate):
    id: int
    senior_citizen_id: str
    created_at: datetime = Field(default_factory=utc_now)


class RelativeWithUser(Relative):
    relative: User
