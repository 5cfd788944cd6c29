from pydantic import Field
from datetime import datetime
from schemas.base import CamelModel, utc_now


class EmergencyContactCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    relationship: str = Field(min_length=1)
    is_primary: bool = False


class EmergencyContact(EmergencyContactCreate):
    id: int
    user_id: str
    created_at: datetime = Field(default_factory=utc_now)


class SOSResult(CamelModel):
    message: str = "SOS alert sent"
    contacts_notified: int = Field(ge=0)
    total_contacts: int = Field(ge=0)
