from pydantic import EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import datetime
from schemas.base import CamelModel, utc_now

UserType = Literal["senior_citizen", "relative"]


class UserBase(CamelModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    user_type: UserType = "senior_citizen"
    phone: Optional[str] = None
    address: Optional[str] = None


class UserUpdate(CamelModel):
    """Profile fields the caller may change. Unset fields are left untouched."""
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    user_type: Optional[UserType] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("user_type")
    @classmethod
    def user_type_not_null(cls, value: Optional[str]) -> Optional[str]:
        # Omit the field to keep the stored type
        if value is None:
            raise ValueError("userType cannot be null")
        return value


class User(UserBase):
    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or "User"
