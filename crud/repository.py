from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from schemas.user import User, UserUpdate
from schemas.provider import ServiceProvider, ServiceProviderCreate, ServiceProviderUpdate
from schemas.booking import Booking, BookingWithProvider
from schemas.review import Review, ReviewWithUser
from schemas.relative import Relative, RelativeWithUser
from schemas.emergency_contact import EmergencyContact


class Repository(ABC):
    """Storage contract used by the booking core.

    Implementations raise ``services.exceptions.RepositoryError`` for any
    storage failure and return ``None`` for missing records.
    """

    # Users
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def upsert_user(self, user_id: str, data: UserUpdate) -> User: ...

    # Service providers
    @abstractmethod
    async def get_service_provider(self, provider_id: int) -> Optional[ServiceProvider]: ...

    @abstractmethod
    async def list_service_providers(self, service_type: Optional[str] = None,
                                     location: Optional[str] = None) -> List[ServiceProvider]:
        """Active providers, highest rated first."""

    @abstractmethod
    async def create_service_provider(self, provider: ServiceProviderCreate) -> ServiceProvider: ...

    @abstractmethod
    async def update_service_provider(self, provider_id: int,
                                      update: ServiceProviderUpdate) -> Optional[ServiceProvider]: ...

    # Bookings
    @abstractmethod
    async def create_booking(self, booking: dict) -> Booking:
        """Insert a booking atomically and assign its id."""

    @abstractmethod
    async def get_booking(self, booking_id: int) -> Optional[Booking]: ...

    @abstractmethod
    async def get_booking_with_provider(self, booking_id: int) -> Optional[BookingWithProvider]: ...

    @abstractmethod
    async def list_user_bookings(self, user_id: str) -> List[BookingWithProvider]:
        """Bookings for a user, newest first."""

    @abstractmethod
    async def update_booking_status(self, booking_id: int, status: str) -> Optional[Booking]: ...

    @abstractmethod
    async def mark_booking_notified(self, booking_id: int) -> None: ...

    # Reviews
    @abstractmethod
    async def create_review(self, review: dict) -> Review: ...

    @abstractmethod
    async def get_review_for_booking(self, booking_id: int) -> Optional[Review]: ...

    @abstractmethod
    async def list_provider_reviews(self, provider_id: int) -> List[ReviewWithUser]:
        """Reviews for a provider joined with the reviewer, newest first."""

    @abstractmethod
    async def summarize_provider_ratings(self, provider_id: int) -> Tuple[int, int]:
        """Return ``(sum of ratings, number of reviews)`` for a provider."""

    @abstractmethod
    async def get_rating_version(self, provider_id: int) -> Optional[int]:
        """Current rating version of a provider, ``None`` if it does not exist."""

    @abstractmethod
    async def compare_and_set_rating(self, provider_id: int, expected_version: int,
                                     rating: float, total_reviews: int) -> bool:
        """Write the aggregate only if the version is still ``expected_version``."""

    # Relatives
    @abstractmethod
    async def create_relative(self, relative: dict) -> Relative: ...

    @abstractmethod
    async def get_relative_link(self, senior_citizen_id: str, relative_id: str) -> Optional[Relative]: ...

    @abstractmethod
    async def list_relatives(self, senior_citizen_id: str) -> List[RelativeWithUser]:
        """Relatives linked by a senior citizen, newest first."""

    # Emergency contacts
    @abstractmethod
    async def create_emergency_contact(self, contact: dict) -> EmergencyContact: ...

    @abstractmethod
    async def list_emergency_contacts(self, user_id: str) -> List[EmergencyContact]:
        """Primary contacts first, then newest first."""
