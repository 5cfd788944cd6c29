from typing import Any, Dict, List, Optional, Tuple
from functools import wraps
from decimal import Decimal
import logging
import re
from bson.decimal128 import Decimal128
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from config.database import Database
from crud.repository import Repository
from schemas.base import utc_now
from schemas.user import User, UserUpdate
from schemas.provider import ServiceProvider, ServiceProviderCreate, ServiceProviderUpdate
from schemas.booking import Booking, BookingWithProvider
from schemas.review import Review, ReviewWithUser
from schemas.relative import Relative, RelativeWithUser
from schemas.emergency_contact import EmergencyContact
from services.exceptions import RepositoryError, ValidationFailed

logger = logging.getLogger(__name__)


def storage_call(func):
    """Translate driver errors into RepositoryError."""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Storage error in {func.__name__}: {str(e)}", exc_info=True)
            raise RepositoryError(str(e)) from e
    return wrapper


def to_storage(value: Any) -> Any:
    """Recursively convert Decimal values to Decimal128 so Mongo keeps exact money amounts."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {key: to_storage(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_storage(item) for item in value]
    return value


def from_storage(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively strip Mongo ids and turn Decimal128 back into Decimal."""
    cleaned = {}
    for key, value in doc.items():
        if key == "_id":
            continue
        if isinstance(value, Decimal128):
            value = value.to_decimal()
        elif isinstance(value, dict):
            value = from_storage(value)
        cleaned[key] = value
    return cleaned


class MongoRepository(Repository):
    def __init__(self, db: Database):
        self.db = db

    async def _next_id(self, name: str) -> int:
        counter = await self.db.counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return counter["seq"]

    async def _joined(self, collection, match: dict, sort: dict, lookup_from: str,
                      local_field: str, as_field: str) -> List[dict]:
        pipeline = [
            {"$match": match},
            {"$sort": sort},
            {"$lookup": {
                "from": lookup_from,
                "localField": local_field,
                "foreignField": "id",
                "as": as_field
            }},
            {"$unwind": f"${as_field}"},
        ]
        docs = await collection.aggregate(pipeline).to_list(length=None)
        return [from_storage(doc) for doc in docs]

    # Users

    @storage_call
    async def get_user(self, user_id: str) -> Optional[User]:
        user = await self.db.users.find_one({"id": user_id})
        return User(**from_storage(user)) if user else None

    @storage_call
    async def upsert_user(self, user_id: str, data: UserUpdate) -> User:
        now = utc_now()
        update_data = data.model_dump(exclude_unset=True)
        update_data["updated_at"] = now
        await self.db.users.update_one(
            {"id": user_id},
            {
                "$set": update_data,
                "$setOnInsert": {"id": user_id, "created_at": now}
            },
            upsert=True
        )
        user = await self.db.users.find_one({"id": user_id})
        return User(**from_storage(user))

    # Service providers

    @storage_call
    async def get_service_provider(self, provider_id: int) -> Optional[ServiceProvider]:
        provider = await self.db.service_providers.find_one({"id": provider_id})
        return ServiceProvider(**from_storage(provider)) if provider else None

    @storage_call
    async def list_service_providers(self, service_type: Optional[str] = None,
                                     location: Optional[str] = None) -> List[ServiceProvider]:
        query: Dict[str, Any] = {"is_active": True}
        if service_type:
            query["service_type"] = service_type
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}

        providers = await self.db.service_providers.find(query).sort(
            [("rating", -1), ("id", 1)]
        ).to_list(length=None)
        return [ServiceProvider(**from_storage(provider)) for provider in providers]

    @storage_call
    async def create_service_provider(self, provider: ServiceProviderCreate) -> ServiceProvider:
        provider_dict = provider.model_dump()
        provider_dict["id"] = await self._next_id("service_providers")
        provider_dict["rating"] = 0.0
        provider_dict["total_reviews"] = 0
        provider_dict["rating_version"] = 0
        provider_dict["created_at"] = utc_now()

        await self.db.service_providers.insert_one(to_storage(provider_dict))
        return ServiceProvider(**provider_dict)

    @storage_call
    async def update_service_provider(self, provider_id: int,
                                      update: ServiceProviderUpdate) -> Optional[ServiceProvider]:
        update_data = {k: v for k, v in update.model_dump().items() if v is not None}
        if update_data:
            await self.db.service_providers.update_one(
                {"id": provider_id},
                {"$set": to_storage(update_data)}
            )
        return await self.get_service_provider(provider_id)

    # Bookings

    @storage_call
    async def create_booking(self, booking: dict) -> Booking:
        booking_dict = dict(booking)
        booking_dict["id"] = await self._next_id("bookings")
        now = utc_now()
        booking_dict.setdefault("created_at", now)
        booking_dict.setdefault("updated_at", now)

        await self.db.bookings.insert_one(to_storage(booking_dict))
        return Booking(**booking_dict)

    @storage_call
    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        booking = await self.db.bookings.find_one({"id": booking_id})
        return Booking(**from_storage(booking)) if booking else None

    @storage_call
    async def get_booking_with_provider(self, booking_id: int) -> Optional[BookingWithProvider]:
        docs = await self._joined(
            self.db.bookings, {"id": booking_id}, {"id": 1},
            "service_providers", "provider_id", "provider"
        )
        return BookingWithProvider(**docs[0]) if docs else None

    @storage_call
    async def list_user_bookings(self, user_id: str) -> List[BookingWithProvider]:
        docs = await self._joined(
            self.db.bookings, {"user_id": user_id}, {"created_at": -1, "id": -1},
            "service_providers", "provider_id", "provider"
        )
        return [BookingWithProvider(**doc) for doc in docs]

    @storage_call
    async def update_booking_status(self, booking_id: int, status: str) -> Optional[Booking]:
        booking = await self.db.bookings.find_one_and_update(
            {"id": booking_id},
            {"$set": {"status": status, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER
        )
        return Booking(**from_storage(booking)) if booking else None

    @storage_call
    async def mark_booking_notified(self, booking_id: int) -> None:
        await self.db.bookings.update_one(
            {"id": booking_id},
            {"$set": {"sms_notification_sent": True, "updated_at": utc_now()}}
        )

    # Reviews

    @storage_call
    async def create_review(self, review: dict) -> Review:
        review_dict = dict(review)
        review_dict["id"] = await self._next_id("reviews")
        review_dict.setdefault("created_at", utc_now())

        try:
            await self.db.reviews.insert_one(review_dict)
        except DuplicateKeyError:
            raise ValidationFailed.for_field(
                "bookingId", "This booking has already been reviewed", summary="Invalid review data"
            )
        return Review(**from_storage(review_dict))

    @storage_call
    async def get_review_for_booking(self, booking_id: int) -> Optional[Review]:
        review = await self.db.reviews.find_one({"booking_id": booking_id})
        return Review(**from_storage(review)) if review else None

    @storage_call
    async def list_provider_reviews(self, provider_id: int) -> List[ReviewWithUser]:
        docs = await self._joined(
            self.db.reviews, {"provider_id": provider_id}, {"created_at": -1, "id": -1},
            "users", "user_id", "user"
        )
        return [ReviewWithUser(**doc) for doc in docs]

    @storage_call
    async def summarize_provider_ratings(self, provider_id: int) -> Tuple[int, int]:
        result = await self.db.reviews.aggregate([
            {"$match": {"provider_id": provider_id}},
            {"$group": {"_id": None, "total": {"$sum": "$rating"}, "count": {"$sum": 1}}}
        ]).to_list(length=1)
        if not result:
            return 0, 0
        return int(result[0]["total"]), int(result[0]["count"])

    @storage_call
    async def get_rating_version(self, provider_id: int) -> Optional[int]:
        provider = await self.db.service_providers.find_one(
            {"id": provider_id}, {"rating_version": 1}
        )
        if not provider:
            return None
        return provider.get("rating_version", 0)

    @storage_call
    async def compare_and_set_rating(self, provider_id: int, expected_version: int,
                                     rating: float, total_reviews: int) -> bool:
        # Providers created before versioning have no rating_version field; $in with None matches them
        version_filter = {"$in": [0, None]} if expected_version == 0 else expected_version
        result = await self.db.service_providers.update_one(
            {"id": provider_id, "rating_version": version_filter},
            {
                "$set": {"rating": rating, "total_reviews": total_reviews},
                "$inc": {"rating_version": 1}
            }
        )
        return result.matched_count == 1

    # Relatives

    @storage_call
    async def create_relative(self, relative: dict) -> Relative:
        relative_dict = dict(relative)
        relative_dict["id"] = await self._next_id("relatives")
        relative_dict.setdefault("created_at", utc_now())

        try:
            await self.db.relatives.insert_one(relative_dict)
        except DuplicateKeyError:
            raise ValidationFailed.for_field(
                "relativeId", "This relative is already linked", summary="Invalid relative data"
            )
        return Relative(**from_storage(relative_dict))

    @storage_call
    async def get_relative_link(self, senior_citizen_id: str, relative_id: str) -> Optional[Relative]:
        relative = await self.db.relatives.find_one({
            "senior_citizen_id": senior_citizen_id,
            "relative_id": relative_id
        })
        return Relative(**from_storage(relative)) if relative else None

    @storage_call
    async def list_relatives(self, senior_citizen_id: str) -> List[RelativeWithUser]:
        docs = await self._joined(
            self.db.relatives, {"senior_citizen_id": senior_citizen_id}, {"created_at": -1, "id": -1},
            "users", "relative_id", "relative"
        )
        return [RelativeWithUser(**doc) for doc in docs]

    # Emergency contacts

    @storage_call
    async def create_emergency_contact(self, contact: dict) -> EmergencyContact:
        contact_dict = dict(contact)
        contact_dict["id"] = await self._next_id("emergency_contacts")
        contact_dict.setdefault("created_at", utc_now())

        await self.db.emergency_contacts.insert_one(contact_dict)
        return EmergencyContact(**from_storage(contact_dict))

    @storage_call
    async def list_emergency_contacts(self, user_id: str) -> List[EmergencyContact]:
        contacts = await self.db.emergency_contacts.find({"user_id": user_id}).sort(
            [("is_primary", -1), ("created_at", -1), ("id", -1)]
        ).to_list(length=None)
        return [EmergencyContact(**from_storage(contact)) for contact in contacts]
