from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Mapping, Union
import asyncio
import logging
from pydantic import ValidationError
from config import settings
from crud.repository import Repository
from schemas.base import as_utc, utc_now
from schemas.booking import Booking, BookingCreate, BookingWithProvider, TERMINAL_STATUSES
from schemas.provider import ServiceProvider
from services.delegation_authorizer import DelegationAuthorizer
from services.exceptions import (
    AdmissionFailed, AuthorizationDenied, NotFound, ProviderNotFound,
    RepositoryError, ValidationFailed
)
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def compute_total_amount(hourly_rate: Decimal, duration: int) -> Decimal:
    return (Decimal(hourly_rate) * duration).quantize(CENTS, rounding=ROUND_HALF_UP)


def validation_errors_from_pydantic(error: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic error into one ``{field, message}`` entry per violation."""
    errors = []
    for item in error.errors():
        loc = [str(part) for part in item.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(loc) or "request",
            "message": item.get("msg", "Invalid value")
        })
    return errors


class BookingService:
    """Admits new bookings: validates, authorizes delegation, prices, persists, notifies."""

    def __init__(self, repository: Repository,
                 authorizer: DelegationAuthorizer,
                 notifications: NotificationService,
                 clock: Callable[[], datetime] = utc_now,
                 notification_timeout: float = settings.NOTIFICATION_TIMEOUT_SECONDS):
        self.repository = repository
        self.authorizer = authorizer
        self.notifications = notifications
        self.clock = clock
        self.notification_timeout = notification_timeout

    def _parse_request(self, request: Union[BookingCreate, Mapping[str, Any]]) -> BookingCreate:
        if isinstance(request, BookingCreate):
            return request
        try:
            return BookingCreate.model_validate(request)
        except ValidationError as e:
            raise ValidationFailed("Invalid booking data", errors=validation_errors_from_pydantic(e))

    def _check_request(self, request: BookingCreate) -> BookingCreate:
        errors = []

        if as_utc(request.booking_date) < self.clock():
            errors.append({"field": "bookingDate", "message": "Booking date must not be in the past"})

        if request.booked_by_relative and not request.relative_id:
            errors.append({"field": "relativeId", "message": "relativeId is required when bookedByRelative is true"})

        if errors:
            raise ValidationFailed("Invalid booking data", errors=errors)

        if not request.booked_by_relative and request.relative_id:
            logger.debug("Ignoring relativeId on a booking not made by a relative")
            request = request.model_copy(update={"relative_id": None})

        return request

    async def _load_provider(self, provider_id: int) -> ServiceProvider:
        provider = await self.repository.get_service_provider(provider_id)
        if provider is None:
            raise ProviderNotFound()
        if not provider.is_active:
            raise ValidationFailed.for_field(
                "providerId", "Service provider is not accepting bookings", summary="Invalid booking data"
            )
        return provider

    async def create_booking(self, requester_id: str,
                             request: Union[BookingCreate, Mapping[str, Any]]) -> BookingWithProvider:
        booking_request = self._check_request(self._parse_request(request))

        try:
            provider = await self._load_provider(booking_request.provider_id)

            if booking_request.booked_by_relative:
                allowed = await self.authorizer.authorize(requester_id, booking_request.relative_id)
                if not allowed:
                    logger.warning(
                        f"Relative {booking_request.relative_id} may not book for {requester_id}"
                    )
                    raise AuthorizationDenied("Relative does not have booking access")

            booking = await self.repository.create_booking({
                "user_id": requester_id,
                "provider_id": provider.id,
                "booking_date": as_utc(booking_request.booking_date),
                "duration": booking_request.duration,
                "total_amount": compute_total_amount(provider.hourly_rate, booking_request.duration),
                "address": booking_request.address,
                "special_instructions": booking_request.special_instructions,
                "status": "pending",
                "booked_by_relative": booking_request.booked_by_relative,
                "relative_id": booking_request.relative_id,
                "sms_notification_sent": False,
            })
        except RepositoryError as e:
            logger.error(f"Error creating booking for user {requester_id}: {str(e)}", exc_info=True)
            raise AdmissionFailed() from e

        logger.info(f"Created booking {booking.id} for user {requester_id} with provider {provider.id}")

        booking = await self._notify(booking)
        return BookingWithProvider(**booking.model_dump(), provider=provider)

    async def _notify(self, booking: Booking) -> Booking:
        """Send booking notifications; failures leave the booking untouched and unflagged."""
        try:
            notified = await asyncio.wait_for(
                self.notifications.notify_booking_created(booking),
                timeout=self.notification_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Notifications for booking {booking.id} timed out after {self.notification_timeout}s")
            return booking
        except Exception as e:
            logger.error(f"Error sending notifications for booking {booking.id}: {str(e)}", exc_info=True)
            return booking

        if not notified:
            return booking

        try:
            await self.repository.mark_booking_notified(booking.id)
        except RepositoryError as e:
            logger.error(f"Could not flag booking {booking.id} as notified: {str(e)}")
            return booking
        return booking.model_copy(update={"sms_notification_sent": True})

    async def get_booking(self, requester_id: str, booking_id: int) -> BookingWithProvider:
        booking = await self.repository.get_booking_with_provider(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != requester_id:
            raise AuthorizationDenied()
        return booking

    async def list_user_bookings(self, user_id: str) -> List[BookingWithProvider]:
        return await self.repository.list_user_bookings(user_id)

    async def update_booking_status(self, requester_id: str, booking_id: int, status: str) -> BookingWithProvider:
        booking = await self.get_booking(requester_id, booking_id)
        if booking.status == status:
            return booking
        if booking.status in TERMINAL_STATUSES:
            raise ValidationFailed.for_field(
                "status", f"A {booking.status} booking cannot be changed", summary="Invalid status change"
            )

        await self.repository.update_booking_status(booking_id, status)
        logger.info(f"Booking {booking_id} moved from {booking.status} to {status}")
        return await self.get_booking(requester_id, booking_id)
