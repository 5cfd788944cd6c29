from typing import List
import asyncio
import logging
from crud.repository import Repository
from schemas.booking import Booking
from schemas.emergency_contact import SOSResult
from services.exceptions import NotFound, NotificationFailed
from services.notifier import Notifier

logger = logging.getLogger(__name__)


class NotificationService:
    """Fans booking confirmations and emergency alerts out to the notifier."""

    def __init__(self, repository: Repository, notifier: Notifier):
        self.repository = repository
        self.notifier = notifier

    async def _send(self, phone: str, message: str) -> None:
        try:
            delivered = await self.notifier.send(phone, message)
        except Exception as e:
            raise NotificationFailed(f"Notification to {phone} raised: {str(e)}") from e
        if not delivered:
            raise NotificationFailed(f"Notification to {phone} was not delivered")

    async def _deliver(self, phone: str, message: str) -> bool:
        try:
            await self._send(phone, message)
        except NotificationFailed as e:
            logger.warning(str(e), exc_info=e.__cause__ is not None)
            return False
        return True

    async def notify_booking_created(self, booking: Booking) -> bool:
        """Tell the requester and the provider about a new booking.

        Numbers that are missing are skipped. Returns True only if every
        message that was attempted went through.
        """
        deliveries: List[bool] = []

        user = await self.repository.get_user(booking.user_id)
        if user and user.phone:
            deliveries.append(await self._deliver(
                user.phone,
                f"Your booking is confirmed. Booking ID: {booking.id}. Thank you - Aashray"
            ))

        provider = await self.repository.get_service_provider(booking.provider_id)
        if provider and provider.phone:
            deliveries.append(await self._deliver(
                provider.phone,
                f"You have a new booking. Booking ID: {booking.id}. Please be ready."
            ))

        return all(deliveries)

    async def broadcast_emergency_sos(self, user_id: str) -> SOSResult:
        user = await self.repository.get_user(user_id)
        if not user:
            raise NotFound("User not found")

        contacts = await self.repository.list_emergency_contacts(user_id)
        message = (
            f"EMERGENCY! {user.display_name} needs help immediately. "
            f"Please contact them right away. - Aashray"
        )

        results = await asyncio.gather(
            *(self._deliver(contact.phone, message) for contact in contacts)
        )
        notified = sum(1 for delivered in results if delivered)

        if notified < len(contacts):
            logger.warning(f"SOS for user {user_id} reached {notified}/{len(contacts)} contacts")
        else:
            logger.info(f"SOS for user {user_id} reached all {len(contacts)} contacts")

        return SOSResult(contacts_notified=notified, total_contacts=len(contacts))
