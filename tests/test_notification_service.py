from decimal import Decimal
import pytest
from schemas.booking import Booking
from schemas.emergency_contact import EmergencyContact
from services.exceptions import NotFound
from services.notification_service import NotificationService
from services.notifier import LoggingNotifier, build_notifier
from tests.fakes import NOW, ScriptedNotifier


def add_contacts(repository, user_id, phones, primary=None):
    for index, phone in enumerate(phones):
        contact = EmergencyContact(
            id=100 + index, user_id=user_id, name=f"Contact {index}", phone=phone,
            relationship="daughter", is_primary=(phone == primary), created_at=NOW
        )
        repository.contacts[contact.id] = contact


@pytest.mark.asyncio
async def test_sos_counts_partial_delivery(repository, senior):
    add_contacts(repository, senior.id, ["9000000001", "9000000002", "9000000003"])
    notifier = ScriptedNotifier(failing={"9000000002"})

    result = await NotificationService(repository, notifier).broadcast_emergency_sos(senior.id)

    assert result.contacts_notified == 2
    assert result.total_contacts == 3
    assert sorted(notifier.phones()) == ["9000000001", "9000000002", "9000000003"]


@pytest.mark.asyncio
async def test_sos_survives_gateway_errors(repository, senior):
    add_contacts(repository, senior.id, ["9000000001", "9000000002", "9000000003"])
    notifier = ScriptedNotifier(raising={"9000000003"})

    result = await NotificationService(repository, notifier).broadcast_emergency_sos(senior.id)

    assert (result.contacts_notified, result.total_contacts) == (2, 3)


@pytest.mark.asyncio
async def test_sos_message_names_the_user(repository, notifier, notification_service, senior):
    add_contacts(repository, senior.id, ["9000000001", "9000000002"])

    await notification_service.broadcast_emergency_sos(senior.id)

    messages = {message for _, message in notifier.sent}
    assert len(messages) == 1
    assert "Kamla Devi" in messages.pop()


@pytest.mark.asyncio
async def test_sos_without_contacts(notification_service, notifier, senior):
    result = await notification_service.broadcast_emergency_sos(senior.id)

    assert (result.contacts_notified, result.total_contacts) == (0, 0)
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_sos_for_unknown_user(notification_service):
    with pytest.raises(NotFound):
        await notification_service.broadcast_emergency_sos("ghost")


@pytest.mark.asyncio
async def test_emergency_contacts_list_primary_first(repository, senior):
    add_contacts(repository, senior.id, ["9000000001", "9000000002", "9000000003"], primary="9000000002")

    contacts = await repository.list_emergency_contacts(senior.id)

    assert contacts[0].phone == "9000000002"


@pytest.mark.asyncio
async def test_booking_notification_reports_failure(repository, senior, provider):
    notifier = ScriptedNotifier(failing={senior.phone})
    booking = Booking(
        id=7, user_id=senior.id, provider_id=provider.id, booking_date=NOW, duration=2,
        total_amount=Decimal("400.00"), address="12 Lotus Lane, Jaipur"
    )

    delivered = await NotificationService(repository, notifier).notify_booking_created(booking)

    assert delivered is False
    assert notifier.phones() == [senior.phone, provider.phone]


@pytest.mark.asyncio
async def test_logging_notifier_always_delivers():
    assert await LoggingNotifier().send("9000000001", "hello") is True


def test_build_notifier_rejects_unknown_backend():
    assert isinstance(build_notifier("log"), LoggingNotifier)
    with pytest.raises(ValueError):
        build_notifier("carrier-pigeon")
