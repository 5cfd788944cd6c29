from decimal import Decimal
import pytest
from schemas.user import User
from schemas.provider import ServiceProviderCreate
from services.booking_service import BookingService
from services.delegation_authorizer import DelegationAuthorizer
from services.notification_service import NotificationService
from services.rating_aggregator import RatingAggregator
from services.relative_service import RelativeService
from services.review_service import ReviewService
from tests.fakes import NOW, InMemoryRepository, ScriptedNotifier


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def notifier():
    return ScriptedNotifier()


@pytest.fixture
def senior(repository):
    repository.users["senior-1"] = User(
        id="senior-1", first_name="Kamla", last_name="Devi", phone="9876500001",
        address="12 Lotus Lane, Jaipur", user_type="senior_citizen"
    )
    return repository.users["senior-1"]


@pytest.fixture
def relative_user(repository):
    repository.users["relative-1"] = User(
        id="relative-1", first_name="Ravi", last_name="Sharma", phone="9876500002",
        user_type="relative"
    )
    return repository.users["relative-1"]


@pytest.fixture
def provider(repository):
    return repository.add_provider(ServiceProviderCreate(
        name="Anita Nurse Care",
        service_type="nurse",
        phone="9876500100",
        hourly_rate=Decimal("200"),
        location="Jaipur",
        available_from=8,
        available_to=20
    ))


@pytest.fixture
def notification_service(repository, notifier):
    return NotificationService(repository, notifier)


@pytest.fixture
def booking_service(repository, notification_service):
    return BookingService(
        repository,
        DelegationAuthorizer(repository),
        notification_service,
        clock=lambda: NOW,
        notification_timeout=0.5
    )


@pytest.fixture
def review_service(repository):
    return ReviewService(repository, RatingAggregator(repository, max_retries=20))


@pytest.fixture
def relative_service(repository):
    return RelativeService(repository)
