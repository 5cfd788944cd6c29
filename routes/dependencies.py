from datetime import datetime
from typing import Callable
from fastapi import Depends, HTTPException, Request
from config import settings
from config.database import Database, get_db
from crud.mongo_repository import MongoRepository
from crud.repository import Repository
from schemas.base import utc_now
from services.booking_service import BookingService
from services.delegation_authorizer import DelegationAuthorizer
from services.notification_service import NotificationService
from services.notifier import Notifier
from services.provider_service import ProviderService
from services.rating_aggregator import RatingAggregator
from services.relative_service import RelativeService
from services.review_service import ReviewService


async def get_repository(db: Database = Depends(get_db)) -> Repository:
    return MongoRepository(db)


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_current_user_id(request: Request) -> str:
    """Caller identity as resolved by the upstream identity provider."""
    user_id = request.headers.get(settings.IDENTITY_HEADER)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def get_notification_service(repository: Repository = Depends(get_repository),
                             notifier: Notifier = Depends(get_notifier)) -> NotificationService:
    return NotificationService(repository, notifier)


def get_booking_service(repository: Repository = Depends(get_repository),
                        notifications: NotificationService = Depends(get_notification_service),
                        clock: Callable[[], datetime] = Depends(get_clock)) -> BookingService:
    return BookingService(repository, DelegationAuthorizer(repository), notifications, clock=clock)


def get_review_service(repository: Repository = Depends(get_repository)) -> ReviewService:
    return ReviewService(repository, RatingAggregator(repository))


def get_relative_service(repository: Repository = Depends(get_repository)) -> RelativeService:
    return RelativeService(repository)


def get_provider_service(repository: Repository = Depends(get_repository)) -> ProviderService:
    return ProviderService(repository)
