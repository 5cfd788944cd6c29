from typing import List
import logging
from crud.repository import Repository
from schemas.review import Review, ReviewCreate, ReviewWithUser
from services.exceptions import AuthorizationDenied, NotFound, ValidationFailed
from services.rating_aggregator import RatingAggregator

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, repository: Repository, aggregator: RatingAggregator):
        self.repository = repository
        self.aggregator = aggregator

    async def create_review(self, user_id: str, review: ReviewCreate) -> Review:
        """Store a review for one of the caller's bookings and refresh the provider's rating."""
        booking = await self.repository.get_booking(review.booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != user_id:
            raise AuthorizationDenied("You can only review your own bookings")
        if booking.provider_id != review.provider_id:
            raise ValidationFailed.for_field(
                "providerId", "Provider does not match the booking", summary="Invalid review data"
            )
        if await self.repository.get_review_for_booking(review.booking_id):
            raise ValidationFailed.for_field(
                "bookingId", "This booking has already been reviewed", summary="Invalid review data"
            )

        created = await self.repository.create_review({
            **review.model_dump(),
            "user_id": user_id,
        })
        logger.info(f"Review {created.id} added for provider {created.provider_id}")

        try:
            await self.aggregator.on_review_created(created.provider_id)
        except Exception as e:
            logger.error(
                f"Rating aggregation failed after review {created.id} for provider {created.provider_id}: {str(e)}",
                exc_info=True
            )
            raise

        return created

    async def list_provider_reviews(self, provider_id: int) -> List[ReviewWithUser]:
        return await self.repository.list_provider_reviews(provider_id)
