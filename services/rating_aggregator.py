from decimal import Decimal, ROUND_HALF_UP
import logging
from config import settings
from crud.repository import Repository
from services.exceptions import NotFound, RatingAggregationFailed

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


def average_rating(total: int, count: int) -> float:
    """Mean rating rounded half-up to one decimal; 0.0 when there are no reviews."""
    if count == 0:
        return 0.0
    return float((Decimal(total) / Decimal(count)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


class RatingAggregator:
    """Keeps a provider's rating and review count in step with its reviews.

    The aggregate is always recomputed from the full review set, so running it
    twice over the same reviews writes the same values. Concurrent runs for one
    provider are serialized with a compare-and-set on the provider's rating
    version: a writer that lost the race recomputes against the newer state.
    """

    def __init__(self, repository: Repository, max_retries: int = settings.RATING_CAS_MAX_RETRIES):
        self.repository = repository
        self.max_retries = max_retries

    async def on_review_created(self, provider_id: int) -> None:
        for attempt in range(1, self.max_retries + 1):
            version = await self.repository.get_rating_version(provider_id)
            if version is None:
                raise NotFound("Service provider not found")

            total, count = await self.repository.summarize_provider_ratings(provider_id)
            rating = average_rating(total, count)

            if await self.repository.compare_and_set_rating(provider_id, version, rating, count):
                logger.info(f"Provider {provider_id} rating set to {rating} over {count} reviews")
                return

            logger.debug(f"Rating update for provider {provider_id} lost a race (attempt {attempt}/{self.max_retries})")

        raise RatingAggregationFailed(
            f"Could not update rating for provider {provider_id} after {self.max_retries} attempts"
        )
