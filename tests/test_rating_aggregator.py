from decimal import Decimal, ROUND_HALF_UP
import asyncio
import pytest
from schemas.booking import Booking
from schemas.provider import ServiceProviderCreate
from schemas.review import ReviewCreate
from schemas.user import User
from services.exceptions import AuthorizationDenied, NotFound, RatingAggregationFailed, ValidationFailed
from services.rating_aggregator import RatingAggregator, average_rating
from tests.fakes import NOW, InMemoryRepository


def expected_average(ratings):
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def add_booking(repository, user_id, provider_id):
    booking_id = len(repository.bookings) + 500
    repository.bookings[booking_id] = Booking(
        id=booking_id, user_id=user_id, provider_id=provider_id, booking_date=NOW,
        duration=1, total_amount=Decimal("200.00"), address="12 Lotus Lane, Jaipur"
    )
    return booking_id


def plumber():
    return ServiceProviderCreate(
        name="Sharma Plumbing", service_type="plumber", phone="9876500300",
        hourly_rate=Decimal("180"), location="Jaipur"
    )


def add_reviewer(repository, index):
    user_id = f"reviewer-{index}"
    repository.users[user_id] = User(id=user_id, first_name=f"Reviewer {index}")
    return user_id


def test_average_rating_rounds_half_up():
    assert average_rating(0, 0) == 0.0
    assert average_rating(9, 2) == 4.5
    assert average_rating(17, 4) == 4.3  # 4.25
    assert average_rating(13, 3) == 4.3  # 4.333...
    assert average_rating(5, 3) == 1.7   # 1.666...


@pytest.mark.asyncio
async def test_aggregate_matches_reviews(review_service, repository, provider):
    ratings = [5, 4, 4, 3, 5]
    for index, rating in enumerate(ratings):
        user_id = add_reviewer(repository, index)
        booking_id = add_booking(repository, user_id, provider.id)
        await review_service.create_review(
            user_id, ReviewCreate(booking_id=booking_id, provider_id=provider.id, rating=rating)
        )

    stored = repository.providers[provider.id]
    assert stored.rating == expected_average(ratings)
    assert stored.total_reviews == len(ratings)


@pytest.mark.asyncio
async def test_aggregation_is_idempotent(repository, provider):
    aggregator = RatingAggregator(repository)
    for index, rating in enumerate([2, 3, 5]):
        user_id = add_reviewer(repository, index)
        await repository.create_review({
            "booking_id": add_booking(repository, user_id, provider.id),
            "provider_id": provider.id, "user_id": user_id, "rating": rating
        })

    await aggregator.on_review_created(provider.id)
    first = repository.providers[provider.id]
    await aggregator.on_review_created(provider.id)
    second = repository.providers[provider.id]

    assert (first.rating, first.total_reviews) == (second.rating, second.total_reviews) == (3.3, 3)


@pytest.mark.asyncio
async def test_concurrent_reviews_do_not_lose_updates(review_service, repository, provider):
    ratings = [1, 2, 3, 4, 5, 5, 4, 3, 2, 5]
    requests = []
    for index, rating in enumerate(ratings):
        user_id = add_reviewer(repository, index)
        booking_id = add_booking(repository, user_id, provider.id)
        requests.append(review_service.create_review(
            user_id, ReviewCreate(booking_id=booking_id, provider_id=provider.id, rating=rating)
        ))

    await asyncio.gather(*requests)

    stored = repository.providers[provider.id]
    assert stored.total_reviews == len(ratings)
    assert stored.rating == expected_average(ratings)


@pytest.mark.asyncio
async def test_stale_aggregate_is_recomputed():
    class RacingRepository(InMemoryRepository):
        """Slips in another review between the aggregate read and the write."""
        raced = False

        async def compare_and_set_rating(self, provider_id, expected_version, rating, total_reviews):
            if not self.raced:
                self.raced = True
                await self.create_review({
                    "booking_id": 999, "provider_id": provider_id, "user_id": "late", "rating": 1
                })
                self.rating_versions[provider_id] += 1
            return await super().compare_and_set_rating(provider_id, expected_version, rating, total_reviews)

    repository = RacingRepository()
    racing_provider = repository.add_provider(plumber())
    await repository.create_review({
        "booking_id": 1, "provider_id": racing_provider.id, "user_id": "early", "rating": 5
    })

    await RatingAggregator(repository).on_review_created(racing_provider.id)

    stored = repository.providers[racing_provider.id]
    assert stored.total_reviews == 2
    assert stored.rating == 3.0


@pytest.mark.asyncio
async def test_aggregator_gives_up_loudly():
    class AlwaysStale(InMemoryRepository):
        async def compare_and_set_rating(self, *args, **kwargs):
            return False

    stale = AlwaysStale()
    stale_provider = stale.add_provider(plumber())

    with pytest.raises(RatingAggregationFailed):
        await RatingAggregator(stale, max_retries=3).on_review_created(stale_provider.id)


@pytest.mark.asyncio
async def test_unknown_provider_cannot_be_aggregated(repository):
    with pytest.raises(NotFound):
        await RatingAggregator(repository).on_review_created(12345)


@pytest.mark.asyncio
async def test_review_requires_own_booking(review_service, repository, senior, relative_user, provider):
    booking_id = add_booking(repository, senior.id, provider.id)

    with pytest.raises(AuthorizationDenied):
        await review_service.create_review(
            relative_user.id, ReviewCreate(booking_id=booking_id, provider_id=provider.id, rating=4)
        )
    with pytest.raises(NotFound):
        await review_service.create_review(
            senior.id, ReviewCreate(booking_id=777, provider_id=provider.id, rating=4)
        )
    assert repository.reviews == {}


@pytest.mark.asyncio
async def test_review_provider_must_match_booking(review_service, repository, senior, provider):
    booking_id = add_booking(repository, senior.id, provider.id)

    with pytest.raises(ValidationFailed) as exc_info:
        await review_service.create_review(
            senior.id, ReviewCreate(booking_id=booking_id, provider_id=provider.id + 1, rating=4)
        )
    assert exc_info.value.errors[0]["field"] == "providerId"


@pytest.mark.asyncio
async def test_one_review_per_booking(review_service, repository, senior, provider):
    booking_id = add_booking(repository, senior.id, provider.id)
    review = ReviewCreate(booking_id=booking_id, provider_id=provider.id, rating=5)

    await review_service.create_review(senior.id, review)
    with pytest.raises(ValidationFailed):
        await review_service.create_review(senior.id, review)

    assert repository.providers[provider.id].total_reviews == 1


@pytest.mark.asyncio
async def test_provider_reviews_are_newest_first(review_service, repository, senior, provider):
    first = await review_service.create_review(
        senior.id, ReviewCreate(booking_id=add_booking(repository, senior.id, provider.id),
                                provider_id=provider.id, rating=3)
    )
    second = await review_service.create_review(
        senior.id, ReviewCreate(booking_id=add_booking(repository, senior.id, provider.id),
                                provider_id=provider.id, rating=5, comment="Very caring")
    )

    reviews = await review_service.list_provider_reviews(provider.id)

    assert [r.id for r in reviews] == [second.id, first.id]
    assert reviews[0].user.id == senior.id


@pytest.mark.asyncio
async def test_racing_reviews_for_one_booking(review_service, repository, senior, provider):
    booking_id = add_booking(repository, senior.id, provider.id)
    review = ReviewCreate(booking_id=booking_id, provider_id=provider.id, rating=5)

    results = await asyncio.gather(
        review_service.create_review(senior.id, review),
        review_service.create_review(senior.id, review),
        return_exceptions=True
    )

    assert sum(1 for r in results if isinstance(r, ValidationFailed)) == 1
    assert len(repository.reviews) == 1
    assert repository.providers[provider.id].total_reviews == 1
