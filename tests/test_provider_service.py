from decimal import Decimal
import pytest
from schemas.provider import ServiceProviderUpdate
from services.exceptions import ProviderNotFound, ValidationFailed
from services.provider_service import ProviderService


@pytest.mark.asyncio
async def test_partial_update_is_checked_against_stored_provider(repository, provider):
    with pytest.raises(ValidationFailed):
        await ProviderService(repository).update_service_provider(provider.id, ServiceProviderUpdate(available_from=22))

    stored = await repository.get_service_provider(provider.id)
    assert (stored.available_from, stored.available_to) == (8, 20)


@pytest.mark.asyncio
async def test_valid_partial_update_is_applied(repository, provider):
    updated = await ProviderService(repository).update_service_provider(
        provider.id, ServiceProviderUpdate(available_from=10, hourly_rate=Decimal("220"))
    )

    assert updated.available_from == 10
    assert updated.hourly_rate == Decimal("220")
    assert updated.available_to == 20


@pytest.mark.asyncio
async def test_update_unknown_provider(repository):
    with pytest.raises(ProviderNotFound):
        await ProviderService(repository).update_service_provider(404, ServiceProviderUpdate(location="Ajmer"))
