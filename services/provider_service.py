import logging
from pydantic import ValidationError
from crud.repository import Repository
from schemas.provider import ServiceProvider, ServiceProviderUpdate
from services.booking_service import validation_errors_from_pydantic
from services.exceptions import ProviderNotFound, ValidationFailed

logger = logging.getLogger(__name__)


class ProviderService:
    def __init__(self, repository: Repository):
        self.repository = repository

    async def update_service_provider(self, provider_id: int, update: ServiceProviderUpdate) -> ServiceProvider:
        """Apply a partial update after checking the merged provider is still valid."""
        current = await self.repository.get_service_provider(provider_id)
        if not current:
            raise ProviderNotFound()

        changes = {k: v for k, v in update.model_dump().items() if v is not None}
        try:
            ServiceProvider.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            logger.info(f"Rejected update for provider {provider_id}: {str(e)}")
            raise ValidationFailed("Invalid service provider data", errors=validation_errors_from_pydantic(e))

        provider = await self.repository.update_service_provider(provider_id, update)
        if not provider:
            raise ProviderNotFound()
        logger.info(f"Updated provider {provider_id}: {sorted(changes)}")
        return provider
