import logging
from crud.repository import Repository

logger = logging.getLogger(__name__)


class DelegationAuthorizer:
    def __init__(self, repository: Repository):
        self.repository = repository

    async def authorize(self, senior_citizen_id: str, relative_id: str) -> bool:
        """Whether ``relative_id`` may book services on behalf of ``senior_citizen_id``.

        A missing link or a link without booking rights is a plain ``False``.
        """
        link = await self.repository.get_relative_link(senior_citizen_id, relative_id)
        if link is None:
            logger.info(f"No relative link from {senior_citizen_id} to {relative_id}")
            return False
        return bool(link.can_book_services)
