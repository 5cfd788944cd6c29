from typing import List
import logging
from crud.repository import Repository
from schemas.relative import Relative, RelativeCreate, RelativeWithUser
from services.exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)


class RelativeService:
    def __init__(self, repository: Repository):
        self.repository = repository

    async def link_relative(self, senior_citizen_id: str, relative: RelativeCreate) -> Relative:
        if relative.relative_id == senior_citizen_id:
            raise ValidationFailed.for_field(
                "relativeId", "You cannot link yourself as a relative", summary="Invalid relative data"
            )
        if not await self.repository.get_user(relative.relative_id):
            raise NotFound("Relative user not found")
        if await self.repository.get_relative_link(senior_citizen_id, relative.relative_id):
            raise ValidationFailed.for_field(
                "relativeId", "This relative is already linked", summary="Invalid relative data"
            )

        created = await self.repository.create_relative({
            **relative.model_dump(),
            "senior_citizen_id": senior_citizen_id,
        })
        logger.info(
            f"Linked relative {created.relative_id} to {senior_citizen_id} "
            f"(can_book_services={created.can_book_services})"
        )
        return created

    async def list_relatives(self, senior_citizen_id: str) -> List[RelativeWithUser]:
        return await self.repository.list_relatives(senior_citizen_id)
