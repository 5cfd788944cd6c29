from fastapi import APIRouter, Depends
from typing import List
from schemas.relative import Relative, RelativeCreate, RelativeWithUser
from services.relative_service import RelativeService
from routes.dependencies import get_current_user_id, get_relative_service

router = APIRouter(
    prefix="/relatives",
    tags=["relatives"]
)


@router.post("/", response_model=Relative)
async def link_relative(
    relative: RelativeCreate,
    user_id: str = Depends(get_current_user_id),
    relative_service: RelativeService = Depends(get_relative_service)
):
    return await relative_service.link_relative(user_id, relative)


@router.get("/", response_model=List[RelativeWithUser])
async def get_relatives(
    user_id: str = Depends(get_current_user_id),
    relative_service: RelativeService = Depends(get_relative_service)
):
    return await relative_service.list_relatives(user_id)
