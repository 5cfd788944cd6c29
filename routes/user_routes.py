from fastapi import APIRouter, Depends, HTTPException
from crud.repository import Repository
from schemas.user import User, UserUpdate
from routes.dependencies import get_current_user_id, get_repository

router = APIRouter(
    prefix="/auth",
    tags=["users"]
)


@router.get("/user", response_model=User)
async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository)
):
    user = await repository.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/user", response_model=User)
async def update_current_user(
    user_data: UserUpdate,
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository)
):
    return await repository.upsert_user(user_id, user_data)
