from fastapi import APIRouter, Depends
from schemas.review import Review, ReviewCreate
from services.review_service import ReviewService
from routes.dependencies import get_current_user_id, get_review_service

router = APIRouter(
    prefix="/reviews",
    tags=["reviews"]
)


@router.post("/", response_model=Review)
async def create_review(
    review: ReviewCreate,
    user_id: str = Depends(get_current_user_id),
    review_service: ReviewService = Depends(get_review_service)
):
    return await review_service.create_review(user_id, review)
