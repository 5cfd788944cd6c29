from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from crud.repository import Repository
from schemas.provider import ServiceProvider, ServiceProviderCreate, ServiceProviderUpdate, ServiceType
from schemas.review import ReviewWithUser
from services.provider_service import ProviderService
from services.review_service import ReviewService
from routes.dependencies import get_current_user_id, get_provider_service, get_repository, get_review_service

router = APIRouter(
    prefix="/service-providers",
    tags=["service-providers"]
)


@router.get("/", response_model=List[ServiceProvider])
async def get_service_providers(
    service_type: Optional[ServiceType] = Query(None, alias="serviceType"),
    location: Optional[str] = None,
    repository: Repository = Depends(get_repository)
):
    return await repository.list_service_providers(service_type, location)


@router.post("/", response_model=ServiceProvider, dependencies=[Depends(get_current_user_id)])
async def create_service_provider(
    provider: ServiceProviderCreate,
    repository: Repository = Depends(get_repository)
):
    return await repository.create_service_provider(provider)


@router.get("/{provider_id}", response_model=ServiceProvider)
async def get_service_provider(provider_id: int, repository: Repository = Depends(get_repository)):
    provider = await repository.get_service_provider(provider_id)
    if not provider:
        raise HTTPException(status_code=404, detail="Service provider not found")
    return provider


@router.put("/{provider_id}", response_model=ServiceProvider, dependencies=[Depends(get_current_user_id)])
async def update_service_provider(
    provider_id: int,
    update: ServiceProviderUpdate,
    provider_service: ProviderService = Depends(get_provider_service)
):
    return await provider_service.update_service_provider(provider_id, update)


@router.get("/{provider_id}/reviews", response_model=List[ReviewWithUser])
async def get_provider_reviews(
    provider_id: int,
    review_service: ReviewService = Depends(get_review_service)
):
    return await review_service.list_provider_reviews(provider_id)
