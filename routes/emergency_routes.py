from fastapi import APIRouter, Depends
from typing import List
from crud.repository import Repository
from schemas.emergency_contact import EmergencyContact, EmergencyContactCreate, SOSResult
from services.notification_service import NotificationService
from routes.dependencies import get_current_user_id, get_notification_service, get_repository

router = APIRouter(tags=["emergency"])


@router.post("/emergency-contacts", response_model=EmergencyContact)
async def create_emergency_contact(
    contact: EmergencyContactCreate,
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository)
):
    return await repository.create_emergency_contact({**contact.model_dump(), "user_id": user_id})


@router.get("/emergency-contacts", response_model=List[EmergencyContact])
async def get_emergency_contacts(
    user_id: str = Depends(get_current_user_id),
    repository: Repository = Depends(get_repository)
):
    return await repository.list_emergency_contacts(user_id)


@router.post("/emergency/sos", response_model=SOSResult)
async def send_sos(
    user_id: str = Depends(get_current_user_id),
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Alert every emergency contact of the caller."""
    return await notification_service.broadcast_emergency_sos(user_id)
