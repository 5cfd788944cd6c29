from fastapi import APIRouter, Depends
from typing import List
from schemas.booking import BookingCreate, BookingStatusUpdate, BookingWithProvider
from services.booking_service import BookingService
from routes.dependencies import get_booking_service, get_current_user_id

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"]
)


@router.post("/", response_model=BookingWithProvider)
async def create_booking(
    booking: BookingCreate,
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    return await booking_service.create_booking(user_id, booking)


@router.get("/", response_model=List[BookingWithProvider])
async def get_user_bookings(
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    return await booking_service.list_user_bookings(user_id)


@router.get("/{booking_id}", response_model=BookingWithProvider)
async def get_booking(
    booking_id: int,
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    return await booking_service.get_booking(user_id, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingWithProvider)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service)
):
    return await booking_service.update_booking_status(user_id, booking_id, update.status)
