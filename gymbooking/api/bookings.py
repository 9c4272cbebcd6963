from datetime import datetime, timedelta
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from gymbooking.api.dependencies import get_session
from gymbooking.models.results import ServiceResult
from gymbooking.services.session import GymSession

router = APIRouter()

class CreateBookingRequest(BaseModel):
    service_id: Union[int, str]
    slot_id: Union[int, str]

@router.get("/services")
async def list_services(session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.bookings.list_services()

@router.get("/services/default")
async def default_service(session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.bookings.init_booking_system()

@router.get("/slots")
async def list_slots(
    service_id: str,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    session: GymSession = Depends(get_session),
) -> ServiceResult:
    # Default window: the next two weeks
    start = start or datetime.now(session.bookings.hours.tz)
    end = end or start + timedelta(days=14)
    return await session.bookings.list_available_slots(service_id, start, end)

@router.get("/gym-hours")
async def gym_hours(session: GymSession = Depends(get_session)):
    return {"timezone": session.bookings.hours.timezone, "hours": session.bookings.get_gym_hours()}

@router.post("/bookings")
async def create_booking(req: CreateBookingRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.bookings.create_booking(req.service_id, req.slot_id)

@router.get("/bookings")
async def list_bookings(session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.bookings.list_user_bookings()

@router.post("/bookings/{booking_id}/cancel")
async def cancel_booking(booking_id: str, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.bookings.cancel_booking(booking_id)
