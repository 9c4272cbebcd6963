from datetime import date, datetime
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from gymbooking.api.dependencies import get_session
from gymbooking.core.errors import BookingError, ErrorKind
from gymbooking.models.db_models import BookingStatus
from gymbooking.models.results import BookingFilters, ServiceResult
from gymbooking.services.session import GymSession

router = APIRouter(prefix="/admin")

class UpdateStatusRequest(BaseModel):
    status: str

class GenerateSlotsRequest(BaseModel):
    service_id: Union[int, str]
    start_date: date
    end_date: date
    duration_minutes: int = 60

@router.get("/is-admin")
async def is_admin(session: GymSession = Depends(get_session)):
    return {"is_admin": await session.admin.is_admin()}

@router.get("/bookings")
async def list_all_bookings(
    status: Optional[BookingStatus] = Query(None),
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    session: GymSession = Depends(get_session),
) -> ServiceResult:
    filters = BookingFilters(status=status, from_date=from_date, to_date=to_date)
    return await session.admin.list_all_bookings(filters)

@router.get("/stats")
async def booking_stats(session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.admin.booking_stats()

@router.patch("/bookings/{booking_id}")
async def update_booking_status(booking_id: str, req: UpdateStatusRequest,
                                session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.admin.update_booking_status(booking_id, req.status)

@router.post("/slots/generate")
async def generate_slots(req: GenerateSlotsRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    if not await session.admin.is_admin():
        return ServiceResult.fail(BookingError(ErrorKind.NOT_AUTHORIZED))
    return await session.bookings.generate_slots(req.service_id, req.start_date, req.end_date, req.duration_minutes)
