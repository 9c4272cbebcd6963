import asyncio
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from gymbooking.core.config import settings
from gymbooking.core.config_loader import get_trial_keywords
from gymbooking.core.errors import BookingError, ErrorKind, recovered
from gymbooking.core.logger import logger
from gymbooking.models.db_models import BookingStatus, RowId
from gymbooking.models.results import DefaultService, ServiceResult
from gymbooking.models.schedule import WeeklyHours
from gymbooking.services.auth_service import AuthService
from gymbooking.services.db_service import DBService

class BookingService:
    def __init__(self, db: DBService, auth: AuthService, config: Dict[str, Any],
                 query_timeout: Optional[float] = None):
        self.db = db
        self.auth = auth
        self.config = config
        self.hours = WeeklyHours.from_config(config)
        self.trial_keywords = get_trial_keywords(config)
        self.query_timeout = query_timeout if query_timeout is not None else settings.QUERY_TIMEOUT_SECONDS

    async def _require_user(self, message: str = None):
        user = await self.auth.current_user()
        if not user:
            raise BookingError(ErrorKind.UNAUTHENTICATED, message)
        return user

    @recovered("list_services")
    async def list_services(self) -> ServiceResult:
        services = await self.db.fetch_services()
        logger.info(f"📋 {len(services)} services loaded")
        return ServiceResult.ok(services)

    @recovered("init_booking_system")
    async def init_booking_system(self) -> ServiceResult:
        """
        Picks the service the widget books by default: the trial/gift class if
        there is one, otherwise the first service. Gives up after the query timeout.
        """
        try:
            services = await asyncio.wait_for(self.db.fetch_services(limit=5), timeout=self.query_timeout)
        except asyncio.TimeoutError:
            raise BookingError(ErrorKind.TIMEOUT)

        if not services:
            logger.warning("⚠️ No services configured")
            raise BookingError(ErrorKind.CONFIGURATION_MISSING, "No hay servicios configurados. Contacta al administrador.")

        service = next((s for s in services if s.is_trial(self.trial_keywords)), services[0])
        logger.info(f"🏋️ Default service: {service.name} ({service.id})")
        return ServiceResult.ok(DefaultService(service_id=service.id, service_name=service.name))

    @recovered("list_available_slots")
    async def list_available_slots(self, service_id: RowId, start: datetime, end: datetime) -> ServiceResult:
        """
        Slots that are flagged available, have no confirmed booking and fall
        inside the current opening hours. The stored flag alone is not trusted.
        """
        start = self.hours.localize(start)
        end = self.hours.localize(end)
        slots = await self.db.fetch_open_slots(service_id, start, end)
        if not slots:
            logger.info(f"🗓️ No slots stored for service {service_id}")
            return ServiceResult.ok([])

        booked = await self.db.fetch_confirmed_slot_ids(slot.id for slot in slots)
        free = [slot for slot in slots if slot.id not in booked]
        within_hours = [slot for slot in free if self.hours.is_open(slot.date_time)]

        logger.info(
            f"🗓️ Service {service_id}: {len(slots)} stored, {len(booked)} booked, "
            f"{len(within_hours)} available within opening hours"
        )
        return ServiceResult.ok(within_hours)

    @recovered("create_booking")
    async def create_booking(self, service_id: RowId, slot_id: RowId) -> ServiceResult:
        user = await self._require_user("Debes iniciar sesión para realizar una reserva")
        logger.info(f"📥 Booking Request - user: {user.email}, service: {service_id}, slot: {slot_id}")

        service = await self.db.fetch_service(service_id)
        if not service:
            raise BookingError(ErrorKind.NOT_FOUND_OR_FORBIDDEN, "Servicio no encontrado")

        # One trial/gift class per user, ever
        if service.is_trial(self.trial_keywords):
            history = await self.db.fetch_user_bookings(
                user.id, [BookingStatus.CONFIRMED, BookingStatus.COMPLETED]
            )
            used = any(
                b.service and b.service.name and
                any(k in b.service.name.lower() for k in self.trial_keywords)
                for b in history
            )
            if used:
                raise BookingError(ErrorKind.TRIAL_ALREADY_USED)

        slot = await self.db.fetch_slot(slot_id)
        if not slot or not slot.available or str(slot.service_id) != str(service.id):
            raise BookingError(ErrorKind.SLOT_UNAVAILABLE)

        if await self.db.fetch_confirmed_slot_ids([slot_id]):
            raise BookingError(ErrorKind.SLOT_ALREADY_BOOKED)

        # A concurrent winner is caught by the unique index on confirmed bookings
        booking = await self.db.insert_booking(user.id, slot_id, service.id)
        return ServiceResult.ok(booking, "Reserva confirmada exitosamente")

    @recovered("list_user_bookings")
    async def list_user_bookings(self) -> ServiceResult:
        user = await self._require_user()
        bookings = await self.db.fetch_user_bookings(user.id, [BookingStatus.CONFIRMED])
        return ServiceResult.ok(bookings)

    @recovered("cancel_booking")
    async def cancel_booking(self, booking_id: RowId) -> ServiceResult:
        user = await self._require_user()

        booking = await self.db.fetch_booking_for_user(booking_id, user.id)
        if not booking:
            raise BookingError(ErrorKind.NOT_FOUND_OR_FORBIDDEN)
        if booking.status != BookingStatus.CONFIRMED:
            raise BookingError(ErrorKind.NOT_FOUND_OR_FORBIDDEN, "Solo se pueden cancelar reservas confirmadas")

        updated = await self.db.set_booking_status(booking_id, BookingStatus.CANCELLED, user_id=user.id)
        if not updated:
            raise BookingError(ErrorKind.NOT_FOUND_OR_FORBIDDEN)

        logger.info(f"🗑️ Booking {booking_id} cancelled by {user.email}")
        return ServiceResult.ok(updated, "Reserva cancelada exitosamente")

    @recovered("generate_slots")
    async def generate_slots(self, service_id: RowId, start_date: date, end_date: date,
                             duration_minutes: int = 60) -> ServiceResult:
        if duration_minutes <= 0:
            raise BookingError(ErrorKind.INVALID_INPUT, "La duración debe ser mayor que cero")
        if end_date < start_date:
            raise BookingError(ErrorKind.INVALID_INPUT, "La fecha final es anterior a la inicial")

        created_at = datetime.now(timezone.utc).isoformat()
        rows = [
            {
                'service_id': service_id,
                'date_time': start.astimezone(timezone.utc).isoformat(),
                'available': True,
                'created_at': created_at,
            }
            for start in self.hours.slot_starts(start_date, end_date, duration_minutes)
        ]

        if not rows:
            return ServiceResult.ok([], "No hay slots para generar en el rango especificado")

        inserted = await self.db.upsert_slots(rows)
        logger.info(f"🧱 Generated {len(rows)} slots for service {service_id}, {len(inserted)} new")
        return ServiceResult.ok(inserted, f"{len(rows)} slots generados exitosamente ({len(inserted)} nuevos)")

    def get_gym_hours(self) -> Dict[str, Any]:
        return self.hours.as_config()
