from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Union

from gymbooking.core.config_loader import get_admin_emails
from gymbooking.core.errors import BookingError, ErrorKind, recovered
from gymbooking.core.logger import logger
from gymbooking.models.db_models import BookingStatus, RowId
from gymbooking.models.results import BookingFilters, BookingStats, ServiceResult
from gymbooking.models.schedule import WeeklyHours
from gymbooking.services.auth_service import AuthService
from gymbooking.services.db_service import DBService

class AdminService:
    """
    Booking administration for the gym staff.

    The e-mail allow-list only decides what the UI offers; the real access
    control for these reads/writes is the row-level security in
    supabase/schema.sql, evaluated with the caller's own token.
    """

    def __init__(self, db: DBService, auth: AuthService, config: Dict[str, Any],
                 admin_emails: Optional[Iterable[str]] = None):
        self.db = db
        self.auth = auth
        self.hours = WeeklyHours.from_config(config)
        if admin_emails is None:
            self.admin_emails = get_admin_emails(config)
        else:
            self.admin_emails = frozenset(e.lower() for e in admin_emails)

    async def is_admin(self) -> bool:
        user = await self.auth.current_user()
        if not user or not user.email:
            return False
        result = user.email.lower() in self.admin_emails
        logger.debug(f"🛡️ is_admin({user.email}) -> {result}")
        return result

    async def require_admin(self):
        if not await self.is_admin():
            raise BookingError(ErrorKind.NOT_AUTHORIZED)

    @recovered("list_all_bookings")
    async def list_all_bookings(self, filters: Optional[BookingFilters] = None) -> ServiceResult:
        await self.require_admin()
        filters = filters or BookingFilters()

        bookings = await self.db.fetch_all_bookings(status=filters.status)

        if filters.from_date or filters.to_date:
            from_date = self.hours.localize(filters.from_date) if filters.from_date else None
            to_date = self.hours.localize(filters.to_date) if filters.to_date else None

            def in_range(booking) -> bool:
                slot_time = booking.slot.date_time if booking.slot else None
                if slot_time is None:
                    return False
                slot_time = self.hours.localize(slot_time)
                if from_date and slot_time < from_date:
                    return False
                if to_date and slot_time > to_date:
                    return False
                return True

            bookings = [b for b in bookings if in_range(b)]

        # auth.users is not readable with the anon key; the page fills e-mails in if it can
        for booking in bookings:
            booking.user_email = None

        logger.info(f"📊 Admin listed {len(bookings)} bookings")
        return ServiceResult.ok(bookings)

    @recovered("booking_stats")
    async def booking_stats(self, now: Optional[datetime] = None) -> ServiceResult:
        await self.require_admin()
        bookings = await self.db.fetch_all_bookings()

        now = self.hours.localize(now) if now else datetime.now(self.hours.tz)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_ago = today - timedelta(days=7)

        stats = BookingStats(total=len(bookings))
        for booking in bookings:
            if booking.status == BookingStatus.CONFIRMED:
                stats.confirmed += 1
            elif booking.status == BookingStatus.CANCELLED:
                stats.cancelled += 1
            elif booking.status == BookingStatus.COMPLETED:
                stats.completed += 1

            if booking.created_at and self.hours.localize(booking.created_at) >= week_ago:
                stats.this_week += 1

            slot_time = booking.slot.date_time if booking.slot else None
            if slot_time and booking.status == BookingStatus.CONFIRMED and self.hours.localize(slot_time) >= now:
                stats.upcoming += 1

        return ServiceResult.ok(stats)

    @recovered("update_booking_status")
    async def update_booking_status(self, booking_id: RowId, new_status: Union[BookingStatus, str]) -> ServiceResult:
        await self.require_admin()

        try:
            status = BookingStatus(new_status)
        except ValueError:
            raise BookingError(ErrorKind.INVALID_INPUT, f"Estado inválido: {new_status}")

        updated = await self.db.set_booking_status(booking_id, status)
        if not updated:
            raise BookingError(ErrorKind.NOT_FOUND_OR_FORBIDDEN)

        logger.info(f"✏️ Booking {booking_id} set to {status.value}")
        return ServiceResult.ok(updated, "Estado actualizado")
