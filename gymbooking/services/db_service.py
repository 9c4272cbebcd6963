import functools
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

import httpx
from supabase import create_async_client, AsyncClient, AsyncClientOptions, PostgrestAPIError

from gymbooking.core.config import settings
from gymbooking.core.errors import BookingError, ErrorKind, classify_remote_error
from gymbooking.core.logger import logger
from gymbooking.models.db_models import Booking, BookingDetails, BookingStatus, RowId, Service, Slot

BOOKING_DETAILS_SELECT = "*, slots(id, date_time, service_id), services(id, name, duration)"

async def create_client(url: str = None, key: str = None) -> AsyncClient:
    """
    Builds the Supabase async client for one user session.
    Raises BookingError(CONFIGURATION_MISSING) when credentials are not set.
    """
    url = url or settings.SUPABASE_URL
    key = key or settings.SUPABASE_KEY
    if not url or not key:
        logger.warning("⚠️ Supabase credentials missing")
        raise BookingError(ErrorKind.CONFIGURATION_MISSING, "Faltan las credenciales de Supabase (SUPABASE_URL / SUPABASE_KEY).")

    # One client per request: no background token refresh and no shared session storage
    options = AsyncClientOptions(auto_refresh_token=False, persist_session=False)
    client = await create_async_client(url, key, options=options)
    logger.debug("✅ Supabase Async client initialized")
    return client

def remote(table: str):
    """Converts PostgREST and transport errors raised by a query into classified BookingErrors."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except (PostgrestAPIError, httpx.TransportError) as e:
                logger.error(f"❌ DB Error ({func.__name__}): {e}")
                raise classify_remote_error(e, resource=table) from e
        return wrapper
    return decorator

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

class DBService:
    """Row-level access to the services, slots and bookings tables."""

    def __init__(self, client: AsyncClient):
        self.client = client

    @remote("services")
    async def fetch_services(self, limit: Optional[int] = None) -> List[Service]:
        query = self.client.table('services').select("*").order('name')
        if limit:
            query = query.limit(limit)
        response = await query.execute()
        return [Service.model_validate(row) for row in response.data or []]

    @remote("services")
    async def fetch_service(self, service_id: RowId) -> Optional[Service]:
        response = await self.client.table('services').select("*").eq('id', service_id).limit(1).execute()
        if response.data:
            return Service.model_validate(response.data[0])
        return None

    @remote("slots")
    async def fetch_open_slots(self, service_id: RowId, start: datetime, end: datetime) -> List[Slot]:
        """Slots still flagged available for a service within [start, end], oldest first."""
        response = await self.client.table('slots')\
            .select("*")\
            .eq('service_id', service_id)\
            .eq('available', True)\
            .gte('date_time', start.isoformat())\
            .lte('date_time', end.isoformat())\
            .order('date_time', desc=False)\
            .execute()
        return [Slot.model_validate(row) for row in response.data or []]

    @remote("slots")
    async def fetch_slot(self, slot_id: RowId) -> Optional[Slot]:
        response = await self.client.table('slots').select("*").eq('id', slot_id).limit(1).execute()
        if response.data:
            return Slot.model_validate(response.data[0])
        return None

    @remote("bookings")
    async def fetch_confirmed_slot_ids(self, slot_ids: Iterable[RowId]) -> Set[RowId]:
        slot_ids = list(slot_ids)
        if not slot_ids:
            return set()
        # Runs as definer: members cannot read other people's bookings directly
        response = await self.client.rpc('taken_slot_ids', {'slot_ids': slot_ids}).execute()
        return {row['slot_id'] for row in response.data or []}

    @remote("bookings")
    async def fetch_user_bookings(self, user_id: str, statuses: Iterable[BookingStatus]) -> List[BookingDetails]:
        """A user's bookings in the given statuses, joined with slot/service, newest first."""
        response = await self.client.table('bookings')\
            .select(BOOKING_DETAILS_SELECT)\
            .eq('user_id', user_id)\
            .in_('status', [s.value for s in statuses])\
            .order('created_at', desc=True)\
            .execute()
        return [BookingDetails.model_validate(row) for row in response.data or []]

    @remote("bookings")
    async def fetch_booking_for_user(self, booking_id: RowId, user_id: str) -> Optional[Booking]:
        response = await self.client.table('bookings')\
            .select("*")\
            .eq('id', booking_id)\
            .eq('user_id', user_id)\
            .limit(1)\
            .execute()
        if response.data:
            return Booking.model_validate(response.data[0])
        return None

    @remote("bookings")
    async def insert_booking(self, user_id: str, slot_id: RowId, service_id: RowId) -> Booking:
        """
        Inserts a confirmed booking. The partial unique index
        bookings_one_confirmed_per_slot rejects a second confirmed booking for
        the same slot, which surfaces as SLOT_ALREADY_BOOKED.
        """
        booking_data = {
            'user_id': user_id,
            'slot_id': slot_id,
            'service_id': service_id,
            'status': BookingStatus.CONFIRMED.value,
            'created_at': _now_iso(),
        }
        response = await self.client.table('bookings').insert(booking_data).execute()
        if not response.data:
            raise BookingError(ErrorKind.UNKNOWN, "La reserva no fue devuelta por el servidor")
        logger.info(f"✅ Booking inserted for user {user_id} on slot {slot_id}")
        return Booking.model_validate(response.data[0])

    @remote("bookings")
    async def set_booking_status(self, booking_id: RowId, status: BookingStatus, user_id: Optional[str] = None) -> Optional[Booking]:
        """Updates the status; with user_id the update only touches the caller's own row while it is still confirmed."""
        query = self.client.table('bookings')\
            .update({'status': status.value, 'updated_at': _now_iso()})\
            .eq('id', booking_id)
        if user_id:
            query = query.eq('user_id', user_id).eq('status', BookingStatus.CONFIRMED.value)
        response = await query.execute()
        if response.data:
            return Booking.model_validate(response.data[0])
        return None

    @remote("slots")
    async def upsert_slots(self, rows: List[Dict[str, Any]]) -> List[Slot]:
        """Batch insert ignoring rows that collide on (service_id, date_time). Returns the new rows."""
        if not rows:
            return []
        response = await self.client.table('slots')\
            .upsert(rows, on_conflict='service_id,date_time', ignore_duplicates=True)\
            .execute()
        return [Slot.model_validate(row) for row in response.data or []]

    @remote("bookings")
    async def fetch_all_bookings(self, status: Optional[BookingStatus] = None) -> List[BookingDetails]:
        query = self.client.table('bookings').select(BOOKING_DETAILS_SELECT)
        if status:
            query = query.eq('status', status.value)
        response = await query.order('created_at', desc=True).execute()
        return [BookingDetails.model_validate(row) for row in response.data or []]
