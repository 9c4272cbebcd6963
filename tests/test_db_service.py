import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
from supabase import PostgrestAPIError

from gymbooking.core.errors import BookingError, ErrorKind
from gymbooking.models.db_models import BookingStatus
from gymbooking.services.db_service import DBService

class QueryStub:
    """Chainable stand-in for the PostgREST request builder."""

    def __init__(self, data=None, error=None):
        self.calls = []
        self.execute = AsyncMock(return_value=SimpleNamespace(data=data))
        if error is not None:
            self.execute.side_effect = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

def make_client(query):
    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client

@pytest.mark.asyncio
async def test_fetch_open_slots_query():
    rows = [{"id": 1, "service_id": 7, "date_time": "2024-06-04T14:00:00+00:00", "available": True}]
    query = QueryStub(rows)
    db = DBService(make_client(query))

    start = datetime(2024, 6, 4, tzinfo=timezone.utc)
    end = datetime(2024, 6, 5, tzinfo=timezone.utc)
    slots = await db.fetch_open_slots(7, start, end)

    assert slots[0].id == 1
    assert slots[0].date_time == datetime(2024, 6, 4, 14, tzinfo=timezone.utc)
    names = [name for name, _, _ in query.calls]
    assert names == ["select", "eq", "eq", "gte", "lte", "order"]
    assert ("eq", ("available", True), {}) in query.calls
    assert ("gte", ("date_time", start.isoformat()), {}) in query.calls

@pytest.mark.asyncio
async def test_fetch_confirmed_slot_ids_skips_empty_input():
    query = QueryStub([])
    client = make_client(query)
    db = DBService(client)

    assert await db.fetch_confirmed_slot_ids([]) == set()
    client.rpc.assert_not_called()

@pytest.mark.asyncio
async def test_fetch_confirmed_slot_ids():
    query = QueryStub([{"slot_id": 3}, {"slot_id": 5}])
    client = make_client(query)
    db = DBService(client)

    assert await db.fetch_confirmed_slot_ids([3, 4, 5]) == {3, 5}
    client.rpc.assert_called_once_with("taken_slot_ids", {"slot_ids": [3, 4, 5]})
    client.table.assert_not_called()

@pytest.mark.asyncio
async def test_insert_booking_unique_violation_means_already_booked():
    error = PostgrestAPIError({
        "code": "23505",
        "message": 'duplicate key value violates unique constraint "bookings_one_confirmed_per_slot"',
    })
    db = DBService(make_client(QueryStub(error=error)))

    with pytest.raises(BookingError) as exc_info:
        await db.insert_booking("user-1", 3, 7)
    assert exc_info.value.kind == ErrorKind.SLOT_ALREADY_BOOKED

@pytest.mark.asyncio
async def test_insert_booking_returns_row():
    row = {"id": 10, "user_id": "user-1", "slot_id": 3, "service_id": 7, "status": "confirmed",
           "created_at": "2024-06-01T10:00:00+00:00"}
    query = QueryStub([row])
    db = DBService(make_client(query))

    booking = await db.insert_booking("user-1", 3, 7)

    assert booking.id == 10
    assert booking.status == BookingStatus.CONFIRMED
    name, args, _ = query.calls[0]
    assert name == "insert"
    assert args[0]["status"] == "confirmed"
    assert args[0]["user_id"] == "user-1"

@pytest.mark.asyncio
@pytest.mark.parametrize("error, kind", [
    (httpx.ConnectError("connection refused"), ErrorKind.REMOTE_UNAVAILABLE),
    (httpx.ReadTimeout("timed out"), ErrorKind.TIMEOUT),
    (PostgrestAPIError({"code": "42501", "message": "new row violates row-level security policy"}), ErrorKind.PERMISSION_DENIED),
    (PostgrestAPIError({"code": "PGRST205", "message": "Could not find the table 'public.services'"}), ErrorKind.CONFIGURATION_MISSING),
])
async def test_remote_errors_are_classified(error, kind):
    db = DBService(make_client(QueryStub(error=error)))

    with pytest.raises(BookingError) as exc_info:
        await db.fetch_services()
    assert exc_info.value.kind == kind

@pytest.mark.asyncio
async def test_missing_table_message_names_table():
    error = PostgrestAPIError({"code": "42P01", "message": 'relation "public.bookings" does not exist'})
    db = DBService(make_client(QueryStub(error=error)))

    with pytest.raises(BookingError) as exc_info:
        await db.fetch_all_bookings()
    assert "bookings" in exc_info.value.message

@pytest.mark.asyncio
async def test_upsert_slots_ignores_duplicates():
    query = QueryStub([])
    db = DBService(make_client(query))
    rows = [{"service_id": 7, "date_time": "2024-06-04T10:00:00+00:00", "available": True}]

    assert await db.upsert_slots(rows) == []
    assert query.calls[0] == ("upsert", (rows,), {"on_conflict": "service_id,date_time", "ignore_duplicates": True})

@pytest.mark.asyncio
async def test_set_booking_status_scoped_to_owner():
    query = QueryStub([])
    db = DBService(make_client(query))

    assert await db.set_booking_status(10, BookingStatus.CANCELLED, user_id="user-1") is None
    assert ("eq", ("id", 10), {}) in query.calls
    assert ("eq", ("user_id", "user-1"), {}) in query.calls
    assert ("eq", ("status", "confirmed"), {}) in query.calls

@pytest.mark.asyncio
async def test_admin_status_update_is_not_limited_to_confirmed():
    query = QueryStub([])
    db = DBService(make_client(query))

    await db.set_booking_status(10, BookingStatus.COMPLETED)
    assert ("eq", ("status", "confirmed"), {}) not in query.calls

@pytest.mark.asyncio
async def test_user_bookings_embed_slot_and_service():
    row = {
        "id": 10, "user_id": "user-1", "slot_id": 3, "service_id": 7, "status": "confirmed",
        "created_at": "2024-06-01T10:00:00+00:00",
        "slots": {"id": 3, "date_time": "2024-06-04T14:00:00+00:00", "service_id": 7},
        "services": {"id": 7, "name": "Plan Mensual", "duration": 60},
    }
    db = DBService(make_client(QueryStub([row])))

    bookings = await db.fetch_user_bookings("user-1", [BookingStatus.CONFIRMED])

    assert bookings[0].service.name == "Plan Mensual"
    assert bookings[0].slot.date_time.hour == 14
