import pytest
from datetime import datetime, timedelta, timezone

from gymbooking.core.errors import ErrorKind
from gymbooking.models.db_models import BookingStatus, User
from gymbooking.models.results import BookingFilters
from gymbooking.services.admin_service import AdminService
from fakes import FakeAuth

ADMIN = User(id="admin-1", email="ADMIN@odingym.cl")

def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)

@pytest.mark.asyncio
async def test_is_admin_is_case_insensitive(gym_config, fake_db, member):
    assert await AdminService(fake_db, FakeAuth(ADMIN), gym_config).is_admin() is True
    assert await AdminService(fake_db, FakeAuth(member), gym_config).is_admin() is False
    assert await AdminService(fake_db, FakeAuth(None), gym_config).is_admin() is False

@pytest.mark.asyncio
async def test_non_admin_gets_not_authorized(gym_config, fake_db, member):
    service = AdminService(fake_db, FakeAuth(member), gym_config)

    for result in (
        await service.list_all_bookings(),
        await service.booking_stats(),
        await service.update_booking_status(1, "completed"),
    ):
        assert result.success is False
        assert result.error_kind == ErrorKind.NOT_AUTHORIZED
        assert result.error == "No autorizado"

@pytest.mark.asyncio
async def test_booking_stats(gym_config, fake_db):
    now = utc(2024, 6, 10, 15, 0)
    monthly = fake_db.add_service("Plan Mensual")
    future = fake_db.add_slot(monthly, now + timedelta(days=1))
    past = fake_db.add_slot(monthly, now - timedelta(days=20))

    fake_db.add_booking("u1", future, created_at=now - timedelta(days=1))
    fake_db.add_booking("u2", past, created_at=now - timedelta(days=21))
    fake_db.add_booking("u3", past, status=BookingStatus.COMPLETED, created_at=now - timedelta(days=21))
    fake_db.add_booking("u4", future, status=BookingStatus.CANCELLED, created_at=now - timedelta(days=2))

    service = AdminService(fake_db, FakeAuth(ADMIN), gym_config)
    result = await service.booking_stats(now=now)

    assert result.success is True
    stats = result.data
    assert stats.total == 4
    assert stats.confirmed == 2
    assert stats.cancelled == 1
    assert stats.completed == 1
    assert stats.this_week == 2
    assert stats.upcoming == 1

@pytest.mark.asyncio
async def test_list_all_bookings_filters(gym_config, fake_db):
    monthly = fake_db.add_service("Plan Mensual")
    june = fake_db.add_slot(monthly, utc(2024, 6, 4, 14, 0))
    july = fake_db.add_slot(monthly, utc(2024, 7, 4, 14, 0))
    b1 = fake_db.add_booking("u1", june)
    b2 = fake_db.add_booking("u2", july)
    b3 = fake_db.add_booking("u3", july, status=BookingStatus.CANCELLED)

    service = AdminService(fake_db, FakeAuth(ADMIN), gym_config)

    everything = await service.list_all_bookings()
    assert {b.id for b in everything.data} == {b1.id, b2.id, b3.id}
    assert all(b.user_email is None for b in everything.data)

    confirmed = await service.list_all_bookings(BookingFilters(status=BookingStatus.CONFIRMED))
    assert {b.id for b in confirmed.data} == {b1.id, b2.id}

    from_july = await service.list_all_bookings(BookingFilters(from_date=utc(2024, 7, 1, 0, 0)))
    assert {b.id for b in from_july.data} == {b2.id, b3.id}

    until_june = await service.list_all_bookings(BookingFilters(to_date=utc(2024, 6, 30, 0, 0)))
    assert {b.id for b in until_june.data} == {b1.id}

@pytest.mark.asyncio
async def test_update_booking_status(gym_config, fake_db):
    monthly = fake_db.add_service("Plan Mensual")
    booking = fake_db.add_booking("someone", fake_db.add_slot(monthly, utc(2024, 6, 4, 14, 0)))
    service = AdminService(fake_db, FakeAuth(ADMIN), gym_config)

    result = await service.update_booking_status(booking.id, "completed")
    assert result.success is True
    assert result.message == "Estado actualizado"
    assert fake_db.bookings[booking.id].status == BookingStatus.COMPLETED
    assert fake_db.bookings[booking.id].updated_at is not None

    invalid = await service.update_booking_status(booking.id, "lost")
    assert invalid.error_kind == ErrorKind.INVALID_INPUT

    missing = await service.update_booking_status(12345, "cancelled")
    assert missing.error_kind == ErrorKind.NOT_FOUND_OR_FORBIDDEN

@pytest.mark.asyncio
async def test_explicit_allow_list_overrides_config(gym_config, fake_db, member):
    service = AdminService(fake_db, FakeAuth(member), gym_config, admin_emails=["Socio@Example.com"])
    assert await service.is_admin() is True
