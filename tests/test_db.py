import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
import pytest_asyncio

from smartpark.backend.db.dbaccess import DbAccess
from smartpark.backend.engine.errors import OutOfCapacity
from smartpark.backend.engine.reservation import ReservationService
from smartpark.shared.rest_models import Booking, BookingStatus, ParkingLot

from conftest import START


@pytest_asyncio.fixture
async def db(postgresql):
    db = await DbAccess.create(postgresql.url(), reset_tables=True)
    yield db
    await db.close()


def make_booking(booking_id='b1', park_id=1, user_id='test_user', hours=2, start=START):
    return Booking(booking_id, park_id, user_id, 'vip', 'A12', Decimal('2.50'), hours, start,
                   start + timedelta(hours=hours), Decimal('10.00'))


@pytest.mark.asyncio
async def test_empty_tables(db):
    async with db.pool.acquire() as conn:
        p_lst = await conn.fetch('SELECT * from ParkingLots;')
        assert len(p_lst) == 0
        b_lst = await conn.fetch('SELECT * from Bookings;')
        assert len(b_lst) == 0


@pytest.mark.asyncio
async def test_insert_parking_lot(db):
    parking_lot = ParkingLot(100, 'test_name', '2.50', 'test street 1')
    park_id = await db.insert_parking_lot(parking_lot)
    assert park_id == 1

    lot = await db.get_parking_lot(park_id)
    assert lot.name == parking_lot.name
    assert lot.available == 100
    assert lot.price_per_hour == Decimal('2.50')
    assert [lot.id for lot in await db.get_parking_lots()] == [1]


@pytest.mark.asyncio
async def test_get_unknown_parking_lot(db):
    assert await db.get_parking_lot(2) is None


@pytest.mark.asyncio
async def test_update_parking_lot_price_and_availability(db):
    park_id = await db.insert_parking_lot(ParkingLot(100, 'test_name', 0, 'test street 1'))
    assert await db.update_parking_lot_availability(park_id, 10) == 1
    assert await db.update_parking_lot_price(park_id, Decimal('5')) == 1

    lot = await db.get_parking_lot(park_id)
    assert lot.available == 10
    assert lot.price_per_hour == Decimal('5')


@pytest.mark.asyncio
async def test_update_parking_lot_price_and_availability_unsuccessful(db):
    await db.insert_parking_lot(ParkingLot(100, 'test_name', 0, 'test street 1'))
    assert await db.update_parking_lot_availability(2, 10) is None
    assert await db.update_parking_lot_price(2, Decimal('5')) is None


@pytest.mark.asyncio
async def test_decrement_and_increment_available(db):
    park_id = await db.insert_parking_lot(ParkingLot(2, 'test_name', 0, 'test street 1'))

    assert await db.decrement_available(park_id) == 1
    assert await db.decrement_available(park_id) == 0
    assert await db.decrement_available(park_id) is None
    assert await db.increment_available(park_id) == 1
    assert await db.increment_available(park_id) == 2
    assert await db.increment_available(park_id) == 2
    assert await db.decrement_available(99) is None
    assert await db.increment_available(99) is None


@pytest.mark.asyncio
async def test_insert_and_get_booking(db):
    await db.insert_parking_lot(ParkingLot(100, 'test_name', '2.50', 'test street 1'))
    booking = make_booking()
    await db.insert_booking(booking)

    assert await db.get_booking('b1') == booking
    assert await db.get_booking('nope') is None


@pytest.mark.asyncio
async def test_get_user_bookings(db):
    await db.insert_parking_lot(ParkingLot(100, 'test_name', '2.50', 'test street 1'))
    await db.insert_booking(make_booking('b1'))
    await db.insert_booking(make_booking('b2', start=START + timedelta(hours=1)))
    await db.insert_booking(make_booking('b3', user_id='other'))

    assert [b.id for b in await db.get_user_bookings('test_user')] == ['b2', 'b1']


@pytest.mark.asyncio
async def test_get_due_and_count_holding(db):
    await db.insert_parking_lot(ParkingLot(100, 'test_name', '2.50', 'test street 1'))
    await db.insert_booking(make_booking('b1', hours=1))
    await db.insert_booking(make_booking('b2', hours=5))

    assert [b.id for b in await db.get_due_bookings(START + timedelta(hours=1))] == ['b1']
    assert await db.count_holding_bookings(1) == 2


@pytest.mark.asyncio
async def test_update_booking_status(db):
    await db.insert_parking_lot(ParkingLot(100, 'test_name', '2.50', 'test street 1'))
    await db.insert_booking(make_booking())

    assert await db.update_booking_status('b1', BookingStatus.ACTIVE, BookingStatus.CANCELLED) is True
    assert await db.update_booking_status('b1', BookingStatus.ACTIVE, BookingStatus.COMPLETED) is False
    assert (await db.get_booking('b1')).status is BookingStatus.CANCELLED
    assert await db.count_holding_bookings(1) == 0


@pytest.mark.asyncio
async def test_no_overbooking_under_concurrency(db):
    service = ReservationService(db)
    park_id = await service.add_lot(ParkingLot(10, 'test_name', '2.50', 'test street 1', available=3))

    results = await asyncio.gather(*[service.create_booking(park_id, 'user{}'.format(i), 'normal', 1)
                                     for i in range(8)], return_exceptions=True)

    assert len([r for r in results if isinstance(r, OutOfCapacity)]) == 5
    assert (await db.get_parking_lot(park_id)).available == 0
    assert await db.count_holding_bookings(park_id) == 3
