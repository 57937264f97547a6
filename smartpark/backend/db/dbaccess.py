import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import asyncpg
from asyncpg import Record

import smartpark.backend.db.sql_constants as c
from smartpark.backend.engine.errors import PersistenceFailure
from smartpark.shared.rest_models import HOLDING_STATUSES, Booking, BookingStatus, ParkingLot

logger = logging.getLogger('backend')

HOLDING_STATUS_VALUES = [s.value for s in HOLDING_STATUSES]


def lot_from_record(r: Record) -> ParkingLot:
    return ParkingLot(capacity=r['capacity'], name=r['name'], price_per_hour=r['price_per_hour'],
                      address=r['address'], id=r['id'], available=r['num_available'])


def booking_from_record(r: Record) -> Booking:
    return Booking(id=r['id'], lot_id=r['park_id'], user_id=r['user_id'], spot_type=r['spot_type'],
                   spot_label=r['spot_label'], price_per_hour=r['price_per_hour'],
                   duration_hours=r['duration_hours'], start_time=r['start_time'], end_time=r['end_time'],
                   total_price=r['total_price'], status=r['status'])


class DbAccess(object):
    """PostgreSQL store. Availability counters are only changed by single atomic UPDATEs."""

    @classmethod
    async def create(cls, destination: str, init_tables: bool = False, reset_tables: bool = False) -> 'DbAccess':
        self = DbAccess()
        self.pool: asyncpg.pool.Pool = await asyncpg.create_pool(dsn=destination)
        if reset_tables:
            await self._drop_tables()
        if init_tables or reset_tables:
            await self._create_tables()
        return self

    async def close(self) -> None:
        await self.pool.close()

    @asynccontextmanager
    async def _acquire(self):
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("Database error : '{}'".format(e))
            raise PersistenceFailure(str(e)) from e

    async def _drop_tables(self):
        logger.info("Dropping database tables.")
        async with self._acquire() as conn:
            await conn.execute(c.BOOKINGS_DROP_TABLE)
            await conn.execute(c.PARKINGLOTS_DROP_TABLE)
        logger.info("Database tables dropped.")

    async def _create_tables(self):
        logger.info("Creating database tables.")
        async with self._acquire() as conn:
            async with conn.transaction():
                await conn.execute(c.PARKINGLOTS_CREATE_TABLE)
                await conn.execute(c.BOOKINGS_CREATE_TABLE)
        logger.info("Database tables created.")

    async def insert_parking_lot(self, p: ParkingLot) -> int:
        async with self._acquire() as conn:
            park_id: int = await conn.fetchval(c.PARKINGLOTS_INSERT,
                                               p.name, p.address, p.capacity, p.price_per_hour, p.available)
        return park_id

    async def get_parking_lot(self, park_id: int) -> Optional[ParkingLot]:
        async with self._acquire() as conn:
            record = await conn.fetchrow(c.PARKINGLOTS_SELECT, park_id)
        return lot_from_record(record) if record else None

    async def get_parking_lots(self) -> List[ParkingLot]:
        async with self._acquire() as conn:
            records = await conn.fetch(c.PARKINGLOTS_SELECT_ALL)
        return [lot_from_record(r) for r in records]

    async def update_parking_lot_availability(self, park_id: int, availability: int) -> Optional[int]:
        async with self._acquire() as conn:
            park_id: int = await conn.fetchval(c.PARKINGLOTS_UPDATE_AVAILABILITY, park_id, availability)
        return park_id

    async def update_parking_lot_price(self, park_id: int, price: Decimal) -> Optional[int]:
        async with self._acquire() as conn:
            park_id: int = await conn.fetchval(c.PARKINGLOTS_UPDATE_PRICE, park_id, price)
        return park_id

    async def decrement_available(self, park_id: int) -> Optional[int]:
        """Takes one free spot. None if the lot is full or does not exist."""
        async with self._acquire() as conn:
            return await conn.fetchval(c.PARKINGLOTS_DECREMENT_AVAILABLE, park_id)

    async def increment_available(self, park_id: int) -> Optional[int]:
        """Returns one spot, never exceeding capacity. None if the lot does not exist."""
        async with self._acquire() as conn:
            return await conn.fetchval(c.PARKINGLOTS_INCREMENT_AVAILABLE, park_id)

    async def insert_booking(self, b: Booking) -> None:
        async with self._acquire() as conn:
            await conn.execute(c.BOOKINGS_INSERT, b.id, b.lot_id, b.user_id, b.spot_type, b.spot_label,
                               b.price_per_hour, b.duration_hours, b.start_time, b.end_time, b.total_price,
                               b.status.value)

    async def get_booking(self, booking_id: str) -> Optional[Booking]:
        async with self._acquire() as conn:
            record = await conn.fetchrow(c.BOOKINGS_SELECT, booking_id)
        return booking_from_record(record) if record else None

    async def get_user_bookings(self, user_id: str) -> List[Booking]:
        async with self._acquire() as conn:
            records = await conn.fetch(c.BOOKINGS_SELECT_BY_USER, user_id)
        return [booking_from_record(r) for r in records]

    async def get_due_bookings(self, now: datetime) -> List[Booking]:
        async with self._acquire() as conn:
            records = await conn.fetch(c.BOOKINGS_SELECT_DUE, HOLDING_STATUS_VALUES, now)
        return [booking_from_record(r) for r in records]

    async def count_holding_bookings(self, park_id: int) -> int:
        async with self._acquire() as conn:
            return await conn.fetchval(c.BOOKINGS_COUNT_HOLDING, park_id, HOLDING_STATUS_VALUES)

    async def update_booking_status(self, booking_id: str, expected: BookingStatus, status: BookingStatus) -> bool:
        async with self._acquire() as conn:
            updated = await conn.fetchval(c.BOOKINGS_UPDATE_STATUS, booking_id, expected.value, status.value)
        return updated is not None
