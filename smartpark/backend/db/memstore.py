import asyncio
import collections
import itertools
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

import attr

from smartpark.shared.rest_models import Booking, BookingStatus, ParkingLot

logger = logging.getLogger('backend')


class MemoryStore(object):
    """In-process store with the same coroutine interface as DbAccess.

    Each lot's counter is guarded by its own asyncio.Lock and booking status changes
    are compare-and-set, matching the atomic UPDATEs DbAccess relies on. Records are
    copied in and out so callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self.lots: Dict[int, ParkingLot] = {}
        self.bookings: Dict[str, Booking] = {}
        self._lot_ids = itertools.count(1)
        self._lot_locks: Dict[int, asyncio.Lock] = collections.defaultdict(asyncio.Lock)

    async def insert_parking_lot(self, p: ParkingLot) -> int:
        park_id = next(self._lot_ids)
        self.lots[park_id] = attr.evolve(p, id=park_id)
        return park_id

    async def get_parking_lot(self, park_id: int) -> Optional[ParkingLot]:
        lot = self.lots.get(park_id)
        return attr.evolve(lot) if lot else None

    async def get_parking_lots(self) -> List[ParkingLot]:
        return [attr.evolve(self.lots[k]) for k in sorted(self.lots)]

    async def update_parking_lot_availability(self, park_id: int, availability: int) -> Optional[int]:
        if park_id not in self.lots:
            return None
        async with self._lot_locks[park_id]:
            self.lots[park_id] = attr.evolve(self.lots[park_id], available=availability)
        return park_id

    async def update_parking_lot_price(self, park_id: int, price: Decimal) -> Optional[int]:
        if park_id not in self.lots:
            return None
        self.lots[park_id] = attr.evolve(self.lots[park_id], price_per_hour=price)
        return park_id

    async def decrement_available(self, park_id: int) -> Optional[int]:
        if park_id not in self.lots:
            return None
        async with self._lot_locks[park_id]:
            lot = self.lots[park_id]
            if lot.available <= 0:
                return None
            lot.available -= 1
            return lot.available

    async def increment_available(self, park_id: int) -> Optional[int]:
        if park_id not in self.lots:
            return None
        async with self._lot_locks[park_id]:
            lot = self.lots[park_id]
            lot.available = min(lot.available + 1, lot.capacity)
            return lot.available

    async def insert_booking(self, b: Booking) -> None:
        if b.id in self.bookings:
            raise ValueError('Duplicate booking ID {}'.format(b.id))
        self.bookings[b.id] = attr.evolve(b)

    async def get_booking(self, booking_id: str) -> Optional[Booking]:
        booking = self.bookings.get(booking_id)
        return attr.evolve(booking) if booking else None

    async def get_user_bookings(self, user_id: str) -> List[Booking]:
        bookings = [attr.evolve(b) for b in self.bookings.values() if b.user_id == user_id]
        return sorted(bookings, key=lambda b: b.start_time, reverse=True)

    async def get_due_bookings(self, now: datetime) -> List[Booking]:
        due = [attr.evolve(b) for b in self.bookings.values() if b.status.holds_spot and b.end_time <= now]
        return sorted(due, key=lambda b: b.end_time)

    async def count_holding_bookings(self, park_id: int) -> int:
        return sum(1 for b in self.bookings.values() if b.lot_id == park_id and b.status.holds_spot)

    async def update_booking_status(self, booking_id: str, expected: BookingStatus, status: BookingStatus) -> bool:
        booking = self.bookings.get(booking_id)
        if booking is None or booking.status is not expected:
            return False
        booking.status = status
        return True
