import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional

import attr

from smartpark.backend.engine import lifecycle, pricing
from smartpark.backend.engine.errors import InvalidDuration, InvalidTransition, LotNotFound, NotFound, PaymentDeclined
from smartpark.backend.engine.ledger import AvailabilityLedger
from smartpark.backend.engine.lifecycle import BookingEvent
from smartpark.shared import spot_types
from smartpark.shared.rest_models import Booking, BookingStatus, LotAvailability, ParkingLot
from smartpark.shared.ticket import render_ticket

logger = logging.getLogger('backend')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReservationService(object):
    """Entry point for creating, confirming, cancelling and expiring bookings.

    `store` is either a DbAccess or a MemoryStore. `clock` and `rng` can be replaced
    to make times and spot labels predictable.
    """

    def __init__(self, store, clock: Callable[[], datetime] = utcnow, rng: random.Random = None) -> None:
        self.store = store
        self.ledger = AvailabilityLedger(store)
        self.clock = clock
        self.rng = rng if rng else random.Random()

    # Parking lots

    async def add_lot(self, lot: ParkingLot) -> int:
        lot_id = await self.store.insert_parking_lot(lot)
        logger.info("Added parking lot {} '{}' with {} spots".format(lot_id, lot.name, lot.capacity))
        return lot_id

    async def get_lot(self, lot_id: int) -> ParkingLot:
        lot = await self.store.get_parking_lot(lot_id)
        if lot is None:
            raise LotNotFound(lot_id)
        return lot

    async def list_lots(self) -> List[ParkingLot]:
        return await self.store.get_parking_lots()

    async def update_lot_price(self, lot_id: int, price_per_hour: Decimal) -> None:
        # existing bookings keep the rate they were priced with
        if await self.store.update_parking_lot_price(lot_id, price_per_hour) is None:
            raise LotNotFound(lot_id)

    async def availability(self, lot_id: int) -> LotAvailability:
        return await self.ledger.snapshot(lot_id)

    async def reconcile_lot(self, lot_id: int) -> LotAvailability:
        """Recomputes a lot's free spots from its active and confirmed bookings.

        Repairs the counter after a crash between reserving a spot and saving the booking.
        Run it while the lot is quiet, it does not lock out concurrent reservations.
        """
        holding = await self.store.count_holding_bookings(lot_id)
        return await self.ledger.reconcile(lot_id, holding)

    # Bookings

    def make_spot_label(self, spot_type: str) -> str:
        # Cosmetic only: labels may repeat within a lot, capacity is tracked by the ledger.
        return '{}{}'.format(spot_types.lookup(spot_type).prefix, self.rng.randint(1, 100))

    async def create_booking(self, lot_id: int, user_id: str, spot_type: str, duration_hours: int) -> Booking:
        pricing.validate_duration(duration_hours)
        lot = await self.get_lot(lot_id)
        start = self.clock()
        try:
            end = start + timedelta(hours=duration_hours)
        except OverflowError:
            raise InvalidDuration(duration_hours)

        await self.ledger.reserve(lot_id)
        try:
            booking = Booking(id=uuid.uuid4().hex,
                              lot_id=lot_id,
                              user_id=user_id,
                              spot_type=spot_type,
                              spot_label=self.make_spot_label(spot_type),
                              price_per_hour=lot.price_per_hour,
                              duration_hours=duration_hours,
                              start_time=start,
                              end_time=end,
                              total_price=pricing.compute_price(lot.price_per_hour, spot_type, duration_hours))
            await self.store.insert_booking(booking)
        except Exception:
            logger.warning('Booking in lot {} for user {} failed, releasing the reserved spot'.format(lot_id, user_id))
            await self.ledger.release(lot_id)
            raise

        logger.info('Created booking {} in lot {} for user {}'.format(booking.id, lot_id, user_id))
        return booking

    async def get_booking(self, booking_id: str, user_id: Optional[str] = None) -> Booking:
        booking = await self.store.get_booking(booking_id)
        if booking is None or (user_id is not None and booking.user_id != user_id):
            raise NotFound(booking_id)
        return booking

    async def _transition(self, booking_id: str, event: BookingEvent, now: datetime) -> Booking:
        while True:
            booking = await self.get_booking(booking_id)
            outcome = lifecycle.apply(booking.status, event, now, booking.end_time)
            if not outcome.changed:
                return booking

            # compare-and-set, only the caller that wins the status change releases the spot
            if await self.store.update_booking_status(booking_id, outcome.previous, outcome.status):
                break
            logger.debug('Booking {} changed concurrently, retrying {}'.format(booking_id, event.value))

        logger.info('Booking {} {} -> {}'.format(booking_id, outcome.previous.value, outcome.status.value))
        if outcome.releases_spot:
            await self.ledger.release(booking.lot_id)
        return attr.evolve(booking, status=outcome.status)

    async def confirm_booking(self, booking_id: str, paid: bool) -> Booking:
        if not paid:
            # status is left untouched, the user may retry the payment
            logger.info('Payment declined for booking {}'.format(booking_id))
            raise PaymentDeclined('Payment for booking {} was not confirmed'.format(booking_id))
        return await self._transition(booking_id, BookingEvent.CONFIRM, self.clock())

    async def cancel_booking(self, booking_id: str) -> Booking:
        return await self._transition(booking_id, BookingEvent.CANCEL, self.clock())

    async def complete_booking(self, booking_id: str, now: Optional[datetime] = None) -> Booking:
        return await self._transition(booking_id, BookingEvent.COMPLETE, now if now else self.clock())

    async def list_active(self, user_id: str) -> List[Booking]:
        return [b for b in await self.store.get_user_bookings(user_id) if b.status.holds_spot]

    async def list_history(self, user_id: str) -> List[Booking]:
        return await self.store.get_user_bookings(user_id)

    async def expire_due(self, now: Optional[datetime] = None) -> List[Booking]:
        """Completes every active or confirmed booking whose end time has passed."""
        now = now if now else self.clock()
        completed = []
        for due in await self.store.get_due_bookings(now):
            try:
                booking = await self.complete_booking(due.id, now)
            except InvalidTransition as e:
                # cancelled between the query and the transition
                logger.info('Skipping expiry of booking {}: {}'.format(due.id, e))
                continue
            if booking.status is BookingStatus.COMPLETED:
                completed.append(booking)
        if completed:
            logger.info('Expired {} bookings'.format(len(completed)))
        return completed

    async def render_ticket(self, booking_id: str, user_id: Optional[str] = None) -> str:
        booking = await self.get_booking(booking_id, user_id)
        lot = await self.get_lot(booking.lot_id)
        return render_ticket(booking, lot)
