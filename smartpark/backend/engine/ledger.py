import logging

from smartpark.backend.engine.errors import LotNotFound, OutOfCapacity
from smartpark.shared.rest_models import LotAvailability

logger = logging.getLogger('backend')


class AvailabilityLedger(object):
    """Free-spot counters of the parking lots.

    The check-and-decrement is done by the store in a single atomic step, so two
    concurrent reservations of the last spot cannot both succeed.
    """

    def __init__(self, store) -> None:
        self.store = store

    async def reserve(self, lot_id: int) -> int:
        available = await self.store.decrement_available(lot_id)
        if available is None:
            if await self.store.get_parking_lot(lot_id) is None:
                raise LotNotFound(lot_id)
            logger.warning('Parking lot {} is full'.format(lot_id))
            raise OutOfCapacity(lot_id)
        logger.debug('Reserved a spot in lot {}, {} left'.format(lot_id, available))
        return available

    async def release(self, lot_id: int) -> int:
        # capped at capacity by the store, so a duplicate release does not overflow
        available = await self.store.increment_available(lot_id)
        if available is None:
            raise LotNotFound(lot_id)
        logger.debug('Released a spot in lot {}, {} left'.format(lot_id, available))
        return available

    async def snapshot(self, lot_id: int) -> LotAvailability:
        lot = await self.store.get_parking_lot(lot_id)
        if lot is None:
            raise LotNotFound(lot_id)
        return LotAvailability(lot.capacity, lot.available)

    async def reconcile(self, lot_id: int, holding: int) -> LotAvailability:
        lot = await self.store.get_parking_lot(lot_id)
        if lot is None:
            raise LotNotFound(lot_id)
        available = min(max(lot.capacity - holding, 0), lot.capacity)
        if available != lot.available:
            logger.warning('Availability of lot {} was {}, corrected to {}'.format(lot_id, lot.available, available))
            await self.store.update_parking_lot_availability(lot_id, available)
        return LotAvailability(lot.capacity, available)
