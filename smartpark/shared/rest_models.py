from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

import attr

from smartpark.shared.util import (enforce_type, to_datetime, to_decimal, validate_non_empty, validate_non_neg,
                                   validate_pos)


class BookingStatus(Enum):
    ACTIVE = 'active'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def holds_spot(self) -> bool:
        return self in (BookingStatus.ACTIVE, BookingStatus.CONFIRMED)

    @property
    def is_terminal(self) -> bool:
        return not self.holds_spot


HOLDING_STATUSES = tuple(s for s in BookingStatus if s.holds_spot)


def _default_available(lot: 'ParkingLot') -> int:
    return lot.capacity


@attr.s
class ParkingLot:
    capacity: int = attr.ib(validator=[enforce_type, validate_non_neg])
    name: str = attr.ib(validator=[enforce_type, validate_non_empty])
    price_per_hour: Decimal = attr.ib(converter=to_decimal, validator=validate_non_neg)
    address: str = attr.ib(validator=enforce_type)
    id: int = attr.ib(validator=enforce_type, default=0)
    available: int = attr.ib(default=attr.Factory(_default_available, takes_self=True))

    @available.validator
    def _check_available(self, attribute, value):
        enforce_type(self, attribute, value)
        if not 0 <= value <= self.capacity:
            raise ValueError('available must be between 0 and capacity')


@attr.s(frozen=True)
class LotAvailability:
    capacity: int = attr.ib()
    available: int = attr.ib()


@attr.s
class ParkingLotCreationResponse:
    id: int = attr.ib(validator=[enforce_type, validate_non_neg], default=0)


@attr.s
class ParkingLotPriceMessage:
    price_per_hour: Decimal = attr.ib(converter=to_decimal, validator=validate_non_neg)


@attr.s
class Booking:
    id: str = attr.ib(validator=enforce_type)
    lot_id: int = attr.ib(validator=enforce_type)
    user_id: str = attr.ib(validator=enforce_type)
    spot_type: str = attr.ib(validator=enforce_type)
    spot_label: str = attr.ib(validator=enforce_type)
    # rate of the lot when the booking was made, so total_price can be recomputed later
    price_per_hour: Decimal = attr.ib(converter=to_decimal, validator=validate_non_neg)
    duration_hours: int = attr.ib(validator=[enforce_type, validate_pos])
    start_time: datetime = attr.ib(converter=to_datetime)
    end_time: datetime = attr.ib(converter=to_datetime)
    total_price: Decimal = attr.ib(converter=to_decimal, validator=validate_non_neg)
    status: BookingStatus = attr.ib(converter=BookingStatus, default=BookingStatus.ACTIVE)

    @end_time.validator
    def _check_end_time(self, attribute, value):
        if value != self.start_time + timedelta(hours=self.duration_hours):
            raise ValueError('end_time must be start_time plus duration_hours')


@attr.s
class BookingRequest:
    lot_id: int = attr.ib(validator=enforce_type)
    spot_type: str = attr.ib(validator=enforce_type)
    # range is checked by the pricing calculator so the error is reported consistently
    duration_hours: int = attr.ib(validator=enforce_type)


@attr.s
class PaymentMessage:
    paid: bool = attr.ib(validator=enforce_type)
