from decimal import ROUND_HALF_UP, Decimal

from smartpark.backend.engine.errors import InvalidDuration
from smartpark.shared import spot_types
from smartpark.shared.rest_models import Booking
from smartpark.shared.util import to_decimal

# Durations offered by the booking form. Any positive whole number of hours is priced.
ALLOWED_DURATIONS = (1, 2, 3, 4, 5, 6, 8, 12, 24)

CENTS = Decimal('0.01')


def validate_duration(duration_hours) -> int:
    if isinstance(duration_hours, bool) or not isinstance(duration_hours, int) or duration_hours <= 0:
        raise InvalidDuration(duration_hours)
    return duration_hours


def compute_price(price_per_hour, spot_type: str, duration_hours: int) -> Decimal:
    validate_duration(duration_hours)
    multiplier = spot_types.lookup(spot_type).multiplier
    price = to_decimal(price_per_hour) * multiplier * duration_hours
    return price.quantize(CENTS, rounding=ROUND_HALF_UP)


def verify_price(booking: Booking) -> bool:
    """True if the stored total matches a fresh computation from the booking's own fields."""
    return compute_price(booking.price_per_hour, booking.spot_type, booking.duration_hours) == booking.total_price
