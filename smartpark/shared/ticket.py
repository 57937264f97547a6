from datetime import datetime, timezone

from smartpark.shared.rest_models import Booking, ParkingLot

TIME_FORMAT = '%Y-%m-%d %H:%M UTC'


def format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(TIME_FORMAT)


def render_ticket(booking: Booking, lot: ParkingLot) -> str:
    """Plain-text ticket body.

    Ticket consumers parse this line by line, so the field order and labels are fixed.
    """
    lines = [
        'Booking ID: {}'.format(booking.id),
        'Parking Lot: {}'.format(lot.name),
        'Address: {}'.format(lot.address),
        'Spot Number: {}'.format(booking.spot_label),
        'Start Time: {}'.format(format_time(booking.start_time)),
        'End Time: {}'.format(format_time(booking.end_time)),
        'Total Amount: {:.2f}'.format(booking.total_price),
        'Status: {}'.format(booking.status.value),
    ]
    return '\n'.join(lines)
