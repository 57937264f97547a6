class ReservationError(Exception):
    """Base class for every failure the reservation engine reports to its callers."""


class OutOfCapacity(ReservationError):
    def __init__(self, lot_id: int) -> None:
        super().__init__('No free spot left in parking lot {}'.format(lot_id))
        self.lot_id = lot_id


class InvalidDuration(ReservationError):
    def __init__(self, duration) -> None:
        super().__init__('Duration must be a positive whole number of hours, got {!r}'.format(duration))
        self.duration = duration


class InvalidTransition(ReservationError):
    pass


class LotNotFound(ReservationError):
    def __init__(self, lot_id: int) -> None:
        super().__init__('Unknown lot ID {}'.format(lot_id))
        self.lot_id = lot_id


class NotFound(ReservationError):
    def __init__(self, booking_id: str) -> None:
        super().__init__('Unknown booking ID {}'.format(booking_id))
        self.booking_id = booking_id


class PaymentDeclined(ReservationError):
    pass


class PersistenceFailure(ReservationError):
    pass
