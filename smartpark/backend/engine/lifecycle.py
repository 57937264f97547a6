"""
Booking status state machine.

    active ──confirm──> confirmed
      │                    │
      ├──cancel───> cancelled <──cancel──┤
      └──complete─> completed <─complete─┘

Cancelling and confirming are only possible before the booking ends, completing only
once it has ended. Reapplying an event to a booking already in that event's target
status is a no-op, so retried cancellations and repeated expiry sweeps are harmless.
"""
from datetime import datetime
from enum import Enum

import attr

from smartpark.backend.engine.errors import InvalidTransition
from smartpark.shared.rest_models import BookingStatus


class BookingEvent(Enum):
    CONFIRM = 'confirm'
    CANCEL = 'cancel'
    COMPLETE = 'complete'


TARGETS = {
    BookingEvent.CONFIRM: BookingStatus.CONFIRMED,
    BookingEvent.CANCEL: BookingStatus.CANCELLED,
    BookingEvent.COMPLETE: BookingStatus.COMPLETED,
}

TRANSITIONS = {
    (BookingStatus.ACTIVE, BookingEvent.CONFIRM),
    (BookingStatus.ACTIVE, BookingEvent.CANCEL),
    (BookingStatus.CONFIRMED, BookingEvent.CANCEL),
    (BookingStatus.ACTIVE, BookingEvent.COMPLETE),
    (BookingStatus.CONFIRMED, BookingEvent.COMPLETE),
}


@attr.s(frozen=True)
class TransitionOutcome:
    previous: BookingStatus = attr.ib()
    status: BookingStatus = attr.ib()

    @property
    def changed(self) -> bool:
        return self.previous is not self.status

    @property
    def releases_spot(self) -> bool:
        return self.changed and self.previous.holds_spot and not self.status.holds_spot


def apply(status: BookingStatus, event: BookingEvent, now: datetime, end_time: datetime) -> TransitionOutcome:
    target = TARGETS[event]
    if status is target:
        return TransitionOutcome(status, status)

    if (status, event) not in TRANSITIONS:
        raise InvalidTransition('Cannot {} a {} booking'.format(event.value, status.value))

    if event is BookingEvent.COMPLETE and now < end_time:
        raise InvalidTransition('Cannot complete a booking before it ends')
    if event is not BookingEvent.COMPLETE and now >= end_time:
        raise InvalidTransition('Cannot {} a booking that has already ended'.format(event.value))

    return TransitionOutcome(status, target)
