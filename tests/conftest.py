import random
from datetime import datetime, timedelta, timezone

import pytest
import testing.postgresql

from smartpark.backend.db.memstore import MemoryStore
from smartpark.backend.engine.reservation import ReservationService

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def service(store, clock):
    return ReservationService(store, clock=clock, rng=random.Random(7))


@pytest.fixture(scope="module")
def postgresql():
    try:
        postgresql_con = testing.postgresql.Postgresql()
    except RuntimeError as e:
        pytest.skip('PostgreSQL is not available: {}'.format(e))
    yield postgresql_con
    postgresql_con.stop()
