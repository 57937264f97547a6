from datetime import datetime, timezone
from decimal import Decimal

import pytest
from smartpark.shared.rest_models import ParkingLotCreationResponse, ParkingLotPriceMessage
from smartpark.shared.util import serialize_model, serialize_models, to_datetime, to_decimal


def test_serialize_model():
    json_str = '{"id": 10}'
    pcr = ParkingLotCreationResponse(10)
    assert serialize_model(pcr) == json_str


def test_serialize_decimal_as_string():
    assert serialize_model(ParkingLotPriceMessage(Decimal('2.50'))) == '{"price_per_hour": "2.50"}'


def test_serialize_models():
    assert serialize_models([ParkingLotCreationResponse(1), ParkingLotCreationResponse(2)]) == '[{"id": 1}, {"id": 2}]'


def test_serialize_model_raises_error():
    with pytest.raises(ValueError):
        serialize_model(None)


def test_to_decimal():
    assert to_decimal(0.1) == Decimal('0.1')
    assert to_decimal('3.50') == Decimal('3.50')
    assert to_decimal(4) == Decimal(4)


@pytest.mark.parametrize('value', [None, True, [1]])
def test_to_decimal_wrong_type(value):
    with pytest.raises(TypeError):
        to_decimal(value)


def test_to_decimal_invalid_string():
    with pytest.raises(ValueError):
        to_decimal('cheap')


def test_to_datetime():
    assert to_datetime('2026-03-02T09:00:00+00:00') == datetime(2026, 3, 2, 9, tzinfo=timezone.utc)
    with pytest.raises(TypeError):
        to_datetime(12)
