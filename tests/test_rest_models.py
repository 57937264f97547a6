from datetime import timedelta
from decimal import Decimal

import pytest
from smartpark.shared.rest_models import (Booking, BookingRequest, BookingStatus, ParkingLot,
                                          ParkingLotCreationResponse, ParkingLotPriceMessage, PaymentMessage)
from smartpark.shared.util import model_to_dict

from conftest import START


def test_correct_parkinglot_cons():
    lot = ParkingLot(100, 'test_name', 0.0, 'test street 1')
    assert isinstance(lot, ParkingLot)
    assert lot.available == 100
    assert lot.price_per_hour == Decimal('0.0')


def test_missing_parkinglot_arg():
    with pytest.raises(TypeError):
        ParkingLot(100, 'test_name', 0)


def test_incorrect_parkinglot_arg_type():
    with pytest.raises(TypeError):
        ParkingLot(100, 0, 0.0, 'test street 1')


def test_incorrect_parkinglot_arg():
    with pytest.raises(ValueError):
        ParkingLot(-100, 'test_name', 0.0, 'test street 1')


def test_zero_capacity_parkinglot():
    assert ParkingLot(0, 'test_name', 0.0, 'test street 1').available == 0


def test_negative_price_parkinglot():
    with pytest.raises(ValueError):
        ParkingLot(10, 'test_name', -1, 'test street 1')


@pytest.mark.parametrize('available', [-1, 11])
def test_parkinglot_available_out_of_range(available):
    with pytest.raises(ValueError):
        ParkingLot(10, 'test_name', 1, 'test street 1', available=available)


def test_parkinglot_deser_ser():
    data = {'name': 'test_name', 'capacity': 100, 'price_per_hour': '2.50',
            'address': 'test street 1', 'id': 2, 'available': 40}
    p = ParkingLot(**data)
    assert p.price_per_hour == Decimal('2.50')
    assert model_to_dict(p) == data


def test_parkinglot_creation_resp_id():
    pcr = ParkingLotCreationResponse(5)
    assert isinstance(pcr, ParkingLotCreationResponse)
    assert pcr.id == 5


def test_parkinglot_creation_resp_neg_id():
    with pytest.raises(ValueError):
        ParkingLotCreationResponse(-5)


def test_price_message_neg():
    with pytest.raises(ValueError):
        ParkingLotPriceMessage(-100.0)


def test_booking_deser_ser():
    booking = Booking('abc', 1, 'donald', 'vip', 'A3', Decimal('10'), 2, START, START + timedelta(hours=2),
                      Decimal('40.00'), BookingStatus.CONFIRMED)
    data = model_to_dict(booking)
    assert data['status'] == 'confirmed'
    assert data['total_price'] == '40.00'
    assert data['start_time'] == '2026-03-02T09:00:00+00:00'
    assert Booking(**data) == booking


def test_booking_end_time_must_match_duration():
    with pytest.raises(ValueError):
        Booking('abc', 1, 'donald', 'vip', 'A3', Decimal('10'), 2, START, START + timedelta(hours=3),
                Decimal('40.00'))


def test_booking_unknown_status():
    with pytest.raises(ValueError):
        Booking('abc', 1, 'donald', 'vip', 'A3', Decimal('10'), 2, START, START + timedelta(hours=2),
                Decimal('40.00'), 'lost')


def test_booking_request_rejects_bool_duration():
    with pytest.raises(TypeError):
        BookingRequest(1, 'vip', True)


def test_payment_message_type():
    with pytest.raises(TypeError):
        PaymentMessage('yes')


def test_holding_statuses():
    assert BookingStatus.ACTIVE.holds_spot
    assert BookingStatus.CONFIRMED.holds_spot
    assert BookingStatus.CANCELLED.is_terminal
    assert BookingStatus.COMPLETED.is_terminal
