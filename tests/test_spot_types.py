from decimal import Decimal

from smartpark.shared import spot_types


def test_known_spot_type():
    vip = spot_types.lookup('vip')
    assert vip.multiplier == Decimal('2')
    assert vip.prefix == 'A'


def test_unknown_spot_type_falls_back():
    unknown = spot_types.lookup('hovercraft')
    assert unknown.multiplier == 1
    assert unknown.prefix == 'X'
    assert unknown.tag == 'hovercraft'


def test_prefixes_are_single_characters():
    for tag in spot_types.tags():
        assert len(spot_types.lookup(tag).prefix) == 1


def test_tags():
    assert set(spot_types.tags()) == {'vip', 'normal', 'car', 'bike', 'electric', 'handicapped'}
