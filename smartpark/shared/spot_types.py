from decimal import Decimal
from typing import List

import attr


@attr.s(frozen=True)
class SpotTypeDefinition:
    tag: str = attr.ib()
    multiplier: Decimal = attr.ib()
    prefix: str = attr.ib()


DEFAULT_SPOT_TYPE = SpotTypeDefinition('', Decimal('1'), 'X')

SPOT_TYPES = {
    'vip': SpotTypeDefinition('vip', Decimal('2'), 'A'),
    'normal': SpotTypeDefinition('normal', Decimal('1'), 'B'),
    'car': SpotTypeDefinition('car', Decimal('1'), 'C'),
    'bike': SpotTypeDefinition('bike', Decimal('0.5'), 'D'),
    'electric': SpotTypeDefinition('electric', Decimal('1.2'), 'E'),
    'handicapped': SpotTypeDefinition('handicapped', Decimal('0.8'), 'H'),
}


def lookup(tag: str) -> SpotTypeDefinition:
    """Unrecognised spot types price like a normal spot and get the 'X' prefix."""
    return SPOT_TYPES.get(tag, attr.evolve(DEFAULT_SPOT_TYPE, tag=tag))


def tags() -> List[str]:
    return list(SPOT_TYPES)
