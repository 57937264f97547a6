import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

import attr


def to_decimal(value) -> Decimal:
    '''Converts ints, strings and floats to Decimal without picking up binary float noise.'''
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError('Expected a number, got {!r}'.format(value))
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError('Invalid number: {!r}'.format(value))
    if not number.is_finite():
        raise ValueError('Invalid number: {!r}'.format(value))
    return number


def to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError('Expected datetime or ISO 8601 string, got {!r}'.format(value))


def _serialize_value(inst, field, value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def model_to_dict(model: object) -> dict:
    return attr.asdict(model, value_serializer=_serialize_value)


def serialize_model(model: object) -> str:
    '''Handy function to dump an attr object to a JSON encoded string'''
    return json.dumps(model_to_dict(model))


def serialize_models(models) -> str:
    return json.dumps([model_to_dict(m) for m in models])


def validate_pos(cls, attribute, value: float) -> None:
    if value < 1:
        raise ValueError('{} must be positive'.format(attribute.name))


def validate_non_neg(cls, attribute, value: float) -> None:
    if value < 0:
        raise ValueError('{} must be non-negative'.format(attribute.name))


def validate_non_empty(cls, attribute, value: str) -> None:
    if not value.strip():
        raise ValueError('{} must not be empty'.format(attribute.name))


def enforce_type(cls, attribute, value) -> None:
    if not isinstance(value, attribute.type) or (isinstance(value, bool) and attribute.type is not bool):
        raise TypeError('{} must be of type {}'
                        .format(attribute.name, str(attribute.type)))
