"""Module for miscellaneous multi-use functions"""

__all__ = [
    'default_to_zulu', 'ensure_finite', 'normalize_longitude', 'round_half_up',
]

from datetime import datetime, timezone
import math

from topocoords.exceptions import InvalidInputError
from topocoords.utils.logging import warn_once


def default_to_zulu(dt: datetime) -> datetime:
    """Add Zulu/UTC as timezone, if timezone not present"""
    if not dt.tzinfo:
        warn_once(
            'Datetime does not contain timezone information; Zulu/UTC time assumed. '
            '(this warning will not repeat)'
        )
        return dt.replace(tzinfo=timezone.utc)

    return dt


def ensure_finite(**values: float) -> None:
    """
    Raise InvalidInputError naming the first keyword whose value is NaN or infinite.

    Example:
        ensure_finite(east=1.0, north=float('nan'))  # raises, mentions 'north'
    """
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidInputError(f'{name} must be a finite number, got {value!r}')


def normalize_longitude(longitude: float) -> float:
    """
    Wraps a longitude into (-180, 180]. Values already inside the range are
    returned untouched so that no rounding error is introduced.

    Args:
        longitude:
            A longitude, in degrees

    Returns:
        float
    """
    if -180 < longitude <= 180:
        return longitude

    value = (longitude + 180) % 360 - 180
    if value == -180:
        value = 180.

    return value


def round_half_up(value: float, precision) -> float:
    """
    Rounds numbers to the nearest whole, where a value exactly between the two nearest
    wholes is rounded to the higher whole.

    Args:
        value:
            The float value to be rounded
        precision:
            The precision to round the float value to

    """
    mod = value + 10 ** -(precision + 12)

    return round(mod, precision)
