"""Exact time quantities and conversion helpers.

All demand, supply, cost and response-time values handled by the library are
*time quantities*: non-negative ``int`` or ``fractions.Fraction`` values.
Floating-point numbers are rejected, since rounding could understate a bound.

Arrival, demand and supply models use a discrete time base in which the
smallest positive interval is ``EPSILON`` (one tick). Real-valued task
parameters are converted into ticks with ``to_ticks_up`` (costs, jitter) or
``to_ticks_down`` (separations, budgets), which keeps the bounds sound.
"""

from fractions import Fraction
from math import ceil, floor
from numbers import Rational
from typing import Union

Time = Union[int, Fraction]

# The smallest positive interval length in the discrete time base.
EPSILON = 1


class InvalidInputError(ValueError):
    """Raised when a time quantity or model parameter is malformed."""


def is_time(value) -> bool:
    """Return True if ``value`` is an exact, non-negative time quantity."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, Fraction)) and value >= 0


def check_time(value, name: str = "value") -> Time:
    """Validate a time quantity and return it unchanged.

    Args:
        value: The quantity to check.
        name: Parameter name used in the error message.

    Returns:
        ``value``, if it is a non-negative int or Fraction.

    Raises:
        InvalidInputError: If ``value`` is negative, a float, or not a number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, Fraction)):
        raise InvalidInputError(
            f"{name} must be an int or Fraction, got {type(value).__name__} ({value!r})"
        )
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    return value


def check_ticks(value, name: str = "value") -> int:
    """Validate a discrete (integer) time quantity."""
    check_time(value, name)
    if not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer number of ticks, got {value}")
    return value


def check_positive_ticks(value, name: str = "value") -> int:
    check_ticks(value, name)
    if value == 0:
        raise InvalidInputError(f"{name} must be positive")
    return value


def divide_with_ceil(a: int, b: int) -> int:
    """Integer division rounding towards positive infinity."""
    return -(-a // b)


def _exact(value) -> Fraction:
    # repr() gives the shortest decimal that round-trips, so 0.1 becomes 1/10
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def to_ticks_up(value: Union[float, Rational], resolution: int = 1) -> int:
    """Convert a real-valued duration into ticks, rounding up.

    Use this for quantities where overestimation is safe (execution costs,
    jitter, blocking terms).
    """
    if resolution <= 0:
        raise InvalidInputError("resolution must be positive")
    if value < 0:
        raise InvalidInputError(f"cannot convert negative duration {value}")
    return int(ceil(_exact(value) * resolution))


def to_ticks_down(value: Union[float, Rational], resolution: int = 1) -> int:
    """Convert a real-valued duration into ticks, rounding down.

    Use this for quantities where underestimation is safe (periods, minimum
    inter-arrival separations, reservation budgets).
    """
    if resolution <= 0:
        raise InvalidInputError("resolution must be positive")
    if value < 0:
        raise InvalidInputError(f"cannot convert negative duration {value}")
    return int(floor(_exact(value) * resolution))
