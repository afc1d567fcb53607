"""
Orderable values accepted by the tree engines.
"""

import math
from numbers import Real
from typing import Union

from treetrace.models.exceptions import InvalidValueError

# Values double as keys; only real numbers are totally ordered here.
Orderable = Union[int, float]


def validate_value(value: object) -> Orderable:
    """
    Reject values that would silently corrupt the ordering invariant.

    Args:
        value: Candidate value for insert, delete or search.

    Returns:
        The value, unchanged.

    Raises:
        InvalidValueError: If the value is None, a bool, not a real number, or NaN.
    """
    if value is None:
        raise InvalidValueError(value, "value is required")
    if isinstance(value, bool):
        raise InvalidValueError(value, "booleans are not tree values")
    if not isinstance(value, Real):
        raise InvalidValueError(value, f"expected a real number, got {type(value).__name__}")
    if math.isnan(value):
        raise InvalidValueError(value, "NaN is not orderable")
    return value
