"""
Argument validation shared by the engines.

Every check raises ConfigurationError and never mutates anything, so callers
can validate first and assign afterwards.
"""

import logging
import math
from numbers import Integral, Real

import numpy as np

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _reject(message: str):
    logger.debug(f"Rejected configuration: {message}")
    raise ConfigurationError(message)


def validate_count(value, name: str, minimum: int = 0) -> int:
    """
    Validate an integral count such as a window size or an observation count.

    Accepts ints and integral floats (``3.0``); rejects bools, strings, NaN,
    infinities, fractional values and values below ``minimum``.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        _reject(f"{name} must be numeric, got {type(value).__name__}")
    if isinstance(value, Integral):
        value = int(value)
    else:
        if math.isnan(value) or math.isinf(value):
            _reject(f"{name} must be a finite number, got {value}")
        if value != int(value):
            _reject(f"{name} must be an integer, got {value}")
    if value < minimum:
        _reject(f"{name} must be at least {minimum}, got {value}")
    return int(value)


def validate_numeric_array(value, name: str, ndim: int) -> np.ndarray:
    """
    Convert a list, tuple or ndarray of real numbers into a float64 copy.

    Args:
        value: Candidate array
        name: Argument name used in error messages
        ndim: Required dimensionality (1 for vectors, 2 for square matrices)

    Returns:
        A new float64 array; the caller's object is never aliased.
    """
    if not isinstance(value, (list, tuple, np.ndarray)):
        _reject(f"{name} must be an array, got {type(value).__name__}")

    try:
        array = np.array(value)
    except ValueError as err:
        raise ConfigurationError(f"{name} must be a rectangular array: {err}") from err

    if array.size == 0:
        return np.zeros((0,) * ndim, dtype=np.float64)

    if not (
        np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)
    ) or array.dtype == np.bool_:
        _reject(f"{name} must contain only real numbers, got dtype {array.dtype}")

    if array.ndim != ndim:
        _reject(f"{name} must be {ndim}-dimensional, got shape {array.shape}")

    if ndim == 2 and array.shape[0] != array.shape[1]:
        _reject(f"{name} must be square, got shape {array.shape}")

    return array.astype(np.float64)
