"""
Moving (sliding-window) variance over a stream of numbers.

The engine keeps the last ``window_size`` values in a ring buffer together with
the window mean and sum of squared deviations, and updates both in O(1) per
value. Once the window has filled, every update emits the Bessel-corrected
sample variance of the values currently in the window.
"""

import logging

import numpy as np

from .numba_utils import moving_variance_kernel
from .ring_buffer import RingBuffer
from .streams import StatsStream
from .validators import validate_count

# Configure logging
logger = logging.getLogger(__name__)


class MovingVarianceEngine:
    """
    Sliding-window sample variance.

    For N input values the engine emits ``max(0, N - window_size + 1)``
    variances: nothing during warm-up, then one per value.
    """

    def __init__(self, window_size: int):
        self._window = validate_count(window_size, "window_size", minimum=2)
        self._buffer = RingBuffer(self._window)
        self._count = 0
        self._mean = 0.0
        self._sos = 0.0
        self._full = False

        logger.info(f"Moving variance engine created with window size {self._window}")

    @property
    def window_size(self) -> int:
        return self._window

    @property
    def count_seen(self) -> int:
        """Total number of values ingested, including evicted ones."""
        return self._count

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def sum_sq_dev(self) -> float:
        return self._sos

    @property
    def is_full(self) -> bool:
        return self._full

    @property
    def variance(self) -> float | None:
        """Variance of the current window, or None during warm-up."""
        if not self._full:
            return None
        return self._sos / (self._window - 1)

    def values(self) -> np.ndarray:
        """Snapshot of the buffered values, oldest first."""
        return self._buffer.to_array()

    def update(self, value: float) -> float | None:
        """
        Ingest one value.

        Args:
            value: New data value

        Returns:
            The window variance once the window is full, otherwise None.
        """
        value = float(value)

        if not self._full:
            self._buffer.push(value)
            self._count += 1
            delta = value - self._mean
            self._mean += delta / self._count

            # Sum of squared differences
            self._sos += delta * (value - self._mean)

            if self._count == self._window:
                self._full = True
                logger.debug(f"Window of {self._window} values filled")
                return self._sos / (self._window - 1)
            return None

        old_value = self._buffer.push(value)
        self._count += 1

        delta = value - old_value
        old_delta = old_value - self._mean
        self._mean += delta / self._window
        new_delta = value - self._mean
        self._sos += delta * (old_delta + new_delta)

        return self._sos / (self._window - 1)

    def update_many(self, values) -> list[float]:
        """Feed an iterable of values and collect every emitted variance."""
        emitted = []
        for value in values:
            result = self.update(value)
            if result is not None:
                emitted.append(result)
        return emitted

    def stream(self) -> StatsStream:
        """Return a stream adapter bound to this engine."""
        return StatsStream(self)

    def __repr__(self):
        return (
            f"MovingVarianceEngine(window_size={self._window}, "
            f"count_seen={self._count}, full={self._full})"
        )


def moving_variance(values, window_size: int) -> np.ndarray:
    """
    Moving variance of a whole array in one pass.

    Args:
        values: 1-D sequence of numbers
        window_size: Window length (>= 2)

    Returns:
        Array of ``max(0, len(values) - window_size + 1)`` sample variances,
        identical to what MovingVarianceEngine would emit for the same input.
    """
    window = validate_count(window_size, "window_size", minimum=2)
    data = np.ascontiguousarray(values, dtype=np.float64)
    if data.ndim != 1:
        raise ValueError(f"values must be 1-dimensional, got shape {data.shape}")
    return moving_variance_kernel(data, window)
