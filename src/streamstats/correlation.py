"""
Streaming Pearson product-moment correlation over named series.

Each incoming record is mapped to one value per series through user-supplied
accessor functions. Means and the co-moment matrix are updated with the
multivariate Welford recurrence, and the correlation matrix is derived from the
co-moments after every update.
"""

import logging
from typing import Any, Callable

import numpy as np

from .exceptions import ConfigurationError
from .numba_utils import welford_fold_kernel
from .streams import StatsStream
from .validators import validate_count, validate_numeric_array

logger = logging.getLogger(__name__)

Accessor = Callable[[Any], float]


def comoments_to_correlation(comoments: np.ndarray) -> np.ndarray:
    """
    Convert a co-moment (or covariance) matrix into a correlation matrix.

    The diagonal is exactly 1.0. Off-diagonal entries are NaN where either
    series has a zero sum of squared deviations, and clipped to [-1, 1]
    elsewhere.
    """
    comoments = np.asarray(comoments, dtype=np.float64)
    diag = np.diag(comoments)
    denom = np.sqrt(np.outer(diag, diag))

    with np.errstate(divide="ignore", invalid="ignore"):
        corr = np.where(denom > 0, comoments / denom, np.nan)

    corr = np.clip(corr, -1.0, 1.0)
    np.fill_diagonal(corr, 1.0)
    return corr


class CorrelationEngine:
    """
    Running means, co-moments and correlation for an arbitrary set of series.

    Series are ordered by accessor registration order. State can be read and
    seeded through the get_/set_ pairs; seeding does not cross-check the shapes
    of cov, means and num_values against each other.
    """

    def __init__(self):
        self._accessors: dict[str, Accessor] = {}
        self._means = np.zeros(0, dtype=np.float64)
        self._cov = np.zeros((0, 0), dtype=np.float64)
        self._num_values = 0

    # --- Accessors ---

    def set_accessor(self, name: str, fn: Accessor) -> "CorrelationEngine":
        """Register or replace the extraction function for a series."""
        if not callable(fn):
            logger.debug(f"Rejected accessor for '{name}': {fn!r}")
            raise ConfigurationError(
                f"Accessor for '{name}' must be callable, got {type(fn).__name__}"
            )
        self._accessors[name] = fn
        return self

    def get_accessor(self, name: str) -> Accessor | None:
        return self._accessors.get(name)

    def get_accessors(self) -> dict[str, Accessor]:
        return dict(self._accessors)

    @property
    def series_names(self) -> list[str]:
        return list(self._accessors)

    # --- State ---

    def get_cov(self) -> np.ndarray:
        """Co-moment matrix (sums of products of deviations, not divided by N-1)."""
        return self._cov.copy()

    def set_cov(self, matrix) -> "CorrelationEngine":
        self._cov = validate_numeric_array(matrix, "cov", ndim=2)
        logger.debug(f"Covariance accumulator seeded with shape {self._cov.shape}")
        return self

    def get_means(self) -> np.ndarray:
        return self._means.copy()

    def set_means(self, vector) -> "CorrelationEngine":
        self._means = validate_numeric_array(vector, "means", ndim=1)
        logger.debug(f"Means seeded with {self._means.size} series")
        return self

    def get_num_values(self) -> int:
        return self._num_values

    def set_num_values(self, n) -> "CorrelationEngine":
        self._num_values = validate_count(n, "num_values")
        logger.debug(f"Observation count seeded to {self._num_values}")
        return self

    def sample_covariance(self) -> np.ndarray:
        """Unbiased covariance matrix, NaN-filled while fewer than two values are seen."""
        if self._num_values < 2:
            return np.full_like(self._cov, np.nan)
        return self._cov / (self._num_values - 1)

    # --- Updates ---

    def _prepare_state(self) -> int:
        """Ensure accumulators match the registered series; return series count."""
        n_series = len(self._accessors)
        if n_series == 0:
            raise ConfigurationError(
                "No accessors registered; call set_accessor() before update()"
            )

        if self._means.size == 0:
            self._means = np.zeros(n_series, dtype=np.float64)
            logger.debug(f"Means initialised for series {self.series_names}")
        if self._cov.size == 0:
            self._cov = np.zeros((n_series, n_series), dtype=np.float64)
            logger.debug(f"Covariance initialised for series {self.series_names}")

        if self._means.shape != (n_series,) or self._cov.shape != (n_series, n_series):
            raise ConfigurationError(
                f"State shape (means {self._means.shape}, cov {self._cov.shape}) "
                f"does not match {n_series} registered series"
            )
        return n_series

    def update(self, record) -> np.ndarray:
        """
        Fold one record into the running statistics.

        Args:
            record: Arbitrary input record understood by the registered accessors

        Returns:
            The current correlation matrix (series x series).
        """
        self._prepare_state()

        # All values are extracted before any state changes
        x = np.array(
            [float(fn(record)) for fn in self._accessors.values()], dtype=np.float64
        )

        self._num_values += 1
        delta = x - self._means
        self._means += delta / self._num_values
        comoment = np.outer(delta, x - self._means)
        # Mirrored so cov stays exactly symmetric
        self._cov += (comoment + comoment.T) / 2

        return comoments_to_correlation(self._cov)

    def fold_array(self, data) -> np.ndarray | None:
        """
        Fold a block of observations (rows x series, canonical order) at once.

        Returns:
            The correlation matrix after the last row, or None for an empty block.
        """
        n_series = self._prepare_state()
        block = np.ascontiguousarray(data, dtype=np.float64)
        if block.ndim != 2 or block.shape[1] != n_series:
            raise ValueError(
                f"data must have shape (rows, {n_series}), got {block.shape}"
            )
        if block.shape[0] == 0:
            return None

        self._num_values = int(
            welford_fold_kernel(block, self._means, self._cov, self._num_values)
        )
        logger.debug(f"Folded {block.shape[0]} rows; {self._num_values} values seen")
        return comoments_to_correlation(self._cov)

    def stream(self) -> StatsStream:
        """Return a stream adapter bound to this engine."""
        return StatsStream(self)

    def __repr__(self):
        return (
            f"CorrelationEngine(series={self.series_names}, "
            f"num_values={self._num_values})"
        )
