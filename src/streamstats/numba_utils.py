"""
Numba-optimized kernels for folding whole arrays through the running statistics.

These use the same recurrences as the item-at-a-time engines, so a block folded
here leaves the accumulators where the equivalent sequence of updates would.
"""
import numpy as np
from numba import njit


@njit(cache=True)
def moving_variance_kernel(values, window):
    """
    Sliding-window sample variance of a 1-D float64 array.

    Returns an array with ``len(values) - window + 1`` entries, or an empty
    array when there are fewer values than the window holds.
    """
    n = values.shape[0]
    if n < window:
        return np.empty(0, dtype=np.float64)

    result = np.empty(n - window + 1, dtype=np.float64)
    mean = 0.0
    sos = 0.0

    # Warm-up: plain Welford over the first window
    for i in range(window):
        delta = values[i] - mean
        mean += delta / (i + 1)
        sos += delta * (values[i] - mean)
    result[0] = sos / (window - 1)

    for i in range(window, n):
        new_val = values[i]
        old_val = values[i - window]
        delta = new_val - old_val
        old_delta = old_val - mean
        mean += delta / window
        new_delta = new_val - mean
        sos += delta * (old_delta + new_delta)
        result[i - window + 1] = sos / (window - 1)

    return result


@njit(cache=True)
def welford_fold_kernel(data, means, comoments, count):
    """
    Fold rows of ``data`` (observations x series) into running accumulators.

    ``means`` and ``comoments`` are updated in place. Returns the new
    observation count.
    """
    n_rows, n_series = data.shape
    delta = np.empty(n_series, dtype=np.float64)

    for r in range(n_rows):
        count += 1
        for i in range(n_series):
            delta[i] = data[r, i] - means[i]
        for i in range(n_series):
            means[i] += delta[i] / count
        for i in range(n_series):
            for j in range(i, n_series):
                upd = (
                    delta[i] * (data[r, j] - means[j])
                    + delta[j] * (data[r, i] - means[i])
                ) / 2.0
                comoments[i, j] += upd
                if j != i:
                    comoments[j, i] += upd

    return count
