"""
Basic usage examples for streamstats.

Demonstrates the two engines, the stream adapter and checkpoint/resume of the
correlation state.
"""

import numpy as np

from streamstats import (
    CorrelationEngine,
    MovingVarianceEngine,
    index_accessor,
    key_accessor,
    pipe,
)


def example_moving_variance():
    """Sliding-window variance of a synthetic sensor signal."""
    print("=== Moving Variance ===")

    signal = create_test_signal()
    engine = MovingVarianceEngine(window_size=20)

    variances = list(pipe(signal, engine))

    print(f"Input values: {len(signal)}")
    print(f"Emitted variances: {len(variances)}")
    print(f"Last window variance: {variances[-1]:.4f}")
    return variances


def example_correlation():
    """Correlation between two fields of dict records."""
    print("\n=== Streaming Correlation ===")

    rng = np.random.default_rng(0)
    engine = (
        CorrelationEngine()
        .set_accessor("price", key_accessor("price"))
        .set_accessor("volume", key_accessor("volume"))
    )

    outputs = []
    stream = engine.stream().on_data(outputs.append)
    for _ in range(500):
        price = rng.normal(100.0, 2.0)
        stream.write({"price": price, "volume": 3.0 * price + rng.normal(0.0, 4.0)})
    stream.end()

    print(f"Correlation matrix after {engine.get_num_values()} ticks:")
    print(outputs[-1])
    return outputs[-1]


def example_checkpoint_resume():
    """Seed a new engine from another engine's accumulator state."""
    print("\n=== Checkpoint / Resume ===")

    data = np.random.default_rng(1).normal(size=(100, 2))

    engine = CorrelationEngine()
    engine.set_accessor("a", index_accessor(0)).set_accessor("b", index_accessor(1))
    engine.fold_array(data[:50])

    checkpoint = {
        "cov": engine.get_cov().tolist(),
        "means": engine.get_means().tolist(),
        "num_values": engine.get_num_values(),
    }

    resumed = CorrelationEngine()
    resumed.set_accessor("a", index_accessor(0)).set_accessor("b", index_accessor(1))
    resumed.set_cov(checkpoint["cov"]).set_means(checkpoint["means"])
    resumed.set_num_values(checkpoint["num_values"])

    for row in data[50:]:
        result = resumed.update(row)

    print(f"Resumed correlation: {result[0, 1]:.6f}")
    print(f"Direct correlation:  {np.corrcoef(data.T)[0, 1]:.6f}")
    return result


def create_test_signal(n=1000):
    """Noise whose amplitude grows halfway through."""
    rng = np.random.default_rng(42)
    scale = np.where(np.arange(n) < n // 2, 1.0, 3.0)
    return rng.normal(0.0, 1.0, size=n) * scale


if __name__ == "__main__":
    example_moving_variance()
    example_correlation()
    example_checkpoint_resume()
