"""
streamstats - running variance and correlation for item-at-a-time data feeds.

Two independent engines, each driven by one ``update`` call per item:

- MovingVarianceEngine: sample variance over a fixed sliding window
- CorrelationEngine: running means, co-moments and Pearson correlation
  over named series extracted from composite records
"""

__version__ = "0.1.0"

from .accessors import accessor_from_spec as accessor_from_spec
from .accessors import attribute_accessor as attribute_accessor
from .accessors import index_accessor as index_accessor
from .accessors import key_accessor as key_accessor
from .config import DEFAULT_WINDOW_SIZE as DEFAULT_WINDOW_SIZE
from .config import StatsConfig as StatsConfig
from .config import build_correlation as build_correlation
from .config import build_moving_variance as build_moving_variance
from .config import load_config as load_config
from .correlation import CorrelationEngine as CorrelationEngine
from .correlation import comoments_to_correlation as comoments_to_correlation
from .exceptions import ConfigurationError as ConfigurationError
from .exceptions import StreamClosedError as StreamClosedError
from .moving_variance import MovingVarianceEngine as MovingVarianceEngine
from .moving_variance import moving_variance as moving_variance
from .ring_buffer import RingBuffer as RingBuffer
from .streams import StatsStream as StatsStream
from .streams import pipe as pipe


# Factory functions
def create_moving_variance(window_size: int = DEFAULT_WINDOW_SIZE) -> MovingVarianceEngine:
    """
    Create a moving variance engine.

    Returns:
        MovingVarianceEngine: New engine with the given window size
    """
    return MovingVarianceEngine(window_size)


def create_correlation(**accessors) -> CorrelationEngine:
    """
    Create a correlation engine with accessors registered in keyword order.

    Example:
        create_correlation(x=index_accessor(0), y=index_accessor(1))
    """
    engine = CorrelationEngine()
    for name, fn in accessors.items():
        engine.set_accessor(name, fn)
    return engine


__all__ = [
    # Engines
    "MovingVarianceEngine",
    "CorrelationEngine",
    "RingBuffer",
    # Streams
    "StatsStream",
    "pipe",
    # Functions
    "moving_variance",
    "comoments_to_correlation",
    "create_moving_variance",
    "create_correlation",
    # Accessors
    "index_accessor",
    "key_accessor",
    "attribute_accessor",
    "accessor_from_spec",
    # Configuration
    "DEFAULT_WINDOW_SIZE",
    "StatsConfig",
    "load_config",
    "build_moving_variance",
    "build_correlation",
    # Errors
    "ConfigurationError",
    "StreamClosedError",
]
