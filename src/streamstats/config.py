"""
Engine configuration loaded from TOML.

Example file::

    [moving_variance]
    window = 20

    [correlation.series]
    price = 0          # position in a sequence record
    volume = "volume"  # key in a mapping record
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .accessors import accessor_from_spec
from .correlation import CorrelationEngine
from .exceptions import ConfigurationError
from .moving_variance import MovingVarianceEngine
from .validators import validate_count

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 5


@dataclass
class StatsConfig:
    """Settings for building engines."""

    window_size: int = DEFAULT_WINDOW_SIZE
    series: dict[str, int | str] = field(default_factory=dict)

    def __post_init__(self):
        self.window_size = validate_count(self.window_size, "window_size", minimum=2)
        for name, spec in self.series.items():
            if not isinstance(name, str) or not name:
                raise ConfigurationError(f"Series name must be a non-empty string, got {name!r}")
            accessor_from_spec(spec)


def load_config(path: str | Path) -> StatsConfig:
    """Read a StatsConfig from a TOML file; absent tables use defaults."""
    path = Path(path)
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as err:
            raise ConfigurationError(f"Invalid TOML in {path}: {err}") from err

    mv_section = data.get("moving_variance", {})
    corr_section = data.get("correlation", {})
    if not isinstance(mv_section, dict) or not isinstance(corr_section, dict):
        raise ConfigurationError(f"{path}: [moving_variance] and [correlation] must be tables")

    series = corr_section.get("series", {})
    if not isinstance(series, dict):
        raise ConfigurationError(f"{path}: [correlation.series] must be a table")

    config = StatsConfig(
        window_size=mv_section.get("window", DEFAULT_WINDOW_SIZE),
        series=dict(series),
    )
    logger.info(
        f"Loaded config from {path}: window={config.window_size}, "
        f"series={list(config.series)}"
    )
    return config


def build_moving_variance(config: StatsConfig) -> MovingVarianceEngine:
    return MovingVarianceEngine(config.window_size)


def build_correlation(config: StatsConfig) -> CorrelationEngine:
    """Create a CorrelationEngine with one accessor per configured series."""
    engine = CorrelationEngine()
    for name, spec in config.series.items():
        engine.set_accessor(name, accessor_from_spec(spec))
    return engine
