"""
Item-at-a-time stream adapter for the statistics engines.

A StatsStream accepts items through ``write``, forwards each one to the engine's
``update`` and passes any emitted result to the registered data callbacks.
Warm-up updates that emit nothing produce no callback.
"""

import logging
from typing import Any, Callable, Iterable, Iterator

from .exceptions import StreamClosedError

logger = logging.getLogger(__name__)


class StatsStream:
    """Push-style transform stream wrapping an engine with an ``update`` method."""

    def __init__(self, engine):
        self.engine = engine
        self._data_callbacks: list[Callable[[Any], None]] = []
        self._end_callbacks: list[Callable[[], None]] = []
        self._ended = False
        self.items_written = 0
        self.items_emitted = 0

    @property
    def ended(self) -> bool:
        return self._ended

    def on_data(self, callback: Callable[[Any], None]) -> "StatsStream":
        self._data_callbacks.append(callback)
        return self

    def on_end(self, callback: Callable[[], None]) -> "StatsStream":
        self._end_callbacks.append(callback)
        return self

    def write(self, item) -> Any:
        """
        Push one item through the engine.

        Returns:
            The emitted value, or None when the engine emitted nothing.
        """
        if self._ended:
            raise StreamClosedError("write() called after end()")

        self.items_written += 1
        result = self.engine.update(item)
        if result is None:
            return None

        self.items_emitted += 1
        for callback in self._data_callbacks:
            callback(result)
        return result

    def end(self):
        """Signal end of input. Calling it again is a no-op."""
        if self._ended:
            return
        self._ended = True
        logger.debug(
            f"Stream ended: {self.items_written} written, {self.items_emitted} emitted"
        )
        for callback in self._end_callbacks:
            callback()

    def __repr__(self):
        return f"StatsStream({self.engine!r}, ended={self._ended})"


def pipe(records: Iterable, engine) -> Iterator:
    """Yield every value the engine emits while consuming ``records``."""
    for record in records:
        result = engine.update(record)
        if result is not None:
            yield result
