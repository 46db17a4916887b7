"""
Factories for common record accessors.

An accessor is any single-argument callable returning a number. These helpers
cover the usual record shapes: sequences (by position), mappings (by key) and
objects (by attribute).
"""

from operator import attrgetter, itemgetter
from typing import Any, Callable

from .exceptions import ConfigurationError


def index_accessor(index: int) -> Callable[[Any], float]:
    """Accessor reading ``record[index]`` from a sequence record."""
    getter = itemgetter(index)

    def accessor(record):
        return float(getter(record))

    accessor.__name__ = f"index_{index}"
    return accessor


def key_accessor(key: str) -> Callable[[Any], float]:
    """Accessor reading ``record[key]`` from a mapping record."""
    getter = itemgetter(key)

    def accessor(record):
        return float(getter(record))

    accessor.__name__ = f"key_{key}"
    return accessor


def attribute_accessor(name: str) -> Callable[[Any], float]:
    """Accessor reading ``record.<name>``; dotted paths are supported."""
    getter = attrgetter(name)

    def accessor(record):
        return float(getter(record))

    accessor.__name__ = f"attr_{name}"
    return accessor


def accessor_from_spec(spec) -> Callable[[Any], float]:
    """
    Build an accessor from a config value.

    Integers select a position in sequence records, strings select a key in
    mapping records.
    """
    if isinstance(spec, bool):
        raise ConfigurationError(f"Invalid accessor spec {spec!r}")
    if isinstance(spec, int):
        return index_accessor(spec)
    if isinstance(spec, str) and spec:
        return key_accessor(spec)
    raise ConfigurationError(
        f"Accessor spec must be an int index or a non-empty key, got {spec!r}"
    )
