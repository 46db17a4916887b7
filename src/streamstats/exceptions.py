"""
Exception types raised by the streaming statistics engines.
"""


class ConfigurationError(ValueError):
    """Invalid construction argument, setter value or engine configuration."""


class StreamClosedError(RuntimeError):
    """Raised when writing to a stream that has already ended."""
