"""
Exception types for the exposure enhancement pipeline.

Only configuration problems are raised to the caller. Degenerate image
content (empty regions, flat luminance, black frames) is absorbed by
epsilon floors inside the algorithms.
"""


class ExposureEnhancerError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfigurationError(ExposureEnhancerError, ValueError):
    """Raised when parameters or inputs are rejected before processing."""
