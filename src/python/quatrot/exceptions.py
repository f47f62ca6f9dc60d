"""
===============================================================================
QUATROT - Exception Hierarchy
===============================================================================
Every error raised by the library derives from QuatRotError and also from the
closest built-in exception, so callers may catch either.
===============================================================================
"""


class QuatRotError(Exception):
    """Base class for all quatrot errors."""


class DegenerateNormError(QuatRotError, ValueError):
    """
    Raised when a zero-magnitude vector or quaternion has to be normalized.

    Also raised by Quaternion.rotate when the rotating quaternion has zero
    norm, since the rotation formula divides by the squared norm.
    """


class MatrixIndexError(QuatRotError, IndexError):
    """Raised on out-of-range (row, col) access through the matrix adapter."""


class ConfigError(QuatRotError, ValueError):
    """Raised when a batch configuration file is malformed or incomplete."""
