"""
Exception hierarchy for multilinear fitting.

Every failure carries an ErrorKind tag so callers can branch on the
category without parsing messages.
"""

from enum import Enum


class ErrorKind(Enum):
    """Category of a fitting error."""
    BADLEN = "badlen"    # Dimension / length mismatch
    NOTSQR = "notsqr"    # Matrix is not square
    INVAL = "inval"      # Invalid argument value
    DOM = "dom"          # Singular regularization operator


class MultifitError(Exception):
    """Base class for all pymultifit errors."""
    kind: ErrorKind = None


class DimensionError(MultifitError, ValueError):
    """Array lengths or matrix dimensions are inconsistent."""
    kind = ErrorKind.BADLEN


class NotSquareError(MultifitError, ValueError):
    """A matrix that must be square is not."""
    kind = ErrorKind.NOTSQR


class InvalidArgumentError(MultifitError, ValueError):
    """An argument is outside its allowed range."""
    kind = ErrorKind.INVAL


class SingularRegularizationError(MultifitError, ArithmeticError):
    """A per-parameter regularization entry is zero."""
    kind = ErrorKind.DOM


__all__ = [
    'ErrorKind',
    'MultifitError',
    'DimensionError',
    'NotSquareError',
    'InvalidArgumentError',
    'SingularRegularizationError',
]
