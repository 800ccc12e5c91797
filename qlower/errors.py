"""Exception types raised by :mod:`qlower`.

Every error derives from :class:`QlowerError` and from the builtin exception
closest in meaning, so callers may catch either.
"""

from __future__ import annotations


class QlowerError(Exception):
    """Base class for all errors raised by the package."""


class ArityMismatchError(QlowerError, ValueError):
    """Raised when the number of targets does not match an operation's arity."""


class InvalidTargetError(QlowerError, ValueError):
    """Raised for non-positive or repeated target indices."""


class NonGateOperatorError(QlowerError, TypeError):
    """Raised when a pure operator is pushed directly into a circuit."""


class NonInvertibleError(QlowerError, TypeError):
    """Raised when the inverse of a non-invertible operation is requested."""


class NonExponentiableError(QlowerError, TypeError):
    """Raised when a power of a non-unitary operation is requested."""


class NonUnitaryError(QlowerError, TypeError):
    """Raised when a unitary matrix is requested for a non-unitary operation."""


class OutOfRangeParameterError(QlowerError, ValueError):
    """Raised when a concrete parameter lies outside its allowed range."""


class UnboundParameterError(QlowerError, ValueError):
    """Raised when a numeric value is required but free symbols remain."""


__all__ = [
    "QlowerError",
    "ArityMismatchError",
    "InvalidTargetError",
    "NonGateOperatorError",
    "NonInvertibleError",
    "NonExponentiableError",
    "NonUnitaryError",
    "OutOfRangeParameterError",
    "UnboundParameterError",
]
