"""Concrete-or-symbolic scalar helpers.

Gate parameters are either plain numbers (``int``, ``float``, ``complex`` or
:class:`fractions.Fraction`) or Qiskit :class:`~qiskit.circuit.ParameterExpression`
objects.  The helpers below are the only place where the two cases are told
apart; the rest of the package treats parameters as opaque values supporting
``+``, ``*`` and substitution.
"""

from __future__ import annotations

from fractions import Fraction
from numbers import Number
from typing import Any, Iterable, Mapping, Set, Union

from qiskit.circuit import Parameter, ParameterExpression

from .errors import UnboundParameterError

Scalar = Union[int, float, complex, Fraction, ParameterExpression]


def is_symbolic(value: Any) -> bool:
    """Return ``True`` if ``value`` still contains free symbols."""

    return isinstance(value, ParameterExpression) and bool(value.parameters)


def is_concrete(value: Any) -> bool:
    return not is_symbolic(value)


def to_number(value: Scalar) -> int | float | complex | Fraction:
    """Collapse ``value`` to a Python number.

    Raises
    ------
    UnboundParameterError
        If ``value`` is an expression with unbound parameters.
    """

    if isinstance(value, ParameterExpression):
        if value.parameters:
            names = sorted(p.name for p in value.parameters)
            raise UnboundParameterError(
                f"Expression {value} has unbound parameters: {', '.join(names)}"
            )
        number = complex(value)
        return number.real if number.imag == 0 else number
    if isinstance(value, Number):
        return value
    raise TypeError(f"Unsupported parameter value {value!r}")


def to_float(value: Scalar) -> float:
    """Return ``value`` as a real float, rejecting complex numbers."""

    number = to_number(value)
    if isinstance(number, complex):
        if abs(number.imag) > 1e-12:
            raise TypeError(f"Expected a real parameter, got {number}")
        return float(number.real)
    return float(number)


def scale(value: Scalar, factor: int | float | Fraction) -> Scalar:
    """Return ``value * factor`` without mixing fractions into expressions."""

    if isinstance(value, ParameterExpression):
        return value * float(factor)
    return value * factor


def substitute(value: Scalar, bindings: Mapping[Parameter, Any]) -> Scalar:
    """Substitute ``bindings`` into ``value``.

    Only the parameters actually present in ``value`` are assigned.  If no
    free parameters remain the result is collapsed to a plain number.
    """

    if not isinstance(value, ParameterExpression):
        return value
    result = value
    for param, bound in bindings.items():
        if param in result.parameters:
            result = result.assign(param, bound)
    if not result.parameters:
        return to_number(result)
    return result


def free_parameters(values: Iterable[Any]) -> Set[Parameter]:
    """Return the set of unbound parameters appearing in ``values``."""

    found: Set[Parameter] = set()
    for value in values:
        if isinstance(value, ParameterExpression):
            found.update(value.parameters)
    return found


def format_scalar(value: Scalar) -> str:
    """Return a short human readable representation of ``value``."""

    if isinstance(value, ParameterExpression):
        return str(value)
    if isinstance(value, Fraction):
        return f"{value.numerator}/{value.denominator}" if value.denominator != 1 else str(value.numerator)
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


__all__ = [
    "Scalar",
    "Parameter",
    "ParameterExpression",
    "is_symbolic",
    "is_concrete",
    "to_number",
    "to_float",
    "scale",
    "substitute",
    "free_parameters",
    "format_scalar",
]
