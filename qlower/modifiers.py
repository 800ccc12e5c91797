"""Operation modifiers: control, power, inverse and parallel repetition.

The classes :class:`Control`, :class:`Power`, :class:`Inverse` and
:class:`Parallel` flatten nested wrappers when constructed, so that e.g.
``Control(2, Control(1, X))`` is ``Control(3, X)`` and ``Inverse(Inverse(g))``
is ``g`` itself.  The lowercase functions :func:`control`, :func:`power`,
:func:`inverse` and :func:`parallel` additionally apply gate identities such
as ``power(X, 1/2) == SX`` and should be preferred in client code.
"""

from __future__ import annotations

import math
from fractions import Fraction
from numbers import Integral, Real
from typing import Any, Dict, Mapping, Set, Tuple

import numpy as np

from . import matrices
from .errors import NonExponentiableError, NonInvertibleError, NonUnitaryError
from .gates import (
    GateCustom,
    GateH,
    GateP,
    GateRX,
    GateRY,
    GateRZ,
    GateS,
    GateSWAP,
    GateSX,
    GateU,
    GateX,
    GateY,
    GateZ,
)
from .operation import Gate, Operation, is_wrapper
from .params import Parameter, format_scalar


def _check_count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{what} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{what} must be at least 1, got {value}")
    return int(value)


def _check_gate(op: Any, modifier: str) -> Operation:
    if not isinstance(op, Operation):
        raise TypeError(f"{modifier} expects an Operation, got {type(op).__name__}")
    if not op.is_unitary:
        raise NonUnitaryError(f"{modifier} requires a unitary gate, got {op}")
    if op.num_bits or op.num_zvars:
        raise NonUnitaryError(f"{modifier} cannot wrap {op} acting on classical targets")
    return op


def normalize_exponent(exponent: Any) -> Fraction | float:
    """Return ``exponent`` as a :class:`~fractions.Fraction` when exact.

    Integers, fractions and integral floats become fractions; other finite
    floats are kept as they are.

    Raises
    ------
    TypeError
        If ``exponent`` is not a real number.
    ValueError
        If ``exponent`` is negative or not finite.
    """

    if isinstance(exponent, bool) or not isinstance(exponent, Real):
        raise TypeError(f"Power exponent must be a real number, got {exponent!r}")
    if isinstance(exponent, (Integral, Fraction)):
        value: Fraction | float = Fraction(exponent)
    else:
        value = float(exponent)
        if not math.isfinite(value):
            raise ValueError(f"Power exponent must be finite, got {exponent!r}")
        if value.is_integer():
            value = Fraction(int(value))
    if value < 0:
        raise ValueError(f"Power exponent must be non-negative, got {exponent!r}")
    return value


def _is_integer(exponent: Fraction | float) -> bool:
    return isinstance(exponent, Fraction) and exponent.denominator == 1


def _wrapped_repr(op: Operation) -> str:
    return f"({op!r})" if is_wrapper(op) else repr(op)


class _Modifier(Gate):
    """Common behaviour of wrapper operations.

    Parameters of a modifier are the parameters of the wrapped operation;
    structural values such as the number of controls are not parameters.
    """

    op: Operation
    wraps_operation = True

    @property
    def parameters(self) -> Tuple[Any, ...]:
        return self.op.parameters

    def free_parameters(self) -> Set[Parameter]:
        return self.op.free_parameters()

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> Operation:
        return self._rewrap(self.op.evaluate(bindings))

    def _rewrap(self, op: Operation) -> Operation:
        raise NotImplementedError

    def _structure(self) -> Any:
        raise NotImplementedError

    def _key(self) -> tuple:
        return (self._structure(), self.op)


class Control(_Modifier):
    """Controlled version of a unitary gate.

    The first ``num_controls`` qubit targets are the controls, the remaining
    ones are the targets of the wrapped gate.

    Parameters
    ----------
    num_controls:
        Number of control qubits, at least one.
    op:
        Unitary gate to control.
    """

    name = "Control"

    def __new__(cls, num_controls: int, op: Operation) -> Operation:
        num_controls = _check_count(num_controls, "Number of controls")
        op = _check_gate(op, "Control")
        if isinstance(op, Control):
            num_controls += op.num_controls
            op = op.op
        self = object.__new__(cls)
        self.num_controls = num_controls
        self.op = op
        self._num_qubits = num_controls + op.num_qubits
        return self

    def _rewrap(self, op: Operation) -> Operation:
        return Control(self.num_controls, op)

    def _structure(self) -> int:
        return self.num_controls

    def _matrix(self) -> np.ndarray:
        return matrices.control_matrix(self.num_controls, self.op.matrix())

    def _inverse(self) -> Operation:
        return Control(self.num_controls, inverse(self.op))

    def _power(self, exponent: Any) -> Operation:
        return Control(self.num_controls, power(self.op, exponent))

    def _fields(self) -> Dict[str, Any]:
        return {"num_controls": self.num_controls, "op": self.op}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(int(fields["num_controls"]), fields["op"])

    def __repr__(self) -> str:
        prefix = "C" if self.num_controls == 1 else f"C{self.num_controls}"
        return prefix + _wrapped_repr(self.op)


class Power(_Modifier):
    """Non-negative power of a unitary gate.

    The exponent is structural: it is not listed in :attr:`parameters` and
    is not substituted by :meth:`evaluate`.
    """

    name = "Power"

    def __new__(cls, op: Operation, exponent: Any) -> Operation:
        op = _check_gate(op, "Power")
        exponent = normalize_exponent(exponent)
        if isinstance(op, Power):
            return Power(op.op, op.exponent * exponent)
        if isinstance(op, Control):
            return Control(op.num_controls, Power(op.op, exponent))
        if isinstance(op, Parallel) and _is_integer(exponent):
            return Parallel(op.repeats, Power(op.op, exponent))
        self = object.__new__(cls)
        self.op = op
        self.exponent = exponent
        self._num_qubits = op.num_qubits
        return self

    def _rewrap(self, op: Operation) -> Operation:
        return Power(op, self.exponent)

    def _structure(self) -> Any:
        return self.exponent

    def _matrix(self) -> np.ndarray:
        return matrices.matrix_power(self.op.matrix(), self.exponent)

    def _power(self, exponent: Any) -> Operation:
        return power(self.op, self.exponent * exponent)

    def _fields(self) -> Dict[str, Any]:
        return {"exponent": self.exponent, "op": self.op}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["op"], fields["exponent"])

    def __repr__(self) -> str:
        exp = format_scalar(self.exponent)
        if not _is_integer(self.exponent):
            exp = f"({exp})"
        return f"{_wrapped_repr(self.op)}^{exp}"


class Inverse(_Modifier):
    """Adjoint of a unitary gate."""

    name = "Inverse"

    def __new__(cls, op: Operation) -> Operation:
        if isinstance(op, Operation) and not op.is_unitary:
            raise NonInvertibleError(f"{op} is not invertible")
        op = _check_gate(op, "Inverse")
        if isinstance(op, Inverse):
            return op.op
        if isinstance(op, Control):
            return Control(op.num_controls, Inverse(op.op))
        if isinstance(op, Parallel):
            return Parallel(op.repeats, Inverse(op.op))
        self = object.__new__(cls)
        self.op = op
        self._num_qubits = op.num_qubits
        return self

    def _rewrap(self, op: Operation) -> Operation:
        return Inverse(op)

    def _structure(self) -> None:
        return None

    def _matrix(self) -> np.ndarray:
        return matrices.adjoint(self.op.matrix())

    def _inverse(self) -> Operation:
        return self.op

    def _fields(self) -> Dict[str, Any]:
        return {"op": self.op}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["op"])

    def __repr__(self) -> str:
        return f"{_wrapped_repr(self.op)}†"


class Parallel(_Modifier):
    """The same gate applied to ``repeats`` disjoint blocks of qubits."""

    name = "Parallel"

    def __new__(cls, repeats: int, op: Operation) -> Operation:
        repeats = _check_count(repeats, "Number of repeats")
        op = _check_gate(op, "Parallel")
        if isinstance(op, Parallel):
            repeats *= op.repeats
            op = op.op
        self = object.__new__(cls)
        self.repeats = repeats
        self.op = op
        self._num_qubits = repeats * op.num_qubits
        return self

    def _rewrap(self, op: Operation) -> Operation:
        return Parallel(self.repeats, op)

    def _structure(self) -> int:
        return self.repeats

    def _matrix(self) -> np.ndarray:
        return matrices.kron_all([self.op.matrix()] * self.repeats)

    def _inverse(self) -> Operation:
        return Parallel(self.repeats, inverse(self.op))

    def _power(self, exponent: Any) -> Operation | None:
        if not _is_integer(exponent):
            return None
        return Parallel(self.repeats, power(self.op, exponent))

    def _fields(self) -> Dict[str, Any]:
        return {"repeats": self.repeats, "op": self.op}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(int(fields["repeats"]), fields["op"])

    def __repr__(self) -> str:
        return f"Parallel({self.repeats}, {self.op!r})"


# ----------------------------------------------------------------------
# Smart constructors
# ----------------------------------------------------------------------
def control(num_controls: int, op: Operation) -> Operation:
    """Return ``op`` controlled by ``num_controls`` qubits."""

    return Control(num_controls, op)


def power(op: Operation, exponent: Any) -> Operation:
    """Return ``op`` raised to ``exponent``, simplified where possible.

    Raises
    ------
    NonExponentiableError
        If ``op`` is not a unitary gate.
    """

    if not isinstance(op, Operation) or not op.is_unitary:
        raise NonExponentiableError(f"Cannot raise {op} to a power")
    exponent = normalize_exponent(exponent)
    if exponent == 1:
        return op
    simplified = op._power(exponent)
    if simplified is not None:
        return simplified
    return Power(op, exponent)


def inverse(op: Operation) -> Operation:
    """Return the inverse of ``op``, simplified where possible.

    Raises
    ------
    NonInvertibleError
        If ``op`` is not a unitary gate.
    """

    if not isinstance(op, Operation) or not op.is_unitary:
        raise NonInvertibleError(f"{op} is not invertible")
    simplified = op._inverse()
    if simplified is not None:
        return simplified
    return Inverse(op)


def parallel(repeats: int, op: Operation) -> Operation:
    """Return ``op`` repeated on ``repeats`` disjoint blocks of qubits."""

    if repeats == 1 and isinstance(op, Operation) and op.is_unitary:
        return op
    return Parallel(repeats, op)


def get_wrapped(op: Operation) -> Operation:
    """Return the operation directly wrapped by the modifier ``op``."""

    if not is_wrapper(op):
        raise TypeError(f"{op} is not a modifier")
    return op.op


# ----------------------------------------------------------------------
# Named controlled gates
# ----------------------------------------------------------------------
def CX() -> Control:
    return Control(1, GateX())


def CY() -> Control:
    return Control(1, GateY())


def CZ() -> Control:
    return Control(1, GateZ())


def CH() -> Control:
    return Control(1, GateH())


def CS() -> Control:
    return Control(1, GateS())


def CSX() -> Control:
    return Control(1, GateSX())


def CP(lam: Any) -> Control:
    return Control(1, GateP(lam))


def CRX(theta: Any) -> Control:
    return Control(1, GateRX(theta))


def CRY(theta: Any) -> Control:
    return Control(1, GateRY(theta))


def CRZ(lam: Any) -> Control:
    return Control(1, GateRZ(lam))


def CU(theta: Any, phi: Any, lam: Any, gamma: Any = 0) -> Control:
    return Control(1, GateU(theta, phi, lam, gamma))


def CSWAP() -> Control:
    """Fredkin gate."""
    return Control(1, GateSWAP())


def CCX() -> Control:
    """Toffoli gate."""
    return Control(2, GateX())


def CCZ() -> Control:
    return Control(2, GateZ())


def C3X() -> Control:
    return Control(3, GateX())


def CCustom(matrix: Any, num_controls: int = 1) -> Control:
    return Control(num_controls, GateCustom(matrix))


__all__ = [
    "Control",
    "Power",
    "Inverse",
    "Parallel",
    "control",
    "power",
    "inverse",
    "parallel",
    "get_wrapped",
    "normalize_exponent",
    "CX",
    "CY",
    "CZ",
    "CH",
    "CS",
    "CSX",
    "CP",
    "CRX",
    "CRY",
    "CRZ",
    "CU",
    "CSWAP",
    "CCX",
    "CCZ",
    "C3X",
    "CCustom",
]
