"""Base classes shared by every quantum operation.

An :class:`Operation` has a fixed arity: ``num_qubits`` qubit targets,
``num_bits`` classical bit targets and ``num_zvars`` z-register targets.  The
arity is part of the value and never changes after construction.

Every concrete subclass carries a unique :attr:`Operation.name` which doubles
as its serialisation tag.  Subclasses register themselves in
:data:`OPERATIONS` when they are defined, so the set of operation kinds known
to the codec is always the set of classes in the package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Set, Tuple, Type

import numpy as np

from .errors import NonExponentiableError, NonInvertibleError, NonUnitaryError
from .params import Parameter, format_scalar, free_parameters, substitute

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .circuit import Circuit


OPERATIONS: Dict[str, Type["Operation"]] = {}


class Operation:
    """Abstract quantum operation.

    Subclasses define ``name`` and either class level ``_num_qubits``,
    ``_num_bits`` and ``_num_zvars`` or instance attributes with the same
    names.  Parametric operations list their parameter attribute names in
    ``parnames``.
    """

    name: str = ""
    parnames: Tuple[str, ...] = ()
    is_unitary: bool = False
    # True for operations that wrap another one in their ``op`` attribute
    wraps_operation: bool = False

    _num_qubits: int = 0
    _num_bits: int = 0
    _num_zvars: int = 0

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.name:
            if cls.name in OPERATIONS and OPERATIONS[cls.name] is not cls:
                raise TypeError(f"Duplicate operation name {cls.name!r}")
            OPERATIONS[cls.name] = cls

    # ------------------------------------------------------------------
    # Arity
    # ------------------------------------------------------------------
    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def num_bits(self) -> int:
        return self._num_bits

    @property
    def num_zvars(self) -> int:
        return self._num_zvars

    @property
    def arity(self) -> Tuple[int, int, int]:
        """The ``(num_qubits, num_bits, num_zvars)`` triple."""
        return (self.num_qubits, self.num_bits, self.num_zvars)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    @property
    def parameters(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.parnames)

    def free_parameters(self) -> Set[Parameter]:
        return free_parameters(self.parameters)

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> "Operation":
        """Return a copy with ``bindings`` substituted into the parameters."""

        if not self.parnames:
            return self
        values = [substitute(v, bindings) for v in self.parameters]
        return self._with_parameters(values)

    def _with_parameters(self, values: list) -> "Operation":
        return type(self)(*values)

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------
    def matrix(self) -> np.ndarray:
        """Return the unitary matrix of the operation.

        Raises
        ------
        NonUnitaryError
            If the operation is not a unitary gate.
        """

        if not self.is_unitary:
            raise NonUnitaryError(f"{self} is not a unitary gate")
        return self._matrix()

    def _matrix(self) -> np.ndarray:
        raise NotImplementedError(f"No matrix defined for {type(self).__name__}")

    def inverse(self) -> "Operation":
        raise NonInvertibleError(f"{self} is not invertible")

    def power(self, exponent: Any) -> "Operation":
        raise NonExponentiableError(f"Cannot raise {self} to a power")

    def control(self, num_controls: int = 1) -> "Operation":
        from .modifiers import control

        return control(num_controls, self)

    def parallel(self, repeats: int) -> "Operation":
        from .modifiers import parallel

        return parallel(repeats, self)

    # Hooks used by the smart constructors in :mod:`qlower.modifiers`.
    # They return a simplified operation or ``None`` when no identity applies.
    def _inverse(self) -> "Operation | None":
        return None

    def _power(self, exponent: Any) -> "Operation | None":
        return None

    def decompose(self) -> "Circuit":
        """Lower the operation by one step into a :class:`~qlower.circuit.Circuit`."""

        from .decompositions import decompose

        return decompose(self)

    # ------------------------------------------------------------------
    # Codec hooks
    # ------------------------------------------------------------------
    def _fields(self) -> Dict[str, Any]:
        """Structural (non-parameter) fields needed to rebuild the operation."""
        return {}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> "Operation":
        return cls(*params)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------
    def _key(self) -> Tuple[Any, ...]:
        return self.parameters

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def __repr__(self) -> str:
        if not self.parnames:
            return self.name
        args = ", ".join(format_scalar(v) for v in self.parameters)
        return f"{self.name}({args})"


class Gate(Operation):
    """Unitary operation acting on qubits only."""

    is_unitary = True

    def inverse(self) -> Operation:
        from .modifiers import inverse

        return inverse(self)

    def power(self, exponent: Any) -> Operation:
        from .modifiers import power

        return power(self, exponent)


def is_wrapper(op: Operation) -> bool:
    """Return ``True`` for modifier operations wrapping another operation."""

    return isinstance(op, Operation) and op.wraps_operation


__all__ = ["OPERATIONS", "Operation", "Gate", "is_wrapper"]
