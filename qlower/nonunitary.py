"""Non-unitary operations: measurements, resets, barriers, noise and operators.

Pure operators (:class:`Operator`, :class:`Projector0`, ...) describe
mathematical objects rather than circuit actions.  They can only enter a
circuit wrapped in :class:`ExpectationValue`; pushing them directly raises
:class:`~qlower.errors.NonGateOperatorError`.
"""

from __future__ import annotations

import itertools
import math
from typing import Any, Dict, List, Mapping, Sequence, Set

import numpy as np

from . import matrices
from .errors import NonUnitaryError, OutOfRangeParameterError
from .generalized import PauliString
from .operation import Operation
from .params import Parameter, format_scalar, free_parameters, is_concrete, substitute, to_float


class Measure(Operation):
    """Z-basis measurement of one qubit into one classical bit."""

    name = "Measure"
    _num_qubits = 1
    _num_bits = 1


class Reset(Operation):
    """Reset a qubit to ``|0>``."""

    name = "Reset"
    _num_qubits = 1


class MeasureReset(Operation):
    """Measure a qubit into a bit, then flip the qubit back to ``|0>`` if it read 1."""

    name = "MeasureReset"
    _num_qubits = 1
    _num_bits = 1


class IfStatement(Operation):
    """Apply a gate only when the classical bits equal ``bitstring``.

    The qubit targets are those of the wrapped gate, followed by one bit
    target per character of ``bitstring``.

    Parameters
    ----------
    op:
        Unitary gate without classical targets.
    bitstring:
        Condition as a string of ``0`` and ``1``, or a sequence of bits.
    """

    name = "IfStatement"
    wraps_operation = True

    def __init__(self, op: Operation, bitstring: Any) -> None:
        if not isinstance(op, Operation) or not op.is_unitary:
            raise NonUnitaryError(f"IfStatement requires a unitary gate, got {op!r}")
        if op.num_bits or op.num_zvars:
            raise TypeError(f"IfStatement cannot wrap {op} acting on classical targets")
        if not isinstance(bitstring, str):
            bitstring = "".join(str(int(b)) for b in bitstring)
        if not bitstring or set(bitstring) - {"0", "1"}:
            raise ValueError(f"Condition must be a non-empty string of 0 and 1, got {bitstring!r}")
        self.op = op
        self.bitstring = bitstring
        self._num_qubits = op.num_qubits
        self._num_bits = len(bitstring)

    @property
    def parameters(self) -> tuple:
        return self.op.parameters

    def free_parameters(self) -> Set[Parameter]:
        return self.op.free_parameters()

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> Operation:
        return IfStatement(self.op.evaluate(bindings), self.bitstring)

    def _fields(self) -> Dict[str, Any]:
        return {"op": self.op, "bitstring": self.bitstring}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["op"], fields["bitstring"])

    def _key(self) -> tuple:
        return (self.bitstring, self.op)

    def __repr__(self) -> str:
        return f"IF(c=={self.bitstring}) {self.op!r}"


class Barrier(Operation):
    """Scheduling barrier over ``num_qubits`` qubits.

    Barriers have no effect on the state; they are their own inverse and act
    as the identity when a circuit unitary is reconstructed.
    """

    name = "Barrier"

    def __init__(self, num_qubits: int = 1) -> None:
        if num_qubits < 1:
            raise ValueError("Barrier must act on at least one qubit")
        self._num_qubits = int(num_qubits)

    def inverse(self) -> Operation:
        return self

    def _fields(self) -> Dict[str, Any]:
        return {"num_qubits": self.num_qubits}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(int(fields.get("num_qubits", 1)))

    def _key(self) -> tuple:
        return (self.num_qubits,)


# ----------------------------------------------------------------------
# Noise channels
# ----------------------------------------------------------------------
def _check_probability(value: Any, what: str) -> None:
    # Symbolic values are checked once they are bound.
    if not is_concrete(value):
        return
    number = to_float(value)
    if not 0.0 <= number <= 1.0:
        raise OutOfRangeParameterError(f"{what} must be in [0, 1], got {number}")


class KrausChannel(Operation):
    """Completely positive trace preserving map given by Kraus operators."""

    def krausmatrices(self) -> List[np.ndarray]:
        raise NotImplementedError


class Depolarizing(KrausChannel):
    r"""``n``-qubit depolarizing channel.

    With probability ``1 - p`` the state is untouched, otherwise one of the
    :math:`4^n - 1` non-identity Pauli strings is applied uniformly.
    """

    name = "Depolarizing"
    parnames = ("p",)

    def __init__(self, num_qubits: int, p: Any) -> None:
        if num_qubits < 1:
            raise ValueError("Depolarizing channel must act on at least one qubit")
        _check_probability(p, "Depolarizing probability")
        self._num_qubits = int(num_qubits)
        self.p = p

    def _with_parameters(self, values: list) -> Operation:
        return Depolarizing(self.num_qubits, values[0])

    def _fields(self) -> Dict[str, Any]:
        return {"num_qubits": self.num_qubits}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(int(fields["num_qubits"]), params[0])

    def _key(self) -> tuple:
        return (self.num_qubits, self.p)

    def krausmatrices(self) -> List[np.ndarray]:
        p = to_float(self.p)
        paulis = [matrices.IDENTITY, matrices.PAULI_X, matrices.PAULI_Y, matrices.PAULI_Z]
        strings = itertools.product(paulis, repeat=self.num_qubits)
        ops = [matrices.kron_all(s) for s in strings]
        others = len(ops) - 1
        return [math.sqrt(1 - p) * ops[0]] + [math.sqrt(p / others) * op for op in ops[1:]]


class AmplitudeDamping(KrausChannel):
    """Single qubit amplitude damping with decay probability ``gamma``."""

    name = "AmplitudeDamping"
    parnames = ("gamma",)
    _num_qubits = 1

    def __init__(self, gamma: Any) -> None:
        _check_probability(gamma, "Damping probability")
        self.gamma = gamma

    def krausmatrices(self) -> List[np.ndarray]:
        g = to_float(self.gamma)
        return [
            np.array([[1, 0], [0, math.sqrt(1 - g)]], dtype=complex),
            np.array([[0, math.sqrt(g)], [0, 0]], dtype=complex),
        ]


class MixedUnitary(KrausChannel):
    r"""Channel :math:`\rho \mapsto \sum_k p_k U_k \rho U_k^\dagger`.

    Parameters
    ----------
    probabilities:
        One probability per gate.  Concrete values must lie in ``[0, 1]``
        and sum to one.
    gates:
        Unitary gates, all acting on the same number of qubits.
    """

    name = "MixedUnitary"

    def __init__(self, probabilities: Sequence[Any], gates: Sequence[Operation]) -> None:
        probabilities = tuple(probabilities)
        gates = tuple(gates)
        if not probabilities or not gates:
            raise ValueError("Mixed unitary channel needs at least one gate")
        if len(probabilities) != len(gates):
            raise ValueError(
                f"Got {len(probabilities)} probabilities for {len(gates)} gates"
            )
        for gate in gates:
            if not isinstance(gate, Operation) or not gate.is_unitary:
                raise NonUnitaryError(f"Mixed unitary channel requires unitary gates, got {gate!r}")
        widths = {gate.num_qubits for gate in gates}
        if len(widths) != 1:
            raise ValueError("Gates of a mixed unitary channel act on different numbers of qubits")
        for p in probabilities:
            _check_probability(p, "Mixed unitary probability")
        if all(is_concrete(p) for p in probabilities):
            total = sum(to_float(p) for p in probabilities)
            if not math.isclose(total, 1.0, abs_tol=1e-12):
                raise OutOfRangeParameterError(f"Probabilities must sum to 1, got {total}")
        self.p = probabilities
        self.gates = gates
        self._num_qubits = widths.pop()

    @property
    def parameters(self) -> tuple:
        return self.p

    def free_parameters(self) -> Set[Parameter]:
        params = free_parameters(self.p)
        for gate in self.gates:
            params |= gate.free_parameters()
        return params

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> Operation:
        probabilities = [substitute(p, bindings) for p in self.p]
        return type(self)(probabilities, [g.evaluate(bindings) for g in self.gates])

    def probabilities(self) -> List[float]:
        return [to_float(p) for p in self.p]

    def unitarygates(self) -> List[Operation]:
        return list(self.gates)

    def krausmatrices(self) -> List[np.ndarray]:
        return [
            math.sqrt(p) * gate.matrix()
            for p, gate in zip(self.probabilities(), self.gates)
        ]

    def _fields(self) -> Dict[str, Any]:
        return {"probabilities": list(self.p), "gates": list(self.gates)}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["probabilities"], fields["gates"])

    def _key(self) -> tuple:
        return (self.p, self.gates)

    def __repr__(self) -> str:
        terms = ", ".join(f"({format_scalar(p)}, {g!r})" for p, g in zip(self.p, self.gates))
        return f"{self.name}({terms})"


class PauliNoise(MixedUnitary):
    """Mixed unitary channel whose gates are Pauli strings.

    ``PauliNoise([0.9, 0.1], ["II", "XZ"])`` applies ``XZ`` with
    probability ``0.1``.
    """

    name = "PauliNoise"

    def __init__(self, probabilities: Sequence[Any], paulis: Sequence[Any]) -> None:
        strings = [p if isinstance(p, PauliString) else PauliString(p) for p in paulis]
        super().__init__(probabilities, strings)

    def _fields(self) -> Dict[str, Any]:
        return {"probabilities": list(self.p), "paulis": [g.pauli for g in self.gates]}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["probabilities"], fields["paulis"])


# ----------------------------------------------------------------------
# Pure operators
# ----------------------------------------------------------------------
class PureOperator(Operation):
    """Matrix-valued operator that is neither a gate nor a channel."""

    def opmatrix(self) -> np.ndarray:
        raise NotImplementedError


class Operator(PureOperator):
    """Arbitrary ``2^n x 2^n`` operator."""

    name = "Operator"

    def __init__(self, matrix: Any) -> None:
        # adding 0.0 turns negative zeros into positive ones
        mat = np.array(matrix, dtype=complex) + 0.0
        self._num_qubits = matrices.num_qubits_of(mat)
        mat.setflags(write=False)
        self.M = mat

    def opmatrix(self) -> np.ndarray:
        return self.M.copy()

    def _fields(self) -> Dict[str, Any]:
        return {"matrix": self.M}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["matrix"])

    def _key(self) -> tuple:
        return (self.M.shape, self.M.tobytes())

    def __repr__(self) -> str:
        return f"Operator({self.num_qubits}-qubit)"


class _FixedOperator(PureOperator):
    _num_qubits = 1
    _opmatrix: np.ndarray

    def opmatrix(self) -> np.ndarray:
        return self._opmatrix.copy()


class Projector0(_FixedOperator):
    """Projector ``|0><0|``."""

    name = "Projector0"
    _opmatrix = np.array([[1, 0], [0, 0]], dtype=complex)


class Projector1(_FixedOperator):
    """Projector ``|1><1|``."""

    name = "Projector1"
    _opmatrix = np.array([[0, 0], [0, 1]], dtype=complex)


class SigmaMinus(_FixedOperator):
    """Lowering operator ``|0><1|``."""

    name = "SigmaMinus"
    _opmatrix = np.array([[0, 1], [0, 0]], dtype=complex)


class SigmaPlus(_FixedOperator):
    """Raising operator ``|1><0|``."""

    name = "SigmaPlus"
    _opmatrix = np.array([[0, 0], [1, 0]], dtype=complex)


class ExpectationValue(Operation):
    """Store ``<psi|op|psi>`` in a z-register.

    ``op`` may be a pure operator or a unitary gate acting on qubits only.
    """

    name = "ExpectationValue"
    _num_zvars = 1

    def __init__(self, op: Operation) -> None:
        if not isinstance(op, Operation) or not (isinstance(op, PureOperator) or op.is_unitary):
            raise TypeError(f"Expectation value requires an operator or a gate, got {op!r}")
        if op.num_bits or op.num_zvars:
            raise TypeError(f"Expectation value of {op} with classical targets")
        self.op = op
        self._num_qubits = op.num_qubits

    @property
    def parameters(self) -> tuple:
        return self.op.parameters

    def free_parameters(self) -> Set[Parameter]:
        return self.op.free_parameters()

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> Operation:
        return ExpectationValue(self.op.evaluate(bindings))

    def _fields(self) -> Dict[str, Any]:
        return {"op": self.op}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["op"])

    def _key(self) -> tuple:
        return (self.op,)

    def __repr__(self) -> str:
        return f"⟨{self.op!r}⟩"


__all__ = [
    "Measure",
    "Reset",
    "MeasureReset",
    "IfStatement",
    "Barrier",
    "KrausChannel",
    "Depolarizing",
    "AmplitudeDamping",
    "MixedUnitary",
    "PauliNoise",
    "PureOperator",
    "Operator",
    "Projector0",
    "Projector1",
    "SigmaMinus",
    "SigmaPlus",
    "ExpectationValue",
]
