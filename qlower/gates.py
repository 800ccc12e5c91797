"""Primitive (leaf) gates.

Each gate knows its closed-form matrix and the algebraic identities used by
the smart constructors :func:`~qlower.modifiers.inverse` and
:func:`~qlower.modifiers.power`, e.g. ``inverse(S) = SDG`` or
``power(X, 1/2) = SX``.  Elementary decompositions live in
:mod:`qlower.decompositions`.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Dict, Mapping

import numpy as np
from qiskit.synthesis import OneQubitEulerDecomposer

from . import matrices
from .errors import NonUnitaryError
from .operation import Gate, Operation
from .params import is_concrete, scale, to_float

_EULER = OneQubitEulerDecomposer(basis="U3")


def _is_integer(exponent: Any) -> bool:
    return isinstance(exponent, Fraction) and exponent.denominator == 1


def _cyclic_power(exponent: Any, cycle: Dict[int, "Operation"], period: int) -> "Operation | None":
    """Look up integer powers of gates of finite order."""

    if not _is_integer(exponent):
        return None
    return cycle.get(int(exponent) % period)


class SingleQubitGate(Gate):
    _num_qubits = 1


class GateID(SingleQubitGate):
    """Single qubit identity gate."""

    name = "ID"

    def _matrix(self) -> np.ndarray:
        return matrices.IDENTITY.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> Operation:
        return self


class GateX(SingleQubitGate):
    """Pauli X (NOT) gate."""

    name = "X"

    def _matrix(self) -> np.ndarray:
        return matrices.PAULI_X.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        if exponent == Fraction(1, 2):
            return GateSX()
        return _cyclic_power(exponent, {0: GateID(), 1: self}, 2)


class GateY(SingleQubitGate):
    """Pauli Y gate."""

    name = "Y"

    def _matrix(self) -> np.ndarray:
        return matrices.PAULI_Y.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        return _cyclic_power(exponent, {0: GateID(), 1: self}, 2)


class GateZ(SingleQubitGate):
    """Pauli Z gate."""

    name = "Z"

    def _matrix(self) -> np.ndarray:
        return matrices.PAULI_Z.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        if exponent == Fraction(1, 2):
            return GateS()
        if exponent == Fraction(1, 4):
            return GateT()
        return _cyclic_power(exponent, {0: GateID(), 1: self}, 2)


class GateH(SingleQubitGate):
    """Hadamard gate."""

    name = "H"

    def _matrix(self) -> np.ndarray:
        return matrices.HADAMARD.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        return _cyclic_power(exponent, {0: GateID(), 1: self}, 2)


class GateS(SingleQubitGate):
    """Phase gate ``S = Z^(1/2)``."""

    name = "S"

    def _matrix(self) -> np.ndarray:
        return matrices.S_MATRIX.copy()

    def _inverse(self) -> Operation:
        return GateSDG()

    def _power(self, exponent: Any) -> Operation:
        from .modifiers import power

        return power(GateZ(), exponent / 2)


class GateSDG(SingleQubitGate):
    """Adjoint of the ``S`` gate."""

    name = "SDG"

    def _matrix(self) -> np.ndarray:
        return matrices.adjoint(matrices.S_MATRIX)

    def _inverse(self) -> Operation:
        return GateS()

    def _power(self, exponent: Any) -> "Operation | None":
        return _cyclic_power(exponent, {0: GateID(), 1: self, 2: GateZ(), 3: GateS()}, 4)


class GateT(SingleQubitGate):
    """``T = Z^(1/4)`` gate."""

    name = "T"

    def _matrix(self) -> np.ndarray:
        return matrices.T_MATRIX.copy()

    def _inverse(self) -> Operation:
        return GateTDG()

    def _power(self, exponent: Any) -> Operation:
        from .modifiers import power

        return power(GateZ(), exponent / 4)


class GateTDG(SingleQubitGate):
    """Adjoint of the ``T`` gate."""

    name = "TDG"

    def _matrix(self) -> np.ndarray:
        return matrices.adjoint(matrices.T_MATRIX)

    def _inverse(self) -> Operation:
        return GateT()

    def _power(self, exponent: Any) -> "Operation | None":
        cycle = {0: GateID(), 1: self, 2: GateSDG(), 4: GateZ(), 6: GateS(), 7: GateT()}
        return _cyclic_power(exponent, cycle, 8)


class GateSX(SingleQubitGate):
    """Square root of X."""

    name = "SX"

    def _matrix(self) -> np.ndarray:
        return matrices.SX_MATRIX.copy()

    def _inverse(self) -> Operation:
        return GateSXDG()

    def _power(self, exponent: Any) -> Operation:
        from .modifiers import power

        return power(GateX(), exponent / 2)


class GateSXDG(SingleQubitGate):
    """Adjoint of the ``SX`` gate."""

    name = "SXDG"

    def _matrix(self) -> np.ndarray:
        return matrices.adjoint(matrices.SX_MATRIX)

    def _inverse(self) -> Operation:
        return GateSX()

    def _power(self, exponent: Any) -> "Operation | None":
        return _cyclic_power(exponent, {0: GateID(), 1: self, 2: GateX(), 3: GateSX()}, 4)


class _RotationGate(SingleQubitGate):
    """Single-parameter gate whose powers and inverse rescale the angle."""

    def _inverse(self) -> Operation:
        return type(self)(-self.parameters[0])

    def _power(self, exponent: Any) -> Operation:
        return type(self)(scale(self.parameters[0], exponent))


class GateP(_RotationGate):
    """Phase gate ``P(λ) = diag(1, e^{iλ})``."""

    name = "P"
    parnames = ("lam",)

    def __init__(self, lam: Any) -> None:
        self.lam = lam

    def _matrix(self) -> np.ndarray:
        return matrices.pmatrix(to_float(self.lam))


class GateRX(_RotationGate):
    name = "RX"
    parnames = ("theta",)

    def __init__(self, theta: Any) -> None:
        self.theta = theta

    def _matrix(self) -> np.ndarray:
        return matrices.rxmatrix(to_float(self.theta))


class GateRY(_RotationGate):
    name = "RY"
    parnames = ("theta",)

    def __init__(self, theta: Any) -> None:
        self.theta = theta

    def _matrix(self) -> np.ndarray:
        return matrices.rymatrix(to_float(self.theta))


class GateRZ(_RotationGate):
    name = "RZ"
    parnames = ("lam",)

    def __init__(self, lam: Any) -> None:
        self.lam = lam

    def _matrix(self) -> np.ndarray:
        return matrices.rzmatrix(to_float(self.lam))


class GateU(SingleQubitGate):
    r"""Generic single qubit gate :math:`e^{i\gamma} U(\theta, \phi, \lambda)`.

    Parameters
    ----------
    theta, phi, lam:
        Euler angles in radians.
    gamma:
        Global phase, ``0`` by default.
    """

    name = "U"
    parnames = ("theta", "phi", "lam", "gamma")

    def __init__(self, theta: Any, phi: Any, lam: Any, gamma: Any = 0) -> None:
        self.theta = theta
        self.phi = phi
        self.lam = lam
        self.gamma = gamma

    def _matrix(self) -> np.ndarray:
        return matrices.umatrix(
            to_float(self.theta), to_float(self.phi), to_float(self.lam), to_float(self.gamma)
        )

    def _inverse(self) -> Operation:
        return GateU(-self.theta, -self.lam, -self.phi, -self.gamma)

    def _power(self, exponent: Any) -> "Operation | None":
        # Powers of a concrete U gate are again U gates; read the Euler
        # angles back from the powered matrix.
        if not all(is_concrete(v) for v in self.parameters):
            return None
        mat = matrices.matrix_power(self._matrix(), exponent)
        theta, phi, lam, phase = _EULER.angles_and_phase(mat)
        return GateU(float(theta), float(phi), float(lam), float(phase))


class GateU1(_RotationGate):
    """Legacy ``U1(λ)``, the same matrix as :class:`GateP`."""

    name = "U1"
    parnames = ("lam",)

    def __init__(self, lam: Any) -> None:
        self.lam = lam

    def _matrix(self) -> np.ndarray:
        return matrices.pmatrix(to_float(self.lam))


class GateU2(SingleQubitGate):
    r"""Legacy ``U2(φ, λ) = e^{-i(φ+λ+π/2)/2} U(π/2, φ, λ)``."""

    name = "U2"
    parnames = ("phi", "lam")

    def __init__(self, phi: Any, lam: Any) -> None:
        self.phi = phi
        self.lam = lam

    def _matrix(self) -> np.ndarray:
        phi = to_float(self.phi)
        lam = to_float(self.lam)
        return matrices.umatrix(math.pi / 2, phi, lam, -(phi + lam + math.pi / 2) / 2)

    def _inverse(self) -> Operation:
        return GateU3(-math.pi / 2, -self.lam, -self.phi)


class GateU3(SingleQubitGate):
    r"""Legacy ``U3(θ, φ, λ) = e^{-i(θ+φ+λ)/2} U(θ, φ, λ)``."""

    name = "U3"
    parnames = ("theta", "phi", "lam")

    def __init__(self, theta: Any, phi: Any, lam: Any) -> None:
        self.theta = theta
        self.phi = phi
        self.lam = lam

    def _matrix(self) -> np.ndarray:
        theta = to_float(self.theta)
        phi = to_float(self.phi)
        lam = to_float(self.lam)
        return matrices.umatrix(theta, phi, lam, -(theta + phi + lam) / 2)

    def _inverse(self) -> Operation:
        return GateU3(-self.theta, -self.lam, -self.phi)


class GateR(SingleQubitGate):
    """Rotation by ``θ`` about the axis ``cos(φ) X + sin(φ) Y``."""

    name = "R"
    parnames = ("theta", "phi")

    def __init__(self, theta: Any, phi: Any) -> None:
        self.theta = theta
        self.phi = phi

    def _matrix(self) -> np.ndarray:
        return matrices.rmatrix(to_float(self.theta), to_float(self.phi))

    def _inverse(self) -> Operation:
        return GateR(-self.theta, self.phi)

    def _power(self, exponent: Any) -> Operation:
        return GateR(scale(self.theta, exponent), self.phi)


class GPhase(Gate):
    """Global phase ``e^{iλ}`` applied to ``num_qubits`` qubits."""

    name = "GPhase"
    parnames = ("lam",)

    def __init__(self, lam: Any, num_qubits: int = 1) -> None:
        if num_qubits < 1:
            raise ValueError("GPhase must act on at least one qubit")
        self.lam = lam
        self._num_qubits = int(num_qubits)

    def _matrix(self) -> np.ndarray:
        return matrices.gphase_matrix(self.num_qubits, to_float(self.lam))

    def _with_parameters(self, values: list) -> Operation:
        return GPhase(values[0], self.num_qubits)

    def _inverse(self) -> Operation:
        return GPhase(-self.lam, self.num_qubits)

    def _power(self, exponent: Any) -> Operation:
        return GPhase(scale(self.lam, exponent), self.num_qubits)

    def _fields(self) -> Dict[str, Any]:
        return {"num_qubits": self.num_qubits}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(params[0], int(fields.get("num_qubits", 1)))

    def _key(self) -> tuple:
        return (self.num_qubits, self.lam)


class TwoQubitGate(Gate):
    _num_qubits = 2


class GateSWAP(TwoQubitGate):
    name = "SWAP"

    def _matrix(self) -> np.ndarray:
        return matrices.SWAP_MATRIX.copy()

    def _inverse(self) -> Operation:
        return self


class GateISWAP(TwoQubitGate):
    name = "ISWAP"

    def _matrix(self) -> np.ndarray:
        return matrices.ISWAP_MATRIX.copy()


class GateRZZ(TwoQubitGate):
    """Ising ``exp(-iθ/2 Z⊗Z)`` interaction."""

    name = "RZZ"
    parnames = ("theta",)

    def __init__(self, theta: Any) -> None:
        self.theta = theta

    def _matrix(self) -> np.ndarray:
        return matrices.rzzmatrix(to_float(self.theta))

    def _inverse(self) -> Operation:
        return GateRZZ(-self.theta)

    def _power(self, exponent: Any) -> Operation:
        return GateRZZ(scale(self.theta, exponent))


class _InteractionGate(TwoQubitGate):
    """Two qubit ``exp(-iθ/2 P⊗Q)`` rotation for fixed Paulis ``P`` and ``Q``."""

    parnames = ("theta",)
    _builder: Any = None

    def __init__(self, theta: Any) -> None:
        self.theta = theta

    def _matrix(self) -> np.ndarray:
        return type(self)._builder(to_float(self.theta))

    def _inverse(self) -> Operation:
        return type(self)(-self.theta)

    def _power(self, exponent: Any) -> Operation:
        return type(self)(scale(self.theta, exponent))


class GateRXX(_InteractionGate):
    name = "RXX"
    _builder = staticmethod(matrices.rxxmatrix)


class GateRYY(_InteractionGate):
    name = "RYY"
    _builder = staticmethod(matrices.ryymatrix)


class GateRZX(_InteractionGate):
    """``exp(-iθ/2 Z⊗X)``, ``Z`` acting on the first qubit."""

    name = "RZX"
    _builder = staticmethod(matrices.rzxmatrix)


class GateXXplusYY(TwoQubitGate):
    """``XX+YY`` interaction with rotation angle ``θ`` and phase angle ``β``."""

    name = "XXplusYY"
    parnames = ("theta", "beta")

    def __init__(self, theta: Any, beta: Any) -> None:
        self.theta = theta
        self.beta = beta

    def _matrix(self) -> np.ndarray:
        return matrices.xxplusyymatrix(to_float(self.theta), to_float(self.beta))

    def _inverse(self) -> Operation:
        return type(self)(-self.theta, self.beta)


class GateXXminusYY(GateXXplusYY):
    """``XX-YY`` interaction with rotation angle ``θ`` and phase angle ``β``."""

    name = "XXminusYY"

    def _matrix(self) -> np.ndarray:
        return matrices.xxminusyymatrix(to_float(self.theta), to_float(self.beta))


def _two_qubit_identity() -> Operation:
    from .modifiers import parallel

    return parallel(2, GateID())


class GateECR(TwoQubitGate):
    """Echoed cross-resonance gate."""

    name = "ECR"

    def _matrix(self) -> np.ndarray:
        return matrices.ECR_MATRIX.copy()

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        if not _is_integer(exponent):
            return None
        return self if int(exponent) % 2 else _two_qubit_identity()


class GateDCX(TwoQubitGate):
    """Double CNOT: ``CX`` from the first to the second qubit and back."""

    name = "DCX"

    def _matrix(self) -> np.ndarray:
        return matrices.DCX_MATRIX.copy()

    def _power(self, exponent: Any) -> "Operation | None":
        if not _is_integer(exponent):
            return None
        remainder = int(exponent) % 3
        if remainder == 0:
            return _two_qubit_identity()
        if remainder == 1:
            return self
        return None


class GateCustom(Gate):
    """Gate defined by an explicit unitary matrix.

    This is the escape hatch for gates outside the fixed catalogue.  The
    matrix must be square, of power-of-two dimension and unitary.
    """

    name = "Custom"

    def __init__(self, matrix: Any) -> None:
        # adding 0.0 turns negative zeros into positive ones
        mat = np.array(matrix, dtype=complex) + 0.0
        self._num_qubits = matrices.num_qubits_of(mat)
        if not matrices.is_unitary_matrix(mat):
            raise NonUnitaryError("Custom gate matrix must be unitary")
        mat.setflags(write=False)
        self.U = mat

    def _matrix(self) -> np.ndarray:
        return self.U.copy()

    def _inverse(self) -> Operation:
        return GateCustom(matrices.adjoint(self.U))

    def _power(self, exponent: Any) -> Operation:
        return GateCustom(matrices.matrix_power(self.U, exponent))

    def _fields(self) -> Dict[str, Any]:
        return {"matrix": self.U}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["matrix"])

    def _key(self) -> tuple:
        return (self.U.shape, self.U.tobytes())

    def __repr__(self) -> str:
        return f"Custom({self.num_qubits}-qubit)"


__all__ = [
    "SingleQubitGate",
    "TwoQubitGate",
    "GateID",
    "GateX",
    "GateY",
    "GateZ",
    "GateH",
    "GateS",
    "GateSDG",
    "GateT",
    "GateTDG",
    "GateSX",
    "GateSXDG",
    "GateP",
    "GateRX",
    "GateRY",
    "GateRZ",
    "GateU",
    "GateU1",
    "GateU2",
    "GateU3",
    "GateR",
    "GPhase",
    "GateSWAP",
    "GateISWAP",
    "GateRZZ",
    "GateRXX",
    "GateRYY",
    "GateRZX",
    "GateXXplusYY",
    "GateXXminusYY",
    "GateECR",
    "GateDCX",
    "GateCustom",
]
