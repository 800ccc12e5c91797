"""Register-wide gates: Fourier transform, phase gradient, diffusion and Pauli strings.

These gates act on a whole register whose size is fixed at construction.
They are first-class operations with their own matrices; their
decompositions into standard gates live in :mod:`qlower.decompositions`.
"""

from __future__ import annotations

from fractions import Fraction
from numbers import Integral
from typing import Any, Dict, Mapping

import numpy as np

from . import matrices
from .gates import GateID, GateX, GateY, GateZ
from .operation import Gate, Operation


def _check_width(num_qubits: Any, what: str) -> int:
    if isinstance(num_qubits, bool) or not isinstance(num_qubits, Integral):
        raise TypeError(f"{what} width must be an integer, got {num_qubits!r}")
    if num_qubits < 1:
        raise ValueError(f"{what} must act on at least one qubit")
    return int(num_qubits)


class _RegisterGate(Gate):
    """Gate parametrised only by the size of its register."""

    def __init__(self, num_qubits: int) -> None:
        self._num_qubits = _check_width(num_qubits, self.name)

    def _fields(self) -> Dict[str, Any]:
        return {"num_qubits": self.num_qubits}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(int(fields["num_qubits"]))

    def _key(self) -> tuple:
        return (self.num_qubits,)

    def __repr__(self) -> str:
        return f"{self.name}({self.num_qubits})"


class QFT(_RegisterGate):
    r"""Quantum Fourier transform on ``num_qubits`` qubits.

    Implements :math:`\frac{1}{2^{n/2}} \sum_{x,y} e^{2\pi i xy / 2^n} |y\rangle\langle x|`
    with the first qubit as the most significant bit.  The inverse transform
    is ``inverse(QFT(n))``.
    """

    name = "QFT"

    def _matrix(self) -> np.ndarray:
        return matrices.qftmatrix(self.num_qubits)


class PhaseGradient(_RegisterGate):
    r"""Phase :math:`e^{2\pi i k / 2^n}` on the basis state :math:`|k\rangle`."""

    name = "PhaseGradient"

    def _matrix(self) -> np.ndarray:
        return matrices.phasegradient_matrix(self.num_qubits)


class Diffusion(_RegisterGate):
    r"""Grover diffusion :math:`H^{\otimes n} (1 - 2|0^n\rangle\langle 0^n|) H^{\otimes n}`."""

    name = "Diffusion"

    def _matrix(self) -> np.ndarray:
        return matrices.diffusion_matrix(self.num_qubits)

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        if not (isinstance(exponent, Fraction) and exponent.denominator == 1):
            return None
        if exponent % 2:
            return self
        from .modifiers import parallel

        return parallel(self.num_qubits, GateID())


_PAULIS = {"I": GateID, "X": GateX, "Y": GateY, "Z": GateZ}


class PauliString(Gate):
    """Tensor product of Pauli operators, e.g. ``PauliString("XIZ")``.

    Character ``i`` of the string acts on qubit ``i``.
    """

    name = "PauliString"

    def __init__(self, pauli: str) -> None:
        if not isinstance(pauli, str):
            raise TypeError(f"Pauli string must be a str, got {type(pauli).__name__}")
        if not pauli:
            raise ValueError("Pauli string cannot be empty")
        if any(p not in _PAULIS for p in pauli):
            raise ValueError(f"Pauli string can only contain I, X, Y or Z, got {pauli!r}")
        self.pauli = pauli
        self._num_qubits = len(pauli)

    def gates(self) -> list:
        """Return the single qubit Pauli gates, one per qubit."""
        return [_PAULIS[p]() for p in self.pauli]

    def _matrix(self) -> np.ndarray:
        return matrices.kron_all(g.matrix() for g in self.gates())

    def _inverse(self) -> Operation:
        return self

    def _power(self, exponent: Any) -> "Operation | None":
        if not (isinstance(exponent, Fraction) and exponent.denominator == 1):
            return None
        if exponent % 2:
            return self
        return PauliString("I" * self.num_qubits)

    def _fields(self) -> Dict[str, Any]:
        return {"pauli": self.pauli}

    @classmethod
    def _from_fields(cls, params: list, fields: Mapping[str, Any]) -> Operation:
        return cls(fields["pauli"])

    def _key(self) -> tuple:
        return (self.pauli,)

    def __repr__(self) -> str:
        return self.pauli


__all__ = ["QFT", "PhaseGradient", "Diffusion", "PauliString"]
