"""Dense matrix synthesis for gates, modifiers and circuits.

All matrices use the big-endian convention: the first target qubit of an
operation is the most significant bit of the row/column index.  With this
convention a controlled gate places the wrapped matrix in the bottom-right
block, i.e. on the subspace where every control qubit is ``1``.
"""

from __future__ import annotations

import math
from fractions import Fraction
from functools import reduce
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from . import config
from .errors import NonUnitaryError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .circuit import Circuit


IDENTITY = np.eye(2, dtype=complex)
PAULI_X = np.array([[0, 1], [1, 0]], dtype=complex)
PAULI_Y = np.array([[0, -1j], [1j, 0]], dtype=complex)
PAULI_Z = np.array([[1, 0], [0, -1]], dtype=complex)
HADAMARD = np.array([[1, 1], [1, -1]], dtype=complex) / math.sqrt(2)
S_MATRIX = np.diag([1, 1j]).astype(complex)
T_MATRIX = np.diag([1, np.exp(1j * math.pi / 4)]).astype(complex)
SX_MATRIX = np.array([[1 + 1j, 1 - 1j], [1 - 1j, 1 + 1j]], dtype=complex) / 2
SWAP_MATRIX = np.array(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]], dtype=complex
)
ISWAP_MATRIX = np.array(
    [[1, 0, 0, 0], [0, 0, 1j, 0], [0, 1j, 0, 0], [0, 0, 0, 1]], dtype=complex
)
ECR_MATRIX = np.array(
    [[0, 0, 1, 1j], [0, 0, 1j, 1], [1, -1j, 0, 0], [-1j, 1, 0, 0]], dtype=complex
) / math.sqrt(2)
DCX_MATRIX = np.array(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1], [0, 1, 0, 0]], dtype=complex
)


def umatrix(theta: float, phi: float, lam: float, gamma: float = 0.0) -> np.ndarray:
    r"""Return the matrix of :math:`e^{i\gamma} U(\theta, \phi, \lambda)`."""

    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    return np.exp(1j * gamma) * np.array(
        [
            [c, -np.exp(1j * lam) * s],
            [np.exp(1j * phi) * s, np.exp(1j * (phi + lam)) * c],
        ],
        dtype=complex,
    )


def pmatrix(lam: float) -> np.ndarray:
    return np.diag([1, np.exp(1j * lam)]).astype(complex)


def rxmatrix(theta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=complex)


def rymatrix(theta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=complex)


def rzmatrix(lam: float) -> np.ndarray:
    return np.diag([np.exp(-0.5j * lam), np.exp(0.5j * lam)]).astype(complex)


def rzzmatrix(theta: float) -> np.ndarray:
    a = np.exp(-0.5j * theta)
    b = np.exp(0.5j * theta)
    return np.diag([a, b, b, a]).astype(complex)


def rxxmatrix(theta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = -1j * math.sin(theta / 2)
    return np.array(
        [[c, 0, 0, s], [0, c, s, 0], [0, s, c, 0], [s, 0, 0, c]], dtype=complex
    )


def ryymatrix(theta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = -1j * math.sin(theta / 2)
    return np.array(
        [[c, 0, 0, -s], [0, c, s, 0], [0, s, c, 0], [-s, 0, 0, c]], dtype=complex
    )


def rzxmatrix(theta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = -1j * math.sin(theta / 2)
    return np.array(
        [[c, s, 0, 0], [s, c, 0, 0], [0, 0, c, -s], [0, 0, -s, c]], dtype=complex
    )


def xxplusyymatrix(theta: float, beta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = -1j * math.sin(theta / 2)
    return np.array(
        [
            [1, 0, 0, 0],
            [0, c, s * np.exp(1j * beta), 0],
            [0, s * np.exp(-1j * beta), c, 0],
            [0, 0, 0, 1],
        ],
        dtype=complex,
    )


def xxminusyymatrix(theta: float, beta: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = -1j * math.sin(theta / 2)
    return np.array(
        [
            [c, 0, 0, s * np.exp(-1j * beta)],
            [0, 1, 0, 0],
            [0, 0, 1, 0],
            [s * np.exp(1j * beta), 0, 0, c],
        ],
        dtype=complex,
    )


def rmatrix(theta: float, phi: float) -> np.ndarray:
    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    return np.array(
        [[c, -1j * np.exp(-1j * phi) * s], [-1j * np.exp(1j * phi) * s, c]],
        dtype=complex,
    )


def qftmatrix(num_qubits: int) -> np.ndarray:
    """Return the Fourier matrix ``F[y, x] = exp(2πi xy / 2^n) / 2^(n/2)``."""

    dim = 2**num_qubits
    k = np.arange(dim)
    return np.exp(2j * math.pi * np.outer(k, k) / dim) / math.sqrt(dim)


def phasegradient_matrix(num_qubits: int) -> np.ndarray:
    dim = 2**num_qubits
    return np.diag(np.exp(2j * math.pi * np.arange(dim) / dim))


def diffusion_matrix(num_qubits: int) -> np.ndarray:
    """Return ``1 - 2|+><+|`` on ``num_qubits`` qubits."""

    dim = 2**num_qubits
    return np.eye(dim, dtype=complex) - 2.0 * np.ones((dim, dim), dtype=complex) / dim


def gphase_matrix(num_qubits: int, lam: float) -> np.ndarray:
    return np.exp(1j * lam) * np.eye(2**num_qubits, dtype=complex)


def adjoint(mat: np.ndarray) -> np.ndarray:
    return np.conjugate(np.asarray(mat)).T


def kron_all(mats: Iterable[np.ndarray]) -> np.ndarray:
    """Kronecker product of ``mats`` in order (first factor most significant)."""

    return reduce(np.kron, mats, np.eye(1, dtype=complex))


def control_matrix(num_controls: int, mat: np.ndarray) -> np.ndarray:
    """Block-embed ``mat`` on the all-controls-set subspace.

    Parameters
    ----------
    num_controls:
        Number of control qubits prepended to the operation.
    mat:
        Matrix of the wrapped operation.
    """

    mat = np.asarray(mat, dtype=complex)
    inner = mat.shape[0]
    dim = inner * 2**num_controls
    out = np.eye(dim, dtype=complex)
    out[dim - inner :, dim - inner :] = mat
    return out


def matrix_power(mat: np.ndarray, exponent: int | float | Fraction) -> np.ndarray:
    """Raise ``mat`` to a non-negative power.

    Integer exponents use repeated squaring.  Other exponents use the
    eigendecomposition of ``mat`` and the principal branch of each
    eigenvalue's power, so that ``matrix_power(m, p / 2)`` squared equals
    ``matrix_power(m, p)``.
    """

    mat = np.asarray(mat, dtype=complex)
    if Fraction(exponent).denominator == 1:
        return np.linalg.matrix_power(mat, int(exponent))
    eigvals, eigvecs = np.linalg.eig(mat)
    tol = config.DEFAULT.eigenvalue_snap_tol
    eigvals = np.where(np.abs(eigvals.imag) < tol, eigvals.real + 0j, eigvals)
    powered = np.power(eigvals, float(exponent))
    return eigvecs @ np.diag(powered) @ np.linalg.pinv(eigvecs)


def is_unitary_matrix(mat: np.ndarray, atol: float | None = None) -> bool:
    mat = np.asarray(mat, dtype=complex)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        return False
    if atol is None:
        atol = config.DEFAULT.unitary_atol
    return bool(np.allclose(mat @ adjoint(mat), np.eye(mat.shape[0]), atol=atol))


def num_qubits_of(mat: np.ndarray) -> int:
    """Return ``n`` such that ``mat`` is ``2**n x 2**n``.

    Raises
    ------
    ValueError
        If ``mat`` is not square with a power-of-two dimension.
    """

    mat = np.asarray(mat)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {mat.shape}")
    dim = mat.shape[0]
    n = dim.bit_length() - 1
    if dim < 2 or 2**n != dim:
        raise ValueError(f"Matrix dimension {dim} is not a power of two")
    return n


def apply_to_tensor(
    tensor: np.ndarray, mat: np.ndarray, qubits: Sequence[int]
) -> np.ndarray:
    """Apply ``mat`` on ``qubits`` of a tensor with one axis per qubit.

    ``tensor`` has shape ``(2,) * n + rest``; the trailing axes are carried
    along untouched.
    """

    k = len(qubits)
    op = np.asarray(mat, dtype=complex).reshape((2,) * (2 * k))
    out = np.tensordot(op, tensor, axes=(list(range(k, 2 * k)), list(qubits)))
    return np.moveaxis(out, list(range(k)), list(qubits))


def circuit_matrix(circuit: "Circuit", num_qubits: int | None = None) -> np.ndarray:
    """Reconstruct the unitary implemented by ``circuit``.

    Parameters
    ----------
    circuit:
        Circuit made of unitary instructions (barriers are ignored).
    num_qubits:
        Width of the register.  Defaults to ``circuit.num_qubits``; larger
        values embed the circuit into a wider register acting trivially on
        the extra qubits.

    Raises
    ------
    NonUnitaryError
        If the circuit contains measurements, resets or noise channels.
    """

    from .nonunitary import Barrier

    n = circuit.num_qubits if num_qubits is None else num_qubits
    if n < circuit.num_qubits:
        raise ValueError(
            f"Register of {n} qubits is too small for a {circuit.num_qubits}-qubit circuit"
        )
    dim = 2**n
    tensor = np.eye(dim, dtype=complex).reshape((2,) * n + (dim,))
    for inst in circuit:
        op = inst.operation
        if isinstance(op, Barrier):
            continue
        if not op.is_unitary:
            raise NonUnitaryError(f"Cannot build a unitary for circuit containing {op}")
        tensor = apply_to_tensor(tensor, op.matrix(), inst.qubits)
    return tensor.reshape(dim, dim)


__all__ = [
    "IDENTITY",
    "PAULI_X",
    "PAULI_Y",
    "PAULI_Z",
    "HADAMARD",
    "S_MATRIX",
    "T_MATRIX",
    "SX_MATRIX",
    "SWAP_MATRIX",
    "ISWAP_MATRIX",
    "ECR_MATRIX",
    "DCX_MATRIX",
    "umatrix",
    "pmatrix",
    "rxmatrix",
    "rymatrix",
    "rzmatrix",
    "rzzmatrix",
    "rxxmatrix",
    "ryymatrix",
    "rzxmatrix",
    "xxplusyymatrix",
    "xxminusyymatrix",
    "rmatrix",
    "qftmatrix",
    "phasegradient_matrix",
    "diffusion_matrix",
    "gphase_matrix",
    "adjoint",
    "kron_all",
    "control_matrix",
    "matrix_power",
    "is_unitary_matrix",
    "num_qubits_of",
    "apply_to_tensor",
    "circuit_matrix",
]
