import math
from fractions import Fraction

import numpy as np
import pytest
from qiskit.circuit.library import (
    DCXGate,
    ECRGate,
    HGate,
    IGate,
    PhaseGate,
    RGate,
    RXGate,
    RXXGate,
    RYGate,
    RYYGate,
    RZGate,
    RZXGate,
    RZZGate,
    SdgGate,
    SGate,
    SwapGate,
    SXdgGate,
    SXGate,
    TdgGate,
    TGate,
    UGate,
    XGate,
    YGate,
    XXMinusYYGate,
    XXPlusYYGate,
    ZGate,
    iSwapGate,
)
from qiskit.quantum_info import Operator

from qlower import (
    DCX,
    ECR,
    GPhase,
    H,
    ID,
    ISWAP,
    OPERATIONS,
    P,
    R,
    RX,
    RXX,
    RY,
    RYY,
    RZ,
    RZX,
    RZZ,
    S,
    SDG,
    SWAP,
    SX,
    SXDG,
    T,
    TDG,
    U,
    U1,
    U2,
    U3,
    X,
    XXminusYY,
    XXplusYY,
    Y,
    Z,
    power,
)
from qlower.interop import reverse_qubit_order
from qlower.matrices import is_unitary_matrix


PAIRS = [
    (ID(), IGate()),
    (X(), XGate()),
    (Y(), YGate()),
    (Z(), ZGate()),
    (H(), HGate()),
    (S(), SGate()),
    (SDG(), SdgGate()),
    (T(), TGate()),
    (TDG(), TdgGate()),
    (SX(), SXGate()),
    (SXDG(), SXdgGate()),
    (P(0.3), PhaseGate(0.3)),
    (RX(0.7), RXGate(0.7)),
    (RY(-1.2), RYGate(-1.2)),
    (RZ(2.1), RZGate(2.1)),
    (U(0.1, 0.2, 0.3), UGate(0.1, 0.2, 0.3)),
    (SWAP(), SwapGate()),
    (ISWAP(), iSwapGate()),
    (RZZ(0.9), RZZGate(0.9)),
    (U1(0.3), PhaseGate(0.3)),
    (R(0.4, 1.1), RGate(0.4, 1.1)),
    (RXX(0.5), RXXGate(0.5)),
    (RYY(-0.7), RYYGate(-0.7)),
]

ORDERED_PAIRS = [
    (RZX(0.8), RZXGate(0.8)),
    (XXplusYY(0.6, 0.3), XXPlusYYGate(0.6, 0.3)),
    (XXminusYY(0.6, 0.3), XXMinusYYGate(0.6, 0.3)),
    (ECR(), ECRGate()),
    (DCX(), DCXGate()),
]


@pytest.mark.parametrize("gate, reference", PAIRS, ids=lambda g: repr(g))
def test_matrix_matches_qiskit(gate, reference):
    # all two-qubit gates here are symmetric, so qubit order does not matter
    assert np.allclose(gate.matrix(), Operator(reference).data)


def test_u_global_phase():
    assert np.allclose(U(0.1, 0.2, 0.3, 0.5).matrix(), np.exp(0.5j) * U(0.1, 0.2, 0.3).matrix())


def test_gphase_matrix():
    g = GPhase(math.pi / 3, 2)
    assert g.num_qubits == 2
    assert np.allclose(g.matrix(), np.exp(1j * math.pi / 3) * np.eye(4))
    assert g.inverse() == GPhase(-math.pi / 3, 2)
    assert g != GPhase(math.pi / 3, 1)


@pytest.mark.parametrize("gate", [g for g, _ in PAIRS], ids=repr)
def test_catalogue_is_unitary(gate):
    assert gate.is_unitary
    assert is_unitary_matrix(gate.matrix())


def test_every_concrete_operation_is_registered():
    for name in ["X", "Control", "Power", "Inverse", "Parallel", "Custom", "Measure", "ExpectationValue"]:
        assert name in OPERATIONS
    assert all(cls.name == name for name, cls in OPERATIONS.items())


@pytest.mark.parametrize("gate, reference", ORDERED_PAIRS, ids=lambda g: repr(g))
def test_asymmetric_matrix_matches_qiskit(gate, reference):
    assert np.allclose(gate.matrix(), reverse_qubit_order(Operator(reference).data))
    assert is_unitary_matrix(gate.matrix())


def test_legacy_u_gates_phase():
    phase = np.exp(-0.5j * (0.5 + math.pi / 2))
    assert np.allclose(U2(0.2, 0.3).matrix(), phase * U(math.pi / 2, 0.2, 0.3).matrix())
    assert np.allclose(U3(0.1, 0.2, 0.3).matrix(), np.exp(-0.3j) * U(0.1, 0.2, 0.3).matrix())
    assert np.allclose(U3(0.1, 0.2, 0.3).matrix() @ U3(0.1, 0.2, 0.3).inverse().matrix(), np.eye(2))
    assert np.allclose(U2(0.2, 0.3).inverse().matrix() @ U2(0.2, 0.3).matrix(), np.eye(2))


@pytest.mark.parametrize("gate", [RXX(0.4), RYY(0.4), RZX(0.4), XXplusYY(0.4, 0.2), R(0.4, 0.9)], ids=repr)
def test_interaction_inverse(gate):
    assert np.allclose(gate.inverse().matrix() @ gate.matrix(), np.eye(gate.matrix().shape[0]))


def test_interaction_power_scales_angle():
    assert np.allclose(power(RXX(0.4), 3).matrix(), RXX(1.2).matrix())
    assert np.allclose(power(RZX(0.4), Fraction(1, 2)).matrix(), RZX(0.2).matrix())
    assert isinstance(power(RYY(0.4), 2), type(RYY(0.4)))


def test_ecr_and_dcx_integer_powers():
    assert ECR().inverse() == ECR()
    assert np.allclose(power(ECR(), 2).matrix(), np.eye(4))
    assert power(ECR(), 3) == ECR()
    assert np.allclose(power(DCX(), 3).matrix(), np.eye(4))
    assert power(DCX(), 4) == DCX()
    dcx2 = power(DCX(), 2)
    assert np.allclose(dcx2.matrix(), DCX().matrix() @ DCX().matrix())
