import logging
import math
from fractions import Fraction

import numpy as np
import pytest

from qlower import (
    CCX,
    CCZ,
    CH,
    CP,
    CRX,
    CS,
    CSWAP,
    CSX,
    CU,
    CX,
    CY,
    CZ,
    Circuit,
    Control,
    Custom,
    DCX,
    ECR,
    GPhase,
    H,
    ID,
    IfStatement,
    Instruction,
    Inverse,
    ISWAP,
    Measure,
    MeasureReset,
    P,
    Parallel,
    Power,
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
    decompose,
    decompose_circuit,
)
from qlower.decompositions import is_basis_operation


LEAVES = [
    ID(), X(), Y(), Z(), H(), S(), SDG(), T(), TDG(), SX(), SXDG(),
    P(0.4), RX(0.3), RY(-0.8), RZ(1.3), U(0.3, 0.5, 0.7), U(0.3, 0.5, 0.7, 0.9),
    GPhase(0.25, 2), SWAP(), ISWAP(), RZZ(0.6),
    U1(0.4), U2(0.3, 0.5), U3(0.3, 0.5, 0.7), R(0.4, 1.1), RXX(0.3), RYY(0.5), RZX(-0.6),
    XXplusYY(0.7, 0.2), XXminusYY(0.7, 0.2), ECR(), DCX(),
]

CONTROLLED = [
    CX(), CY(), CZ(), CH(), CS(), CSX(), CP(0.7), CRX(1.1), CU(0.3, 0.2, 0.1, 0.4),
    CSWAP(), CCX(), CCZ(), Control(1, GPhase(0.3)), Control(3, GPhase(0.3, 2)),
    Control(2, SWAP()), Control(2, RZZ(0.4)), Control(1, ISWAP()), Control(2, P(0.5)),
]


def _assert_same_unitary(circuit, op):
    n = op.num_qubits
    assert np.allclose(circuit.matrix(n), op.matrix(), atol=1e-10)


@pytest.mark.parametrize("op", LEAVES, ids=repr)
def test_leaf_rule_preserves_unitary(op):
    _assert_same_unitary(decompose(op), op)


@pytest.mark.parametrize("op", LEAVES + CONTROLLED, ids=repr)
def test_full_lowering_reaches_basis(op):
    lowered = decompose_circuit(op)
    assert all(is_basis_operation(inst.operation) for inst in lowered)
    _assert_same_unitary(lowered, op)


@pytest.mark.parametrize("op", CONTROLLED, ids=repr)
def test_controlled_rule_preserves_unitary(op):
    _assert_same_unitary(decompose(op), op)


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
@pytest.mark.parametrize("gate", [X(), T(), H()], ids=repr)
def test_multi_controlled_gate(n, gate):
    op = Control(n, gate)
    _assert_same_unitary(decompose(op), op)


@pytest.mark.parametrize("n", [2, 3, 4, 5])
@pytest.mark.parametrize("gate", [X(), T(), H()], ids=repr)
def test_multi_controlled_gate_to_basis(n, gate):
    op = Control(n, gate)
    lowered = decompose_circuit(op)
    assert all(is_basis_operation(inst.operation) for inst in lowered)
    _assert_same_unitary(lowered, op)


@pytest.mark.parametrize("gate", [X(), T(), H()], ids=repr)
def test_multi_controlled_gate_in_wider_register(gate):
    inst = Instruction(Control(3, gate), (5, 0, 3, 1))
    expected = Circuit([inst]).matrix(6)
    assert np.allclose(decompose(inst).matrix(6), expected, atol=1e-10)
    assert np.allclose(decompose_circuit(inst).matrix(6), expected, atol=1e-10)


def test_recursive_construction_shape():
    c = decompose(Control(2, H()))
    ops = [inst.operation for inst in c]
    v = Power(H(), Fraction(1, 2))
    assert ops == [Control(1, v), CX(), Control(1, Inverse(v)), CX(), Control(1, v)]
    assert [inst.qubits for inst in c] == [(1, 2), (0, 1), (1, 2), (0, 1), (0, 2)]


@pytest.mark.parametrize("n", [1, 2, 4])
@pytest.mark.parametrize("gate", [H(), CX(), RX(0.3)], ids=repr)
def test_parallel(n, gate):
    op = Parallel(n, gate)
    c = decompose(op)
    assert len(c) == n
    assert all(inst.operation == gate for inst in c)
    _assert_same_unitary(c, op)


def test_parallel_blocks_are_contiguous():
    c = decompose(Instruction(Parallel(2, CX()), (4, 1, 0, 3)))
    assert [inst.qubits for inst in c] == [(4, 1), (0, 3)]


def test_integer_power_repeats():
    c = decompose(Power(H(), 3))
    assert [inst.operation for inst in c] == [H(), H(), H()]
    assert len(decompose(Power(H(), 0))) == 0


def test_fractional_power_of_single_instruction():
    # Z lowers to P(pi), whose powers are phase gates
    c = decompose(Power(Z(), Fraction(1, 3)))
    assert len(c) == 1
    assert isinstance(c[0].operation, P)
    assert c[0].operation.lam == pytest.approx(math.pi / 3)
    _assert_same_unitary(c, Power(Z(), Fraction(1, 3)))


def test_fractional_power_of_composite_is_left_alone():
    op = Power(SWAP(), Fraction(1, 2))
    c = decompose(op)
    assert len(c) == 1
    assert c[0].operation == op


def test_inverse_reverses_decomposition():
    c = decompose(Inverse(ISWAP()))
    ops = [(inst.operation, inst.qubits) for inst in c]
    assert ops == [
        (H(), (1,)),
        (CX(), (1, 0)),
        (CX(), (0, 1)),
        (H(), (0,)),
        (SDG(), (1,)),
        (SDG(), (0,)),
    ]
    _assert_same_unitary(c, Inverse(ISWAP()))


def test_operations_without_rule_are_kept():
    c = Circuit().push(Measure(), 1, 1)
    assert decompose(c) == c
    custom = Custom(np.diag([1, 1j]))
    assert decompose(custom)[0].operation == custom
    assert decompose(Control(1, custom))[0].operation == Control(1, custom)


def test_decompose_does_not_modify_input():
    c = Circuit().push(CCX(), 1, 2, 3)
    before = list(c)
    decompose(c)
    decompose_circuit(c)
    assert list(c) == before


def test_decompose_circuit_keeps_measurements():
    c = Circuit().push(H(), 1).push(CCX(), 1, 2, 3).push(Measure(), [1, 2, 3], [1, 2, 3])
    lowered = decompose_circuit(c)
    measures = [inst for inst in lowered if isinstance(inst.operation, Measure)]
    assert [(i.qubits, i.bits) for i in measures] == [((0,), (0,)), ((1,), (1,)), ((2,), (2,))]
    assert all(is_basis_operation(inst.operation) for inst in lowered)


def test_decompose_circuit_custom_predicate():
    c = Circuit().push(CCX(), 1, 2, 3)
    lowered = decompose_circuit(c, is_supported=lambda op: op == CX() or op.num_qubits == 1)
    assert H() in [inst.operation for inst in lowered]
    assert all(inst.operation.num_qubits <= 2 for inst in lowered)


def test_decompose_circuit_stops_at_max_depth():
    c = Circuit().push(Control(3, X()), 1, 2, 3, 4)
    once = decompose_circuit(c, max_depth=1)
    assert once == decompose(c)


def test_decompose_circuit_logs_passes(caplog):
    with caplog.at_level(logging.DEBUG, logger="qlower.decompositions"):
        decompose_circuit(Circuit().push(CCX(), 1, 2, 3))
    assert any("Pass 1" in rec.getMessage() for rec in caplog.records)


def test_symbolic_parameters_survive_decomposition():
    from qlower import Parameter

    theta = Parameter("theta")
    c = decompose_circuit(Circuit().push(CRX(theta), 1, 2))
    assert c.free_parameters() == {theta}
    bound = c.evaluate({theta: 0.7})
    assert np.allclose(bound.matrix(), CRX(0.7).matrix(), atol=1e-10)


def test_condition_is_pushed_into_lowered_gates():
    c = Circuit().push(IfStatement(CCX(), "10"), 1, 2, 3, 4, 5)
    lowered = decompose_circuit(c)
    assert len(lowered) > 1
    for inst in lowered:
        assert isinstance(inst.operation, IfStatement)
        assert inst.operation.bitstring == "10"
        assert inst.bits == (3, 4)
        assert is_basis_operation(inst.operation)
    unconditioned = Circuit(Instruction(inst.operation.op, inst.qubits) for inst in lowered)
    assert np.allclose(unconditioned.matrix(3), CCX().matrix(), atol=1e-10)


def test_conditioned_basis_gate_is_kept():
    op = IfStatement(CX(), "1")
    assert is_basis_operation(op)
    assert not is_basis_operation(IfStatement(H(), "1"))
    c = Circuit().push(op, 1, 2, 1)
    assert decompose_circuit(c) == c


def test_measure_reset_lowering():
    c = decompose(Circuit().push(MeasureReset(), 2, 3))
    assert [inst.operation for inst in c] == [Measure(), IfStatement(X(), "1")]
    assert all(inst.qubits == (1,) and inst.bits == (2,) for inst in c)
    lowered = decompose_circuit(c)
    assert all(is_basis_operation(inst.operation) for inst in lowered)
