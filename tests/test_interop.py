import numpy as np
import pytest
from qiskit import QuantumCircuit
from qiskit.circuit import Parameter
from qiskit.circuit.library import XGate
from qiskit.quantum_info import Operator, random_unitary

from qlower import (
    Barrier,
    Circuit,
    Control,
    Custom,
    DCX,
    Depolarizing,
    ECR,
    GPhase,
    H,
    Inverse,
    ISWAP,
    Measure,
    P,
    Parallel,
    R,
    Reset,
    RX,
    RXX,
    RZX,
    RZZ,
    T,
    U,
    U1,
    X,
    XXminusYY,
    XXplusYY,
    from_qiskit,
    to_qiskit,
)
from qlower.interop import from_qiskit_gate, reverse_qubit_order


def _qiskit_matrix(qc):
    # qiskit orders qubits little-endian
    return Operator(qc).reverse_qargs().data


def test_to_qiskit_preserves_unitary():
    custom = Custom(random_unitary(4, seed=7).data)
    c = (
        Circuit()
        .push(H(), 1)
        .push(Control(1, X()), 1, 3)
        .push(RZZ(0.4), 2, 3)
        .push(Control(1, U(0.3, 0.2, 0.1, 0.5)), 3, 1)
        .push(custom, 3, 1)
        .push(Control(2, H()), 2, 3, 1)
        .push(Inverse(ISWAP()), 1, 2)
        .push(Parallel(2, T()), 1, 3)
        .push(U(0.1, 0.2, 0.3, 0.4), 2)
        .push(GPhase(0.7), 1)
    )
    qc = to_qiskit(c)
    assert qc.num_qubits == 3
    assert np.allclose(_qiskit_matrix(qc), c.matrix())


def test_to_qiskit_two_qubit_interactions():
    c = (
        Circuit()
        .push(RXX(0.3), 1, 2)
        .push(RZX(0.5), 3, 1)
        .push(XXplusYY(0.4, 0.2), 2, 3)
        .push(XXminusYY(0.6, 0.1), 1, 3)
        .push(ECR(), 2, 1)
        .push(DCX(), 1, 3)
        .push(R(0.7, 0.3), 2)
        .push(U1(0.9), 3)
    )
    qc = to_qiskit(c)
    assert np.allclose(_qiskit_matrix(qc), c.matrix())
    back = from_qiskit(qc)
    assert back[:-1] == c[:-1]
    assert back[-1].operation == P(0.9)


def test_to_qiskit_non_unitary_instructions():
    c = Circuit().push(H(), 1).push(Reset(), 2).push(Barrier(2), 1, 2).push(Measure(), [1, 2], [2, 1])
    qc = to_qiskit(c)
    names = [ci.operation.name for ci in qc.data]
    assert names == ["h", "reset", "barrier", "measure", "measure"]
    assert qc.num_clbits == 2


def test_to_qiskit_keeps_parameters():
    theta = Parameter("theta")
    qc = to_qiskit(Circuit().push(RX(theta), 1))
    assert set(qc.parameters) == {theta}


def test_to_qiskit_rejects_noise():
    with pytest.raises(ValueError):
        to_qiskit(Circuit().push(Depolarizing(1, 0.1), 1))


def test_from_qiskit_preserves_unitary():
    qc = QuantumCircuit(4, global_phase=0.3)
    qc.h(0)
    qc.cx(0, 2)
    qc.ccx(0, 1, 3)
    qc.rz(0.3, 1)
    qc.u(0.1, 0.2, 0.3, 2)
    qc.cp(0.5, 3, 0)
    qc.cu(0.1, 0.2, 0.3, 0.4, 1, 2)
    qc.swap(1, 3)
    qc.unitary(random_unitary(4, seed=3), [2, 0])
    qc.append(XGate().control(3), [0, 1, 2, 3])
    c = from_qiskit(qc)
    assert c.num_qubits == 4
    assert np.allclose(c.matrix(), _qiskit_matrix(qc))


def test_from_qiskit_measurements():
    qc = QuantumCircuit(2, 2)
    qc.h(0)
    qc.barrier()
    qc.reset(1)
    qc.measure([0, 1], [1, 0])
    c = from_qiskit(qc)
    assert [inst.operation for inst in c] == [H(), Barrier(2), Reset(), Measure(), Measure()]
    assert [inst.bits for inst in c][-2:] == [(1,), (0,)]


def test_round_trip():
    c = Circuit().push(H(), 1).push(Control(2, X()), 1, 2, 3).push(RX(0.25), 3)
    assert from_qiskit(to_qiskit(c)) == c


def test_open_controls_are_rejected():
    with pytest.raises(ValueError):
        from_qiskit_gate(XGate().control(1, ctrl_state=0))


def test_reverse_qubit_order_is_involution():
    m = random_unitary(8, seed=11).data
    assert np.allclose(reverse_qubit_order(reverse_qubit_order(m)), m)
    h_on_last = np.kron(np.eye(2), H().matrix())
    assert np.allclose(reverse_qubit_order(h_on_last), np.kron(H().matrix(), np.eye(2)))
