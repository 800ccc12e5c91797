import numpy as np
import pytest
from qiskit import QuantumCircuit
from qiskit.quantum_info import Operator

from qlower import Circuit, Control, Instruction, X, decompose_circuit, decompose_mcx
from qlower.decompositions import is_basis_operation
from qlower.errors import InvalidTargetError


def _expected_mcx(controls, target, num_qubits):
    qc = QuantumCircuit(num_qubits)
    if controls:
        qc.mcx(controls, target)
    else:
        qc.x(target)
    # qiskit orders qubits little-endian
    return Operator(qc).reverse_qargs().data


def _reference(controls, target, num_qubits):
    op = Control(len(controls), X()) if controls else X()
    return Circuit([Instruction(op, controls + [target])]).matrix(num_qubits)


@pytest.mark.parametrize("num_controls", range(0, 7))
@pytest.mark.parametrize("num_ancillae", [0, 1, 2, 4])
def test_mcx_matches_reference(num_controls, num_ancillae):
    controls = list(range(num_controls))
    target = num_controls
    ancillae = list(range(num_controls + 1, num_controls + 1 + num_ancillae))
    n = num_controls + 1 + num_ancillae
    circ = decompose_mcx(controls, target, ancillae)
    assert np.allclose(circ.matrix(n), _reference(controls, target, n), atol=1e-10)


@pytest.mark.parametrize("num_controls", [3, 4])
def test_mcx_matches_qiskit(num_controls):
    controls = list(range(num_controls))
    target = num_controls
    n = num_controls + 2
    circ = decompose_mcx(controls, target, [n - 1])
    assert np.allclose(circ.matrix(n), _expected_mcx(controls, target, n), atol=1e-10)


def test_mcx_small_cases_are_primitive():
    assert [i.operation for i in decompose_mcx([], 0)] == [X()]
    assert [i.operation for i in decompose_mcx([0, 1], 2)] == [Control(2, X())]


def test_mcx_with_enough_ancillae_uses_toffoli_ladder():
    circ = decompose_mcx([0, 1, 2, 3], 4, [5, 6])
    assert len(circ) == 4 * (4 - 2)
    assert all(inst.operation == Control(2, X()) for inst in circ)


def test_mcx_with_single_ancilla_uses_only_toffolis():
    circ = decompose_mcx(list(range(5)), 5, [6])
    assert all(inst.operation == Control(2, X()) for inst in circ)


def test_mcx_borrowed_ancillae_are_restored():
    # the ancilla may start in any state, so compare on the full register
    controls, target, ancillae = [3, 0, 5], 1, [4, 2]
    n = 6
    circ = decompose_mcx(controls, target, ancillae)
    assert np.allclose(circ.matrix(n), _reference(controls, target, n), atol=1e-10)


def test_mcx_appends_to_given_circuit():
    circ = Circuit().push(X(), 1)
    result = decompose_mcx([0, 1], 2, circuit=circ)
    assert result is circ
    assert len(circ) == 2


def test_mcx_lowers_to_basis():
    circ = decompose_circuit(decompose_mcx([0, 1, 2, 3], 4, [5]))
    assert all(is_basis_operation(inst.operation) for inst in circ)
    assert np.allclose(circ.matrix(6), _reference([0, 1, 2, 3], 4, 6), atol=1e-10)


@pytest.mark.parametrize(
    "controls, target, ancillae",
    [([0, 1], 1, []), ([0, 1, 2], 3, [2]), ([0, 1, 2], 3, [4, 4])],
)
def test_mcx_rejects_repeated_qubits(controls, target, ancillae):
    with pytest.raises(InvalidTargetError):
        decompose_mcx(controls, target, ancillae)
