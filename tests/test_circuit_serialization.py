"""Tests for serialising :class:`~qlower.circuit.Circuit` objects."""

from __future__ import annotations

import json
from fractions import Fraction

import numpy as np
import pytest

from qlower import (
    OPERATIONS,
    AmplitudeDamping,
    Barrier,
    Circuit,
    Control,
    Custom,
    DCX,
    Depolarizing,
    Diffusion,
    ECR,
    ExpectationValue,
    GPhase,
    H,
    ID,
    IfStatement,
    Instruction,
    Inverse,
    ISWAP,
    Measure,
    MeasureReset,
    MixedUnitary,
    Operator,
    P,
    Parallel,
    Parameter,
    PauliNoise,
    PauliString,
    PhaseGradient,
    Power,
    Projector0,
    Projector1,
    QFT,
    R,
    Reset,
    RX,
    RXX,
    RY,
    RYY,
    RZ,
    RZX,
    RZZ,
    S,
    SDG,
    SigmaMinus,
    SigmaPlus,
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
)
from qlower.serialization import decode_operation, encode_operation


def _simple_circuit() -> Circuit:
    return (
        Circuit()
        .push(H(), 1)
        .push(Control(1, X()), 1, 2)
        .push(RZ(1.57079632679), 2)
        .push(Measure(), [1, 2], [1, 2])
    )


SAMPLES = [
    ID(), X(), Y(), Z(), H(), S(), SDG(), T(), TDG(), SX(), SXDG(),
    P(0.1), RX(0.2), RY(0.3), RZ(0.4), U(0.1, 0.2, 0.3, 0.4), GPhase(0.5, 2),
    SWAP(), ISWAP(), RZZ(0.6), Custom(np.array([[0, -1j], [1j, 0]])),
    Control(2, H()), Power(H(), Fraction(1, 3)), Inverse(ISWAP()), Parallel(2, T()),
    Measure(), Reset(), Barrier(3), Depolarizing(2, 0.1), AmplitudeDamping(0.2),
    Operator(np.eye(2)), Projector0(), Projector1(), SigmaMinus(), SigmaPlus(),
    ExpectationValue(Projector1()),
    U1(0.1), U2(0.2, 0.3), U3(0.1, 0.2, 0.3), R(0.4, 0.5), RXX(0.1), RYY(0.2), RZX(0.3),
    XXplusYY(0.4, 0.5), XXminusYY(0.6, 0.7), ECR(), DCX(),
    QFT(3), PhaseGradient(2), Diffusion(2), PauliString("XIZ"),
    MeasureReset(), IfStatement(X(), "01"), MixedUnitary([0.9, 0.1], [ID(), X()]),
    PauliNoise([0.5, 0.5], ["XX", "ZI"]),
]


def test_samples_cover_every_operation() -> None:
    assert {type(op).name for op in SAMPLES} == set(OPERATIONS)


@pytest.mark.parametrize("op", SAMPLES, ids=repr)
def test_operation_round_trip(op) -> None:
    payload = json.loads(json.dumps(encode_operation(op)))
    assert payload["name"] == op.name
    assert decode_operation(payload) == op


def test_circuit_is_json_serialisable() -> None:
    payload = json.loads(_simple_circuit().to_json())

    assert payload["num_qubits"] == 2
    assert payload["num_bits"] == 2
    assert [inst["op"]["name"] for inst in payload["instructions"]] == [
        "H",
        "Control",
        "RZ",
        "Measure",
        "Measure",
    ]
    assert payload["instructions"][1]["qubits"] == [0, 1]


def test_circuit_round_trip_via_json(tmp_path) -> None:
    circuit = _simple_circuit()

    json_path = tmp_path / "circuit.json"
    text = circuit.to_json(json_path, indent=2)

    assert json_path.read_text() == text

    restored = Circuit.from_json(json_path)
    assert restored == circuit
    assert restored.to_dict() == circuit.to_dict()


def test_circuit_round_trip_from_string() -> None:
    circuit = Circuit().push(ExpectationValue(Operator(np.diag([1, -1]))), 1, 1)
    assert Circuit.from_json(circuit.to_json()) == circuit


def test_parameters_share_identity() -> None:
    theta = Parameter("theta")
    circuit = Circuit().push(RX(theta), 1).push(Control(1, P(theta)), 1, 2)

    restored = Circuit.from_json(circuit.to_json())
    (param,) = restored.free_parameters()
    assert param.name == "theta"
    assert restored[0].operation.theta is restored[1].operation.op.lam


def test_compound_expression_is_rejected() -> None:
    theta = Parameter("theta")
    with pytest.raises(ValueError):
        Circuit().push(RX(2 * theta), 1).to_json()


def test_unknown_operation_name() -> None:
    with pytest.raises(ValueError):
        decode_operation({"name": "Teleport"})
    with pytest.raises(ValueError):
        Instruction.from_dict({"op": {"name": "Teleport"}, "qubits": [0]})
