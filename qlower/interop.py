"""Conversion between :class:`~qlower.circuit.Circuit` and Qiskit circuits.

Qubit ``i`` of a qlower circuit is qubit ``i`` of the Qiskit circuit.  Qiskit
orders matrix indices little-endian (qubit 0 least significant) while qlower
matrices are big-endian, so ``Operator(to_qiskit(c)).reverse_qargs()``
equals ``c.matrix()``.  Explicit matrices (``Custom``) are reordered when
crossing the boundary.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Type

import numpy as np
from qiskit.circuit import ControlledGate, ParameterExpression, QuantumCircuit
from qiskit.circuit import Gate as QiskitGate
from qiskit.circuit.library import (
    CUGate,
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
    UnitaryGate,
    XGate,
    XXMinusYYGate,
    XXPlusYYGate,
    YGate,
    ZGate,
    iSwapGate,
)

from . import gates, matrices
from .circuit import Circuit
from .instruction import Instruction
from .modifiers import Control, Inverse, Parallel, Power
from .nonunitary import Barrier, Measure, Reset
from .operation import Operation
from .params import is_concrete, to_float

LOGGER = logging.getLogger(__name__)

_FIXED: Dict[Type[Operation], Type[QiskitGate]] = {
    gates.GateID: IGate,
    gates.GateX: XGate,
    gates.GateY: YGate,
    gates.GateZ: ZGate,
    gates.GateH: HGate,
    gates.GateS: SGate,
    gates.GateSDG: SdgGate,
    gates.GateT: TGate,
    gates.GateTDG: TdgGate,
    gates.GateSX: SXGate,
    gates.GateSXDG: SXdgGate,
    gates.GateP: PhaseGate,
    gates.GateRX: RXGate,
    gates.GateRY: RYGate,
    gates.GateRZ: RZGate,
    gates.GateSWAP: SwapGate,
    gates.GateISWAP: iSwapGate,
    gates.GateRZZ: RZZGate,
    gates.GateU1: PhaseGate,
    gates.GateR: RGate,
    gates.GateRXX: RXXGate,
    gates.GateRYY: RYYGate,
    gates.GateRZX: RZXGate,
    gates.GateXXplusYY: XXPlusYYGate,
    gates.GateXXminusYY: XXMinusYYGate,
    gates.GateECR: ECRGate,
    gates.GateDCX: DCXGate,
}

_FROM_NAME: Dict[str, Type[Operation]] = {
    "id": gates.GateID,
    "x": gates.GateX,
    "y": gates.GateY,
    "z": gates.GateZ,
    "h": gates.GateH,
    "s": gates.GateS,
    "sdg": gates.GateSDG,
    "t": gates.GateT,
    "tdg": gates.GateTDG,
    "sx": gates.GateSX,
    "sxdg": gates.GateSXDG,
    "p": gates.GateP,
    "rx": gates.GateRX,
    "ry": gates.GateRY,
    "rz": gates.GateRZ,
    "u": gates.GateU,
    "u3": gates.GateU,
    "swap": gates.GateSWAP,
    "iswap": gates.GateISWAP,
    "rzz": gates.GateRZZ,
    "u1": gates.GateU1,
    "r": gates.GateR,
    "rxx": gates.GateRXX,
    "ryy": gates.GateRYY,
    "rzx": gates.GateRZX,
    "xx_plus_yy": gates.GateXXplusYY,
    "xx_minus_yy": gates.GateXXminusYY,
    "ecr": gates.GateECR,
    "dcx": gates.GateDCX,
}


def reverse_qubit_order(mat: np.ndarray) -> np.ndarray:
    """Convert a matrix between big- and little-endian qubit order."""

    n = matrices.num_qubits_of(mat)
    dim = 2**n
    axes = list(reversed(range(n))) + list(reversed(range(n, 2 * n)))
    return np.asarray(mat).reshape((2,) * (2 * n)).transpose(axes).reshape(dim, dim)


def _qiskit_param(value: Any) -> Any:
    if isinstance(value, ParameterExpression) and not is_concrete(value):
        return value
    return to_float(value)


def _is_zero(value: Any) -> bool:
    return is_concrete(value) and to_float(value) == 0.0


def _phase_gate(num_qubits: int, lam: Any) -> QiskitGate:
    qc = QuantumCircuit(num_qubits, global_phase=_qiskit_param(lam))
    return qc.to_gate(label="GPhase")


def to_qiskit_gate(op: Operation) -> QiskitGate:
    """Return the Qiskit gate equivalent to the unitary ``op``.

    Raises
    ------
    ValueError
        If ``op`` has no Qiskit counterpart.
    """

    params = [_qiskit_param(v) for v in op.parameters]
    if type(op) in _FIXED:
        return _FIXED[type(op)](*params)
    if isinstance(op, gates.GateU):
        theta, phi, lam, gamma = params
        if _is_zero(op.gamma):
            return UGate(theta, phi, lam)
        qc = QuantumCircuit(1, global_phase=gamma)
        qc.u(theta, phi, lam, 0)
        return qc.to_gate(label="U")
    if isinstance(op, gates.GPhase):
        return _phase_gate(op.num_qubits, op.lam)
    if isinstance(op, gates.GateCustom):
        return UnitaryGate(reverse_qubit_order(op.matrix()))
    if isinstance(op, Control):
        if op.num_controls == 1 and isinstance(op.op, gates.GateU):
            return CUGate(*params)
        return to_qiskit_gate(op.op).control(op.num_controls)
    if isinstance(op, Power):
        return to_qiskit_gate(op.op).power(float(op.exponent))
    if isinstance(op, Inverse):
        return to_qiskit_gate(op.op).inverse()
    if isinstance(op, Parallel):
        inner = to_qiskit_gate(op.op)
        width = op.op.num_qubits
        qc = QuantumCircuit(op.num_qubits)
        for i in range(op.repeats):
            qc.append(inner, list(range(i * width, (i + 1) * width)))
        return qc.to_gate(label=f"Parallel({op.repeats})")
    raise ValueError(f"No Qiskit equivalent for {op}")


def to_qiskit(circuit: Circuit) -> QuantumCircuit:
    """Build a Qiskit ``QuantumCircuit`` from ``circuit``.

    Z-register instructions such as expectation values and noise channels
    have no Qiskit counterpart and raise :class:`ValueError`.
    """

    qc = QuantumCircuit(circuit.num_qubits, circuit.num_bits)
    for inst in circuit:
        op = inst.operation
        qubits = list(inst.qubits)
        if isinstance(op, Measure):
            qc.measure(qubits[0], inst.bits[0])
        elif isinstance(op, Reset):
            qc.reset(qubits[0])
        elif isinstance(op, Barrier):
            qc.barrier(*qubits)
        elif isinstance(op, gates.GPhase):
            qc.global_phase += _qiskit_param(op.lam)
        elif op.is_unitary:
            qc.append(to_qiskit_gate(op), qubits)
        else:
            raise ValueError(f"No Qiskit equivalent for {op}")
    return qc


def _from_qiskit_params(values: Any) -> list:
    params = []
    for v in values:
        if isinstance(v, ParameterExpression):
            params.append(v if v.parameters else float(v))
        else:
            params.append(float(v))
    return params


def from_qiskit_gate(gate: QiskitGate) -> Operation:
    """Return the qlower operation equivalent to the Qiskit ``gate``.

    Raises
    ------
    ValueError
        If ``gate`` is not supported.
    """

    name = gate.name
    params = _from_qiskit_params(gate.params) if name != "unitary" else []
    if name == "cu":
        return Control(1, gates.GateU(*params))
    if name in _FROM_NAME:
        return _FROM_NAME[name](*params)
    if name == "unitary":
        return gates.GateCustom(reverse_qubit_order(gate.to_matrix()))
    if isinstance(gate, ControlledGate):
        open_controls = 2**gate.num_ctrl_qubits - 1
        if gate.ctrl_state != open_controls:
            raise ValueError(f"Open controls are not supported: {gate.name}")
        return Control(gate.num_ctrl_qubits, from_qiskit_gate(gate.base_gate))
    raise ValueError(f"Unsupported Qiskit operation {name!r}")


def from_qiskit(qc: QuantumCircuit) -> Circuit:
    """Build a :class:`~qlower.circuit.Circuit` from a Qiskit circuit."""

    circ = Circuit()
    phase = qc.global_phase
    if qc.num_qubits and not _is_zero(phase):
        circ.add(Instruction(gates.GPhase(_from_qiskit_params([phase])[0]), (0,)))
    for ci in qc.data:
        op = ci.operation
        qubits = [qc.find_bit(q).index for q in ci.qubits]
        bits = [qc.find_bit(c).index for c in ci.clbits]
        if op.name == "measure":
            circ.add(Instruction(Measure(), qubits, bits))
        elif op.name == "reset":
            circ.add(Instruction(Reset(), qubits))
        elif op.name == "barrier":
            circ.add(Instruction(Barrier(len(qubits)), qubits))
        else:
            circ.add(Instruction(from_qiskit_gate(op), qubits))
    LOGGER.debug("Converted Qiskit circuit with %d instructions", len(circ))
    return circ


__all__ = [
    "reverse_qubit_order",
    "to_qiskit_gate",
    "to_qiskit",
    "from_qiskit_gate",
    "from_qiskit",
]
