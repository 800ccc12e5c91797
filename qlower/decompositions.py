"""Gate decomposition utilities for qlower.

Every operation can be lowered by one step with :func:`decompose`.  Leaf
gates follow small fixed rules towards the basis ``U``, ``CX`` and
``GPhase``; modifiers push their action into the decomposition of the wrapped
gate.  Multi-controlled gates are synthesised with the constructions of

    Barenco, A. et al. Elementary gates for quantum computation.
    Phys. Rev. A 52, 3457-3467 (1995).

Lemma 7.2 and 7.3 build multi-controlled ``X`` gates from Toffoli gates
using borrowed ancilla qubits, and Lemma 7.5 (recursive square roots) handles
controlled single qubit gates without any ancilla.

All functions in this module work with 0-based qubit indices.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from . import config
from .circuit import Circuit
from .errors import InvalidTargetError
from .gates import (
    GPhase,
    GateCustom,
    GateDCX,
    GateECR,
    GateH,
    GateID,
    GateISWAP,
    GateP,
    GateR,
    GateRX,
    GateRXX,
    GateRY,
    GateRYY,
    GateRZ,
    GateRZX,
    GateRZZ,
    GateS,
    GateSDG,
    GateSWAP,
    GateSX,
    GateSXDG,
    GateT,
    GateTDG,
    GateU,
    GateU1,
    GateU2,
    GateU3,
    GateX,
    GateXXminusYY,
    GateXXplusYY,
    GateY,
    GateZ,
)
from .generalized import QFT, Diffusion, PauliString, PhaseGradient
from .instruction import Instruction
from .modifiers import Control, Inverse, Parallel, Power, control, inverse, power
from .nonunitary import Barrier, IfStatement, Measure, MeasureReset, Reset
from .operation import Operation
from .params import is_concrete, scale, to_number

LOGGER = logging.getLogger(__name__)

Rule = Callable[[Circuit, Operation, Sequence[int], Sequence[int], Sequence[int]], Circuit]

_RULES: Dict[Type[Operation], Rule] = {}
_CONTROL_RULES: Dict[Tuple[Optional[int], Type[Operation]], Rule] = {}


def register_decomposition(*op_types: Type[Operation]) -> Callable[[Rule], Rule]:
    """Register the decorated function as the rule for ``op_types``."""

    def decorator(rule: Rule) -> Rule:
        for op_type in op_types:
            _RULES[op_type] = rule
        return rule

    return decorator


def register_control_decomposition(
    wrapped_type: Type[Operation], num_controls: Optional[int] = None
) -> Callable[[Rule], Rule]:
    """Register a rule for ``Control(num_controls, wrapped_type(...))``.

    ``num_controls=None`` matches any number of controls.
    """

    def decorator(rule: Rule) -> Rule:
        _CONTROL_RULES[(num_controls, wrapped_type)] = rule
        return rule

    return decorator


def _emit(circ: Circuit, op: Operation, *qubits: int) -> Circuit:
    return circ.add(Instruction(op, qubits))


def _emit_as_is(circ: Circuit, op: Operation, qubits, bits, zvars) -> Circuit:
    return circ.add(Instruction(op, qubits, bits, zvars))


def _is_integer(exponent) -> bool:
    return isinstance(exponent, Fraction) and exponent.denominator == 1


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------
def decompose_operation(
    circ: Circuit,
    op: Operation,
    qubits: Sequence[int],
    bits: Sequence[int] = (),
    zvars: Sequence[int] = (),
) -> Circuit:
    """Append the one-step lowering of ``op`` on the given targets to ``circ``.

    Operations without a rule are appended unchanged.  Returns ``circ``.
    """

    rule = _RULES.get(type(op))
    if rule is None:
        return _emit_as_is(circ, op, qubits, bits, zvars)
    LOGGER.debug("Decomposing %s on qubits %s", op, list(qubits))
    return rule(circ, op, list(qubits), list(bits), list(zvars))


def decompose(obj: Operation | Instruction | Circuit) -> Circuit:
    """Lower an operation, instruction or circuit by one step.

    An :class:`~qlower.operation.Operation` is decomposed on the targets
    ``0 .. n-1``.  The input is never modified.
    """

    circ = Circuit()
    if isinstance(obj, Circuit):
        for inst in obj:
            decompose_operation(circ, inst.operation, inst.qubits, inst.bits, inst.zvars)
    elif isinstance(obj, Instruction):
        decompose_operation(circ, obj.operation, obj.qubits, obj.bits, obj.zvars)
    elif isinstance(obj, Operation):
        nq, nb, nz = obj.arity
        decompose_operation(circ, obj, range(nq), range(nb), range(nz))
    else:
        raise TypeError(f"Cannot decompose object of type {type(obj).__name__}")
    return circ


def is_basis_operation(op: Operation) -> bool:
    """Return ``True`` for the default target basis of :func:`decompose_circuit`."""

    if isinstance(op, Control):
        return op.num_controls == 1 and isinstance(op.op, GateX)
    if isinstance(op, IfStatement):
        return is_basis_operation(op.op)
    return isinstance(op, (GateU, GPhase, GateCustom, Measure, Reset, Barrier))


def decompose_circuit(
    circuit: Operation | Instruction | Circuit,
    is_supported: Callable[[Operation], bool] | None = None,
    max_depth: int | None = None,
) -> Circuit:
    """Repeatedly decompose until every operation is supported.

    Parameters
    ----------
    circuit:
        Circuit (or single operation/instruction) to lower.
    is_supported:
        Predicate selecting operations that are kept as they are.  Defaults
        to :func:`is_basis_operation`.
    max_depth:
        Maximum number of decomposition passes, defaults to
        :attr:`qlower.config.Config.max_decompose_depth`.

    Operations without a decomposition rule are left in place, so the
    result may still contain unsupported operations.
    """

    if is_supported is None:
        is_supported = is_basis_operation
    if max_depth is None:
        max_depth = config.DEFAULT.max_decompose_depth
    level = logging.INFO if config.DEFAULT.verbose_decomposition else logging.DEBUG

    if isinstance(circuit, Operation):
        nq, nb, nz = circuit.arity
        circuit = Circuit([Instruction(circuit, range(nq), range(nb), range(nz))])
    elif isinstance(circuit, Instruction):
        circuit = Circuit([circuit])

    current = circuit
    for depth in range(1, max_depth + 1):
        if all(is_supported(inst.operation) for inst in current):
            break
        lowered = Circuit()
        for inst in current:
            if is_supported(inst.operation):
                lowered.add(inst)
            else:
                decompose_operation(lowered, inst.operation, inst.qubits, inst.bits, inst.zvars)
        LOGGER.log(level, "Pass %d: %d -> %d instructions", depth, len(current), len(lowered))
        if lowered == current:
            LOGGER.log(level, "No further decomposition rules apply")
            break
        current = lowered
    else:
        LOGGER.warning("Decomposition stopped after %d passes", max_depth)
    return current


# ----------------------------------------------------------------------
# Modifiers
# ----------------------------------------------------------------------
@register_decomposition(Inverse)
def _decompose_inverse(circ, op, qubits, bits, zvars):
    inner = decompose_operation(Circuit(), op.op, qubits, bits, zvars)
    for inst in reversed(inner.instructions):
        circ.add(inst.inverse())
    return circ


@register_decomposition(Parallel)
def _decompose_parallel(circ, op, qubits, bits, zvars):
    width = op.op.num_qubits
    for i in range(op.repeats):
        _emit(circ, op.op, *qubits[i * width : (i + 1) * width])
    return circ


@register_decomposition(Power)
def _decompose_power(circ, op, qubits, bits, zvars):
    if _is_integer(op.exponent):
        for _ in range(int(op.exponent)):
            _emit(circ, op.op, *qubits)
        return circ
    inner = decompose_operation(Circuit(), op.op, qubits, bits, zvars)
    if len(inner) == 1 and inner[0].operation != op.op:
        inst = inner[0]
        return _emit(circ, power(inst.operation, op.exponent), *inst.qubits)
    # no general rule for fractional powers of composite gates
    return _emit(circ, op, *qubits)


@register_decomposition(Control)
def _decompose_control(circ, op, qubits, bits, zvars):
    n = op.num_controls
    wrapped = op.op
    rule = _CONTROL_RULES.get((n, type(wrapped))) or _CONTROL_RULES.get((None, type(wrapped)))
    if rule is not None:
        return rule(circ, op, qubits, bits, zvars)

    controls, targets = qubits[:n], qubits[n:]
    if wrapped.num_qubits != 1 or n == 1:
        inner = decompose_operation(Circuit(), wrapped, targets)
        if len(inner) == 1 and inner[0].operation == wrapped:
            return _emit(circ, op, *qubits)
        for inst in inner:
            _emit(circ, control(n, inst.operation), *controls, *inst.qubits)
        return circ
    return _control_recursive(circ, n, wrapped, qubits)


def _control_recursive(circ: Circuit, num_controls: int, op: Operation, qubits: Sequence[int]) -> Circuit:
    """Lemma 7.5: controlled single qubit gate from controlled square roots.

    ``qubits`` lists the controls followed by the target.  With
    ``a = AND(controls[:-1])`` and ``b = controls[-1]`` the sequence applies
    ``V^b V^-(a xor b) V^a = V^(2ab)`` to the target.  The target serves as a
    borrowed ancilla for the inner multi-controlled ``X`` gates.
    """

    if num_controls == 1:
        return _emit(circ, control(1, op), *qubits)

    v = power(op, Fraction(1, 2))
    vdg = inverse(v)
    controls, target = list(qubits[:-1]), qubits[-1]

    _emit(circ, control(1, v), controls[-1], target)
    _mcx(circ, controls[:-1], controls[-1], [target])
    _emit(circ, control(1, vdg), controls[-1], target)
    _mcx(circ, controls[:-1], controls[-1], [target])

    rest = controls[:-1] + [target]
    if num_controls == 2:
        return _emit(circ, control(1, v), *rest)
    return _control_recursive(circ, num_controls - 1, v, rest)


# ----------------------------------------------------------------------
# Multi-controlled X
# ----------------------------------------------------------------------
def decompose_mcx(
    controls: Sequence[int],
    target: int,
    ancillae: Sequence[int] = (),
    circuit: Circuit | None = None,
) -> Circuit:
    """Return a decomposition of an n-controlled X gate.

    The ancilla qubits are borrowed: they may hold any state and are
    returned unchanged.  The construction depends on the number ``c`` of
    controls and ``a`` of ancillae:

    * ``c <= 2``: the gate itself (``X``, ``CX`` or ``CCX``).
    * ``a >= c - 2``: Lemma 7.2, ``4 (c - 2)`` Toffoli gates.
    * ``0 < a < c - 2``: Lemma 7.3, split into two smaller gates each using
      the other half of the register as ancillae.
    * ``a == 0``: Lemma 7.5 recursion on square roots of ``X``.

    Parameters
    ----------
    controls:
        Indices of the control qubits.
    target:
        Index of the target qubit.
    ancillae:
        Indices of qubits that may be borrowed.
    circuit:
        Circuit to append to.  A new circuit is created when omitted.

    Raises
    ------
    InvalidTargetError
        If the qubit indices are not distinct.
    """

    controls = [int(c) for c in controls]
    ancillae = [int(a) for a in ancillae]
    everything = controls + [int(target)] + ancillae
    if len(set(everything)) != len(everything):
        raise InvalidTargetError(f"Qubits of multi-controlled X must be distinct: {everything}")
    circ = Circuit() if circuit is None else circuit
    LOGGER.debug(
        "Multi-controlled X with %d controls and %d ancillae", len(controls), len(ancillae)
    )
    return _mcx(circ, controls, int(target), ancillae)


def _mcx(circ: Circuit, controls: List[int], target: int, ancillae: List[int]) -> Circuit:
    c = len(controls)
    a = len(ancillae)
    total = c + 1 + a

    if c == 0:
        return _emit(circ, GateX(), target)
    if c <= 2:
        return _emit(circ, Control(c, GateX()), *controls, target)

    if total >= 2 * c - 1:
        # Lemma 7.2: a ladder of Toffoli gates through c - 2 ancillae.
        ccx = Control(2, GateX())
        top = (controls[c - 1], ancillae[a - 1], target)
        ladder = [(controls[c - 1 - i], ancillae[a - 1 - i], ancillae[a - i]) for i in range(1, c - 2)]
        bottom = (controls[0], controls[1], ancillae[a - c + 2])
        for _ in range(2):
            _emit(circ, ccx, *top)
            for qubits in ladder:
                _emit(circ, ccx, *qubits)
            _emit(circ, ccx, *bottom)
            for qubits in reversed(ladder):
                _emit(circ, ccx, *qubits)
        return circ

    if a > 0:
        # Lemma 7.3: AND of the first m controls into ancillae[0], then
        # AND of the remaining controls and that ancilla into the target.
        m = total // 2
        first = _mcx(Circuit(), controls[:m], ancillae[0], controls[m:] + [target] + ancillae[1:])
        second = _mcx(Circuit(), controls[m:] + [ancillae[0]], target, controls[:m] + ancillae[1:])
        for part in (first, second, first, second):
            circ.append(part)
        return circ

    return _control_recursive(circ, c, GateX(), controls + [target])


# ----------------------------------------------------------------------
# Controlled gates with dedicated rules
# ----------------------------------------------------------------------
def _toffoli(circ: Circuit, control1: int, control2: int, target: int) -> Circuit:
    """Append the Clifford+T network of a Toffoli (``CCX``) gate."""

    cx = Control(1, GateX())
    _emit(circ, GateH(), target)
    _emit(circ, cx, control2, target)
    _emit(circ, GateTDG(), target)
    _emit(circ, cx, control1, target)
    _emit(circ, GateT(), target)
    _emit(circ, cx, control2, target)
    _emit(circ, GateTDG(), target)
    _emit(circ, cx, control1, target)
    _emit(circ, GateT(), control2)
    _emit(circ, GateT(), target)
    _emit(circ, GateH(), target)
    _emit(circ, cx, control1, control2)
    _emit(circ, GateT(), control1)
    _emit(circ, GateTDG(), control2)
    return _emit(circ, cx, control1, control2)


@register_control_decomposition(GateX, 1)
def _decompose_cx(circ, op, qubits, bits, zvars):
    return _emit(circ, op, *qubits)


@register_control_decomposition(GateX, 2)
def _decompose_ccx(circ, op, qubits, bits, zvars):
    return _toffoli(circ, *qubits)


@register_control_decomposition(GateZ, 2)
def _decompose_ccz(circ, op, qubits, bits, zvars):
    r"""CCZ = H_t \cdot CCX \cdot H_t."""
    c1, c2, t = qubits
    _emit(circ, GateH(), t)
    _toffoli(circ, c1, c2, t)
    return _emit(circ, GateH(), t)


@register_control_decomposition(GateZ, 1)
def _decompose_cz(circ, op, qubits, bits, zvars):
    c, t = qubits
    _emit(circ, GateH(), t)
    _emit(circ, Control(1, GateX()), c, t)
    return _emit(circ, GateH(), t)


@register_control_decomposition(GateY, 1)
def _decompose_cy(circ, op, qubits, bits, zvars):
    c, t = qubits
    _emit(circ, GateSDG(), t)
    _emit(circ, Control(1, GateX()), c, t)
    return _emit(circ, GateS(), t)


@register_control_decomposition(GateH, 1)
def _decompose_ch(circ, op, qubits, bits, zvars):
    c, t = qubits
    _emit(circ, GateS(), t)
    _emit(circ, GateH(), t)
    _emit(circ, GateT(), t)
    _emit(circ, Control(1, GateX()), c, t)
    _emit(circ, GateTDG(), t)
    _emit(circ, GateH(), t)
    return _emit(circ, GateSDG(), t)


@register_control_decomposition(GateP, 1)
def _decompose_cp(circ, op, qubits, bits, zvars):
    c, t = qubits
    half = scale(op.op.lam, 0.5)
    cx = Control(1, GateX())
    _emit(circ, GateP(half), c)
    _emit(circ, cx, c, t)
    _emit(circ, GateP(-half), t)
    _emit(circ, cx, c, t)
    return _emit(circ, GateP(half), t)


@register_control_decomposition(GateU, 1)
def _decompose_cu(circ, op, qubits, bits, zvars):
    c, t = qubits
    g = op.op
    cx = Control(1, GateX())
    _emit(circ, GateP(g.gamma), c)
    _emit(circ, GateP(scale(g.lam + g.phi, 0.5)), c)
    _emit(circ, GateP(scale(g.lam - g.phi, 0.5)), t)
    _emit(circ, cx, c, t)
    _emit(circ, GateU(scale(g.theta, -0.5), 0, scale(g.phi + g.lam, -0.5)), t)
    _emit(circ, cx, c, t)
    return _emit(circ, GateU(scale(g.theta, 0.5), g.phi, 0), t)


@register_control_decomposition(GPhase)
def _decompose_cgphase(circ, op, qubits, bits, zvars):
    # A controlled global phase is a phase on the controls only.
    n = op.num_controls
    phase = GateP(op.op.lam)
    if n == 1:
        return _emit(circ, phase, qubits[0])
    return _emit(circ, Control(n - 1, phase), *qubits[:n])


@register_control_decomposition(GateSWAP, 1)
def _decompose_cswap(circ, op, qubits, bits, zvars):
    c, a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, cx, b, a)
    _toffoli(circ, c, a, b)
    return _emit(circ, cx, b, a)


# ----------------------------------------------------------------------
# Leaf gates
# ----------------------------------------------------------------------
@register_decomposition(GateID)
def _decompose_id(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(0, 0, 0), *qubits)


@register_decomposition(GateX)
def _decompose_x(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(math.pi, 0, math.pi), *qubits)


@register_decomposition(GateY)
def _decompose_y(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(math.pi, math.pi / 2, math.pi / 2), *qubits)


@register_decomposition(GateZ)
def _decompose_z(circ, op, qubits, bits, zvars):
    return _emit(circ, GateP(math.pi), *qubits)


@register_decomposition(GateH)
def _decompose_h(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(math.pi / 2, 0, math.pi), *qubits)


_PHASE_ANGLES = {
    GateS: math.pi / 2,
    GateSDG: -math.pi / 2,
    GateT: math.pi / 4,
    GateTDG: -math.pi / 4,
}


@register_decomposition(*_PHASE_ANGLES)
def _decompose_phase_gate(circ, op, qubits, bits, zvars):
    return _emit(circ, GateP(_PHASE_ANGLES[type(op)]), *qubits)


@register_decomposition(GateSX)
def _decompose_sx(circ, op, qubits, bits, zvars):
    (q,) = qubits
    _emit(circ, GateSDG(), q)
    _emit(circ, GateH(), q)
    _emit(circ, GateSDG(), q)
    return _emit(circ, GPhase(math.pi / 4), q)


@register_decomposition(GateSXDG)
def _decompose_sxdg(circ, op, qubits, bits, zvars):
    (q,) = qubits
    _emit(circ, GateS(), q)
    _emit(circ, GateH(), q)
    _emit(circ, GateS(), q)
    return _emit(circ, GPhase(-math.pi / 4), q)


@register_decomposition(GateP)
def _decompose_p(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(0, 0, op.lam), *qubits)


@register_decomposition(GateRX)
def _decompose_rx(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(op.theta, -math.pi / 2, math.pi / 2), *qubits)


@register_decomposition(GateRY)
def _decompose_ry(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(op.theta, 0, 0), *qubits)


@register_decomposition(GateRZ)
def _decompose_rz(circ, op, qubits, bits, zvars):
    (q,) = qubits
    _emit(circ, GPhase(scale(op.lam, -0.5)), q)
    return _emit(circ, GateU(0, 0, op.lam), q)


@register_decomposition(GateU)
def _decompose_u(circ, op, qubits, bits, zvars):
    if is_concrete(op.gamma) and to_number(op.gamma) == 0:
        return _emit(circ, op, *qubits)
    (q,) = qubits
    _emit(circ, GPhase(op.gamma), q)
    return _emit(circ, GateU(op.theta, op.phi, op.lam), q)


@register_decomposition(GateSWAP)
def _decompose_swap(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, cx, a, b)
    _emit(circ, cx, b, a)
    return _emit(circ, cx, a, b)


@register_decomposition(GateISWAP)
def _decompose_iswap(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, GateS(), a)
    _emit(circ, GateS(), b)
    _emit(circ, GateH(), a)
    _emit(circ, cx, a, b)
    _emit(circ, cx, b, a)
    return _emit(circ, GateH(), b)


@register_decomposition(GateRZZ)
def _decompose_rzz(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, cx, a, b)
    _emit(circ, GateRZ(op.theta), b)
    return _emit(circ, cx, a, b)


@register_decomposition(GateU1)
def _decompose_u1(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(0, 0, op.lam), *qubits)


@register_decomposition(GateU2)
def _decompose_u2(circ, op, qubits, bits, zvars):
    (q,) = qubits
    _emit(circ, GPhase(scale(op.phi + op.lam + math.pi / 2, -0.5)), q)
    return _emit(circ, GateU(math.pi / 2, op.phi, op.lam), q)


@register_decomposition(GateU3)
def _decompose_u3(circ, op, qubits, bits, zvars):
    (q,) = qubits
    _emit(circ, GPhase(scale(op.theta + op.phi + op.lam, -0.5)), q)
    return _emit(circ, GateU(op.theta, op.phi, op.lam), q)


@register_decomposition(GateR)
def _decompose_r(circ, op, qubits, bits, zvars):
    return _emit(circ, GateU(op.theta, op.phi - math.pi / 2, math.pi / 2 - op.phi), *qubits)


@register_decomposition(GateRXX)
def _decompose_rxx(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, GateH(), a)
    _emit(circ, GateH(), b)
    _emit(circ, cx, a, b)
    _emit(circ, GateRZ(op.theta), b)
    _emit(circ, cx, a, b)
    _emit(circ, GateH(), b)
    return _emit(circ, GateH(), a)


@register_decomposition(GateRYY)
def _decompose_ryy(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, GateRX(math.pi / 2), a)
    _emit(circ, GateRX(math.pi / 2), b)
    _emit(circ, cx, a, b)
    _emit(circ, GateRZ(op.theta), b)
    _emit(circ, cx, a, b)
    _emit(circ, GateRX(-math.pi / 2), a)
    return _emit(circ, GateRX(-math.pi / 2), b)


@register_decomposition(GateRZX)
def _decompose_rzx(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, GateH(), b)
    _emit(circ, cx, a, b)
    _emit(circ, GateRZ(op.theta), b)
    _emit(circ, cx, a, b)
    return _emit(circ, GateH(), b)


@register_decomposition(GateXXplusYY)
def _decompose_xx_plus_yy(circ, op, qubits, bits, zvars):
    # XX and YY commute, so the interaction splits into two rotations; the
    # phase angle is a Z rotation of the first qubit around them.
    a, b = qubits
    half = scale(op.theta, 0.5)
    _emit(circ, GateRZ(op.beta), a)
    _emit(circ, GateRXX(half), a, b)
    _emit(circ, GateRYY(half), a, b)
    return _emit(circ, GateRZ(-op.beta), a)


@register_decomposition(GateXXminusYY)
def _decompose_xx_minus_yy(circ, op, qubits, bits, zvars):
    a, b = qubits
    half = scale(op.theta, 0.5)
    _emit(circ, GateRZ(-op.beta), b)
    _emit(circ, GateRXX(half), a, b)
    _emit(circ, GateRYY(-half), a, b)
    return _emit(circ, GateRZ(op.beta), b)


@register_decomposition(GateECR)
def _decompose_ecr(circ, op, qubits, bits, zvars):
    a, b = qubits
    _emit(circ, GateRZX(math.pi / 4), a, b)
    _emit(circ, GateX(), a)
    return _emit(circ, GateRZX(-math.pi / 4), a, b)


@register_decomposition(GateDCX)
def _decompose_dcx(circ, op, qubits, bits, zvars):
    a, b = qubits
    cx = Control(1, GateX())
    _emit(circ, cx, a, b)
    return _emit(circ, cx, b, a)


# ----------------------------------------------------------------------
# Register-wide gates
# ----------------------------------------------------------------------
@register_decomposition(QFT)
def _decompose_qft(circ, op, qubits, bits, zvars):
    n = op.num_qubits
    for j in range(n):
        _emit(circ, GateH(), qubits[j])
        for k in range(j + 1, n):
            _emit(circ, Control(1, GateP(math.pi / 2 ** (k - j))), qubits[k], qubits[j])
    # the bits come out in reverse order
    for j in range(n // 2):
        _emit(circ, GateSWAP(), qubits[j], qubits[n - 1 - j])
    return circ


@register_decomposition(PhaseGradient)
def _decompose_phase_gradient(circ, op, qubits, bits, zvars):
    # qubit i carries weight 2^(n-1-i) of the basis state index
    for i in reversed(range(op.num_qubits)):
        _emit(circ, GateP(math.pi / 2**i), qubits[i])
    return circ


@register_decomposition(Diffusion)
def _decompose_diffusion(circ, op, qubits, bits, zvars):
    n = op.num_qubits
    for q in qubits:
        _emit(circ, GateH(), q)
        _emit(circ, GateX(), q)
    # flips the sign of |1...1>, i.e. of |0...0> between the X layers
    if n == 1:
        _emit(circ, GateZ(), *qubits)
    else:
        _emit(circ, control(n - 1, GateZ()), *qubits)
    for q in qubits:
        _emit(circ, GateX(), q)
        _emit(circ, GateH(), q)
    return circ


@register_decomposition(PauliString)
def _decompose_pauli_string(circ, op, qubits, bits, zvars):
    for gate, q in zip(op.gates(), qubits):
        _emit(circ, gate, q)
    return circ


# ----------------------------------------------------------------------
# Classical control
# ----------------------------------------------------------------------
@register_decomposition(IfStatement)
def _decompose_if(circ, op, qubits, bits, zvars):
    inner = decompose_operation(Circuit(), op.op, qubits)
    for inst in inner:
        circ.add(Instruction(IfStatement(inst.operation, op.bitstring), inst.qubits, bits))
    return circ


@register_decomposition(MeasureReset)
def _decompose_measure_reset(circ, op, qubits, bits, zvars):
    circ.add(Instruction(Measure(), qubits, bits))
    return circ.add(Instruction(IfStatement(GateX(), "1"), qubits, bits))


__all__ = [
    "register_decomposition",
    "register_control_decomposition",
    "decompose",
    "decompose_operation",
    "decompose_circuit",
    "decompose_mcx",
    "is_basis_operation",
]
