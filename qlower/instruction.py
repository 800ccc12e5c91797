"""Operations bound to concrete targets."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Tuple

from .errors import ArityMismatchError, InvalidTargetError, NonGateOperatorError
from .nonunitary import PureOperator
from .operation import Operation
from .params import Parameter

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .circuit import Circuit


def _as_targets(values: Iterable[Any], kind: str) -> Tuple[int, ...]:
    targets = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, Integral):
            raise InvalidTargetError(f"{kind} target {v!r} is not an integer")
        if v < 0:
            raise InvalidTargetError(f"{kind} target {v} is negative")
        targets.append(int(v))
    if len(set(targets)) != len(targets):
        raise InvalidTargetError(f"Duplicate {kind} targets in {targets}")
    return tuple(targets)


@dataclass(frozen=True)
class Instruction:
    """An :class:`~qlower.operation.Operation` applied to concrete targets.

    Target indices are 0-based.  Each target list must match the arity of
    the operation and contain distinct indices; the same index may appear in
    different target lists since qubits, bits and z-registers live in
    separate index spaces.
    """

    operation: Operation
    qubits: Tuple[int, ...] = ()
    bits: Tuple[int, ...] = ()
    zvars: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        op = self.operation
        if not isinstance(op, Operation):
            raise TypeError(f"Expected an Operation, got {type(op).__name__}")
        if isinstance(op, PureOperator):
            raise NonGateOperatorError(
                f"{op} is an operator, not a gate; wrap it in ExpectationValue"
            )
        qubits = _as_targets(self.qubits, "qubit")
        bits = _as_targets(self.bits, "bit")
        zvars = _as_targets(self.zvars, "z-register")
        if (len(qubits), len(bits), len(zvars)) != op.arity:
            raise ArityMismatchError(
                f"{op} expects {op.arity} (qubits, bits, zvars) targets, "
                f"got {(len(qubits), len(bits), len(zvars))}"
            )
        object.__setattr__(self, "qubits", qubits)
        object.__setattr__(self, "bits", bits)
        object.__setattr__(self, "zvars", zvars)

    def inverse(self) -> "Instruction":
        return Instruction(self.operation.inverse(), self.qubits, self.bits, self.zvars)

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> "Instruction":
        return Instruction(self.operation.evaluate(bindings), self.qubits, self.bits, self.zvars)

    def decompose(self) -> "Circuit":
        from .decompositions import decompose

        return decompose(self)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the instruction."""

        from .serialization import encode_operation

        data: Dict[str, Any] = {
            "op": encode_operation(self.operation),
            "qubits": list(self.qubits),
        }
        if self.bits:
            data["bits"] = list(self.bits)
        if self.zvars:
            data["zvars"] = list(self.zvars)
        return data

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], parameters: Dict[str, Parameter] | None = None
    ) -> "Instruction":
        """Create an :class:`Instruction` from a mapping.

        ``parameters`` maps symbol names to the :class:`Parameter` objects
        already created while decoding, so that the same name resolves to
        the same symbol across instructions.
        """

        from .serialization import decode_operation

        return cls(
            decode_operation(data["op"], parameters),
            tuple(data.get("qubits", ())),
            tuple(data.get("bits", ())),
            tuple(data.get("zvars", ())),
        )

    def __repr__(self) -> str:
        targets = [f"q[{q + 1}]" for q in self.qubits]
        targets += [f"c[{b + 1}]" for b in self.bits]
        targets += [f"z[{z + 1}]" for z in self.zvars]
        if not targets:
            return repr(self.operation)
        return f"{self.operation!r} @ {', '.join(targets)}"


__all__ = ["Instruction"]
