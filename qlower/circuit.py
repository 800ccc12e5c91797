"""Circuit representation and loading utilities for qlower."""

from __future__ import annotations

import json
import os
from numbers import Integral
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence, Set

import numpy as np

from .errors import ArityMismatchError, InvalidTargetError, NonGateOperatorError
from .instruction import Instruction
from .nonunitary import PureOperator
from .operation import Operation
from .params import Parameter


def _target_group(target: Any) -> List[int]:
    """Return ``target`` as a validated list of 1-based indices."""

    if isinstance(target, bool):
        raise InvalidTargetError(f"Invalid target {target!r}")
    if isinstance(target, Integral):
        group = [int(target)]
    elif isinstance(target, (str, bytes)) or not isinstance(target, Iterable):
        raise InvalidTargetError(f"Invalid target {target!r}")
    else:
        group = []
        for t in target:
            if isinstance(t, bool) or not isinstance(t, Integral):
                raise InvalidTargetError(f"Invalid target {t!r} in {target!r}")
            group.append(int(t))
    if not group:
        raise InvalidTargetError("Empty target group")
    if any(t < 1 for t in group):
        raise InvalidTargetError(f"Targets must be positive (1-based), got {group}")
    if len(set(group)) != len(group):
        raise InvalidTargetError(f"Duplicate targets in group {group}")
    return group


def broadcast(operation: Operation, targets: Sequence[Any]) -> List[Instruction]:
    """Expand ``operation`` on 1-based ``targets`` into instructions.

    ``targets`` holds one entry per qubit, bit and z-register slot of the
    operation, in that order.  Each entry is an index or a collection of
    indices.  Entries with more than one index are zipped together,
    stopping at the shortest one, while single indices are repeated.

    Raises
    ------
    NonGateOperatorError
        If ``operation`` is a pure operator.
    ArityMismatchError
        If the number of target groups differs from the operation arity.
    InvalidTargetError
        If a group is empty, not positive or has duplicates, or if an
        instruction would act twice on the same target.
    """

    if not isinstance(operation, Operation):
        raise TypeError(f"Expected an Operation, got {type(operation).__name__}")
    if isinstance(operation, PureOperator):
        raise NonGateOperatorError(
            f"{operation} is an operator, not a gate; wrap it in ExpectationValue"
        )
    nq, nb, nz = operation.arity
    if len(targets) != nq + nb + nz:
        raise ArityMismatchError(
            f"{operation} expects {nq} qubit, {nb} bit and {nz} z-register targets, "
            f"got {len(targets)} target groups"
        )
    groups = [_target_group(t) for t in targets]
    lengths = [len(g) for g in groups if len(g) > 1]
    count = min(lengths) if lengths else 1
    instructions = []
    for i in range(count):
        picked = [(g[i] if len(g) > 1 else g[0]) - 1 for g in groups]
        instructions.append(
            Instruction(operation, picked[:nq], picked[nq : nq + nb], picked[nq + nb :])
        )
    return instructions


class Circuit:
    """Ordered sequence of :class:`~qlower.instruction.Instruction` objects.

    Instructions are added with :meth:`push` and :meth:`insert`, which take
    1-based targets and validate everything before the circuit is modified,
    or with :meth:`add` and :meth:`append` for ready-made instructions.

    Parameters
    ----------
    instructions:
        Optional initial instructions.
    """

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        self.instructions: List[Instruction] = []
        self.append(instructions)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------
    def push(self, operation: Operation, *targets: Any) -> "Circuit":
        """Append ``operation`` on 1-based ``targets`` with broadcasting.

        ``Circuit().push(CX(), [1, 2], 3)`` adds ``CX @ q[1], q[3]`` and
        ``CX @ q[2], q[3]``.
        """

        self.instructions.extend(broadcast(operation, targets))
        return self

    def insert(self, position: int, operation: Operation, *targets: Any) -> "Circuit":
        """Insert ``operation`` before index ``position`` with broadcasting.

        ``position`` is an ordinary (0-based) sequence index into the
        circuit; targets are 1-based as in :meth:`push`.

        Raises
        ------
        IndexError
            If ``position`` lies outside ``0 .. len(self)``.
        """

        if not 0 <= position <= len(self.instructions):
            raise IndexError(
                f"Insert position {position} out of range for circuit of length {len(self)}"
            )
        new = broadcast(operation, targets)
        self.instructions[position:position] = new
        return self

    def add(self, instruction: Instruction) -> "Circuit":
        if not isinstance(instruction, Instruction):
            raise TypeError(f"Expected an Instruction, got {type(instruction).__name__}")
        self.instructions.append(instruction)
        return self

    def append(self, other: Iterable[Instruction]) -> "Circuit":
        """Append the instructions of ``other`` without remapping targets."""

        new = list(other)
        for inst in new:
            if not isinstance(inst, Instruction):
                raise TypeError(f"Expected an Instruction, got {type(inst).__name__}")
        self.instructions.extend(new)
        return self

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __getitem__(self, index: int | slice) -> "Instruction | Circuit":
        if isinstance(index, slice):
            return Circuit(self.instructions[index])
        return self.instructions[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circuit):
            return NotImplemented
        return self.instructions == other.instructions

    def __bool__(self) -> bool:
        return bool(self.instructions)

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------
    @property
    def num_qubits(self) -> int:
        return 1 + max((q for inst in self for q in inst.qubits), default=-1)

    @property
    def num_bits(self) -> int:
        return 1 + max((b for inst in self for b in inst.bits), default=-1)

    @property
    def num_zvars(self) -> int:
        return 1 + max((z for inst in self for z in inst.zvars), default=-1)

    def depth(self) -> int:
        """Number of layers when every instruction waits for its targets."""

        levels: Dict[tuple, int] = {}
        depth = 0
        for inst in self:
            wires = [("q", q) for q in inst.qubits]
            wires += [("c", b) for b in inst.bits]
            wires += [("z", z) for z in inst.zvars]
            layer = 1 + max((levels.get(w, 0) for w in wires), default=0)
            for w in wires:
                levels[w] = layer
            depth = max(depth, layer)
        return depth

    def free_parameters(self) -> Set[Parameter]:
        found: Set[Parameter] = set()
        for inst in self:
            found.update(inst.operation.free_parameters())
        return found

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------
    def inverse(self) -> "Circuit":
        """Return the inverse circuit: reversed order, each instruction inverted."""

        return Circuit(inst.inverse() for inst in reversed(self.instructions))

    def evaluate(self, bindings: Mapping[Parameter, Any]) -> "Circuit":
        return Circuit(inst.evaluate(bindings) for inst in self)

    def decompose(self) -> "Circuit":
        """Lower every instruction by one step."""

        from .decompositions import decompose

        return decompose(self)

    def matrix(self, num_qubits: int | None = None) -> np.ndarray:
        """Return the unitary implemented by the circuit."""

        from .matrices import circuit_matrix

        return circuit_matrix(self, num_qubits)

    # ------------------------------------------------------------------
    # JSON serialisation helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the circuit."""

        return {
            "num_qubits": self.num_qubits,
            "num_bits": self.num_bits,
            "num_zvars": self.num_zvars,
            "instructions": [inst.to_dict() for inst in self],
        }

    def to_json(self, path: str | os.PathLike[str] | None = None, **json_kwargs: Any) -> str:
        """Serialise the circuit to JSON and optionally write it to ``path``."""

        text = json.dumps(self.to_dict(), **json_kwargs)
        if path is not None:
            with open(os.fspath(path), "w", encoding="utf8") as fh:
                fh.write(text)
        return text

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Circuit":
        """Create a :class:`Circuit` from the mapping produced by :meth:`to_dict`."""

        parameters: Dict[str, Parameter] = {}
        return cls(
            Instruction.from_dict(item, parameters) for item in data.get("instructions", [])
        )

    @classmethod
    def from_json(cls, path_or_str: str | os.PathLike[str]) -> "Circuit":
        """Build a :class:`Circuit` from a JSON string or file."""

        text = os.fspath(path_or_str)
        if os.path.exists(text):
            with open(text, "r", encoding="utf8") as fh:
                text = fh.read()
        return cls.from_dict(json.loads(text))

    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        if not self.instructions:
            return "empty circuit"
        lines = [f"{self.num_qubits}-qubit circuit with {len(self)} instructions:"]
        last = len(self) - 1
        for i, inst in enumerate(self):
            branch = "└── " if i == last else "├── "
            lines.append(branch + repr(inst))
        return "\n".join(lines)


__all__ = ["Circuit", "broadcast"]
