"""Command line interface for lowering JSON circuits."""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter

from .circuit import Circuit
from .decompositions import decompose_circuit

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
    """Initialise logging for CLI usage."""

    level = logging.WARNING
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _summary(circuit: Circuit) -> str:
    counts = Counter(inst.operation.name for inst in circuit)
    lines = [
        f"qubits: {circuit.num_qubits}",
        f"bits: {circuit.num_bits}",
        f"zvars: {circuit.num_zvars}",
        f"instructions: {len(circuit)}",
        f"depth: {circuit.depth()}",
    ]
    for name, count in sorted(counts.items()):
        lines.append(f"  {name}: {count}")
    return "\n".join(lines)


def _cmd_decompose(args: argparse.Namespace) -> int:
    circuit = Circuit.from_json(args.input)
    LOGGER.info("Loaded %d instructions from %s", len(circuit), args.input)
    lowered = decompose_circuit(circuit, max_depth=args.depth)
    LOGGER.info("Lowered to %d instructions", len(lowered))
    text = lowered.to_json(args.output, indent=2)
    if args.output is None:
        print(text)
    else:
        print(f"Saved decomposed circuit to {args.output}")
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    circuit = Circuit.from_json(args.input)
    print(_summary(circuit))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="qlower", description="Inspect and decompose qlower JSON circuits"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase logging verbosity"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    dec = sub.add_parser("decompose", help="Lower a circuit to U, CX and GPhase")
    dec.add_argument("input", help="Input JSON file")
    dec.add_argument("--output", "-o", default=None, help="Destination JSON file")
    dec.add_argument(
        "--depth", type=int, default=None, help="Maximum number of decomposition passes"
    )
    dec.set_defaults(func=_cmd_decompose)

    info = sub.add_parser("info", help="Print a summary of a circuit")
    info.add_argument("input", help="Input JSON file")
    info.set_defaults(func=_cmd_info)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except (OSError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
