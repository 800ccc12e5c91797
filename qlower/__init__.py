"""Python API for qlower."""

from .errors import (
    QlowerError,
    ArityMismatchError,
    InvalidTargetError,
    NonGateOperatorError,
    NonInvertibleError,
    NonExponentiableError,
    NonUnitaryError,
    OutOfRangeParameterError,
    UnboundParameterError,
)
from .params import Parameter
from .operation import OPERATIONS, Operation, Gate
from .gates import (
    GateID as ID,
    GateX as X,
    GateY as Y,
    GateZ as Z,
    GateH as H,
    GateS as S,
    GateSDG as SDG,
    GateT as T,
    GateTDG as TDG,
    GateSX as SX,
    GateSXDG as SXDG,
    GateP as P,
    GateRX as RX,
    GateRY as RY,
    GateRZ as RZ,
    GateU as U,
    GateU1 as U1,
    GateU2 as U2,
    GateU3 as U3,
    GateR as R,
    GPhase,
    GateSWAP as SWAP,
    GateISWAP as ISWAP,
    GateRZZ as RZZ,
    GateRXX as RXX,
    GateRYY as RYY,
    GateRZX as RZX,
    GateXXplusYY as XXplusYY,
    GateXXminusYY as XXminusYY,
    GateECR as ECR,
    GateDCX as DCX,
    GateCustom as Custom,
)
from .generalized import QFT, PhaseGradient, Diffusion, PauliString
from .modifiers import (
    Control,
    Power,
    Inverse,
    Parallel,
    control,
    power,
    inverse,
    parallel,
    get_wrapped,
    CX,
    CY,
    CZ,
    CH,
    CS,
    CSX,
    CP,
    CRX,
    CRY,
    CRZ,
    CU,
    CSWAP,
    CCX,
    CCZ,
    C3X,
    CCustom,
)
from .nonunitary import (
    Measure,
    Reset,
    MeasureReset,
    IfStatement,
    Barrier,
    Depolarizing,
    AmplitudeDamping,
    MixedUnitary,
    PauliNoise,
    ExpectationValue,
    Operator,
    Projector0,
    Projector1,
    SigmaMinus,
    SigmaPlus,
)
from .instruction import Instruction
from .circuit import Circuit
from .decompositions import decompose, decompose_circuit, decompose_mcx
from .matrices import circuit_matrix
from .interop import from_qiskit, to_qiskit

__all__ = [
    "QlowerError",
    "ArityMismatchError",
    "InvalidTargetError",
    "NonGateOperatorError",
    "NonInvertibleError",
    "NonExponentiableError",
    "NonUnitaryError",
    "OutOfRangeParameterError",
    "UnboundParameterError",
    "Parameter",
    "OPERATIONS",
    "Operation",
    "Gate",
    "ID",
    "X",
    "Y",
    "Z",
    "H",
    "S",
    "SDG",
    "T",
    "TDG",
    "SX",
    "SXDG",
    "P",
    "RX",
    "RY",
    "RZ",
    "U",
    "U1",
    "U2",
    "U3",
    "R",
    "GPhase",
    "SWAP",
    "ISWAP",
    "RZZ",
    "RXX",
    "RYY",
    "RZX",
    "XXplusYY",
    "XXminusYY",
    "ECR",
    "DCX",
    "Custom",
    "QFT",
    "PhaseGradient",
    "Diffusion",
    "PauliString",
    "Control",
    "Power",
    "Inverse",
    "Parallel",
    "control",
    "power",
    "inverse",
    "parallel",
    "get_wrapped",
    "CX",
    "CY",
    "CZ",
    "CH",
    "CS",
    "CSX",
    "CP",
    "CRX",
    "CRY",
    "CRZ",
    "CU",
    "CSWAP",
    "CCX",
    "CCZ",
    "C3X",
    "CCustom",
    "Measure",
    "Reset",
    "MeasureReset",
    "IfStatement",
    "Barrier",
    "Depolarizing",
    "AmplitudeDamping",
    "MixedUnitary",
    "PauliNoise",
    "ExpectationValue",
    "Operator",
    "Projector0",
    "Projector1",
    "SigmaMinus",
    "SigmaPlus",
    "Instruction",
    "Circuit",
    "decompose",
    "decompose_circuit",
    "decompose_mcx",
    "circuit_matrix",
    "from_qiskit",
    "to_qiskit",
]
