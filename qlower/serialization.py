"""JSON-friendly encoding of operations.

Every operation is encoded as a mapping with its ``name`` tag, an optional
``params`` list and the structural fields returned by ``_fields``.  Values
that JSON cannot represent directly are wrapped in single-key mappings:

``{"complex": [re, im]}``, ``{"fraction": [num, den]}``,
``{"parameter": name}``, ``{"matrix": {"real": ..., "imag": ...}}`` and
``{"operation": {...}}`` for nested operations.  Lists are encoded element
by element.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from numbers import Integral, Real
from typing import Any, Dict, Mapping

import numpy as np

from .operation import OPERATIONS, Operation
from .params import Parameter, ParameterExpression

LOGGER = logging.getLogger(__name__)


def encode_value(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    if isinstance(value, Operation):
        return {"operation": encode_operation(value)}
    if isinstance(value, np.ndarray):
        return {"matrix": {"real": value.real.tolist(), "imag": value.imag.tolist()}}
    if isinstance(value, Parameter):
        return {"parameter": value.name}
    if isinstance(value, ParameterExpression):
        raise ValueError(f"Cannot serialise compound parameter expression {value}")
    if isinstance(value, Fraction):
        if value.denominator == 1:
            return int(value.numerator)
        return {"fraction": [value.numerator, value.denominator]}
    if isinstance(value, bool):
        return value
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        return float(value)
    if isinstance(value, complex) or isinstance(value, np.complexfloating):
        return {"complex": [float(value.real), float(value.imag)]}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, str):
        return value
    raise TypeError(f"Cannot serialise value of type {type(value).__name__}")


def decode_value(data: Any, parameters: Dict[str, Parameter] | None = None) -> Any:
    """Inverse of :func:`encode_value`."""

    if parameters is None:
        parameters = {}
    if isinstance(data, Mapping):
        if len(data) != 1:
            raise ValueError(f"Malformed encoded value {data!r}")
        (tag, payload), = data.items()
        if tag == "operation":
            return decode_operation(payload, parameters)
        if tag == "matrix":
            real = np.asarray(payload["real"], dtype=float)
            mat = np.empty(real.shape, dtype=complex)
            mat.real = real
            mat.imag = np.asarray(payload["imag"], dtype=float)
            return mat
        if tag == "parameter":
            if payload not in parameters:
                parameters[payload] = Parameter(payload)
            return parameters[payload]
        if tag == "fraction":
            return Fraction(int(payload[0]), int(payload[1]))
        if tag == "complex":
            return complex(float(payload[0]), float(payload[1]))
        raise ValueError(f"Unknown value tag {tag!r}")
    if isinstance(data, list):
        return [decode_value(v, parameters) for v in data]
    return data


def encode_operation(op: Operation) -> Dict[str, Any]:
    """Return the tagged mapping describing ``op``."""

    if type(op).name not in OPERATIONS:
        raise TypeError(f"{type(op).__name__} has no serialisation tag")
    data: Dict[str, Any] = {"name": op.name}
    if op.parnames:
        data["params"] = [encode_value(getattr(op, n)) for n in op.parnames]
    for key, value in op._fields().items():
        data[key] = encode_value(value)
    return data


def decode_operation(
    data: Mapping[str, Any], parameters: Dict[str, Parameter] | None = None
) -> Operation:
    """Rebuild an operation from the mapping produced by :func:`encode_operation`.

    Raises
    ------
    ValueError
        If the ``name`` tag is unknown.
    """

    if parameters is None:
        parameters = {}
    name = data.get("name")
    try:
        cls = OPERATIONS[name]
    except KeyError:
        raise ValueError(f"Unknown operation {name!r}") from None
    params = [decode_value(v, parameters) for v in data.get("params", [])]
    fields = {
        key: decode_value(value, parameters)
        for key, value in data.items()
        if key not in ("name", "params")
    }
    LOGGER.debug("Decoding %s with params %s", name, params)
    return cls._from_fields(params, fields)


__all__ = ["encode_value", "decode_value", "encode_operation", "decode_operation"]
