import os
from dataclasses import dataclass

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_value(name: str) -> str | None:
    """Return the stripped value of ``name`` or ``None`` when unset or blank."""

    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return val.strip()


def _int_from_env(name: str, default: int) -> int:
    val = _env_value(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    """Return a floating-point value parsed from the environment."""

    val = _env_value(name)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    val = _env_value(name)
    if val is None:
        return default
    if val.lower() in _TRUE:
        return True
    if val.lower() in _FALSE:
        return False
    return default


@dataclass
class Config:
    """Runtime configuration defaults for qlower.

    Values may be overridden via ``QLOWER_*`` environment variables or by
    mutating :data:`DEFAULT` at runtime.
    """

    # Eigenvalues whose imaginary part is below this are treated as real
    # before a fractional power picks the principal branch.
    eigenvalue_snap_tol: float = _float_from_env("QLOWER_EIGENVALUE_SNAP_TOL", 1e-12)
    unitary_atol: float = _float_from_env("QLOWER_UNITARY_ATOL", 1e-8)
    max_decompose_depth: int = _int_from_env("QLOWER_MAX_DECOMPOSE_DEPTH", 64)
    verbose_decomposition: bool = _bool_from_env("QLOWER_VERBOSE_DECOMPOSITION", False)


# Global configuration instance used when modules import ``qlower.config``.
DEFAULT = Config()
