from fractions import Fraction

import numpy as np
import pytest

from qlower import H, Power, decompose_circuit
from qlower import config
from qlower.config import DEFAULT as CONFIG
from qlower.matrices import is_unitary_matrix, matrix_power


def test_int_from_env(monkeypatch):
    monkeypatch.setenv("QLOWER_TEST_INT", "12")
    assert config._int_from_env("QLOWER_TEST_INT", 3) == 12
    monkeypatch.setenv("QLOWER_TEST_INT", "twelve")
    assert config._int_from_env("QLOWER_TEST_INT", 3) == 3
    monkeypatch.delenv("QLOWER_TEST_INT")
    assert config._int_from_env("QLOWER_TEST_INT", 3) == 3


def test_float_from_env(monkeypatch):
    monkeypatch.setenv("QLOWER_TEST_FLOAT", "1e-6")
    assert config._float_from_env("QLOWER_TEST_FLOAT", 0.5) == pytest.approx(1e-6)
    monkeypatch.setenv("QLOWER_TEST_FLOAT", "  ")
    assert config._float_from_env("QLOWER_TEST_FLOAT", 0.5) == 0.5


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("yes", True), ("ON", True), ("0", False), ("off", False), ("maybe", None)],
)
def test_bool_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("QLOWER_TEST_BOOL", raw)
    result = config._bool_from_env("QLOWER_TEST_BOOL", None)
    assert result is expected


def test_defaults():
    cfg = config.Config()
    assert cfg.max_decompose_depth >= 1
    assert cfg.unitary_atol > 0


def test_verbose_decomposition_logs_at_info(monkeypatch, caplog):
    monkeypatch.setattr(CONFIG, "verbose_decomposition", True)
    with caplog.at_level("INFO", logger="qlower.decompositions"):
        decompose_circuit(Power(H(), 2))
    assert any(rec.levelname == "INFO" for rec in caplog.records)


def test_max_depth_default_is_used(monkeypatch, caplog):
    monkeypatch.setattr(CONFIG, "max_decompose_depth", 1)
    with caplog.at_level("WARNING", logger="qlower.decompositions"):
        decompose_circuit(Power(H(), 2))
    assert any("stopped after 1 passes" in rec.getMessage() for rec in caplog.records)


def test_snapped_eigenvalues_use_principal_branch():
    # eigenvalue -1 of Z becomes +i, so the square root of Z is S
    noisy = np.diag([1, np.exp(1j * (np.pi - 1e-14))])
    root = matrix_power(noisy, Fraction(1, 2))
    assert np.allclose(root, np.diag([1, 1j]))


def test_unitary_tolerance_is_configurable(monkeypatch):
    almost = np.diag([1, 1 + 1e-3])
    assert not is_unitary_matrix(almost)
    monkeypatch.setattr(CONFIG, "unitary_atol", 1e-2)
    assert is_unitary_matrix(almost)
