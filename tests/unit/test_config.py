"""
tests/unit/test_config.py

Validación de RBMConfig (pydantic) y valores por defecto desde el entorno.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

import neurorbm.config as config_mod
from neurorbm.config import RBMConfig
from neurorbm.models.unit_types import UnitType


def test_defaults():
    cfg = RBMConfig(n_visible=10)
    assert cfg.n_hidden == 64
    assert cfg.visible_unit is UnitType.BINARY
    assert cfg.hidden_unit is UnitType.BINARY
    assert cfg.weight_std == pytest.approx(0.1)
    assert cfg.seed is None


def test_unit_strings_are_normalised():
    cfg = RBMConfig(n_visible=3, visible_unit="GAUSSIAN", hidden_unit=" Relu6 ")
    assert cfg.visible_unit is UnitType.GAUSSIAN
    assert cfg.hidden_unit is UnitType.RELU6


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n_visible": 0},
        {"n_visible": 3, "n_hidden": 0},
        {"n_visible": 3, "weight_std": 0.0},
        {"n_visible": 3, "dtype": "float16"},
        {"n_visible": 3, "hidden_unit": "tanh"},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValidationError):
        RBMConfig(**kwargs)


def test_illegal_layer_combination_rejected():
    with pytest.raises(ValidationError, match="no admite"):
        RBMConfig(n_visible=3, hidden_unit="gaussian")


def test_config_is_frozen():
    cfg = RBMConfig(n_visible=3)
    with pytest.raises(ValidationError):
        cfg.n_hidden = 5


def test_env_parsing(monkeypatch):
    monkeypatch.setenv("NR_STRICT_CHECKS", "0")
    monkeypatch.setenv("NR_DTYPE", " FLOAT64 ")
    assert config_mod.env_strict_checks() is False
    assert config_mod.env_dtype() == "float64"

    monkeypatch.delenv("NR_STRICT_CHECKS")
    monkeypatch.delenv("NR_DTYPE")
    assert config_mod.env_strict_checks() is True
    assert config_mod.env_dtype() == "float32"


def test_defaults_come_from_module_constants():
    cfg = RBMConfig(n_visible=2)
    assert cfg.strict_checks is config_mod.DEFAULT_STRICT_CHECKS
    assert cfg.dtype == config_mod.DEFAULT_DTYPE
