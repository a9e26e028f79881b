"""
tests/unit/test_unit_types.py

Políticas de unidad: rangos de activación, determinismo y legalidad por capa.
"""
from __future__ import annotations

import numpy as np
import pytest

from neurorbm.models.unit_types import (
    LAYER_HIDDEN,
    LAYER_VISIBLE,
    BinaryUnit,
    ClippedReluUnit,
    GaussianUnit,
    SoftmaxUnit,
    UnitConfigurationError,
    UnitType,
    resolve_policy,
)

HIDDEN_UNITS = ["binary", "relu", "relu1", "relu6", "softmax"]
VISIBLE_UNITS = ["binary", "gaussian", "relu", "relu1", "relu6"]


@pytest.fixture
def z(rng) -> np.ndarray:
    return rng.normal(scale=8.0, size=(64, 10))


# ---------------------------------------------------------------------------
# Resolución / legalidad
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("unit", HIDDEN_UNITS)
def test_hidden_units_resolve(unit):
    assert resolve_policy(LAYER_HIDDEN, unit).unit == UnitType(unit)


@pytest.mark.parametrize("unit", VISIBLE_UNITS)
def test_visible_units_resolve(unit):
    assert resolve_policy(LAYER_VISIBLE, unit).unit == UnitType(unit)


def test_gaussian_hidden_is_configuration_error():
    with pytest.raises(UnitConfigurationError, match="hidden"):
        resolve_policy(LAYER_HIDDEN, UnitType.GAUSSIAN)


def test_softmax_visible_is_configuration_error():
    with pytest.raises(UnitConfigurationError, match="visible"):
        resolve_policy(LAYER_VISIBLE, "softmax")


def test_unknown_unit_and_layer():
    with pytest.raises(UnitConfigurationError, match="desconocido"):
        resolve_policy(LAYER_HIDDEN, "tanh")
    with pytest.raises(UnitConfigurationError, match="Capa"):
        resolve_policy("middle", "binary")


def test_parse_is_case_insensitive():
    assert UnitType.parse(" RELU6 ") is UnitType.RELU6
    assert UnitType.parse(UnitType.SOFTMAX) is UnitType.SOFTMAX
    assert issubclass(UnitConfigurationError, ValueError)


def test_policies_are_shared_per_unit():
    assert resolve_policy(LAYER_HIDDEN, "relu1") is resolve_policy(LAYER_VISIBLE, "relu1")
    assert isinstance(resolve_policy(LAYER_HIDDEN, "relu6"), ClippedReluUnit)


# ---------------------------------------------------------------------------
# Activación
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("unit", HIDDEN_UNITS)
def test_activation_is_deterministic(unit, z):
    policy = resolve_policy(LAYER_HIDDEN, unit)
    assert np.array_equal(policy.activate(z), policy.activate(z))


def test_binary_activation_is_sigmoid(z):
    assert np.allclose(BinaryUnit().activate(z), 1.0 / (1.0 + np.exp(-z)), atol=1e-12)


def test_relu_activation_nonnegative(z):
    a = resolve_policy(LAYER_HIDDEN, "relu").activate(z)
    assert np.all(a >= 0.0)
    assert np.array_equal(a[z > 0], z[z > 0])


@pytest.mark.parametrize("unit,limit", [("relu1", 1.0), ("relu6", 6.0)])
def test_clipped_relu_activation_range(unit, limit, z):
    a = resolve_policy(LAYER_HIDDEN, unit).activate(z)
    assert np.all(a >= 0.0)
    assert np.all(a <= limit)
    assert np.any(a == limit)


def test_softmax_activation_sums_to_one(z):
    a = SoftmaxUnit().activate(z)
    assert np.allclose(a.sum(axis=-1), 1.0, atol=1e-6)


def test_gaussian_activation_is_identity_copy(z):
    a = GaussianUnit().activate(z)
    assert np.array_equal(a, z)
    assert a is not z and not np.shares_memory(a, z)


# ---------------------------------------------------------------------------
# Muestreo
# ---------------------------------------------------------------------------

def test_softmax_sample_is_one_hot(z, rng):
    policy = SoftmaxUnit()
    s = policy.sample(policy.activate(z), rng)
    assert set(np.unique(s)).issubset({0.0, 1.0})
    assert np.all(s.sum(axis=-1) == 1.0)
    assert np.array_equal(np.argmax(s, axis=-1), np.argmax(z, axis=-1))


def test_gaussian_sample_adds_no_noise(z, rng):
    policy = GaussianUnit()
    a = policy.activate(z)
    s = policy.sample(a, rng)
    assert np.array_equal(s, a)
    assert not np.shares_memory(s, a)


def test_relu1_sample_keeps_saturated_units(rng):
    policy = resolve_policy(LAYER_HIDDEN, "relu1")
    a = policy.activate(np.array([-3.0, 5.0, 0.4]))
    s = policy.sample(a, rng)
    assert s[0] == 0.0
    assert s[1] == 1.0
    assert s[2] != 0.4


def test_activate_and_sample_matches_two_step(z):
    policy = resolve_policy(LAYER_HIDDEN, "binary")
    s1 = policy.activate_and_sample(z, np.random.default_rng(5))
    s2 = policy.sample(policy.activate(z), np.random.default_rng(5))
    assert np.array_equal(s1, s2)
