# tests/conftest.py
import os
import sys

import numpy as np
import pytest

# Asegura que el código del backend esté en el path (sin instalar el paquete)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend", "src"))

from neurorbm.models import RestrictedBoltzmannMachine  # noqa: E402


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def small_rbm() -> RestrictedBoltzmannMachine:
    """RBM binaria 4 -> 3 con pesos conocidos y sesgos en cero."""
    m = RestrictedBoltzmannMachine(n_visible=4, n_hidden=3, seed=7)
    m.W[...] = np.array(
        [
            [0.5, -1.0, 0.25],
            [1.5, 0.5, -0.75],
            [-0.5, 2.0, 1.0],
            [0.0, -0.25, 0.5],
        ],
        dtype=np.float32,
    )
    return m
