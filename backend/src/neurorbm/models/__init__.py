# backend/src/neurorbm/models/__init__.py
"""
Paquete de modelos (NumPy, independiente de frameworks).
Exporta la RBM y sus políticas de unidad para drivers de entrenamiento
y consumidores de features.
"""

from .rbm_manual import GibbsState, RestrictedBoltzmannMachine, preactivate
from .buffers import ActivationScratch
from .unit_types import UnitConfigurationError, UnitType, resolve_policy

# utilidades (opcionales, pero útiles para tests/depuración)
from .utils_boltzmann import (
    NumericalDivergenceError,
    bernoulli_sample,
    nan_check_deep,
    sigmoid,
    softmax,
)

__all__ = [
    "RestrictedBoltzmannMachine",
    "GibbsState",
    "ActivationScratch",
    "preactivate",
    "UnitType",
    "UnitConfigurationError",
    "resolve_policy",
    "NumericalDivergenceError",
    "bernoulli_sample",
    "nan_check_deep",
    "sigmoid",
    "softmax",
]
