"""
neurorbm: motor de activación de Máquinas de Boltzmann Restringidas.
"""

__version__ = "0.1.0"

# models antes que config: config importa models.unit_types
from .models import (
    ActivationScratch,
    GibbsState,
    NumericalDivergenceError,
    RestrictedBoltzmannMachine,
    UnitConfigurationError,
    UnitType,
)
from .config import RBMConfig

__all__ = [
    "__version__",
    "RBMConfig",
    "RestrictedBoltzmannMachine",
    "GibbsState",
    "ActivationScratch",
    "UnitType",
    "UnitConfigurationError",
    "NumericalDivergenceError",
]
