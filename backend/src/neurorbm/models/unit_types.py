# backend/src/neurorbm/models/unit_types.py
"""
Políticas de unidad (tipo de neurona) para las capas de la RBM.

Cada política es un objeto *strategy* con dos funciones puras sobre la
pre-activación ``z`` de una capa:

- ``activate(z)``  -> activación continua (probabilidad / valor real)
- ``sample(a, rng)`` -> realización estocástica a partir de la activación

La política se resuelve **una sola vez** por capa al construir el modelo
(:func:`resolve_policy`); los pasos de activación no vuelven a ramificar
sobre el tipo de unidad.

Tabla de legalidad por capa:

=========  =======  ======
unidad     visible  oculta
=========  =======  ======
binary     sí       sí
gaussian   sí       no
relu       sí       sí
relu1      sí       sí
relu6      sí       sí
softmax    no       sí
=========  =======  ======
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

import numpy as np

from .utils_boltzmann import (
    bernoulli_sample,
    logistic_noise,
    one_if_max,
    ranged_noise,
    sigmoid,
    softmax,
)

__all__ = [
    "UnitType",
    "UnitConfigurationError",
    "UnitPolicy",
    "BinaryUnit",
    "GaussianUnit",
    "ReluUnit",
    "ClippedReluUnit",
    "SoftmaxUnit",
    "LAYER_VISIBLE",
    "LAYER_HIDDEN",
    "resolve_policy",
]

LAYER_VISIBLE = "visible"
LAYER_HIDDEN = "hidden"


class UnitConfigurationError(ValueError):
    """Combinación capa/tipo de unidad no soportada."""


class UnitType(str, Enum):
    BINARY = "binary"
    GAUSSIAN = "gaussian"
    RELU = "relu"
    RELU1 = "relu1"
    RELU6 = "relu6"
    SOFTMAX = "softmax"

    @classmethod
    def parse(cls, value: Union["UnitType", str]) -> "UnitType":
        if isinstance(value, cls):
            return value
        s = str(value).strip().lower()
        try:
            return cls(s)
        except ValueError:
            validos = ", ".join(u.value for u in cls)
            raise UnitConfigurationError(
                f"Tipo de unidad desconocido: {value!r} (válidos: {validos})"
            ) from None


class UnitPolicy:
    """Interfaz base. Las subclases sobreescriben ``activate`` y ``sample``."""

    unit: UnitType

    def activate(self, z: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def sample(self, a: np.ndarray, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        raise NotImplementedError

    def activate_and_sample(self, z: np.ndarray, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        # Camino "solo muestra": la activación intermedia no se devuelve
        return self.sample(self.activate(z), rng)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BinaryUnit(UnitPolicy):
    unit = UnitType.BINARY

    def activate(self, z):
        return sigmoid(z)

    def sample(self, a, rng=None):
        return bernoulli_sample(a, rng)


class GaussianUnit(UnitPolicy):
    """Identidad: la activación es la pre-activación cruda, sin ruido al muestrear."""

    unit = UnitType.GAUSSIAN

    def activate(self, z):
        return np.array(z, copy=True)

    def sample(self, a, rng=None):
        return np.array(a, copy=True)


class ReluUnit(UnitPolicy):
    unit = UnitType.RELU

    def activate(self, z):
        return np.maximum(z, 0.0)

    def sample(self, a, rng=None):
        # TODO: sustituir por un muestreador de gaussiana rectificada cuando
        # se validen los modelos entrenados con la aproximación actual
        return logistic_noise(a, rng)


class ClippedReluUnit(UnitPolicy):
    """ReLU acotada a ``[0, limit]`` (relu1 / relu6)."""

    def __init__(self, limit: float, unit: UnitType):
        self.limit = float(limit)
        self.unit = unit

    def activate(self, z):
        return np.minimum(np.maximum(z, 0.0), self.limit)

    def sample(self, a, rng=None):
        return ranged_noise(a, self.limit, rng)

    def __repr__(self) -> str:
        return f"ClippedReluUnit(limit={self.limit:g})"


class SoftmaxUnit(UnitPolicy):
    """Softmax sobre la capa; la muestra es un one-hot en el arg-max."""

    unit = UnitType.SOFTMAX

    def activate(self, z):
        return softmax(z)

    def sample(self, a, rng=None):
        return one_if_max(a)


_POLICIES: Dict[UnitType, UnitPolicy] = {
    UnitType.BINARY: BinaryUnit(),
    UnitType.GAUSSIAN: GaussianUnit(),
    UnitType.RELU: ReluUnit(),
    UnitType.RELU1: ClippedReluUnit(1.0, UnitType.RELU1),
    UnitType.RELU6: ClippedReluUnit(6.0, UnitType.RELU6),
    UnitType.SOFTMAX: SoftmaxUnit(),
}

_SUPPORTED: Dict[str, FrozenSet[UnitType]] = {
    LAYER_VISIBLE: frozenset(
        {UnitType.BINARY, UnitType.GAUSSIAN, UnitType.RELU, UnitType.RELU1, UnitType.RELU6}
    ),
    LAYER_HIDDEN: frozenset(
        {UnitType.BINARY, UnitType.RELU, UnitType.RELU1, UnitType.RELU6, UnitType.SOFTMAX}
    ),
}


def resolve_policy(layer: str, unit: Union[UnitType, str]) -> UnitPolicy:
    """Devuelve la política de ``unit`` para ``layer`` o lanza UnitConfigurationError."""
    if layer not in _SUPPORTED:
        raise UnitConfigurationError(f"Capa desconocida: {layer!r}")
    u = UnitType.parse(unit)
    if u not in _SUPPORTED[layer]:
        raise UnitConfigurationError(
            f"La capa {layer} no admite unidades {u.value}"
        )
    return _POLICIES[u]
