# backend/src/neurorbm/models/utils_boltzmann.py
from __future__ import annotations

import logging

import numpy as np

__all__ = [
    "NumericalDivergenceError",
    "sigmoid",
    "softmax",
    "bernoulli_sample",
    "logistic_noise",
    "ranged_noise",
    "one_if_max",
    "check_numeric_matrix",
    "nan_check_deep",
]

logger = logging.getLogger(__name__)

# Límite del argumento de exp() en la sigmoide
_SIGMOID_CLIP = 40.0


class NumericalDivergenceError(FloatingPointError):
    """Un tensor de activación contiene NaN/inf (entrenamiento divergente)."""


def _rng_or_default(rng: np.random.Generator | None) -> np.random.Generator:
    if rng is None:
        rng = np.random.default_rng()
    return rng


def sigmoid(x: np.ndarray) -> np.ndarray:
    """Sigmoid numéricamente estable (NaN se propaga, no se corrige)."""
    x = np.clip(x, -_SIGMOID_CLIP, _SIGMOID_CLIP)
    return 1.0 / (1.0 + np.exp(-x, dtype=np.float64))


def softmax(x: np.ndarray) -> np.ndarray:
    """Softmax por filas (último eje), restando el máximo antes de exp()."""
    x = np.asarray(x, dtype=np.float64)
    shifted = x - np.max(x, axis=-1, keepdims=True)
    e = np.exp(shifted)
    return e / np.sum(e, axis=-1, keepdims=True)


def bernoulli_sample(p: np.ndarray, rng: np.random.Generator | None = None) -> np.ndarray:
    """Muestreo Bernoulli a partir de probabilidades p."""
    rng = _rng_or_default(rng)
    return (p > rng.random(np.shape(p))).astype(np.float32)


def logistic_noise(x: np.ndarray, rng: np.random.Generator | None = None) -> np.ndarray:
    """
    Ruido gaussiano con desviación sigmoid(x):  x + N(0, sigmoid(x)).

    Es la aproximación usada para muestrear unidades ReLU; no es una muestra
    exacta de la gaussiana rectificada.
    """
    rng = _rng_or_default(rng)
    x = np.asarray(x, dtype=np.float64)
    return x + rng.normal(0.0, sigmoid(x))


def ranged_noise(x: np.ndarray, limit: float, rng: np.random.Generator | None = None) -> np.ndarray:
    """
    Ruido N(0, 1) para unidades ReLU acotadas.

    Los valores que están exactamente en 0 o en ``limit`` se dejan intactos;
    el resultado NO se vuelve a recortar al rango [0, limit].
    """
    rng = _rng_or_default(rng)
    x = np.asarray(x, dtype=np.float64)
    noise = rng.standard_normal(x.shape)
    at_bound = (x == 0.0) | (x == limit)
    return np.where(at_bound, x, x + noise)


def one_if_max(x: np.ndarray) -> np.ndarray:
    """One-hot en la posición del primer máximo de cada fila."""
    x = np.asarray(x)
    idx = np.argmax(x, axis=-1)
    out = np.zeros(x.shape, dtype=np.float32)
    np.put_along_axis(out, np.expand_dims(idx, axis=-1), 1.0, axis=-1)
    return out


def check_numeric_matrix(X: np.ndarray, name: str = "X", require_finite: bool = True) -> None:
    """
    Valida que el array sea 1D/2D y, si ``require_finite``, finito y sin NaNs.

    Con ``require_finite=False`` los inf/NaN se dejan pasar para que los
    reporte la guarda de estabilidad.
    """
    if not isinstance(X, np.ndarray):
        raise TypeError(f"{name} debe ser np.ndarray")
    if X.ndim not in (1, 2):
        raise ValueError(f"{name} debe ser 1D (n_features,) o 2D (n_samples, n_features)")
    if require_finite and not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contiene inf/NaN")


def nan_check_deep(x: np.ndarray | None, name: str = "tensor", strict: bool = True) -> bool:
    """
    Post-condición de estabilidad: todos los elementos de ``x`` deben ser finitos.

    - ``strict=True``: lanza :class:`NumericalDivergenceError` al primer fallo.
    - ``strict=False``: registra un warning y devuelve ``False``.

    Nunca corrige el tensor (no hay clamping silencioso). ``None`` se considera
    "no calculado" y pasa la verificación.
    """
    if x is None:
        return True
    finite = np.isfinite(x)
    if np.all(finite):
        return True

    n_bad = int(finite.size - np.count_nonzero(finite))
    msg = f"{name} contiene {n_bad} valores inf/NaN (shape={np.shape(x)})"
    if strict:
        logger.error("Divergencia numérica: %s", msg)
        raise NumericalDivergenceError(msg)
    logger.warning("Divergencia numérica: %s", msg)
    return False
