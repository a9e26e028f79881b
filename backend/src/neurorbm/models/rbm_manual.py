# backend/src/neurorbm/models/rbm_manual.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from contextlib import nullcontext
from typing import Dict, Optional, Tuple

import numpy as np

from ..config import DEFAULT_DTYPE, DEFAULT_STRICT_CHECKS, RBMConfig
from ..observability import run_scope
from .buffers import ActivationScratch
from .unit_types import LAYER_HIDDEN, LAYER_VISIBLE, UnitType, resolve_policy
from .utils_boltzmann import check_numeric_matrix, nan_check_deep

logger = logging.getLogger(__name__)

DIRECTION_HIDDEN = "hidden"    # v -> h :  b + v·W
DIRECTION_VISIBLE = "visible"  # h -> v :  c + W·h

LayerPair = Tuple[Optional[np.ndarray], Optional[np.ndarray]]


def preactivate(
    x: np.ndarray,
    W: np.ndarray,
    bias: np.ndarray,
    direction: str,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Transformación afín de una capa hacia la otra.

    - ``direction="hidden"``:  ``x @ W + bias``   (x tiene n_visible columnas)
    - ``direction="visible"``: ``x @ W.T + bias`` (x tiene n_hidden columnas)

    Si se pasa ``out`` el resultado se escribe ahí (sin reservar memoria).
    Una dimensión de contracción incorrecta es un error del llamador.
    """
    if direction == DIRECTION_HIDDEN:
        M = W
    elif direction == DIRECTION_VISIBLE:
        M = W.T
    else:
        raise ValueError(f"direction debe ser 'hidden' o 'visible' (recibido {direction!r})")

    if x.ndim not in (1, 2):
        raise ValueError(f"La entrada debe ser 1D o 2D (ndim={x.ndim})")
    if x.shape[-1] != M.shape[0]:
        raise ValueError(
            f"Dimensión incompatible para direction={direction}: "
            f"entrada con {x.shape[-1]} columnas, se esperaban {M.shape[0]}"
        )

    # inf/NaN no avisan aquí: los reporta la guarda de estabilidad
    with np.errstate(invalid="ignore", over="ignore"):
        if out is None:
            return np.matmul(x, M) + bias
        np.matmul(x, M, out=out)
        out += bias
    return out


@dataclass
class GibbsState:
    """
    Estado de una cadena de Gibbs v1 -> h1 -> v2 -> h2.

    ``h1_*`` proviene de los datos; ``v2_*``/``h2_*`` del último paso de la cadena.
    """
    v1: np.ndarray
    h1_a: np.ndarray
    h1_s: np.ndarray
    v2_a: np.ndarray
    v2_s: np.ndarray
    h2_a: np.ndarray
    h2_s: np.ndarray
    k: int = 1


class RestrictedBoltzmannMachine:
    """
    Motor de activación de una RBM con tipos de unidad configurables por capa.

    Interfaz:
      - activate_hidden(v_a, v_s, compute_prob, compute_sample) -> (h_a, h_s)
      - activate_visible(h_a, h_s, compute_prob, compute_sample) -> (v_a, v_s)
      - activation_probabilities(sample) -> probs h|v (un solo ejemplo)
      - transform_hidden(X) / reconstruct(X) (por lotes)
      - gibbs_chain(v1, k) -> GibbsState

    Parámetros (propiedad exclusiva del modelo):
      W  : (n_visible, n_hidden), N(0, 1) * weight_std
      bh : sesgo oculto  (b), ceros
      bv : sesgo visible (c), ceros

    El modelo no se puede copiar; los pesos se comparten por referencia.
    La actualización de pesos es responsabilidad del bucle de entrenamiento.
    """

    def __init__(
        self,
        n_visible: int,
        n_hidden: int = 64,
        visible_unit: UnitType | str = UnitType.BINARY,
        hidden_unit: UnitType | str = UnitType.BINARY,
        weight_std: float = 0.1,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        dtype: str = DEFAULT_DTYPE,
        strict_checks: bool = DEFAULT_STRICT_CHECKS,
    ):
        if seed is not None and rng is not None:
            raise ValueError("Indique seed o rng, no ambos")

        # Políticas resueltas una vez por capa (UnitConfigurationError si no aplica)
        self.visible_policy = resolve_policy(LAYER_VISIBLE, visible_unit)
        self.hidden_policy = resolve_policy(LAYER_HIDDEN, hidden_unit)

        cfg = RBMConfig(
            n_visible=n_visible,
            n_hidden=n_hidden,
            visible_unit=self.visible_policy.unit,
            hidden_unit=self.hidden_policy.unit,
            weight_std=weight_std,
            seed=seed,
            dtype=dtype,
            strict_checks=strict_checks,
        )
        self.config = cfg
        self.n_visible = cfg.n_visible
        self.n_hidden = cfg.n_hidden
        self.visible_unit = cfg.visible_unit
        self.hidden_unit = cfg.hidden_unit
        self.dtype = np.dtype(cfg.dtype)
        self.strict_checks = cfg.strict_checks

        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)

        self.W = (self.rng.standard_normal((self.n_visible, self.n_hidden)) * cfg.weight_std).astype(self.dtype)
        self.bh = np.zeros(self.n_hidden, dtype=self.dtype)
        self.bv = np.zeros(self.n_visible, dtype=self.dtype)

        # Resultado de la última verificación de estabilidad (modo no estricto)
        self.numeric_ok = True

        logger.info(
            "RBM creada: %d -> %d (visible=%s, hidden=%s, dtype=%s)",
            self.n_visible, self.n_hidden,
            self.visible_unit.value, self.hidden_unit.value, self.dtype.name,
        )

    @classmethod
    def from_config(
        cls, cfg: RBMConfig, rng: Optional[np.random.Generator] = None
    ) -> "RestrictedBoltzmannMachine":
        return cls(rng=rng, **cfg.model_dump())

    # ---- Propiedad / metadatos ----
    def __copy__(self):
        raise TypeError("RestrictedBoltzmannMachine no se puede copiar")

    def __deepcopy__(self, memo):
        raise TypeError("RestrictedBoltzmannMachine no se puede copiar")

    def input_size(self) -> int:
        return self.n_visible

    def output_size(self) -> int:
        return self.n_hidden

    def display(self) -> None:
        print(f"RBM: {self.n_visible} -> {self.n_hidden}")

    def parameters(self) -> Dict[str, np.ndarray]:
        """Vistas de solo lectura de W, bh y bv (sin copiar)."""
        views = {}
        for name in ("W", "bh", "bv"):
            v = getattr(self, name).view()
            v.flags.writeable = False
            views[name] = v
        return views

    # ---- Helpers internos ----
    def _as_layer(self, x: np.ndarray, width: int, name: str) -> np.ndarray:
        x = np.asarray(x, dtype=self.dtype)
        if x.ndim not in (1, 2) or x.shape[-1] != width:
            raise ValueError(f"{name} debe tener {width} columnas (shape={x.shape})")
        return x

    def _cast(self, x: Optional[np.ndarray]) -> Optional[np.ndarray]:
        if x is None:
            return None
        return np.asarray(x).astype(self.dtype, copy=False)

    def _guard(self, pairs) -> None:
        ok = True
        for name, x in pairs:
            ok = nan_check_deep(x, name, strict=self.strict_checks) and ok
        self.numeric_ok = ok

    def _preactivation(self, x, bias, direction, scratch: Optional[ActivationScratch]):
        if scratch is None:
            scratch = ActivationScratch()
        width = self.n_hidden if direction == DIRECTION_HIDDEN else self.n_visible
        out = scratch.buffer(x.shape[:-1] + (width,), self.dtype)
        return preactivate(x, self.W, bias, direction, out=out)

    # ---- Pasos de activación ----
    def activate_hidden(
        self,
        v_activation: np.ndarray,
        v_sample: Optional[np.ndarray] = None,
        compute_prob: bool = True,
        compute_sample: bool = True,
        scratch: Optional[ActivationScratch] = None,
    ) -> LayerPair:
        """
        h | v. Se calcula a partir de la activación visible (``v_sample`` se
        acepta por simetría con :meth:`activate_visible`, pero no se usa).

        Devuelve ``(h_a, h_s)``; el elemento no pedido es ``None``.
        """
        if not (compute_prob or compute_sample):
            return None, None
        v = self._as_layer(v_activation, self.n_visible, "v_activation")
        policy = self.hidden_policy

        h_a = h_s = None
        with np.errstate(invalid="ignore", over="ignore"):
            z = self._preactivation(v, self.bh, DIRECTION_HIDDEN, scratch)
            if compute_prob:
                h_a = self._cast(policy.activate(z))
                if compute_sample:
                    h_s = self._cast(policy.sample(h_a, self.rng))
            else:
                h_s = self._cast(policy.activate_and_sample(z, self.rng))

        logger.debug("activate_hidden shape=%s prob=%s sample=%s", v.shape, compute_prob, compute_sample)
        self._guard((("h_preactivation", z), ("h_activation", h_a), ("h_sample", h_s)))
        return h_a, h_s

    def activate_visible(
        self,
        h_activation: Optional[np.ndarray],
        h_sample: np.ndarray,
        compute_prob: bool = True,
        compute_sample: bool = True,
        scratch: Optional[ActivationScratch] = None,
    ) -> LayerPair:
        """
        v | h. La reconstrucción parte de la **muestra** oculta ``h_sample``;
        ``h_activation`` no interviene en el cálculo.

        Devuelve ``(v_a, v_s)``; el elemento no pedido es ``None``.
        """
        if not (compute_prob or compute_sample):
            return None, None
        if h_sample is None:
            raise ValueError("activate_visible requiere h_sample")
        h = self._as_layer(h_sample, self.n_hidden, "h_sample")
        policy = self.visible_policy

        v_a = v_s = None
        with np.errstate(invalid="ignore", over="ignore"):
            z = self._preactivation(h, self.bv, DIRECTION_VISIBLE, scratch)
            if compute_prob:
                v_a = self._cast(policy.activate(z))
                if compute_sample:
                    v_s = self._cast(policy.sample(v_a, self.rng))
            else:
                v_s = self._cast(policy.activate_and_sample(z, self.rng))

        logger.debug("activate_visible shape=%s prob=%s sample=%s", h.shape, compute_prob, compute_sample)
        self._guard((("v_preactivation", z), ("v_activation", v_a), ("v_sample", v_s)))
        return v_a, v_s

    # ---- Fachada de inferencia ----
    def activation_probabilities(self, sample: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Probabilidades de activación ocultas para un ejemplo (vector 1D)."""
        sample = np.asarray(sample)
        if sample.ndim != 1:
            raise ValueError(f"sample debe ser 1D (shape={sample.shape})")
        h_a, _ = self.activate_hidden(sample, sample, compute_prob=True, compute_sample=False)
        if out is None:
            return h_a
        out[...] = h_a
        return out

    def _check_batch(self, X: np.ndarray, name: str) -> None:
        # En modo no estricto los inf/NaN de entrada llegan a la guarda
        check_numeric_matrix(X, name, require_finite=self.strict_checks)

    def transform_hidden(self, X: np.ndarray) -> np.ndarray:
        self._check_batch(X, "X")
        h_a, _ = self.activate_hidden(X, compute_prob=True, compute_sample=False)
        return h_a

    def reconstruct(self, X: np.ndarray) -> np.ndarray:
        self._check_batch(X, "X")
        scratch = ActivationScratch()
        h_a, h_s = self.activate_hidden(X, scratch=scratch)
        v_a, _ = self.activate_visible(h_a, h_s, compute_sample=False, scratch=scratch)
        return v_a

    # ---- Cadena de Gibbs (fase negativa de CD-k, sin actualizar pesos) ----
    def gibbs_chain(
        self,
        v1: np.ndarray,
        k: int = 1,
        scratch: Optional[ActivationScratch] = None,
        run_id: Optional[str] = None,
    ) -> GibbsState:
        """
        Ejecuta ``k`` pasos de Gibbs a partir de ``v1``.

        Si se pasa ``run_id`` los logs de la cadena se etiquetan con él; el
        run_id anterior del contexto se restaura al terminar.
        """
        if int(k) < 1:
            raise ValueError(f"k debe ser >= 1 (recibido {k})")
        self._check_batch(v1, "v1")
        if scratch is None:
            scratch = ActivationScratch()
        v1 = self._as_layer(v1, self.n_visible, "v1")

        with run_scope(run_id) if run_id is not None else nullcontext():
            logger.debug("Cadena de Gibbs: k=%d shape=%s", int(k), v1.shape)
            h1_a, h1_s = self.activate_hidden(v1, v1, scratch=scratch)
            h_a, h_s = h1_a, h1_s
            for _ in range(int(k)):
                v2_a, v2_s = self.activate_visible(h_a, h_s, scratch=scratch)
                h_a, h_s = self.activate_hidden(v2_a, v2_s, scratch=scratch)
            logger.debug("Cadena de Gibbs completada (numeric_ok=%s)", self.numeric_ok)

        return GibbsState(
            v1=v1, h1_a=h1_a, h1_s=h1_s,
            v2_a=v2_a, v2_s=v2_s, h2_a=h_a, h2_s=h_s, k=int(k),
        )

    def __repr__(self) -> str:
        return (
            f"RestrictedBoltzmannMachine(n_visible={self.n_visible}, n_hidden={self.n_hidden}, "
            f"visible_unit={self.visible_unit.value!r}, hidden_unit={self.hidden_unit.value!r})"
        )
