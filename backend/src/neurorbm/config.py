# backend/src/neurorbm/config.py
"""
neurorbm.config
===============

Configuración de una RBM (dimensiones, tipos de unidad, inicialización).

Los valores por defecto que dependen del entorno se leen una sola vez al
importar el módulo:

- ``NR_STRICT_CHECKS`` ("1" por defecto): la guarda de estabilidad lanza
  excepción ante NaN/inf. Con "0" solo registra un warning.
- ``NR_DTYPE`` ("float32" por defecto): tipo de los parámetros y salidas.
"""
from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models.unit_types import LAYER_HIDDEN, LAYER_VISIBLE, UnitType, resolve_policy


def env_strict_checks() -> bool:
    return os.getenv("NR_STRICT_CHECKS", "1").strip() != "0"


def env_dtype() -> str:
    return os.getenv("NR_DTYPE", "float32").strip().lower()


DEFAULT_STRICT_CHECKS = env_strict_checks()
DEFAULT_DTYPE = env_dtype()


class RBMConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    n_visible: int = Field(ge=1, description="Número de unidades visibles.")
    n_hidden: int = Field(default=64, ge=1, description="Número de unidades ocultas.")
    visible_unit: UnitType = Field(
        default=UnitType.BINARY,
        description="Tipo de unidad de la capa visible (binary|gaussian|relu|relu1|relu6).",
    )
    hidden_unit: UnitType = Field(
        default=UnitType.BINARY,
        description="Tipo de unidad de la capa oculta (binary|relu|relu1|relu6|softmax).",
    )
    weight_std: float = Field(
        default=0.1, gt=0.0,
        description="Desviación típica de la inicialización gaussiana de W.",
    )
    seed: Optional[int] = Field(default=None, description="Semilla del generador aleatorio.")
    dtype: Literal["float32", "float64"] = Field(default=DEFAULT_DTYPE, validate_default=True)
    strict_checks: bool = Field(
        default=DEFAULT_STRICT_CHECKS,
        description="Si True, NaN/inf en una activación es un error fatal.",
    )

    @field_validator("visible_unit", "hidden_unit", mode="before")
    @classmethod
    def _lower_unit(cls, v):
        if isinstance(v, str) and not isinstance(v, UnitType):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def _check_layers(self) -> "RBMConfig":
        # Misma regla que aplica el modelo al construirse
        resolve_policy(LAYER_VISIBLE, self.visible_unit)
        resolve_policy(LAYER_HIDDEN, self.hidden_unit)
        return self
