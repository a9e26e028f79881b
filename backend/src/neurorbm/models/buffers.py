# backend/src/neurorbm/models/buffers.py
from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

# (ancho de salida, dtype)
_Key = Tuple[Tuple[int, ...], str]


class ActivationScratch:
    """
    Buffers temporales reutilizables para la transformación afín.

    Pertenecen al llamador: cada hilo (o cada bucle de entrenamiento) debe usar
    su propia instancia. El contenido no tiene significado tras la llamada.

    Se guarda un único buffer por (ancho de salida, dtype): si el tamaño de
    lote cambia, el buffer anterior de ese ancho se sustituye, así la memoria
    no crece con la variedad de lotes.
    """

    def __init__(self) -> None:
        self._buffers: Dict[_Key, np.ndarray] = {}
        self.allocations = 0

    def buffer(self, shape: Tuple[int, ...], dtype) -> np.ndarray:
        shape = tuple(int(s) for s in shape)
        key = (shape[-1:], np.dtype(dtype).str)
        buf = self._buffers.get(key)
        if buf is None or buf.shape != shape:
            buf = np.empty(shape, dtype=dtype)
            self._buffers[key] = buf
            self.allocations += 1
        return buf

    def clear(self) -> None:
        self._buffers.clear()

    def __len__(self) -> int:
        return len(self._buffers)
