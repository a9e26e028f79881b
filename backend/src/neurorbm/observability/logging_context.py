# backend/src/neurorbm/observability/logging_context.py
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Identificador de la corrida de entrenamiento/inferencia en curso
run_id_var: ContextVar[str] = ContextVar("run_id", default="-")

_factory_installed = False


def set_run_id(run_id: Optional[str]) -> None:
    """
    Establece el run_id en el contexto (ContextVar).
    Usar en el driver de entrenamiento al inicio de cada corrida.
    """
    run_id_var.set((run_id or "").strip() or "-")


def get_run_id() -> str:
    """Obtiene el run_id actual del contexto."""
    return run_id_var.get()


def clear_run_id() -> None:
    """Restablece el run_id a '-'."""
    run_id_var.set("-")


@contextmanager
def run_scope(run_id: Optional[str] = None) -> Iterator[str]:
    """
    Fija un run_id durante el bloque y restaura el anterior al salir.
    Sin ``run_id`` se genera uno corto (``run-<6 hex>``).
    """
    rid = (run_id or "").strip() or f"run-{uuid.uuid4().hex[:6]}"
    token = run_id_var.set(rid)
    try:
        yield rid
    finally:
        run_id_var.reset(token)


def install_logrecord_factory() -> None:
    """
    Instala una LogRecordFactory que inyecta 'run_id' en cada LogRecord
    **sin sobrescribir** si ya existe (p. ej. pasado vía extra=...).
    Idempotente: una segunda llamada no encadena otra factory.
    """
    global _factory_installed
    if _factory_installed:
        return
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        current = record.__dict__.get("run_id")
        if not current or current == "-":
            record.__dict__["run_id"] = run_id_var.get() or "-"
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True
