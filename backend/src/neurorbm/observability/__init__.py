# backend/src/neurorbm/observability/__init__.py
from .logging_context import (
    clear_run_id,
    get_run_id,
    install_logrecord_factory,
    run_scope,
    set_run_id,
)
from .logging_filters import RunIdLogFilter

__all__ = [
    "RunIdLogFilter",
    "set_run_id",
    "get_run_id",
    "clear_run_id",
    "run_scope",
    "install_logrecord_factory",
]
