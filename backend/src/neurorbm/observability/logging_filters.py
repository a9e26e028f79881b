# backend/src/neurorbm/observability/logging_filters.py
import logging

from .logging_context import get_run_id


class RunIdLogFilter(logging.Filter):
    """
    Inyecta 'run_id' en el LogRecord si no está presente,
    para que el formateador siempre pueda usar %(run_id)s.
    """
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "run_id", None):
            record.run_id = get_run_id()
        return True
