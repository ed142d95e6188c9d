from __future__ import annotations

import contextvars
import logging
import uuid


run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(run_id)s] %(name)s: %(message)s"


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


class RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        rid = run_id_var.get()
        record.run_id = rid if rid else "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RunIdFilter())
    root = logging.getLogger("fwupload")
    root.setLevel(level.upper())
    if not any(isinstance(f, RunIdFilter) for h in root.handlers for f in h.filters):
        root.addHandler(handler)
