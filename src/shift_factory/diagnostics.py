"""
Diagnostic sink used by the pipeline instead of process-global logging calls.

Core functions accept any object with ``info`` / ``warning`` / ``error``
methods taking an event name plus keyword fields. The default sink forwards to
stdlib ``logging`` with the fields passed as structured ``extra``.
"""

import logging
import sys
from typing import Any, Optional, Protocol

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class DiagnosticSink(Protocol):
    def info(self, event: str, **fields: Any) -> None: ...

    def warning(self, event: str, **fields: Any) -> None: ...

    def error(self, event: str, **fields: Any) -> None: ...


class LoggingSink:
    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event: str, **fields: Any) -> None:
        if fields:
            detail = " ".join(f"{k}={v!r}" for k, v in fields.items())
            message = f"{event} {detail}"
        else:
            message = event
        self._logger.log(level, message, extra={"event": event, "fields": fields})

    def info(self, event: str, **fields: Any) -> None:
        self._log(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log(logging.WARNING, event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log(logging.ERROR, event, **fields)


def get_sink(sink: Optional[DiagnosticSink], name: str) -> DiagnosticSink:
    return sink if sink is not None else LoggingSink(name)


def setup_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the root logger unless one is already set."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
        root.addHandler(handler)

    # litellm is chatty at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
