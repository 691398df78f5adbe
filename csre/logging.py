"""
Structured Logging
==================

structlog configuration for the CSRE service.

Every record carries the service name and version, and inside an HTTP
request also the request id, so engine events (model selection, skipped
terms, degraded intervals) can be traced back to the call that caused them.

Usage:
    from csre.logging import get_logger

    logger = get_logger(__name__)
    logger.info("model_selected", model="violence_depression")

Author: CSRE Team
Version: 1.0.0
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

import structlog

from csre import __version__


SERVICE_NAME = "csre"
REQUEST_ID_HEADER = "x-request-id"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx")

_request_id: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id(request_id: Optional[str] = None) -> str:
    """Start a request scope, reusing the caller's id when given."""
    rid = request_id or uuid.uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def current_request_id() -> str:
    return _request_id.get()


def add_request_id(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Processor: attach the current request id, if any."""
    rid = _request_id.get()
    if rid:
        event_dict.setdefault("request_id", rid)
    return event_dict


def add_service(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Processor: attach service name and version."""
    event_dict["service"] = SERVICE_NAME
    event_dict["service_version"] = __version__
    return event_dict


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_id,
        add_service,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Route structlog and stdlib logging through one formatter.

    Args:
        level: Root logging level name
        json_output: JSON lines when True, coloured console output otherwise
        log_file: Also write records to this file
    """
    processors = _shared_processors()
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=processors,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Structured logger for a module (pass ``__name__``)."""
    return structlog.get_logger(name)


class RequestLoggingMiddleware:
    """
    ASGI middleware that scopes a request id to each HTTP request and
    logs one ``request_completed`` event when the response is done.

    The id is taken from the ``X-Request-ID`` header when present and
    echoed back on the response.
    """

    def __init__(self, app: Any):
        self.app = app
        self.logger = get_logger("csre.api.requests")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = ""
        for key, value in scope.get("headers", []):
            if key.decode("latin-1").lower() == REQUEST_ID_HEADER:
                incoming = value.decode("latin-1")
                break
        rid = new_request_id(incoming or None)

        start = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                message["headers"] = list(message.get("headers", [])) + [
                    (REQUEST_ID_HEADER.encode("latin-1"), rid.encode("latin-1"))
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            log = self.logger.warning if status_code >= 500 else self.logger.info
            log(
                "request_completed",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                status=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
