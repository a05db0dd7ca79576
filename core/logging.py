"""
Structured JSON logging for the PIVTOOLS site.

Every log line is a single JSON object so the hosting platform's log
collector can index request ids, paths and timings without parsing.

Example usage:
    >>> from core.logging import get_logger, setup_logging
    >>> setup_logging()
    >>> logger = get_logger(__name__)
    >>> logger.info("Manual page rendered", extra={"slug": "masking"})
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Attributes present on every LogRecord; anything else was passed via extra=
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'message',
])

# Context fields emitted in a fixed order ahead of free-form extras
_CONTEXT_FIELDS = ('request_id', 'method', 'path', 'status', 'duration_ms', 'client_ip')

# Paths logged at DEBUG instead of INFO
_QUIET_PREFIXES = ('/static/', '/health', '/favicon')


class JSONFormatter(logging.Formatter):
    """
    Format log records as one JSON object per line.

    Example:
        >>> formatter = JSONFormatter()
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        for field in _CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in _CONTEXT_FIELDS or key.startswith('_'):
                continue
            log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with a short correlation id and its duration.

    The id is stored on ``request.state.request_id`` and echoed back in the
    ``X-Request-ID`` response header.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> app.add_middleware(RequestLoggingMiddleware)
    """

    def __init__(self, app, logger_name: str = "pivtools.requests"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        client_ip = get_client_ip(request)
        path = request.url.path
        level = logging.DEBUG if path.startswith(_QUIET_PREFIXES) else logging.INFO
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            self.logger.error(
                f"Request failed: {request.method} {path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "status": 500,
                    "duration_ms": duration_ms,
                    "client_ip": client_ip,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        self.logger.log(
            level,
            f"{request.method} {path} {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": client_ip,
                "user_agent": request.headers.get("user-agent", ""),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP, honouring proxy headers.

    Args:
        request: Incoming request

    Returns:
        First address of X-Forwarded-For, else X-Real-IP, else the socket peer
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    logger_name: Optional[str] = None
) -> None:
    """
    Configure logging with JSON (default) or plain text output on stdout.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        logger_name: Logger to configure (None for root)

    Example:
        >>> setup_logging(level="DEBUG", format_type="text")
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if format_type.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(numeric_level)

    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()

    # Clear existing handlers to avoid duplicates on app reload
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(numeric_level)

    if logger_name:
        logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass ``__name__``)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    request: Optional[Request] = None,
    **kwargs
) -> None:
    """
    Log a message enriched with the request id, path and method.

    Args:
        logger: Logger instance to use
        level: Level name (info, warning, error, ...)
        message: Log message
        request: Request providing context, if any
        **kwargs: Additional fields

    Example:
        >>> log_with_context(logger, "warning", "Unknown manual page", request=request, slug="foo")
    """
    extra_fields = dict(kwargs)

    if request is not None:
        request_id = getattr(request.state, 'request_id', None)
        if request_id:
            extra_fields['request_id'] = request_id
        extra_fields['path'] = request.url.path
        extra_fields['method'] = request.method
        if request.client:
            extra_fields['client_ip'] = request.client.host

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(message, extra=extra_fields)
