"""
Centralized logging configuration using structlog

Every event is stamped with the current request id and, once the caller is
known, their user id. Values under credential-bearing keys never reach the
renderer.
"""

import base64
import logging
import secrets
import sys
import time
from contextvars import ContextVar
from typing import Any

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)

REDACTED_KEYS = frozenset({"password", "password_hash", "token", "authorization", "secret"})


def add_request_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor: attach request and user ids when set."""
    _ = logger, method_name

    if (request_id := request_id_ctx.get()) is not None:
        event_dict.setdefault("request_id", request_id)
    if (user_id := user_id_ctx.get()) is not None:
        event_dict.setdefault("user_id", user_id)
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: mask credential values passed as event keys."""
    _ = logger, method_name

    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[REDACTED]"
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Route structlog through stdlib logging on stdout.

    Args:
        debug: Colored console output instead of JSON lines
        level: Explicit level name; defaults to DEBUG when ``debug`` else INFO
    """
    log_level = logging.getLevelName(level.upper()) if level else None
    if not isinstance(log_level, int):
        log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_context,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Return a 14-character url-safe id: microsecond clock plus two random bytes."""
    stamp = int(time.time() * 1_000_000).to_bytes(8, byteorder="big")
    return base64.urlsafe_b64encode(stamp + secrets.token_bytes(2)).decode("ascii").rstrip("=")


def set_request_context(request_id: str | None = None, user_id: str | None = None) -> str:
    """Start a request's log context and return the request id in effect."""
    request_id = request_id or generate_request_id()
    request_id_ctx.set(request_id)
    if user_id is not None:
        user_id_ctx.set(user_id)
    return request_id


def bind_user_id(user_id: str | None) -> None:
    """Attach the resolved caller to the current request's log context."""
    user_id_ctx.set(user_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def get_user_id() -> str | None:
    return user_id_ctx.get()
