"""
Middleware for request context and logging
"""

import json
import re
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "auth",
    "authorization",
    "access_token",
    "jwt",
    "session",
    "cookie",
    "credentials",
}

# GraphQL query strings and variables may carry credentials
GRAPHQL_PAYLOAD_KEYS = ("query", "variables", "extensions")


def sanitize_query_params(params: dict[str, Any], path: str = "") -> dict[str, Any]:
    """Remove sensitive query parameters from logging.

    Args:
        params: Dictionary of query parameters
        path: Request path; GraphQL payloads in the query string are redacted

    Returns:
        Dictionary with sensitive parameters redacted
    """
    sanitized = {}
    for key, value in params.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = "[REDACTED]"
        elif path == "/graphql" and key in GRAPHQL_PAYLOAD_KEYS:
            sanitized[key] = "[REDACTED]"
        else:
            sanitized[key] = value

    return sanitized


def describe_graphql_operation(payload: dict[str, Any]) -> str | None:
    """Name a GraphQL operation from its ``operationName`` or query text."""
    op = payload.get("operationName")
    if isinstance(op, str) and op:
        return op

    q = payload.get("query", "")
    if not isinstance(q, str) or not q:
        return None
    if "__schema" in q or "IntrospectionQuery" in q:
        return "__introspection"

    match = re.search(r"\bquery\s+(\w+)", q) or re.search(r"\bmutation\s+(\w+)", q)
    if match:
        kind = "mutation:" if q.lstrip().startswith("mutation") else ""
        return f"{kind}{match.group(1)}"
    return "unnamed_operation"


async def extract_graphql_operation_name(request: Request) -> str | None:
    if request.url.path != "/graphql":
        return None

    if request.method == "GET":
        return describe_graphql_operation(dict(request.query_params))

    if request.method == "POST":
        try:
            body = await request.body()
            if not body:
                return None
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        if not isinstance(data, dict):
            return None
        return describe_graphql_operation(data)

    return None


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Middleware to set logging context for each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and set logging context."""

        # Honor an upstream request id so logs correlate across services
        request_id = set_request_context(request_id=request.headers.get(REQUEST_ID_HEADER))

        try:
            sanitized_params = None
            if request.query_params:
                sanitized_params = sanitize_query_params(
                    dict(request.query_params), path=request.url.path
                )

            graphql_operation = await extract_graphql_operation_name(request)

            log_data = {
                "method": request.method,
                "path": request.url.path,
                "query_params": sanitized_params,
                "user_agent": request.headers.get("user-agent"),
                "remote_addr": request.client.host if request.client else None,
            }

            if graphql_operation:
                log_data["graphql_operation"] = graphql_operation

            logger.info("Request started", **log_data)

            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            logger.info(
                "Request completed",
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                graphql_operation=graphql_operation,
            )

            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        finally:
            clear_request_context()
