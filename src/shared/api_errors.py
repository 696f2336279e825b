"""
Shared API error parsing for bookmark clients.

The parsing extracts semantic meaning from HTTP errors so a client can show the
user a short message without knowing the API's response shapes.
"""

from dataclasses import dataclass
from typing import Any, Literal

import httpx

ErrorCategory = Literal[
    "auth",         # 401 - Invalid or expired token
    "forbidden",    # 403 - Access denied
    "not_found",    # 404 - Resource not found
    "validation",   # 400/422 - Validation error
    "unavailable",  # 503 or transport failure - service cannot be reached
    "internal",     # 5xx or unexpected errors
]


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str


def parse_http_error(e: httpx.HTTPError) -> ParsedApiError:
    """
    Parse an httpx error into a semantic category.

    Args:
        e: Either an HTTPStatusError (the API answered with a failure status)
            or a transport-level error (the API could not be reached).

    Returns:
        ParsedApiError with category and message.
    """
    if isinstance(e, httpx.DecodingError):
        return ParsedApiError("internal", "Unexpected response from the bookmark service")

    if not isinstance(e, httpx.HTTPStatusError):
        return ParsedApiError("unavailable", "Could not reach the bookmark service")

    status = e.response.status_code

    if status == 401:
        return ParsedApiError("auth", "Invalid or expired token")

    if status == 403:
        return ParsedApiError("forbidden", "Access denied")

    if status == 404:
        return ParsedApiError("not_found", "Not found")

    if status in (400, 422):
        return ParsedApiError("validation", _extract_validation_message(e))

    if status == 503:
        return ParsedApiError("unavailable", _detail_or(e, "Service unavailable"))

    if status >= 500:
        return ParsedApiError("internal", _detail_or(e, f"API error {status}"))

    return ParsedApiError("internal", f"API error {status}")


def _safe_get_detail(e: httpx.HTTPStatusError) -> Any:
    """Safely extract detail from error response."""
    try:
        body = e.response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("detail")
    return None


def _detail_or(e: httpx.HTTPStatusError, default: str) -> str:
    detail = _safe_get_detail(e)
    return detail if isinstance(detail, str) and detail else default


def _extract_validation_message(e: httpx.HTTPStatusError) -> str:
    """Extract validation error message from a 400/422 response."""
    try:
        body = e.response.json()
    except ValueError:
        return "Validation error"
    if not isinstance(body, dict):
        return "Validation error"

    # The API lists field errors under "errors"; stock FastAPI uses "detail"
    errors = body.get("errors", body.get("detail"))
    if isinstance(errors, list):
        messages = []
        for err in errors:
            if isinstance(err, dict):
                loc = err.get("loc", ["unknown"])
                field = loc[-1] if loc else "unknown"
                msg = err.get("msg", "invalid")
                messages.append(f"{field}: {msg}")
        if messages:
            return "; ".join(messages)

    detail = body.get("detail", "Validation error")
    return detail if isinstance(detail, str) else "Validation error"
