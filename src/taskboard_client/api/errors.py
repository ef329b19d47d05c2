# src/taskboard_client/api/errors.py

from __future__ import annotations

import json
import logging

import httpx

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class TaskboardApiError(RuntimeError):
    """Non-2xx response from the task service."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class UnauthorizedError(TaskboardApiError):
    """HTTP 401: the session cookie is missing or expired."""


def extract_error_message(response: httpx.Response) -> str:
    """
    Turn a failed response into one human-readable line.

    Priority:
    1) {"errors": [{"msg": ...}, ...]} -> messages joined with ", "
    2) {"message": "..."}
    3) "<status code> <reason phrase>"

    Never raises.
    """
    fallback = f"{response.status_code} {response.reason_phrase}".strip()

    try:
        payload = json.loads(response.content or b"")
    except (ValueError, UnicodeDecodeError):
        logger.debug("Error body is not JSON (status=%s)", response.status_code)
        return fallback

    if not isinstance(payload, dict):
        return fallback

    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        msgs = [str(e.get("msg")) for e in errors if isinstance(e, dict) and e.get("msg")]
        if msgs:
            return ", ".join(msgs)

    message = payload.get("message")
    if isinstance(message, str):
        return message

    return fallback


def raise_for_status(response: httpx.Response) -> None:
    """Raise UnauthorizedError on 401, TaskboardApiError on any other non-2xx."""
    if response.is_success:
        return
    message = extract_error_message(response)
    if response.status_code == 401:
        raise UnauthorizedError(401, message)
    raise TaskboardApiError(response.status_code, message)
