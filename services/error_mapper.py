# -*- coding: utf-8 -*-
"""Centralized error message mapper."""

from services.exceptions import (
    ApiException, NotFoundException, ValidationException, NetworkException
)
from utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_ERROR = "Request failed"
CONNECTION_ERROR = "Could not reach the server. Check your connection and try again."
TIMEOUT_ERROR = "The server took too long to respond. Please try again."
NOT_FOUND_ERROR = "The requested application could not be found."


def map_api_error(error: ApiException) -> str:
    """Map API exception to a user-facing message.

    The backend's own ``message``/``error`` text is shown when present;
    validation details are logged only.
    """
    status = error.status_code

    if status in (400, 422):
        details = _extract_validation_details(error.response_data)
        if details:
            logger.warning(f"API validation error ({status}): {details}")
    elif status:
        logger.warning(f"API error ({status}): {error}")

    server_message = _extract_server_message(error.response_data)
    if server_message:
        return server_message
    if isinstance(error, NotFoundException):
        return NOT_FOUND_ERROR
    return error.message or GENERIC_ERROR


def map_network_error(error: NetworkException) -> str:
    """Map network exception to a user-facing message."""
    msg = str(error.original_error) if error.original_error else ""
    if "timeout" in msg.lower() or "timed out" in msg.lower():
        return TIMEOUT_ERROR
    return CONNECTION_ERROR


def map_exception(error: Exception, context: str = None) -> str:
    """Map any exception to a user-facing message."""
    if isinstance(error, ApiException):
        if not error.context and context:
            error.context = context
        return map_api_error(error)

    if isinstance(error, NetworkException):
        return map_network_error(error)

    if isinstance(error, ValidationException):
        if error.errors:
            return " • ".join(error.errors)
        return error.message

    logger.warning(f"Unexpected error: {error}")
    return str(error) or GENERIC_ERROR


def _extract_server_message(response_data: dict) -> str:
    if not isinstance(response_data, dict):
        return ""
    message = response_data.get("message") or response_data.get("error")
    return str(message) if message else ""


def _extract_validation_details(response_data: dict) -> str:
    """Extract validation error details from API response."""
    if not isinstance(response_data, dict) or not response_data:
        return ""

    errors = response_data.get("errors", {})
    if isinstance(errors, dict):
        lines = []
        for field, messages in errors.items():
            if isinstance(messages, list):
                for msg in messages:
                    lines.append(f"• {field}: {msg}")
            else:
                lines.append(f"• {field}: {messages}")
        return "\n".join(lines)

    if isinstance(errors, list):
        return "\n".join(f"• {e}" for e in errors)

    return response_data.get("message", "")
