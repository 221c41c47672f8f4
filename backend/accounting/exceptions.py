# accounting/exceptions.py
"""
DRF exception handler.

Every error leaves the API in one envelope: {"success": false, "error": ...}.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from accounting.policies import PolicyViolation


logger = logging.getLogger(__name__)

INVALID_JSON_MESSAGE = "Invalid JSON payload"


def _first_message(detail) -> str:
    """Flatten DRF error detail to one readable message ("lines: This field is required.")."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key == "non_field_errors":
                return message
            return f"{key}: {message}"
        return "Invalid request."
    if isinstance(detail, (list, tuple)):
        for value in detail:
            if value:
                return _first_message(value)
        return "Invalid request."
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, PolicyViolation):
        return Response(
            {"success": False, "error": str(exc)},
            status=status.HTTP_409_CONFLICT,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ParseError):
        message = INVALID_JSON_MESSAGE
    elif isinstance(exc, ValidationError):
        message = _first_message(exc.detail)
    else:
        message = _first_message(response.data.get("detail", response.data)
                                 if isinstance(response.data, dict) else response.data)

    if response.status_code >= 500:
        logger.error("API error: %s", message)

    response.data = {"success": False, "error": message}
    return response
