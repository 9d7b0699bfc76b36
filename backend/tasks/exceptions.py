"""
Error types and the REST framework exception handler.

Every error leaves the API in the same envelope:

    {"message": ..., "status": ..., "timestamp": ..., "path": ...}

Validation failures add an "errors" mapping of field name to message.
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response

from .serializers import render_timestamp

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when a task id is unknown or the task has been deleted."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class InvalidTaskFieldError(ValueError):
    """Raised when a task field value is outside its allowed set."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for {field}: {value!r}")


def error_body(message: str, status_code: int, path: str) -> dict:
    """Build the error envelope."""
    return {
        'message': message,
        'status': status_code,
        'timestamp': render_timestamp(),
        'path': path,
    }


def flatten_errors(detail) -> dict:
    """
    Reduce DRF validation detail to one message per field.

    Non-field errors and list-level errors are reported under
    'non_field_errors'.
    """
    if not isinstance(detail, dict):
        detail = {'non_field_errors': detail}

    errors = {}
    for field, messages in detail.items():
        if isinstance(messages, dict):
            # Nested serializer errors: keep the first nested message.
            messages = next(iter(flatten_errors(messages).values()), '')
        if isinstance(messages, (list, tuple)):
            messages = messages[0] if messages else ''
        errors[field] = str(messages)
    return errors


def task_exception_handler(exc, context):
    """
    Translate exceptions raised by the task views into error envelopes.

    Configured as REST_FRAMEWORK['EXCEPTION_HANDLER'].
    """
    request = context.get('request')
    path = request.path if request is not None else ''

    # Django's own exceptions get the same translation DRF's default
    # handler gives them.
    if isinstance(exc, Http404):
        exc = NotFound(*exc.args)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDenied(*exc.args)

    if isinstance(exc, TaskNotFoundError):
        logger.warning("Task not found: %s", exc)
        return Response(
            error_body(str(exc), status.HTTP_404_NOT_FOUND, path),
            status=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, ValidationError):
        errors = flatten_errors(exc.detail)
        logger.warning("Validation failed on %s: %s", path, errors)
        body = error_body('Validation failed', status.HTTP_400_BAD_REQUEST, path)
        body['errors'] = errors
        return Response(body, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ParseError):
        logger.warning("Malformed request body on %s: %s", path, exc.detail)
        body = error_body('Malformed request body', status.HTTP_400_BAD_REQUEST, path)
        body['errors'] = {'body': str(exc.detail)}
        return Response(body, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ValueError):
        logger.warning("Illegal argument on %s: %s", path, exc)
        return Response(
            error_body(str(exc), status.HTTP_400_BAD_REQUEST, path),
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, APIException):
        logger.warning("Request to %s failed with %s: %s", path, exc.status_code, exc.detail)
        return Response(
            error_body(str(exc.detail), exc.status_code, path),
            status=exc.status_code
        )

    logger.exception("Internal server error on %s", path, exc_info=exc)
    return Response(
        error_body('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR, path),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
