# ======================================================================
# PATH: apps/api/common/exceptions.py
# ======================================================================
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status as drf_status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """
    Base of every error raised by the domain services.

    Each error is scoped to the single requested operation and carries
    the HTTP status it is rendered with.
    """

    code = "DOMAIN_ERROR"
    http_status = drf_status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = str(message)
        if code:
            self.code = str(code)


class DomainValidationError(DomainError):
    """Malformed input. Rejected before any mutation."""

    code = "INVALID"
    http_status = drf_status.HTTP_400_BAD_REQUEST


class StateConflictError(DomainError):
    """
    The current state does not allow the transition (respond before
    validation, second validator, cap reached, stale version).
    Reported as an informational notice.
    """

    code = "STATE_CONFLICT"
    http_status = drf_status.HTTP_409_CONFLICT


class InvariantViolation(DomainError):
    """The mutation would break a ledger invariant (negative points)."""

    code = "INVARIANT_VIOLATION"
    http_status = 422


class ResourceAbsence(DomainError):
    """Nothing to show / edit, and no documented fallback applies."""

    code = "NOT_FOUND"
    http_status = drf_status.HTTP_404_NOT_FOUND


def _flatten(detail, prefix: str = "") -> list[str]:
    if isinstance(detail, dict):
        out: list[str] = []
        for key, value in detail.items():
            label = prefix if key in ("detail", "non_field_errors") else f"{prefix}{key}"
            out.extend(_flatten(value, f"{label}: " if label else ""))
        return out
    if isinstance(detail, (list, tuple)):
        out = []
        for value in detail:
            out.extend(_flatten(value, prefix))
        return out
    return [f"{prefix}{detail}"]


def domain_exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER

    Every 4xx leaves the API as {"errors": [...], "code": "..."}.
    """
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "[api] %s rejected code=%s msg=%s",
            view.__class__.__name__ if view else "-",
            exc.code,
            exc.message,
        )
        body = {"errors": [exc.message], "code": exc.code}
        if isinstance(exc, StateConflictError):
            body["notice"] = True
        return Response(body, status=exc.http_status)

    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.messages)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code = "INVALID" if isinstance(exc, DRFValidationError) else getattr(exc, "default_code", "error")
    body = {"errors": _flatten(response.data), "code": str(code).upper()}
    if isinstance(exc, DRFValidationError) and isinstance(response.data, dict):
        body["fields"] = response.data
    response.data = body
    return response
