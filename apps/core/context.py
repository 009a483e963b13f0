# ======================================================================
# PATH: apps/core/context.py
# ======================================================================
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from django.conf import settings
from django.utils import timezone

from apps.api.common.exceptions import DomainValidationError
from apps.core.permissions import is_teacher_user


@dataclass(frozen=True)
class CourseContext:
    """
    Per-request course context handed to the domain services.

    Replaces the selected subject / week kept in browser storage: the
    services read everything they need from here and keep nothing
    between calls.
    """

    user: Any
    subject_id: Optional[int] = None
    week_override: Optional[int] = None
    today: date = field(default_factory=timezone.localdate)

    @property
    def is_teacher(self) -> bool:
        return is_teacher_user(self.user)

    def current_week(self, module) -> int:
        if self.week_override is not None:
            return int(self.week_override)
        return module.week_at(self.today)


def _optional_int(raw, *, name: str) -> Optional[int]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise DomainValidationError(f"{name} must be an integer")


def context_from_request(request) -> CourseContext:
    """
    subject: X-Subject-Id header > ?subject_id= > body subject_id
    week:    X-Week-Override header (only when QUESTION_ALLOW_WEEK_OVERRIDE)
    """
    data = getattr(request, "data", None)
    raw_subject = (
        request.headers.get("X-Subject-Id")
        or request.query_params.get("subject_id")
        or (data.get("subject_id") if hasattr(data, "get") else None)
    )
    subject_id = _optional_int(raw_subject, name="subject_id")

    week_override = None
    if getattr(settings, "QUESTION_ALLOW_WEEK_OVERRIDE", False):
        week_override = _optional_int(request.headers.get("X-Week-Override"), name="X-Week-Override")
        if week_override is not None and week_override < 1:
            raise DomainValidationError("X-Week-Override must be >= 1")

    return CourseContext(
        user=request.user,
        subject_id=subject_id,
        week_override=week_override,
    )
