# PATH: apps/domains/points/services/ledger.py
"""
Point ledger write side.

Every PointTransaction is created and mutated here, nowhere else.
Aggregation / display code only reads.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.api.common.exceptions import (
    DomainValidationError,
    InvariantViolation,
    ResourceAbsence,
    StateConflictError,
)
from apps.domains.points.models import PointCategory, PointTransaction

logger = logging.getLogger(__name__)

User = get_user_model()


# ---------------------------------------------------------------------
# input helpers
# ---------------------------------------------------------------------

def parse_points(raw: Any, *, field: str = "points") -> int:
    """
    Integer points from JSON / form input. Bools and fractions are rejected.
    """
    if raw is None or isinstance(raw, bool):
        raise DomainValidationError(f"{field} must be a number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise DomainValidationError(f"{field} must be a whole number")
        return int(raw)
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise DomainValidationError(f"{field} must be a number")


def parse_category(raw: Any, *, default: Optional[str] = None) -> str:
    if raw in (None, "") and default is not None:
        return default
    value = str(raw or "").strip()
    if value not in PointCategory.values:
        raise DomainValidationError(
            f"category must be one of: {', '.join(PointCategory.values)}"
        )
    return value


def parse_id(raw: Any, *, field: str) -> int:
    if raw is None or isinstance(raw, bool):
        raise DomainValidationError(f"{field} is required")
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise DomainValidationError(f"{field} must be an integer")


def module_cap(module) -> int:
    cap = getattr(module, "required_questions_per_user", None)
    if cap is None:
        cap = getattr(settings, "POINTS_DEFAULT_CAP", 2)
    return int(cap)


def lock_student(student_id: int):
    """
    Row lock on the student: serialises cap checks of concurrent awards.
    Must run inside transaction.atomic().
    """
    student = User.objects.select_for_update().filter(id=parse_id(student_id, field="student_id")).first()
    if not student:
        raise ResourceAbsence("Student not found", code="STUDENT_NOT_FOUND")
    return student


# ---------------------------------------------------------------------
# awards
# ---------------------------------------------------------------------

def award_points(
    *,
    student,
    points: int,
    category: str,
    reason: str,
    question=None,
    module=None,
    week_number: Optional[int] = None,
    assigned_by=None,
) -> PointTransaction:
    """
    Append one transaction. No caps here.
    """
    if points < 0:
        raise InvariantViolation("Points cannot be negative")

    tx = PointTransaction.objects.create(
        student=student,
        assigned_by=assigned_by,
        points=int(points),
        category=category,
        reason=reason,
        related_entity_type=PointTransaction.EntityType.QUESTION if question is not None else "",
        related_entity_id=question.id if question is not None else None,
        question=question,
        module=module,
        week_number=week_number,
    )

    logger.info(
        "[points] awarded id=%s student=%s category=%s points=%s module=%s question=%s",
        tx.id,
        student.id,
        category,
        tx.points,
        getattr(module, "id", None),
        getattr(question, "id", None),
    )
    return tx


@transaction.atomic
def award_capped(
    *,
    student,
    category: str,
    module,
    reason: str,
    question=None,
    week_number: Optional[int] = None,
    points: int = 1,
) -> Optional[PointTransaction]:
    """
    Lifecycle award: at most `module_cap(module)` transactions of `category`
    per student and module, at most one per (student, category, question).

    Returns None when the award is not due; the triggering action itself
    still succeeds.
    """
    lock_student(student.id)

    existing = PointTransaction.objects.filter(
        student_id=student.id,
        category=category,
        module_id=module.id,
    )

    if question is not None and existing.filter(question_id=question.id).exists():
        logger.debug(
            "[points] skip duplicate student=%s category=%s question=%s",
            student.id, category, question.id,
        )
        return None

    cap = module_cap(module)
    count = existing.count()
    if count >= cap:
        logger.debug(
            "[points] cap reached student=%s category=%s module=%s count=%s cap=%s",
            student.id, category, module.id, count, cap,
        )
        return None

    return award_points(
        student=student,
        points=points,
        category=category,
        reason=reason,
        question=question,
        module=module,
        week_number=week_number,
    )


@transaction.atomic
def award_custom_points(
    *,
    student_id: int,
    points: Any,
    reason: Any,
    category: Any = None,
    assigned_by=None,
) -> PointTransaction:
    """
    AwardCustomPoints: operator grant, exempt from lifecycle caps.
    """
    value = parse_points(points)
    if value <= 0:
        raise DomainValidationError("Points must be a positive number")

    reason = str(reason or "").strip()
    if not reason:
        raise DomainValidationError("reason is required")

    category = parse_category(category, default=PointCategory.OTHER)

    student = lock_student(student_id)

    return award_points(
        student=student,
        points=value,
        category=category,
        reason=reason,
        assigned_by=assigned_by,
    )


# ---------------------------------------------------------------------
# edits
# ---------------------------------------------------------------------

def set_points(tx: PointTransaction, new_points: int, *, reason: Optional[str] = None) -> PointTransaction:
    """
    Persist a new value on an already locked row.
    """
    if new_points < 0:
        raise InvariantViolation("Points cannot be negative")

    old = tx.points
    tx.points = int(new_points)
    fields = ["points", "version", "updated_at"]
    if reason is not None:
        tx.reason = reason
        fields.append("reason")
    tx.version = int(tx.version) + 1
    tx.save(update_fields=fields)

    logger.info(
        "[points] updated id=%s student=%s %s -> %s version=%s",
        tx.id, tx.student_id, old, tx.points, tx.version,
    )
    return tx


@transaction.atomic
def update_point(
    *,
    point_id: int,
    points: Any = None,
    reason: Any = None,
    expected_version: Any = None,
) -> PointTransaction:
    """
    UpdatePoint: direct single-transaction edit.

    `expected_version` (optional) makes the write conditional on nobody
    else having edited the row since it was read.
    """
    new_points = parse_points(points) if points is not None else None
    if new_points is not None and new_points < 0:
        raise DomainValidationError("Points cannot be negative")

    new_reason = None
    if reason is not None:
        new_reason = str(reason).strip()
        if not new_reason:
            raise DomainValidationError("reason cannot be empty")

    tx = PointTransaction.objects.select_for_update().filter(id=parse_id(point_id, field="point_id")).first()
    if not tx:
        raise ResourceAbsence("Point record not found")

    if expected_version is not None:
        version = parse_points(expected_version, field="version")
        if version != tx.version:
            raise StateConflictError(
                f"Point record was modified (version {tx.version}, expected {version})",
                code="STALE_VERSION",
            )

    if new_points is None and new_reason is None:
        return tx

    return set_points(
        tx,
        tx.points if new_points is None else new_points,
        reason=new_reason,
    )
