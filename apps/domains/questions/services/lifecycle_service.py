# PATH: apps/domains/questions/services/lifecycle_service.py
"""
Question lifecycle transitions

Each transition:
1) validates input (DomainValidationError, nothing written)
2) checks the gate (lifecycle.ensure_allowed)
3) writes the question with a conditional update (check-then-act in SQL)
4) awards the lifecycle point through the ledger (caps live there)

Teachers may act outside the week windows and never earn points. Peer
validation is for assigned students only; teachers use teacher validation.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.api.common.exceptions import DomainValidationError, ResourceAbsence, StateConflictError
from apps.core.context import CourseContext
from apps.domains.points.models import PointCategory
from apps.domains.points.services.ledger import award_capped
from apps.domains.questions.lifecycle import (
    CREATE_WEEK,
    RESPONSE_WEEK,
    VALIDATION_WEEK,
    Action,
    ensure_allowed,
    in_week,
)
from apps.domains.questions.models import OPTION_KEYS, AssignedQuestion, Question

logger = logging.getLogger(__name__)


# reason strings stay in the course language; the week number in them
# is also what the legacy bucketer parses
REASON_CREATION = "Vytvorenie otázky v týždni {week}"
REASON_VALIDATION = "Validácia otázky v týždni {week}"
REASON_REPARATION = "Reakcia na validáciu v týždni {week}"


# ---------------------------------------------------------------------
# input helpers
# ---------------------------------------------------------------------

def _require_bool(data: dict, key: str) -> bool:
    value = data.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise DomainValidationError(f"{key} must be true or false")


def _text(data: dict, key: str, *, required: bool = False) -> str:
    value = data.get(key)
    value = "" if value is None else str(value).strip()
    if required and not value:
        raise DomainValidationError(f"{key} is required")
    return value


def clean_question_payload(data: dict, *, partial: bool = False) -> dict:
    """
    {text, options{a..d}, correct, difficulty} -> field dict.
    partial=True keeps only what was sent (edit).
    """
    out: dict = {}

    if not partial or "text" in data:
        out["text"] = _text(data, "text", required=True)

    if not partial or "options" in data:
        options = data.get("options")
        if not isinstance(options, dict):
            raise DomainValidationError("options must be an object with keys a, b, c, d")
        cleaned = {}
        for key in OPTION_KEYS:
            value = str(options.get(key) or "").strip()
            if not value:
                raise DomainValidationError(f"option {key} is required")
            cleaned[key] = value
        out["options"] = cleaned

    if not partial or "correct" in data:
        correct = str(data.get("correct") or "").strip().lower()
        if correct not in OPTION_KEYS:
            raise DomainValidationError("correct must be one of a, b, c, d")
        out["correct"] = correct

    if "difficulty" in data and data.get("difficulty") not in (None, ""):
        difficulty = str(data.get("difficulty")).strip().lower()
        if difficulty not in Question.Difficulty.values:
            raise DomainValidationError(
                f"difficulty must be one of: {', '.join(Question.Difficulty.values)}"
            )
        out["difficulty"] = difficulty

    return out


def _get_question(question_id: int, *, lock: bool = False) -> Question:
    qs = Question.objects.select_related("module", "created_by")
    if lock:
        qs = qs.select_for_update()
    try:
        question_id = int(question_id)
    except (TypeError, ValueError):
        raise DomainValidationError("invalid question id")
    q = qs.filter(id=question_id).first()
    if not q:
        raise ResourceAbsence("Question not found")
    return q


# ---------------------------------------------------------------------
# create / edit / delete
# ---------------------------------------------------------------------

@transaction.atomic
def create_question(*, ctx: CourseContext, module, data: dict) -> Question:
    """
    Week 1. One question_creation point per question, capped per module.
    Questions over the cap are stored but earn nothing.
    """
    fields = clean_question_payload(data)
    week = ctx.current_week(module)

    if not ctx.is_teacher and not in_week(week, CREATE_WEEK):
        raise StateConflictError("Questions can be created in week 1 only")

    question = Question.objects.create(module=module, created_by=ctx.user, **fields)
    logger.info(
        "[questions] created id=%s module=%s by=%s week=%s",
        question.id, module.id, ctx.user.id, week,
    )

    if not ctx.is_teacher:
        award_capped(
            student=ctx.user,
            category=PointCategory.QUESTION_CREATION,
            module=module,
            question=question,
            week_number=week or CREATE_WEEK,
            reason=REASON_CREATION.format(week=week or CREATE_WEEK),
        )

    return question


@transaction.atomic
def edit_question(*, ctx: CourseContext, question_id: int, data: dict) -> Question:
    """
    Creator in week 3 (in place: no state change, no points) or a teacher.
    """
    question = _get_question(question_id, lock=True)
    ensure_allowed(question, Action.EDIT, user=ctx.user, week=ctx.current_week(question.module))

    fields = clean_question_payload(data, partial=True)
    if not fields:
        return question

    for key, value in fields.items():
        setattr(question, key, value)
    question.save(update_fields=[*fields.keys(), "updated_at"])

    logger.info("[questions] edited id=%s by=%s fields=%s", question.id, ctx.user.id, sorted(fields))
    return question


@transaction.atomic
def delete_question(*, ctx: CourseContext, question_id: int) -> None:
    """
    Teacher only. Ledger rows keep their module / reason (question -> NULL).
    """
    question = _get_question(question_id, lock=True)
    ensure_allowed(question, Action.DELETE, user=ctx.user, week=None)
    logger.info("[questions] deleted id=%s by=%s", question.id, ctx.user.id)
    question.delete()


# ---------------------------------------------------------------------
# peer validation (week 2)
# ---------------------------------------------------------------------

@transaction.atomic
def validate_question(*, ctx: CourseContext, question_id: int, data: dict) -> Question:
    """
    ValidateQuestion

    Only the student holding the question in a validation assignment may
    validate it. The claim is
        UPDATE ... WHERE validated_by IS NULL AND <assigned to the caller>
    so two concurrent validators cannot both win. The validator of record
    may revise verdict/comment until the creator responds; that revision
    awards nothing new.
    """
    valid = _require_bool(data, "valid")
    comment = _text(data, "comment")

    question = _get_question(question_id)
    week = ctx.current_week(question.module)
    ensure_allowed(question, Action.VALIDATE, user=ctx.user, week=week)

    now = timezone.now()
    values = dict(
        validated=valid,
        validation_comment=comment,
        validated_at=now,
        updated_at=now,
    )

    # 1) first claim
    claimed = (
        Question.objects
        .filter(
            id=question.id,
            validated_by__isnull=True,
            responded_at__isnull=True,
            assignment_links__assignment__student_id=ctx.user.id,
        )
        .update(validated_by=ctx.user, **values)
    )

    first = bool(claimed)
    if not claimed:
        # 2) revision by the validator of record
        revised = (
            Question.objects
            .filter(id=question.id, validated_by=ctx.user, responded_at__isnull=True)
            .update(**values)
        )
        if not revised:
            logger.warning(
                "[questions] validate conflict id=%s by=%s", question.id, ctx.user.id,
            )
            raise StateConflictError("Question already validated by another student")

    AssignedQuestion.objects.filter(
        question_id=question.id,
        assignment__student_id=ctx.user.id,
        completed_at__isnull=True,
    ).update(completed_at=now)

    question.refresh_from_db()
    logger.info(
        "[questions] validated id=%s by=%s valid=%s first=%s",
        question.id, ctx.user.id, valid, first,
    )

    if first:
        award_capped(
            student=ctx.user,
            category=PointCategory.QUESTION_VALIDATION,
            module=question.module,
            question=question,
            week_number=week or VALIDATION_WEEK,
            reason=REASON_VALIDATION.format(week=week or VALIDATION_WEEK),
        )

    return question


# ---------------------------------------------------------------------
# creator response (week 3)
# ---------------------------------------------------------------------

@transaction.atomic
def respond_to_validation(*, ctx: CourseContext, question_id: int, data: dict) -> Question:
    """
    RespondToValidation: creator only, once, after peer validation.
    """
    agreed = _require_bool(data, "agreed")
    comment = _text(data, "comment")

    question = _get_question(question_id)
    week = ctx.current_week(question.module)
    ensure_allowed(question, Action.RESPOND, user=ctx.user, week=week)

    now = timezone.now()
    updated = (
        Question.objects
        .filter(
            id=question.id,
            created_by_id=ctx.user.id,
            validated_by__isnull=False,
            responded_at__isnull=True,
        )
        .update(
            agreement_agreed=agreed,
            agreement_comment=comment,
            responded_at=now,
            updated_at=now,
        )
    )
    if not updated:
        raise StateConflictError("Question cannot be responded to in its current state")

    question.refresh_from_db()
    logger.info("[questions] responded id=%s by=%s agreed=%s", question.id, ctx.user.id, agreed)

    if not ctx.is_teacher:
        award_capped(
            student=ctx.user,
            category=PointCategory.QUESTION_REPARATION,
            module=question.module,
            question=question,
            week_number=week or RESPONSE_WEEK,
            reason=REASON_REPARATION.format(week=week or RESPONSE_WEEK),
        )
    return question


# ---------------------------------------------------------------------
# teacher validation (orthogonal)
# ---------------------------------------------------------------------

@transaction.atomic
def teacher_validate_question(*, ctx: CourseContext, question_id: int, data: dict) -> Question:
    """
    TeacherValidateQuestion: comment is mandatory; no points, no gating.
    """
    verdict = _require_bool(data, "validated_by_teacher")
    comment = _text(data, "comment")
    if not comment:
        raise DomainValidationError("Comment is required for teacher validation")

    question = _get_question(question_id, lock=True)
    ensure_allowed(question, Action.TEACHER_VALIDATE, user=ctx.user, week=None)

    question.validated_by_teacher = verdict
    question.validated_by_teacher_comment = comment
    question.validated_by_teacher_at = timezone.now()
    question.teacher_validator = ctx.user
    question.save(update_fields=[
        "validated_by_teacher",
        "validated_by_teacher_comment",
        "validated_by_teacher_at",
        "teacher_validator",
        "updated_at",
    ])

    logger.info(
        "[questions] teacher validated id=%s by=%s verdict=%s",
        question.id, ctx.user.id, verdict,
    )
    return question


def teacher_validated_queryset(module_ids: Optional[list[int]] = None):
    """
    Test pool: questions a teacher approved.
    """
    qs = Question.objects.filter(is_active=True, validated_by_teacher=True)
    if module_ids:
        qs = qs.filter(module_id__in=module_ids)
    return qs.select_related("module", "created_by")
