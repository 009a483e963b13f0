# PATH: apps/domains/questions/services/assignment_service.py
"""
Peer validation assignments (week 2)

An assignment is created once per (student, module, week) and read back
afterwards, so refreshing the page never deals a different random set.

Shortfall: when fewer than `required_questions_per_user` questions are
eligible, the missing question_validation points are awarded at creation
time (automatic points) and the count is stored on the assignment.
"""
from __future__ import annotations

import logging
import random
from collections import defaultdict
from dataclasses import dataclass
from typing import List

from django.db import transaction

from apps.api.common.exceptions import StateConflictError
from apps.core.context import CourseContext
from apps.domains.points.models import PointCategory
from apps.domains.points.services.ledger import award_capped, lock_student, module_cap
from apps.domains.questions.lifecycle import VALIDATION_WEEK, in_week
from apps.domains.questions.models import AssignedQuestion, Question, ValidationAssignment
from apps.domains.subjects.models import Module

logger = logging.getLogger(__name__)

REASON_AUTOMATIC_NONE = "Automatic point - no questions available for validation ({i}/{n})"
REASON_AUTOMATIC_SOME = "Automatic point - only {k} question(s) available ({i}/{n})"


@dataclass
class AssignmentResult:
    assignment: ValidationAssignment
    created: bool

    @property
    def automatic_points(self) -> int:
        return int(self.assignment.automatic_points)


def _existing(student_id: int, module_id: int, week: int):
    return (
        ValidationAssignment.objects
        .filter(student_id=student_id, module_id=module_id, week_number=week)
        .prefetch_related("items__question")
        .first()
    )


def eligible_questions(*, module, student_id: int, week: int = VALIDATION_WEEK):
    """
    Active, not yet validated questions of other students that nobody
    else holds for this module/week.
    """
    taken = AssignedQuestion.objects.filter(
        assignment__module_id=module.id,
        assignment__week_number=week,
    ).values("question_id")

    return (
        Question.objects
        .filter(module_id=module.id, is_active=True, validated_by__isnull=True)
        .exclude(created_by_id=student_id)
        .exclude(id__in=taken)
        .order_by("id")
    )


def get_or_create_assignment(*, ctx: CourseContext, module) -> AssignmentResult:
    """
    GetQuestionAssignments for the requesting student.
    """
    week = VALIDATION_WEEK

    existing = _existing(ctx.user.id, module.id, week)
    if existing:
        return AssignmentResult(assignment=existing, created=False)

    current = ctx.current_week(module)
    if not in_week(current, VALIDATION_WEEK):
        raise StateConflictError("Questions for validation are assigned in week 2")

    return _create_assignment(student=ctx.user, module=module, week=week)


@transaction.atomic
def _create_assignment(*, student, module, week: int) -> AssignmentResult:
    # serialise creators per module so two students never draw the same question
    Module.objects.select_for_update().filter(id=module.id).first()
    lock_student(student.id)

    existing = _existing(student.id, module.id, week)
    if existing:
        return AssignmentResult(assignment=existing, created=False)

    required = module_cap(module)
    candidates = list(eligible_questions(module=module, student_id=student.id, week=week))
    random.shuffle(candidates)
    picked = candidates[:required]

    assignment = ValidationAssignment.objects.create(
        student=student,
        module=module,
        week_number=week,
    )
    AssignedQuestion.objects.bulk_create([
        AssignedQuestion(assignment=assignment, question=q, position=i)
        for i, q in enumerate(picked)
    ])

    missing = required - len(picked)
    awarded = 0
    for i in range(missing):
        if picked:
            reason = REASON_AUTOMATIC_SOME.format(k=len(picked), i=i + 1, n=missing)
        else:
            reason = REASON_AUTOMATIC_NONE.format(i=i + 1, n=missing)
        tx = award_capped(
            student=student,
            category=PointCategory.QUESTION_VALIDATION,
            module=module,
            week_number=week,
            reason=reason,
        )
        if tx is not None:
            awarded += 1

    if awarded:
        assignment.automatic_points = awarded
        assignment.save(update_fields=["automatic_points", "updated_at"])

    logger.info(
        "[questions] assignment created student=%s module=%s assigned=%s automatic_points=%s",
        student.id, module.id, [q.id for q in picked], awarded,
    )

    return AssignmentResult(assignment=_existing(student.id, module.id, week), created=True)


def read_assignment(*, student_id: int, module_id: int, week: int = VALIDATION_WEEK):
    """
    Read-only lookup (teachers looking at a student's set). None when absent.
    """
    return _existing(int(student_id), int(module_id), week)


def assignment_stats(*, module_id: int, week: int = VALIDATION_WEEK) -> List[dict]:
    """
    Per assigned question: how many students hold it and who.
    """
    rows = (
        AssignedQuestion.objects
        .filter(assignment__module_id=int(module_id), assignment__week_number=week)
        .select_related("question", "assignment")
        .order_by("question_id", "assignment__student_id")
    )

    grouped: dict = defaultdict(lambda: {"count": 0, "validators": [], "completed": 0})
    texts = {}
    for row in rows:
        g = grouped[row.question_id]
        g["count"] += 1
        g["validators"].append(row.assignment.student_id)
        if row.completed_at is not None:
            g["completed"] += 1
        texts[row.question_id] = row.question.text

    return [
        {
            "question_id": qid,
            "text": texts[qid],
            "count": g["count"],
            "validators": g["validators"],
            "completed": g["completed"],
        }
        for qid, g in grouped.items()
    ]
