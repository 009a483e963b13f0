# PATH: apps/domains/points/services/backfill.py
"""
Lifecycle backfill sweeps (teacher triggered)

week 1: every question -> creator gets question_creation
week 2: every peer-validated question -> validator gets question_validation
week 3: every responded question -> creator gets question_reparation

Safe to run repeatedly: award_capped skips (student, category, question)
pairs already in the ledger and respects the per-module cap, so a sweep
only fills what the live flow missed.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from apps.core.permissions import is_teacher_user
from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.points.services.ledger import award_capped
from apps.domains.questions.models import Question
from apps.domains.questions.services.lifecycle_service import (
    REASON_CREATION,
    REASON_REPARATION,
    REASON_VALIDATION,
)

logger = logging.getLogger(__name__)


SWEEPS = {
    1: (PointCategory.QUESTION_CREATION, REASON_CREATION),
    2: (PointCategory.QUESTION_VALIDATION, REASON_VALIDATION),
    3: (PointCategory.QUESTION_REPARATION, REASON_REPARATION),
}


def _candidates(week: int, module_ids: Optional[Iterable[int]]):
    qs = Question.objects.select_related("module", "created_by", "validated_by").order_by("created_at", "id")
    if module_ids:
        qs = qs.filter(module_id__in=list(module_ids))
    if week == 2:
        qs = qs.filter(validated_by__isnull=False)
    elif week == 3:
        qs = qs.filter(validated_by__isnull=False, responded_at__isnull=False)
    return qs


def _earner(question, week: int):
    if week == 2:
        return question.validated_by
    return question.created_by


def award_week(week: int, *, module_ids: Optional[Iterable[int]] = None) -> List[PointTransaction]:
    """
    Returns the transactions created by this sweep.
    """
    category, reason = SWEEPS[week]

    created: List[PointTransaction] = []
    for question in _candidates(week, module_ids):
        student = _earner(question, week)
        if student is None or is_teacher_user(student):
            continue
        tx = award_capped(
            student=student,
            category=category,
            module=question.module,
            question=question,
            week_number=week,
            reason=reason.format(week=week),
        )
        if tx is not None:
            created.append(tx)

    logger.info("[points] backfill week=%s modules=%s awarded=%s", week, module_ids, len(created))
    return created
