# PATH: apps/domains/points/services/reconciliation.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from django.db import transaction
from django.db.models import Sum

from apps.api.common.exceptions import (
    DomainValidationError,
    InvariantViolation,
    ResourceAbsence,
)
from apps.domains.points.models import SPECIAL_CATEGORIES, PointTransaction
from apps.domains.points.services.bucketer import bucket_for, is_empty_slot, module_refs
from apps.domains.points.services.ledger import parse_category, parse_id, parse_points, set_points
from apps.domains.subjects.selectors import get_module, list_modules_for_subject

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    applied_delta: int
    point: Optional[PointTransaction]
    current_sum: int
    requested_value: int
    total_points: int
    match: str  # "strict" | "relaxed"


def _parse_module_id(raw: Any) -> Optional[int]:
    """
    Summary cells address modules by id or by "empty-N" (no module).
    """
    if raw is None or raw == "" or is_empty_slot(raw):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise DomainValidationError("module_id must be a module id or an empty slot")


def reconcile(
    *,
    student_id: int,
    category: Any,
    module_id: Any,
    requested_value: Any,
    subject_id: Optional[int] = None,
) -> ReconcileResult:
    """
    Map an edit of an aggregated summary cell onto the ledger.

    0) a module id that names no module -> ResourceAbsence
    1) strict match: rows of `category` bucketed into `module_id` with the
       same rule the summary uses; module categories fall back to every
       row of the category (relaxed match) when strict finds nothing
    2) nothing matched -> ResourceAbsence
    3) delta = requested - current sum, 0 -> no-op
    4) the whole delta goes onto the first matched row (newest first,
       the summary's detail order)
    5) negative result -> InvariantViolation, ledger untouched
    6) persist, other matched rows untouched

    Matched rows are locked and re-read inside the transaction so two
    concurrent edits of the same cell cannot both compute a delta from the
    same stale sum.
    """
    student_id = parse_id(student_id, field="student_id")
    category = parse_category(category)
    value = parse_points(requested_value, field="value")
    target_module_id = _parse_module_id(module_id)

    if target_module_id is not None:
        module = get_module(target_module_id)
        if module is None:
            raise ResourceAbsence("Module not found", code="MODULE_NOT_FOUND")
        if subject_id is None:
            subject_id = module.subject_id
    refs = module_refs(list_modules_for_subject(subject_id))

    with transaction.atomic():
        # ✅ re-read under lock
        rows: List[PointTransaction] = list(
            PointTransaction.objects
            .select_for_update()
            .filter(student_id=student_id, category=category)
            .order_by("-created_at", "-id")
        )

        match = "strict"
        if category in SPECIAL_CATEGORIES:
            matched = rows
        else:
            if target_module_id is None:
                matched = []
            else:
                slot = str(target_module_id)
                matched = [tx for tx in rows if bucket_for(tx, refs).slot == slot]
            if not matched:
                match = "relaxed"
                matched = rows

        if not matched:
            logger.info(
                "[points] reconcile rejected student=%s category=%s module=%s reason=no_points",
                student_id, category, module_id,
            )
            raise ResourceAbsence("No existing points to edit", code="NO_POINTS")

        current_sum = sum(int(tx.points) for tx in matched)
        delta = value - current_sum
        target = matched[0]

        if delta != 0:
            new_points = int(target.points) + delta
            if new_points < 0:
                logger.warning(
                    "[points] reconcile rejected student=%s category=%s module=%s "
                    "sum=%s requested=%s point=%s would_be=%s",
                    student_id, category, module_id, current_sum, value, target.id, new_points,
                )
                raise InvariantViolation("Points cannot be negative", code="NEGATIVE_POINTS")

            set_points(target, new_points)
            logger.info(
                "[points] reconciled student=%s category=%s module=%s match=%s %s -> %s (delta %+d) point=%s",
                student_id, category, module_id, match, current_sum, value, delta, target.id,
            )

        total = (
            PointTransaction.objects
            .filter(student_id=student_id)
            .aggregate(total=Sum("points"))
            .get("total")
        ) or 0

    return ReconcileResult(
        applied_delta=delta,
        point=target,
        current_sum=current_sum,
        requested_value=value,
        total_points=int(total),
        match=match,
    )
