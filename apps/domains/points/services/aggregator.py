# PATH: apps/domains/points/services/aggregator.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from django.conf import settings
from django.contrib.auth import get_user_model

from apps.api.common.exceptions import DomainValidationError
from apps.domains.points.models import (
    MODULE_CATEGORIES,
    SPECIAL_CATEGORIES,
    PointCategory,
    PointTransaction,
)
from apps.domains.points.services.bucketer import (
    ModuleRef,
    bucket_for,
    module_refs,
    slot_key,
)
from apps.domains.subjects.selectors import list_modules_for_subject

User = get_user_model()


@dataclass
class PointsBreakdown:
    """
    Derived view of one student's ledger. Never persisted.

    total_points is the plain sum of every row; bucketing only decides
    how that total is split for display.
    """

    total_points: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    modules: List[dict] = field(default_factory=list)
    extra: Dict[str, int] = field(default_factory=dict)
    details: List[Any] = field(default_factory=list)


def _slot_count() -> int:
    return max(1, int(getattr(settings, "POINTS_MODULE_SLOTS", 12)))


def aggregate(transactions: Iterable[Any], modules: Sequence[Any]) -> PointsBreakdown:
    """
    Group one student's rows into module slots x lifecycle category plus
    the special-category totals.
    """
    refs: List[ModuleRef] = module_refs(modules)
    slots = _slot_count()

    rows = list(transactions)

    by_category = {c.value: 0 for c in PointCategory}
    extra = {str(c): 0 for c in SPECIAL_CATEGORIES}
    per_slot: Dict[str, Dict[str, int]] = defaultdict(lambda: {str(c): 0 for c in MODULE_CATEGORIES})

    total = 0
    for tx in rows:
        value = int(tx.points)
        total += value
        by_category[str(tx.category)] = by_category.get(str(tx.category), 0) + value

        bucket = bucket_for(tx, refs)
        if bucket.slot is None:
            extra[bucket.category] += value
        elif bucket.category in per_slot[bucket.slot]:
            per_slot[bucket.slot][bucket.category] += value

    module_rows = []
    for i in range(slots):
        key = slot_key(i, refs)
        ref = refs[i] if i < len(refs) else None
        counts = per_slot.get(key) or {str(c): 0 for c in MODULE_CATEGORIES}
        module_rows.append({
            "index": i,
            "moduleId": key,
            "title": ref.title if ref else None,
            **counts,
        })

    return PointsBreakdown(
        total_points=total,
        by_category=by_category,
        modules=module_rows,
        extra=extra,
        details=rows,
    )


def _parse_user_ids(user_ids: Any) -> List[int]:
    if not isinstance(user_ids, (list, tuple)) or not user_ids:
        raise DomainValidationError("Valid array of user IDs is required")
    out = []
    for raw in user_ids:
        try:
            out.append(int(raw))
        except (TypeError, ValueError):
            raise DomainValidationError(f"invalid user id: {raw!r}")
    # keep request order, drop repeats
    return list(dict.fromkeys(out))


def build_users_points_summary(
    *,
    user_ids: Any,
    subject_id: Optional[int] = None,
    modules: Optional[Sequence[Any]] = None,
) -> List[dict]:
    """
    GetUsersPointsSummary

    [{ "user": {...}, "points": { "totalPoints", "summary", "modules",
                                  "extra", "details" } }, ...]
    in the order of `user_ids`; unknown ids are skipped.
    """
    from apps.core.serializers import UserBriefSerializer
    from apps.domains.points.serializers import PointTransactionSerializer

    ids = _parse_user_ids(user_ids)
    if modules is None:
        modules = list_modules_for_subject(subject_id)
    refs = module_refs(modules)

    rows_by_student: Dict[int, List[PointTransaction]] = defaultdict(list)
    for tx in PointTransaction.objects.filter(student_id__in=ids).order_by("-created_at", "-id"):
        rows_by_student[tx.student_id].append(tx)

    users = {u.id: u for u in User.objects.filter(id__in=ids)}

    data = []
    for uid in ids:
        user = users.get(uid)
        if not user:
            continue
        breakdown = aggregate(rows_by_student.get(uid, []), refs)
        data.append({
            "user": UserBriefSerializer(user).data,
            "points": {
                "totalPoints": breakdown.total_points,
                "summary": breakdown.by_category,
                "modules": breakdown.modules,
                "extra": breakdown.extra,
                "details": PointTransactionSerializer(breakdown.details, many=True).data,
            },
        })
    return data


def build_user_category_summary(*, user_id: int) -> dict:
    """
    Per-category totals of one student (no module split).
    """
    rows = PointTransaction.objects.filter(student_id=int(user_id)).only("points", "category")
    summary = {c.value: 0 for c in PointCategory}
    total = 0
    for tx in rows:
        summary[tx.category] = summary.get(tx.category, 0) + int(tx.points)
        total += int(tx.points)
    return {"summary": summary, "totalPoints": total}
