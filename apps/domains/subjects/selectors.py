# PATH: apps/domains/subjects/selectors.py
"""
Module directory read side.

The point aggregator, the reconciliation engine and the question
services only ever see modules through these functions.
"""
from __future__ import annotations

from typing import Optional

from django.db.models import Prefetch

from apps.domains.subjects.models import Module


def list_modules_for_subject(subject_id: Optional[int]) -> list[Module]:
    """
    Active modules of the subject in display order, question ids prefetched.
    No subject -> no modules (summaries fall back to empty slots).
    """
    if not subject_id:
        return []

    from apps.domains.questions.models import Question

    qs = (
        Module.objects
        .filter(subject_id=int(subject_id), is_active=True)
        .select_related("subject")
        .prefetch_related(
            Prefetch("questions", queryset=Question.objects.only("id", "module_id").order_by("id"))
        )
        .order_by("week_number", "date_start", "id")
    )
    return list(qs)


def get_module(module_id: int) -> Optional[Module]:
    return Module.objects.select_related("subject").filter(id=int(module_id)).first()


def module_question_ids(module: Module) -> list[int]:
    """
    Uses the prefetched questions when present.
    """
    cache = getattr(module, "_prefetched_objects_cache", {}) or {}
    if "questions" in cache:
        return [q.id for q in cache["questions"]]
    return module.question_ids
