# PATH: apps/domains/points/services/bucketer.py
"""
Week / module bucketer

Assigns a ledger row to a (module slot, category) bucket for display.

Priority
  0) explicit `module` stamped on the row, when the module is listed
  1) `question_id` contained in a module's question list
  2) week number parsed from the free-text reason ("week N", "týždeň N",
     "v týždni N"), mapped with floor((N-1)/3) mod len(modules);
     without modules: empty slot floor((N-1)/3) clamped to the last slot
  3) first module, else "empty-0"

Special categories never get a module slot.

Steps 2/3 are a best-effort shim for rows written before `module` was
stored; they are deterministic but lossy (a reason's week is relative to
its module, not to the subject).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from django.conf import settings

from apps.domains.points.models import SPECIAL_CATEGORIES
from apps.domains.subjects.selectors import module_question_ids

EMPTY_SLOT_PREFIX = "empty-"

WEEK_PATTERN = re.compile(
    r"(?:\bweek|\bt[ýy][žz]d(?:e[ňn]|[ňn][ia]))\s*(\d+)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ModuleRef:
    id: int
    title: str
    question_ids: frozenset


@dataclass(frozen=True)
class Bucket:
    category: str
    # module id as string, "empty-N", or None for special categories
    slot: Optional[str]


def module_refs(modules: Iterable[Any]) -> list[ModuleRef]:
    """
    Module objects (ORM or already ModuleRef) -> ordered ModuleRef list.
    """
    refs = []
    for m in modules:
        if isinstance(m, ModuleRef):
            refs.append(m)
            continue
        refs.append(
            ModuleRef(
                id=int(m.id),
                title=str(getattr(m, "title", "") or ""),
                question_ids=frozenset(module_question_ids(m)),
            )
        )
    return refs


def empty_slot(index: int) -> str:
    return f"{EMPTY_SLOT_PREFIX}{int(index)}"


def is_empty_slot(slot: Any) -> bool:
    return isinstance(slot, str) and slot.startswith(EMPTY_SLOT_PREFIX)


def slot_key(index: int, modules: Sequence[ModuleRef]) -> str:
    if index < len(modules):
        return str(modules[index].id)
    return empty_slot(index)


def parse_week(reason: Optional[str]) -> Optional[int]:
    if not reason:
        return None
    m = WEEK_PATTERN.search(reason)
    if not m:
        return None
    return int(m.group(1))


def _weeks_per_module() -> int:
    return max(1, int(getattr(settings, "POINTS_WEEKS_PER_MODULE", 3)))


def _slot_count() -> int:
    return max(1, int(getattr(settings, "POINTS_MODULE_SLOTS", 12)))


def module_slot_for(tx: Any, modules: Sequence[ModuleRef]) -> str:
    module_id = getattr(tx, "module_id", None)
    if module_id is not None:
        for m in modules:
            if m.id == int(module_id):
                return str(m.id)

    question_id = getattr(tx, "question_id", None)
    if question_id is not None:
        for m in modules:
            if int(question_id) in m.question_ids:
                return str(m.id)

    week = parse_week(getattr(tx, "reason", None))
    if week is not None:
        cycle = max(0, (week - 1) // _weeks_per_module())
        if modules:
            return str(modules[cycle % len(modules)].id)
        return empty_slot(min(cycle, _slot_count() - 1))

    if modules:
        return str(modules[0].id)
    return empty_slot(0)


def bucket_for(tx: Any, modules: Sequence[ModuleRef]) -> Bucket:
    category = str(tx.category)
    if category in SPECIAL_CATEGORIES:
        return Bucket(category=category, slot=None)
    return Bucket(category=category, slot=module_slot_for(tx, modules))
