from types import SimpleNamespace

import pytest

from apps.domains.points.services.bucketer import (
    ModuleRef,
    bucket_for,
    is_empty_slot,
    module_slot_for,
    parse_week,
    slot_key,
)

M1 = ModuleRef(id=10, title="Cells", question_ids=frozenset({101, 102}))
M2 = ModuleRef(id=20, title="Genetics", question_ids=frozenset({201}))
MODULES = [M1, M2]


def tx(category="question_creation", reason="", question_id=None, module_id=None):
    return SimpleNamespace(
        category=category,
        reason=reason,
        question_id=question_id,
        module_id=module_id,
    )


@pytest.mark.parametrize(
    "reason,week",
    [
        ("Vytvorenie otázky v týždni 1", 1),
        ("Validácia otázky v týždni 2", 2),
        ("Reakcia na validáciu v týždni 3", 3),
        ("Bonus za týždeň 5", 5),
        ("bonus for Week 7", 7),
        ("TYZDEN 4", 4),
        ("no week here", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_week(reason, week):
    assert parse_week(reason) == week


def test_explicit_module_wins_over_question_and_reason():
    row = tx(module_id=20, question_id=101, reason="week 1")
    assert module_slot_for(row, MODULES) == "20"


def test_explicit_module_not_listed_falls_through_to_question():
    row = tx(module_id=999, question_id=201)
    assert module_slot_for(row, MODULES) == "20"


def test_question_membership_wins_over_reason():
    row = tx(question_id=101, reason="Validácia otázky v týždni 5")
    assert module_slot_for(row, MODULES) == "10"


def test_week_maps_to_module_cycle():
    # weeks 1-3 -> first module, 4-6 -> second, 7-9 wraps to the first
    assert module_slot_for(tx(reason="week 3"), MODULES) == "10"
    assert module_slot_for(tx(reason="week 4"), MODULES) == "20"
    assert module_slot_for(tx(reason="week 7"), MODULES) == "10"


def test_week_without_modules_uses_empty_slot():
    assert module_slot_for(tx(reason="týždeň 4"), []) == "empty-1"
    # clamped to the last of the 12 slots
    assert module_slot_for(tx(reason="week 100"), []) == "empty-11"


def test_default_is_first_module_or_empty_zero():
    assert module_slot_for(tx(reason="manual"), MODULES) == "10"
    assert module_slot_for(tx(reason="manual"), []) == "empty-0"


def test_special_categories_have_no_slot():
    for category in ("test_performance", "forum_participation", "project_work", "other"):
        bucket = bucket_for(tx(category=category, reason="week 4", module_id=10), MODULES)
        assert bucket.slot is None
        assert bucket.category == category


def test_slot_key_and_empty_slots():
    assert slot_key(0, MODULES) == "10"
    assert slot_key(1, MODULES) == "20"
    assert slot_key(2, MODULES) == "empty-2"
    assert is_empty_slot("empty-3")
    assert not is_empty_slot("10")
    assert not is_empty_slot(None)


def test_bucketing_is_deterministic():
    rows = [tx(reason=f"week {n}") for n in range(1, 10)]
    first = [bucket_for(r, MODULES) for r in rows]
    second = [bucket_for(r, MODULES) for r in rows]
    assert first == second
