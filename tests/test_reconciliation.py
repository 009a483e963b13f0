import pytest

from apps.api.common.exceptions import DomainValidationError, InvariantViolation, ResourceAbsence
from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.points.services.reconciliation import reconcile

pytestmark = pytest.mark.django_db


def _snapshot(student):
    return list(
        PointTransaction.objects
        .filter(student=student)
        .order_by("id")
        .values_list("id", "points", "version", "reason")
    )


@pytest.fixture
def two_creation_points(student, module, make_tx):
    first = make_tx(student=student, points=1, module=module)
    second = make_tx(student=student, points=1, module=module)
    return first, second


def test_raising_a_cell_puts_the_delta_on_one_row(student, module, two_creation_points):
    first, second = two_creation_points

    result = reconcile(
        student_id=student.id,
        category=PointCategory.QUESTION_CREATION,
        module_id=module.id,
        requested_value=3,
    )

    assert result.applied_delta == 1
    assert result.total_points == 3
    assert result.match == "strict"

    # newest row first, the other one untouched
    second.refresh_from_db()
    first.refresh_from_db()
    assert result.point.id == second.id
    assert second.points == 2
    assert second.version == 2
    assert first.points == 1


def test_negative_result_is_rejected_and_ledger_unchanged(student, module, two_creation_points):
    before = _snapshot(student)

    with pytest.raises(InvariantViolation):
        reconcile(
            student_id=student.id,
            category=PointCategory.QUESTION_CREATION,
            module_id=module.id,
            requested_value=-1,
        )

    assert _snapshot(student) == before


def test_lowering_below_target_row_is_rejected(student, module, two_creation_points):
    # sum 2 -> 0 needs -2 on a single 1-point row
    before = _snapshot(student)
    with pytest.raises(InvariantViolation):
        reconcile(
            student_id=student.id,
            category=PointCategory.QUESTION_CREATION,
            module_id=module.id,
            requested_value=0,
        )
    assert _snapshot(student) == before


def test_same_value_is_a_no_op(student, module, two_creation_points):
    before = _snapshot(student)

    result = reconcile(
        student_id=student.id,
        category=PointCategory.QUESTION_CREATION,
        module_id=module.id,
        requested_value=2,
    )

    assert result.applied_delta == 0
    assert result.total_points == 2
    assert _snapshot(student) == before


def test_nothing_to_edit(student, module):
    with pytest.raises(ResourceAbsence) as exc:
        reconcile(
            student_id=student.id,
            category=PointCategory.QUESTION_VALIDATION,
            module_id=module.id,
            requested_value=1,
        )
    assert exc.value.code == "NO_POINTS"
    assert not PointTransaction.objects.filter(student=student).exists()


def test_relaxed_match_when_strict_finds_nothing(student, module, make_module, make_tx):
    other_module = make_module(title="Genetics")
    row = make_tx(student=student, points=1, module=other_module)

    result = reconcile(
        student_id=student.id,
        category=PointCategory.QUESTION_CREATION,
        module_id="empty-5",
        requested_value=4,
        subject_id=module.subject_id,
    )

    row.refresh_from_db()
    assert result.match == "relaxed"
    assert row.points == 4


def test_special_category_ignores_module(student, module, make_tx):
    row = make_tx(student=student, points=5, category=PointCategory.PROJECT_WORK)

    result = reconcile(
        student_id=student.id,
        category=PointCategory.PROJECT_WORK,
        module_id=None,
        requested_value=7,
    )

    row.refresh_from_db()
    assert result.applied_delta == 2
    assert row.points == 7


def test_strict_match_uses_display_bucketing(student, module, make_module, make_tx, make_question):
    # legacy row without module, bucketed by its question
    second_module = make_module(title="Genetics")
    question = make_question(module=second_module, author=student)
    legacy = make_tx(student=student, points=1, question=question, reason="Vytvorenie otázky v týždni 1")
    stamped = make_tx(student=student, points=1, module=module)

    result = reconcile(
        student_id=student.id,
        category=PointCategory.QUESTION_CREATION,
        module_id=second_module.id,
        requested_value=2,
    )

    legacy.refresh_from_db()
    stamped.refresh_from_db()
    assert result.match == "strict"
    assert legacy.points == 2
    assert stamped.points == 1


@pytest.mark.parametrize("value", ["abc", None, 1.5, True])
def test_malformed_value_is_rejected(student, module, two_creation_points, value):
    before = _snapshot(student)
    with pytest.raises(DomainValidationError):
        reconcile(
            student_id=student.id,
            category=PointCategory.QUESTION_CREATION,
            module_id=module.id,
            requested_value=value,
        )
    assert _snapshot(student) == before


def test_unknown_category_is_rejected(student, module):
    with pytest.raises(DomainValidationError):
        reconcile(student_id=student.id, category="bonus", module_id=module.id, requested_value=1)


def test_unknown_module_is_rejected(student, module, two_creation_points):
    before = _snapshot(student)
    with pytest.raises(ResourceAbsence) as exc:
        reconcile(
            student_id=student.id,
            category=PointCategory.QUESTION_CREATION,
            module_id=module.id + 1000,
            requested_value=5,
        )
    assert exc.value.code == "MODULE_NOT_FOUND"
    assert _snapshot(student) == before
