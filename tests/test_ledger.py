import pytest

from apps.api.common.exceptions import (
    DomainValidationError,
    ResourceAbsence,
    StateConflictError,
)
from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.points.services.ledger import (
    award_capped,
    award_custom_points,
    parse_points,
    update_point,
)

pytestmark = pytest.mark.django_db


def test_parse_points():
    assert parse_points("3") == 3
    assert parse_points(2.0) == 2
    for bad in ("x", None, True, 1.5):
        with pytest.raises(DomainValidationError):
            parse_points(bad)


def test_award_capped_stops_at_module_cap(student, module, make_question):
    created = []
    for _ in range(3):
        q = make_question(module=module, author=student)
        created.append(award_capped(
            student=student,
            category=PointCategory.QUESTION_CREATION,
            module=module,
            question=q,
            reason="Vytvorenie otázky v týždni 1",
        ))

    assert [tx is not None for tx in created] == [True, True, False]
    assert PointTransaction.objects.filter(student=student).count() == 2


def test_award_capped_once_per_question(student, module, make_question):
    q = make_question(module=module, author=student)
    kwargs = dict(
        student=student,
        category=PointCategory.QUESTION_CREATION,
        module=module,
        question=q,
        reason="Vytvorenie otázky v týždni 1",
    )
    assert award_capped(**kwargs) is not None
    assert award_capped(**kwargs) is None


def test_award_capped_stamps_module_and_week(student, module, make_question):
    q = make_question(module=module, author=student)
    tx = award_capped(
        student=student,
        category=PointCategory.QUESTION_CREATION,
        module=module,
        question=q,
        week_number=1,
        reason="Vytvorenie otázky v týždni 1",
    )
    assert tx.module_id == module.id
    assert tx.week_number == 1
    assert tx.related_entity == {"entity_type": "Question", "entity_id": q.id}


def test_cap_follows_module_setting(student, make_module):
    module = make_module(required=1)
    first = award_capped(student=student, category=PointCategory.QUESTION_VALIDATION, module=module, reason="a")
    second = award_capped(student=student, category=PointCategory.QUESTION_VALIDATION, module=module, reason="b")
    assert first is not None
    assert second is None


def test_custom_points_are_exempt_from_caps(student, teacher, module, make_tx):
    make_tx(student=student, module=module)
    make_tx(student=student, module=module)

    tx = award_custom_points(
        student_id=student.id,
        points=5,
        reason="Extra question work",
        category=PointCategory.QUESTION_CREATION,
        assigned_by=teacher,
    )
    assert tx.points == 5
    assert tx.assigned_by_id == teacher.id
    assert PointTransaction.objects.filter(student=student).count() == 3


def test_custom_points_defaults_to_other(student):
    tx = award_custom_points(student_id=student.id, points="2", reason="Forum help")
    assert tx.category == PointCategory.OTHER


@pytest.mark.parametrize(
    "points,reason,category",
    [
        (0, "x", None),
        (-1, "x", None),
        ("abc", "x", None),
        (1, "", None),
        (1, "x", "bonus"),
    ],
)
def test_custom_points_validation(student, points, reason, category):
    with pytest.raises(DomainValidationError):
        award_custom_points(student_id=student.id, points=points, reason=reason, category=category)
    assert not PointTransaction.objects.exists()


def test_custom_points_unknown_student():
    with pytest.raises(ResourceAbsence):
        award_custom_points(student_id=999999, points=1, reason="x")


def test_update_point_bumps_version(student, make_tx):
    tx = make_tx(student=student, points=1)
    updated = update_point(point_id=tx.id, points=4, reason="corrected", expected_version=1)
    assert updated.points == 4
    assert updated.reason == "corrected"
    assert updated.version == 2


def test_update_point_stale_version(student, make_tx):
    tx = make_tx(student=student, points=1)
    update_point(point_id=tx.id, points=2)

    with pytest.raises(StateConflictError):
        update_point(point_id=tx.id, points=3, expected_version=1)

    tx.refresh_from_db()
    assert tx.points == 2


def test_update_point_rejects_negative_and_missing(student, make_tx):
    tx = make_tx(student=student, points=1)
    with pytest.raises(DomainValidationError):
        update_point(point_id=tx.id, points=-1)
    with pytest.raises(ResourceAbsence):
        update_point(point_id=999999, points=1)
