import pytest
from rest_framework.exceptions import PermissionDenied

from apps.api.common.exceptions import StateConflictError
from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.questions.models import ValidationAssignment
from apps.domains.questions.services import assignment_service, lifecycle_service

pytestmark = pytest.mark.django_db


def _validation_points(user):
    return PointTransaction.objects.filter(student=user, category=PointCategory.QUESTION_VALIDATION)


def _assigned_ids(result):
    return [item.question_id for item in result.assignment.items.all()]


def test_scarcity_awards_automatic_point(student, other_student, module, make_question, ctx_for):
    # only one question by someone else, two required
    make_question(module=module, author=student)
    other = make_question(module=module, author=other_student)

    result = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)

    assert result.created is True
    assert _assigned_ids(result) == [other.id]
    assert result.automatic_points == 1

    rows = list(_validation_points(student))
    assert len(rows) == 1
    assert rows[0].points == 1
    assert rows[0].module_id == module.id
    assert rows[0].reason == "Automatic point - only 1 question(s) available (1/1)"


def test_no_candidates_awards_full_requirement(student, module, ctx_for):
    result = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)

    assert _assigned_ids(result) == []
    assert result.automatic_points == 2
    assert _validation_points(student).count() == 2


def test_assignment_is_stable_across_refetches(student, make_user, module, make_question, ctx_for):
    for _ in range(5):
        make_question(module=module, author=make_user())
    ctx = ctx_for(student, week=2)

    first = assignment_service.get_or_create_assignment(ctx=ctx, module=module)
    again = assignment_service.get_or_create_assignment(ctx=ctx, module=module)

    assert len(_assigned_ids(first)) == 2
    assert again.created is False
    assert _assigned_ids(again) == _assigned_ids(first)
    assert ValidationAssignment.objects.filter(student=student).count() == 1
    assert _validation_points(student).count() == 0


def test_students_do_not_share_assigned_questions(make_user, module, make_question, ctx_for):
    author = make_user()
    for _ in range(4):
        make_question(module=module, author=author)
    a, b = make_user(), make_user()

    first = assignment_service.get_or_create_assignment(ctx=ctx_for(a, week=2), module=module)
    second = assignment_service.get_or_create_assignment(ctx=ctx_for(b, week=2), module=module)

    assert len(_assigned_ids(first)) == 2
    assert len(_assigned_ids(second)) == 2
    assert not set(_assigned_ids(first)) & set(_assigned_ids(second))


def test_validated_and_inactive_questions_are_not_eligible(student, make_user, module, make_question, ctx_for):
    make_question(module=module, author=make_user(), validated_by=make_user(), validated=True)
    make_question(module=module, author=make_user(), is_active=False)

    result = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)

    assert _assigned_ids(result) == []
    assert result.automatic_points == 2


def test_automatic_points_respect_cap(student, module, make_tx, ctx_for):
    # one validation point already in the ledger for this module
    make_tx(student=student, category=PointCategory.QUESTION_VALIDATION, module=module, week_number=2)

    result = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)

    assert result.automatic_points == 1
    assert _validation_points(student).count() == 2


def test_assignment_only_created_in_week_two(student, module, ctx_for):
    with pytest.raises(StateConflictError):
        assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=3), module=module)
    assert not ValidationAssignment.objects.exists()


def test_existing_assignment_readable_after_week_two(student, module, make_question, make_user, ctx_for):
    make_question(module=module, author=make_user())
    created = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)
    later = assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=3), module=module)
    assert later.assignment.id == created.assignment.id


def test_validation_marks_assignment_item_completed(student, make_user, module, make_question, ctx_for):
    q = make_question(module=module, author=make_user())
    ctx = ctx_for(student, week=2)
    assignment_service.get_or_create_assignment(ctx=ctx, module=module)

    lifecycle_service.validate_question(ctx=ctx, question_id=q.id, data={"valid": True})

    item = ValidationAssignment.objects.get(student=student).items.get()
    assert item.completed_at is not None


def test_unassigned_student_cannot_take_an_assigned_question(make_user, module, make_question, ctx_for):
    author = make_user()
    q1 = make_question(module=module, author=author)
    q2 = make_question(module=module, author=author)
    holder, outsider = make_user(), make_user()

    dealt = assignment_service.get_or_create_assignment(ctx=ctx_for(holder, week=2), module=module)
    assert sorted(_assigned_ids(dealt)) == [q1.id, q2.id]
    assert dealt.automatic_points == 0

    with pytest.raises(PermissionDenied):
        lifecycle_service.validate_question(ctx=ctx_for(outsider, week=2), question_id=q1.id, data={"valid": True})

    lifecycle_service.validate_question(ctx=ctx_for(holder, week=2), question_id=q1.id, data={"valid": True})

    q1.refresh_from_db()
    assert q1.validated_by_id == holder.id
    assert _validation_points(holder).count() == 1
    assert not _validation_points(outsider).exists()


def test_teacher_does_not_block_the_assignee(teacher, make_user, module, make_question, ctx_for):
    q = make_question(module=module, author=make_user())
    holder = make_user()
    assignment_service.get_or_create_assignment(ctx=ctx_for(holder, week=2), module=module)

    with pytest.raises(PermissionDenied):
        lifecycle_service.validate_question(ctx=ctx_for(teacher, week=2), question_id=q.id, data={"valid": True})

    lifecycle_service.validate_question(ctx=ctx_for(holder, week=2), question_id=q.id, data={"valid": False})
    q.refresh_from_db()
    assert q.validated_by_id == holder.id


def test_stats_group_by_question(make_user, module, make_question, ctx_for):
    q = make_question(module=module, author=make_user())
    student = make_user()
    assignment_service.get_or_create_assignment(ctx=ctx_for(student, week=2), module=module)

    stats = assignment_service.assignment_stats(module_id=module.id)

    assert stats == [{
        "question_id": q.id,
        "text": q.text,
        "count": 1,
        "validators": [student.id],
        "completed": 0,
    }]
