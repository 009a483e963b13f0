# PATH: apps/domains/questions/lifecycle.py
"""
Question lifecycle state machine

    CREATED -> PENDING_PEER_VALIDATION -> PEER_VALIDATED -> CREATOR_RESPONDED

Teacher validation is an orthogonal flag: it can be set in any state and
neither needs nor blocks any transition.

Actions and their gates:
    validate          the student holding it in a validation assignment, week 2,
                      not yet validated (the validator of record may revise
                      until the creator responds); teachers use teacher_validate
    respond           the creator, week 3, validated, not yet responded
    edit              the creator in week 3 / a teacher any time
    delete            a teacher
    teacher_validate  a teacher
"""
from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.db import models
from rest_framework.exceptions import PermissionDenied

from apps.api.common.exceptions import StateConflictError
from apps.core.permissions import is_teacher_user

CREATE_WEEK = 1
VALIDATION_WEEK = 2
RESPONSE_WEEK = 3


class LifecycleState(models.TextChoices):
    CREATED = "created", "Created"
    PENDING_PEER_VALIDATION = "pending_peer_validation", "Pending peer validation"
    PEER_VALIDATED = "peer_validated", "Peer validated"
    CREATOR_RESPONDED = "creator_responded", "Creator responded"


class Action(models.TextChoices):
    VALIDATE = "validate", "Validate"
    RESPOND = "respond", "Respond"
    EDIT = "edit", "Edit"
    DELETE = "delete", "Delete"
    TEACHER_VALIDATE = "teacher_validate", "Teacher validate"


def enforce_week_windows() -> bool:
    return bool(getattr(settings, "QUESTION_ENFORCE_WEEK_WINDOWS", True))


def in_week(week: Optional[int], required: int) -> bool:
    if not enforce_week_windows():
        return True
    return week == required


def state_of(question, *, has_assignment: Optional[bool] = None) -> str:
    if question.responded_at is not None:
        return LifecycleState.CREATOR_RESPONDED
    if question.validated_by_id is not None:
        return LifecycleState.PEER_VALIDATED
    if has_assignment is None:
        has_assignment = question.assignment_links.exists()
    if has_assignment:
        return LifecycleState.PENDING_PEER_VALIDATION
    return LifecycleState.CREATED


def is_assigned(question, user) -> bool:
    """
    Whether `user` holds `question` in one of their validation assignments.
    Uses the prefetched `assignment_links` when the queryset has them.
    """
    user_id = getattr(user, "id", None)
    if user_id is None:
        return False
    return any(link.assignment.student_id == user_id for link in question.assignment_links.all())


def _check(question, action: str, *, user, week: Optional[int], state: str) -> Optional[str]:
    """
    None when allowed, otherwise the reason.
    """
    teacher = is_teacher_user(user)
    creator = question.created_by_id == getattr(user, "id", None)

    if action in (Action.DELETE, Action.TEACHER_VALIDATE):
        return None if teacher else "teacher only"

    if action == Action.EDIT:
        if teacher:
            return None
        if not creator:
            return "only the creator can edit the question"
        if not in_week(week, RESPONSE_WEEK):
            return "questions can be edited in week 3 only"
        return None

    if action == Action.VALIDATE:
        if teacher:
            return "teachers use teacher validation"
        if creator:
            return "you cannot validate your own question"
        if not in_week(week, VALIDATION_WEEK):
            return "questions are validated in week 2"
        if state == LifecycleState.CREATOR_RESPONDED:
            return "the creator already responded to the validation"
        if state == LifecycleState.PEER_VALIDATED and question.validated_by_id != getattr(user, "id", None):
            return "question already validated by another student"
        if not is_assigned(question, user):
            return "question is not in your validation assignment"
        return None

    if action == Action.RESPOND:
        if not creator:
            return "only the creator can respond to the validation"
        if not in_week(week, RESPONSE_WEEK):
            return "responses are accepted in week 3"
        if state in (LifecycleState.CREATED, LifecycleState.PENDING_PEER_VALIDATION):
            return "question has not been validated yet"
        if state == LifecycleState.CREATOR_RESPONDED:
            return "already responded"
        return None

    return f"unknown action {action}"


def allowed_actions(question, *, user, week: Optional[int], has_assignment: Optional[bool] = None) -> list[str]:
    state = state_of(question, has_assignment=has_assignment)
    return [
        a.value
        for a in Action
        if _check(question, a, user=user, week=week, state=state) is None
    ]


# reasons that are about who is asking rather than about the question's state
_PERMISSION_REASONS = {
    "teacher only",
    "only the creator can edit the question",
    "only the creator can respond to the validation",
    "you cannot validate your own question",
    "teachers use teacher validation",
    "question is not in your validation assignment",
}


def ensure_allowed(question, action: str, *, user, week: Optional[int]) -> str:
    """
    Raise when `user` may not perform `action` now; returns the current state.
    """
    state = state_of(question)
    reason = _check(question, action, user=user, week=week, state=state)
    if reason is None:
        return state
    if reason in _PERMISSION_REASONS:
        raise PermissionDenied(reason)
    raise StateConflictError(reason)
