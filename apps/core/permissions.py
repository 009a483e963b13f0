# PATH: apps/core/permissions.py
from __future__ import annotations

from rest_framework.permissions import BasePermission


def _role(u) -> str:
    v = getattr(u, "role", None) or ""
    return str(v).upper()


def is_admin_user(u) -> bool:
    return bool(getattr(u, "is_superuser", False) or getattr(u, "is_staff", False) or _role(u) == "ADMIN")


def is_teacher_user(u) -> bool:
    return bool(is_admin_user(u) or _role(u) == "TEACHER")


def is_student_user(u) -> bool:
    # anyone who is not a teacher/admin is treated as a student
    return bool(u and not is_teacher_user(u))


class IsStudent(BasePermission):
    """
    Student-only permission
    """
    message = "Student account required."

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        return bool(u and u.is_authenticated and is_student_user(u))


class IsTeacherOrAdmin(BasePermission):
    """
    Teacher / admin only (manual awards, ledger edits, teacher validation)
    """
    message = "Teacher account required."

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        return bool(u and u.is_authenticated and is_teacher_user(u))
