# PATH: apps/core/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from apps.core.models import User


@admin.register(User)
class CoreUserAdmin(UserAdmin):
    list_display = ("id", "username", "name", "surname", "student_number", "role", "is_staff")
    list_filter = ("role", "is_staff", "is_active")
    search_fields = ("username", "name", "surname", "email", "student_number")
    fieldsets = UserAdmin.fieldsets + (
        ("Course", {"fields": ("name", "surname", "student_number", "role")}),
    )
