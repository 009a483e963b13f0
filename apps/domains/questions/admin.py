from django.contrib import admin

from .models import AssignedQuestion, Question, ValidationAssignment


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "module",
        "created_by",
        "validated",
        "validated_by",
        "validated_by_teacher",
        "is_active",
        "created_at",
    )
    list_filter = ("module", "validated", "validated_by_teacher", "is_active")
    search_fields = ("text",)
    raw_id_fields = ("created_by", "validated_by", "teacher_validator")


class AssignedQuestionInline(admin.TabularInline):
    model = AssignedQuestion
    extra = 0
    raw_id_fields = ("question",)


@admin.register(ValidationAssignment)
class ValidationAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "module", "week_number", "automatic_points", "created_at")
    list_filter = ("module", "week_number")
    raw_id_fields = ("student",)
    inlines = [AssignedQuestionInline]
