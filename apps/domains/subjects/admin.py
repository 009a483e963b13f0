from django.contrib import admin

from .models import Subject, Module


class ModuleInline(admin.TabularInline):
    model = Module
    extra = 0
    fields = ("title", "week_number", "date_start", "date_end", "required_questions_per_user", "is_active")


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "is_active")
    list_display_links = ("id", "code")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    filter_horizontal = ("teachers", "students")
    inlines = [ModuleInline]


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "subject", "week_number", "date_start", "date_end", "is_active")
    list_display_links = ("id", "title")
    list_filter = ("subject", "is_active")
    search_fields = ("title", "subject__name")
    ordering = ("subject", "week_number")
