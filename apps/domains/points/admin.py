from django.contrib import admin

from .models import PointTransaction


@admin.register(PointTransaction)
class PointTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "student",
        "category",
        "points",
        "module",
        "week_number",
        "reason",
        "version",
        "created_at",
    )
    list_filter = ("category", "module")
    search_fields = ("reason", "student__username", "student__surname")
    raw_id_fields = ("student", "assigned_by", "question")
    # the ledger is append-only; edits go through the points API
    readonly_fields = ("version", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False
