from django.apps import AppConfig


class SubjectsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    # Django import path
    name = "apps.domains.subjects"

    # migration / FK label (never change)
    label = "subjects"
