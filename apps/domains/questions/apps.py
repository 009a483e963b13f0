from django.apps import AppConfig


class QuestionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    # Django import path
    name = "apps.domains.questions"

    # migration / FK label (never change)
    label = "questions"
