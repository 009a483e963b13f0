# domains/subjects/serializers.py

from rest_framework import serializers

from .models import Subject, Module
from .selectors import module_question_ids


# ========================================================
# Subject
# ========================================================

class SubjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subject
        fields = ["id", "name", "code", "description", "is_active"]
        ref_name = "Subject"


# ========================================================
# Module
# ========================================================

class ModuleSerializer(serializers.ModelSerializer):
    questions = serializers.SerializerMethodField()
    week_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Module
        fields = [
            "id",
            "subject",
            "title",
            "description",
            "week_number",
            "date_start",
            "date_end",
            "week_count",
            "is_active",
            "required_questions_per_user",
            "questions",
        ]
        ref_name = "Module"

    def get_questions(self, obj):
        return module_question_ids(obj)
