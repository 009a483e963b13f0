# PATH: apps/domains/questions/serializers.py

from rest_framework import serializers

from apps.core.serializers import UserBriefSerializer

from .lifecycle import allowed_actions, state_of
from .models import OPTION_KEYS, AssignedQuestion, Question, ValidationAssignment


# ========================================================
# Question
# ========================================================

class QuestionSerializer(serializers.ModelSerializer):
    """
    Read shape. Writes go through the lifecycle services.

    `lifecycle_state` / `allowed_actions` need `ctx` (CourseContext) in
    the serializer context; without it allowed_actions is empty.
    """

    created_by = UserBriefSerializer(read_only=True)
    created_by_id = serializers.IntegerField(read_only=True)
    validated_by_id = serializers.IntegerField(read_only=True)
    teacher_validator_id = serializers.IntegerField(read_only=True)
    module_id = serializers.IntegerField(read_only=True)

    user_agreement = serializers.SerializerMethodField()
    lifecycle_state = serializers.SerializerMethodField()
    allowed_actions = serializers.SerializerMethodField()

    class Meta:
        model = Question
        fields = [
            "id",
            "text",
            "options",
            "correct",
            "difficulty",
            "module_id",
            "created_by_id",
            "created_by",
            "validated",
            "validation_comment",
            "validated_by_id",
            "validated_at",
            "user_agreement",
            "validated_by_teacher",
            "validated_by_teacher_comment",
            "validated_by_teacher_at",
            "teacher_validator_id",
            "is_active",
            "lifecycle_state",
            "allowed_actions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        ref_name = "Question"

    def get_user_agreement(self, obj):
        return obj.user_agreement

    def get_lifecycle_state(self, obj):
        return state_of(obj)

    def get_allowed_actions(self, obj):
        ctx = self.context.get("ctx")
        if ctx is None:
            return []
        return allowed_actions(obj, user=ctx.user, week=ctx.current_week(obj.module))


# ========================================================
# Request bodies
# ========================================================

class QuestionWriteSerializer(serializers.Serializer):
    """
    Create (all of text/options/correct) and edit (partial=True).
    """

    module = serializers.IntegerField(required=False)
    text = serializers.CharField()
    options = serializers.DictField(child=serializers.CharField())
    correct = serializers.CharField()
    difficulty = serializers.ChoiceField(
        choices=Question.Difficulty.choices,
        required=False,
        allow_blank=True,
        allow_null=True,
    )

    def validate_options(self, value):
        missing = [key for key in OPTION_KEYS if not str(value.get(key) or "").strip()]
        if missing:
            raise serializers.ValidationError(f"options {', '.join(missing)} are required")
        return {key: value[key] for key in OPTION_KEYS}

    def validate_correct(self, value):
        value = value.strip().lower()
        if value not in OPTION_KEYS:
            raise serializers.ValidationError("correct must be one of a, b, c, d")
        return value


class ValidateInputSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RespondInputSerializer(serializers.Serializer):
    agreed = serializers.BooleanField()
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TeacherValidateInputSerializer(serializers.Serializer):
    validated_by_teacher = serializers.BooleanField()
    comment = serializers.CharField(
        error_messages={
            "required": "Comment is required for teacher validation",
            "blank": "Comment is required for teacher validation",
            "null": "Comment is required for teacher validation",
        },
    )


# ========================================================
# Assignment
# ========================================================

class AssignedQuestionSerializer(serializers.ModelSerializer):
    question = QuestionSerializer(read_only=True)

    class Meta:
        model = AssignedQuestion
        fields = ["id", "position", "completed_at", "question"]


class ValidationAssignmentSerializer(serializers.ModelSerializer):
    items = AssignedQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = ValidationAssignment
        fields = [
            "id",
            "student",
            "module",
            "week_number",
            "automatic_points",
            "items",
            "created_at",
        ]
