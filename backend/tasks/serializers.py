"""
Serializers for the Task API.

This module validates incoming task payloads and renders Task objects.
Wire field names are camelCase; each one maps onto the snake_case Task
attribute through `source`, so validated_data is ready for TaskService.
"""

from django.utils import timezone
from rest_framework import serializers

from .models import TaskPriority, TaskStatus

STATUS_CHOICES = [(s.value, s.display_name) for s in TaskStatus]


def render_timestamp(value=None) -> str:
    """Render value (default: now) the same way task datetime fields are rendered."""
    if value is None:
        value = timezone.now()
    return serializers.DateTimeField().to_representation(value)


def blank_messages(field_name: str) -> dict:
    """Error messages for a required, non-blank field."""
    return {
        'required': f"{field_name} is required",
        'blank': f"{field_name} must not be blank",
        'null': f"{field_name} must not be null",
    }


def parse_priority(value):
    """Uppercase a priority string and check it; None means 'use the default'."""
    if value is None or not value.strip():
        return None
    try:
        return TaskPriority(value.strip().upper())
    except ValueError:
        valid = ', '.join(p.value for p in TaskPriority)
        raise serializers.ValidationError(
            f"Invalid priority '{value}'. Valid options: {valid}"
        )


class CreateTaskSerializer(serializers.Serializer):
    """
    Validates a task creation request.

    documentId, title, status and assignedUserId must be non-blank and
    dueDate must be present. priority is optional and case-insensitive.
    """

    documentId = serializers.CharField(
        source='document_id',
        max_length=255,
        error_messages=blank_messages('documentId')
    )
    title = serializers.CharField(max_length=255, error_messages=blank_messages('title'))
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, error_messages=blank_messages('status'))
    assignedUserId = serializers.CharField(
        source='assigned_user_id',
        max_length=255,
        error_messages=blank_messages('assignedUserId')
    )
    priority = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dueDate = serializers.DateTimeField(source='due_date', error_messages=blank_messages('dueDate'))

    def validate_priority(self, value):
        return parse_priority(value)


class UpdateTaskStatusSerializer(serializers.Serializer):
    """Validates a status-only update."""

    status = serializers.ChoiceField(choices=STATUS_CHOICES, error_messages=blank_messages('status'))


class UpdateTaskSerializer(serializers.Serializer):
    """
    Validates a partial update.

    Every field is optional and null means "leave unchanged". Fields that
    are sent must still be valid: title and assignedUserId non-blank,
    status and priority one of the known values.
    """

    title = serializers.CharField(
        required=False,
        allow_null=True,
        max_length=255,
        error_messages=blank_messages('title')
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True)
    assignedUserId = serializers.CharField(
        source='assigned_user_id',
        required=False,
        allow_null=True,
        max_length=255,
        error_messages=blank_messages('assignedUserId')
    )
    priority = serializers.CharField(
        required=False,
        allow_null=True,
        error_messages=blank_messages('priority')
    )
    dueDate = serializers.DateTimeField(source='due_date', required=False, allow_null=True)

    def validate_priority(self, value):
        return parse_priority(value)


class TaskResponseSerializer(serializers.Serializer):
    """
    Renders a Task, adding human-readable labels for status and priority.
    """

    id = serializers.CharField()
    documentId = serializers.CharField(source='document_id')
    title = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    status = serializers.CharField(source='status.value')
    statusDisplayName = serializers.CharField(source='status.display_name')
    assignedUserId = serializers.CharField(source='assigned_user_id')
    priority = serializers.CharField(source='priority.value')
    priorityDisplayName = serializers.CharField(source='priority.display_name')
    dueDate = serializers.DateTimeField(source='due_date')
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')
    active = serializers.BooleanField()
