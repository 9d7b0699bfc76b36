"""
Task model for the Tasks Service.

Tasks are plain dataclasses kept in the in-memory TaskStore rather than
Django ORM models; nothing here touches the database.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    """Lifecycle states of a task. Any state may move to any other."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def display_name(self) -> str:
        return STATUS_DISPLAY_NAMES[self]


class TaskPriority(str, Enum):
    """Priority levels of a task."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def display_name(self) -> str:
        return PRIORITY_DISPLAY_NAMES[self]


STATUS_DISPLAY_NAMES = {
    TaskStatus.PENDING: "Pendiente",
    TaskStatus.IN_PROGRESS: "En progreso",
    TaskStatus.COMPLETED: "Completada",
}

PRIORITY_DISPLAY_NAMES = {
    TaskPriority.LOW: "Baja",
    TaskPriority.MEDIUM: "Media",
    TaskPriority.HIGH: "Alta",
}

DEFAULT_PRIORITY = TaskPriority.MEDIUM


@dataclass
class Task:
    """
    A task attached to a document and assigned to a user.

    Attributes:
        id: Opaque unique identifier, assigned at creation
        document_id: Document the task belongs to, fixed at creation
        title: Short task title
        description: Optional longer text
        status: Current TaskStatus
        assigned_user_id: User responsible for the task
        priority: TaskPriority, MEDIUM unless given
        due_date: When the task is due
        created_at: Server timestamp of creation
        updated_at: Server timestamp of the last mutation
        active: False once the task has been logically deleted
    """
    id: str
    document_id: str
    title: str
    status: TaskStatus
    assigned_user_id: str
    due_date: datetime
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    priority: TaskPriority = DEFAULT_PRIORITY
    active: bool = True

    def __str__(self):
        return f"{self.title} ({self.status.value})"

    def copy(self) -> 'Task':
        """Return a detached copy of this task."""
        return replace(self)
