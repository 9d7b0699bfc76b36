"""
Business logic for task management.

TaskService sits between the API views and the TaskStore. It assigns ids
and timestamps, normalizes status and priority, applies partial updates
and treats logically deleted tasks as missing.

The service holds no state of its own; views build one per request around
the process-wide store.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone

from .exceptions import InvalidTaskFieldError, TaskNotFoundError
from .models import DEFAULT_PRIORITY, Task, TaskPriority, TaskStatus
from .store import TaskStore

logger = logging.getLogger(__name__)

# Fields a partial update may overwrite.
UPDATABLE_FIELDS = (
    'title',
    'description',
    'status',
    'assigned_user_id',
    'priority',
    'due_date',
)


def normalize_status(value) -> TaskStatus:
    """Coerce a status value to TaskStatus."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(str(value).strip())
    except ValueError:
        raise InvalidTaskFieldError('status', value) from None


def normalize_priority(value) -> TaskPriority:
    """
    Coerce a priority value to TaskPriority.

    Free text is uppercased first, so "high" becomes HIGH. None or a blank
    string yields the default priority.
    """
    if isinstance(value, TaskPriority):
        return value
    if value is None or not str(value).strip():
        return DEFAULT_PRIORITY
    try:
        return TaskPriority(str(value).strip().upper())
    except ValueError:
        raise InvalidTaskFieldError('priority', value) from None


class TaskService:
    """CRUD operations over a TaskStore."""

    def __init__(self, store: TaskStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return timezone.now()

    def create_task(self, data: Dict[str, Any]) -> Task:
        """
        Create and store a new task.

        Args:
            data: Validated fields: document_id, title, status,
                assigned_user_id, due_date and optionally description
                and priority

        Returns:
            The stored Task with its generated id and timestamps
        """
        logger.info("Creating task for document %s", data.get('document_id'))

        now = self.now()
        task = Task(
            id=str(uuid.uuid4()),
            document_id=data['document_id'],
            title=data['title'],
            description=data.get('description'),
            status=normalize_status(data['status']),
            assigned_user_id=data['assigned_user_id'],
            priority=normalize_priority(data.get('priority')),
            due_date=data['due_date'],
            created_at=now,
            updated_at=now,
            active=True,
        )
        saved = self.store.save(task)

        logger.info("Task created with ID %s", saved.id)
        return saved

    def get_task_by_id(self, task_id: str) -> Task:
        logger.info("Fetching task %s", task_id)
        return self._get_active(task_id)

    def get_tasks_by_document_id(self, document_id: str) -> List[Task]:
        logger.info("Fetching tasks for document %s", document_id)
        return self.store.find_by_document_id(document_id)

    def get_tasks_by_assigned_user_id(self, assigned_user_id: str) -> List[Task]:
        logger.info("Fetching tasks assigned to user %s", assigned_user_id)
        return self.store.find_by_assigned_user_id(assigned_user_id)

    def get_tasks_by_status(self, status) -> List[Task]:
        status = normalize_status(status)
        logger.info("Fetching tasks with status %s", status.value)
        return self.store.find_by_status(status)

    def get_all_tasks(self) -> List[Task]:
        logger.info("Fetching all tasks")
        return self.store.find_all()

    def count_active_tasks(self) -> int:
        return self.store.count()

    def update_task_status(self, task_id: str, status) -> Task:
        """Overwrite only the status of an active task."""
        logger.info("Updating status of task %s", task_id)

        new_status = normalize_status(status)
        now = self.now()

        def apply(task: Task) -> None:
            task.status = new_status
            task.updated_at = now

        updated = self._modify_active(task_id, apply)

        logger.info("Task %s status set to %s", task_id, updated.status.value)
        return updated

    def update_task(self, task_id: str, data: Dict[str, Any]) -> Task:
        """
        Apply a partial update to an active task.

        Every updatable field present in data with a non-None value replaces
        the stored one; everything else is left untouched. updated_at is
        refreshed even when nothing else changes.
        """
        logger.info("Updating task %s", task_id)

        changes = {}
        for name in UPDATABLE_FIELDS:
            value = data.get(name)
            if value is None:
                continue
            if name == 'status':
                value = normalize_status(value)
            elif name == 'priority':
                value = normalize_priority(value)
            changes[name] = value
        now = self.now()

        def apply(task: Task) -> None:
            for name, value in changes.items():
                setattr(task, name, value)
            task.updated_at = now

        updated = self._modify_active(task_id, apply)

        logger.info("Task %s updated", task_id)
        return updated

    def delete_task(self, task_id: str) -> None:
        """Logically delete an active task."""
        logger.info("Deleting task %s", task_id)

        self._get_active(task_id)
        self.store.delete_by_id(task_id)

        logger.info("Task %s deleted", task_id)

    def _get_active(self, task_id: str) -> Task:
        task = self.store.find_by_id(task_id)
        if task is None or not task.active:
            logger.warning("Task %s not found", task_id)
            raise TaskNotFoundError(task_id)
        return task

    def _modify_active(self, task_id: str, change: Callable[[Task], None]) -> Task:
        # Values are computed before this call so nothing re-enters the store
        # while its lock is held.
        updated = self.store.modify(task_id, change)
        if updated is None:
            logger.warning("Task %s not found", task_id)
            raise TaskNotFoundError(task_id)
        return updated
