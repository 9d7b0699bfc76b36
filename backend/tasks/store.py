"""
In-memory task storage.

TaskStore keeps every task in a dict guarded by a re-entrant lock. Data is
not persisted and is lost when the process exits.

Records are copied on the way in and on the way out, so callers can edit
the task they received and write it back with update() without any other
thread seeing a half-edited record. modify() does the read and the write
under a single lock hold for callers that must not overwrite a delete.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from django.utils import timezone

from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class TaskStore:
    """Thread-safe in-memory store of tasks keyed by id."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return timezone.now()

    def save(self, task: Task) -> Task:
        """Insert or overwrite a task by id. The last write wins."""
        stored = task.copy()
        with self._lock:
            self._tasks[stored.id] = stored
        return stored.copy()

    def update(self, task: Task) -> Task:
        """Write back a task already modified by the caller."""
        return self.save(task)

    def modify(self, task_id: str, change: Callable[[Task], None]) -> Optional[Task]:
        """
        Apply change to a copy of an active task and store the result.

        The lookup, the change and the write happen under one lock hold, so
        a concurrent delete_by_id is either seen here or applied after the
        write. Returns the stored task, or None when the id is unknown or
        the task is logically deleted.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None or not task.active:
                return None
            changed = task.copy()
            change(changed)
            self._tasks[task_id] = changed
            return changed.copy()

    def find_by_id(self, task_id: str) -> Optional[Task]:
        """Return the task with this id, active or not, or None."""
        with self._lock:
            task = self._tasks.get(task_id)
            return task.copy() if task is not None else None

    def find_all(self) -> List[Task]:
        return self._find_active(lambda task: True)

    def find_by_document_id(self, document_id: str) -> List[Task]:
        return self._find_active(lambda task: task.document_id == document_id)

    def find_by_assigned_user_id(self, assigned_user_id: str) -> List[Task]:
        return self._find_active(lambda task: task.assigned_user_id == assigned_user_id)

    def find_by_status(self, status: TaskStatus) -> List[Task]:
        return self._find_active(lambda task: task.status == status)

    def delete_by_id(self, task_id: str) -> None:
        """Logically delete a task. Unknown ids are ignored."""
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            deleted = task.copy()
            deleted.active = False
            deleted.updated_at = self.now()
            self._tasks[task_id] = deleted

    def exists_by_id(self, task_id: str) -> bool:
        """Membership test that ignores the active flag."""
        with self._lock:
            return task_id in self._tasks

    def count(self) -> int:
        """Number of active tasks."""
        with self._lock:
            return sum(1 for task in self._tasks.values() if task.active)

    def clear(self) -> None:
        """Remove every task, active or not."""
        with self._lock:
            removed = len(self._tasks)
            self._tasks.clear()
        logger.debug("TaskStore cleared removed=%s", removed)

    def _find_active(self, predicate: Callable[[Task], bool]) -> List[Task]:
        # Snapshot under the lock, sort outside it. sorted() is stable, so
        # equal created_at values keep insertion order.
        with self._lock:
            matches = [
                task.copy() for task in self._tasks.values()
                if task.active and predicate(task)
            ]
        return sorted(matches, key=lambda task: task.created_at, reverse=True)
