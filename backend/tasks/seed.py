"""
Sample data for a freshly started service.

The store is wiped and refilled with seven tasks spread over three
documents and three users. Document and user ids are random on every run.
"""

import logging
import uuid
from datetime import timedelta
from typing import List

from django.utils import timezone

from .models import Task, TaskPriority, TaskStatus
from .store import TaskStore

logger = logging.getLogger(__name__)

# (document index, user index, title, description, status, priority, due in days)
SAMPLE_TASKS = [
    (0, 0, "Review the financial report",
     "Check the figures of the Q2 financial report.",
     TaskStatus.PENDING, TaskPriority.HIGH, 3),
    (0, 1, "Update the sales presentation",
     "Add the latest sales figures to the presentation.",
     TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, 5),
    (1, 2, "Organize the team meeting",
     "Schedule a meeting to discuss project X.",
     TaskStatus.COMPLETED, TaskPriority.LOW, 1),
    (2, 0, "Write the progress report",
     "Write a detailed report on the progress of project Y.",
     TaskStatus.PENDING, TaskPriority.HIGH, 7),
    (2, 1, "Design the new company logo",
     "Create a modern and appealing logo design.",
     TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, 10),
    (1, 2, "Plan the marketing campaign",
     "Draft a strategy for the next marketing campaign.",
     TaskStatus.PENDING, TaskPriority.HIGH, 14),
    (0, 0, "Set up the development server",
     "Install and configure the server for the development environment.",
     TaskStatus.COMPLETED, TaskPriority.LOW, 2),
]


def build_sample_tasks() -> List[Task]:
    documents = [str(uuid.uuid4()) for _ in range(3)]
    users = [str(uuid.uuid4()) for _ in range(3)]
    now = timezone.now()

    return [
        Task(
            id=str(uuid.uuid4()),
            document_id=documents[doc],
            title=title,
            description=description,
            status=status,
            assigned_user_id=users[user],
            priority=priority,
            due_date=now + timedelta(days=due_in_days),
            created_at=now,
            updated_at=now,
            active=True,
        )
        for doc, user, title, description, status, priority, due_in_days in SAMPLE_TASKS
    ]


def seed_sample_tasks(store: TaskStore) -> int:
    """Replace the store contents with the sample tasks. Returns the active count."""
    logger.info("Seeding sample tasks")
    store.clear()
    for task in build_sample_tasks():
        store.save(task)

    total = store.count()
    logger.info("Seeding finished, %s tasks stored", total)
    return total
