"""
App configuration for the tasks app.

The in-memory store is created here, once per process, when the app
registry finishes loading.
"""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class TasksConfig(AppConfig):
    """
    Owns the process-wide TaskStore.

    The store is created once when the app registry loads and reached by
    the views through apps.get_app_config('tasks').store.
    """

    name = 'tasks'
    verbose_name = 'Tasks'

    def ready(self):
        from .seed import seed_sample_tasks
        from .store import TaskStore

        self.store = TaskStore()
        if getattr(settings, 'TASKS_SEED_ON_STARTUP', False):
            seed_sample_tasks(self.store)
        else:
            logger.info("Sample task seeding disabled")
