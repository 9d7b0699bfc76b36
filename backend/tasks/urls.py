"""
URL configuration for the tasks app.

Mounted under /api/. The trailing slash is optional on every route.
"""

from django.urls import re_path

from . import views

urlpatterns = [
    re_path(r'^$', views.api_info, name='api-info'),
    re_path(r'^tasks/?$', views.create_task, name='task-create'),
    re_path(r'^tasks/tasks/?$', views.list_tasks, name='task-list'),
    re_path(
        r'^tasks/document/(?P<document_id>[^/]+)/tasks/?$',
        views.tasks_by_document,
        name='tasks-by-document'
    ),
    re_path(
        r'^tasks/users/(?P<user_id>[^/]+)/tasks/?$',
        views.tasks_by_user,
        name='tasks-by-user'
    ),
    re_path(r'^tasks/(?P<task_id>[^/]+)/status/?$', views.update_task_status, name='task-status'),
    re_path(r'^tasks/(?P<task_id>[^/]+)/?$', views.task_detail, name='task-detail'),
]
