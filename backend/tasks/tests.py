"""
Unit Tests for the Tasks Service.

This module covers the in-memory store, the task service, request
validation, error envelopes and the HTTP endpoints end to end.
"""

import itertools
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.apps import apps
from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404
from django.test import SimpleTestCase
from django.utils.dateparse import parse_datetime
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory, APISimpleTestCase

from .exceptions import InvalidTaskFieldError, TaskNotFoundError, task_exception_handler
from .models import Task, TaskPriority, TaskStatus
from .seed import SAMPLE_TASKS, seed_sample_tasks
from .serializers import CreateTaskSerializer, UpdateTaskSerializer
from .services import TaskService
from .store import TaskStore

BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=dt_timezone.utc)


class FakeClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start=BASE_TIME, step=timedelta(seconds=1)):
        self._lock = threading.Lock()
        self._counter = itertools.count()
        self.start = start
        self.step = step

    def __call__(self):
        with self._lock:
            return self.start + self.step * next(self._counter)


def make_task(task_id='t1', created_at=BASE_TIME, **overrides) -> Task:
    fields = dict(
        id=task_id,
        document_id='D1',
        title='Write report',
        description='Quarterly numbers',
        status=TaskStatus.PENDING,
        assigned_user_id='U1',
        priority=TaskPriority.MEDIUM,
        due_date=BASE_TIME + timedelta(days=3),
        created_at=created_at,
        updated_at=created_at,
        active=True,
    )
    fields.update(overrides)
    return Task(**fields)


def create_data(**overrides) -> dict:
    data = {
        'document_id': 'D1',
        'title': 'X',
        'description': None,
        'status': TaskStatus.PENDING,
        'assigned_user_id': 'U1',
        'due_date': BASE_TIME + timedelta(days=3),
    }
    data.update(overrides)
    return data


class TaskStoreTests(SimpleTestCase):
    """Tests for the in-memory TaskStore."""

    def setUp(self):
        self.clock = FakeClock(start=BASE_TIME + timedelta(hours=1))
        self.store = TaskStore(clock=self.clock)

    def test_save_and_find_by_id(self):
        """A saved task can be read back by id."""
        self.store.save(make_task('t1'))

        found = self.store.find_by_id('t1')
        self.assertIsNotNone(found)
        self.assertEqual(found.title, 'Write report')

    def test_find_by_id_unknown_returns_none(self):
        self.assertIsNone(self.store.find_by_id('missing'))

    def test_save_overwrites_same_id(self):
        """Saving twice with one id keeps the last write."""
        self.store.save(make_task('t1', title='First'))
        self.store.save(make_task('t1', title='Second'))

        self.assertEqual(self.store.find_by_id('t1').title, 'Second')
        self.assertEqual(self.store.count(), 1)

    def test_returned_tasks_are_detached_copies(self):
        """Editing a task read from the store does not change the stored one."""
        self.store.save(make_task('t1'))

        task = self.store.find_by_id('t1')
        task.title = 'Edited but not written back'

        self.assertEqual(self.store.find_by_id('t1').title, 'Write report')

    def test_lists_are_newest_first(self):
        """Listings are ordered by created_at descending."""
        self.store.save(make_task('old', created_at=BASE_TIME))
        self.store.save(make_task('new', created_at=BASE_TIME + timedelta(minutes=2)))
        self.store.save(make_task('mid', created_at=BASE_TIME + timedelta(minutes=1)))

        ids = [task.id for task in self.store.find_all()]
        self.assertEqual(ids, ['new', 'mid', 'old'])

    def test_equal_created_at_keeps_insertion_order(self):
        self.store.save(make_task('a'))
        self.store.save(make_task('b'))

        self.assertEqual([t.id for t in self.store.find_all()], ['a', 'b'])

    def test_filters_by_document_user_and_status(self):
        self.store.save(make_task('t1', document_id='D1', assigned_user_id='U1'))
        self.store.save(make_task('t2', document_id='D2', assigned_user_id='U1',
                                  status=TaskStatus.COMPLETED))
        self.store.save(make_task('t3', document_id='D1', assigned_user_id='U2'))

        self.assertEqual({t.id for t in self.store.find_by_document_id('D1')}, {'t1', 't3'})
        self.assertEqual({t.id for t in self.store.find_by_assigned_user_id('U1')}, {'t1', 't2'})
        self.assertEqual([t.id for t in self.store.find_by_status(TaskStatus.COMPLETED)], ['t2'])
        self.assertEqual(self.store.find_by_document_id('nothing'), [])

    def test_delete_is_logical(self):
        """Deleted tasks vanish from listings but still exist."""
        self.store.save(make_task('t1'))
        self.store.save(make_task('t2'))

        self.store.delete_by_id('t1')

        deleted = self.store.find_by_id('t1')
        self.assertFalse(deleted.active)
        self.assertGreater(deleted.updated_at, deleted.created_at)
        self.assertTrue(self.store.exists_by_id('t1'))
        self.assertEqual([t.id for t in self.store.find_all()], ['t2'])
        self.assertEqual(self.store.find_by_document_id('D1')[0].id, 't2')
        self.assertEqual(self.store.count(), 1)

    def test_delete_unknown_id_is_noop(self):
        self.store.save(make_task('t1'))

        self.store.delete_by_id('missing')

        self.assertFalse(self.store.exists_by_id('missing'))
        self.assertEqual(self.store.count(), 1)

    def test_modify_changes_active_task(self):
        self.store.save(make_task('t1'))

        changed = self.store.modify('t1', lambda task: setattr(task, 'title', 'Renamed'))

        self.assertEqual(changed.title, 'Renamed')
        self.assertEqual(self.store.find_by_id('t1').title, 'Renamed')

    def test_modify_skips_unknown_and_deleted_tasks(self):
        """A logically deleted record is never written back as active."""
        self.store.save(make_task('t1'))
        self.store.delete_by_id('t1')
        change = mock.Mock()

        self.assertIsNone(self.store.modify('t1', change))
        self.assertIsNone(self.store.modify('missing', change))

        change.assert_not_called()
        self.assertFalse(self.store.find_by_id('t1').active)

    def test_default_clock_is_read_at_call_time(self):
        """A store built before timezone.now is patched still uses the patch."""
        store = TaskStore()
        store.save(make_task('t1'))
        deleted_at = BASE_TIME + timedelta(days=30)

        with mock.patch('django.utils.timezone.now', return_value=deleted_at):
            store.delete_by_id('t1')

        self.assertEqual(store.find_by_id('t1').updated_at, deleted_at)

    def test_clear_removes_inactive_tasks_too(self):
        self.store.save(make_task('t1'))
        self.store.save(make_task('t2'))
        self.store.delete_by_id('t2')

        self.store.clear()

        self.assertFalse(self.store.exists_by_id('t1'))
        self.assertFalse(self.store.exists_by_id('t2'))
        self.assertEqual(self.store.count(), 0)


class TaskServiceTests(SimpleTestCase):
    """Tests for TaskService business rules."""

    def setUp(self):
        self.store = TaskStore()
        self.clock = FakeClock()
        self.service = TaskService(self.store, clock=self.clock)

    def test_create_assigns_id_timestamps_and_defaults(self):
        task = self.service.create_task(create_data())

        self.assertTrue(task.id)
        self.assertTrue(task.active)
        self.assertEqual(task.priority, TaskPriority.MEDIUM)
        self.assertEqual(task.created_at, task.updated_at)
        self.assertTrue(self.store.exists_by_id(task.id))

    def test_create_generates_unique_ids(self):
        ids = {self.service.create_task(create_data()).id for _ in range(50)}
        self.assertEqual(len(ids), 50)

    def test_blank_priority_defaults_to_medium(self):
        """Missing, None or blank priority is stored as MEDIUM."""
        for value in (None, '', '   '):
            task = self.service.create_task(create_data(priority=value))
            self.assertEqual(task.priority, TaskPriority.MEDIUM)

    def test_priority_is_uppercased(self):
        task = self.service.create_task(create_data(priority='high'))
        self.assertEqual(task.priority, TaskPriority.HIGH)

    def test_unknown_priority_is_rejected(self):
        with self.assertRaises(InvalidTaskFieldError):
            self.service.create_task(create_data(priority='urgent'))

    def test_unknown_status_is_rejected(self):
        """
        Status values are checked against the enumeration before storage,
        both at the HTTP boundary and here for direct callers.
        """
        task = self.service.create_task(create_data())

        with self.assertRaises(InvalidTaskFieldError):
            self.service.update_task_status(task.id, 'ARCHIVED')
        self.assertEqual(self.service.get_task_by_id(task.id).status, TaskStatus.PENDING)

    def test_get_unknown_task_raises_not_found(self):
        with self.assertRaises(TaskNotFoundError):
            self.service.get_task_by_id('missing')

    def test_update_status_refreshes_updated_at(self):
        task = self.service.create_task(create_data())

        updated = self.service.update_task_status(task.id, 'COMPLETED')

        self.assertEqual(updated.status, TaskStatus.COMPLETED)
        self.assertGreater(updated.updated_at, updated.created_at)
        self.assertEqual(updated.created_at, task.created_at)

    def test_completed_task_can_be_reopened(self):
        """Status transitions are unconstrained; COMPLETED is not terminal."""
        task = self.service.create_task(create_data(status=TaskStatus.COMPLETED))

        reopened = self.service.update_task_status(task.id, TaskStatus.PENDING)

        self.assertEqual(reopened.status, TaskStatus.PENDING)

    def test_partial_update_only_touches_given_fields(self):
        """A status-only update leaves every other field unchanged."""
        task = self.service.create_task(create_data(description='Keep me', priority='LOW'))

        updated = self.service.update_task(task.id, {'status': TaskStatus.IN_PROGRESS})

        self.assertEqual(updated.status, TaskStatus.IN_PROGRESS)
        for name in ('id', 'document_id', 'title', 'description', 'assigned_user_id',
                     'priority', 'due_date', 'created_at', 'active'):
            self.assertEqual(getattr(updated, name), getattr(task, name), name)
        self.assertGreater(updated.updated_at, task.updated_at)

    def test_partial_update_ignores_none_values(self):
        task = self.service.create_task(create_data(title='Original'))

        updated = self.service.update_task(task.id, {'title': None, 'priority': 'high'})

        self.assertEqual(updated.title, 'Original')
        self.assertEqual(updated.priority, TaskPriority.HIGH)

    def test_empty_update_still_refreshes_updated_at(self):
        task = self.service.create_task(create_data())

        updated = self.service.update_task(task.id, {})

        self.assertGreater(updated.updated_at, task.updated_at)

    def test_partial_update_cannot_change_document(self):
        task = self.service.create_task(create_data(document_id='D1'))

        updated = self.service.update_task(task.id, {'document_id': 'D2', 'active': False})

        self.assertEqual(updated.document_id, 'D1')
        self.assertTrue(updated.active)

    def test_delete_hides_task_but_keeps_record(self):
        task = self.service.create_task(create_data())

        self.service.delete_task(task.id)

        with self.assertRaises(TaskNotFoundError):
            self.service.get_task_by_id(task.id)
        self.assertTrue(self.store.exists_by_id(task.id))
        self.assertEqual(self.service.get_all_tasks(), [])

    def test_deleted_task_cannot_be_mutated(self):
        task = self.service.create_task(create_data())
        self.service.delete_task(task.id)

        with self.assertRaises(TaskNotFoundError):
            self.service.update_task_status(task.id, 'COMPLETED')
        with self.assertRaises(TaskNotFoundError):
            self.service.update_task(task.id, {'title': 'New'})
        with self.assertRaises(TaskNotFoundError):
            self.service.delete_task(task.id)

    def test_delete_unknown_task_raises_not_found(self):
        with self.assertRaises(TaskNotFoundError):
            self.service.delete_task('missing')

    def test_delete_during_update_is_not_undone(self):
        """
        A delete that lands while an update is in flight wins: the update
        fails with not-found and the task stays deleted.
        """
        task = self.service.create_task(create_data())
        deletions = []

        def clock_that_deletes():
            if not deletions:
                deletions.append(task.id)
                TaskService(self.store).delete_task(task.id)
            return self.clock()

        racing = TaskService(self.store, clock=clock_that_deletes)

        with self.assertRaises(TaskNotFoundError):
            racing.update_task_status(task.id, 'COMPLETED')
        with self.assertRaises(TaskNotFoundError):
            racing.update_task(task.id, {'title': 'New'})

        self.assertEqual(deletions, [task.id])
        with self.assertRaises(TaskNotFoundError):
            self.service.get_task_by_id(task.id)
        self.assertFalse(self.store.find_by_id(task.id).active)

    def test_listings_exclude_deleted_and_sort_newest_first(self):
        first = self.service.create_task(create_data(document_id='D1', assigned_user_id='U1'))
        second = self.service.create_task(create_data(document_id='D1', assigned_user_id='U1'))
        third = self.service.create_task(create_data(document_id='D1', assigned_user_id='U1'))
        self.service.delete_task(second.id)

        expected = [third.id, first.id]
        self.assertEqual([t.id for t in self.service.get_all_tasks()], expected)
        self.assertEqual([t.id for t in self.service.get_tasks_by_document_id('D1')], expected)
        self.assertEqual([t.id for t in self.service.get_tasks_by_assigned_user_id('U1')], expected)
        self.assertEqual(self.service.get_tasks_by_assigned_user_id('nobody'), [])

    def test_tasks_by_status(self):
        self.service.create_task(create_data())
        done = self.service.create_task(create_data(status=TaskStatus.COMPLETED))

        self.assertEqual([t.id for t in self.service.get_tasks_by_status('COMPLETED')], [done.id])
        self.assertEqual(self.service.count_active_tasks(), 2)


class ConcurrencyTests(SimpleTestCase):
    """Tests for concurrent access to one store."""

    def test_concurrent_creates_do_not_clobber(self):
        service = TaskService(TaskStore())

        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(
                lambda i: service.create_task(create_data(title=f'Task {i}')),
                range(200)
            ))

        self.assertEqual(service.count_active_tasks(), 200)
        self.assertEqual(len({task.id for task in created}), 200)

    def test_concurrent_updates_to_same_task_do_not_interleave(self):
        """One writer wins entirely; fields are never mixed across writers."""
        service = TaskService(TaskStore())
        task = service.create_task(create_data())
        barrier = threading.Barrier(2)

        def write(label):
            barrier.wait()
            for _ in range(100):
                service.update_task(task.id, {'title': label, 'description': label})

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(write, ['A', 'B']))

        final = service.get_task_by_id(task.id)
        self.assertIn(final.title, ('A', 'B'))
        self.assertEqual(final.title, final.description)


class SerializerTests(SimpleTestCase):
    """Tests for request validation."""

    def valid_payload(self, **overrides):
        payload = {
            'documentId': 'D1',
            'title': 'X',
            'status': 'PENDING',
            'assignedUserId': 'U1',
            'dueDate': '2026-01-04T09:00:00Z',
        }
        payload.update(overrides)
        return payload

    def test_create_maps_camel_case_to_task_fields(self):
        serializer = CreateTaskSerializer(data=self.valid_payload(priority='low'))

        self.assertTrue(serializer.is_valid(), serializer.errors)
        data = serializer.validated_data
        self.assertEqual(data['document_id'], 'D1')
        self.assertEqual(data['assigned_user_id'], 'U1')
        self.assertEqual(data['priority'], TaskPriority.LOW)
        self.assertEqual(data['due_date'], datetime(2026, 1, 4, 9, 0, tzinfo=dt_timezone.utc))

    def test_create_requires_fields(self):
        serializer = CreateTaskSerializer(data={})

        self.assertFalse(serializer.is_valid())
        self.assertEqual(
            set(serializer.errors),
            {'documentId', 'title', 'status', 'assignedUserId', 'dueDate'}
        )
        self.assertEqual(str(serializer.errors['dueDate'][0]), 'dueDate is required')

    def test_create_rejects_blank_strings(self):
        serializer = CreateTaskSerializer(data=self.valid_payload(title='   ', assignedUserId=''))

        self.assertFalse(serializer.is_valid())
        self.assertEqual(str(serializer.errors['title'][0]), 'title must not be blank')
        self.assertIn('assignedUserId', serializer.errors)

    def test_create_rejects_unknown_status_and_priority(self):
        serializer = CreateTaskSerializer(data=self.valid_payload(status='DONE', priority='urgent'))

        self.assertFalse(serializer.is_valid())
        self.assertIn('status', serializer.errors)
        self.assertIn('priority', serializer.errors)

    def test_create_blank_priority_means_default(self):
        serializer = CreateTaskSerializer(data=self.valid_payload(priority=''))

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertIsNone(serializer.validated_data['priority'])

    def test_update_accepts_subset(self):
        serializer = UpdateTaskSerializer(data={'status': 'IN_PROGRESS'})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(dict(serializer.validated_data), {'status': 'IN_PROGRESS'})

    def test_update_rejects_blank_title(self):
        serializer = UpdateTaskSerializer(data={'title': ''})
        self.assertFalse(serializer.is_valid())
        self.assertIn('title', serializer.errors)


class ExceptionHandlerTests(SimpleTestCase):
    """Tests for the error envelope produced by task_exception_handler."""

    def setUp(self):
        self.request = APIRequestFactory().get('/api/tasks/abc')

    def handle(self, exc):
        return task_exception_handler(exc, {'request': self.request})

    def test_not_found_maps_to_404(self):
        response = self.handle(TaskNotFoundError('abc'))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Task with ID abc not found')
        self.assertEqual(response.data['status'], 404)
        self.assertEqual(response.data['path'], '/api/tasks/abc')
        self.assertIn('timestamp', response.data)

    def test_validation_error_lists_fields(self):
        response = self.handle(ValidationError({'title': ['title must not be blank']}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'], {'title': 'title must not be blank'})

    def test_value_error_maps_to_400(self):
        response = self.handle(InvalidTaskFieldError('status', 'ARCHIVED'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data['message'])

    def test_django_http404_maps_to_404(self):
        response = self.handle(Http404())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['status'], 404)

    def test_django_permission_denied_maps_to_403(self):
        response = self.handle(PermissionDenied())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['status'], 403)

    def test_timestamp_matches_task_field_format(self):
        """Envelope timestamps end in Z like createdAt and updatedAt."""
        with mock.patch('django.utils.timezone.now', return_value=BASE_TIME):
            response = self.handle(TaskNotFoundError('abc'))

        self.assertEqual(response.data['timestamp'], '2026-01-01T09:00:00Z')

    def test_unexpected_error_is_hidden(self):
        with self.assertLogs('tasks.exceptions', level='ERROR'):
            response = self.handle(RuntimeError('database password is hunter2'))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['message'], 'Internal server error')
        self.assertNotIn('hunter2', str(response.data))


class SeedTests(SimpleTestCase):
    """Tests for the startup sample data."""

    def test_seed_replaces_store_contents(self):
        store = TaskStore()
        store.save(make_task('leftover'))

        total = seed_sample_tasks(store)

        self.assertEqual(total, len(SAMPLE_TASKS))
        self.assertFalse(store.exists_by_id('leftover'))
        self.assertEqual(len({task.document_id for task in store.find_all()}), 3)
        self.assertEqual(len({task.assigned_user_id for task in store.find_all()}), 3)


class SettingsTests(SimpleTestCase):
    """Tests for the project settings."""

    def test_no_orm_apps_or_database(self):
        """Tasks are held in memory, so no ORM apps or database are configured."""
        self.assertFalse(apps.is_installed('django.contrib.auth'))
        self.assertFalse(apps.is_installed('django.contrib.contenttypes'))
        self.assertFalse(any(
            config.get('ENGINE') != 'django.db.backends.dummy'
            for config in settings.DATABASES.values()
        ))
        self.assertFalse(settings.is_overridden('DEFAULT_AUTO_FIELD'))


class APIEndpointTests(APISimpleTestCase):
    """Tests for the HTTP endpoints."""

    def setUp(self):
        self.store = apps.get_app_config('tasks').store
        self.store.clear()
        self.addCleanup(self.store.clear)

        clock = FakeClock()
        patcher = mock.patch('django.utils.timezone.now', side_effect=clock)
        patcher.start()
        self.addCleanup(patcher.stop)

    def create(self, **overrides):
        payload = {
            'documentId': 'D1',
            'title': 'X',
            'status': 'PENDING',
            'assignedUserId': 'U1',
            'dueDate': (BASE_TIME + timedelta(days=3)).isoformat(),
        }
        payload.update(overrides)
        return self.client.post('/api/tasks/', payload, format='json')

    def test_task_lifecycle(self):
        """Create, complete, delete, then the task is gone."""
        response = self.create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Task created successfully')
        self.assertIn('timestamp', response.data)
        task = response.data['data']
        self.assertTrue(task['id'])
        self.assertEqual(task['priority'], 'MEDIUM')
        self.assertEqual(task['priorityDisplayName'], 'Media')
        self.assertEqual(task['statusDisplayName'], 'Pendiente')
        self.assertTrue(task['active'])
        self.assertEqual(task['createdAt'], task['updatedAt'])

        response = self.client.put(
            f"/api/tasks/{task['id']}/status", {'status': 'COMPLETED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        updated = response.data['data']
        self.assertEqual(updated['status'], 'COMPLETED')
        self.assertEqual(updated['statusDisplayName'], 'Completada')
        self.assertGreater(parse_datetime(updated['updatedAt']), parse_datetime(task['updatedAt']))

        response = self.client.delete(f"/api/tasks/{task['id']}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['data'])

        response = self.client.get(f"/api/tasks/{task['id']}")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['status'], 404)
        self.assertEqual(response.data['path'], f"/api/tasks/{task['id']}")

    def test_create_lowercase_priority(self):
        response = self.create(priority='high')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['priority'], 'HIGH')

    def test_create_validation_error(self):
        response = self.create(title='', dueDate=None)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['status'], 400)
        self.assertIn('title', response.data['errors'])
        self.assertIn('dueDate', response.data['errors'])
        self.assertEqual(self.store.count(), 0)

    def test_malformed_json(self):
        response = self.client.post(
            '/api/tasks/', data='{"title": ', content_type='application/json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Malformed request body')

    def test_status_update_rejects_unknown_status(self):
        """
        The status endpoint only accepts PENDING, IN_PROGRESS or COMPLETED;
        free text is refused with a field error instead of being stored.
        """
        task_id = self.create().data['data']['id']

        response = self.client.put(f'/api/tasks/{task_id}/status', {'status': 'DONE'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data['errors'])
        self.assertEqual(self.client.get(f'/api/tasks/{task_id}').data['data']['status'], 'PENDING')

    def test_status_update_unknown_task(self):
        response = self.client.put('/api/tasks/missing/status', {'status': 'COMPLETED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_updates_only_sent_fields(self):
        original = self.create(description='Keep me').data['data']

        response = self.client.patch(
            f"/api/tasks/{original['id']}", {'title': 'Renamed', 'priority': 'low'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        updated = response.data['data']
        self.assertEqual(updated['title'], 'Renamed')
        self.assertEqual(updated['priority'], 'LOW')
        self.assertEqual(updated['description'], 'Keep me')
        self.assertEqual(updated['documentId'], original['documentId'])
        self.assertEqual(updated['dueDate'], original['dueDate'])
        self.assertEqual(updated['createdAt'], original['createdAt'])

    def test_patch_unknown_task(self):
        response = self.client.patch('/api/tasks/missing', {'title': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_unknown_task(self):
        """Deleting a nonexistent id is a 404, not a silent success."""
        response = self.client.delete('/api/tasks/missing')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Task with ID missing not found')

    def test_list_endpoints(self):
        first = self.create(documentId='D1', assignedUserId='U1').data['data']
        second = self.create(documentId='D2', assignedUserId='U1', status='COMPLETED').data['data']
        third = self.create(documentId='D1', assignedUserId='U2').data['data']
        self.client.delete(f"/api/tasks/{third['id']}")

        response = self.client.get('/api/tasks/tasks')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['id'] for t in response.data['data']], [second['id'], first['id']])

        response = self.client.get('/api/tasks/document/D1/tasks')
        self.assertEqual([t['id'] for t in response.data['data']], [first['id']])

        response = self.client.get('/api/tasks/users/U1/tasks')
        self.assertEqual([t['id'] for t in response.data['data']], [second['id'], first['id']])

        response = self.client.get('/api/tasks/tasks', {'status': 'COMPLETED'})
        self.assertEqual([t['id'] for t in response.data['data']], [second['id']])

        response = self.client.get('/api/tasks/users/nobody/tasks')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])

    def test_list_with_unknown_status_filter(self):
        response = self.client.get('/api/tasks/tasks', {'status': 'ARCHIVED'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_trailing_slash_is_optional(self):
        task_id = self.create().data['data']['id']

        self.assertEqual(self.client.get(f'/api/tasks/{task_id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get('/api/tasks/tasks/').status_code, status.HTTP_200_OK)

    def test_wrong_method_uses_error_envelope(self):
        response = self.client.post('/api/tasks/some-id', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertEqual(response.data['status'], 405)

    def test_api_info_endpoint(self):
        """GET /api/ should return API information."""
        self.create()

        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['active_tasks'], 1)
        self.assertIn('endpoints', response.data)
        self.assertEqual(response.data['statuses']['IN_PROGRESS'], 'En progreso')

    def test_delete_timestamp_uses_patched_clock(self):
        """updated_at set by DELETE comes from the same clock as create."""
        task = self.create().data['data']

        self.client.delete(f"/api/tasks/{task['id']}")

        deleted = self.store.find_by_id(task['id'])
        self.assertGreater(deleted.updated_at, parse_datetime(task['createdAt']))
        self.assertLess(deleted.updated_at, BASE_TIME + timedelta(hours=1))

    def test_envelope_timestamps_use_utc_z_suffix(self):
        created = self.create()
        missing = self.client.get('/api/tasks/missing')

        self.assertTrue(created.data['timestamp'].endswith('Z'))
        self.assertTrue(created.data['data']['createdAt'].endswith('Z'))
        self.assertTrue(missing.data['timestamp'].endswith('Z'))

    def test_cors_allows_any_origin(self):
        response = self.client.get('/api/tasks/tasks', HTTP_ORIGIN='http://example.com')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Access-Control-Allow-Origin'], '*')

    def test_openapi_schema_is_served(self):
        response = self.client.get('/api/schema/', {'format': 'json'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
