"""
API views for the Tasks Service.

Thin bindings between HTTP and TaskService: each view validates the body
with a serializer, calls one service operation and wraps the result in the
success envelope {message, data, timestamp}. Errors are rendered by
tasks.exceptions.task_exception_handler.
"""

import logging

from django.apps import apps
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from .models import TaskPriority, TaskStatus
from .serializers import (
    CreateTaskSerializer,
    TaskResponseSerializer,
    UpdateTaskSerializer,
    UpdateTaskStatusSerializer,
    render_timestamp,
)
from .services import TaskService

logger = logging.getLogger(__name__)


def get_task_service() -> TaskService:
    """Build a service around the store owned by the tasks app."""
    return TaskService(apps.get_app_config('tasks').store)


def envelope(message: str, data=None, status_code: int = status.HTTP_200_OK) -> Response:
    return Response(
        {
            'message': message,
            'data': data,
            'timestamp': render_timestamp(),
        },
        status=status_code
    )


@extend_schema(
    summary="Create a task",
    description="Create a new task attached to a document.",
    request=CreateTaskSerializer,
    responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['POST'])
def create_task(request: Request) -> Response:
    """
    Create a new task.

    POST /api/tasks/

    Request Body:
    {
        "documentId": "D1",
        "title": "Review report",
        "description": "Optional",
        "status": "PENDING",
        "assignedUserId": "U1",
        "priority": "high",          // Optional, defaults to MEDIUM
        "dueDate": "2026-10-20T12:00:00Z"
    }
    """
    logger.info("Received request to create a task")
    serializer = CreateTaskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    task = get_task_service().create_task(serializer.validated_data)
    return envelope(
        'Task created successfully',
        TaskResponseSerializer(task).data,
        status.HTTP_201_CREATED
    )


@extend_schema(
    summary="List tasks of a document",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET'])
def tasks_by_document(request: Request, document_id: str) -> Response:
    """
    GET /api/tasks/document/{documentId}/tasks
    """
    logger.info("Received request for tasks of document %s", document_id)
    tasks = get_task_service().get_tasks_by_document_id(document_id)
    return envelope('Tasks retrieved successfully', TaskResponseSerializer(tasks, many=True).data)


@extend_schema(
    summary="List tasks assigned to a user",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET'])
def tasks_by_user(request: Request, user_id: str) -> Response:
    """
    GET /api/tasks/users/{userId}/tasks
    """
    logger.info("Received request for tasks assigned to user %s", user_id)
    tasks = get_task_service().get_tasks_by_assigned_user_id(user_id)
    return envelope('Tasks retrieved successfully', TaskResponseSerializer(tasks, many=True).data)


@extend_schema(
    summary="List all tasks",
    description="List every active task, newest first. Optionally filter by status.",
    parameters=[
        OpenApiParameter(
            name='status',
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            enum=[s.value for s in TaskStatus],
        )
    ],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET'])
def list_tasks(request: Request) -> Response:
    """
    GET /api/tasks/tasks
    GET /api/tasks/tasks?status=PENDING
    """
    logger.info("Received request for all tasks")
    service = get_task_service()
    status_filter = request.query_params.get('status')

    if status_filter:
        tasks = service.get_tasks_by_status(status_filter)
    else:
        tasks = service.get_all_tasks()

    return envelope('Tasks retrieved successfully', TaskResponseSerializer(tasks, many=True).data)


@extend_schema(
    methods=['GET'],
    summary="Get a task",
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['PATCH'],
    summary="Partially update a task",
    description="Only the fields sent with a non-null value are changed.",
    request=UpdateTaskSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['DELETE'],
    summary="Delete a task",
    description="Logically delete a task. It disappears from every read.",
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET', 'PATCH', 'DELETE'])
def task_detail(request: Request, task_id: str) -> Response:
    """
    GET    /api/tasks/{id}
    PATCH  /api/tasks/{id}
    DELETE /api/tasks/{id}
    """
    service = get_task_service()

    if request.method == 'GET':
        logger.info("Received request for task %s", task_id)
        task = service.get_task_by_id(task_id)
        return envelope('Task retrieved successfully', TaskResponseSerializer(task).data)

    if request.method == 'PATCH':
        logger.info("Received request to update task %s", task_id)
        serializer = UpdateTaskSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = service.update_task(task_id, serializer.validated_data)
        return envelope('Task updated successfully', TaskResponseSerializer(task).data)

    logger.info("Received request to delete task %s", task_id)
    service.delete_task(task_id)
    return envelope('Task deleted successfully')


@extend_schema(
    summary="Update task status",
    request=UpdateTaskStatusSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['PUT'])
def update_task_status(request: Request, task_id: str) -> Response:
    """
    PUT /api/tasks/{id}/status

    Request Body:
    {
        "status": "COMPLETED"
    }
    """
    logger.info("Received request to update status of task %s", task_id)
    serializer = UpdateTaskStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    task = get_task_service().update_task_status(task_id, serializer.validated_data['status'])
    return envelope('Task status updated successfully', TaskResponseSerializer(task).data)


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Tasks Service API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'active_tasks': get_task_service().count_active_tasks(),
        'endpoints': {
            'POST /api/tasks/': 'Create a task',
            'GET /api/tasks/{id}': 'Get a task',
            'PATCH /api/tasks/{id}': 'Partially update a task',
            'DELETE /api/tasks/{id}': 'Logically delete a task',
            'PUT /api/tasks/{id}/status': 'Update the status of a task',
            'GET /api/tasks/tasks': 'List all tasks (optional ?status=)',
            'GET /api/tasks/document/{documentId}/tasks': 'List tasks of a document',
            'GET /api/tasks/users/{userId}/tasks': 'List tasks assigned to a user',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'statuses': {s.value: s.display_name for s in TaskStatus},
        'priorities': {p.value: p.display_name for p in TaskPriority},
    })
