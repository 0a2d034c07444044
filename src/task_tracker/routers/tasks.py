from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, status

from ..schemas import ErrorOut, MessageOut, TaskOut, TaskRequest
from ..service import TaskService

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

_NOT_FOUND = {"model": ErrorOut, "description": "Task not found"}
_INVALID = {"model": ErrorOut, "description": "Validation error"}
_STORE_FAILED = {"model": ErrorOut, "description": "Storage failure"}


def get_service(request: Request) -> TaskService:
    """
    Build a TaskService per request from the collaborators held on app.state.
    """
    state = request.app.state
    return TaskService(state.store, clock=state.clock, id_generator=state.id_generator)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="List all tasks ordered by due date, earliest first.",
    responses={
        200: {"description": "List retrieved successfully"},
        500: _STORE_FAILED,
    },
)
def list_tasks(service: TaskService = Depends(get_service)) -> List[TaskOut]:
    """
    List every task, ascending by due date.
    """
    return [TaskOut(**t) for t in service.list_tasks()]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task. The server assigns the id and timestamps.",
    responses={
        201: {"description": "Task created successfully"},
        400: _INVALID,
        500: _STORE_FAILED,
    },
)
def create_task(payload: TaskRequest, service: TaskService = Depends(get_service)) -> TaskOut:
    """
    Create a new Task.
    """
    return TaskOut(**service.create_task(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        404: _NOT_FOUND,
        500: _STORE_FAILED,
    },
)
def get_task(task_id: str, service: TaskService = Depends(get_service)) -> TaskOut:
    """
    Retrieve a single task by its ID.
    """
    return TaskOut(**service.get_task(task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Replace Task",
    description=(
        "Replace title, due date and completion flag of an existing task. "
        "The full representation must be sent; last write wins."
    ),
    responses={
        200: {"description": "Task updated"},
        400: _INVALID,
        404: _NOT_FOUND,
        500: _STORE_FAILED,
    },
)
def put_task(task_id: str, payload: TaskRequest, service: TaskService = Depends(get_service)) -> TaskOut:
    """
    Full update (replace) of a task. Returns the stored representation.
    """
    return TaskOut(**service.update_task(task_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageOut,
    summary="Delete Task",
    description="Delete a task permanently by ID.",
    responses={
        200: {"description": "Task deleted"},
        404: _NOT_FOUND,
        500: _STORE_FAILED,
    },
)
def delete_task(task_id: str, service: TaskService = Depends(get_service)) -> MessageOut:
    """
    Delete a task. Returns 200 with a confirmation message, 404 if not found.
    """
    return MessageOut(**service.delete_task(task_id))
