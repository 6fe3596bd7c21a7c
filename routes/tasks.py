from fastapi import APIRouter, Depends, Query, status
from typing import Literal, Optional

from database import get_task_repository
from middleware.auth import require_identity
from models import Task, TaskPriority, TaskStatus
from query import Pagination, SortSpec, TaskFilters
from repositories.tasks import TaskRepository
from schemas import (
    Identity,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
    paginated_response,
    success_response,
)
from services import task_service

# Every task route requires a verified bearer token
router = APIRouter(dependencies=[Depends(require_identity)])


def _task_data(task: Task) -> dict:
    return TaskResponse.model_validate(task).model_dump(mode="json", by_alias=True)


@router.get("")
def list_tasks(
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
    filter_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: Literal["asc", "desc"] = "asc",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
) -> dict:
    """
    Get the caller's tasks with filtering, sorting, and pagination

    Args:
        identity: Authenticated caller
        tasks: Task repository
        filter_status: Only tasks with this status
        priority: Only tasks with this priority
        search: Case-insensitive match on title or description
        sort_by: Field to sort by
        order: Sort direction
        page: 1-based page number
        limit: Page size

    Returns:
        Paginated envelope with tasks and pagination metadata
    """
    result = task_service.list_tasks(
        tasks=tasks,
        identity=identity,
        filters=TaskFilters(status=filter_status, priority=priority, search=search or None),
        sort=SortSpec(field=sort_by, direction=order) if sort_by else None,
        pagination=Pagination(page=page, limit=limit),
    )
    return paginated_response(
        "Tasks retrieved successfully",
        [_task_data(task) for task in result.tasks],
        result.meta,
    )


@router.get("/stats")
def get_task_stats(
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
) -> dict:
    """Get task statistics for the caller"""
    stats = task_service.task_stats(tasks=tasks, identity=identity)
    return success_response("Statistics retrieved successfully", stats.model_dump(by_alias=True))


@router.get("/{task_id}")
def get_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
) -> dict:
    """Get single task by ID"""
    task = task_service.get_task(tasks=tasks, identity=identity, task_id=task_id)
    return success_response("Task retrieved successfully", _task_data(task))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
) -> dict:
    """Create new task"""
    task = task_service.create_task(tasks=tasks, identity=identity, data=task_data)
    return success_response("Task created successfully", _task_data(task))


@router.put("/{task_id}")
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
) -> dict:
    """Update task; only fields present in the body change"""
    task = task_service.update_task(tasks=tasks, identity=identity, task_id=task_id, data=task_data)
    return success_response("Task updated successfully", _task_data(task))


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    tasks: TaskRepository = Depends(get_task_repository),
) -> dict:
    """Delete task"""
    task_service.delete_task(tasks=tasks, identity=identity, task_id=task_id)
    return success_response("Task deleted successfully")
