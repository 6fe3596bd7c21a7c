"""Task operations scoped to the calling user."""

import logging
from typing import Any, Dict, Optional

from errors import Forbidden, MissingField, NotFoundError, ValidationError
from logging_setup import span
from models import Task
from query import Pagination, SortSpec, TaskFilters, TaskPage
from repositories.tasks import TaskRepository
from schemas import Identity, TaskCreate, TaskStats, TaskUpdate

logger = logging.getLogger(__name__)

# Fields that may be cleared with an explicit null
NULLABLE_FIELDS = {"due_date"}


def _owned_task(tasks: TaskRepository, identity: Identity, task_id: int, action: str) -> Task:
    task = tasks.get_by_id(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    if task.user_id != identity.id:
        logger.warning("User %s denied %s on task %s", identity.id, action, task_id)
        raise Forbidden(f"Not authorized to {action} this task")
    return task


def _as_record_values(data: Dict[str, Any]) -> Dict[str, Any]:
    # Enum members are stored by value
    return {key: getattr(value, "value", value) for key, value in data.items()}


def list_tasks(
    *,
    tasks: TaskRepository,
    identity: Identity,
    filters: Optional[TaskFilters] = None,
    sort: Optional[SortSpec] = None,
    pagination: Optional[Pagination] = None,
) -> TaskPage:
    """List the caller's tasks. The owner filter always comes from the identity."""
    scoped = (filters or TaskFilters()).model_copy(update={"owner_id": identity.id})
    with span("task_service.list_tasks"):
        return tasks.list(scoped, sort, pagination)


def get_task(*, tasks: TaskRepository, identity: Identity, task_id: int) -> Task:
    return _owned_task(tasks, identity, task_id, "access")


def create_task(*, tasks: TaskRepository, identity: Identity, data: TaskCreate) -> Task:
    """Create a task owned by the caller.

    Raises:
        MissingField: If the title is missing or blank
    """
    with span("task_service.create_task"):
        if data.title is None or not data.title.strip():
            raise MissingField("Title is required")

        values = _as_record_values(data.model_dump(exclude_none=True))
        values["title"] = data.title.strip()
        return tasks.create(values, identity.id)


def update_task(*, tasks: TaskRepository, identity: Identity, task_id: int, data: TaskUpdate) -> Task:
    """Apply the fields present in the request to one of the caller's tasks.

    Raises:
        NotFoundError: If the task does not exist
        Forbidden: If the task belongs to someone else
        ValidationError: If a required field is cleared
    """
    with span("task_service.update_task"):
        _owned_task(tasks, identity, task_id, "update")

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                if field == "description":
                    changes[field] = ""
                else:
                    raise ValidationError(f"{field} cannot be null")
        if "title" in changes:
            if not changes["title"].strip():
                raise ValidationError("Title cannot be empty")
            changes["title"] = changes["title"].strip()

        updated = tasks.update(task_id, _as_record_values(changes))
        if updated is None:
            # Deleted between the ownership check and the write
            raise NotFoundError("Task not found")
        return updated


def delete_task(*, tasks: TaskRepository, identity: Identity, task_id: int) -> None:
    """
    Raises:
        NotFoundError: If the task does not exist
        Forbidden: If the task belongs to someone else
    """
    with span("task_service.delete_task"):
        _owned_task(tasks, identity, task_id, "delete")
        if not tasks.delete(task_id):
            raise NotFoundError("Task not found")
        logger.info("User %s deleted task %s", identity.id, task_id)


def task_stats(*, tasks: TaskRepository, identity: Identity) -> TaskStats:
    return tasks.stats_for(identity.id)
