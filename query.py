"""Filter, sort and paginate a task collection.

The stages always run in the same order: ownership, status, priority,
search, sort, page slice. Stores that can push part of this into a database
query still hand the remaining rows to ``apply_query`` so every store answers
list requests the same way.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from errors import ValidationError
from models import Task, TaskPriority, TaskStatus
from schemas import PaginationMeta

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# API field name -> Task attribute
SORTABLE_FIELDS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class TaskFilters(BaseModel):
    owner_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None


class SortSpec(BaseModel):
    field: str
    direction: Literal["asc", "desc"] = "asc"

    @property
    def attribute(self) -> str:
        if self.field in SORTABLE_FIELDS:
            return SORTABLE_FIELDS[self.field]
        if self.field in SORTABLE_FIELDS.values():
            return self.field
        raise ValidationError(
            f"Cannot sort by '{self.field}'. Allowed fields: {', '.join(SORTABLE_FIELDS)}"
        )


class Pagination(BaseModel):
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1)

    @property
    def start(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end(self) -> int:
        return self.page * self.limit


@dataclass
class TaskPage:
    tasks: List[Task]
    meta: PaginationMeta


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters) -> List[Task]:
    result = list(tasks)

    # Tenancy boundary: applied first whenever an owner is given
    if filters.owner_id is not None:
        result = [task for task in result if task.user_id == filters.owner_id]

    if filters.status is not None:
        result = [task for task in result if task.status == filters.status.value]

    if filters.priority is not None:
        result = [task for task in result if task.priority == filters.priority.value]

    if filters.search:
        term = filters.search.lower()
        result = [
            task for task in result
            if term in task.title.lower() or term in (task.description or "").lower()
        ]

    return result


def sort_tasks(tasks: List[Task], sort: SortSpec) -> List[Task]:
    """Stable sort on one field; tasks without a value go last either way"""
    attribute = sort.attribute
    present = [task for task in tasks if getattr(task, attribute) is not None]
    missing = [task for task in tasks if getattr(task, attribute) is None]
    present.sort(key=lambda task: getattr(task, attribute), reverse=sort.direction == "desc")
    return present + missing


def paginate(tasks: List[Task], pagination: Pagination) -> TaskPage:
    total = len(tasks)
    meta = PaginationMeta(
        page=pagination.page,
        limit=pagination.limit,
        total=total,
        total_pages=math.ceil(total / pagination.limit),
        has_next_page=pagination.end < total,
        has_prev_page=pagination.page > 1,
    )
    return TaskPage(tasks=tasks[pagination.start:pagination.end], meta=meta)


def apply_query(
    tasks: Iterable[Task],
    filters: TaskFilters,
    sort: Optional[SortSpec] = None,
    pagination: Optional[Pagination] = None,
) -> TaskPage:
    """
    Run the full pipeline over a task collection

    Args:
        tasks: Base collection, in insertion order
        filters: Owner, status, priority and search filters
        sort: Optional sort field and direction
        pagination: Page and limit, defaulting to page 1 of 10

    Returns:
        The requested page plus pagination metadata

    Raises:
        ValidationError: If the sort field is not sortable
    """
    result = filter_tasks(tasks, filters)
    if sort is not None:
        result = sort_tasks(result, sort)
    return paginate(result, pagination or Pagination())
