"""Task repository: CRUD by id, statistics and list queries."""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from models import IMMUTABLE_TASK_FIELDS, Task, TaskPriority, TaskStatus, copy_task, utcnow
from query import Pagination, SortSpec, TaskFilters, TaskPage, apply_query
from schemas import TaskStats

logger = logging.getLogger(__name__)


def build_task(data: Dict[str, Any], owner_id: int) -> Task:
    """New task record with defaults applied; id is left to the store"""
    now = utcnow()
    return Task(
        title=data["title"],
        description=data.get("description") or "",
        status=data.get("status") or TaskStatus.PENDING.value,
        priority=data.get("priority") or TaskPriority.MEDIUM.value,
        due_date=data.get("due_date"),
        user_id=owner_id,
        created_at=now,
        updated_at=now,
    )


def merge_update(task: Task, partial: Dict[str, Any]) -> Task:
    """Apply only the given fields; id, owner and created_at never change"""
    for key, value in partial.items():
        if key in IMMUTABLE_TASK_FIELDS or key not in Task.model_fields:
            continue
        setattr(task, key, value)
    task.updated_at = utcnow()
    return task


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.status == TaskStatus.PENDING.value:
            stats.pending += 1
        elif task.status == TaskStatus.IN_PROGRESS.value:
            stats.in_progress += 1
        elif task.status == TaskStatus.COMPLETED.value:
            stats.completed += 1
        if task.priority == TaskPriority.HIGH.value:
            stats.high_priority += 1
    return stats


class TaskRepository(ABC):
    """Holds task records. Ownership checks belong to the caller"""

    @abstractmethod
    def create(self, data: Dict[str, Any], owner_id: int) -> Task:
        ...

    @abstractmethod
    def get_by_id(self, task_id: int) -> Optional[Task]:
        ...

    @abstractmethod
    def update(self, task_id: int, partial: Dict[str, Any]) -> Optional[Task]:
        ...

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        ...

    @abstractmethod
    def stats_for(self, owner_id: Optional[int] = None) -> TaskStats:
        """Counts for one owner, or for every task when owner_id is None"""

    @abstractmethod
    def list(
        self,
        filters: TaskFilters,
        sort: Optional[SortSpec] = None,
        pagination: Optional[Pagination] = None,
    ) -> TaskPage:
        ...


class InMemoryTaskRepository(TaskRepository):
    """Process-memory store keyed by id, kept in insertion order"""

    def __init__(self):
        self._tasks: Dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _snapshot(self):
        with self._lock:
            return [copy_task(task) for task in self._tasks.values()]

    def create(self, data: Dict[str, Any], owner_id: int) -> Task:
        task = build_task(data, owner_id)
        with self._lock:
            task.id = next(self._ids)
            self._tasks[task.id] = copy_task(task)
        logger.info("Created task %s for user %s", task.id, owner_id)
        return task

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return copy_task(task) if task is not None else None

    def update(self, task_id: int, partial: Dict[str, Any]) -> Optional[Task]:
        with self._lock:
            stored = self._tasks.get(task_id)
            if stored is None:
                return None
            updated = merge_update(copy_task(stored), partial)
            self._tasks[task_id] = updated
            return copy_task(updated)

    def delete(self, task_id: int) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def stats_for(self, owner_id: Optional[int] = None) -> TaskStats:
        tasks = self._snapshot()
        if owner_id is not None:
            tasks = [task for task in tasks if task.user_id == owner_id]
        return compute_stats(tasks)

    def list(
        self,
        filters: TaskFilters,
        sort: Optional[SortSpec] = None,
        pagination: Optional[Pagination] = None,
    ) -> TaskPage:
        return apply_query(self._snapshot(), filters, sort, pagination)


class SqlTaskRepository(TaskRepository):
    """Task store backed by the SQLModel tasks table; one transaction per call"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, data: Dict[str, Any], owner_id: int) -> Task:
        task = build_task(data, owner_id)
        with Session(self.engine) as session:
            session.add(task)
            session.commit()
            session.refresh(task)
        logger.info("Created task %s for user %s", task.id, owner_id)
        return task

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with Session(self.engine) as session:
            return session.get(Task, task_id)

    def update(self, task_id: int, partial: Dict[str, Any]) -> Optional[Task]:
        with Session(self.engine) as session:
            task = session.get(Task, task_id)
            if task is None:
                return None
            merge_update(task, partial)
            session.add(task)
            session.commit()
            session.refresh(task)
            return task

    def delete(self, task_id: int) -> bool:
        with Session(self.engine) as session:
            task = session.get(Task, task_id)
            if task is None:
                return False
            session.delete(task)
            session.commit()
            return True

    def _select(self, owner_id: Optional[int]):
        query = select(Task).order_by(Task.id)
        if owner_id is not None:
            query = query.where(Task.user_id == owner_id)
        with Session(self.engine) as session:
            return list(session.exec(query).all())

    def stats_for(self, owner_id: Optional[int] = None) -> TaskStats:
        return compute_stats(self._select(owner_id))

    def list(
        self,
        filters: TaskFilters,
        sort: Optional[SortSpec] = None,
        pagination: Optional[Pagination] = None,
    ) -> TaskPage:
        # Ownership is pushed into SQL; the pipeline re-applies it with the rest
        return apply_query(self._select(filters.owner_id), filters, sort, pagination)
