from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class User(SQLModel, table=True):
    """Registered user; password_hash never leaves the credential store"""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=255)
    password_hash: str
    name: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=utcnow)


class Task(SQLModel, table=True):
    """Task owned by exactly one user"""
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    description: str = ""
    status: str = Field(default=TaskStatus.PENDING.value, index=True)
    priority: str = Field(default=TaskPriority.MEDIUM.value, index=True)
    due_date: Optional[date] = None
    # Owner is fixed at creation
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# Fields a partial update may never touch
IMMUTABLE_TASK_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})


def copy_task(task: Task) -> Task:
    return Task.model_validate(task.model_dump())


def copy_user(user: User) -> User:
    return User.model_validate(user.model_dump())
