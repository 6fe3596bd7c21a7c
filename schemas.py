from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Any, List
from datetime import date, datetime

from models import TaskPriority, TaskStatus


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, dumps camelCase with by_alias"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Identity(BaseModel):
    """Caller identity resolved from a verified token"""
    id: int
    email: str


class LoginRequest(BaseModel):
    """Schema for logging in"""
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Schema for registering a new user"""
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None
    name: Optional[str] = Field(None, max_length=200)


class PublicUser(CamelModel):
    """User as exposed to callers; carries no password hash"""
    id: int
    email: str
    name: str
    created_at: datetime


class AuthResult(BaseModel):
    """Schema for login/register response data"""
    token: str
    user: PublicUser


class TaskCreate(CamelModel):
    """Schema for creating a new task"""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskUpdate(CamelModel):
    """Schema for updating a task; only fields present in the body are applied"""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskResponse(CamelModel):
    """Schema for task response"""
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class TaskStats(CamelModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority: int = 0


def success_response(message: str, data: Any = None) -> dict:
    """Standard success envelope; data is omitted when None"""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def paginated_response(message: str, data: List[Any], meta: PaginationMeta) -> dict:
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": meta.model_dump(by_alias=True),
    }


def error_response(error: dict) -> dict:
    return {"success": False, "error": error}
