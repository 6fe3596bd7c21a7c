import logging
from datetime import date
from typing import Optional, Tuple

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, SQLModel

from config import Settings
from repositories.tasks import InMemoryTaskRepository, SqlTaskRepository, TaskRepository
from repositories.users import InMemoryUserStore, SqlUserStore, UserStore

logger = logging.getLogger(__name__)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Create engine; in-memory SQLite shares one connection across threads"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo)


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables in the database"""
    SQLModel.metadata.create_all(engine)


def build_stores(settings: Settings) -> Tuple[UserStore, TaskRepository, Optional[Engine]]:
    """
    Choose storage from settings: SQL when DATABASE_URL is set, memory otherwise

    Returns:
        User store, task repository and the engine (None for memory stores)
    """
    if not settings.database_url:
        logger.info("DATABASE_URL not set, using in-memory stores")
        return InMemoryUserStore(settings.bcrypt_rounds), InMemoryTaskRepository(), None

    engine = make_engine(settings.database_url, settings.database_echo)
    create_db_and_tables(engine)
    logger.info("Using SQL stores (%s)", engine.url.render_as_string(hide_password=True))
    return SqlUserStore(engine, settings.bcrypt_rounds), SqlTaskRepository(engine), engine


DEMO_USERS = [
    ("admin@mileapp.com", "admin123", "Admin User"),
    ("user@mileapp.com", "user123", "Regular User"),
]

# title, description, status, priority, due date
DEMO_TASKS = [
    ("Setup Project", "Initialize project with all dependencies", "completed", "high", "2025-09-25"),
    ("Design Database Schema", "Create database schema design", "in-progress", "high", "2025-09-28"),
    ("Implement Authentication", "Add JWT-based authentication", "pending", "medium", "2025-10-01"),
    ("Create Task CRUD", "Build complete CRUD operations", "pending", "high", "2025-10-02"),
    ("Frontend Development", "Build the frontend", "pending", "medium", "2025-10-05"),
]


def seed_demo_data(users: UserStore, tasks: TaskRepository) -> None:
    """Add the demo users and the admin's demo tasks to an empty user store"""
    if users.count() > 0:
        logger.info("User store not empty, skipping demo data")
        return

    created = [users.create(email, password, name) for email, password, name in DEMO_USERS]
    admin = created[0]
    for title, description, status, priority, due in DEMO_TASKS:
        tasks.create(
            {
                "title": title,
                "description": description,
                "status": status,
                "priority": priority,
                "due_date": date.fromisoformat(due),
            },
            admin.id,
        )

    logger.info("Seeded %d demo users and %d demo tasks", len(created), len(DEMO_TASKS))


def get_user_store(request: Request) -> UserStore:
    """Get the app's user store - used as FastAPI dependency"""
    return request.app.state.users


def get_task_repository(request: Request) -> TaskRepository:
    """Get the app's task repository - used as FastAPI dependency"""
    return request.app.state.tasks
