"""Credential store: user records, password hashing and the public projection."""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from errors import DuplicateEmail
from models import User, copy_user, utcnow
from schemas import PublicUser
from utils import passwords

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Holds user records and verifies passwords; hashes never leave it"""

    def __init__(self, bcrypt_rounds: int = passwords.DEFAULT_ROUNDS):
        self.bcrypt_rounds = bcrypt_rounds

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def _insert(self, user: User) -> User:
        """Store a new record, assigning its id; raises DuplicateEmail"""

    @abstractmethod
    def count(self) -> int:
        ...

    def create(self, email: str, password: str, name: str) -> User:
        """
        Register a user with a hashed password

        Raises:
            DuplicateEmail: If the email is already registered
            ValidationError: If the password cannot be hashed
        """
        if self.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(
            email=email,
            password_hash=passwords.hash_password(password, self.bcrypt_rounds),
            name=name,
            created_at=utcnow(),
        )
        created = self._insert(user)
        logger.info("Created user %s", created.id)
        return created

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        return passwords.verify_password(password, password_hash)

    @staticmethod
    def without_secret(user: User) -> PublicUser:
        return PublicUser(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
        )


class InMemoryUserStore(UserStore):
    """Process-memory store keyed by id; writes are serialised by a lock"""

    def __init__(self, bcrypt_rounds: int = passwords.DEFAULT_ROUNDS):
        super().__init__(bcrypt_rounds)
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return copy_user(user)
        return None

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy_user(user) if user is not None else None

    def _insert(self, user: User) -> User:
        with self._lock:
            # Re-check under the lock so two registrations cannot both pass
            if any(existing.email == user.email for existing in self._users.values()):
                raise DuplicateEmail()
            user.id = next(self._ids)
            self._users[user.id] = copy_user(user)
            return copy_user(user)

    def count(self) -> int:
        with self._lock:
            return len(self._users)


class SqlUserStore(UserStore):
    """User store backed by the SQLModel users table"""

    def __init__(self, engine: Engine, bcrypt_rounds: int = passwords.DEFAULT_ROUNDS):
        super().__init__(bcrypt_rounds)
        self.engine = engine

    def find_by_email(self, email: str) -> Optional[User]:
        with Session(self.engine) as session:
            return session.exec(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        with Session(self.engine) as session:
            return session.get(User, user_id)

    def _insert(self, user: User) -> User:
        with Session(self.engine) as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise DuplicateEmail()
            session.refresh(user)
            return user

    def count(self) -> int:
        with Session(self.engine) as session:
            return len(session.exec(select(User.id)).all())
