"""Login, registration and current-user lookup."""

import logging
from typing import Optional

from errors import InvalidCredentials, MissingField, NotFoundError
from logging_setup import span
from repositories.users import UserStore
from schemas import AuthResult, Identity, PublicUser
from utils.jwt import TokenService

logger = logging.getLogger(__name__)


def _require(*values: Optional[str]) -> None:
    if any(value is None or not value.strip() for value in values):
        raise MissingField()


def login(*, users: UserStore, tokens: TokenService, email: Optional[str], password: Optional[str]) -> AuthResult:
    """Exchange email and password for a token.

    Unknown email and wrong password fail the same way so callers cannot
    probe which emails are registered.

    Raises:
        MissingField: If email or password is missing
        InvalidCredentials: If the credentials do not match a user
    """
    with span("auth_service.login"):
        if not email or not password:
            raise MissingField("Please provide email and password")

        user = users.find_by_email(email)
        if user is None or not users.verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        logger.info("User %s logged in", user.id)
        return AuthResult(token=tokens.issue(user.id, user.email), user=users.without_secret(user))


def register(
    *,
    users: UserStore,
    tokens: TokenService,
    email: Optional[str],
    password: Optional[str],
    name: Optional[str],
) -> AuthResult:
    """Create an account and log it in.

    Raises:
        MissingField: If email, password or name is missing
        DuplicateEmail: If the email is already registered
    """
    with span("auth_service.register"):
        _require(email, password, name)
        # Emails are matched exactly as stored
        user = users.create(email, password, name.strip())
        return AuthResult(token=tokens.issue(user.id, user.email), user=users.without_secret(user))


def me(*, users: UserStore, identity: Identity) -> PublicUser:
    """Public profile of the caller.

    Raises:
        NotFoundError: If the token refers to a user that no longer exists
    """
    user = users.find_by_id(identity.id)
    if user is None:
        raise NotFoundError("User not found")
    return users.without_secret(user)
