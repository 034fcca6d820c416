"""Account registration, password hashing and bearer-token sessions."""

from __future__ import annotations

import logging
import uuid

import bcrypt

from campus_events.domain.errors import ForbiddenError, UnauthorizedError, ValidationError
from campus_events.domain.models import RegisterUserRequest, User, UserRole
from campus_events.repos.memory import TokenRepository, UserRepository

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def register_user(
    payload: RegisterUserRequest,
    user_repo: UserRepository,
    rounds: int = 10,
    min_password_length: int = 6,
) -> User:
    email = payload.email.strip().lower()
    if "@" not in email:
        raise ValidationError("A valid email address is required")
    if len(payload.password) < min_password_length:
        raise ValidationError(
            f"Password must be at least {min_password_length} characters"
        )
    if payload.role == UserRole.ADMIN:
        raise ForbiddenError("Admin accounts cannot be self-registered")
    if user_repo.get_by_email(email) is not None:
        raise ValidationError("An account already exists with this email address")

    user = User(
        email=email,
        password_hash=hash_password(payload.password, rounds),
        name=payload.name.strip(),
        role=payload.role,
        student_id=payload.student_id,
        club_name=payload.club_name,
    )
    user_repo.add(user)
    logger.info("Registered %s account %s", user.role, user.id)
    return user


def login(
    email: str,
    password: str,
    user_repo: UserRepository,
    token_repo: TokenRepository,
) -> tuple[str, User]:
    """Verify credentials and issue a new bearer token."""
    user = user_repo.get_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")

    token = uuid.uuid4().hex
    token_repo.add(token, user.id)
    return token, user


def authenticate(
    token: str | None,
    user_repo: UserRepository,
    token_repo: TokenRepository,
) -> User:
    if not token:
        raise UnauthorizedError("Authentication required")
    user_id = token_repo.get_user_id(token)
    user = user_repo.get(user_id) if user_id else None
    if user is None:
        raise UnauthorizedError("Invalid or expired token")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return user


def ensure_role(user: User, *roles: UserRole) -> None:
    if user.role not in roles:
        raise ForbiddenError("Insufficient permissions")
