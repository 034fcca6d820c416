"""Shared fixtures: fresh in-memory repos and helpers for authenticated calls."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from campus_events.domain.models import Event, EventStatus, User, UserRole
from campus_events.main import (
    app,
    event_repo,
    registration_repo,
    token_repo,
    user_repo,
)
from campus_events.services.auth import hash_password


def _clear() -> None:
    user_repo._store.clear()
    event_repo._store.clear()
    registration_repo._store.clear()
    token_repo._tokens.clear()


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before and after each test."""
    _clear()
    yield
    _clear()


@pytest.fixture()
def client():
    return TestClient(app)


def future(days: int = 1, hours: int = 0) -> datetime:
    base = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    return base + timedelta(days=days, hours=hours)


def make_user(
    role: UserRole = UserRole.STUDENT,
    name: str = "Test User",
    password: str = "secret123",
    **overrides,
) -> User:
    user = User(
        email=overrides.pop("email", f"{uuid.uuid4().hex[:8]}@campus.edu"),
        password_hash=hash_password(password, rounds=4),
        name=name,
        role=role,
        **overrides,
    )
    user_repo.add(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = uuid.uuid4().hex
    token_repo.add(token, user.id)
    return {"Authorization": f"Bearer {token}"}


def seed_event(organizer: User, **overrides) -> Event:
    defaults = dict(
        title="Robotics Demo",
        description="Build and race robots",
        location="Main Hall",
        start_date=future(days=2, hours=10),
        end_date=future(days=2, hours=12),
        max_attendees=10,
        category="Workshop",
        created_by=organizer.id,
        status=EventStatus.APPROVED,
    )
    defaults.update(overrides)
    event = Event(**defaults)
    event_repo.add(event)
    return event
