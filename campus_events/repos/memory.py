"""In-memory repositories for users, events, registrations and auth tokens."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from campus_events.domain.models import (
    Event,
    EventFilter,
    EventStatus,
    Registration,
    RegistrationStatus,
    User,
    UserRole,
)


class UserRepository:
    """Dict-backed store for User instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        for user in self._store.values():
            if user.email == email:
                return user
        return None

    def list_all(self) -> list[User]:
        return sorted(self._store.values(), key=lambda u: u.created_at, reverse=True)

    def count(self) -> int:
        return len(self._store)

    def count_by_role(self) -> dict[str, int]:
        counts = {role.value: 0 for role in UserRole}
        for user in self._store.values():
            counts[user.role.value] += 1
        return counts


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Iteration follows insertion order, which is the "underlying query order"
    callers see when they take the first match.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def find_at_venue(
        self,
        location: str,
        statuses: Iterable[EventStatus],
        exclude_event_id: str | None = None,
    ) -> list[Event]:
        """Return events at *location* (exact match) whose status is in *statuses*."""
        wanted = set(statuses)
        return [
            e
            for e in self._store.values()
            if e.location == location
            and e.status in wanted
            and e.id != exclude_event_id
        ]

    def list_filtered(self, filters: EventFilter, now: datetime) -> list[Event]:
        needle = filters.search.casefold() if filters.search else None
        results = []
        for e in self._store.values():
            if filters.status is not None and e.status != filters.status:
                continue
            if filters.category is not None and e.category != filters.category:
                continue
            if needle is not None and not (
                needle in e.title.casefold() or needle in e.description.casefold()
            ):
                continue
            if filters.upcoming and e.start_date < now:
                continue
            results.append(e)
        return sorted(results, key=lambda e: e.start_date)

    def list_by_creator(self, user_id: str) -> list[Event]:
        return sorted(
            [e for e in self._store.values() if e.created_by == user_id],
            key=lambda e: e.created_at,
            reverse=True,
        )

    def list_by_status(self, status: EventStatus) -> list[Event]:
        return sorted(
            [e for e in self._store.values() if e.status == status],
            key=lambda e: e.created_at,
            reverse=True,
        )

    def count(self, status: EventStatus | None = None) -> int:
        if status is None:
            return len(self._store)
        return sum(1 for e in self._store.values() if e.status == status)

    def count_upcoming(self, now: datetime) -> int:
        return sum(
            1
            for e in self._store.values()
            if e.status == EventStatus.APPROVED and e.start_date >= now
        )


class RegistrationRepository:
    """Dict-backed store for Registration instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Registration] = {}

    def add(self, registration: Registration) -> None:
        self._store[registration.id] = registration

    def get(self, registration_id: str) -> Registration | None:
        return self._store.get(registration_id)

    def get_for_user_and_event(self, user_id: str, event_id: str) -> Registration | None:
        for r in self._store.values():
            if r.user_id == user_id and r.event_id == event_id:
                return r
        return None

    def list_for_user(self, user_id: str) -> list[Registration]:
        return sorted(
            [r for r in self._store.values() if r.user_id == user_id],
            key=lambda r: r.registered_at,
            reverse=True,
        )

    def list_active_for_event(self, event_id: str) -> list[Registration]:
        return sorted(
            [
                r
                for r in self._store.values()
                if r.event_id == event_id and r.status == RegistrationStatus.REGISTERED
            ],
            key=lambda r: r.registered_at,
        )

    def count_for_event(self, event_id: str) -> int:
        return sum(1 for r in self._store.values() if r.event_id == event_id)

    def count_for_user(self, user_id: str) -> int:
        return sum(1 for r in self._store.values() if r.user_id == user_id)

    def count_active(self) -> int:
        return sum(
            1 for r in self._store.values() if r.status == RegistrationStatus.REGISTERED
        )

    def delete_for_event(self, event_id: str) -> None:
        to_remove = [rid for rid, r in self._store.items() if r.event_id == event_id]
        for rid in to_remove:
            del self._store[rid]


class TokenRepository:
    """Maps opaque bearer tokens to user ids."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    def add(self, token: str, user_id: str) -> None:
        self._tokens[token] = user_id

    def get_user_id(self, token: str) -> str | None:
        return self._tokens.get(token)

    def revoke(self, token: str) -> None:
        self._tokens.pop(token, None)

    def revoke_for_user(self, user_id: str) -> None:
        to_remove = [t for t, uid in self._tokens.items() if uid == user_id]
        for token in to_remove:
            del self._tokens[token]


# ---------------------------------------------------------------------------
# Seed data – demo accounts and a few near-future events
# ---------------------------------------------------------------------------


def seed_demo_data(
    user_repo: UserRepository,
    event_repo: EventRepository,
    hash_password,
) -> None:
    """Load demo users and events. *hash_password* turns plaintext into a hash."""
    now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)

    user_repo.add(
        User(
            email="admin@campus.edu",
            password_hash=hash_password("admin123"),
            name="System Admin",
            role=UserRole.ADMIN,
        )
    )
    tech = User(
        email="tech.club@campus.edu",
        password_hash=hash_password("organizer123"),
        name="Tech Club President",
        role=UserRole.ORGANIZER,
        club_name="Technology Club",
    )
    music = User(
        email="music.club@campus.edu",
        password_hash=hash_password("organizer123"),
        name="Music Club President",
        role=UserRole.ORGANIZER,
        club_name="Music Society",
    )
    user_repo.add(tech)
    user_repo.add(music)
    for email, name, student_id in (
        ("john.doe@campus.edu", "John Doe", "STU001"),
        ("jane.smith@campus.edu", "Jane Smith", "STU002"),
    ):
        user_repo.add(
            User(
                email=email,
                password_hash=hash_password("student123"),
                name=name,
                role=UserRole.STUDENT,
                student_id=student_id,
            )
        )

    event_repo.add(
        Event(
            title="Web Development Workshop",
            description="Learn modern web development with React and Node.js. Perfect for beginners!",
            location="Computer Lab A-101",
            start_date=now + timedelta(days=3, hours=2),
            end_date=now + timedelta(days=3, hours=5),
            max_attendees=50,
            category="Workshop",
            tags=["Technology", "Programming", "Web Development"],
            created_by=tech.id,
            status=EventStatus.APPROVED,
        )
    )
    event_repo.add(
        Event(
            title="Annual Music Festival",
            description="Join us for an evening of live music performances by talented student bands!",
            location="University Auditorium",
            start_date=now + timedelta(days=8, hours=6),
            end_date=now + timedelta(days=8, hours=10),
            max_attendees=200,
            category="Concert",
            tags=["Music", "Entertainment", "Festival"],
            created_by=music.id,
            status=EventStatus.APPROVED,
        )
    )
    event_repo.add(
        Event(
            title="AI & Machine Learning Seminar",
            description="Industry experts discuss the latest trends in AI and machine learning.",
            location="Main Hall",
            start_date=now + timedelta(days=13),
            end_date=now + timedelta(days=13, hours=3),
            max_attendees=100,
            category="Seminar",
            tags=["Technology", "AI", "Machine Learning"],
            created_by=tech.id,
            status=EventStatus.PENDING,
        )
    )
