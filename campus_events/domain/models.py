"""Domain models for the campus event platform."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class UserRole(StrEnum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class EventStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Only these statuses occupy a venue's schedule.
BOOKED_STATUSES = frozenset({EventStatus.PENDING, EventStatus.APPROVED})


class RegistrationStatus(StrEnum):
    REGISTERED = "registered"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix the two kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    email: str
    password_hash: str
    name: str
    role: UserRole = UserRole.STUDENT
    student_id: str | None = None
    club_name: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.club_name or ""


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    location: str
    start_date: datetime
    end_date: datetime
    max_attendees: int = Field(ge=1)
    current_attendees: int = 0
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None
    status: EventStatus = EventStatus.PENDING
    created_by: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_tz(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class Registration(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    event_id: str
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    qr_code: str = ""
    registered_at: datetime = Field(default_factory=_utcnow)
    cancelled_at: datetime | None = None


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class UserPublic(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    student_id: str | None = None
    club_name: str | None = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserPublic:
        return cls(**user.model_dump(exclude={"password_hash"}))


class RegisterUserRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str
    name: str = Field(min_length=1)
    role: UserRole = UserRole.STUDENT
    student_id: str | None = None
    club_name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: UserPublic


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    max_attendees: int = Field(ge=1)
    category: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None


class EventUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_attendees: int | None = Field(default=None, ge=1)
    category: str | None = None
    tags: list[str] | None = None
    image_url: str | None = None


class EventFilter(BaseModel):
    """Typed filters for listing events; search is matched case-insensitively."""

    status: EventStatus | None = None
    category: str | None = None
    search: str | None = None
    upcoming: bool = False


class EventSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    start_date: datetime
    end_date: datetime
    organizer: str


class EventView(BaseModel):
    event: Event
    organizer: str
    registration_count: int = 0


class EventDetail(EventView):
    attendees: list[UserPublic] = Field(default_factory=list)


class ConflictResult(BaseModel):
    has_conflict: bool
    conflicting_event: EventSummary | None = None


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    available: bool
    message: str
    conflict: EventSummary | None = None


class BookedSlot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    start: datetime
    end: datetime
    status: EventStatus
    organizer: str


class VenueSchedule(BaseModel):
    """Wire shape: location, startDate, endDate, bookedSlots."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    location: str
    start_date: datetime
    end_date: datetime
    booked_slots: list[BookedSlot] = Field(default_factory=list)


class RegistrationView(BaseModel):
    registration: Registration
    event: EventSummary | None = None
    user: UserPublic | None = None


class UserWithCounts(BaseModel):
    user: UserPublic
    events_created: int = 0
    registrations: int = 0


class DashboardStats(BaseModel):
    total_users: int
    total_events: int
    total_registrations: int
    pending_events: int
    upcoming_events: int
    users_by_role: dict[str, int] = Field(default_factory=dict)
