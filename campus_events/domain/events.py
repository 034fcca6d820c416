"""Domain events emitted by the event and registration lifecycles."""

from __future__ import annotations

from pydantic import BaseModel

from campus_events.domain.models import EventStatus


class EventSubmitted(BaseModel):
    """Fired when an organizer creates an event (awaiting approval)."""

    event_id: str
    created_by: str


class EventReviewed(BaseModel):
    """Fired when an admin approves or rejects a pending event."""

    event_id: str
    status: EventStatus


class EventDeleted(BaseModel):
    event_id: str


class RegistrationCreated(BaseModel):
    """Fired when a student registers (or re-registers) for an event."""

    event_id: str
    registration_id: str
    user_id: str


class RegistrationCancelled(BaseModel):
    event_id: str
    registration_id: str
    user_id: str
