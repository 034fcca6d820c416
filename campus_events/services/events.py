"""Event lifecycle: creation, listing, editing and deletion by organizers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from campus_events.domain.bus import EventBus
from campus_events.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from campus_events.domain.events import EventDeleted, EventSubmitted
from campus_events.domain.models import (
    Event,
    EventCreateRequest,
    EventDetail,
    EventFilter,
    EventStatus,
    EventUpdateRequest,
    EventView,
    User,
    UserPublic,
    UserRole,
    as_utc,
)
from campus_events.repos.memory import (
    EventRepository,
    RegistrationRepository,
    UserRepository,
)
from campus_events.services.conflicts import check_conflict, organizer_name

logger = logging.getLogger(__name__)

_SLOT_FIELDS = frozenset({"location", "start_date", "end_date"})


def _ensure_no_conflict(
    location: str,
    start: datetime,
    end: datetime,
    event_repo: EventRepository,
    user_repo: UserRepository,
    exclude_event_id: str | None = None,
) -> None:
    result = check_conflict(
        location,
        start,
        end,
        event_repo=event_repo,
        user_repo=user_repo,
        exclude_event_id=exclude_event_id,
    )
    if result.has_conflict:
        raise ConflictError(
            f"{location} is already booked during this time",
            conflicting_event=result.conflicting_event,
        )


def _ensure_can_manage(event: Event, actor: User, action: str) -> None:
    if event.created_by != actor.id and actor.role != UserRole.ADMIN:
        raise ForbiddenError(f"You can only {action} your own events")


def get_or_404(event_repo: EventRepository, event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def create_event(
    payload: EventCreateRequest,
    creator: User,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    bus: EventBus,
    now: datetime | None = None,
) -> Event:
    """Validate and store a new event in the pending state."""
    now = as_utc(now or datetime.now(timezone.utc))
    start, end = as_utc(payload.start_date), as_utc(payload.end_date)
    if start >= end:
        raise ValidationError("End date must be after start date")
    if start < now:
        raise ValidationError("Start date must be in the future")

    _ensure_no_conflict(payload.location, start, end, event_repo, user_repo)

    event = Event(
        title=payload.title,
        description=payload.description,
        location=payload.location,
        start_date=start,
        end_date=end,
        max_attendees=payload.max_attendees,
        category=payload.category,
        tags=payload.tags,
        image_url=payload.image_url,
        created_by=creator.id,
        status=EventStatus.PENDING,
    )
    event_repo.add(event)
    bus.publish(EventSubmitted(event_id=event.id, created_by=creator.id))
    return event


def list_events(
    filters: EventFilter,
    viewer: User | None,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
    now: datetime | None = None,
) -> list[EventView]:
    # Students only see approved events unless they ask for a status.
    if filters.status is None and viewer is not None and viewer.role == UserRole.STUDENT:
        filters = filters.model_copy(update={"status": EventStatus.APPROVED})

    events = event_repo.list_filtered(filters, as_utc(now or datetime.now(timezone.utc)))
    return [
        EventView(
            event=e,
            organizer=organizer_name(user_repo, e.created_by),
            registration_count=registration_repo.count_for_event(e.id),
        )
        for e in events
    ]


def get_event_detail(
    event_id: str,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
) -> EventDetail:
    event = get_or_404(event_repo, event_id)
    attendees = []
    for registration in registration_repo.list_active_for_event(event.id):
        user = user_repo.get(registration.user_id)
        if user is not None:
            attendees.append(UserPublic.from_user(user))
    return EventDetail(
        event=event,
        organizer=organizer_name(user_repo, event.created_by),
        registration_count=registration_repo.count_for_event(event.id),
        attendees=attendees,
    )


def update_event(
    event_id: str,
    payload: EventUpdateRequest,
    actor: User,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
) -> Event:
    """Apply a partial update.

    The venue is re-checked against other bookings only when the location or
    either date is part of the update.
    """
    event = get_or_404(event_repo, event_id)
    _ensure_can_manage(event, actor, "update")

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        return event

    start = as_utc(changes.get("start_date", event.start_date))
    end = as_utc(changes.get("end_date", event.end_date))
    if start >= end:
        raise ValidationError("End date must be after start date")
    location = changes.get("location", event.location)

    if _SLOT_FIELDS & changes.keys():
        _ensure_no_conflict(location, start, end, event_repo, user_repo, exclude_event_id=event.id)

    changes.update(start_date=start, end_date=end, updated_at=datetime.now(timezone.utc))
    updated = Event(**{**event.model_dump(), **changes})
    event_repo.add(updated)
    logger.info("Event %s updated by %s: %s", event.id, actor.id, sorted(changes))
    return updated


def delete_event(
    event_id: str,
    actor: User,
    *,
    event_repo: EventRepository,
    bus: EventBus,
) -> None:
    event = get_or_404(event_repo, event_id)
    _ensure_can_manage(event, actor, "delete")
    event_repo.delete(event.id)
    bus.publish(EventDeleted(event_id=event.id))


def my_events(
    organizer: User,
    *,
    event_repo: EventRepository,
    registration_repo: RegistrationRepository,
) -> list[EventView]:
    return [
        EventView(
            event=e,
            organizer=organizer.display_name,
            registration_count=registration_repo.count_for_event(e.id),
        )
        for e in event_repo.list_by_creator(organizer.id)
    ]
