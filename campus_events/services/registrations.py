"""Student registrations for approved events, with capacity limits."""

from __future__ import annotations

from datetime import datetime, timezone

from campus_events.domain.bus import EventBus
from campus_events.domain.errors import ForbiddenError, NotFoundError, ValidationError
from campus_events.domain.events import RegistrationCancelled, RegistrationCreated
from campus_events.domain.models import (
    EventStatus,
    Registration,
    RegistrationStatus,
    RegistrationView,
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
from campus_events.services.conflicts import summarize
from campus_events.services.events import get_or_404


def qr_code_for(registration: Registration) -> str:
    """Ticket identifier encoded in the attendee's QR code."""
    return f"REG-{registration.id}"


def register_for_event(
    event_id: str,
    student: User,
    *,
    event_repo: EventRepository,
    registration_repo: RegistrationRepository,
    bus: EventBus,
    now: datetime | None = None,
) -> Registration:
    now = as_utc(now or datetime.now(timezone.utc))
    event = get_or_404(event_repo, event_id)

    if event.status != EventStatus.APPROVED:
        raise ValidationError("Event is not approved yet")
    if event.start_date < now:
        raise ValidationError("Cannot register for past events")
    if len(registration_repo.list_active_for_event(event.id)) >= event.max_attendees:
        raise ValidationError("Event is full")

    registration = registration_repo.get_for_user_and_event(student.id, event.id)
    if registration is not None:
        if registration.status == RegistrationStatus.REGISTERED:
            raise ValidationError("You are already registered for this event")
        # Previously cancelled: reactivate the same ticket.
        registration.status = RegistrationStatus.REGISTERED
        registration.registered_at = now
        registration.cancelled_at = None
    else:
        registration = Registration(user_id=student.id, event_id=event.id, registered_at=now)
        registration.qr_code = qr_code_for(registration)
        registration_repo.add(registration)

    bus.publish(
        RegistrationCreated(
            event_id=event.id, registration_id=registration.id, user_id=student.id
        )
    )
    return registration


def cancel_registration(
    event_id: str,
    student: User,
    *,
    event_repo: EventRepository,
    registration_repo: RegistrationRepository,
    bus: EventBus,
    now: datetime | None = None,
) -> Registration:
    now = as_utc(now or datetime.now(timezone.utc))
    registration = registration_repo.get_for_user_and_event(student.id, event_id)
    if registration is None:
        raise NotFoundError("Registration not found")
    if registration.status != RegistrationStatus.REGISTERED:
        raise ValidationError("Registration is already cancelled")

    event = get_or_404(event_repo, event_id)
    if event.start_date < now:
        raise ValidationError("Cannot cancel registration for ongoing or past events")

    registration.status = RegistrationStatus.CANCELLED
    registration.cancelled_at = now
    bus.publish(
        RegistrationCancelled(
            event_id=event_id, registration_id=registration.id, user_id=student.id
        )
    )
    return registration


def my_registrations(
    student: User,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
    status: RegistrationStatus | None = None,
    upcoming: bool = False,
    now: datetime | None = None,
) -> list[RegistrationView]:
    now = as_utc(now or datetime.now(timezone.utc))
    views = []
    for registration in registration_repo.list_for_user(student.id):
        if status is not None and registration.status != status:
            continue
        event = event_repo.get(registration.event_id)
        if upcoming and (event is None or event.start_date < now):
            continue
        views.append(
            RegistrationView(
                registration=registration,
                event=summarize(event, user_repo) if event else None,
            )
        )
    return views


def get_registration(
    registration_id: str,
    actor: User,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
) -> RegistrationView:
    registration = registration_repo.get(registration_id)
    if registration is None:
        raise NotFoundError("Registration not found")

    event = event_repo.get(registration.event_id)
    is_organizer = event is not None and event.created_by == actor.id
    if registration.user_id != actor.id and actor.role != UserRole.ADMIN and not is_organizer:
        raise ForbiddenError("Access denied")

    owner = user_repo.get(registration.user_id)
    return RegistrationView(
        registration=registration,
        event=summarize(event, user_repo) if event else None,
        user=UserPublic.from_user(owner) if owner else None,
    )


def event_attendees(
    event_id: str,
    actor: User,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
) -> list[RegistrationView]:
    event = get_or_404(event_repo, event_id)
    if event.created_by != actor.id and actor.role != UserRole.ADMIN:
        raise ForbiddenError("Access denied")

    views = []
    for registration in registration_repo.list_active_for_event(event.id):
        user = user_repo.get(registration.user_id)
        views.append(
            RegistrationView(
                registration=registration,
                user=UserPublic.from_user(user) if user else None,
            )
        )
    return views
