"""Venue conflict detection and schedule lookup.

A venue is identified by the event's ``location`` string, matched exactly.
Only pending and approved events occupy a venue; rejected and cancelled ones
never block a booking.

Booking checks and schedule listings use different boundaries:

* ``check_conflict`` treats intervals as half-open, so back-to-back bookings
  (one ending exactly when the next starts) are allowed.
* ``get_venue_schedule`` treats the window as closed, so an event ending
  exactly at the window start is still listed.

Conflict checks are check-then-act: nothing stops two callers from passing
the check for the same slot before either event is stored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from campus_events.domain.errors import ValidationError
from campus_events.domain.models import (
    BOOKED_STATUSES,
    AvailabilityResponse,
    BookedSlot,
    ConflictResult,
    Event,
    EventSummary,
    VenueSchedule,
    as_utc,
)
from campus_events.repos.memory import EventRepository, UserRepository

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7

AVAILABLE_MESSAGE = "Venue is available for the selected time slot"
BOOKED_MESSAGE = "Venue is already booked during this time"


def organizer_name(user_repo: UserRepository, user_id: str) -> str:
    """Organizer display name: the user's name, falling back to club name."""
    user = user_repo.get(user_id)
    if user is None:
        return ""
    return user.display_name


def summarize(event: Event, user_repo: UserRepository) -> EventSummary:
    return EventSummary(
        id=event.id,
        title=event.title,
        start_date=event.start_date,
        end_date=event.end_date,
        organizer=organizer_name(user_repo, event.created_by),
    )


def overlaps_booking(existing: Event, new_start: datetime, new_end: datetime) -> bool:
    """Return True if [new_start, new_end) collides with *existing*.

    Exact boundary touches (existing.end == new_start or new_end ==
    existing.start) are NOT conflicts.
    """
    # New booking starts during the existing one
    if existing.start_date <= new_start < existing.end_date:
        return True
    # New booking ends during the existing one
    if existing.start_date < new_end <= existing.end_date:
        return True
    # New booking swallows the existing one
    return new_start <= existing.start_date and new_end >= existing.end_date


def touches_window(event: Event, window_start: datetime, window_end: datetime) -> bool:
    """Return True if *event* falls in the closed window [window_start, window_end]."""
    if window_start <= event.start_date <= window_end:
        return True
    if window_start <= event.end_date <= window_end:
        return True
    return event.start_date <= window_start and event.end_date >= window_end


def check_conflict(
    location: str,
    start_date: datetime,
    end_date: datetime,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    exclude_event_id: str | None = None,
) -> ConflictResult:
    """Find the first booked event at *location* that overlaps the interval.

    Only one conflicting event is reported, in repository order.
    """
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    candidates = event_repo.find_at_venue(
        location, BOOKED_STATUSES, exclude_event_id=exclude_event_id
    )
    for existing in candidates:
        if overlaps_booking(existing, start_date, end_date):
            logger.info(
                "Venue conflict at %r: %s-%s overlaps event %s",
                location,
                start_date.isoformat(),
                end_date.isoformat(),
                existing.id,
            )
            return ConflictResult(
                has_conflict=True, conflicting_event=summarize(existing, user_repo)
            )
    return ConflictResult(has_conflict=False)


def check_availability(
    location: str | None,
    start_date: datetime | None,
    end_date: datetime | None,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    exclude_event_id: str | None = None,
) -> AvailabilityResponse:
    """Validate the requested slot, then report whether the venue is free."""
    if not location or start_date is None or end_date is None:
        raise ValidationError("Location, start date, and end date are required")
    if as_utc(start_date) >= as_utc(end_date):
        raise ValidationError("End date must be after start date")

    result = check_conflict(
        location,
        start_date,
        end_date,
        event_repo=event_repo,
        user_repo=user_repo,
        exclude_event_id=exclude_event_id,
    )
    if result.has_conflict:
        return AvailabilityResponse(
            available=False, message=BOOKED_MESSAGE, conflict=result.conflicting_event
        )
    return AvailabilityResponse(available=True, message=AVAILABLE_MESSAGE)


def get_venue_schedule(
    location: str | None,
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    now: datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> VenueSchedule:
    """List booked slots at *location* within a window, earliest first.

    The window starts at *start_date* (default: now) and ends at *end_date*
    (default: start + *window_days*).
    """
    if not location:
        raise ValidationError("Location is required")

    window_start = as_utc(start_date) if start_date else as_utc(now or datetime.now(timezone.utc))
    window_end = as_utc(end_date) if end_date else window_start + timedelta(days=window_days)

    booked = [
        e
        for e in event_repo.find_at_venue(location, BOOKED_STATUSES)
        if touches_window(e, window_start, window_end)
    ]
    booked.sort(key=lambda e: e.start_date)

    return VenueSchedule(
        location=location,
        start_date=window_start,
        end_date=window_end,
        booked_slots=[
            BookedSlot(
                id=e.id,
                title=e.title,
                start=e.start_date,
                end=e.end_date,
                status=e.status,
                organizer=organizer_name(user_repo, e.created_by),
            )
            for e in booked
        ],
    )
