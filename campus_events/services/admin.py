"""Admin review queue, account management and dashboard counts."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from campus_events.domain.bus import EventBus
from campus_events.domain.errors import NotFoundError, ValidationError
from campus_events.domain.events import EventReviewed
from campus_events.domain.models import (
    DashboardStats,
    Event,
    EventStatus,
    EventView,
    User,
    UserPublic,
    UserWithCounts,
    as_utc,
)
from campus_events.repos.memory import (
    EventRepository,
    RegistrationRepository,
    TokenRepository,
    UserRepository,
)
from campus_events.services.conflicts import organizer_name
from campus_events.services.events import get_or_404

logger = logging.getLogger(__name__)


def pending_events(
    *,
    event_repo: EventRepository,
    user_repo: UserRepository,
    registration_repo: RegistrationRepository,
) -> list[EventView]:
    """Events awaiting review, newest submission first."""
    return [
        EventView(
            event=e,
            organizer=organizer_name(user_repo, e.created_by),
            registration_count=registration_repo.count_for_event(e.id),
        )
        for e in event_repo.list_by_status(EventStatus.PENDING)
    ]


def review_event(
    event_id: str,
    decision: EventStatus,
    *,
    event_repo: EventRepository,
    bus: EventBus,
) -> Event:
    """Move a pending event to *decision* (approved or rejected)."""
    if decision not in (EventStatus.APPROVED, EventStatus.REJECTED):
        raise ValueError(f"Cannot review an event into {decision}")

    event = get_or_404(event_repo, event_id)
    if event.status != EventStatus.PENDING:
        raise ValidationError("Event is not pending approval")

    event.status = decision
    event.updated_at = datetime.now(timezone.utc)
    bus.publish(EventReviewed(event_id=event.id, status=decision))
    return event


def list_users_with_counts(
    *,
    user_repo: UserRepository,
    event_repo: EventRepository,
    registration_repo: RegistrationRepository,
) -> list[UserWithCounts]:
    return [
        UserWithCounts(
            user=UserPublic.from_user(u),
            events_created=len(event_repo.list_by_creator(u.id)),
            registrations=registration_repo.count_for_user(u.id),
        )
        for u in user_repo.list_all()
    ]


def toggle_user_status(
    user_id: str,
    admin: User,
    *,
    user_repo: UserRepository,
    token_repo: TokenRepository,
) -> User:
    user = user_repo.get(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.id == admin.id:
        raise ValidationError("Cannot deactivate your own account")

    user.is_active = not user.is_active
    if not user.is_active:
        token_repo.revoke_for_user(user.id)
    logger.info(
        "User %s %s by admin %s",
        user.id,
        "activated" if user.is_active else "deactivated",
        admin.id,
    )
    return user


def dashboard_stats(
    *,
    user_repo: UserRepository,
    event_repo: EventRepository,
    registration_repo: RegistrationRepository,
    now: datetime | None = None,
) -> DashboardStats:
    now = as_utc(now or datetime.now(timezone.utc))
    return DashboardStats(
        total_users=user_repo.count(),
        total_events=event_repo.count(),
        total_registrations=registration_repo.count_active(),
        pending_events=event_repo.count(EventStatus.PENDING),
        upcoming_events=event_repo.count_upcoming(now),
        users_by_role=user_repo.count_by_role(),
    )
