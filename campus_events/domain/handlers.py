"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from campus_events.domain.bus import EventBus
from campus_events.domain.events import (
    EventDeleted,
    EventReviewed,
    EventSubmitted,
    RegistrationCancelled,
    RegistrationCreated,
)
from campus_events.repos.memory import EventRepository, RegistrationRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.registration_repo = registration_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventSubmitted, self.on_event_submitted)
        self.bus.subscribe(EventReviewed, self.on_event_reviewed)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(RegistrationCreated, self.on_registration_created)
        self.bus.subscribe(RegistrationCancelled, self.on_registration_cancelled)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_submitted(self, event: EventSubmitted) -> None:
        logger.info("Event %s submitted by %s, pending approval", event.event_id, event.created_by)

    def on_event_reviewed(self, event: EventReviewed) -> None:
        logger.info("Event %s %s", event.event_id, event.status)

    def on_event_deleted(self, event: EventDeleted) -> None:
        self.registration_repo.delete_for_event(event.event_id)
        logger.info("Event %s deleted along with its registrations", event.event_id)

    def on_registration_created(self, event: RegistrationCreated) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return
        stored.current_attendees += 1
        logger.info(
            "User %s registered for event %s (%d/%d)",
            event.user_id,
            event.event_id,
            stored.current_attendees,
            stored.max_attendees,
        )

    def on_registration_cancelled(self, event: RegistrationCancelled) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return
        stored.current_attendees = max(0, stored.current_attendees - 1)
        logger.info("User %s cancelled registration for event %s", event.user_id, event.event_id)
