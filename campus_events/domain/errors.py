"""Exceptions raised by services and rendered by the HTTP layer."""

from __future__ import annotations

from campus_events.domain.models import EventSummary


class CampusEventsError(Exception):
    status_code = 500
    title = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.title, "message": self.message}


class ValidationError(CampusEventsError):
    status_code = 400
    title = "Validation Error"


class UnauthorizedError(CampusEventsError):
    status_code = 401
    title = "Unauthorized"


class ForbiddenError(CampusEventsError):
    status_code = 403
    title = "Forbidden"


class NotFoundError(CampusEventsError):
    status_code = 404
    title = "Not Found"


class ConflictError(CampusEventsError):
    """Raised when a venue is already booked for an overlapping interval."""

    status_code = 409
    title = "Venue Conflict"

    def __init__(self, message: str, conflicting_event: EventSummary) -> None:
        super().__init__(message)
        self.conflicting_event = conflicting_event

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["conflictingEvent"] = self.conflicting_event.model_dump(mode="json", by_alias=True)
        return payload
