"""FastAPI application: entry point for the campus event platform API."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_events.config import get_settings
from campus_events.domain.bus import EventBus
from campus_events.domain.errors import CampusEventsError
from campus_events.domain.handlers import HandlerRegistry
from campus_events.domain.models import (
    AvailabilityResponse,
    DashboardStats,
    EventCreateRequest,
    EventFilter,
    EventStatus,
    EventUpdateRequest,
    LoginRequest,
    LoginResponse,
    RegisterUserRequest,
    RegistrationStatus,
    User,
    UserPublic,
    UserRole,
    VenueSchedule,
)
from campus_events.logging_config import configure_logging
from campus_events.repos.memory import (
    EventRepository,
    RegistrationRepository,
    TokenRepository,
    UserRepository,
    seed_demo_data,
)
from campus_events.services import admin as admin_service
from campus_events.services import auth as auth_service
from campus_events.services import events as event_service
from campus_events.services import registrations as registration_service
from campus_events.services.conflicts import check_availability, get_venue_schedule

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
user_repo = UserRepository()
event_repo = EventRepository()
registration_repo = RegistrationRepository()
token_repo = TokenRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    registration_repo=registration_repo,
)

if settings.seed_demo_data:
    seed_demo_data(
        user_repo,
        event_repo,
        lambda password: auth_service.hash_password(password, settings.bcrypt_rounds),
    )
    logger.info("Loaded demo users and events")


@app.exception_handler(CampusEventsError)
async def _handle_domain_error(request: Request, exc: CampusEventsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "%s %s rejected (%d): %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# ── Auth dependencies ─────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


def _token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    return credentials.credentials if credentials else None


def current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    return auth_service.authenticate(_token(credentials), user_repo, token_repo)


def optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User | None:
    if credentials is None:
        return None
    return auth_service.authenticate(_token(credentials), user_repo, token_repo)


def require_roles(*roles: UserRole):
    def _dependency(user: User = Depends(current_user)) -> User:
        auth_service.ensure_role(user, *roles)
        return user

    return _dependency


require_organizer = require_roles(UserRole.ORGANIZER, UserRole.ADMIN)
require_student = require_roles(UserRole.STUDENT)
require_admin = require_roles(UserRole.ADMIN)


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return {"status": "OK", "message": f"{settings.app_name} is running"}


# Auth


@app.post("/api/auth/register", status_code=201)
def register(payload: RegisterUserRequest) -> dict:
    user = auth_service.register_user(
        payload,
        user_repo,
        rounds=settings.bcrypt_rounds,
        min_password_length=settings.min_password_length,
    )
    return {"message": "User registered successfully", "user": UserPublic.from_user(user)}


@app.post("/api/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest) -> LoginResponse:
    token, user = auth_service.login(payload.email, payload.password, user_repo, token_repo)
    return LoginResponse(token=token, user=UserPublic.from_user(user))


@app.get("/api/auth/me", response_model=UserPublic)
def me(user: User = Depends(current_user)) -> UserPublic:
    return UserPublic.from_user(user)


@app.post("/api/auth/logout")
def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    _: User = Depends(current_user),
) -> dict:
    token_repo.revoke(_token(credentials))
    return {"message": "Logged out"}


# Events: static paths must be registered before /{event_id}


@app.get("/api/events")
def list_events(
    status: EventStatus | None = None,
    category: str | None = None,
    search: str | None = None,
    upcoming: bool = False,
    viewer: User | None = Depends(optional_user),
) -> dict:
    filters = EventFilter(status=status, category=category, search=search, upcoming=upcoming)
    events = event_service.list_events(
        filters,
        viewer,
        event_repo=event_repo,
        user_repo=user_repo,
        registration_repo=registration_repo,
    )
    return {"events": events}


@app.get("/api/events/check-availability", response_model=AvailabilityResponse)
def events_check_availability(
    location: str | None = None,
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    exclude_event_id: str | None = Query(default=None, alias="excludeEventId"),
) -> AvailabilityResponse:
    return check_availability(
        location,
        start_date,
        end_date,
        event_repo=event_repo,
        user_repo=user_repo,
        exclude_event_id=exclude_event_id,
    )


@app.get("/api/events/venue-schedule", response_model=VenueSchedule)
def events_venue_schedule(
    location: str | None = None,
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> VenueSchedule:
    return get_venue_schedule(
        location,
        event_repo=event_repo,
        user_repo=user_repo,
        start_date=start_date,
        end_date=end_date,
        window_days=settings.default_schedule_days,
    )


@app.get("/api/events/my/events")
def list_my_events(user: User = Depends(require_organizer)) -> dict:
    events = event_service.my_events(
        user, event_repo=event_repo, registration_repo=registration_repo
    )
    return {"events": events}


@app.get("/api/events/{event_id}")
def get_event(event_id: str) -> dict:
    detail = event_service.get_event_detail(
        event_id,
        event_repo=event_repo,
        user_repo=user_repo,
        registration_repo=registration_repo,
    )
    return {"event": detail}


@app.post("/api/events", status_code=201)
def create_event(payload: EventCreateRequest, user: User = Depends(require_organizer)) -> dict:
    event = event_service.create_event(
        payload, user, event_repo=event_repo, user_repo=user_repo, bus=event_bus
    )
    return {"message": "Event created successfully and pending approval", "event": event}


@app.put("/api/events/{event_id}")
def update_event(
    event_id: str,
    payload: EventUpdateRequest,
    user: User = Depends(require_organizer),
) -> dict:
    event = event_service.update_event(
        event_id, payload, user, event_repo=event_repo, user_repo=user_repo
    )
    return {"message": "Event updated successfully", "event": event}


@app.delete("/api/events/{event_id}")
def delete_event(event_id: str, user: User = Depends(require_organizer)) -> dict:
    event_service.delete_event(event_id, user, event_repo=event_repo, bus=event_bus)
    return {"message": "Event deleted successfully"}


# Registrations


@app.post("/api/registrations/events/{event_id}/register", status_code=201)
def register_for_event(event_id: str, user: User = Depends(require_student)) -> dict:
    registration = registration_service.register_for_event(
        event_id,
        user,
        event_repo=event_repo,
        registration_repo=registration_repo,
        bus=event_bus,
    )
    return {"message": "Successfully registered for event", "registration": registration}


@app.delete("/api/registrations/events/{event_id}/cancel")
def cancel_registration(event_id: str, user: User = Depends(require_student)) -> dict:
    registration_service.cancel_registration(
        event_id,
        user,
        event_repo=event_repo,
        registration_repo=registration_repo,
        bus=event_bus,
    )
    return {"message": "Registration cancelled successfully"}


@app.get("/api/registrations/my")
def list_my_registrations(
    status: RegistrationStatus | None = None,
    upcoming: bool = False,
    user: User = Depends(require_student),
) -> dict:
    registrations = registration_service.my_registrations(
        user,
        event_repo=event_repo,
        user_repo=user_repo,
        registration_repo=registration_repo,
        status=status,
        upcoming=upcoming,
    )
    return {"registrations": registrations}


@app.get("/api/registrations/events/{event_id}/attendees")
def list_event_attendees(event_id: str, user: User = Depends(require_organizer)) -> dict:
    registrations = registration_service.event_attendees(
        event_id,
        user,
        event_repo=event_repo,
        user_repo=user_repo,
        registration_repo=registration_repo,
    )
    return {"registrations": registrations}


@app.get("/api/registrations/{registration_id}")
def get_registration(registration_id: str, user: User = Depends(current_user)) -> dict:
    registration = registration_service.get_registration(
        registration_id,
        user,
        event_repo=event_repo,
        user_repo=user_repo,
        registration_repo=registration_repo,
    )
    return {"registration": registration}


# Admin


@app.get("/api/admin/events/pending")
def list_pending_events(_: User = Depends(require_admin)) -> dict:
    events = admin_service.pending_events(
        event_repo=event_repo, user_repo=user_repo, registration_repo=registration_repo
    )
    return {"events": events}


@app.put("/api/admin/events/{event_id}/approve")
def approve_event(event_id: str, _: User = Depends(require_admin)) -> dict:
    event = admin_service.review_event(
        event_id, EventStatus.APPROVED, event_repo=event_repo, bus=event_bus
    )
    return {"message": "Event approved successfully", "event": event}


@app.put("/api/admin/events/{event_id}/reject")
def reject_event(event_id: str, _: User = Depends(require_admin)) -> dict:
    event = admin_service.review_event(
        event_id, EventStatus.REJECTED, event_repo=event_repo, bus=event_bus
    )
    return {"message": "Event rejected", "event": event}


@app.get("/api/admin/users")
def list_users(_: User = Depends(require_admin)) -> dict:
    users = admin_service.list_users_with_counts(
        user_repo=user_repo, event_repo=event_repo, registration_repo=registration_repo
    )
    return {"users": users}


@app.put("/api/admin/users/{user_id}/toggle-status")
def toggle_user_status(user_id: str, admin: User = Depends(require_admin)) -> dict:
    user = admin_service.toggle_user_status(
        user_id, admin, user_repo=user_repo, token_repo=token_repo
    )
    state = "activated" if user.is_active else "deactivated"
    return {"message": f"User {state} successfully", "user": UserPublic.from_user(user)}


@app.get("/api/admin/dashboard/stats")
def get_dashboard_stats(_: User = Depends(require_admin)) -> dict[str, DashboardStats]:
    stats = admin_service.dashboard_stats(
        user_repo=user_repo, event_repo=event_repo, registration_repo=registration_repo
    )
    return {"stats": stats}
