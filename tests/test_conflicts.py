"""Tests for venue conflict detection and availability checks."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from campus_events.domain.errors import ValidationError
from campus_events.domain.models import Event, EventStatus, User, UserRole
from campus_events.repos.memory import EventRepository, UserRepository
from campus_events.services.conflicts import (
    check_availability,
    check_conflict,
    overlaps_booking,
)

VENUE = "Main Hall"


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 5, 4, hour, minute, tzinfo=timezone.utc)


class _StrictEventRepository(EventRepository):
    """Fails the test if any query reaches the store."""

    def find_at_venue(self, *args, **kwargs):
        raise AssertionError("repository should not be queried")


@pytest.fixture()
def repos():
    users = UserRepository()
    organizer = User(
        email="tech@campus.edu",
        password_hash="x",
        name="Tech Club President",
        role=UserRole.ORGANIZER,
        club_name="Technology Club",
    )
    users.add(organizer)
    events = EventRepository()
    return events, users, organizer


def _book(events: EventRepository, organizer: User, start: datetime, end: datetime, **overrides) -> Event:
    defaults = dict(
        title="Existing booking",
        location=VENUE,
        start_date=start,
        end_date=end,
        max_attendees=20,
        created_by=organizer.id,
        status=EventStatus.APPROVED,
    )
    defaults.update(overrides)
    event = Event(**defaults)
    events.add(event)
    return event


def _check(repos, start, end, location=VENUE, exclude=None):
    events, users, _ = repos
    return check_conflict(
        location, start, end, event_repo=events, user_repo=users, exclude_event_id=exclude
    )


# ---------------------------------------------------------------------------
# Boundary scenarios against an existing 10:00–12:00 booking
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (_at(12), _at(13), False),  # back-to-back after
        (_at(9), _at(10), False),  # back-to-back before
        (_at(11), _at(13), True),  # starts during existing
        (_at(9), _at(11), True),  # ends during existing
        (_at(9), _at(13), True),  # contains existing
        (_at(10, 30), _at(11, 30), True),  # inside existing
        (_at(10), _at(12), True),  # identical slot
        (_at(13), _at(14), False),  # later, disjoint
    ],
)
def test_boundary_cases(repos, start, end, expected):
    events, _, organizer = repos
    _book(events, organizer, _at(10), _at(12))

    result = _check(repos, start, end)

    assert result.has_conflict is expected


def test_predicate_matches_general_overlap_on_hour_grid():
    existing = Event(
        title="x",
        location=VENUE,
        start_date=_at(10),
        end_date=_at(12),
        max_attendees=1,
        created_by="u",
    )
    for a in range(8, 15):
        for b in range(a + 1, 16):
            new_start, new_end = _at(a), _at(b)
            general = new_start < existing.end_date and existing.start_date < new_end
            assert overlaps_booking(existing, new_start, new_end) is general, (a, b)


def test_conflict_reports_blocking_event_details(repos):
    events, _, organizer = repos
    booked = _book(events, organizer, _at(10), _at(12), title="Hackathon")

    result = _check(repos, _at(11), _at(13))

    assert result.has_conflict is True
    summary = result.conflicting_event
    assert summary.id == booked.id
    assert summary.title == "Hackathon"
    assert summary.start_date == _at(10)
    assert summary.end_date == _at(12)
    assert summary.organizer == "Tech Club President"


def test_organizer_falls_back_to_club_name(repos):
    events, users, _ = repos
    club = User(email="club@campus.edu", password_hash="x", name="", club_name="Chess Club")
    users.add(club)
    _book(events, club, _at(10), _at(12))

    result = _check(repos, _at(11), _at(13))

    assert result.conflicting_event.organizer == "Chess Club"


@pytest.mark.parametrize("status", [EventStatus.REJECTED, EventStatus.CANCELLED])
def test_rejected_and_cancelled_events_never_conflict(repos, status):
    events, _, organizer = repos
    _book(events, organizer, _at(10), _at(12), status=status)

    assert _check(repos, _at(9), _at(13)).has_conflict is False


def test_pending_events_block_the_venue(repos):
    events, _, organizer = repos
    _book(events, organizer, _at(10), _at(12), status=EventStatus.PENDING)

    assert _check(repos, _at(11), _at(12)).has_conflict is True


def test_excluding_own_event_prevents_self_conflict(repos):
    events, _, organizer = repos
    own = _book(events, organizer, _at(10), _at(12))

    assert _check(repos, _at(10), _at(12), exclude=own.id).has_conflict is False
    assert _check(repos, _at(10), _at(12)).has_conflict is True


def test_venue_match_is_exact(repos):
    events, _, organizer = repos
    _book(events, organizer, _at(10), _at(12))

    assert _check(repos, _at(10), _at(12), location="main hall").has_conflict is False
    assert _check(repos, _at(10), _at(12), location="Main Hall ").has_conflict is False
    assert _check(repos, _at(10), _at(12), location="Lecture Room 2").has_conflict is False


def test_first_match_is_reported_and_result_is_stable(repos):
    events, _, organizer = repos
    first = _book(events, organizer, _at(10), _at(11), title="First")
    _book(events, organizer, _at(11), _at(12), title="Second")

    results = [_check(repos, _at(9), _at(13)) for _ in range(3)]

    assert all(r.conflicting_event.id == first.id for r in results)
    assert results[0] == results[1] == results[2]


def test_naive_datetimes_are_treated_as_utc(repos):
    events, _, organizer = repos
    _book(events, organizer, _at(10), _at(12))

    result = _check(repos, datetime(2026, 5, 4, 11), datetime(2026, 5, 4, 13))

    assert result.has_conflict is True


# ---------------------------------------------------------------------------
# check_availability
# ---------------------------------------------------------------------------


def test_availability_when_free(repos):
    events, users, _ = repos

    resp = check_availability(VENUE, _at(10), _at(12), event_repo=events, user_repo=users)

    assert resp.available is True
    assert resp.conflict is None
    assert resp.message == "Venue is available for the selected time slot"


def test_availability_when_booked(repos):
    events, users, organizer = repos
    booked = _book(events, organizer, _at(10), _at(12))

    resp = check_availability(VENUE, _at(11), _at(12), event_repo=events, user_repo=users)

    assert resp.available is False
    assert resp.conflict.id == booked.id
    assert resp.message == "Venue is already booked during this time"


@pytest.mark.parametrize(
    ("start", "end"),
    [(_at(12), _at(12)), (_at(13), _at(12))],
)
def test_availability_rejects_non_increasing_interval_before_querying(start, end):
    with pytest.raises(ValidationError, match="End date must be after start date"):
        check_availability(
            VENUE,
            start,
            end,
            event_repo=_StrictEventRepository(),
            user_repo=UserRepository(),
        )


@pytest.mark.parametrize(
    ("location", "start", "end"),
    [
        ("", _at(10), _at(12)),
        (None, _at(10), _at(12)),
        (VENUE, None, _at(12)),
        (VENUE, _at(10), None),
    ],
)
def test_availability_requires_all_fields(location, start, end):
    with pytest.raises(ValidationError, match="required"):
        check_availability(
            location,
            start,
            end,
            event_repo=_StrictEventRepository(),
            user_repo=UserRepository(),
        )
