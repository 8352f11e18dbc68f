"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import Mock

import pytest
import pytz

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

TIMEZONE = "Asia/Kolkata"

# Wednesday
FIXED_NOW = pytz.timezone(TIMEZONE).localize(datetime(2026, 10, 14, 10, 0))


class FakeClock:
    """Naive wall clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def time_parser():
    """TimeParser pinned to Wednesday 2026-10-14 10:00 IST."""
    from remo.tools.time_parser import TimeParser

    return TimeParser(TIMEZONE, now=FIXED_NOW)


@pytest.fixture
def session_clock():
    return FakeClock(datetime(2026, 10, 14, 10, 0))


@pytest.fixture
def store(session_clock):
    """Create SessionStore with a controllable clock."""
    from remo.agent.sessions import SessionStore

    return SessionStore(
        idle_timeout=timedelta(minutes=5),
        sweep_interval=0.05,
        clock=session_clock
    )


@pytest.fixture
def calendar():
    """Create mock calendar service for an authorized user."""
    from remo.tools.calendar import CalendarService

    cal = Mock(spec=CalendarService)
    cal.is_authorized.return_value = True
    cal.start_auth.return_value = "https://accounts.example.com/consent?state=abc"
    cal.list_events.return_value = []
    cal.create_event.return_value = True
    cal.update_event.return_value = True
    cal.reschedule_event.return_value = True
    cal.delete_event.return_value = True
    return cal


@pytest.fixture
def mock_llm():
    """Create mock chat client."""
    llm = Mock()
    llm.complete.return_value = "Test response"
    return llm


@pytest.fixture
def assistant(store, calendar, mock_llm):
    """Create SchedulingAssistant with mocked collaborators."""
    from remo.agent.assistant import SchedulingAssistant

    return SchedulingAssistant(
        store,
        calendar,
        mock_llm,
        timezone=TIMEZONE,
        clock=lambda: FIXED_NOW
    )


@pytest.fixture
def send(assistant):
    """Send one message as a user and collect every reply."""

    def _send(text: str, user_id: str = "user1"):
        replies = []
        assistant.handle_message(user_id, text, replies.append)
        return replies

    return _send


@pytest.fixture
def make_event():
    """Build CalendarEvent dicts on the fixed test day."""
    tz = pytz.timezone(TIMEZONE)

    def _make_event(event_id: str, hour: int, minute: int = 0, summary: str = "Meeting",
                    attendees=None, day: int = 14, duration: int = 30):
        start = tz.localize(datetime(2026, 10, day, hour, minute))
        return {
            "id": event_id,
            "summary": summary,
            "description": None,
            "start": start,
            "end": start + timedelta(minutes=duration),
            "attendees": list(attendees or []),
        }

    return _make_event
