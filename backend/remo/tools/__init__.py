"""Tools for entity extraction, date/time resolution and calendar access."""

from .calendar import CalendarService, CalendarEvent, CalendarNotAuthorizedError, GoogleCalendarTool
from .extractors import analyze_meeting_request, extract_time, ExtractionResult
from .time_parser import TimeParser, resolve_date, resolve_weekday
from .validation import SlotValidator, ValidationResult, validate_email

__all__ = [
    "CalendarService",
    "CalendarEvent",
    "CalendarNotAuthorizedError",
    "GoogleCalendarTool",
    "analyze_meeting_request",
    "extract_time",
    "ExtractionResult",
    "TimeParser",
    "resolve_date",
    "resolve_weekday",
    "SlotValidator",
    "ValidationResult",
    "validate_email"
]
