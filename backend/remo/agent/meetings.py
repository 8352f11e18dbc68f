"""
Calendar flows that act on existing meetings: listing, cancelling and
updating. Cancellation may span turns through the confirm_cancel and
select_cancel dialogue shapes.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Callable, Tuple
import re
import pytz

from .prompts import (
    AUTH_REQUIRED,
    NO_MEETINGS_FOUND,
    CANCEL_SINGLE_FOUND,
    CANCEL_SELECT_HEADER,
    CANCEL_SELECT_FOOTER,
    CANCEL_SELECT_INVALID,
    MEETING_CANCELLED,
    MEETING_CANCEL_FAILED,
    MEETING_KEPT,
    CANCEL_LOOKUP_ERROR,
    LIST_ERROR,
    UPDATE_NO_MEETINGS,
    UPDATE_NO_MATCH,
    UPDATE_TIME_DONE,
    UPDATE_TIME_FAILED,
    UPDATE_DESCRIPTION_DONE,
    UPDATE_DESCRIPTION_FAILED,
    UPDATE_OPTIONS,
    UPDATE_ERROR,
)
from .sessions import SessionStore
from .state import (
    CancelConfirmDialogue,
    CancelSelectDialogue,
    create_cancel_confirmation,
    create_cancel_selection,
)
from ..tools.calendar import CalendarService, CalendarEvent, CalendarNotAuthorizedError
from ..tools.extractors import extract_time, extract_name, extract_description, strip_date_phrases
from ..tools.time_parser import TimeParser, WEEKDAY_PATTERN
from ..utils.config import settings
from ..utils.logger import logger

CANCEL_KEYWORDS = ['cancel', 'stop', 'no', 'quit', 'exit', 'nevermind', 'never mind']

ORDINAL_DAY_PATTERN = re.compile(r'\d{1,2}(?:st|nd|rd|th)\b')
NUMERIC_DAY_PATTERN = re.compile(r'\d{1,2}[-/]\d{1,2}')
MERIDIAN_TIME_PATTERN = re.compile(r'(\d{1,2})(?::(\d{2}))?\s*(am|pm)')
SELECTION_PATTERN = re.compile(r'\d+')
NEW_VALUE_PATTERN = re.compile(r'.*\bto\s+(.+)$')
CLOCK_TOKEN_PATTERN = re.compile(r'(?:\bat\s+)?\b\d{1,2}(?::\d{2}\s*(?:am|pm)?|\s*(?:am|pm))\b')


def contains_cancel_keyword(message: str) -> bool:
    # Substring match, so "noon" and "another" also count
    lower_message = message.lower()
    return any(keyword in lower_message for keyword in CANCEL_KEYWORDS)


def format_event(event: CalendarEvent) -> str:
    lines = [
        f"📅 Date: {event['start'].strftime('%A, %B %d, %Y')}",
        f"⏰ Time: {event['start'].strftime('%I:%M %p')}",
        f"📌 {event['summary'] or 'Untitled meeting'}",
    ]
    if event['attendees']:
        lines.append(f"👥 With: {', '.join(event['attendees'])}")
    return "\n".join(lines)


def format_period(start: date, end: date) -> str:
    if start == end:
        return start.strftime('%A, %B %d')
    return f"{start.strftime('%A, %B %d')} to {end.strftime('%A, %B %d')}"


def list_window(message: str, parser: TimeParser) -> Tuple[date, date]:
    """Inclusive date range a listing request asks about; today by default."""
    lower_message = message.lower()
    today = parser.today

    if ORDINAL_DAY_PATTERN.search(lower_message) or NUMERIC_DAY_PATTERN.search(lower_message):
        resolved = parser.resolve_date(lower_message)
        if resolved:
            return resolved, resolved

    if 'day after tomorrow' in lower_message:
        target = today + timedelta(days=2)
        return target, target

    if 'tomorrow' in lower_message:
        target = today + timedelta(days=1)
        return target, target

    if 'this week' in lower_message:
        return today, today + timedelta(days=6 - today.weekday())

    if 'next week' in lower_message:
        monday = today + timedelta(days=7 - today.weekday())
        return monday, monday + timedelta(days=6)

    weekday_match = WEEKDAY_PATTERN.search(lower_message)
    if weekday_match:
        target = parser.resolve_weekday(weekday_match.group(2), weekday_match.group(1) or '')
        if target:
            return target, target

    return today, today


def starts_at(event: CalendarEvent, clock: str) -> bool:
    return event['start'].strftime('%H:%M') == clock


def meridian_time(text: str) -> Optional[str]:
    match = MERIDIAN_TIME_PATTERN.search(text)
    if not match:
        return None
    return extract_time(match.group(0))


class MeetingFlows:
    def __init__(
        self,
        store: SessionStore,
        calendar: CalendarService,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.calendar = calendar
        self.timezone = timezone or settings.default_timezone
        self.clock = clock or (lambda: datetime.now(pytz.timezone(self.timezone)))

    def _parser(self) -> TimeParser:
        return TimeParser(self.timezone, now=self.clock())

    def _ensure_authorized(self, user_id: str, reply: Callable[[str], None]) -> bool:
        if self.calendar.is_authorized(user_id):
            return True
        self._request_authorization(user_id, reply)
        return False

    def _request_authorization(self, user_id: str, reply: Callable[[str], None]) -> None:
        auth_url = self.calendar.start_auth(user_id)
        logger.info(f"Calendar authorization requested for {user_id}")
        reply(AUTH_REQUIRED.format(auth_url=auth_url))

    def list_meetings(self, user_id: str, message: str, reply: Callable[[str], None]) -> None:
        try:
            if not self._ensure_authorized(user_id, reply):
                return

            start, end = list_window(message, self._parser())
            events = self.calendar.list_events(user_id, start_date=start, end_date=end)

            if not events:
                reply(NO_MEETINGS_FOUND.format(period=format_period(start, end)))
                return

            by_day = {}
            for event in events:
                by_day.setdefault(event['start'].date(), []).append(event)

            for day, day_events in by_day.items():
                lines = [f"📅 {day.strftime('%A, %B %d')}:\n"]
                for event in day_events:
                    line = f"⏰ {event['start'].strftime('%I:%M %p')} - {event['summary'] or 'Untitled meeting'}"
                    if event['attendees']:
                        line += f"\n   👥 With: {', '.join(event['attendees'])}"
                    lines.append(line)
                reply("\n".join(lines))

        except CalendarNotAuthorizedError:
            self._request_authorization(user_id, reply)
        except Exception as e:
            logger.error(f"Error listing meetings for {user_id}: {e}")
            reply(LIST_ERROR)

    def start_cancellation(self, user_id: str, message: str, reply: Callable[[str], None]) -> None:
        try:
            if not self._ensure_authorized(user_id, reply):
                return

            parser = self._parser()
            lower_message = message.lower()
            target = parser.today + timedelta(days=1) if 'tomorrow' in lower_message else parser.today
            events = self.calendar.list_events(user_id, start_date=target, end_date=target)

            clock = meridian_time(lower_message)
            if clock:
                at_time = [event for event in events if starts_at(event, clock)]
                if at_time:
                    events = at_time

            day = target.strftime('%A, %B %d')
            if not events:
                reply(NO_MEETINGS_FOUND.format(period=day))
                return

            if len(events) == 1:
                self.store.set_dialogue(user_id, create_cancel_confirmation(events[0]))
                reply(CANCEL_SINGLE_FOUND.format(event=format_event(events[0])))
                return

            self.store.set_dialogue(user_id, create_cancel_selection(events))
            listing = "\n\n".join(
                f"{index}. {format_event(event)}" for index, event in enumerate(events, start=1)
            )
            reply(CANCEL_SELECT_HEADER.format(count=len(events), day=day) + listing + "\n" + CANCEL_SELECT_FOOTER)

        except CalendarNotAuthorizedError:
            self._request_authorization(user_id, reply)
        except Exception as e:
            logger.error(f"Error handling cancel request for {user_id}: {e}")
            reply(CANCEL_LOOKUP_ERROR)

    def continue_cancellation(self, user_id: str, dialogue, message: str, reply: Callable[[str], None]) -> None:
        if dialogue["kind"] == "select_cancel":
            self._select_for_cancellation(user_id, dialogue, message, reply)
        else:
            self._confirm_cancellation(user_id, dialogue, message, reply)

    def _select_for_cancellation(
        self,
        user_id: str,
        dialogue: CancelSelectDialogue,
        message: str,
        reply: Callable[[str], None]
    ) -> None:
        events = dialogue["events"]

        if contains_cancel_keyword(message):
            self.store.clear_dialogue(user_id)
            reply(MEETING_KEPT)
            return

        match = SELECTION_PATTERN.search(message)
        if match and 1 <= int(match.group(0)) <= len(events):
            event = events[int(match.group(0)) - 1]
            self.store.set_dialogue(user_id, create_cancel_confirmation(event))
            reply(CANCEL_SINGLE_FOUND.format(event=format_event(event)))
            return

        reply(CANCEL_SELECT_INVALID.format(count=len(events)))

    def _confirm_cancellation(
        self,
        user_id: str,
        dialogue: CancelConfirmDialogue,
        message: str,
        reply: Callable[[str], None]
    ) -> None:
        if "yes" not in message.lower():
            self.store.clear_dialogue(user_id)
            reply(MEETING_KEPT)
            return

        event = dialogue["event"]
        try:
            cancelled = self.calendar.delete_event(user_id, event["id"])
        except CalendarNotAuthorizedError:
            self._request_authorization(user_id, reply)
            return

        self.store.clear_dialogue(user_id)
        if cancelled:
            logger.info(f"Cancelled meeting {event['id']} for {user_id}")
            reply(MEETING_CANCELLED)
        else:
            reply(MEETING_CANCEL_FAILED)

    def update_meeting(self, user_id: str, message: str, reply: Callable[[str], None]) -> None:
        """
        Apply a one-shot change to an existing meeting.

        The meeting is looked up on today (or tomorrow, when the request says
        so) and narrowed by attendee name or by an "at 3pm" style time before
        the word "to". Whatever follows "to" is read as the new date and/or
        time; otherwise a "description: ..." clause updates the description.
        """
        try:
            if not self._ensure_authorized(user_id, reply):
                return

            parser = self._parser()
            lower_message = message.lower()
            new_value = NEW_VALUE_PATTERN.search(lower_message)
            selector = lower_message[:new_value.start(1)] if new_value else lower_message

            target = parser.today + timedelta(days=1) if 'tomorrow' in selector else parser.today
            day = 'tomorrow' if target != parser.today else 'today'
            events = self.calendar.list_events(user_id, start_date=target, end_date=target)

            if not events:
                reply(UPDATE_NO_MEETINGS.format(day=day))
                return

            event = self._pick_event(events, message, selector)
            if event is None:
                reply(UPDATE_NO_MATCH.format(day=day))
                return

            if 'cancel' in selector:
                cancelled = self.calendar.delete_event(user_id, event['id'])
                reply(MEETING_CANCELLED if cancelled else MEETING_CANCEL_FAILED)
                return

            if new_value:
                new_start = self._new_start(parser, event, new_value.group(1))
                if new_start:
                    rescheduled = self.calendar.reschedule_event(user_id, event['id'], new_start)
                    if rescheduled:
                        reply(UPDATE_TIME_DONE.format(time=new_start.strftime('%A, %B %d at %I:%M %p')))
                    else:
                        reply(UPDATE_TIME_FAILED)
                    return

            description = extract_description(message)
            if description:
                updated = self.calendar.update_event(user_id, event['id'], description=description)
                reply(UPDATE_DESCRIPTION_DONE if updated else UPDATE_DESCRIPTION_FAILED)
                return

            reply(UPDATE_OPTIONS)

        except CalendarNotAuthorizedError:
            self._request_authorization(user_id, reply)
        except Exception as e:
            logger.error(f"Error updating meeting for {user_id}: {e}")
            reply(UPDATE_ERROR)

    def _pick_event(self, events: List[CalendarEvent], message: str, selector: str) -> Optional[CalendarEvent]:
        candidates = events

        name = extract_name(message)
        if name:
            candidates = [
                event for event in candidates
                if any(name.lower() in email.lower() for email in event['attendees'])
                or name.lower() in (event['summary'] or '').lower()
            ]

        clock = meridian_time(selector)
        if clock:
            at_time = [event for event in candidates if starts_at(event, clock)]
            if at_time:
                candidates = at_time

        if len(candidates) == 1 or (candidates and (name or clock)):
            return candidates[0]
        return None

    def _new_start(self, parser: TimeParser, event: CalendarEvent, text: str) -> Optional[datetime]:
        new_time = extract_time(strip_date_phrases(text))
        # A bare clock would otherwise parse as a date of today
        date_text = CLOCK_TOKEN_PATTERN.sub(' ', text).strip()
        new_date = parser.resolve_date(date_text) if date_text else None
        if not new_time and not new_date:
            return None

        day = new_date or event['start'].date()
        clock = new_time or event['start'].strftime('%H:%M')
        return parser.combine(day, clock)
