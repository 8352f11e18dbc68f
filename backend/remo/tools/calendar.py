from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from google_auth_httplib2 import AuthorizedHttp
from datetime import datetime, date, timedelta
from typing import List, Dict, Optional, Any, TypedDict
import httplib2
import pytz
from dateutil import parser

from ..utils.config import settings
from ..utils.logger import logger


class CalendarNotAuthorizedError(Exception):
    """Raised when a user has no stored calendar token."""

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} has not authorized calendar access")
        self.user_id = user_id


class CalendarEvent(TypedDict):
    id: str
    summary: Optional[str]
    description: Optional[str]
    start: datetime
    end: datetime
    attendees: List[str]


def to_calendar_event(item: Dict[str, Any], timezone: str) -> Optional[CalendarEvent]:
    start_raw = item.get('start', {})
    end_raw = item.get('end', {})
    start_value = start_raw.get('dateTime') or start_raw.get('date')
    if not start_value:
        return None
    end_value = end_raw.get('dateTime') or end_raw.get('date') or start_value

    tz = pytz.timezone(timezone)
    start = parser.isoparse(start_value)
    end = parser.isoparse(end_value)
    # All-day items carry a bare date
    if start.tzinfo is None:
        start = tz.localize(start)
    if end.tzinfo is None:
        end = tz.localize(end)

    return CalendarEvent(
        id=item.get('id', ''),
        summary=item.get('summary'),
        description=item.get('description'),
        start=start.astimezone(tz),
        end=end.astimezone(tz),
        attendees=[a['email'] for a in item.get('attendees', []) if a.get('email')]
    )


class GoogleCalendarTool:
    def __init__(self, credentials: Credentials, timeout: Optional[float] = None):
        self.credentials = credentials
        http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout))
        self.service = build('calendar', 'v3', http=http, cache_discovery=False)
        logger.info("Initialized Google Calendar tool")

    def list_events(
        self,
        start_time: datetime,
        end_time: datetime,
        max_results: int = 100,
        calendar_id: str = 'primary'
    ) -> List[Dict[str, Any]]:
        try:
            events_result = self.service.events().list(
                calendarId=calendar_id,
                timeMin=start_time.isoformat(),
                timeMax=end_time.isoformat(),
                maxResults=max_results,
                singleEvents=True,
                orderBy='startTime'
            ).execute()

            events = events_result.get('items', [])
            logger.info(f"Retrieved {len(events)} events from calendar")
            return events

        except HttpError as error:
            logger.error(f"Error listing calendar events: {error}")
            raise

    def get_event(self, event_id: str, calendar_id: str = 'primary') -> Dict[str, Any]:
        return self.service.events().get(calendarId=calendar_id, eventId=event_id).execute()

    def create_event(
        self,
        summary: str,
        start_time: datetime,
        end_time: datetime,
        description: Optional[str] = None,
        attendees: Optional[List[str]] = None,
        timezone: str = 'Asia/Kolkata',
        calendar_id: str = 'primary'
    ) -> Dict[str, Any]:
        """
        Create a new calendar event and email invitations to the attendees.

        Args:
            summary: Event title
            start_time: Event start time
            end_time: Event end time
            description: Optional event description
            attendees: Attendee email addresses
            timezone: Timezone for the event
            calendar_id: Calendar ID (default: 'primary')

        Returns:
            Created event dictionary
        """
        event = {
            'summary': summary,
            'description': description or 'Meeting scheduled via Remo',
            'start': {
                'dateTime': start_time.isoformat(),
                'timeZone': timezone,
            },
            'end': {
                'dateTime': end_time.isoformat(),
                'timeZone': timezone,
            },
            'attendees': [{'email': email} for email in attendees or []],
        }

        try:
            created_event = self.service.events().insert(
                calendarId=calendar_id,
                body=event,
                sendUpdates='all'
            ).execute()

            logger.info(f"Created event: {summary} at {start_time}")
            return created_event

        except HttpError as error:
            logger.error(f"Error creating calendar event: {error}")
            raise

    def patch_event(self, event_id: str, body: Dict[str, Any], calendar_id: str = 'primary') -> Dict[str, Any]:
        try:
            updated = self.service.events().patch(
                calendarId=calendar_id,
                eventId=event_id,
                body=body,
                sendUpdates='all'
            ).execute()

            logger.info(f"Patched event {event_id}: {sorted(body.keys())}")
            return updated

        except HttpError as error:
            logger.error(f"Error updating calendar event {event_id}: {error}")
            raise

    def delete_event(self, event_id: str, calendar_id: str = 'primary') -> None:
        try:
            self.service.events().delete(
                calendarId=calendar_id,
                eventId=event_id,
                sendUpdates='all'
            ).execute()

            logger.info(f"Deleted event {event_id}")

        except HttpError as error:
            logger.error(f"Error deleting calendar event {event_id}: {error}")
            raise


class CalendarService:
    """
    Per-user calendar capabilities on top of stored OAuth tokens.

    Every operation takes the chat user id. A user without a token gets
    CalendarNotAuthorizedError; mutations report remote failures as False.
    """

    def __init__(self, oauth_manager, timezone: Optional[str] = None, timeout: Optional[float] = None):
        self.oauth_manager = oauth_manager
        self.timezone = timezone or settings.default_timezone
        self.timeout = timeout if timeout is not None else settings.calendar_timeout_seconds

    def is_authorized(self, user_id: str) -> bool:
        return self.oauth_manager.has_credentials(user_id)

    def start_auth(self, user_id: str) -> str:
        auth_url, _ = self.oauth_manager.get_authorization_url(user_id)
        return auth_url

    def complete_auth(self, state: str, code: str) -> str:
        return self.oauth_manager.complete_authorization(state, code)

    def list_events(
        self,
        user_id: str,
        days: int = 7,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[CalendarEvent]:
        tz = pytz.timezone(self.timezone)
        first_day = start_date or datetime.now(tz).date()
        last_day = end_date or first_day + timedelta(days=days)

        time_min = tz.localize(datetime.combine(first_day, datetime.min.time()))
        time_max = tz.localize(datetime.combine(last_day, datetime.max.time()))

        logger.info(f"Listing events for {user_id}: {time_min.isoformat()} to {time_max.isoformat()}")

        items = self._tool(user_id).list_events(time_min, time_max)

        events = []
        for item in items:
            event = to_calendar_event(item, self.timezone)
            if event and time_min <= event['start'] <= time_max:
                events.append(event)

        events.sort(key=lambda e: e['start'])
        logger.info(f"Filtered to {len(events)} events within range")
        return events

    def create_event(
        self,
        user_id: str,
        title: str,
        description: Optional[str],
        start: datetime,
        end: datetime,
        attendees: List[str]
    ) -> bool:
        calendar = self._tool(user_id)
        try:
            calendar.create_event(
                summary=title,
                start_time=start,
                end_time=end,
                description=description,
                attendees=attendees,
                timezone=self.timezone
            )
            return True
        except HttpError as error:
            logger.error(f"Error creating meeting for {user_id}: {error}")
            return False

    def update_event(
        self,
        user_id: str,
        event_id: str,
        summary: Optional[str] = None,
        description: Optional[str] = None,
        attendees: Optional[List[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> bool:
        body: Dict[str, Any] = {}
        if summary:
            body['summary'] = summary
        if description:
            body['description'] = description
        if attendees:
            body['attendees'] = [{'email': email} for email in attendees]
        if start:
            body['start'] = {'dateTime': start.isoformat(), 'timeZone': self.timezone}
        if end:
            body['end'] = {'dateTime': end.isoformat(), 'timeZone': self.timezone}

        if not body:
            logger.info(f"Nothing to update on event {event_id}")
            return True

        calendar = self._tool(user_id)
        try:
            calendar.patch_event(event_id, body)
            return True
        except HttpError as error:
            logger.error(f"Error updating meeting {event_id}: {error}")
            return False

    def reschedule_event(self, user_id: str, event_id: str, new_start: datetime) -> bool:
        calendar = self._tool(user_id)
        try:
            existing = calendar.get_event(event_id)
            old_start = parser.isoparse(existing['start']['dateTime'])
            old_end = parser.isoparse(existing['end']['dateTime'])
            new_end = new_start + (old_end - old_start)

            calendar.patch_event(event_id, {
                'start': {'dateTime': new_start.isoformat(), 'timeZone': self.timezone},
                'end': {'dateTime': new_end.isoformat(), 'timeZone': self.timezone},
            })
            return True
        except (HttpError, KeyError) as error:
            logger.error(f"Error rescheduling meeting {event_id}: {error}")
            return False

    def delete_event(self, user_id: str, event_id: str) -> bool:
        calendar = self._tool(user_id)
        try:
            calendar.delete_event(event_id)
            return True
        except HttpError as error:
            logger.error(f"Error canceling meeting {event_id}: {error}")
            return False

    def _tool(self, user_id: str) -> GoogleCalendarTool:
        credentials = self.oauth_manager.load_credentials(user_id)
        if credentials is None:
            raise CalendarNotAuthorizedError(user_id)
        return GoogleCalendarTool(credentials, timeout=self.timeout)
