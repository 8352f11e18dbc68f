"""
Slot-filling dialogue for creating a meeting.

A dialogue opens on the first meeting-intent message, pre-fills whatever the
opening message already says, then asks for the first missing slot in the
order date, time, attendee email, duration. Once those four are known the
user is offered an optional description and a final confirmation.
"""

from datetime import datetime, timedelta
from typing import Optional, Callable
import pytz

from .intent import determine_meeting_action
from .meetings import MeetingFlows, contains_cancel_keyword
from .prompts import (
    SCHEDULING_INTRO,
    STEP_PROMPTS,
    CANCEL_HINT,
    CONFIRM_QUESTION,
    DIALOGUE_CANCELLED,
    DIALOGUE_RESTART,
    DIALOGUE_ERROR,
    AUTH_REQUIRED_TO_CREATE,
    MEETING_CREATED,
    MEETING_CREATE_FAILED,
)
from .sessions import SessionStore
from .state import CreateDialogue, MeetingDetails, create_meeting_dialogue
from ..tools.calendar import CalendarService, CalendarNotAuthorizedError
from ..tools.extractors import analyze_meeting_request
from ..tools.time_parser import TimeParser
from ..tools.validation import SlotValidator, validate_email
from ..utils.config import settings
from ..utils.logger import logger

DEFAULT_DESCRIPTION = "Meeting scheduled via Remo"
MAX_DURATION_MINUTES = SlotValidator.MAX_DURATION_MINUTES

REQUIRED_SLOTS = [
    ("collect_date", "date"),
    ("collect_time", "time"),
    ("collect_email", "attendees"),
    ("collect_duration", "duration_minutes"),
]


def next_missing_step(details: MeetingDetails) -> Optional[str]:
    for step, field in REQUIRED_SLOTS:
        if not details[field]:
            return step
    return None


def format_details(details: MeetingDetails, confirmation: bool = False) -> str:
    lines = []
    if details["date"]:
        lines.append(f"📅 Date: {details['date'].strftime('%A, %B %d, %Y')}")
    if details["time"]:
        lines.append(f"⏰ Time: {details['time']}")
    if details["duration_minutes"]:
        lines.append(f"⏱️ Duration: {details['duration_minutes']} minutes")
    if details["attendees"]:
        lines.append(f"👥 Attendees: {', '.join(details['attendees'])}")
    if details["description"] or confirmation:
        lines.append(f"📝 Description: {details['description'] or 'No description'}")
    return "\n".join(lines)


def format_confirmation(details: MeetingDetails) -> str:
    return (
        "Please confirm these meeting details:\n\n"
        f"{format_details(details, confirmation=True)}\n\n"
        f"{CONFIRM_QUESTION}"
    )


def step_prompt(step: str, details: MeetingDetails) -> str:
    if step == "confirm":
        return format_confirmation(details)
    if step == "collect_email":
        name = details["attendee_name"]
        return STEP_PROMPTS[step].format(name=f"{name}'s" if name else "the attendee's")
    return STEP_PROMPTS[step]


class MeetingDialogueEngine:
    def __init__(
        self,
        store: SessionStore,
        calendar: CalendarService,
        meetings: MeetingFlows,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.calendar = calendar
        self.meetings = meetings
        self.timezone = timezone or settings.default_timezone
        self.clock = clock or (lambda: datetime.now(pytz.timezone(self.timezone)))

    def _parser(self) -> TimeParser:
        return TimeParser(self.timezone, now=self.clock())

    def handle(self, user_id: str, message: str, reply: Callable[[str], None]) -> None:
        dialogue = self.store.get_dialogue(user_id)
        try:
            if dialogue is None:
                self._start(user_id, message, reply)
            elif dialogue["kind"] == "create":
                self._continue(user_id, dialogue, message, reply)
            else:
                self.meetings.continue_cancellation(user_id, dialogue, message, reply)
        except Exception as e:
            logger.error(f"Error in meeting scheduling for {user_id}: {e}")
            self.store.clear_dialogue(user_id)
            reply(DIALOGUE_ERROR)

    def _start(self, user_id: str, message: str, reply: Callable[[str], None]) -> None:
        action = determine_meeting_action(message)
        logger.info(f"New meeting dialogue for {user_id} (action: {action})")

        if action == "cancel":
            self.meetings.start_cancellation(user_id, message, reply)
            return
        if action in ("update", "reschedule"):
            self.meetings.update_meeting(user_id, message, reply)
            return

        parser = self._parser()
        analysis = analyze_meeting_request(message)
        dialogue = create_meeting_dialogue(action)
        details = dialogue["details"]

        details["time"] = analysis["time"]
        details["date"] = parser.resolve_date(message)
        if analysis["duration_minutes"] and 0 < analysis["duration_minutes"] <= MAX_DURATION_MINUTES:
            details["duration_minutes"] = analysis["duration_minutes"]
        details["attendees"] = [email for email in analysis["emails"] if validate_email(email)]
        details["description"] = analysis["description"]
        details["attendee_name"] = analysis["name"]

        if "today" in message.lower():
            details["date"] = parser.today

        dialogue["step"] = next_missing_step(details) or "confirm"
        self.store.set_dialogue(user_id, dialogue)
        logger.info(f"Pre-filled slots for {user_id}, next step: {dialogue['step']}")

        if dialogue["step"] == "confirm":
            reply(format_confirmation(details))
            return

        summary = format_details(details)
        response = SCHEDULING_INTRO
        if summary:
            response += summary + "\n"
        response += "\n" + step_prompt(dialogue["step"], details)
        reply(response)

    def _continue(self, user_id: str, dialogue: CreateDialogue, message: str, reply: Callable[[str], None]) -> None:
        if contains_cancel_keyword(message):
            self.store.clear_dialogue(user_id)
            logger.info(f"Meeting dialogue cancelled by {user_id}")
            reply(DIALOGUE_CANCELLED)
            return

        step = dialogue["step"]
        details = dialogue["details"]
        validator = SlotValidator(self._parser())

        if step == "confirm":
            if "yes" in message.lower():
                self._execute(user_id, dialogue, reply)
            else:
                # Anything but "yes" drops the collected details
                self.store.clear_dialogue(user_id)
                reply(DIALOGUE_RESTART)
            return

        if step == "collect_description":
            if message.strip().lower() != "skip":
                details["description"] = message
        else:
            result = {
                "collect_date": validator.validate_date,
                "collect_time": validator.validate_time,
                "collect_email": validator.validate_email,
                "collect_duration": validator.validate_duration,
            }[step](message)

            if not result.is_valid:
                reply(result.clarification_question)
                return

            if step == "collect_date":
                details["date"] = result.value
            elif step == "collect_time":
                details["time"] = result.value
            elif step == "collect_email":
                details["attendees"] = [result.value]
            else:
                details["duration_minutes"] = result.value

        self._advance(user_id, dialogue, reply)

    def _advance(self, user_id: str, dialogue: CreateDialogue, reply: Callable[[str], None]) -> None:
        details = dialogue["details"]

        if dialogue["step"] == "collect_description":
            next_step = "confirm"
        else:
            next_step = next_missing_step(details)
            if next_step is None:
                next_step = "confirm" if details["description"] else "collect_description"

        dialogue["step"] = next_step
        self.store.set_dialogue(user_id, dialogue)

        if next_step == "confirm":
            reply(format_confirmation(details) + CANCEL_HINT)
        else:
            reply(step_prompt(next_step, details) + CANCEL_HINT)

    def _execute(self, user_id: str, dialogue: CreateDialogue, reply: Callable[[str], None]) -> None:
        if not self.calendar.is_authorized(user_id):
            self._request_authorization(user_id, reply)
            return

        details = dialogue["details"]
        start = self._parser().combine(details["date"], details["time"])
        end = start + timedelta(minutes=details["duration_minutes"])
        title = f"Meeting with {details['attendees'][0].split('@')[0]}"

        try:
            success = self.calendar.create_event(
                user_id,
                title,
                details["description"] or DEFAULT_DESCRIPTION,
                start,
                end,
                details["attendees"]
            )
        except CalendarNotAuthorizedError:
            self._request_authorization(user_id, reply)
            return

        self.store.clear_dialogue(user_id)

        if success:
            logger.info(f"Created meeting '{title}' for {user_id} at {start.isoformat()}")
            reply(MEETING_CREATED.format(summary=format_details(details, confirmation=True)))
        else:
            reply(MEETING_CREATE_FAILED)

    def _request_authorization(self, user_id: str, reply: Callable[[str], None]) -> None:
        # The dialogue stays at "confirm"; the user re-sends "yes" once authorized
        auth_url = self.calendar.start_auth(user_id)
        logger.info(f"Calendar authorization requested for {user_id}")
        reply(AUTH_REQUIRED_TO_CREATE.format(auth_url=auth_url))
