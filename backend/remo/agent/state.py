from typing import TypedDict, Optional, List, Dict, Literal, Union, Callable
from datetime import date, datetime

from ..tools.calendar import CalendarEvent


CreateStep = Literal[
    "collect_date",
    "collect_time",
    "collect_email",
    "collect_duration",
    "collect_description",
    "confirm",
]

MeetingAction = Literal["create", "update", "reschedule", "cancel"]


class MeetingDetails(TypedDict):
    date: Optional[date]
    time: Optional[str]
    duration_minutes: Optional[int]
    attendees: List[str]
    description: Optional[str]
    attendee_name: Optional[str]


class CreateDialogue(TypedDict):
    kind: Literal["create"]
    step: CreateStep
    action: MeetingAction
    details: MeetingDetails


class CancelConfirmDialogue(TypedDict):
    kind: Literal["confirm_cancel"]
    step: Literal["confirm_cancel"]
    event: CalendarEvent


class CancelSelectDialogue(TypedDict):
    kind: Literal["select_cancel"]
    step: Literal["select_cancel"]
    events: List[CalendarEvent]


MeetingDialogue = Union[CreateDialogue, CancelConfirmDialogue, CancelSelectDialogue]


class ConversationSession(TypedDict):
    messages: List[Dict[str, str]]
    last_update: datetime


class TurnState(TypedDict):
    user_id: str
    text: str
    reply: Callable[[str], None]
    route: Optional[str]


def create_meeting_dialogue(action: MeetingAction = "create") -> CreateDialogue:
    return CreateDialogue(
        kind="create",
        step="collect_date",
        action=action,
        details=MeetingDetails(
            date=None,
            time=None,
            duration_minutes=None,
            attendees=[],
            description=None,
            attendee_name=None
        )
    )


def create_cancel_confirmation(event: CalendarEvent) -> CancelConfirmDialogue:
    return CancelConfirmDialogue(kind="confirm_cancel", step="confirm_cancel", event=event)


def create_cancel_selection(events: List[CalendarEvent]) -> CancelSelectDialogue:
    return CancelSelectDialogue(kind="select_cancel", step="select_cancel", events=list(events))


def create_conversation(system_prompt: str, now: datetime) -> ConversationSession:
    return ConversationSession(
        messages=[{"role": "system", "content": system_prompt}],
        last_update=now
    )
