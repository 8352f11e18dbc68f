"""
Message classification predicates and the top-level routing decision.
"""

from typing import Literal
import re


Route = Literal["help", "meeting", "cancel_meeting", "list_meetings", "update_meeting", "chat"]

GREETING_PATTERNS = [
    re.compile(r'^hi\b', re.IGNORECASE),
    re.compile(r'^hello\b', re.IGNORECASE),
    re.compile(r'^hey\b', re.IGNORECASE),
    re.compile(r'^greetings\b', re.IGNORECASE),
    re.compile(r'^good\s*(morning|afternoon|evening)\b', re.IGNORECASE),
]

HOW_ARE_YOU_PATTERNS = [
    re.compile(r'^how are you', re.IGNORECASE),
    re.compile(r"^how(')?s it going", re.IGNORECASE),
    re.compile(r'^how do you feel', re.IGNORECASE),
    re.compile(r"^how(')?re you", re.IGNORECASE),
]

MEETING_KEYWORDS = [
    re.compile(r'\b(schedule|set\s*up|book|arrange|plan)\b', re.IGNORECASE),
    re.compile(r'\b(update|change|modify)\b', re.IGNORECASE),
    re.compile(r'\b(reschedule|move|postpone)\b', re.IGNORECASE),
    re.compile(r'\b(cancel|delete)\b', re.IGNORECASE),
    re.compile(r'\bmeeting\b', re.IGNORECASE),
    re.compile(r'\bcall\b', re.IGNORECASE),
    re.compile(r'\bappointment\b', re.IGNORECASE),
]

CANCEL_MEETING_PATTERN = re.compile(r'\b(cancel|delete)\b.*\b(meeting|appointment)\b')
LIST_MEETINGS_PATTERN = re.compile(r'\b(check|list|show|view|get)\b.*\b(meetings|schedule|calendar)\b')
UPDATE_MEETING_PATTERN = re.compile(r'\b(update|change|move|postpone|reschedule)\b')

HELP_COMMANDS = ('/start', '/help')


def is_greeting(message: str) -> bool:
    text = message.strip()
    return any(pattern.search(text) for pattern in GREETING_PATTERNS)


def is_how_are_you(message: str) -> bool:
    text = message.strip()
    return any(pattern.search(text) for pattern in HOW_ARE_YOU_PATTERNS)


def is_meeting_request(message: str) -> bool:
    return any(pattern.search(message) for pattern in MEETING_KEYWORDS)


def is_cancel_meeting_request(message: str) -> bool:
    return bool(CANCEL_MEETING_PATTERN.search(message.lower()))


def is_list_meetings_request(message: str) -> bool:
    return bool(LIST_MEETINGS_PATTERN.search(message.lower()))


def is_update_request(message: str) -> bool:
    return bool(UPDATE_MEETING_PATTERN.search(message.lower()))


def is_help_command(message: str) -> bool:
    return message.strip().lower().split(' ')[0] in HELP_COMMANDS


def determine_meeting_action(message: str) -> str:
    lower_message = message.lower()
    if 'reschedule' in lower_message or 'move' in lower_message:
        return 'reschedule'
    if 'update' in lower_message or 'change' in lower_message:
        return 'update'
    if 'cancel' in lower_message or 'delete' in lower_message:
        return 'cancel'
    return 'create'


def route_message(message: str, has_dialogue: bool) -> Route:
    """
    Pick the handler for an inbound message.

    An open dialogue or any meeting keyword always goes to the scheduling
    dialogue, so "show my meeting schedule" is scheduling, not listing.
    """
    if is_help_command(message):
        return "help"
    if has_dialogue or is_meeting_request(message):
        return "meeting"
    if is_cancel_meeting_request(message):
        return "cancel_meeting"
    if is_list_meetings_request(message):
        return "list_meetings"
    if is_update_request(message):
        return "update_meeting"
    return "chat"
