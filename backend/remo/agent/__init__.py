"""Conversation routing, scheduling dialogue and chat."""

from .assistant import SchedulingAssistant
from .chat import ChatHandler, GeminiChatClient
from .dialogue import MeetingDialogueEngine
from .graph import create_message_router
from .meetings import MeetingFlows
from .sessions import SessionStore
from .state import MeetingDialogue, ConversationSession, TurnState

__all__ = [
    "SchedulingAssistant",
    "ChatHandler",
    "GeminiChatClient",
    "MeetingDialogueEngine",
    "create_message_router",
    "MeetingFlows",
    "SessionStore",
    "MeetingDialogue",
    "ConversationSession",
    "TurnState"
]
