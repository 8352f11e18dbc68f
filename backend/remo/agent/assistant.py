from datetime import datetime
from typing import Optional, Callable
import pytz

from .chat import ChatHandler
from .dialogue import MeetingDialogueEngine
from .graph import create_message_router
from .meetings import MeetingFlows
from .prompts import GENERIC_ERROR_RESPONSE
from .sessions import SessionStore
from ..tools.calendar import CalendarService
from ..utils.config import settings
from ..utils.logger import logger


class SchedulingAssistant:
    """
    Entry point for inbound chat messages.

    Every message for a user runs under that user's lock, so two messages
    from the same chat never interleave while different users proceed in
    parallel. `reply` may be called any number of times per message.
    """

    def __init__(
        self,
        store: SessionStore,
        calendar: CalendarService,
        chat_client,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.calendar = calendar
        self.timezone = timezone or settings.default_timezone
        self.clock = clock or (lambda: datetime.now(pytz.timezone(self.timezone)))

        self.meetings = MeetingFlows(store, calendar, self.timezone, self.clock)
        self.dialogue = MeetingDialogueEngine(store, calendar, self.meetings, self.timezone, self.clock)
        self.chat = ChatHandler(store, chat_client)
        self.router = create_message_router(self)

    def handle_message(self, user_id: str, text: str, reply: Callable[[str], None]) -> None:
        text = (text or "").strip()
        if not text:
            return

        with self.store.hold(user_id):
            logger.info(f"Message from {user_id}: {text}")
            try:
                self.router.invoke({
                    "user_id": user_id,
                    "text": text,
                    "reply": reply,
                    "route": None
                })
            except Exception as e:
                logger.error(f"Error handling message from {user_id}: {e}")
                reply(GENERIC_ERROR_RESPONSE)
