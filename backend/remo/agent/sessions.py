from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Dict, Optional, Callable
import threading

from .state import ConversationSession, MeetingDialogue
from ..utils.config import settings
from ..utils.logger import logger


class SessionStore:
    """
    Per-user chat sessions and meeting dialogues.

    Chat sessions idle longer than `idle_timeout` are evicted by a background
    sweeper; meeting dialogues live until the dialogue itself ends. Message
    handling for one user is serialized through `hold(user_id)`; locks of
    users with nothing stored are dropped on each sweep.
    """

    def __init__(
        self,
        idle_timeout: Optional[timedelta] = None,
        sweep_interval: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.idle_timeout = idle_timeout or timedelta(minutes=settings.session_idle_minutes)
        self.sweep_interval = sweep_interval or settings.session_sweep_seconds
        self.clock = clock or datetime.now

        self._conversations: Dict[str, ConversationSession] = {}
        self._dialogues: Dict[str, MeetingDialogue] = {}
        self._user_locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def lock_for(self, user_id: str) -> threading.RLock:
        with self._lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._user_locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str):
        """Hold the user's lock, retrying if the sweeper dropped it before we got it."""
        while True:
            lock = self.lock_for(user_id)
            lock.acquire()
            with self._lock:
                if self._user_locks.get(user_id) is lock:
                    break
            lock.release()

        try:
            yield
        finally:
            lock.release()

    def get_conversation(self, user_id: str) -> Optional[ConversationSession]:
        return self._conversations.get(user_id)

    def save_conversation(self, user_id: str, conversation: ConversationSession) -> None:
        conversation["last_update"] = self.clock()
        self._conversations[user_id] = conversation

    def get_dialogue(self, user_id: str) -> Optional[MeetingDialogue]:
        return self._dialogues.get(user_id)

    def set_dialogue(self, user_id: str, dialogue: MeetingDialogue) -> None:
        self._dialogues[user_id] = dialogue

    def clear_dialogue(self, user_id: str) -> None:
        self._dialogues.pop(user_id, None)

    def has_dialogue(self, user_id: str) -> bool:
        return user_id in self._dialogues

    def evict_idle(self, now: Optional[datetime] = None) -> int:
        now = now or self.clock()
        cutoff = now - self.idle_timeout
        evicted = 0

        for user_id, conversation in list(self._conversations.items()):
            if conversation["last_update"] >= cutoff:
                continue

            lock = self.lock_for(user_id)
            # A user with a message in flight is by definition not idle
            if not lock.acquire(blocking=False):
                continue
            try:
                current = self._conversations.get(user_id)
                if current is not None and current["last_update"] < cutoff:
                    del self._conversations[user_id]
                    evicted += 1
            finally:
                lock.release()

        released = self._release_unused_locks()

        if evicted:
            logger.info(f"Evicted {evicted} idle chat session(s)")
        if released:
            logger.debug(f"Released {released} unused user lock(s)")
        return evicted

    def _release_unused_locks(self) -> int:
        released = 0
        with self._lock:
            user_ids = list(self._user_locks)

        for user_id in user_ids:
            if user_id in self._conversations or user_id in self._dialogues:
                continue

            with self._lock:
                lock = self._user_locks.get(user_id)
            if lock is None or not lock.acquire(blocking=False):
                continue
            try:
                if user_id not in self._conversations and user_id not in self._dialogues:
                    with self._lock:
                        self._user_locks.pop(user_id, None)
                    released += 1
            finally:
                lock.release()

        return released

    def start(self) -> None:
        if self._sweeper and self._sweeper.is_alive():
            return

        self._stop_event.clear()
        self._sweeper = threading.Thread(target=self._sweep_loop, name="session-sweeper", daemon=True)
        self._sweeper.start()
        logger.info(f"Session sweeper started (idle timeout {self.idle_timeout}, every {self.sweep_interval}s)")

    def stop(self) -> None:
        self._stop_event.set()
        if self._sweeper:
            self._sweeper.join(timeout=self.sweep_interval)
            self._sweeper = None
        logger.info("Session sweeper stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            try:
                self.evict_idle()
            except Exception as e:
                logger.error(f"Error sweeping idle sessions: {e}")
