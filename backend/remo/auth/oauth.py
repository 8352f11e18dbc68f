from google_auth_oauthlib.flow import Flow
from google.oauth2.credentials import Credentials
from google.auth.transport.requests import Request
from datetime import datetime, timedelta
from typing import Optional, Dict, Tuple, Callable
from urllib.parse import quote
import json
import threading
from pathlib import Path

from ..utils.config import settings
from ..utils.logger import logger

class OAuthStateError(Exception):
    """Raised when a callback carries a state we never issued, or one that expired."""


class OAuthManager:
    SCOPES = [
        'https://www.googleapis.com/auth/calendar',
    ]

    def __init__(
        self,
        token_dir: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        state_ttl: Optional[timedelta] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.redirect_uri = redirect_uri or settings.oauth_redirect_uri
        self.state_ttl = state_ttl or timedelta(minutes=settings.oauth_state_ttl_minutes)
        self.clock = clock or datetime.now

        self.client_config = {
            "web": {
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri]
            }
        }

        self.token_dir = Path(token_dir or settings.token_dir)
        self.token_dir.mkdir(parents=True, exist_ok=True)

        # state -> (user_id, code_verifier, issued_at)
        self._pending: Dict[str, Tuple[str, Optional[str], datetime]] = {}
        self._lock = threading.Lock()

        logger.info(f"OAuth initialized with redirect_uri: {self.redirect_uri}")

    def _flow(self, **kwargs) -> Flow:
        return Flow.from_client_config(
            self.client_config,
            scopes=self.SCOPES,
            redirect_uri=self.redirect_uri,
            **kwargs
        )

    def _expire_pending(self, now: datetime) -> None:
        # Caller holds self._lock
        expired = [state for state, (_, _, issued_at) in self._pending.items() if now - issued_at > self.state_ttl]
        for state in expired:
            del self._pending[state]
        if expired:
            logger.info(f"Expired {len(expired)} unanswered OAuth state(s)")

    def get_authorization_url(self, user_id: str) -> Tuple[str, str]:
        flow = self._flow()

        authorization_url, state = flow.authorization_url(
            access_type='offline',
            include_granted_scopes='true',
            prompt='consent'
        )

        now = self.clock()
        with self._lock:
            self._expire_pending(now)
            self._pending[state] = (user_id, getattr(flow, 'code_verifier', None), now)

        logger.info(f"Generated authorization URL for user {user_id} with state: {state}")
        return authorization_url, state

    def complete_authorization(self, state: str, code: str) -> str:
        with self._lock:
            self._expire_pending(self.clock())
            pending = self._pending.pop(state, None)

        if pending is None:
            raise OAuthStateError(f"Unknown or expired OAuth state: {state}")

        user_id, code_verifier, _ = pending
        flow = self._flow(state=state, code_verifier=code_verifier)
        flow.fetch_token(code=code)

        self.save_credentials(user_id, flow.credentials)
        logger.info(f"Successfully exchanged code for credentials of user {user_id}")
        return user_id

    def _token_path(self, user_id: str) -> Path:
        # Chat ids come from request bodies; quoting keeps separators out of the file name
        path = self.token_dir / f"{quote(user_id, safe='')}.json"
        if path.resolve().parent != self.token_dir.resolve():
            raise ValueError(f"Invalid user id for token storage: {user_id!r}")
        return path

    def has_credentials(self, user_id: str) -> bool:
        return self._token_path(user_id).exists()

    def save_credentials(self, user_id: str, credentials: Credentials) -> None:
        token_data = {
            'token': credentials.token,
            'refresh_token': credentials.refresh_token,
            'token_uri': credentials.token_uri,
            'client_id': credentials.client_id,
            'client_secret': credentials.client_secret,
            'scopes': credentials.scopes
        }

        with open(self._token_path(user_id), 'w') as f:
            json.dump(token_data, f)

        logger.info(f"Saved credentials for user: {user_id}")

    def load_credentials(self, user_id: str) -> Optional[Credentials]:
        token_path = self._token_path(user_id)

        if not token_path.exists():
            logger.warning(f"No credentials found for user: {user_id}")
            return None

        with open(token_path, 'r') as f:
            token_data = json.load(f)

        credentials = Credentials(
            token=token_data['token'],
            refresh_token=token_data.get('refresh_token'),
            token_uri=token_data['token_uri'],
            client_id=token_data['client_id'],
            client_secret=token_data['client_secret'],
            scopes=token_data['scopes']
        )

        if credentials.expired and credentials.refresh_token:
            logger.info(f"Refreshing expired credentials for user: {user_id}")
            credentials.refresh(Request())
            self.save_credentials(user_id, credentials)

        return credentials

    def revoke_credentials(self, user_id: str) -> bool:
        token_path = self._token_path(user_id)

        if token_path.exists():
            token_path.unlink()
            logger.info(f"Revoked credentials for user: {user_id}")
            return True

        return False
