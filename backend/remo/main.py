"""
Remo - Main FastAPI Application
Receives chat messages, runs them through the assistant and serves the
Google Calendar OAuth callback.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .agent import SchedulingAssistant, SessionStore, GeminiChatClient
from .auth.oauth import OAuthManager, OAuthStateError
from .tools.calendar import CalendarService
from .utils.config import settings
from .utils.logger import logger
from . import __version__


class IncomingMessage(BaseModel):
    user_id: str
    text: str


class MessageReplies(BaseModel):
    replies: List[str]


AUTH_SUCCESS_PAGE = """
<html>
  <body>
    <h2>Calendar connected ✅</h2>
    <p>You can close this window and go back to the chat.</p>
  </body>
</html>
"""

AUTH_FAILURE_PAGE = """
<html>
  <body>
    <h2>Authorization failed ❌</h2>
    <p>{reason}</p>
  </body>
</html>
"""


def create_app(
    assistant: Optional[SchedulingAssistant] = None,
    calendar: Optional[CalendarService] = None,
    store: Optional[SessionStore] = None
) -> FastAPI:
    if store is None:
        store = assistant.store if assistant else SessionStore()
    if calendar is None:
        calendar = assistant.calendar if assistant else CalendarService(OAuthManager())
    if assistant is None:
        assistant = SchedulingAssistant(store, calendar, GeminiChatClient())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.start()
        logger.info(f"Remo started ({settings.environment})")
        yield
        store.stop()
        logger.info("Remo stopped")

    app = FastAPI(
        title="Remo",
        description="Conversational meeting scheduling assistant with Google Calendar integration",
        version=__version__,
        lifespan=lifespan
    )

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "Remo",
            "version": __version__
        }

    @app.get("/health")
    async def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "components": {
                "api": "operational",
                "oauth": "configured" if settings.google_client_id else "missing client id",
                "llm": "configured" if settings.gemini_api_key else "missing api key"
            }
        }

    @app.post("/messages", response_model=MessageReplies)
    def receive_message(message: IncomingMessage):
        """
        Handle one chat message. Runs in the threadpool since the assistant
        blocks on calendar and LLM calls.
        """
        replies: List[str] = []
        assistant.handle_message(message.user_id, message.text, replies.append)
        return MessageReplies(replies=replies)

    # OAuth 2.0 Authentication Endpoints

    @app.get("/auth/callback", response_class=HTMLResponse)
    def auth_callback(code: str, state: str):
        """
        Handle OAuth callback from Google.
        Exchanges the authorization code and stores the user's token.
        """
        try:
            user_id = calendar.complete_auth(state, code)
            logger.info(f"User authorized calendar access: {user_id}")
            return HTMLResponse(AUTH_SUCCESS_PAGE)

        except OAuthStateError as e:
            logger.warning(f"Rejected OAuth callback: {e}")
            return HTMLResponse(
                AUTH_FAILURE_PAGE.format(reason="This link has expired. Ask Remo for a new one."),
                status_code=400
            )
        except Exception as e:
            logger.error(f"OAuth callback error: {e}")
            return HTMLResponse(
                AUTH_FAILURE_PAGE.format(reason="Something went wrong. Please try again."),
                status_code=500
            )

    @app.get("/auth/status/{user_id}")
    async def auth_status(user_id: str):
        """Check if user has authorized calendar access."""
        return {
            "user_id": user_id,
            "authenticated": calendar.is_authorized(user_id)
        }

    @app.post("/auth/logout/{user_id}")
    async def logout(user_id: str):
        """Forget the user's stored token."""
        success = calendar.oauth_manager.revoke_credentials(user_id)

        return {
            "success": success,
            "message": "Logged out successfully" if success else "User not found"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "remo.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development"
    )
