"""Google OAuth 2.0 token management for calendar access."""

from .oauth import OAuthManager, OAuthStateError

__all__ = ["OAuthManager", "OAuthStateError"]
