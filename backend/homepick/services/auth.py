"""
Identity provider integration.
Verifies Google ID tokens (or "mock:<email>" tokens in development) and tracks
the signed-in user for browse sessions.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import requests
from fastapi import Depends, Header, HTTPException

from homepick.config import settings
from homepick.errors import AuthError, CollaboratorUnavailableError
from homepick.schemas.user import UserProfile

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class IdentityProvider(ABC):
    """Turns a bearer token into a user profile."""

    @abstractmethod
    def verify(self, token: str) -> UserProfile:
        """Return the profile behind `token`, raising AuthError when it is rejected."""


class GoogleIdentityProvider(IdentityProvider):
    """Validates Google ID tokens against the tokeninfo endpoint."""

    def __init__(self, client_id: Optional[str] = None):
        self.client_id = client_id

    def verify(self, token: str) -> UserProfile:
        try:
            resp = requests.get(GOOGLE_TOKENINFO_URL, params={"id_token": token}, timeout=10)
        except requests.RequestException as e:
            logger.warning(f"Google tokeninfo request failed: {e}")
            raise CollaboratorUnavailableError("Identity provider unreachable") from e

        if resp.status_code == 400:
            raise AuthError("Invalid ID token")
        if resp.status_code != 200:
            logger.warning(f"Google tokeninfo returned {resp.status_code}")
            raise CollaboratorUnavailableError(f"Identity provider error ({resp.status_code})")

        claims = resp.json()
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise AuthError(f"Unexpected token issuer: {claims.get('iss')}")
        if self.client_id and claims.get("aud") != self.client_id:
            raise AuthError("Token was issued for another client")

        return UserProfile(
            uid=claims["sub"],
            email=claims.get("email"),
            display_name=claims.get("name"),
            photo_url=claims.get("picture"),
        )


class MockIdentityProvider(IdentityProvider):
    """Development provider: accepts "mock:<email>" or "mock:<email>:<display name>"."""

    def verify(self, token: str) -> UserProfile:
        parts = token.split(":", 2)
        if len(parts) < 2 or parts[0] != "mock" or "@" not in parts[1]:
            raise AuthError("Malformed mock token")
        email = parts[1]
        return UserProfile(
            uid=f"mock-{email}",
            email=email,
            display_name=parts[2] if len(parts) == 3 else email.split("@")[0],
        )


def is_admin(user: Optional[UserProfile]) -> bool:
    if user is None or not user.email:
        return False
    return user.email.lower() == settings.admin_email.lower()


UserListener = Callable[[Optional[UserProfile]], None]


class AuthSession:
    """Current-user holder with "user changed" notifications."""

    def __init__(self, provider: IdentityProvider):
        self.provider = provider
        self.current_user: Optional[UserProfile] = None
        self._listeners: List[UserListener] = []

    def on_user_changed(self, listener: UserListener) -> Callable[[], None]:
        """Register a listener, called immediately with the current user. Returns an unsubscribe function."""
        self._listeners.append(listener)
        listener(self.current_user)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.current_user)

    def sign_in(self, token: str) -> UserProfile:
        user = self.provider.verify(token)
        self.current_user = user
        logger.info(f"Signed in {user.email} (admin={is_admin(user)})")
        self._notify()
        return user

    def sign_out(self) -> None:
        if self.current_user is not None:
            logger.info(f"Signed out {self.current_user.email}")
        self.current_user = None
        self._notify()


_provider: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the configured identity provider."""
    global _provider
    if _provider is None:
        if settings.auth_provider == "mock":
            _provider = MockIdentityProvider()
        else:
            _provider = GoogleIdentityProvider(settings.google_client_id)
    return _provider


def get_current_user(
    authorization: Optional[str] = Header(None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Optional[UserProfile]:
    """Resolve the Bearer token, if any. Anonymous requests get None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Expected a Bearer token")
    try:
        return provider.verify(token.strip())
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


def require_admin(user: Optional[UserProfile] = Depends(get_current_user)) -> UserProfile:
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in required")
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Admin only")
    return user
