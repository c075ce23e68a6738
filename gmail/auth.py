"""OAuth2 lifecycle for a profile: login, refresh-on-use, status and logout.

State per profile::

    UNAUTHENTICATED --login--> AUTHENTICATED(valid) --time--> AUTHENTICATED(expired)
    AUTHENTICATED(expired) --refresh--> AUTHENTICATED(valid)
    any --logout / failed refresh--> UNAUTHENTICATED (re-login required)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

import requests
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from .config import ProfileStore
from .errors import AuthFlowError, NotAuthenticatedError, TokenRefreshError
from .gmail_api import SCOPES, GmailClient
from .oauth_callback import CallbackListener
from .tokens import Token, TokenStore

LOG = logging.getLogger(__name__)

TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
TOKENINFO_TIMEOUT = (10, 30)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    INVALID = "invalid"


@dataclass
class AuthStatus:
    state: AuthState
    email: Optional[str] = None
    scopes: List[str] = field(default_factory=list)
    expires_at: Optional[datetime] = None

    @property
    def authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED


def fetch_token_scopes(access_token: str) -> List[str]:
    """Ask Google's tokeninfo endpoint which scopes an access token carries."""
    resp = requests.get(TOKENINFO_URL, params={"access_token": access_token}, timeout=TOKENINFO_TIMEOUT)
    resp.raise_for_status()
    return str(resp.json().get("scope") or "").split()


class AuthManager:
    def __init__(
        self,
        profiles: ProfileStore,
        tokens: Optional[TokenStore] = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.profiles = profiles
        self.tokens = tokens or TokenStore(profiles)
        self.echo = echo

    def login(self, timeout: Optional[float] = None) -> AuthStatus:
        """Run the authorization-code flow through the local redirect listener.

        Blocks until the browser is redirected back (or ``timeout`` seconds,
        when given). The new token replaces any stored one.
        """
        oauth = self.profiles.load_credentials()
        flow = Flow.from_client_config(
            oauth.to_client_config(),
            scopes=SCOPES,
            redirect_uri=oauth.redirect_uri,
        )
        auth_url, _ = flow.authorization_url(access_type="offline")

        self.echo("Authorize this app by visiting this url:")
        self.echo(auth_url)
        self.echo("\nWaiting for authorization...")

        with CallbackListener(timeout=timeout) as listener:
            code = listener.wait_for_code()

        try:
            flow.fetch_token(code=code)
        except Exception as exc:
            raise AuthFlowError(f"Failed to exchange authorization code: {exc}") from exc

        creds = flow.credentials
        token = Token.from_credentials(creds)
        self.tokens.save(token)
        LOG.debug("Login complete for profile %s", self.profiles.profile)

        email = GmailClient.from_credentials(creds).get_profile().get("emailAddress")
        return AuthStatus(
            state=AuthState.AUTHENTICATED,
            email=email,
            scopes=fetch_token_scopes(token.access_token),
            expires_at=token.expires_at,
        )

    def logout(self) -> bool:
        """Delete the profile's token. False (not an error) when none was stored."""
        return self.tokens.delete()

    def get_auth_client(self) -> Credentials:
        """Return credentials ready for API calls, refreshing once if expired."""
        oauth = self.profiles.load_credentials()
        token = self.tokens.load()
        if token is None:
            raise NotAuthenticatedError()

        creds = token.to_credentials(oauth)
        if token.is_expired():
            LOG.debug("Access token for profile %s expired; refreshing", self.profiles.profile)
            try:
                creds.refresh(Request())
            except Exception as exc:
                raise TokenRefreshError() from exc
            self.tokens.save(Token.from_credentials(creds, previous=token))
        return creds

    def check_status(self) -> AuthStatus:
        """Describe the profile's authentication without raising.

        No token means no network calls. Any failure while probing with a
        stored token is reported as INVALID rather than surfaced.
        """
        if self.tokens.load() is None:
            return AuthStatus(state=AuthState.UNAUTHENTICATED)
        try:
            creds = self.get_auth_client()
            email = GmailClient.from_credentials(creds).get_profile().get("emailAddress")
            # Reload: the probe above may have refreshed and rewritten the token
            token = self.tokens.load()
            return AuthStatus(
                state=AuthState.AUTHENTICATED,
                email=email,
                scopes=fetch_token_scopes(token.access_token),
                expires_at=token.expires_at,
            )
        except Exception as exc:
            LOG.debug("Status probe failed: %s", exc)
            return AuthStatus(state=AuthState.INVALID)
