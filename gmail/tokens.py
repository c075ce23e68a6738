"""Per-profile OAuth token persistence.

Tokens live at ``{config_dir}/{profile}.token.json`` as plain JSON::

    {"access_token": "...", "refresh_token": "...", "expiry_date": 1700000000000,
     "scope": "https://www.googleapis.com/auth/gmail.send ...", "token_type": "Bearer"}

``expiry_date`` is epoch milliseconds. Nothing is encrypted at rest.
"""
from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials

from .config import OAuthCredentials, ProfileStore

LOG = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _utc_naive_from_ms(ms: int) -> datetime:
    # google-auth compares expiry against a naive UTC "now"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).replace(tzinfo=None)


def _ms_from_utc_naive(dt: datetime) -> int:
    return int(dt.replace(tzinfo=timezone.utc).timestamp() * 1000)


@dataclass
class Token:
    access_token: str
    refresh_token: Optional[str] = None
    expiry_date: Optional[int] = None
    scope: Optional[str] = None
    token_type: str = "Bearer"

    def is_expired(self, now_ms: Optional[int] = None) -> bool:
        """True once the expiry timestamp has passed; tokens without one never expire."""
        if self.expiry_date is None:
            return False
        return self.expiry_date < (now_ms if now_ms is not None else _now_ms())

    @property
    def scopes(self) -> List[str]:
        return (self.scope or "").split()

    @property
    def expires_at(self) -> Optional[datetime]:
        """Expiry as a local, timezone-aware datetime."""
        if self.expiry_date is None:
            return None
        return datetime.fromtimestamp(self.expiry_date / 1000, tz=timezone.utc).astimezone()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        expiry = data.get("expiry_date")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token") or None,
            expiry_date=int(expiry) if expiry is not None else None,
            scope=data.get("scope") or None,
            token_type=data.get("token_type") or "Bearer",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_credentials(cls, creds: Credentials, previous: Optional["Token"] = None) -> "Token":
        """Snapshot google-auth credentials, keeping fields a refresh did not return."""
        scopes = getattr(creds, "granted_scopes", None) or creds.scopes
        scope = " ".join(scopes) if scopes else (previous.scope if previous else None)
        refresh_token = creds.refresh_token or (previous.refresh_token if previous else None)
        return cls(
            access_token=creds.token,
            refresh_token=refresh_token,
            expiry_date=_ms_from_utc_naive(creds.expiry) if creds.expiry else None,
            scope=scope,
        )

    def to_credentials(self, oauth: OAuthCredentials) -> Credentials:
        """Build google-auth credentials able to refresh against the token endpoint."""
        return Credentials(
            token=self.access_token,
            refresh_token=self.refresh_token,
            token_uri=oauth.token_uri,
            client_id=oauth.client_id,
            client_secret=oauth.client_secret,
            scopes=self.scopes or None,
            expiry=_utc_naive_from_ms(self.expiry_date) if self.expiry_date is not None else None,
        )


class TokenStore:
    """Loads, saves and deletes the active profile's token file."""

    def __init__(self, profiles: ProfileStore) -> None:
        self.profiles = profiles

    @property
    def path(self) -> str:
        return self.profiles.token_path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[Token]:
        """Return the stored token, or None when absent or unreadable."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                return Token.from_dict(json.load(fh))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            LOG.debug("Ignoring unreadable token file %s: %s", self.path, exc)
            return None

    def save(self, token: Token) -> None:
        """Replace the stored token wholesale."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(token.to_dict(), fh, indent=2)
        LOG.debug("Saved token for profile %s to %s", self.profiles.profile, self.path)

    def delete(self) -> bool:
        """Remove the token file. Returns False when there was nothing to remove."""
        if not os.path.exists(self.path):
            return False
        os.remove(self.path)
        LOG.debug("Deleted token file %s", self.path)
        return True
