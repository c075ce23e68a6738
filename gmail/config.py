"""Profile configuration: config.json lookup and OAuth client credentials.

config.json maps profile names to the path of a Google-issued OAuth client
file::

    {"profiles": {"default": {"GMAIL_OAUTH_PATH": "~/secrets/client.json"}}}
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.constants import REDIRECT_URI, default_config_dir

from .errors import ConfigMissingError, CredentialsInvalidError, ProfileNotFoundError

LOG = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
CONFIG_FILENAME = "config.json"
OAUTH_PATH_KEY = "GMAIL_OAUTH_PATH"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def expand_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return path
    return os.path.expanduser(path)


@dataclass(frozen=True)
class ProfileConfig:
    """One profile entry from config.json."""

    name: str
    oauth_path: str


@dataclass(frozen=True)
class OAuthCredentials:
    """OAuth client identity for the authorization-code grant."""

    client_id: str
    client_secret: str
    redirect_uri: str = REDIRECT_URI
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    def to_client_config(self) -> Dict[str, Any]:
        """Return the shape google_auth_oauthlib expects from a client file."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [self.redirect_uri],
            }
        }


class ProfileStore:
    """Resolves the active profile and its files under the config directory.

    The profile is fixed at construction; a new store is built per invocation.
    """

    def __init__(self, profile: Optional[str] = None, config_dir: Optional[str] = None) -> None:
        self.profile = profile or DEFAULT_PROFILE
        self.config_dir = expand_path(config_dir) or default_config_dir()

    @property
    def config_path(self) -> str:
        return os.path.join(self.config_dir, CONFIG_FILENAME)

    @property
    def token_path(self) -> str:
        return os.path.join(self.config_dir, f"{self.profile}.token.json")

    def _read_config(self) -> Dict[str, Any]:
        path = self.config_path
        if not os.path.exists(path):
            raise ConfigMissingError(
                f"Config file not found at {path}",
                hint='Create it with a "profiles" section',
            )
        try:
            with open(path, "r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except (OSError, ValueError) as exc:
            raise ConfigMissingError(f"Failed to parse config file {path}: {exc}") from exc
        profiles = doc.get("profiles") if isinstance(doc, dict) else None
        if not isinstance(profiles, dict):
            raise ConfigMissingError(f'No "profiles" section found in {path}')
        return profiles

    def load_profile_config(self) -> ProfileConfig:
        """Return the active profile's entry, failing fast when absent."""
        profiles = self._read_config()
        entry = profiles.get(self.profile)
        if not isinstance(entry, dict):
            raise ProfileNotFoundError(self.profile, list(profiles.keys()))
        oauth_path = entry.get(OAUTH_PATH_KEY)
        if not oauth_path:
            raise CredentialsInvalidError(f'{OAUTH_PATH_KEY} not found in profile "{self.profile}"')
        return ProfileConfig(name=self.profile, oauth_path=expand_path(str(oauth_path)))

    def load_credentials(self) -> OAuthCredentials:
        """Load the OAuth client from the file named by the active profile.

        Both "installed" (desktop) and "web" client files are accepted.
        """
        cfg = self.load_profile_config()
        if not os.path.exists(cfg.oauth_path):
            raise CredentialsInvalidError(f"OAuth credentials file not found at {cfg.oauth_path}")
        try:
            with open(cfg.oauth_path, "r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except (OSError, ValueError) as exc:
            raise CredentialsInvalidError(f"Failed to load OAuth credentials: {exc}") from exc

        creds = (doc.get("installed") or doc.get("web")) if isinstance(doc, dict) else None
        if not isinstance(creds, dict):
            raise CredentialsInvalidError('Invalid credentials format. Expected "installed" or "web" object.')
        client_id = creds.get("client_id")
        client_secret = creds.get("client_secret")
        if not client_id or not client_secret:
            raise CredentialsInvalidError("OAuth credentials file is missing client_id or client_secret")
        LOG.debug("Loaded OAuth client for profile %s from %s", self.profile, cfg.oauth_path)
        return OAuthCredentials(
            client_id=client_id,
            client_secret=client_secret,
            auth_uri=creds.get("auth_uri") or GOOGLE_AUTH_URI,
            token_uri=creds.get("token_uri") or GOOGLE_TOKEN_URI,
        )
