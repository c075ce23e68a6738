"""Per-invocation application context."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .auth import AuthManager
from .config import ProfileStore
from .gmail_api import GmailClient
from .labels import LabelResolver
from .tokens import TokenStore


@dataclass
class GmailContext:
    """Everything one command needs, built once after the profile is chosen.

    The API client and label cache are created lazily on first use and live
    as long as the context.
    """

    profiles: ProfileStore
    tokens: TokenStore = field(init=False)
    auth: AuthManager = field(init=False)
    labels: LabelResolver = field(init=False)
    gmail_client: Optional[GmailClient] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.tokens = TokenStore(self.profiles)
        self.auth = AuthManager(self.profiles, self.tokens)
        self.labels = LabelResolver(self.get_gmail_client)

    @classmethod
    def from_args(cls, args: object) -> "GmailContext":
        profile = getattr(args, "profile", None)
        config_dir = getattr(args, "config_dir", None)
        return cls(ProfileStore(profile=profile, config_dir=config_dir))

    @property
    def profile(self) -> str:
        return self.profiles.profile

    def get_gmail_client(self) -> GmailClient:
        if self.gmail_client is not None:
            return self.gmail_client
        client = GmailClient.from_credentials(self.auth.get_auth_client())
        self.gmail_client = client
        return client
