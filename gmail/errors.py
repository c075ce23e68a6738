"""Error types raised by the Gmail CLI core."""
from __future__ import annotations

from typing import List, Optional

from core.cli_errors import AuthError, CLIError, ConfigError, NotFoundError

LOGIN_HINT = "Run: gmail auth login"


class ConfigMissingError(ConfigError):
    """config.json is absent, unparseable, or has no profiles section."""


class ProfileNotFoundError(ConfigError):
    def __init__(self, profile: str, available: List[str]):
        self.profile = profile
        self.available = list(available)
        super().__init__(
            f'Profile "{profile}" not found in config.json\n'
            f"Available profiles: {', '.join(self.available)}"
        )


class CredentialsInvalidError(ConfigError):
    """The profile's OAuth client file is missing or malformed."""


class NotAuthenticatedError(AuthError):
    def __init__(self, message: str = "Not authenticated.", hint: Optional[str] = LOGIN_HINT):
        super().__init__(message, hint)


class AuthFlowError(AuthError):
    """The interactive authorization-code flow did not yield a token."""


class TokenRefreshError(AuthError):
    def __init__(self, message: str = "Token expired and refresh failed.", hint: Optional[str] = LOGIN_HINT):
        super().__init__(message, hint)


class LabelNotFoundError(NotFoundError):
    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = list(available)
        super().__init__(
            f'Label "{name}" not found\nAvailable labels: {", ".join(self.available)}',
            hint="Use 'gmail label list' to see all labels",
        )


class AttachmentNotFoundError(NotFoundError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}", hint="Check that the file path is correct")


class AttachmentTooLargeError(CLIError):
    def __init__(self, path: str, size: int):
        self.path = path
        self.size = size
        super().__init__(
            f"File too large: {path} ({round(size / 1024 / 1024)}MB)",
            hint="Gmail limit: 35MB per message",
        )


class MessageTooLargeError(CLIError):
    def __init__(self, total_size: int):
        self.total_size = total_size
        super().__init__(
            f"Message size exceeds Gmail limit (35MB): {round(total_size / 1024 / 1024)}MB",
            hint="Remove or compress attachments",
        )


class MissingMessageIdError(CLIError):
    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(f"Original message {message_id} does not have a Message-ID header")


class AttachmentDataMissingError(CLIError):
    def __init__(self, attachment_id: str):
        self.attachment_id = attachment_id
        super().__init__(f"Attachment data not found: {attachment_id}")
