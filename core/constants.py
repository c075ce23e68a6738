"""Shared constants and config-directory resolution."""

from __future__ import annotations

import os

APP_DIR_NAME = "gmail"
CONFIG_DIR_ENV = "GMAIL_CLI_CONFIG_DIR"


def _config_roots() -> list[str]:
    """Return ordered list of config root directories."""
    roots: list[str] = []
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        roots.append(os.path.expanduser(xdg))
    roots.append(os.path.expanduser("~/.config"))
    return roots


def default_config_dir() -> str:
    """Return the directory holding config.json and per-profile token files.

    Resolution order: $GMAIL_CLI_CONFIG_DIR > $XDG_CONFIG_HOME/gmail > ~/.config/gmail.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return os.path.expanduser(override)
    return os.path.join(_config_roots()[0], APP_DIR_NAME)


# Gmail rejects messages above this size, attachments included
MAX_MESSAGE_SIZE = 35 * 1024 * 1024

# Local OAuth redirect listener
REDIRECT_HOST = "localhost"
REDIRECT_PORT = 3000
REDIRECT_URI = f"http://{REDIRECT_HOST}:{REDIRECT_PORT}"

DEFAULT_SEARCH_RESULTS = 10
