"""Builders for config dirs, token files and Gmail API payloads.

Nothing here talks to the network; tests hand the results to the real
stores and codecs, or to ``tests.fakes.gmail.FakeGmailClient``.
"""

from __future__ import annotations

import base64
import io
import json
import os
import shutil
import tempfile
from contextlib import contextmanager, redirect_stdout
from email import message_from_bytes, policy
from types import SimpleNamespace
from typing import Dict, List, Optional

CLIENT_ID = "client-123.apps.googleusercontent.com"
CLIENT_SECRET = "shh"


@contextmanager
def capture_stdout():
    out = io.StringIO()
    with redirect_stdout(out):
        yield out


def make_args(**overrides) -> SimpleNamespace:
    """Namespace shaped like parsed ``gmail`` global options."""
    return SimpleNamespace(**{"profile": "default", "config_dir": None, "verbose": False, "json": False, **overrides})


class TempDirMixin:
    """Gives each test a fresh ``self.tmpdir`` to use as the config directory."""

    tmpdir: str

    def setUp(self):
        super().setUp()
        self.tmpdir = tempfile.mkdtemp(prefix="gmail-cli-")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)
        super().tearDown()


# --- config directory ---


def write_json(path: str, data) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh)
    return path


def write_client_file(config_dir: str, kind: str = "installed", filename: str = "client.json") -> str:
    """Write a Google OAuth client file of the given kind ("installed" or "web")."""
    return write_json(
        os.path.join(config_dir, filename),
        {kind: {"client_id": CLIENT_ID, "client_secret": CLIENT_SECRET}},
    )


def write_config(config_dir: str, profiles: Optional[Dict[str, str]] = None) -> str:
    """Write config.json mapping each profile to an OAuth client file.

    With no ``profiles`` a "default" profile pointing at a fresh client file
    is created.
    """
    if profiles is None:
        profiles = {"default": write_client_file(config_dir)}
    doc = {"profiles": {name: {"GMAIL_OAUTH_PATH": path} for name, path in profiles.items()}}
    return write_json(os.path.join(config_dir, "config.json"), doc)


def write_token(config_dir: str, profile: str = "default", **fields) -> str:
    data = {
        "access_token": "ya29.old",
        "refresh_token": "1//refresh",
        "token_type": "Bearer",
        "scope": "https://www.googleapis.com/auth/gmail.readonly",
    }
    data.update(fields)
    return write_json(os.path.join(config_dir, f"{profile}.token.json"), data)


# --- Gmail API payloads ---


def b64url(text) -> str:
    """Encode like the Gmail API does: URL-safe alphabet, padding stripped."""
    raw = text.encode("utf-8") if isinstance(text, str) else text
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def headers(**values: str) -> List[Dict[str, str]]:
    """Build a Gmail header list; underscores in keys become dashes."""
    return [{"name": k.replace("_", "-"), "value": v} for k, v in values.items()]


def text_part(mime_type: str, text: str) -> Dict:
    return {"mimeType": mime_type, "body": {"data": b64url(text)}}


def make_message(
    msg_id: str = "m1",
    thread_id: str = "t1",
    hdrs: Optional[List[Dict[str, str]]] = None,
    parts: Optional[List[Dict]] = None,
    mime_type: str = "multipart/alternative",
    body: Optional[Dict] = None,
    label_ids: Optional[List[str]] = None,
) -> Dict:
    payload: Dict = {"mimeType": mime_type, "headers": hdrs or []}
    if parts is not None:
        payload["parts"] = parts
    if body is not None:
        payload["body"] = body
    msg = {"id": msg_id, "threadId": thread_id, "payload": payload}
    if label_ids is not None:
        msg["labelIds"] = label_ids
    return msg


def parse_raw(encoded: str):
    """Decode a Gmail ``raw`` string back into an ``EmailMessage``."""
    data = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    return message_from_bytes(data, policy=policy.default)
