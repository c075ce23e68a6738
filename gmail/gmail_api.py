"""Minimal Gmail API wrapper.

Provides the subset of the Gmail v1 surface the CLI needs. Every call is
scoped to the authenticated user's own mailbox (``userId="me"``) and runs
synchronously, one request at a time.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

LOG = logging.getLogger(__name__)

SCOPES = [
    # Send messages and drafts
    "https://www.googleapis.com/auth/gmail.send",
    # Read/search
    "https://www.googleapis.com/auth/gmail.readonly",
    # Label listing
    "https://www.googleapis.com/auth/gmail.labels",
    # Modify message labels
    "https://www.googleapis.com/auth/gmail.modify",
]

DRAFT_URL_TEMPLATE = "https://mail.google.com/mail/u/0/#drafts?compose={draft_id}"


def draft_url(draft_id: str) -> str:
    return DRAFT_URL_TEMPLATE.format(draft_id=draft_id)


class GmailClient:
    def __init__(self, service: Any) -> None:
        self._service = service

    @classmethod
    def from_credentials(cls, creds: Credentials) -> "GmailClient":
        return cls(build("gmail", "v1", credentials=creds, cache_discovery=False))

    @property
    def service(self):
        if not self._service:
            raise RuntimeError("GmailClient has no service; build it with from_credentials().")
        return self._service

    def get_profile(self) -> Dict[str, Any]:
        return self.service.users().getProfile(userId="me").execute()

    # --- Labels ---
    def list_labels(self) -> List[Dict[str, Any]]:
        resp = self.service.users().labels().list(userId="me").execute()
        return resp.get("labels", []) or []

    # --- Messages ---
    def list_messages(self, query: Optional[str] = None, max_results: int = 10) -> List[Dict[str, Any]]:
        """Return ``[{"id", "threadId"}, ...]`` for messages matching a Gmail search query."""
        params: Dict[str, Any] = {"userId": "me", "maxResults": int(max_results)}
        if query:
            params["q"] = query
        resp = self.service.users().messages().list(**params).execute()
        return resp.get("messages", []) or []

    def get_message(
        self,
        msg_id: str,
        fmt: str = "full",
        metadata_headers: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"userId": "me", "id": msg_id, "format": fmt}
        if metadata_headers:
            params["metadataHeaders"] = list(metadata_headers)
        return self.service.users().messages().get(**params).execute()

    def modify_message_labels(
        self,
        msg_id: str,
        add_label_ids: Optional[List[str]] = None,
        remove_label_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if add_label_ids:
            body["addLabelIds"] = list(add_label_ids)
        if remove_label_ids:
            body["removeLabelIds"] = list(remove_label_ids)
        return self.service.users().messages().modify(userId="me", id=msg_id, body=body).execute()

    # --- Sending and drafts ---
    def send_message_raw(self, encoded: str, thread_id: Optional[str] = None) -> Dict[str, Any]:
        """Send an already base64url-encoded RFC 822 message."""
        body: Dict[str, Any] = {"raw": encoded}
        if thread_id:
            body["threadId"] = thread_id
        LOG.debug("Sending message (thread=%s, %d encoded bytes)", thread_id, len(encoded))
        return self.service.users().messages().send(userId="me", body=body).execute()

    def create_draft_raw(self, encoded: str, thread_id: Optional[str] = None) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"raw": encoded}
        if thread_id:
            msg["threadId"] = thread_id
        LOG.debug("Creating draft (thread=%s, %d encoded bytes)", thread_id, len(encoded))
        return self.service.users().drafts().create(userId="me", body={"message": msg}).execute()

    # --- Attachments ---
    def get_attachment(self, message_id: str, attachment_id: str) -> Dict[str, Any]:
        return (
            self.service.users()
            .messages()
            .attachments()
            .get(userId="me", messageId=message_id, id=attachment_id)
            .execute()
        )
