"""Read-side mailbox operations: search, view, labels and attachments."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from core.constants import DEFAULT_SEARCH_RESULTS

from .codec import decode_base64url, find_attachments, get_header, get_message_body
from .errors import AttachmentDataMissingError

LOG = logging.getLogger(__name__)

SUMMARY_HEADERS = ["From", "Subject", "Date"]

__all__ = [
    "search_message_refs",
    "search_messages",
    "view_message",
    "add_label",
    "remove_label",
    "find_attachments",
    "download_attachment",
]


def search_message_refs(client: Any, query: str, max_results: int = DEFAULT_SEARCH_RESULTS) -> List[Dict[str, Any]]:
    return client.list_messages(query, max_results=max_results)


def search_messages(client: Any, query: str, max_results: int = DEFAULT_SEARCH_RESULTS) -> List[Dict[str, Any]]:
    """Search, then fetch From/Subject/Date for each hit one at a time."""
    summaries: List[Dict[str, Any]] = []
    for ref in search_message_refs(client, query, max_results):
        detail = client.get_message(ref["id"], fmt="metadata", metadata_headers=SUMMARY_HEADERS)
        summaries.append({
            "id": ref["id"],
            "threadId": ref.get("threadId"),
            "from": get_header(detail, "From"),
            "subject": get_header(detail, "Subject"),
            "date": get_header(detail, "Date"),
        })
    return summaries


def view_message(client: Any, message_id: str, fmt: str = "full") -> Dict[str, Any]:
    message = client.get_message(message_id, fmt=fmt)
    body = get_message_body(message)
    return {
        "message": message,
        "id": message.get("id"),
        "threadId": message.get("threadId"),
        "from": get_header(message, "From"),
        "to": get_header(message, "To"),
        "subject": get_header(message, "Subject"),
        "date": get_header(message, "Date"),
        "labelIds": list(message.get("labelIds") or []),
        "text": body.text,
        "html": body.html,
    }


def add_label(ctx: Any, message_id: str, label_name: str) -> str:
    label_id = ctx.labels.get_label_id_by_name(label_name)
    ctx.get_gmail_client().modify_message_labels(message_id, add_label_ids=[label_id])
    return label_id


def remove_label(ctx: Any, message_id: str, label_name: str) -> str:
    label_id = ctx.labels.get_label_id_by_name(label_name)
    ctx.get_gmail_client().modify_message_labels(message_id, remove_label_ids=[label_id])
    return label_id


def download_attachment(client: Any, message_id: str, attachment_id: str, out_path: str) -> int:
    """Write an attachment's bytes to ``out_path``, creating parent directories."""
    attachment = client.get_attachment(message_id, attachment_id) or {}
    data = attachment.get("data")
    if not data:
        raise AttachmentDataMissingError(attachment_id)
    content = decode_base64url(data)
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(out_path, "wb") as fh:
        fh.write(content)
    LOG.debug("Wrote %d bytes to %s", len(content), out_path)
    return len(content)
