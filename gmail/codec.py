"""Decoding of Gmail API message payloads.

Messages arrive as ``{"id", "threadId", "payload": {...}}`` where the payload
is a MIME tree: each node has ``mimeType``, ``headers``, ``body`` (with
base64url ``data`` or an ``attachmentId``) and optional child ``parts``.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class MessageBody:
    text: str = ""
    html: str = ""


def decode_base64url(data: Optional[str]) -> bytes:
    """Decode URL-safe base64 as sent by Gmail (padding may be omitted)."""
    if not data:
        return b""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def decode_base64url_text(data: Optional[str]) -> str:
    return decode_base64url(data).decode("utf-8", errors="replace")


def get_header(message: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive lookup over the top-level payload headers only."""
    wanted = name.lower()
    for header in (message.get("payload") or {}).get("headers") or []:
        if (header.get("name") or "").lower() == wanted:
            return header.get("value")
    return None


def walk_parts(payload: Optional[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
    """Yield the payload and every nested part in depth-first pre-order.

    Uses an explicit stack so pathological nesting cannot hit the recursion limit.
    """
    if not payload:
        return
    stack = [payload]
    while stack:
        part = stack.pop()
        yield part
        children = part.get("parts") or []
        stack.extend(reversed(children))


def get_message_body(message: Dict[str, Any]) -> MessageBody:
    """Extract the plain and HTML bodies from a message.

    Every ``text/plain`` or ``text/html`` part with inline data overwrites the
    previous one of its type, so the last part in depth-first order wins.
    For a multipart/alternative nested inside another alternative this can
    pick an unexpected part; the ordering is kept as is.
    """
    body = MessageBody()
    for part in walk_parts(message.get("payload")):
        data = (part.get("body") or {}).get("data")
        if not data:
            continue
        mime_type = part.get("mimeType")
        if mime_type == "text/plain":
            body.text = decode_base64url_text(data)
        elif mime_type == "text/html":
            body.html = decode_base64url_text(data)
    return body


def find_attachments(message: Dict[str, Any]) -> List[Dict[str, Any]]:
    """List parts that are downloadable attachments (filename + attachmentId)."""
    found: List[Dict[str, Any]] = []
    for part in walk_parts(message.get("payload")):
        body = part.get("body") or {}
        if part.get("filename") and body.get("attachmentId"):
            found.append({
                "id": body["attachmentId"],
                "filename": part["filename"],
                "mimeType": part.get("mimeType"),
                "size": body.get("size", 0),
            })
    return found
