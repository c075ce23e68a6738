"""Outgoing MIME message construction.

Builds an RFC 822 message with ``email.message.EmailMessage`` and encodes it
the way the Gmail API ``raw`` field expects: URL-safe base64 without padding.
"""
from __future__ import annotations

import base64
import logging
import mimetypes
import os
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Any, Dict, List, Optional

from core.constants import MAX_MESSAGE_SIZE

from .errors import AttachmentNotFoundError, AttachmentTooLargeError, MessageTooLargeError

LOG = logging.getLogger(__name__)


@dataclass
class OutgoingMessage:
    to: str
    subject: str
    body_text: Optional[str] = None
    body_html: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    sender: Optional[str] = None


@dataclass(frozen=True)
class AttachmentRef:
    path: str
    size: int


def validate_attachment(path: str) -> AttachmentRef:
    if not os.path.exists(path):
        raise AttachmentNotFoundError(path)
    size = os.path.getsize(path)
    if size > MAX_MESSAGE_SIZE:
        raise AttachmentTooLargeError(path, size)
    return AttachmentRef(path=path, size=size)


def validate_attachments(paths: List[str]) -> List[AttachmentRef]:
    """Check each file, then the combined size.

    Only attachment bytes count toward the total; body text is not included.
    """
    refs = [validate_attachment(p) for p in paths or []]
    total = sum(ref.size for ref in refs)
    if total > MAX_MESSAGE_SIZE:
        raise MessageTooLargeError(total)
    LOG.debug("Validated %d attachment(s), %d bytes total", len(refs), total)
    return refs


def _guess_type(path: str) -> tuple[str, str]:
    ctype, encoding = mimetypes.guess_type(path)
    if ctype is None or encoding is not None:
        ctype = "application/octet-stream"
    maintype, subtype = ctype.split("/", 1)
    if maintype in ("multipart", "message"):
        return "application", "octet-stream"
    return maintype, subtype


def _text_kwargs(subtype: str) -> Dict[str, Any]:
    # Bytes + base64 keeps the body byte-exact (str content gains a trailing newline)
    return {"maintype": "text", "subtype": subtype, "cte": "base64", "params": {"charset": "utf-8"}}


def encode_message(msg: EmailMessage) -> str:
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii").rstrip("=")


def build_email_message(request: OutgoingMessage, refs: List[AttachmentRef]) -> EmailMessage:
    msg = EmailMessage()
    if request.sender:
        msg["From"] = request.sender
    msg["To"] = request.to
    if request.cc:
        msg["Cc"] = ", ".join(request.cc)
    if request.bcc:
        msg["Bcc"] = ", ".join(request.bcc)
    msg["Subject"] = request.subject
    for name, value in request.headers.items():
        msg[name] = value

    if request.body_text:
        msg.set_content(request.body_text.encode("utf-8"), **_text_kwargs("plain"))
        if request.body_html:
            msg.add_alternative(request.body_html.encode("utf-8"), **_text_kwargs("html"))
    elif request.body_html:
        msg.set_content(request.body_html.encode("utf-8"), **_text_kwargs("html"))

    for ref in refs:
        maintype, subtype = _guess_type(ref.path)
        with open(ref.path, "rb") as fh:
            data = fh.read()
        msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=os.path.basename(ref.path))
    return msg


def build_mime_message(request: OutgoingMessage) -> str:
    """Validate attachments, build the message and return its encoded raw form.

    Requiring a plain or HTML body is left to the caller.
    """
    refs = validate_attachments(request.attachments)
    return encode_message(build_email_message(request, refs))


def create_draft(client: Any, encoded: str, thread_id: Optional[str] = None) -> Dict[str, Any]:
    """Save an encoded message as a draft, optionally inside an existing thread."""
    return client.create_draft_raw(encoded, thread_id=thread_id)
