"""Send and reply orchestration on top of the MIME composer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.text_utils import extract_angle_address

from .codec import get_header, get_message_body
from .compose import OutgoingMessage, build_mime_message, create_draft
from .errors import MissingMessageIdError
from .gmail_api import draft_url

LOG = logging.getLogger(__name__)

REPLY_PREFIX = "Re:"


@dataclass
class ReplyRequest:
    message_id: str
    body_text: Optional[str] = None
    body_html: Optional[str] = None
    attachments: List[str] = field(default_factory=list)
    quote: bool = False
    draft: bool = False


def _with_draft_url(draft: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(draft)
    out["gmailUrl"] = draft_url(draft.get("id", ""))
    return out


def _deliver(client: Any, encoded: str, draft: bool, thread_id: Optional[str] = None) -> Dict[str, Any]:
    if draft:
        return _with_draft_url(create_draft(client, encoded, thread_id))
    return client.send_message_raw(encoded, thread_id=thread_id)


def send_email(client: Any, request: OutgoingMessage, draft: bool = False) -> Dict[str, Any]:
    """Build the message and send it, or save it as a draft.

    Drafts come back with a ``gmailUrl`` pointing at the compose view.
    """
    encoded = build_mime_message(request)
    LOG.debug("%s message to %s", "Drafting" if draft else "Sending", request.to)
    return _deliver(client, encoded, draft)


def reply_subject(subject: Optional[str]) -> str:
    if subject and subject.startswith(REPLY_PREFIX):
        return subject
    return f"Re: {subject or ''}"


def reply_references(message_id: str, references: Optional[str]) -> str:
    return f"{references} {message_id}" if references else message_id


def quote_text(text: str) -> str:
    return "\n".join(f"> {line}" for line in text.split("\n"))


def build_reply(original: Dict[str, Any], request: ReplyRequest) -> Tuple[OutgoingMessage, Optional[str]]:
    """Derive the reply message and target thread from the original message.

    The References chain is extended, never replaced. Quoting is applied per
    body type and only when both the reply and the original carry that type.
    """
    message_id = get_header(original, "Message-ID")
    if not message_id:
        raise MissingMessageIdError(request.message_id)

    original_from = get_header(original, "From")
    body_text = request.body_text
    body_html = request.body_html

    if request.quote:
        original_body = get_message_body(original)
        if body_text and original_body.text:
            date = get_header(original, "Date")
            body_text = f"{body_text}\n\nOn {date}, {original_from} wrote:\n{quote_text(original_body.text)}"
        if body_html and original_body.html:
            body_html = f"{body_html}<br><br><blockquote>{original_body.html}</blockquote>"

    reply = OutgoingMessage(
        to=extract_angle_address(original_from or ""),
        subject=reply_subject(get_header(original, "Subject")),
        body_text=body_text,
        body_html=body_html,
        attachments=list(request.attachments or []),
        headers={
            "In-Reply-To": message_id,
            "References": reply_references(message_id, get_header(original, "References")),
        },
    )
    return reply, original.get("threadId")


def reply_to_email(client: Any, request: ReplyRequest) -> Dict[str, Any]:
    original = client.get_message(request.message_id, fmt="full")
    reply, thread_id = build_reply(original, request)
    encoded = build_mime_message(reply)
    LOG.debug("Replying to %s in thread %s", request.message_id, thread_id)
    return _deliver(client, encoded, request.draft, thread_id)
