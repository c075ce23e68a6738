"""Command runners behind the ``gmail`` CLI.

Each ``run_*`` takes the parsed argparse namespace, calls into the core and
renders the result through ``args._output``. Returning an int exit code is
the only contract with the CLI framework.
"""
from __future__ import annotations

import argparse
from typing import List

from core.cli_errors import UsageError
from core.cli_output import OutputWriter
from core.text_utils import format_file_size

from .auth import AuthState, AuthStatus
from .compose import OutgoingMessage
from .context import GmailContext
from .mailbox import (
    add_label,
    download_attachment,
    find_attachments,
    remove_label,
    search_message_refs,
    search_messages,
    view_message,
)
from .sender import ReplyRequest, reply_to_email, send_email

BODY_REQUIRED = "Either --body-txt or --body-html is required"


def _ctx(args: argparse.Namespace) -> GmailContext:
    ctx = getattr(args, "_ctx", None)
    if ctx is None:
        ctx = GmailContext.from_args(args)
        args._ctx = ctx
    return ctx


def _out(args: argparse.Namespace) -> OutputWriter:
    return getattr(args, "_output", None) or OutputWriter()


def _require_body(args: argparse.Namespace) -> None:
    if not getattr(args, "body_txt", None) and not getattr(args, "body_html", None):
        raise UsageError(BODY_REQUIRED)


def _print_account(out: OutputWriter, status: AuthStatus) -> None:
    out.print(f"Email: {status.email}")
    out.print("Scopes:")
    if status.scopes:
        for scope in status.scopes:
            out.print(f" - {scope}")
    else:
        out.print(" - Unknown")
    if status.expires_at:
        out.print(f"Token expires: {status.expires_at.strftime('%Y-%m-%d %H:%M:%S')}")


# --- auth ---

def run_auth_login(args: argparse.Namespace) -> int:
    out = _out(args)
    ctx = _ctx(args)
    ctx.auth.echo = out.print
    status = ctx.auth.login(timeout=getattr(args, "timeout", None))
    out.print("\nAuthentication successful!")
    _print_account(out, status)
    return 0


def run_auth_logout(args: argparse.Namespace) -> int:
    out = _out(args)
    if _ctx(args).auth.logout():
        out.print("Logged out successfully")
    else:
        out.print("Not currently logged in")
    return 0


def run_auth_status(args: argparse.Namespace) -> int:
    out = _out(args)
    ctx = _ctx(args)
    status = ctx.auth.check_status()
    out.print(f"Profile: {ctx.profile}")
    if status.state == AuthState.UNAUTHENTICATED:
        out.print("Status: Not authenticated")
        out.print('Run "gmail auth login" to authenticate')
    elif status.state == AuthState.INVALID:
        out.print("Status: Token expired or invalid")
        out.print('Run "gmail auth login" to re-authenticate')
    else:
        out.print("Status: Authenticated")
        _print_account(out, status)
    return 0


# --- email ---

def run_email_search(args: argparse.Namespace) -> int:
    out = _out(args)
    client = _ctx(args).get_gmail_client()
    max_results = int(args.max_results)
    if out.json:
        out.print_data(search_message_refs(client, args.query, max_results))
        return 0
    results = search_messages(client, args.query, max_results)
    if not results:
        out.print("No messages found")
        return 0
    out.print(f"Found {len(results)} message(s):\n")
    for item in results:
        out.print(f"ID: {item['id']}")
        out.print(f"From: {item['from']}")
        out.print(f"Subject: {item['subject']}")
        out.print(f"Date: {item['date']}")
        out.print("")
    return 0


def run_email_view(args: argparse.Namespace) -> int:
    out = _out(args)
    view = view_message(_ctx(args).get_gmail_client(), args.message_id, fmt=args.format)
    if out.json:
        out.print_data(view["message"])
        return 0
    out.print("\n=== Email Details ===\n")
    out.print(f"Message ID: {view['id']}")
    out.print(f"Thread ID: {view['threadId']}")
    out.print(f"From: {view['from']}")
    out.print(f"To: {view['to']}")
    out.print(f"Subject: {view['subject']}")
    out.print(f"Date: {view['date']}")
    if view["labelIds"]:
        out.print(f"Labels: {', '.join(view['labelIds'])}")
    out.print("\n=== Body ===\n")
    if view["text"]:
        out.print(view["text"])
    elif view["html"]:
        out.print("[HTML content - use --format full --json to see raw HTML]")
    else:
        out.print("[No body content]")
    out.print("")
    return 0


def _print_delivery(out: OutputWriter, result: dict, draft: bool, lines: List[str]) -> None:
    if draft:
        out.print("Draft created")
        out.print(f"  Draft ID: {result.get('id')}")
        out.print(f"  Open: {result.get('gmailUrl')}")
        return
    out.print(f"  Message ID: {result.get('id')}")
    out.print(f"  Thread ID: {result.get('threadId')}")
    for line in lines:
        out.print(f"  {line}")


def run_email_send(args: argparse.Namespace) -> int:
    _require_body(args)
    out = _out(args)
    request = OutgoingMessage(
        to=args.to,
        subject=args.subject,
        body_text=args.body_txt,
        body_html=args.body_html,
        cc=list(args.cc or []),
        bcc=list(args.bcc or []),
        attachments=list(args.attach or []),
    )
    result = send_email(_ctx(args).get_gmail_client(), request, draft=args.draft)
    if out.json:
        out.print_data(result)
        return 0
    if not args.draft:
        out.print("Email sent successfully")
    _print_delivery(out, result, args.draft, [f"To: {args.to}", f"Subject: {args.subject}"])
    return 0


def run_email_reply(args: argparse.Namespace) -> int:
    _require_body(args)
    out = _out(args)
    request = ReplyRequest(
        message_id=args.message_id,
        body_text=args.body_txt,
        body_html=args.body_html,
        attachments=list(args.attach or []),
        quote=args.quote,
        draft=args.draft,
    )
    result = reply_to_email(_ctx(args).get_gmail_client(), request)
    if out.json:
        out.print_data(result)
        return 0
    if not args.draft:
        out.print("Reply sent successfully")
    _print_delivery(out, result, args.draft, [f"In reply to: {args.message_id}"])
    return 0


def run_email_label_add(args: argparse.Namespace) -> int:
    out = _out(args)
    add_label(_ctx(args), args.message_id, args.label)
    out.print("Label added successfully")
    out.print(f"  Message ID: {args.message_id}")
    out.print(f"  Label: {args.label}")
    return 0


def run_email_label_remove(args: argparse.Namespace) -> int:
    out = _out(args)
    remove_label(_ctx(args), args.message_id, args.label)
    out.print("Label removed successfully")
    out.print(f"  Message ID: {args.message_id}")
    out.print(f"  Label: {args.label}")
    return 0


# --- labels ---

def run_label_list(args: argparse.Namespace) -> int:
    out = _out(args)
    labels = _ctx(args).labels.get_labels(force_refresh=True)
    if out.json:
        out.print_data(labels)
        return 0
    if not labels:
        out.print("No labels found")
        return 0
    out.print(f"Found {len(labels)} label(s):\n")
    user_labels = [lab for lab in labels if lab.get("type") == "user"]
    system_labels = [lab for lab in labels if lab.get("type") == "system"]
    if user_labels:
        out.print("User Labels:")
        for lab in user_labels:
            out.print(f"  {lab.get('name')} ({lab.get('id')})")
        out.print("")
    if system_labels:
        out.print("System Labels:")
        for lab in system_labels:
            out.print(f"  {lab.get('name')} ({lab.get('id')})")
    return 0


# --- attachments ---

def run_attachment_list(args: argparse.Namespace) -> int:
    out = _out(args)
    message = _ctx(args).get_gmail_client().get_message(args.message_id, fmt="full")
    attachments = find_attachments(message)
    if out.json:
        out.print_data(attachments)
        return 0
    if not attachments:
        out.print("No attachments found")
        return 0
    out.print(f"Found {len(attachments)} attachment(s):\n")
    for index, att in enumerate(attachments, start=1):
        out.print(f"{index}. {att['filename']}")
        out.print(f"   ID: {att['id']}")
        out.print(f"   Type: {att['mimeType']}")
        out.print(f"   Size: {format_file_size(att['size'])}")
        out.print("")
    out.print("To download: gmail attachment download <attachmentId> --message-id <messageId> --out <path>")
    return 0


def run_attachment_download(args: argparse.Namespace) -> int:
    out = _out(args)
    size = download_attachment(
        _ctx(args).get_gmail_client(),
        args.message_id,
        args.attachment_id,
        args.out,
    )
    out.print("Attachment downloaded")
    out.print(f"  File: {args.out}")
    out.print(f"  Size: {format_file_size(size)}")
    return 0
