"""Gmail CLI using the CLIApp framework.

Command groups:
  auth        login / logout / status for the active profile
  email       search, view, send, reply and per-message labels
  label       list the mailbox's labels
  attachment  list and download message attachments

``--profile`` selects the account and must come before the command.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from core.cli_framework import CLIApp
from core.constants import DEFAULT_SEARCH_RESULTS

from .. import __version__
from ..commands import (
    run_attachment_download,
    run_attachment_list,
    run_auth_login,
    run_auth_logout,
    run_auth_status,
    run_email_label_add,
    run_email_label_remove,
    run_email_reply,
    run_email_search,
    run_email_send,
    run_email_view,
    run_label_list,
)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(args) -> None:
    """Send library and app logs to stderr; --verbose turns on DEBUG."""
    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


app = CLIApp(
    "gmail",
    "Gmail CLI tool",
    version=__version__,
    before_command=configure_logging,
)


# --- auth group ---
auth_group = app.group("auth", help="Manage authentication")


@auth_group.command("login", help="Authenticate with Gmail")
@auth_group.argument(
    "--timeout",
    type=float,
    default=None,
    help="Give up waiting for the browser redirect after N seconds (default: wait forever)",
)
def cmd_auth_login(args) -> int:
    return run_auth_login(args)


@auth_group.command("logout", help="Remove authentication credentials")
def cmd_auth_logout(args) -> int:
    return run_auth_logout(args)


@auth_group.command("status", help="Check authentication status")
def cmd_auth_status(args) -> int:
    return run_auth_status(args)


# --- email group ---
email_group = app.group("email", help="Manage emails")


@email_group.command("search", help="Search for emails")
@email_group.argument("query", help="Search query (Gmail search syntax)")
@email_group.argument("--max-results", type=int, default=DEFAULT_SEARCH_RESULTS, help="Maximum number of results")
@email_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_email_search(args) -> int:
    return run_email_search(args)


@email_group.command("view", help="View an email")
@email_group.argument("message_id", metavar="messageId", help="Gmail message ID")
@email_group.argument(
    "--format",
    default="full",
    choices=["full", "metadata", "minimal", "raw"],
    help="Message format (default: full)",
)
@email_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_email_view(args) -> int:
    return run_email_view(args)


@email_group.command("send", help="Send an email")
@email_group.argument("to", help="Recipient email address")
@email_group.argument("--subject", required=True, help="Email subject")
@email_group.argument("--body-txt", help="Plain text body")
@email_group.argument("--body-html", help="HTML body")
@email_group.argument("--attach", nargs="+", action="extend", help="Attach files (can be repeated)")
@email_group.argument("--cc", nargs="+", action="extend", help="CC recipients (can be repeated)")
@email_group.argument("--bcc", nargs="+", action="extend", help="BCC recipients (can be repeated)")
@email_group.argument("--draft", action="store_true", help="Save as a draft instead of sending")
@email_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_email_send(args) -> int:
    return run_email_send(args)


@email_group.command("reply", help="Reply to an email")
@email_group.argument("message_id", metavar="messageId", help="Gmail message ID to reply to")
@email_group.argument("--body-txt", help="Plain text reply")
@email_group.argument("--body-html", help="HTML reply")
@email_group.argument("--attach", nargs="+", action="extend", help="Attach files (can be repeated)")
@email_group.argument("--quote", action="store_true", help="Include original message in reply")
@email_group.argument("--draft", action="store_true", help="Save the reply as a draft in the thread")
@email_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_email_reply(args) -> int:
    return run_email_reply(args)


email_label_group = email_group.group("label", help="Manage email labels")


@email_label_group.command("add", help="Add label to an email")
@email_label_group.argument("message_id", metavar="messageId", help="Gmail message ID")
@email_label_group.argument("label", metavar="labelName", help="Label name")
def cmd_email_label_add(args) -> int:
    return run_email_label_add(args)


@email_label_group.command("remove", help="Remove label from an email")
@email_label_group.argument("message_id", metavar="messageId", help="Gmail message ID")
@email_label_group.argument("label", metavar="labelName", help="Label name")
def cmd_email_label_remove(args) -> int:
    return run_email_label_remove(args)


# --- label group ---
label_group = app.group("label", help="Manage labels")


@label_group.command("list", help="List all labels")
@label_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_label_list(args) -> int:
    return run_label_list(args)


# --- attachment group ---
attachment_group = app.group("attachment", help="Manage email attachments")


@attachment_group.command("list", help="List attachments in a message")
@attachment_group.argument("message_id", metavar="messageId", help="Gmail message ID")
@attachment_group.argument("--json", action="store_true", help="Output in JSON format")
def cmd_attachment_list(args) -> int:
    return run_attachment_list(args)


@attachment_group.command("download", help="Download an attachment")
@attachment_group.argument("attachment_id", metavar="attachmentId", help="Attachment ID")
@attachment_group.argument("--message-id", required=True, help="Message ID containing the attachment")
@attachment_group.argument("--out", required=True, help="Output file path")
def cmd_attachment_download(args) -> int:
    return run_attachment_download(args)


def main(argv: Optional[List[str]] = None) -> None:
    app.main(argv)


if __name__ == "__main__":
    main()
