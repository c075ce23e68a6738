"""Gmail package.

Command-line access to one Gmail mailbox per named profile: OAuth login,
search and view, send and reply with attachments, label changes and
attachment downloads.

Public CLI entry lives in gmail.cli.main.
"""

__all__ = [
    "__version__",
]

__version__ = "1.2.0"
