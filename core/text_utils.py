"""Shared text processing utilities for the CLI."""
from __future__ import annotations

import re

__all__ = [
    "extract_angle_address",
    "format_file_size",
]


def extract_angle_address(s: str) -> str:
    """Return the text between the first '<' and '>' of a From-like header.

    Falls back to the value unchanged when it has no angle-bracketed part:
        'Name <user@example.com>' -> 'user@example.com'
        'user@example.com' -> 'user@example.com'
    """
    if not s:
        return s
    m = re.search(r"<(.+?)>", s)
    return m.group(1) if m else s


def format_file_size(num_bytes: int) -> str:
    """Human-readable size using 1024-based units.

    Examples:
        0 -> '0 Bytes'
        1536 -> '1.5 KB'
    """
    if not num_bytes:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while i < len(units) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = round(num_bytes / 1024 ** i, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"
