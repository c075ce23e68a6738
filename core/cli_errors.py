"""Exit codes and the error base class every command failure derives from.

A command raises a ``CLIError`` subclass; ``CLIApp.run`` hands it to
``handle_error``, which prints it and picks the process exit code from the
error's class.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

LOG = logging.getLogger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    USAGE = 2
    CONFIG_ERROR = 3
    AUTH_ERROR = 4
    NOT_FOUND = 6
    INTERRUPTED = 130  # 128 + SIGINT


@dataclass
class CLIError(Exception):
    """A failure reported to the user as ``Error: ...`` plus an optional ``Hint: ...``."""

    message: str
    hint: Optional[str] = None

    code: ClassVar[ExitCode] = ExitCode.ERROR

    def __str__(self) -> str:
        return self.message


class ConfigError(CLIError):
    code = ExitCode.CONFIG_ERROR


class AuthError(CLIError):
    code = ExitCode.AUTH_ERROR


class NotFoundError(CLIError):
    code = ExitCode.NOT_FOUND


class UsageError(CLIError):
    code = ExitCode.USAGE


def handle_error(error: BaseException) -> int:
    """Report ``error`` on stderr and return the exit code to use.

    Upstream API failures (HTTP errors, quota, permissions) are not wrapped;
    their own text is printed. The traceback goes to the debug log, so it
    shows up under ``--verbose``.
    """
    if isinstance(error, KeyboardInterrupt):
        print("\nInterrupted.", file=sys.stderr)
        return ExitCode.INTERRUPTED

    print(f"Error: {error}", file=sys.stderr)
    if isinstance(error, CLIError):
        if error.hint:
            print(f"Hint: {error.hint}", file=sys.stderr)
        return error.code

    LOG.debug("Unhandled %s", type(error).__name__, exc_info=error)
    return ExitCode.ERROR
