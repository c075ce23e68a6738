"""Decorator-driven argparse application.

Commands register on the app or on a (possibly nested) group::

    app = CLIApp("gmail", "Gmail CLI tool")
    auth = app.group("auth", help="Manage authentication")

    @auth.command("logout", help="Remove stored token")
    def cmd_logout(args):
        return run_logout(args)

``@argument`` lines sit below ``@command`` because decorators apply
bottom-up. Every command gets ``args._output`` (an ``OutputWriter``) and
returns its exit code; ``CLIError`` subclasses become exit codes through
``handle_error``.
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .cli_errors import ExitCode, handle_error
from .cli_output import OutputConfig, OutputFormat, OutputWriter

CommandFunc = Callable[[argparse.Namespace], int]
HookFunc = Callable[[argparse.Namespace], None]


@dataclass
class Argument:
    flags: tuple
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandDef:
    name: str
    func: CommandFunc
    help: str = ""
    description: str = ""
    arguments: List[Argument] = field(default_factory=list)


class _CommandScope:
    """One level of the command tree: the app itself or a group."""

    app: "CLIApp"

    def __init__(self) -> None:
        self.commands: Dict[str, CommandDef] = {}
        self.groups: Dict[str, "CommandGroup"] = {}

    def command(self, name: str, *, help: str = "", description: str = "") -> Callable[[CommandFunc], CommandFunc]:
        def decorator(func: CommandFunc) -> CommandFunc:
            # @argument decorators ran first and left their specs pending
            pending = self.app._pending_arguments
            self.commands[name] = CommandDef(
                name=name,
                func=func,
                help=help,
                description=description or help,
                arguments=list(reversed(pending)),
            )
            pending.clear()
            return func
        return decorator

    def argument(self, *flags: str, **options: Any) -> Callable[[CommandFunc], CommandFunc]:
        def decorator(func: CommandFunc) -> CommandFunc:
            self.app._pending_arguments.append(Argument(flags, options))
            return func
        return decorator

    def group(self, name: str, *, help: str = "", description: str = "") -> "CommandGroup":
        grp = CommandGroup(self.app, name, help=help, description=description)
        self.groups[name] = grp
        return grp

    def attach(self, parser: argparse.ArgumentParser, dest: str, metavar: str) -> None:
        """Add this scope's groups and commands as subparsers of ``parser``."""
        if not (self.commands or self.groups):
            return
        sub = parser.add_subparsers(dest=dest, metavar=metavar)
        for grp in self.groups.values():
            grp_parser = sub.add_parser(grp.name, help=grp.help, description=grp.description)
            grp_parser.set_defaults(_group_parser=grp_parser)
            grp.attach(grp_parser, f"{dest}_{grp.name}", "<subcommand>")
        for cmd in self.commands.values():
            cmd_parser = sub.add_parser(cmd.name, help=cmd.help, description=cmd.description)
            for arg in cmd.arguments:
                cmd_parser.add_argument(*arg.flags, **arg.options)
            cmd_parser.set_defaults(_cmd_func=cmd.func)


class CLIApp(_CommandScope):
    """Top-level application; owns the global flags and the run loop.

    Args:
        name: Program name shown in usage.
        description: Text under the usage line.
        version: Adds ``--version``/``-V`` when set.
        epilog: Text after the help.
        default_profile: Value of ``--profile`` when it is not given.
        before_command: Called with the parsed args just before the command.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        version: Optional[str] = None,
        epilog: Optional[str] = None,
        default_profile: str = "default",
        before_command: Optional[HookFunc] = None,
    ):
        super().__init__()
        self.app = self
        self.name = name
        self.description = description
        self.version = version
        self.epilog = epilog
        self.default_profile = default_profile
        self.before_command = before_command
        self._parser: Optional[argparse.ArgumentParser] = None
        self._pending_arguments: List[Argument] = []

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=self.name,
            description=self.description,
            epilog=self.epilog,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        if self.version:
            parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {self.version}")
        parser.add_argument(
            "--profile", "-p",
            default=self.default_profile,
            help=f"Account profile from config.json (default: {self.default_profile})",
        )
        parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging and tracebacks on stderr")
        self.attach(parser, "command", "<command>")
        self._parser = parser
        return parser

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Parse ``argv`` (default ``sys.argv[1:]``), run the command, return its exit code."""
        parser = self._parser or self.build_parser()
        args = parser.parse_args(argv)

        cmd_func = getattr(args, "_cmd_func", None)
        if cmd_func is None:
            # "gmail auth" alone shows the auth group's help
            getattr(args, "_group_parser", parser).print_help()
            return ExitCode.USAGE

        fmt = OutputFormat.JSON if getattr(args, "json", False) else OutputFormat.TEXT
        args._output = OutputWriter(OutputConfig(format=fmt))

        try:
            if self.before_command:
                self.before_command(args)
            return int(cmd_func(args))
        except (Exception, KeyboardInterrupt) as exc:
            return handle_error(exc)

    def main(self, argv: Optional[Sequence[str]] = None) -> None:
        sys.exit(self.run(argv))


class CommandGroup(_CommandScope):
    """A named set of subcommands, e.g. ``auth`` with ``login``/``logout``/``status``."""

    def __init__(self, app: CLIApp, name: str, *, help: str = "", description: str = ""):
        super().__init__()
        self.app = app
        self.name = name
        self.help = help
        self.description = description or help
