"""Command-line option parsing."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

PROG = "statusblocks"


class UsageError(Exception):
    """Raised when the command line is invalid or help was requested."""


@dataclass(frozen=True)
class CliArguments:
    is_debug_mode: bool = False


def _option_chars(args: Sequence[str]):
    """Yield each short option character; non-options are skipped."""
    for arg in args:
        if arg == "--":
            return
        if arg.startswith("--"):
            yield arg
        elif arg.startswith("-") and len(arg) > 1:
            yield from arg[1:]


def parse_arguments(argv: Sequence[str]) -> CliArguments:
    """Parse the arguments that follow the program name.

    Every option is examined; if any is unknown, or ``-h`` is given, a
    :class:`UsageError` is raised whose message holds all diagnostics.
    """
    is_debug_mode = False
    messages: list[str] = []
    for option in _option_chars(argv):
        if option == "d":
            is_debug_mode = True
            continue
        if option != "h":
            shown = option if option.startswith("--") else f"-{option}"
            messages.append(f"error: unknown option `{shown}'")
        messages.append(f"usage: {PROG} [-d]")
    if messages:
        raise UsageError("\n".join(messages))
    return CliArguments(is_debug_mode=is_debug_mode)