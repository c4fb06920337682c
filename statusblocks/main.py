"""Program entry point: runs the blocks and publishes the status line."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from .block import Block, BlockError
from .cli import UsageError, parse_arguments
from .config import Config, default_config
from .signal_handler import SignalHandler
from .status import Status
from .timer import Timer
from .watcher import Watcher
from .x11 import X11Error, connect


def execute_blocks(blocks: Sequence[Any], timer: Timer | None) -> None:
    """Start every block that is due; with no timer, start them all."""
    for block in blocks:
        if timer is None or timer.must_run(block.interval):
            block.execute(0)


def trigger_event(blocks: Sequence[Any], timer: Timer) -> None:
    """Run the due blocks and schedule the next timer tick."""
    execute_blocks(blocks, timer)
    timer.arm()


def _refresh(blocks: Sequence[Any]) -> None:
    execute_blocks(blocks, None)


def event_loop(
    blocks: Sequence[Any],
    is_debug_mode: bool,
    connection: Any,
    signal_handler: SignalHandler,
    config: Config | None = None,
) -> None:
    """Wait for block output and signals until a termination signal arrives."""
    timer = Timer(block.interval for block in blocks)
    # Kickstart with an initial execution of every block.
    trigger_event(blocks, timer)

    watcher = Watcher(blocks, signal_handler.fileno())
    status = Status(blocks, config)
    is_alive = True
    while is_alive:
        watcher.poll(-1)
        if watcher.got_signal:
            is_alive = signal_handler.process(timer)

        for index in watcher.active_blocks:
            try:
                blocks[index].update()
            except BlockError as exc:
                print(f"error: {exc}", file=sys.stderr)

        if status.update():
            status.write(is_debug_mode, connection)


def _close_blocks(blocks: Sequence[Block]) -> bool:
    ok = True
    for block in blocks:
        try:
            block.close()
        except BlockError as exc:
            print(f"error: {exc}", file=sys.stderr)
            ok = False
    return ok


def _run(is_debug_mode: bool, connection: Any, config: Config) -> int:
    blocks: list[Block] = []
    try:
        for spec in config.blocks:
            blocks.append(
                Block(
                    spec.icon,
                    spec.command,
                    spec.interval,
                    spec.signal,
                    max_output_length=config.max_block_output_length,
                )
            )
    except BlockError as exc:
        print(f"error: {exc}", file=sys.stderr)
        _close_blocks(blocks)
        return 1

    status = 0
    handler = SignalHandler(blocks, _refresh, trigger_event)
    try:
        handler.open()
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        status = 1
    else:
        try:
            event_loop(blocks, is_debug_mode, connection, handler, config)
        except (BlockError, X11Error, ValueError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            status = 1
        try:
            handler.close()
        except OSError as exc:
            print(f"error: {exc}", file=sys.stderr)
            status = 1

    if not _close_blocks(blocks):
        status = 1
    return status


def main(argv: Sequence[str] | None = None) -> int:
    """Run the status feed; return the process exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        args = parse_arguments(argv)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        connection = connect()
    except X11Error as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        return _run(args.is_debug_mode, connection, default_config())
    finally:
        connection.close()


if __name__ == "__main__":
    sys.exit(main())