"""Turns the signals the status bar reacts to into readable events."""

from __future__ import annotations

import os
import signal
import struct
import sys
import threading
from collections.abc import Callable, Sequence
from typing import Any

from .block import BlockError
from .timer import TIMER_SIGNAL, Timer

REFRESH_SIGNAL = signal.SIGUSR1

# Each delivered signal becomes one record: signal number and its integer value.
_RECORD = struct.Struct("=ii")
_WAIT_SECONDS = 0.1

RefreshCallback = Callable[[Sequence[Any]], None]
TimerCallback = Callable[[Sequence[Any], Timer], None]


class SignalHandler:
    """Collects refresh, timer, termination and per-block signals.

    While open, the handled signals are blocked for normal delivery and
    instead appear as records on a pipe whose read end is :meth:`fileno`,
    so they can be polled together with the blocks' outputs.
    Each block needs ``signal`` and ``command`` attributes and ``execute()``.
    """

    def __init__(
        self,
        blocks: Sequence[Any],
        refresh_callback: RefreshCallback,
        timer_callback: TimerCallback,
    ) -> None:
        self.blocks = blocks
        self.refresh_callback = refresh_callback
        self.timer_callback = timer_callback
        self._read_fd = -1
        self._write_fd = -1
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()
        self._previous_mask: set[int] | None = None

    def __enter__(self) -> SignalHandler:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _handled_signals(self) -> set[int]:
        handled = {REFRESH_SIGNAL, TIMER_SIGNAL, signal.SIGINT, signal.SIGTERM}
        for block in self.blocks:
            if block.signal > 0:
                signo = signal.SIGRTMIN + block.signal
                if signo > signal.SIGRTMAX:
                    raise ValueError(
                        "invalid or unsupported signal specified for "
                        f'"{block.command}" block'
                    )
                handled.add(signo)
        return handled

    def open(self) -> None:
        """Block the handled signals and start routing them to the pipe."""
        if self._thread is not None:
            raise RuntimeError("signal handler is already open")
        handled = frozenset(self._handled_signals())
        try:
            self._read_fd, self._write_fd = os.pipe()
        except OSError as exc:
            raise OSError("could not create file descriptor for signals") from exc

        blocked = set(handled) | set(range(signal.SIGRTMIN, signal.SIGRTMAX + 1))
        self._previous_mask = signal.pthread_sigmask(signal.SIG_BLOCK, blocked)
        self._stop.clear()
        self._thread = threading.Thread(target=self._wait, args=(handled,), daemon=True)
        self._thread.start()

    def _wait(self, handled: frozenset[int]) -> None:
        while not self._stop.is_set():
            info = signal.sigtimedwait(handled, _WAIT_SECONDS)
            if info is None:
                continue
            # On Linux si_status shares its storage with the queued integer value.
            record = _RECORD.pack(info.si_signo, info.si_status)
            try:
                os.write(self._write_fd, record)
            except OSError:
                return

    def close(self) -> None:
        """Stop routing signals, restore the signal mask and close the pipe."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None
        if self._previous_mask is not None:
            signal.pthread_sigmask(signal.SIG_SETMASK, self._previous_mask)
            self._previous_mask = None
        failed = False
        for fd in (self._read_fd, self._write_fd):
            if fd == -1:
                continue
            try:
                os.close(fd)
            except OSError:
                failed = True
        self._read_fd = self._write_fd = -1
        if failed:
            raise OSError("could not close signal file descriptor")

    def fileno(self) -> int:
        """Descriptor that becomes readable when a signal arrives, or -1."""
        return self._read_fd

    def process(self, timer: Timer) -> bool:
        """Handle one pending signal; return whether the program should go on."""
        try:
            data = os.read(self._read_fd, _RECORD.size)
        except OSError:
            data = b""
        if len(data) < _RECORD.size:
            print("error: could not read info of incoming signal", file=sys.stderr)
            return False
        signo, value = _RECORD.unpack(data)

        try:
            if signo == TIMER_SIGNAL:
                self.timer_callback(self.blocks, timer)
                return True
            if signo == REFRESH_SIGNAL:
                self.refresh_callback(self.blocks)
                return True
        except (BlockError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return False

        if signo in (signal.SIGTERM, signal.SIGINT):
            return False

        for block in self.blocks:
            if block.signal == signo - signal.SIGRTMIN:
                try:
                    block.execute(value & 0xFF)
                except BlockError as exc:
                    print(f"error: {exc}", file=sys.stderr)
                break
        return True