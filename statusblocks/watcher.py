"""Waits for block outputs and incoming signals."""

from __future__ import annotations

import select
from collections.abc import Sequence
from typing import Any


class Watcher:
    """Polls the blocks' pipes and the signal descriptor for readability.

    Each block must provide ``fileno()``.
    """

    def __init__(self, blocks: Sequence[Any], signal_fd: int) -> None:
        if signal_fd < 0:
            raise ValueError("invalid signal file descriptor passed to watcher")
        self._poller = select.poll()
        self._indices: dict[int, int] = {}
        for index, block in enumerate(blocks):
            fd = block.fileno()
            if fd < 0:
                raise ValueError("invalid block file descriptors passed to watcher")
            self._indices[fd] = index
            self._poller.register(fd, select.POLLIN)
        self._signal_fd = signal_fd
        self._poller.register(signal_fd, select.POLLIN)
        self.got_signal = False
        self.active_blocks: list[int] = []

    def poll(self, timeout_ms: int = -1) -> list[int]:
        """Wait up to ``timeout_ms`` (forever if negative) for readable input.

        Sets ``got_signal`` and ``active_blocks`` and returns the indices of
        blocks with output ready, in block order.
        """
        events = self._poller.poll(None if timeout_ms < 0 else timeout_ms)
        readable = {fd for fd, mask in events if mask & select.POLLIN}
        self.got_signal = self._signal_fd in readable
        self.active_blocks = sorted(
            self._indices[fd] for fd in readable if fd in self._indices
        )
        return self.active_blocks