"""A status block: a shell command whose first output line feeds the status."""

from __future__ import annotations

import os
import subprocess
import threading
from dataclasses import dataclass, field

from .util import truncate_utf8

UTF8_MAX_BYTE_COUNT = 4


class BlockError(Exception):
    """Raised when a block's command cannot be run or its output fetched."""


@dataclass
class _Job:
    """One pending run of a block's command."""

    thread: threading.Thread | None = None
    succeeded: bool = False
    done: threading.Event = field(default_factory=threading.Event)


class Block:
    """A command run on demand whose output is delivered through a pipe.

    Only one run is pending at a time. The pipe's read end becomes readable
    when a run finishes; :meth:`update` then collects the result.
    """

    def __init__(
        self,
        icon: str,
        command: str,
        interval: int = 0,
        signal: int = 0,
        max_output_length: int = 200,
    ) -> None:
        self.icon = icon
        self.command = command
        self.interval = interval
        self.signal = signal
        self.max_output_length = max_output_length
        self.output = ""
        self._buffer_size = max_output_length * UTF8_MAX_BYTE_COUNT + 1
        self._job: _Job | None = None
        try:
            self._read_fd, self._write_fd = os.pipe()
        except OSError as exc:
            raise BlockError(f'could not create a pipe for "{command}" block') from exc

    def __enter__(self) -> Block:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fileno(self) -> int:
        """The read end of the block's pipe, or -1 once closed."""
        return self._read_fd

    def _first_line(self, button: int) -> bytes | None:
        env = None
        if button != 0:
            env = {**os.environ, "BLOCK_BUTTON": str(button)}
        try:
            result = subprocess.run(
                self.command, shell=True, stdout=subprocess.PIPE, env=env, check=False
            )
        except OSError:
            return None
        if result.returncode != 0:
            return None
        line = result.stdout[: self._buffer_size - 1].split(b"\n", 1)[0]
        return truncate_utf8(line, self._buffer_size, self.max_output_length)

    def _run(self, job: _Job, button: int) -> None:
        payload = self._first_line(button)
        job.succeeded = payload is not None
        try:
            os.write(self._write_fd, (payload or b"") + b"\0")
        except OSError:
            pass
        finally:
            job.done.set()

    def execute(self, button: int = 0) -> None:
        """Start the command in the background unless a run is already pending.

        A non-zero ``button`` is passed to the command as ``BLOCK_BUTTON``.
        """
        if self._job is not None:
            return
        if self._write_fd == -1:
            raise BlockError(f'"{self.command}" block is closed')
        job = _Job()
        job.thread = threading.Thread(target=self._run, args=(job, button), daemon=True)
        try:
            job.thread.start()
        except RuntimeError as exc:
            raise BlockError(
                f'could not create a subprocess for "{self.command}" block'
            ) from exc
        self._job = job

    def update(self) -> None:
        """Collect the pending run's output, blocking until it is available."""
        job = self._job
        if job is None:
            raise BlockError(f'"{self.command}" block has no pending output')
        try:
            data = os.read(self._read_fd, self._buffer_size)
        except OSError as exc:
            raise BlockError(f'could not fetch output of "{self.command}" block') from exc
        if job.thread is not None:
            job.thread.join()
        self._job = None
        if not job.succeeded:
            raise BlockError(f'"{self.command}" block exited with non-zero status')
        self.output = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")

    def close(self) -> None:
        """Close both ends of the pipe."""
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
            raise BlockError(f'could not close "{self.command}" block\'s pipe')