"""Assembly of the status line from block outputs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .config import Config, default_config


class Status:
    """The current and previous status lines built from a set of blocks.

    Each block needs ``icon``, ``signal`` and ``output`` attributes.
    """

    def __init__(self, blocks: Sequence[Any], config: Config | None = None) -> None:
        self.blocks = blocks
        self.config = config if config is not None else default_config()
        self.current = ""
        self.previous = ""

    def _segment(self, block: Any) -> str:
        prefix = chr(block.signal) if self.config.clickable_blocks and block.signal > 0 else ""
        return f"{prefix}{block.icon}{block.output}"

    def update(self) -> bool:
        """Rebuild the status line; return whether it changed."""
        self.previous = self.current
        delimiter = self.config.delimiter
        segments = [self._segment(b) for b in self.blocks if b.output]
        text = delimiter.join(segments)
        if self.config.leading_delimiter and segments:
            text = delimiter + text
        if self.config.trailing_delimiter and text:
            text += delimiter
        self.current = text
        return self.current != self.previous

    def write(self, is_debug_mode: bool, connection: Any) -> None:
        """Print the status in debug mode, otherwise set it as the root name."""
        if is_debug_mode:
            print(self.current, flush=True)
            return
        connection.set_root_name(self.current)