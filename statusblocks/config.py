"""Status bar configuration: the blocks and how their outputs are joined."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BlockSpec:
    """Definition of one status block.

    ``interval`` is in seconds; 0 means the block only runs on a signal.
    ``signal`` is an offset from SIGRTMIN; 0 means no signal.
    """

    icon: str
    command: str
    interval: int = 0
    signal: int = 0


_DEFAULT_BLOCKS = (
    BlockSpec("", "~/.config/dwm/scripts/music.sh", 5, 1),
    BlockSpec("", "~/.config/dwm/scripts/light.sh", 0, 13),
    BlockSpec("", "~/.config/dwm/scripts/audio.sh", 0, 10),
    BlockSpec("", "~/.config/dwm/scripts/battery.sh", 0, 12),
    BlockSpec("", "~/.config/dwm/scripts/wifi.sh", 30, 16),
    BlockSpec("", "~/.config/dwm/scripts/date.sh", 60, 17),
)


@dataclass(frozen=True)
class Config:
    """Settings that control how the status line is built."""

    delimiter: str = "  "
    max_block_output_length: int = 200
    clickable_blocks: bool = True
    leading_delimiter: bool = False
    trailing_delimiter: bool = False
    blocks: tuple[BlockSpec, ...] = field(default_factory=tuple)

    @property
    def block_count(self) -> int:
        return len(self.blocks)


def default_config() -> Config:
    """Return the stock configuration with its six blocks."""
    return Config(blocks=_DEFAULT_BLOCKS)