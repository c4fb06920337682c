import select

import pytest

from statusblocks.block import Block, BlockError


def _run(block, button=0):
    block.execute(button)
    block.update()
    return block.output


def test_first_line_is_output():
    with Block("", "printf 'first\\nsecond\\n'") as block:
        assert _run(block) == "first"


def test_attributes_kept():
    with Block("I", "true", 5, 3) as block:
        assert (block.icon, block.command, block.interval, block.signal) == ("I", "true", 5, 3)
        assert block.output == ""


def test_empty_output():
    with Block("", "true") as block:
        assert _run(block) == ""


def test_button_is_exported():
    with Block("", "echo $BLOCK_BUTTON") as block:
        assert _run(block, 3) == "3"


def test_no_button_leaves_environment(monkeypatch):
    monkeypatch.delenv("BLOCK_BUTTON", raising=False)
    with Block("", "echo ${BLOCK_BUTTON-unset}") as block:
        assert _run(block) == "unset"


def test_output_truncated_to_character_limit():
    with Block("", "echo héllo", max_output_length=3) as block:
        assert _run(block) == "hél"


def test_failure_keeps_previous_output(tmp_path):
    flag = tmp_path / "flag"
    flag.write_text("x")
    with Block("", f"test -e '{flag}' && echo yes || exit 1") as block:
        assert _run(block) == "yes"
        flag.unlink()
        block.execute()
        with pytest.raises(BlockError):
            block.update()
        assert block.output == "yes"


def test_only_one_run_pending():
    with Block("", "echo a") as block:
        block.execute()
        block.execute()
        block.update()
        readable, _, _ = select.select([block], [], [], 0.2)
        assert readable == []
        with pytest.raises(BlockError):
            block.update()


def test_pipe_readable_when_done():
    with Block("", "echo ready") as block:
        block.execute()
        readable, _, _ = select.select([block], [], [], 5)
        assert readable == [block]
        block.update()
        assert block.output == "ready"


def test_close_invalidates_fileno():
    block = Block("", "true")
    assert block.fileno() >= 0
    block.close()
    assert block.fileno() == -1
    with pytest.raises(BlockError):
        block.execute()