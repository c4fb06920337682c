# statusblocks

A modular status feed for dwm. Each block runs a shell command and keeps the first line that the command prints. The outputs of all blocks are joined into one line. That line is set as the `WM_NAME` of the X root window, which dwm shows as its status. Blocks are re-run on a timer, when the whole status is refreshed, or when their own signal arrives, for example from a click in the bar.

It uses only the Python standard library. The X connection is a small built-in client that speaks the X protocol over the display's socket.

## Installation

```
pip install .
```

## Usage

```
statusblocks        # set the status as the X root window name
statusblocks -d     # debug mode: print each new status line to stdout instead
statusblocks -h     # print usage and exit with status 1
```

An unknown option prints an error and the usage line, and the program exits with status 1.

The program connects to the X server named by `$DISPLAY` at start-up. It does this in debug mode too. A local display is reached through `/tmp/.X11-unix/X<n>` and a remote one over TCP port `6000 + n`. Authorization is taken from `$XAUTHORITY` or `~/.Xauthority` when that file has a matching entry.

## Blocks

A block is described by a `BlockSpec(icon, command, interval, signal)` in `statusblocks.config`:

- **command** is run through the shell. The first line of its standard output is cut to `max_block_output_length` characters without splitting a UTF-8 character, and becomes the block's output. If the command exits with a non-zero status, an error is printed and the block keeps its previous output. Each block runs at most one command at a time.
- **icon** is placed in front of the output.
- **interval** is in seconds. The timer ticks at the greatest common divisor of all intervals and wraps at the largest one. A block with interval `0` runs only at start-up, on a refresh, or on its own signal.
- **signal** is an offset from `SIGRTMIN`. `0` means the block has no signal.

Blocks with empty output are left out of the status line. The others are joined with the `Config` settings:

| setting | default | effect |
|---|---|---|
| `delimiter` | two spaces | placed between block outputs |
| `max_block_output_length` | `200` | characters kept per block |
| `clickable_blocks` | `True` | put the block's signal number as a raw character before its icon |
| `leading_delimiter` | `False` | add a delimiter at the start of a non-empty status |
| `trailing_delimiter` | `False` | add a delimiter at the end of a non-empty status |

`default_config()` returns the stock `Config`. It has six blocks that run scripts under `~/.config/dwm/scripts/` (`music.sh`, `light.sh`, `audio.sh`, `battery.sh`, `wifi.sh`, `date.sh`).

## Signals

- `SIGUSR1` re-runs every block.
- `SIGRTMIN + n` re-runs the block whose signal is `n`. The low byte of the signal's integer value is passed to the command as `BLOCK_BUTTON` when it is not zero. A dwm patch can send this value to report a mouse click.
- `SIGINT` and `SIGTERM` stop the program. The blocks and the signal pipe are closed before it exits.

For example, `pkill -RTMIN+10 -f statusblocks` re-runs the block with signal 10.

## Using it as a library

The parts can be combined in your own code. `statusblocks.block.Block` runs a command and delivers its output through a pipe. `statusblocks.timer.Timer` decides which intervals are due. `statusblocks.status.Status` builds the line. `statusblocks.signal_handler.SignalHandler` turns signals into readable records. `statusblocks.watcher.Watcher` polls the blocks and the signal descriptor. `statusblocks.main.event_loop(blocks, is_debug_mode, connection, signal_handler, config)` runs all of these together. `statusblocks.x11.connect()` opens the X connection.

## Limitations

- The `statusblocks` command always uses `default_config()`. It reads no configuration file and has no options for choosing blocks. To use other blocks, build a `Config` or your own `Block` list and run `event_loop` from your own code.
- It needs Linux, or another system with real-time signals and `signal.sigtimedwait`.
- A running X server is required even in debug mode.

## Development

```
pip install -e .[test]
pytest
```