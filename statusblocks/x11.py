"""Minimal X11 client able to set the root window's name."""

from __future__ import annotations

import os
import socket
import struct

_BYTE_ORDER_LSB = 0x6C
_PROTOCOL_MAJOR = 11
_PROTOCOL_MINOR = 0

_OPCODE_CHANGE_PROPERTY = 18
_OPCODE_GET_INPUT_FOCUS = 43
_PROP_MODE_REPLACE = 0
_ATOM_WM_NAME = 39
_ATOM_STRING = 31
_NAME_FORMAT = 8

_FAMILY_INTERNET = 0
_FAMILY_LOCAL = 256
_FAMILY_WILD = 65535

_X_TCP_PORT = 6000
_UNIX_SOCKET = "/tmp/.X11-unix/X{}"


class X11Error(Exception):
    """Raised when talking to the X server fails."""


def _pad(data: bytes) -> bytes:
    return data + b"\0" * (-len(data) % 4)


def parse_display(display: str | None = None) -> tuple[str, int, int]:
    """Split a display name ``[host]:number[.screen]`` into its parts.

    With no argument the ``DISPLAY`` environment variable is used.
    """
    if display is None:
        display = os.environ.get("DISPLAY", "")
    host, sep, rest = display.rpartition(":")
    if not sep or not rest:
        raise X11Error(f"invalid display name {display!r}")
    number, _, screen = rest.partition(".")
    try:
        display_number = int(number)
        screen_number = int(screen) if screen else 0
    except ValueError:
        raise X11Error(f"invalid display name {display!r}") from None
    if display_number < 0 or screen_number < 0:
        raise X11Error(f"invalid display name {display!r}")
    return host, display_number, screen_number


def _auth_entries(data: bytes):
    """Yield (family, address, number, name, data) records of an Xauthority file."""
    offset = 0
    try:
        while offset < len(data):
            (family,) = struct.unpack_from(">H", data, offset)
            offset += 2
            fields = []
            for _ in range(4):
                (length,) = struct.unpack_from(">H", data, offset)
                start = offset + 2
                offset = start + length
                if offset > len(data):
                    return
                fields.append(data[start:offset])
            yield (family, *fields)
    except struct.error:
        return


def _find_auth(
    data: bytes, number: int, hostname: str, local: bool = True
) -> tuple[bytes, bytes]:
    """Pick the authorization (name, data) for a display from Xauthority data."""
    wanted = str(number).encode()
    host = hostname.encode()
    for family, address, entry_number, name, auth_data in _auth_entries(data):
        if entry_number and entry_number != wanted:
            continue
        if family == _FAMILY_WILD:
            return name, auth_data
        if family == _FAMILY_LOCAL and address == host:
            return name, auth_data
        if not local and family != _FAMILY_LOCAL:
            return name, auth_data
    return b"", b""


class X11Connection:
    """An open connection to an X server, set up over ``sock``."""

    def __init__(
        self, sock: socket.socket, auth_name: bytes = b"", auth_data: bytes = b""
    ) -> None:
        self._sock = sock
        self._sequence = 0
        self.max_request_length = 0
        try:
            self.root = self._handshake(auth_name, auth_data)
        except BaseException:
            sock.close()
            raise

    def __enter__(self) -> X11Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _recv_exact(self, size: int) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            try:
                part = self._sock.recv(size - len(chunks))
            except OSError as exc:
                raise X11Error("could not read from X server") from exc
            if not part:
                raise X11Error("X server closed the connection")
            chunks += part
        return bytes(chunks)

    def _send(self, data: bytes) -> None:
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise X11Error("could not flush X output buffer") from exc

    def _handshake(self, auth_name: bytes, auth_data: bytes) -> int:
        request = struct.pack(
            "<BxHHHH2x",
            _BYTE_ORDER_LSB,
            _PROTOCOL_MAJOR,
            _PROTOCOL_MINOR,
            len(auth_name),
            len(auth_data),
        )
        self._send(request + _pad(auth_name) + _pad(auth_data))
        header = self._recv_exact(8)
        (length,) = struct.unpack_from("<H", header, 6)
        body = self._recv_exact(length * 4)
        status = header[0]
        if status == 0:
            reason = body[: header[1]].decode("latin-1")
            raise X11Error(f"X server refused connection: {reason}")
        if status != 1:
            raise X11Error("X server requires further authentication")
        try:
            vendor_length, self.max_request_length = struct.unpack_from("<HH", body, 16)
            screen_count, format_count = body[20], body[21]
            if screen_count == 0:
                raise X11Error("X server reports no screens")
            offset = 32 + len(_pad(bytes(vendor_length))) + 8 * format_count
            (root,) = struct.unpack_from("<I", body, offset)
        except (struct.error, IndexError) as exc:
            raise X11Error("malformed X connection setup") from exc
        return root

    def set_root_name(self, name: str | bytes) -> None:
        """Replace WM_NAME of the first screen's root window with ``name``."""
        data = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        padded = _pad(data)
        length_units = 6 + len(padded) // 4
        if self.max_request_length and length_units > self.max_request_length:
            raise X11Error("root name is too long for the X server")
        change = struct.pack(
            "<BBHIIIB3xI",
            _OPCODE_CHANGE_PROPERTY,
            _PROP_MODE_REPLACE,
            length_units,
            self.root,
            _ATOM_WM_NAME,
            _ATOM_STRING,
            _NAME_FORMAT,
            len(data),
        ) + padded
        sync = struct.pack("<BxH", _OPCODE_GET_INPUT_FOCUS, 1)
        self._send(change + sync)
        self._sequence += 2
        change_seq = (self._sequence - 1) & 0xFFFF
        sync_seq = self._sequence & 0xFFFF

        failed = False
        while True:
            packet = self._recv_exact(32)
            kind = packet[0]
            (seq,) = struct.unpack_from("<H", packet, 2)
            if kind == 0:
                failed = failed or seq == change_seq
            elif kind == 1:
                (extra,) = struct.unpack_from("<I", packet, 4)
                self._recv_exact(extra * 4)
                if seq == sync_seq:
                    break
        if failed:
            raise X11Error("could not set X root name")

    def close(self) -> None:
        """Close the connection."""
        self._sock.close()


def _open_socket(host: str, number: int) -> socket.socket:
    if host in ("", "unix"):
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(_UNIX_SOCKET.format(number))
        except OSError:
            sock.close()
            raise
        return sock
    return socket.create_connection((host, _X_TCP_PORT + number))


def connect(display: str | None = None) -> X11Connection:
    """Open a connection to the X server named by ``display`` or ``DISPLAY``."""
    host, number, _ = parse_display(display)
    try:
        sock = _open_socket(host, number)
    except OSError as exc:
        raise X11Error("could not connect to X server") from exc
    path = os.environ.get("XAUTHORITY") or os.path.expanduser("~/.Xauthority")
    try:
        with open(path, "rb") as handle:
            auth_file = handle.read()
    except OSError:
        auth_file = b""
    local = host in ("", "unix")
    hostname = socket.gethostname() if local else host
    auth_name, auth_data = _find_auth(auth_file, number, hostname, local)
    return X11Connection(sock, auth_name, auth_data)