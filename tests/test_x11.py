import socket
import struct
import threading

import pytest

from statusblocks.x11 import X11Connection, X11Error, _find_auth, connect, parse_display

ROOT = 0x2A5
AUTH_NAME = b"MIT-MAGIC-COOKIE-1"


def _pad(data):
    return data + b"\0" * (-len(data) % 4)


def _setup_success(root, formats=2):
    vendor = b"fake"
    fixed = bytearray(32)
    struct.pack_into("<HH", fixed, 16, len(vendor), 0xFFFF)
    fixed[20] = 1
    fixed[21] = formats
    screen = struct.pack("<I", root) + bytes(36)
    body = bytes(fixed) + _pad(vendor) + bytes(8 * formats) + screen
    return struct.pack("<BxHHH", 1, 11, 0, len(body) // 4) + body


def _setup_refused(reason):
    body = _pad(reason)
    return struct.pack("<BBHHH", 0, len(reason), 11, 0, len(body) // 4) + body


class FakeServer(threading.Thread):
    def __init__(self, sock, reply, reject, event):
        super().__init__(daemon=True)
        self.sock = sock
        self.reply = reply
        self.reject = reject
        self.event = event
        self.setup = b""
        self.requests = []

    def _recv(self, size):
        data = b""
        while len(data) < size:
            part = self.sock.recv(size - len(data))
            if not part:
                return None
            data += part
        return data

    def run(self):
        header = self._recv(12)
        if header is None:
            return
        name_len, data_len = struct.unpack_from("<HH", header, 6)
        extra = len(_pad(bytes(name_len))) + len(_pad(bytes(data_len)))
        self.setup = header + (self._recv(extra) or b"")
        self.sock.sendall(self.reply)
        sequence = 0
        while True:
            head = self._recv(4)
            if head is None:
                return
            opcode, _, length = struct.unpack("<BBH", head)
            body = self._recv(length * 4 - 4) or b""
            sequence += 1
            self.requests.append(head + body)
            if opcode == 18 and self.reject:
                self.sock.sendall(struct.pack("<BBHI", 0, 3, sequence, ROOT) + bytes(24))
            if opcode == 43:
                if self.event:
                    self.sock.sendall(struct.pack("<BxH", 12, sequence) + bytes(28))
                self.sock.sendall(struct.pack("<BxHI", 1, sequence, 0) + bytes(24))


@pytest.fixture
def start_server():
    started = []

    def _start(reply=None, reject=False, event=False):
        client, remote = socket.socketpair()
        server = FakeServer(remote, reply or _setup_success(ROOT), reject, event)
        server.start()
        started.append((client, remote, server))
        return client, server

    yield _start
    for client, remote, server in started:
        client.close()
        server.join(timeout=5)
        remote.close()


def test_parse_display_local():
    assert parse_display(":0") == ("", 0, 0)


def test_parse_display_host_and_screen():
    assert parse_display("box:1.2") == ("box", 1, 2)


def test_parse_display_uses_environment(monkeypatch):
    monkeypatch.setenv("DISPLAY", ":7")
    assert parse_display() == ("", 7, 0)


@pytest.mark.parametrize("name", ["", "nocolon", ":", ":x", ":1.y"])
def test_parse_display_invalid(name):
    with pytest.raises(X11Error):
        parse_display(name)


def test_connect_invalid_display():
    with pytest.raises(X11Error):
        connect("nonsense")


def test_handshake_reads_root(start_server):
    client, _ = start_server()
    conn = X11Connection(client)
    assert conn.root == ROOT


def test_setup_request_carries_auth(start_server):
    client, server = start_server()
    auth_data = bytes(range(16))
    X11Connection(client, AUTH_NAME, auth_data)
    name_len, data_len = struct.unpack_from("<HH", server.setup, 6)
    assert (name_len, data_len) == (len(AUTH_NAME), len(auth_data))
    assert server.setup[12 : 12 + len(AUTH_NAME)] == AUTH_NAME
    assert auth_data in server.setup


def test_set_root_name_sends_change_property(start_server):
    client, server = start_server()
    with X11Connection(client) as conn:
        assert conn.root == ROOT
        conn.set_root_name("vol 50%")
    request = server.requests[0]
    opcode, mode, units, window, prop, kind, fmt, length = struct.unpack_from(
        "<BBHIIIB3xI", request
    )
    assert opcode == 18
    assert (prop, kind, fmt) == (39, 31, 8)
    assert window == conn.root
    assert length == len(b"vol 50%")
    assert request[24 : 24 + length] == b"vol 50%"
    assert units * 4 == len(request)


def test_set_root_name_encodes_utf8(start_server):
    client, server = start_server()
    conn = X11Connection(client)
    assert conn.root == ROOT
    conn.set_root_name("héllo")
    window = struct.unpack_from("<I", server.requests[0], 4)[0]
    length = struct.unpack_from("<I", server.requests[0], 20)[0]
    assert window == conn.root
    assert server.requests[0][24 : 24 + length].decode("utf-8") == "héllo"


def test_events_are_skipped(start_server):
    client, server = start_server(event=True)
    conn = X11Connection(client)
    assert conn.root == ROOT
    conn.set_root_name("a")
    conn.set_root_name("b")
    assert len(server.requests) == 4
    opcodes = [request[0] for request in server.requests]
    assert opcodes == [18, 43, 18, 43]


def test_error_reply_raises(start_server):
    client, _ = start_server(reject=True)
    conn = X11Connection(client)
    with pytest.raises(X11Error):
        conn.set_root_name("x")


def test_refused_setup_raises(start_server):
    client, _ = start_server(reply=_setup_refused(b"no access"))
    with pytest.raises(X11Error, match="no access"):
        X11Connection(client)


def _entry(family, address, number, name, data):
    fields = b"".join(struct.pack(">H", len(f)) + f for f in (address, number, name, data))
    return struct.pack(">H", family) + fields


def test_find_auth_matches_display_and_host():
    blob = _entry(256, b"box", b"1", AUTH_NAME, b"a" * 16) + _entry(256, b"box", b"0", AUTH_NAME, b"b" * 16)
    assert _find_auth(blob, 0, "box") == (AUTH_NAME, b"b" * 16)
    assert _find_auth(blob, 1, "box") == (AUTH_NAME, b"a" * 16)


def test_find_auth_wildcard():
    blob = _entry(256, b"other", b"0", AUTH_NAME, b"a" * 16) + _entry(65535, b"", b"", AUTH_NAME, b"c" * 16)
    assert _find_auth(blob, 0, "box") == (AUTH_NAME, b"c" * 16)


def test_find_auth_no_match_and_truncated():
    blob = _entry(256, b"other", b"0", AUTH_NAME, b"a" * 16)
    assert _find_auth(blob, 0, "box") == (b"", b"")
    assert _find_auth(blob[:-3], 0, "other") == (b"", b"")