"""Small numeric and text helpers."""

from __future__ import annotations

_MULTIBYTE_BIT = 0x80


def gcd(a: int, b: int) -> int:
    """Greatest common divisor of two non-negative integers; gcd(0, 0) is 0."""
    while b > 0:
        a, b = b, a % b
    return a


def _sequence_length(lead: int) -> int:
    """Number of bytes a character occupies, judged from its lead byte."""
    if not lead & _MULTIBYTE_BIT:
        return 1
    skip = 1
    lead = (lead << 1) & 0xFF
    while lead & _MULTIBYTE_BIT:
        lead = (lead << 1) & 0xFF
        skip += 1
    return skip


def truncate_utf8(data: bytes, size: int, char_limit: int) -> bytes:
    """Cut UTF-8 ``data`` to at most ``char_limit`` characters.

    ``size`` is the capacity of the destination including its terminator, so
    the result is always shorter than ``size`` and never splits a character.
    Reading stops at the first NUL byte.
    """
    char_count = 0
    i = 0
    while char_count < char_limit and i < len(data):
        lead = data[i]
        if lead == 0:
            break
        skip = _sequence_length(lead)
        if i + skip >= size:
            break
        char_count += 1
        i += skip
    return bytes(data[:i])