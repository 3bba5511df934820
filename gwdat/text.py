"""Readers for plain text files and MP3 payloads wrapped in sound headers."""

from __future__ import annotations

MP3_HEADER_SIZE = 36


def read_text(data: bytes) -> str:
    """Return the printable and control characters of ``data`` as text.

    Bytes outside the 7-bit range are neither printable nor control
    characters in the C locale and are dropped.
    """
    return bytes(b for b in data if b < 0x80).decode("ascii")


def extract_mp3(data: bytes) -> bytes:
    """Return the MP3 stream that follows the fixed-size sound header."""
    if len(data) < MP3_HEADER_SIZE:
        raise ValueError(
            f"sound data is {len(data)} bytes, shorter than the "
            f"{MP3_HEADER_SIZE}-byte header"
        )
    return bytes(data[MP3_HEADER_SIZE:])