"""
Hex formatting helpers for UNPI frames.

Frames are binary on the wire; these helpers render and parse the spaced
hex notation used in logs and Z-Stack documentation, e.g. "FE 00 21 01 20".
"""

from __future__ import annotations


def bytes_to_hex(data: bytes | bytearray | memoryview, sep: str = " ") -> str:
    """
    Convert bytes to an uppercase hex string.

    Args:
        data: Binary data to encode.
        sep: Separator placed between bytes.

    Returns:
        Uppercase hexadecimal string.

    Example:
        >>> bytes_to_hex(b'\\xfe\\x00\\x21\\x01\\x20')
        'FE 00 21 01 20'
    """
    raw = bytes(data)
    if not sep:
        return raw.hex().upper()
    return raw.hex(sep).upper()


def hex_to_bytes(hex_string: str | bytes) -> bytes:
    """
    Convert a hex string to bytes.

    Whitespace between byte pairs is ignored.

    Args:
        hex_string: Hexadecimal string, optionally space separated.

    Returns:
        Decoded bytes.

    Raises:
        ValueError: If string is not valid hex or has odd length.

    Example:
        >>> hex_to_bytes("FE 00 21 01 20")
        b'\\xfe\\x00!\\x01 '
    """
    if isinstance(hex_string, bytes):
        hex_string = hex_string.decode("ascii")

    return bytes.fromhex(hex_string)
