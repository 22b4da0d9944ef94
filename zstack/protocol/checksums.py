"""
XOR frame check calculation and validation.

The UNPI protocol protects each frame with a single check byte:
- XOR the length byte, header byte, command id and every payload byte
- Place the result after the payload

A frame is valid when the XOR over the same fields plus the check byte
itself is zero. The check only catches an odd number of flipped bits per
bit position; it is kept bit-exact for interoperability.
"""

from __future__ import annotations

from functools import reduce
from operator import xor


def calculate_fcs(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate the running XOR over the specified data.

    Args:
        data: Bytes to fold.

    Returns:
        8-bit check value (0-255).

    Example:
        >>> calculate_fcs(b"\\x21\\x01\\x00")
        32
    """
    return reduce(xor, data, 0)


def frame_check(
    header_byte: int,
    command_id: int,
    payload: bytes | bytearray | memoryview,
) -> int:
    """
    Calculate the check byte for a frame.

    Fold order is header byte, command id, payload length, then payload.

    Args:
        header_byte: Packed command type and subsystem.
        command_id: Command identifier within the subsystem.
        payload: Frame payload (at most 255 bytes).

    Returns:
        Check byte to append to the frame.
    """
    return calculate_fcs(bytes([header_byte, command_id, len(payload) & 0xFF])) ^ calculate_fcs(payload)


def residual_fcs(
    header_byte: int,
    command_id: int,
    payload: bytes | bytearray | memoryview,
    check: int,
) -> int:
    """Fold a frame including its check byte; zero means the frame is intact."""
    return frame_check(header_byte, command_id, payload) ^ check


def validate_fcs(
    header_byte: int,
    command_id: int,
    payload: bytes | bytearray | memoryview,
    check: int,
) -> bool:
    """
    Validate a frame's check byte.

    Returns:
        True if the XOR fold including the check byte is zero.
    """
    return residual_fcs(header_byte, command_id, payload, check) == 0
