"""
Protocol layer for UNPI communication.

This module contains the low-level protocol handling:
- Header registries (command types, subsystems) and protocol constants
- Frame check calculation and validation
- Hex formatting utilities
- The wire frame and frame parsing
"""

from zstack.protocol.checksums import calculate_fcs, frame_check, residual_fcs, validate_fcs
from zstack.protocol.constants import (
    CommandType,
    ProtocolConstants,
    Subsystem,
    pack_header,
    unpack_header,
)
from zstack.protocol.encoding import bytes_to_hex, hex_to_bytes
from zstack.protocol.frame import WireFrame
from zstack.protocol.frame_reader import DEFAULT_FRAME_READER, FrameReader, read_frame

__all__ = [
    # Constants
    "CommandType",
    "Subsystem",
    "ProtocolConstants",
    "pack_header",
    "unpack_header",
    # Checksums
    "calculate_fcs",
    "frame_check",
    "residual_fcs",
    "validate_fcs",
    # Encoding
    "bytes_to_hex",
    "hex_to_bytes",
    # Frames
    "WireFrame",
    "FrameReader",
    "read_frame",
    "DEFAULT_FRAME_READER",
]
