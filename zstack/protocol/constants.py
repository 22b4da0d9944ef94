"""
UNPI protocol constants and header registries.

The header byte of every frame packs two closed code sets: the command type
in bits 7-5 and the subsystem in bits 4-0. Both registries are total when
encoding (every member has a code) and partial when decoding (unknown codes
raise instead of mapping to a default).
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from zstack.exceptions import InvalidCommandTypeError, InvalidSubsystemError


class CommandType(IntEnum):
    """
    UNPI command types (upper 3 bits of the header byte).
    """

    SREQ = 0x01
    """Synchronous request; the network processor answers with an SRSP."""

    AREQ = 0x02
    """Asynchronous request or indication; no response expected."""

    SRSP = 0x03
    """Synchronous response to an SREQ."""

    @classmethod
    def from_code(cls, code: int) -> CommandType:
        """
        Decode a command type code.

        Raises:
            InvalidCommandTypeError: If the code is not a known command type.
        """
        try:
            return cls(code)
        except ValueError:
            raise InvalidCommandTypeError(code) from None


class Subsystem(IntEnum):
    """
    Network processor subsystems (lower 5 bits of the header byte).

    The code space is sparse: only 11 of the 32 possible values are defined.
    """

    SYS = 0x01
    """System interface (reset, version, NV items)."""

    MAC = 0x02
    """MAC layer."""

    NWK = 0x03
    """Network layer."""

    AF = 0x04
    """Application framework."""

    ZDO = 0x05
    """Zigbee device objects."""

    SAPI = 0x06
    """Simple API."""

    UTIL = 0x07
    """Utility functions."""

    DEBUG = 0x08
    """Debug output."""

    APP = 0x09
    """Application interface."""

    APP_CONFIG = 0x0F
    """Application configuration (BDB commissioning)."""

    GREENPOWER = 0x15
    """Green power."""

    @classmethod
    def from_code(cls, code: int) -> Subsystem:
        """
        Decode a subsystem code.

        Raises:
            InvalidSubsystemError: If the code is not a known subsystem.
        """
        try:
            return cls(code)
        except ValueError:
            raise InvalidSubsystemError(code) from None


class ProtocolConstants:
    """
    UNPI protocol constants.

    Contains the frame marker, header layout, size limits and serial
    defaults used throughout the implementation.
    """

    # ===== Frame Layout =====

    SOF: Final[int] = 0xFE
    """Start of frame marker."""

    HEADER_SIZE: Final[int] = 4
    """Marker, length, header byte and command id."""

    MIN_FRAME_SIZE: Final[int] = 5
    """Smallest complete frame: header fields plus the check byte."""

    MAX_PAYLOAD_SIZE: Final[int] = 255
    """Largest payload the one-byte length field can describe."""

    LENGTH_OFFSET: Final[int] = 1
    """Offset of the payload length byte within a frame."""

    # ===== Header Byte =====

    COMMAND_TYPE_SHIFT: Final[int] = 5
    """Bit position of the command type within the header byte."""

    COMMAND_TYPE_MASK: Final[int] = 0x07
    """Mask for the command type after shifting."""

    SUBSYSTEM_MASK: Final[int] = 0x1F
    """Mask for the subsystem code."""

    # ===== Serial Port Configuration =====

    DEFAULT_BAUD_RATE: Final[int] = 115200
    """Default baud rate for Z-Stack network processors."""

    DEFAULT_RECEIVE_TIMEOUT: Final[float] = 5.0
    """Default read timeout in seconds."""

    READ_CHUNK_SIZE: Final[int] = 256
    """Maximum number of bytes requested per transport read."""


def pack_header(command_type: CommandType | int, subsystem: Subsystem | int) -> int:
    """
    Pack a command type and subsystem into a header byte.

    Example:
        >>> hex(pack_header(CommandType.SREQ, Subsystem.SYS))
        '0x21'
    """
    return (
        (int(command_type) & ProtocolConstants.COMMAND_TYPE_MASK) << ProtocolConstants.COMMAND_TYPE_SHIFT
    ) | (int(subsystem) & ProtocolConstants.SUBSYSTEM_MASK)


def unpack_header(header_byte: int) -> tuple[int, int]:
    """
    Split a header byte into its raw (command type, subsystem) codes.

    No registry lookup is done; use CommandType.from_code and
    Subsystem.from_code to resolve the codes.
    """
    command_type = (header_byte >> ProtocolConstants.COMMAND_TYPE_SHIFT) & ProtocolConstants.COMMAND_TYPE_MASK
    return command_type, header_byte & ProtocolConstants.SUBSYSTEM_MASK
