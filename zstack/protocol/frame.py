"""
UNPI wire frame.

Wire format (all fields single bytes):

    +------+-----+--------+--------+-------------+-------+
    | SOF  | LEN | HEADER | CMD ID | PAYLOAD     | FCS   |
    | 0xFE | n   | T|SSS  | id     | n bytes     | xor   |
    +------+-----+--------+--------+-------------+-------+

- HEADER bits 7-5 hold the command type, bits 4-0 the subsystem
- FCS is the XOR of LEN, HEADER, CMD ID and every payload byte

A WireFrame is the raw, unvalidated envelope. It is "well-formed" when its
check byte closes the XOR fold and "addressable" when both header halves
are known codes. Message is the validated, symbolic view of a frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from zstack.exceptions import ChecksumError, FieldRangeError, PayloadTooLargeError, ProtocolError
from zstack.protocol.checksums import frame_check, residual_fcs
from zstack.protocol.constants import (
    CommandType,
    ProtocolConstants,
    Subsystem,
    pack_header,
    unpack_header,
)
from zstack.protocol.encoding import bytes_to_hex

if TYPE_CHECKING:
    from zstack.models.message import Message


@dataclass(frozen=True)
class WireFrame:
    """
    A single UNPI frame as it appears on the wire.

    Attributes:
        header_byte: Packed command type (bits 7-5) and subsystem (bits 4-0).
        command_id: Subsystem-scoped command identifier (0x00-0xFF).
        payload: Frame payload (0-255 bytes).
        check: Trailing frame check byte.

    Raises:
        FieldRangeError: If header_byte, command_id or check is outside 0x00-0xFF.
    """

    header_byte: int
    command_id: int
    payload: bytes
    check: int

    def __post_init__(self) -> None:
        for name in ("header_byte", "command_id", "check"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise FieldRangeError(name, value)

    @classmethod
    def build(
        cls,
        header_byte: int,
        command_id: int,
        payload: bytes | bytearray = b"",
    ) -> WireFrame:
        """
        Build a frame and compute its check byte.

        Raises:
            PayloadTooLargeError: If the payload exceeds 255 bytes.
            FieldRangeError: If the header byte or command id is not a byte.
        """
        if len(payload) > ProtocolConstants.MAX_PAYLOAD_SIZE:
            raise PayloadTooLargeError(len(payload), ProtocolConstants.MAX_PAYLOAD_SIZE)
        payload = bytes(payload)
        return cls(
            header_byte=header_byte,
            command_id=command_id,
            payload=payload,
            check=frame_check(header_byte, command_id, payload),
        )

    @classmethod
    def from_message(cls, message: Message) -> WireFrame:
        """
        Derive the frame for a message.

        Raises:
            PayloadTooLargeError: If the message payload exceeds 255 bytes.
        """
        return cls.build(
            pack_header(message.command_type, message.subsystem),
            message.command_id,
            message.payload,
        )

    @property
    def length(self) -> int:
        """Payload length as carried in the LEN byte."""
        return len(self.payload)

    @property
    def size(self) -> int:
        """Total number of bytes the frame occupies on the wire."""
        return ProtocolConstants.MIN_FRAME_SIZE + self.length

    @property
    def command_type(self) -> CommandType:
        """
        Decode the command type half of the header.

        Raises:
            InvalidCommandTypeError: If the code is unknown.
        """
        code, _ = unpack_header(self.header_byte)
        return CommandType.from_code(code)

    @property
    def subsystem(self) -> Subsystem:
        """
        Decode the subsystem half of the header.

        Raises:
            InvalidSubsystemError: If the code is unknown.
        """
        _, code = unpack_header(self.header_byte)
        return Subsystem.from_code(code)

    @property
    def is_well_formed(self) -> bool:
        """Check if the XOR fold including the check byte is zero."""
        return residual_fcs(self.header_byte, self.command_id, self.payload, self.check) == 0

    @property
    def is_addressable(self) -> bool:
        """Check if both header halves decode against their registries."""
        try:
            self.command_type
            self.subsystem
        except ProtocolError:
            return False
        return True

    def verify(self) -> None:
        """
        Verify the frame check byte.

        Raises:
            ChecksumError: If the XOR fold including the check byte is not zero.
        """
        expected = frame_check(self.header_byte, self.command_id, self.payload)
        if expected != self.check:
            raise ChecksumError(
                f"Invalid frame check for {self!r}",
                expected=expected,
                received=self.check,
            )

    def write_to(self, buffer: bytearray) -> None:
        """
        Append the serialized frame to an outbound buffer.

        The buffer is extended once with the complete frame, or not at all.

        Raises:
            PayloadTooLargeError: If the payload exceeds 255 bytes.
        """
        if self.length > ProtocolConstants.MAX_PAYLOAD_SIZE:
            raise PayloadTooLargeError(self.length, ProtocolConstants.MAX_PAYLOAD_SIZE)
        frame = bytes((ProtocolConstants.SOF, self.length, self.header_byte, self.command_id))
        buffer.extend(frame + self.payload + bytes((self.check,)))

    def to_bytes(self) -> bytes:
        """Serialize the frame to its wire representation."""
        buffer = bytearray()
        self.write_to(buffer)
        return bytes(buffer)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        payload = bytes_to_hex(self.payload) if self.payload else "-"
        return (
            f"WireFrame(header=0x{self.header_byte:02X}, cmd=0x{self.command_id:02X}, "
            f"payload=[{payload}], check=0x{self.check:02X})"
        )
