"""
Pydantic model for UNPI messages.

A Message is the caller-facing view of a frame: the header byte resolved
into a CommandType and Subsystem, plus the command id and opaque payload.

Design principles:
- Messages are frozen (immutable) value objects
- Converting to a frame is total; converting from a frame is partial and
  raises on unknown header codes instead of guessing
- Payload bytes are never interpreted
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zstack.protocol.constants import CommandType, Subsystem, pack_header
from zstack.protocol.encoding import bytes_to_hex
from zstack.protocol.frame import WireFrame


class Message(BaseModel):
    """
    A decoded UNPI message.

    Payloads longer than 255 bytes can be constructed but are rejected with
    PayloadTooLargeError when encoded.

    Example:
        >>> msg = Message(
        ...     command_type=CommandType.SREQ,
        ...     subsystem=Subsystem.SYS,
        ...     command_id=0x01,
        ... )
        >>> msg.to_frame().to_bytes().hex()
        'fe00210120'
    """

    model_config = ConfigDict(frozen=True)

    command_type: CommandType = Field(description="Request/response classification")
    subsystem: Subsystem = Field(description="Target subsystem on the network processor")
    command_id: int = Field(ge=0, le=255, description="Subsystem-scoped command identifier")
    payload: bytes = Field(default=b"", description="Opaque command payload")

    @field_validator("payload", mode="before")
    @classmethod
    def validate_payload(cls, v: object) -> bytes:
        """Accept only binary payloads; text has no defined wire encoding."""
        if not isinstance(v, (bytes, bytearray, memoryview)):
            raise ValueError(f"Payload must be bytes, not {type(v).__name__}")
        return bytes(v)

    @property
    def header_byte(self) -> int:
        """Packed command type and subsystem."""
        return pack_header(self.command_type, self.subsystem)

    @classmethod
    def from_frame(cls, frame: WireFrame) -> Message:
        """
        Build a message from a frame.

        The frame check is not re-verified here; call frame.verify() first.

        Raises:
            InvalidCommandTypeError: If the header's command type is unknown.
            InvalidSubsystemError: If the header's subsystem is unknown.
        """
        return cls(
            command_type=frame.command_type,
            subsystem=frame.subsystem,
            command_id=frame.command_id,
            payload=frame.payload,
        )

    def to_frame(self) -> WireFrame:
        """
        Derive the wire frame for this message.

        Raises:
            PayloadTooLargeError: If the payload exceeds 255 bytes.
        """
        return WireFrame.from_message(self)

    def __repr__(self) -> str:
        payload = bytes_to_hex(self.payload) if self.payload else "-"
        return (
            f"Message({self.command_type.name} {self.subsystem.name} "
            f"cmd=0x{self.command_id:02X}, payload=[{payload}])"
        )
