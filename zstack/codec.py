"""
UNPI streaming codec.

The codec adapts frame parsing and serialization to a continuous byte
stream. It holds no buffer of its own: the transport driver owns an inbound
accumulation buffer and passes it to decode() whenever bytes arrive, and
passes an outbound buffer to encode() for every message it sends.

Decode outcomes:
- Message: one frame was consumed from the front of the buffer
- None: not enough bytes yet, buffer untouched, call again later
- ProtocolError: fatal for the stream (bad marker, bad check, unknown header)

Example:
    >>> codec = UnpiCodec()
    >>> outbound = bytearray()
    >>> codec.encode(Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=1), outbound)
    >>> outbound.hex()
    'fe00210120'
    >>> codec.decode(outbound)
    Message(SREQ SYS cmd=0x01, payload=[-])
"""

from __future__ import annotations

import logging

from zstack.exceptions import FrameError
from zstack.models.message import Message
from zstack.protocol.encoding import bytes_to_hex
from zstack.protocol.frame import WireFrame
from zstack.protocol.frame_reader import FrameReader

logger = logging.getLogger(__name__)


class UnpiCodec:
    """
    Encoder/decoder between UNPI messages and a byte stream.

    Decode must be called repeatedly until it returns None, since a single
    read from the serial port may contain several frames.
    """

    def __init__(self, frame_reader: FrameReader | None = None) -> None:
        self._frame_reader = frame_reader or FrameReader()

    def decode(self, buffer: bytearray) -> Message | None:
        """
        Decode one message from the front of the buffer.

        Args:
            buffer: Inbound accumulation buffer, shrunk in place.

        Returns:
            The decoded message, or None if more bytes are needed.

        Raises:
            InvalidStartOfFrameError: If the frame does not start with 0xFE.
            ChecksumError: If the frame check does not match. The frame's
                bytes have been consumed.
            InvalidCommandTypeError: If the header's command type is unknown.
            InvalidSubsystemError: If the header's subsystem is unknown.
        """
        frame = self._frame_reader.read(buffer)
        if frame is None:
            return None

        frame.verify()
        message = Message.from_frame(frame)
        logger.debug("Decoded %r", message)
        return message

    def decode_all(self, buffer: bytearray) -> list[Message]:
        """
        Decode every complete message in the buffer.

        Trailing partial frame bytes remain in the buffer.
        """
        messages = []
        while (message := self.decode(buffer)) is not None:
            messages.append(message)
        return messages

    def encode(self, message: Message, buffer: bytearray) -> None:
        """
        Append the frame for a message to an outbound buffer.

        Raises:
            PayloadTooLargeError: If the payload exceeds 255 bytes. Nothing
                is appended in that case.
        """
        frame = WireFrame.from_message(message)
        start = len(buffer)
        frame.write_to(buffer)
        logger.debug("Encoded %r as %s", message, bytes_to_hex(buffer[start:]))


# Module-level convenience instance
DEFAULT_CODEC: UnpiCodec = UnpiCodec()
"""Default UnpiCodec instance for convenience."""


def encode_message(message: Message) -> bytes:
    """
    Serialize a single message to frame bytes.

    Raises:
        PayloadTooLargeError: If the payload exceeds 255 bytes.
    """
    buffer = bytearray()
    DEFAULT_CODEC.encode(message, buffer)
    return bytes(buffer)


def decode_message(data: bytes | bytearray) -> Message:
    """
    Decode bytes holding exactly one complete frame.

    Raises:
        FrameError: If the data is incomplete or has bytes after the frame.
        ProtocolError: If the frame itself is invalid.
    """
    buffer = bytearray(data)
    message = DEFAULT_CODEC.decode(buffer)
    if message is None:
        raise FrameError(f"Incomplete frame: {bytes_to_hex(data)}")
    if buffer:
        raise FrameError(f"{len(buffer)} trailing bytes after frame")
    return message
