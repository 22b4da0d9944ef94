"""
UNPI frame parsing from an accumulating byte buffer.

Bytes arrive from the serial port in arbitrary chunks. The reader looks at
the front of the caller's buffer and either carves out exactly one frame or
reports that more bytes are needed:

1. Fewer than 5 bytes: not enough data, buffer untouched
2. Fewer than 5 + LEN bytes: not enough data, buffer untouched
3. Otherwise: consume 5 + LEN bytes, then check the start marker

The frame bytes are consumed before any validation so that a corrupt frame
never stalls the stream. There is no resynchronization: after a bad marker
the stream is considered lost.
"""

from __future__ import annotations

import logging

from zstack.exceptions import InvalidStartOfFrameError
from zstack.protocol.constants import ProtocolConstants
from zstack.protocol.encoding import bytes_to_hex
from zstack.protocol.frame import WireFrame

logger = logging.getLogger(__name__)


class FrameReader:
    """
    UNPI frame parser.

    The parser keeps no state between calls; the buffer it reads from is
    owned by the transport driver and is shrunk in place as frames are
    consumed.

    Example:
        >>> reader = FrameReader()
        >>> buffer = bytearray.fromhex("FE 00 21 01 20 FE")
        >>> reader.read(buffer)
        WireFrame(header=0x21, cmd=0x01, payload=[-], check=0x20)
        >>> buffer
        bytearray(b'\\xfe')
        >>> reader.read(buffer) is None
        True
    """

    def frame_size(self, buffer: bytes | bytearray | memoryview) -> int | None:
        """
        Size of the frame at the front of the buffer.

        Returns:
            Total frame size in bytes, or None if the length byte has not
            arrived yet or the frame is incomplete.
        """
        if len(buffer) < ProtocolConstants.MIN_FRAME_SIZE:
            return None

        size = ProtocolConstants.MIN_FRAME_SIZE + buffer[ProtocolConstants.LENGTH_OFFSET]
        if len(buffer) < size:
            return None
        return size

    def read(self, buffer: bytearray) -> WireFrame | None:
        """
        Remove one frame from the front of the buffer.

        Args:
            buffer: Accumulation buffer; consumed bytes are deleted in place.

        Returns:
            The unverified frame, or None if more bytes are needed. In the
            latter case the buffer is left byte-for-byte unchanged.

        Raises:
            InvalidStartOfFrameError: If the first byte is not 0xFE. The
                frame-sized chunk has already been consumed.
        """
        size = self.frame_size(buffer)
        if size is None:
            return None

        raw = bytes(buffer[:size])
        del buffer[:size]

        if raw[0] != ProtocolConstants.SOF:
            logger.debug("Invalid start of frame in %s", bytes_to_hex(raw))
            raise InvalidStartOfFrameError(raw[0])

        length = raw[1]
        frame = WireFrame(
            header_byte=raw[2],
            command_id=raw[3],
            payload=raw[4 : 4 + length],
            check=raw[4 + length],
        )
        logger.debug("Read frame %s", bytes_to_hex(raw))
        return frame


# Module-level convenience instance
DEFAULT_FRAME_READER: FrameReader = FrameReader()
"""Default FrameReader instance for convenience."""


def read_frame(buffer: bytearray) -> WireFrame | None:
    """
    Read a frame using the default frame reader.

    Args:
        buffer: Accumulation buffer; consumed bytes are deleted in place.

    Returns:
        The unverified frame, or None if more bytes are needed.
    """
    return DEFAULT_FRAME_READER.read(buffer)
