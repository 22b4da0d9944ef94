"""
Framed UNPI connection.

This module ties a transport to the UNPI codec. The connection owns the
inbound accumulation buffer: bytes read from the transport are appended to
it and the codec is asked for messages until it needs more data.

The connection follows a small state machine:
    CLOSED -> open() -> OPEN
    OPEN -> decode error -> FAILED
    OPEN/FAILED -> close() -> CLOSED

A decode error leaves the stream without frame alignment, so a FAILED
connection refuses further I/O until it is closed and reopened. Transport
errors (timeouts, I/O failures) are passed through unchanged and do not
fail the connection.

Request/response pairing is left to the layer above.

Example:
    >>> from zstack import CommandType, Message, Subsystem, UnpiConnection
    >>> from zstack.transport import AsyncSerialTransport, find_serial_port
    >>>
    >>> async def main():
    ...     transport = AsyncSerialTransport(find_serial_port("CC2531"))
    ...     async with UnpiConnection(transport) as connection:
    ...         await connection.send(Message(
    ...             command_type=CommandType.SREQ,
    ...             subsystem=Subsystem.SYS,
    ...             command_id=0x01,
    ...         ))
    ...         async for message in connection:
    ...             print(message)
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from zstack.codec import DEFAULT_CODEC, UnpiCodec
from zstack.exceptions import ConnectionError, ProtocolError
from zstack.protocol.constants import ProtocolConstants
from zstack.protocol.encoding import bytes_to_hex

if TYPE_CHECKING:
    from types import TracebackType

    from zstack.models.message import Message
    from zstack.transport.abc import AbstractTransport

# Module logger
logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """UNPI connection states."""

    CLOSED = auto()
    """Transport not open."""

    OPEN = auto()
    """Ready to send and receive."""

    FAILED = auto()
    """A fatal decode error occurred; the stream is out of alignment."""


class UnpiConnection:
    """
    Message-level connection to a Z-Stack network processor.

    Attributes:
        state: Current connection state.
        transport: The underlying transport layer.
    """

    def __init__(
        self,
        transport: AbstractTransport,
        codec: UnpiCodec | None = None,
        timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
    ) -> None:
        """
        Initialize the connection.

        Args:
            transport: Transport layer for communication.
            codec: Codec to use (default: the module-level codec).
            timeout: Default read timeout in seconds.
        """
        self._transport = transport
        self._codec = codec or DEFAULT_CODEC
        self._timeout = timeout
        self._state = ConnectionState.CLOSED
        self._buffer = bytearray()

    @property
    def state(self) -> ConnectionState:
        """Get the current connection state."""
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if the connection is usable."""
        return self._state == ConnectionState.OPEN

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def pending(self) -> int:
        """Number of received bytes not yet decoded into a message."""
        return len(self._buffer)

    async def open(self) -> None:
        """
        Open the transport and reset the inbound buffer.

        A FAILED connection must be closed first so that stale bytes held by
        the transport are dropped along with the transport itself.

        Raises:
            ConnectionError: If the connection is open or FAILED.
            TransportError: If the transport cannot be opened.
        """
        if self._state != ConnectionState.CLOSED:
            raise ConnectionError(
                f"Connection must be closed before opening (state: {self._state.name})"
            )

        if not self._transport.is_open:
            logger.debug("Opening transport %s", self._transport.port_name)
            await self._transport.open()

        self._buffer.clear()
        self._state = ConnectionState.OPEN
        logger.info("Connection open on %s", self._transport.port_name)

    async def close(self) -> None:
        """
        Close the transport. Safe to call in any state.
        """
        try:
            if self._transport.is_open:
                await self._transport.close()
        finally:
            if self._buffer:
                logger.debug("Dropping %d undecoded bytes", len(self._buffer))
            self._buffer.clear()
            self._state = ConnectionState.CLOSED
            logger.info("Connection closed on %s", self._transport.port_name)

    async def send(self, message: Message) -> None:
        """
        Encode and write a message.

        Args:
            message: Message to send.

        Raises:
            ConnectionError: If the connection is not open.
            PayloadTooLargeError: If the payload exceeds 255 bytes.
            TransportError: If the write fails.
        """
        self._ensure_open()

        outbound = bytearray()
        self._codec.encode(message, outbound)
        logger.debug("Sending %r", message)
        await self._transport.write(bytes(outbound))

    async def receive(self, timeout: float | None = None) -> Message:
        """
        Receive the next message in stream order.

        Messages already buffered from an earlier read are returned without
        touching the transport.

        Args:
            timeout: Per-read timeout in seconds. None uses the default.

        Returns:
            The next decoded message.

        Raises:
            ConnectionError: If the connection is not open or the stream ended.
            ProtocolError: If a frame cannot be decoded. The connection is
                FAILED afterwards.
            TimeoutError: If the transport delivers no bytes in time.
            TransportError: If the read fails.
        """
        message = await self._receive(timeout)
        if message is None:
            raise ConnectionError(f"Stream ended on {self._transport.port_name}")
        return message

    async def _receive(self, timeout: float | None) -> Message | None:
        """Receive a message, or None at end of stream."""
        self._ensure_open()
        effective_timeout = timeout if timeout is not None else self._timeout

        while True:
            message = self._decode()
            if message is not None:
                return message

            chunk = await self._transport.read_available(timeout=effective_timeout)
            if not chunk:
                logger.info("End of stream on %s", self._transport.port_name)
                return None

            logger.debug("Received %s", bytes_to_hex(chunk))
            self._buffer.extend(chunk)

    def _decode(self) -> Message | None:
        """Run the codec over the inbound buffer, failing the connection on error."""
        try:
            return self._codec.decode(self._buffer)
        except ProtocolError as e:
            self._state = ConnectionState.FAILED
            logger.error("Decode failed, connection is no longer usable: %s", e)
            raise

    def _ensure_open(self) -> None:
        """Verify the connection can be used."""
        if self._state != ConnectionState.OPEN:
            raise ConnectionError(
                f"Connection not open (state: {self._state.name})"
            )

    def __aiter__(self) -> UnpiConnection:
        return self

    async def __anext__(self) -> Message:
        message = await self._receive(None)
        if message is None:
            raise StopAsyncIteration
        return message

    async def __aenter__(self) -> UnpiConnection:
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - close the transport."""
        await self.close()

    def __repr__(self) -> str:
        return f"UnpiConnection(state={self._state.name}, port={self._transport.port_name})"
