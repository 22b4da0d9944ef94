"""
Abstract transport interface for UNPI communication.

This module defines the abstract base class for all transport implementations.
Transports handle the low-level communication with the network processor
over a serial port or other byte stream.

The transport layer is responsible for:
- Opening/closing the physical connection
- Reading and writing raw bytes
- Timeout handling

Frame boundaries are not the transport's concern; reads return whatever
bytes are available and the codec reassembles frames from them.

Implementations:
- AsyncSerialTransport: pyserial-asyncio based serial port
- MockTransport: For testing without hardware
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from zstack.protocol.constants import ProtocolConstants

if TYPE_CHECKING:
    from types import TracebackType


class AbstractTransport(ABC):
    """
    Abstract base class for UNPI transports.

    Transports provide async read/write operations for talking to a network
    processor. All transport implementations must inherit from this class
    and implement all abstract methods.

    Transports support async context manager protocol for safe resource
    management:

        async with AsyncSerialTransport("/dev/ttyACM0") as transport:
            await transport.write(frame)
            chunk = await transport.read_available()

    Attributes:
        is_open: Whether the transport connection is currently open.
        port_name: Identifier for the transport (e.g., serial port name).
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the transport connection is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def port_name(self) -> str:
        """
        Get the transport identifier.

        Returns:
            Port name or identifier string (e.g., "/dev/ttyACM0", "COM3").
        """
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport connection.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the transport connection.

        Releases the physical connection and any associated resources.
        Safe to call multiple times (idempotent).
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the transport.

        Args:
            data: Bytes to send, normally one or more complete frames.

        Raises:
            TransportError: If the transport is not open or write fails.
        """
        ...

    @abstractmethod
    async def read_available(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read whatever bytes are available, waiting for at least one.

        Args:
            max_bytes: Upper bound on the number of bytes returned.
            timeout: Read timeout in seconds. None uses transport default.

        Returns:
            Between 1 and max_bytes bytes. An empty result means the
            stream has reached end of file.

        Raises:
            TimeoutError: If no byte arrives before the timeout expires.
            TransportError: If the transport is not open or read fails.
        """
        ...

    @abstractmethod
    async def read(self, size: int, timeout: float | None = None) -> bytes:
        """
        Read an exact number of bytes from the transport.

        Args:
            size: Number of bytes to read.
            timeout: Read timeout in seconds. None uses transport default.

        Returns:
            Exactly `size` bytes.

        Raises:
            TimeoutError: If timeout expires before all bytes are received.
            TransportError: If the transport is not open or read fails.
        """
        ...

    @abstractmethod
    def discard_buffers(self) -> None:
        """
        Discard any pending data in input and output buffers.
        """
        ...

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry - opens the transport."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the transport."""
        await self.close()
