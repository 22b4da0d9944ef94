"""
Async serial transport using pyserial-asyncio.

This module provides the primary transport implementation for talking to a
Z-Stack network processor (CC2531, CC2652, ...) over its USB serial port.

Serial Configuration:
- Baud rate: 115200 (default)
- Data bits: 8
- Parity: None
- Stop bits: 1
- Flow control: None by default, RTS/CTS optional

Example:
    >>> port = find_serial_port("CC2531")
    >>> async with AsyncSerialTransport(port) as transport:
    ...     await transport.write(frame)
    ...     chunk = await transport.read_available()
"""

from __future__ import annotations

import asyncio
import logging

import serial
import serial_asyncio
from serial.tools import list_ports

from zstack.exceptions import ConnectionError, TimeoutError, TransportError
from zstack.protocol.constants import ProtocolConstants
from zstack.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


def find_serial_port(product: str = "CC2531") -> str:
    """
    Find the serial port of a USB network processor.

    Args:
        product: Substring to look for in the USB product description.

    Returns:
        Device path of the first matching port (e.g., "/dev/ttyACM0").

    Raises:
        ConnectionError: If no USB port with a matching product is present.
    """
    for port in list_ports.comports():
        if port.vid is None:
            # Not a USB port
            continue
        if port.product and product in port.product:
            logger.info("Found %s on %s", port.product, port.device)
            return port.device

    raise ConnectionError(f"No {product} found")


class AsyncSerialTransport(AbstractTransport):
    """
    Async serial transport using pyserial-asyncio.

    Provides non-blocking serial communication using Python's asyncio
    framework. This is the primary transport for real hardware.

    Attributes:
        port_name: Serial port path (e.g., "/dev/ttyACM0", "COM3").
        is_open: Whether the port is currently open.

    Example:
        >>> transport = AsyncSerialTransport("/dev/ttyACM0", baudrate=115200)
        >>> await transport.open()
        >>> try:
        ...     await transport.write(bytes.fromhex("FE00210120"))
        ...     response = await transport.read_available(timeout=5.0)
        ... finally:
        ...     await transport.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = ProtocolConstants.DEFAULT_BAUD_RATE,
        default_timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
        rtscts: bool = False,
    ) -> None:
        """
        Initialize the async serial transport.

        Args:
            port: Serial port path (e.g., "/dev/ttyACM0", "COM3").
            baudrate: Baud rate (default: 115200).
            default_timeout: Default read timeout in seconds (default: 5.0).
            rtscts: Enable RTS/CTS hardware flow control.
        """
        self._port = port
        self._baudrate = baudrate
        self._default_timeout = default_timeout
        self._rtscts = rtscts
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._serial_instance: serial.Serial | None = None

    @property
    def is_open(self) -> bool:
        """Check if the serial port is currently open."""
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def port_name(self) -> str:
        """Get the serial port path."""
        return self._port

    @property
    def baudrate(self) -> int:
        """Get the configured baud rate."""
        return self._baudrate

    async def open(self) -> None:
        """
        Open the serial port connection.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.is_open:
            return

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=self._baudrate,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                bytesize=serial.EIGHTBITS,
                xonxoff=False,
                rtscts=self._rtscts,
                dsrdtr=False,
            )
            # Underlying serial port for buffer operations
            transport = self._writer.transport
            if hasattr(transport, "serial"):
                self._serial_instance = transport.serial

        except serial.SerialException as e:
            raise TransportError(f"Failed to open serial port {self._port}: {e}") from e
        except OSError as e:
            raise TransportError(f"OS error opening {self._port}: {e}") from e

        logger.info("Opened %s at %d baud", self._port, self._baudrate)

    async def close(self) -> None:
        """
        Close the serial port connection.

        Safe to call multiple times.
        """
        if self._writer is not None:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, serial.SerialException) as e:
                logger.debug("Error while closing %s: %s", self._port, e)
            else:
                logger.info("Closed %s", self._port)

        self._reader = None
        self._writer = None
        self._serial_instance = None

    async def write(self, data: bytes) -> None:
        """
        Write data to the serial port.

        Args:
            data: Bytes to transmit.

        Raises:
            TransportError: If the port is not open or write fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Write failed: {e}") from e

    async def read_available(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read the bytes currently available, waiting for at least one.

        Args:
            max_bytes: Upper bound on the number of bytes returned.
            timeout: Read timeout in seconds. None uses default timeout.

        Returns:
            Between 1 and max_bytes bytes, or b"" at end of stream.

        Raises:
            TimeoutError: If no byte arrives before the timeout expires.
            TransportError: If the port is not open or read fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        effective_timeout = timeout if timeout is not None else self._default_timeout

        try:
            return await asyncio.wait_for(
                self._reader.read(max_bytes),
                timeout=effective_timeout,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(
                "Timeout waiting for data",
                timeout_seconds=effective_timeout,
            ) from None
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Read failed: {e}") from e

    async def read(self, size: int, timeout: float | None = None) -> bytes:
        """
        Read an exact number of bytes from the serial port.

        Args:
            size: Number of bytes to read.
            timeout: Read timeout in seconds. None uses default timeout.

        Returns:
            Exactly `size` bytes.

        Raises:
            TimeoutError: If timeout expires before all bytes are received.
            TransportError: If the port is not open or read fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        if size <= 0:
            return b""

        effective_timeout = timeout if timeout is not None else self._default_timeout

        try:
            return await asyncio.wait_for(
                self._reader.readexactly(size),
                timeout=effective_timeout,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Timeout waiting for {size} bytes",
                timeout_seconds=effective_timeout,
            ) from None
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                f"Connection closed: expected {size} bytes, got {len(e.partial)}"
            ) from e
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Read failed: {e}") from e

    def discard_buffers(self) -> None:
        """
        Discard any pending data in input and output buffers.

        Note: This operates on the underlying serial port and may not
        affect data already buffered by the asyncio layer.
        """
        if self._serial_instance is None:
            return
        try:
            self._serial_instance.reset_input_buffer()
            self._serial_instance.reset_output_buffer()
        except (OSError, serial.SerialException) as e:
            logger.debug("Could not reset buffers on %s: %s", self._port, e)

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSerialTransport({self._port!r}, baudrate={self._baudrate}, {status})"
