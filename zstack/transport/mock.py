"""
Mock transport for testing.

This module provides a mock transport implementation that allows testing
the UNPI connection without actual hardware. Each queued response is
delivered by read_available() as one chunk, which makes it easy to script
frames that arrive split across reads or several frames in a single read.

Example:
    >>> from zstack.transport import MockTransport
    >>> from zstack import UnpiConnection
    >>>
    >>> mock = MockTransport()
    >>> mock.add_response(bytes.fromhex("FE 00 21 01 20"))
    >>>
    >>> async with UnpiConnection(mock) as connection:
    ...     message = await connection.receive()
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from zstack.exceptions import TimeoutError, TransportError
from zstack.protocol.constants import ProtocolConstants
from zstack.transport.abc import AbstractTransport


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without hardware.

    This transport simulates serial communication by providing pre-configured
    responses. It records all written data for verification in tests.

    Attributes:
        written_data: List of all bytes written to the transport.

    Example:
        >>> mock = MockTransport()
        >>> mock.add_response(b"\\xfe\\x00")
        >>> mock.add_response(b"\\x61\\x01\\x60")
        >>>
        >>> async with mock:
        ...     await mock.write(b"test")
        ...     assert await mock.read_available() == b"\\xfe\\x00"
        ...     assert mock.written_data == [b"test"]
    """

    def __init__(
        self,
        port_name: str = "mock://test",
        default_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the mock transport.

        Args:
            port_name: Identifier for the mock transport.
            default_timeout: Default timeout for read operations.
        """
        self._port_name = port_name
        self._default_timeout = default_timeout
        self._is_open = False
        self._eof = False
        self._responses: deque[bytes] = deque()
        self._written_data: list[bytes] = []
        self._read_buffer = bytearray()
        self._response_callback: Callable[[bytes], bytes | None] | None = None

    @property
    def is_open(self) -> bool:
        """Check if the mock transport is open."""
        return self._is_open

    @property
    def port_name(self) -> str:
        """Get the mock port name."""
        return self._port_name

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    def add_response(self, response: bytes) -> None:
        """
        Add a response chunk to the queue.

        Chunks are returned in FIFO order, one per read_available() call.

        Args:
            response: Bytes to return on next read.
        """
        self._responses.append(bytes(response))

    def add_responses(self, *responses: bytes) -> None:
        """
        Add multiple response chunks to the queue.

        Args:
            *responses: Multiple byte responses to add.
        """
        for response in responses:
            self.add_response(response)

    def feed_eof(self) -> None:
        """Signal end of stream once all queued responses are read."""
        self._eof = True

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to dynamically generate responses.

        The callback receives the written data and should return the response
        bytes, or None for no response.

        Args:
            callback: Function that takes written bytes and returns response.
        """
        self._response_callback = callback

    def clear(self) -> None:
        """Clear all written data and pending responses."""
        self._written_data.clear()
        self._responses.clear()
        self._read_buffer.clear()
        self._eof = False

    async def open(self) -> None:
        """Open the mock transport."""
        if self._is_open:
            raise TransportError("Mock transport already open")
        self._is_open = True

    async def close(self) -> None:
        """Close the mock transport."""
        self._is_open = False

    async def write(self, data: bytes) -> None:
        """
        Write data to the mock transport.

        Records the written data and optionally triggers response callback.

        Args:
            data: Bytes to write.

        Raises:
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        self._written_data.append(bytes(data))

        if self._response_callback:
            response = self._response_callback(bytes(data))
            if response is not None:
                self._responses.append(bytes(response))

    async def read_available(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read the next queued chunk.

        Args:
            max_bytes: Upper bound on the number of bytes returned; the
                remainder of a larger chunk is kept for the next call.
            timeout: Read timeout (ignored in mock).

        Returns:
            Up to max_bytes bytes, or b"" after feed_eof() once drained.

        Raises:
            TimeoutError: If no data is available.
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        if not self._read_buffer and self._responses:
            self._read_buffer.extend(self._responses.popleft())

        if not self._read_buffer:
            if self._eof:
                return b""
            raise TimeoutError("No mock response available")

        result = bytes(self._read_buffer[:max_bytes])
        del self._read_buffer[:max_bytes]
        return result

    async def read(self, size: int, timeout: float | None = None) -> bytes:
        """
        Read exact number of bytes.

        Args:
            size: Number of bytes to read.
            timeout: Read timeout (ignored in mock).

        Returns:
            Exactly size bytes.

        Raises:
            TimeoutError: If not enough data available.
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        while len(self._read_buffer) < size and self._responses:
            self._read_buffer.extend(self._responses.popleft())

        if len(self._read_buffer) < size:
            raise TimeoutError(f"Not enough mock data: need {size}, have {len(self._read_buffer)}")

        result = bytes(self._read_buffer[:size])
        del self._read_buffer[:size]
        return result

    def discard_buffers(self) -> None:
        """Discard pending data in buffers."""
        self._read_buffer.clear()

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        if not self._written_data:
            raise AssertionError("No data written to mock transport")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(f"Written data mismatch: expected {expected!r}, got {actual!r}")

    def assert_write_count(self, expected: int) -> None:
        """
        Assert number of write operations.

        Args:
            expected: Expected number of writes.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self._written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")


class ScriptedMockTransport(MockTransport):
    """
    Mock transport with scripted request/response pairs.

    Each write consumes the next script step, checks the request if one was
    given, and queues the step's response chunks.

    Example:
        >>> mock = ScriptedMockTransport()
        >>> mock.expect(request=bytes.fromhex("FE00210120"), response=bytes.fromhex("FE02610179011A"))
    """

    def __init__(self, port_name: str = "mock://scripted") -> None:
        super().__init__(port_name)
        self._script: list[tuple[bytes | None, tuple[bytes, ...]]] = []
        self._script_index = 0

    def expect(
        self,
        response: bytes | tuple[bytes, ...],
        request: bytes | None = None,
    ) -> None:
        """
        Add an expected request/response pair.

        Args:
            response: Response to return, or a tuple of chunks delivered by
                successive reads.
            request: Expected request (None to match any).
        """
        chunks = response if isinstance(response, tuple) else (response,)
        self._script.append((request, chunks))

    async def write(self, data: bytes) -> None:
        """Write with script validation."""
        if not self._is_open:
            raise TransportError("Mock transport not open")

        self._written_data.append(bytes(data))

        if self._script_index < len(self._script):
            expected_request, chunks = self._script[self._script_index]

            if expected_request is not None and data != expected_request:
                raise AssertionError(
                    f"Script mismatch at step {self._script_index}: "
                    f"expected {expected_request!r}, got {data!r}"
                )

            self.add_responses(*chunks)
            self._script_index += 1

    def reset_script(self) -> None:
        """Reset script to beginning."""
        self._script_index = 0
        self._responses.clear()
        self._read_buffer.clear()

    def clear_script(self) -> None:
        """Clear all scripted expectations."""
        self._script.clear()
        self._script_index = 0
