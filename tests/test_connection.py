"""Tests for UnpiConnection."""

import logging

import pytest

from zstack import ConnectionState, UnpiConnection
from zstack.codec import encode_message
from zstack.exceptions import (
    ChecksumError,
    ConnectionError,
    InvalidStartOfFrameError,
    InvalidSubsystemError,
    PayloadTooLargeError,
    TimeoutError,
)
from zstack.models.message import Message
from zstack.protocol.constants import CommandType, Subsystem
from zstack.transport.mock import MockTransport, ScriptedMockTransport

PING = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=0x01)
PING_RESPONSE = Message(
    command_type=CommandType.SRSP,
    subsystem=Subsystem.SYS,
    command_id=0x01,
    payload=b"\x79\x01",
)
STATE_CHANGE = Message(
    command_type=CommandType.AREQ,
    subsystem=Subsystem.ZDO,
    command_id=0xC0,
    payload=b"\x09",
)


class TestUnpiConnection:
    """Tests for UnpiConnection class."""

    @pytest.fixture
    def mock_transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.fixture
    def connection(self, mock_transport):
        """Create a UnpiConnection with mock transport."""
        return UnpiConnection(mock_transport, timeout=1.0)

    def test_initial_state(self, connection):
        """Test connection starts closed."""
        assert connection.state == ConnectionState.CLOSED
        assert connection.is_open is False
        assert connection.pending == 0

    @pytest.mark.asyncio
    async def test_open_close(self, connection, mock_transport):
        """Test opening and closing."""
        await connection.open()
        assert connection.state == ConnectionState.OPEN
        assert mock_transport.is_open

        await connection.close()
        assert connection.state == ConnectionState.CLOSED
        assert not mock_transport.is_open

    @pytest.mark.asyncio
    async def test_open_twice_raises(self, connection):
        """Test opening an open connection."""
        await connection.open()
        with pytest.raises(ConnectionError):
            await connection.open()

    @pytest.mark.asyncio
    async def test_send_writes_frame(self, connection, mock_transport):
        """Test send() writes the encoded frame."""
        await connection.open()
        await connection.send(PING)
        mock_transport.assert_written(bytes.fromhex("FE 00 21 01 20"))

    @pytest.mark.asyncio
    async def test_send_when_closed_raises(self, connection):
        """Test sending on a closed connection."""
        with pytest.raises(ConnectionError) as exc_info:
            await connection.send(PING)
        assert "CLOSED" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_send_oversized_payload(self, connection, mock_transport):
        """Test oversized payloads are rejected before writing."""
        await connection.open()
        message = Message(command_type=CommandType.AREQ, subsystem=Subsystem.AF, command_id=0x01, payload=bytes(256))
        with pytest.raises(PayloadTooLargeError):
            await connection.send(message)
        mock_transport.assert_write_count(0)
        assert connection.state == ConnectionState.OPEN

    @pytest.mark.asyncio
    async def test_receive(self, connection, mock_transport):
        """Test receiving a single message."""
        mock_transport.add_response(encode_message(PING_RESPONSE))
        await connection.open()
        assert await connection.receive() == PING_RESPONSE
        assert connection.pending == 0

    @pytest.mark.asyncio
    async def test_receive_split_frame(self, connection, mock_transport):
        """Test a frame delivered in two reads."""
        data = encode_message(PING_RESPONSE)
        mock_transport.add_responses(data[:4], data[4:])
        await connection.open()
        assert await connection.receive() == PING_RESPONSE

    @pytest.mark.asyncio
    async def test_receive_multiple_frames_one_read(self, connection, mock_transport):
        """Test several frames in one chunk are returned in order."""
        mock_transport.add_response(encode_message(STATE_CHANGE) + encode_message(PING_RESPONSE))
        await connection.open()
        assert await connection.receive() == STATE_CHANGE
        assert connection.pending == len(encode_message(PING_RESPONSE))
        assert await connection.receive() == PING_RESPONSE

    @pytest.mark.asyncio
    async def test_receive_timeout_passes_through(self, connection):
        """Test transport timeouts are raised unchanged and are not fatal."""
        await connection.open()
        with pytest.raises(TimeoutError):
            await connection.receive()
        assert connection.state == ConnectionState.OPEN

    @pytest.mark.asyncio
    async def test_receive_end_of_stream(self, connection, mock_transport):
        """Test end of stream raises ConnectionError."""
        mock_transport.feed_eof()
        await connection.open()
        with pytest.raises(ConnectionError):
            await connection.receive()

    @pytest.mark.asyncio
    async def test_checksum_error_fails_connection(self, connection, mock_transport):
        """Test a decode error is terminal for the connection."""
        mock_transport.add_response(bytes.fromhex("FE 00 21 01 00") + encode_message(PING_RESPONSE))
        await connection.open()

        with pytest.raises(ChecksumError):
            await connection.receive()
        assert connection.state == ConnectionState.FAILED

        with pytest.raises(ConnectionError) as exc_info:
            await connection.receive()
        assert "FAILED" in str(exc_info.value)

        with pytest.raises(ConnectionError):
            await connection.send(PING)

    @pytest.mark.asyncio
    async def test_unknown_subsystem_fails_connection(self, connection, mock_transport):
        """Test an unknown header code is terminal for the connection."""
        # SREQ with subsystem 0x0A, check = 0x2A ^ 0x01 ^ 0x00
        mock_transport.add_response(bytes.fromhex("FE 00 2A 01 2B"))
        await connection.open()
        with pytest.raises(InvalidSubsystemError):
            await connection.receive()
        assert connection.state == ConnectionState.FAILED

    @pytest.mark.asyncio
    async def test_open_after_failure_requires_close(self, connection, mock_transport):
        """Test a FAILED connection cannot be reopened without closing it."""
        mock_transport.add_response(bytes.fromhex("FE 00 21 01 00"))
        await connection.open()
        with pytest.raises(ChecksumError):
            await connection.receive()

        with pytest.raises(ConnectionError) as exc_info:
            await connection.open()
        assert "FAILED" in str(exc_info.value)
        assert connection.state == ConnectionState.FAILED
        assert mock_transport.is_open

    @pytest.mark.asyncio
    async def test_decode_error_logged_once(self, connection, mock_transport, caplog):
        """Test a bad frame produces a single error record."""
        mock_transport.add_response(bytes.fromhex("00 00 21 01 20"))
        await connection.open()
        with caplog.at_level(logging.DEBUG, logger="zstack"):
            with pytest.raises(InvalidStartOfFrameError):
                await connection.receive()
        errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert errors[0].name == "zstack.connection"

    @pytest.mark.asyncio
    async def test_reopen_after_failure(self, connection, mock_transport):
        """Test close and reopen recovers and drops stale bytes."""
        mock_transport.add_response(bytes.fromhex("FE 00 21 01 00") + b"\xfe\x02")
        await connection.open()
        with pytest.raises(ChecksumError):
            await connection.receive()

        await connection.close()
        assert connection.pending == 0

        mock_transport.add_response(encode_message(PING_RESPONSE))
        await connection.open()
        assert await connection.receive() == PING_RESPONSE

    @pytest.mark.asyncio
    async def test_async_iteration(self, connection, mock_transport):
        """Test iterating messages until end of stream."""
        mock_transport.add_responses(
            encode_message(STATE_CHANGE),
            encode_message(PING_RESPONSE)[:3],
            encode_message(PING_RESPONSE)[3:],
        )
        mock_transport.feed_eof()
        await connection.open()

        received = [message async for message in connection]
        assert received == [STATE_CHANGE, PING_RESPONSE]

    @pytest.mark.asyncio
    async def test_context_manager(self, mock_transport):
        """Test async context manager protocol."""
        async with UnpiConnection(mock_transport) as connection:
            assert connection.is_open
            assert mock_transport.is_open

        assert connection.state == ConnectionState.CLOSED
        assert not mock_transport.is_open

    @pytest.mark.asyncio
    async def test_scripted_request_response(self):
        """Test a ping exchange against a scripted transport."""
        transport = ScriptedMockTransport()
        data = encode_message(PING_RESPONSE)
        transport.expect(request=encode_message(PING), response=(data[:2], data[2:]))

        async with UnpiConnection(transport) as connection:
            await connection.send(PING)
            assert await connection.receive() == PING_RESPONSE

    def test_transport_property(self, connection, mock_transport):
        """Test transport property returns the transport."""
        assert connection.transport is mock_transport

    @pytest.mark.asyncio
    async def test_repr(self, connection):
        """Test string representation."""
        assert "CLOSED" in repr(connection)
        assert "mock://test" in repr(connection)

        await connection.open()
        assert "OPEN" in repr(connection)
