"""Tests for frame parsing from an accumulation buffer."""

import logging

import pytest

from zstack.exceptions import FrameError, InvalidStartOfFrameError
from zstack.protocol.frame import WireFrame
from zstack.protocol.frame_reader import FrameReader, read_frame

PING = bytes.fromhex("FE 00 21 01 20")
WITH_PAYLOAD = bytes.fromhex("FE 04 21 01 02 04 06 08 2C")


class TestFrameReader:
    """Tests for FrameReader.read."""

    @pytest.fixture
    def reader(self):
        """Create a FrameReader instance."""
        return FrameReader()

    def test_read_empty_frame(self, reader):
        """Test reading a frame with no payload."""
        buffer = bytearray(PING)
        frame = reader.read(buffer)
        assert frame == WireFrame(header_byte=0x21, command_id=0x01, payload=b"", check=0x20)
        assert buffer == bytearray()

    def test_read_frame_with_payload(self, reader):
        """Test reading a frame with payload."""
        buffer = bytearray(WITH_PAYLOAD)
        frame = reader.read(buffer)
        assert frame.payload == bytes([0x02, 0x04, 0x06, 0x08])
        assert frame.check == 0x2C
        assert buffer == bytearray()

    def test_empty_buffer(self, reader):
        """Test that an empty buffer needs more data."""
        buffer = bytearray()
        assert reader.read(buffer) is None
        assert buffer == bytearray()

    @pytest.mark.parametrize("size", range(1, 5))
    def test_short_buffer_untouched(self, reader, size):
        """Test buffers below the minimum frame size are left unchanged."""
        buffer = bytearray(WITH_PAYLOAD[:size])
        assert reader.read(buffer) is None
        assert buffer == bytearray(WITH_PAYLOAD[:size])

    @pytest.mark.parametrize("size", range(5, 9))
    def test_partial_payload_untouched(self, reader, size):
        """Test a frame shorter than its declared length is left unchanged."""
        buffer = bytearray(WITH_PAYLOAD[:size])
        assert reader.read(buffer) is None
        assert buffer == bytearray(WITH_PAYLOAD[:size])

    def test_short_buffer_with_bad_marker_is_not_error(self, reader):
        """Test that a wrong marker is only reported once the frame is complete."""
        buffer = bytearray.fromhex("00 04 21 01")
        assert reader.read(buffer) is None
        assert len(buffer) == 4

    def test_bad_marker_raises(self, reader):
        """Test a complete frame with the wrong marker is an error."""
        buffer = bytearray(b"\x00" + PING[1:])
        with pytest.raises(InvalidStartOfFrameError) as exc_info:
            reader.read(buffer)
        assert exc_info.value.received == 0x00
        assert isinstance(exc_info.value, FrameError)

    def test_bad_marker_consumes_frame(self, reader):
        """Test that a bad-marker frame is consumed to guarantee progress."""
        buffer = bytearray(b"\xAA" + PING[1:] + PING)
        with pytest.raises(InvalidStartOfFrameError):
            reader.read(buffer)
        assert buffer == bytearray(PING)

    def test_bad_check_is_not_verified_here(self, reader):
        """Test the reader returns frames without verifying the check."""
        buffer = bytearray(PING[:-1] + b"\x00")
        frame = reader.read(buffer)
        assert frame.check == 0x00
        assert not frame.is_well_formed

    def test_trailing_bytes_remain(self, reader):
        """Test bytes beyond the frame stay for the next call."""
        buffer = bytearray(PING + WITH_PAYLOAD[:3])
        assert reader.read(buffer) is not None
        assert buffer == bytearray(WITH_PAYLOAD[:3])

    def test_multiple_frames_in_order(self, reader):
        """Test consecutive frames are read in stream order."""
        buffer = bytearray(WITH_PAYLOAD + PING)
        first = reader.read(buffer)
        second = reader.read(buffer)
        assert first.length == 4
        assert second.length == 0
        assert reader.read(buffer) is None

    def test_max_length_frame(self, reader):
        """Test a 255-byte payload frame."""
        frame = WireFrame.build(0x44, 0x81, bytes(range(255)))
        buffer = bytearray(frame.to_bytes())
        assert len(buffer) == 260
        assert reader.read(buffer) == frame

    def test_frame_size(self, reader):
        """Test frame size detection."""
        assert reader.frame_size(PING) == 5
        assert reader.frame_size(WITH_PAYLOAD) == 9
        assert reader.frame_size(WITH_PAYLOAD[:8]) is None
        assert reader.frame_size(b"\xFE") is None

    def test_module_read_frame(self):
        """Test the module-level convenience function."""
        buffer = bytearray(PING)
        assert read_frame(buffer).command_id == 0x01

    def test_bad_marker_not_logged_as_error(self, reader, caplog):
        """Test the reader leaves error-level logging to its caller."""
        buffer = bytearray(b"\x00" + PING[1:])
        with caplog.at_level(logging.DEBUG, logger="zstack"):
            with pytest.raises(InvalidStartOfFrameError):
                reader.read(buffer)
        assert caplog.records
        assert all(record.levelno == logging.DEBUG for record in caplog.records)
