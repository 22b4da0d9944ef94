"""Tests for the Message model."""

import pytest
from pydantic import ValidationError

from zstack.exceptions import InvalidCommandTypeError, InvalidSubsystemError, PayloadTooLargeError
from zstack.models.message import Message
from zstack.protocol.constants import CommandType, Subsystem
from zstack.protocol.frame import WireFrame


class TestMessage:
    """Tests for Message model."""

    def test_defaults(self):
        """Test payload defaults to empty."""
        msg = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=0x01)
        assert msg.payload == b""

    def test_accepts_raw_codes(self):
        """Test int codes are coerced to registry members."""
        msg = Message(command_type=2, subsystem=0x05, command_id=0x80)
        assert msg.command_type is CommandType.AREQ
        assert msg.subsystem is Subsystem.ZDO

    def test_rejects_unknown_codes(self):
        """Test model validation of registry fields."""
        with pytest.raises(ValidationError):
            Message(command_type=4, subsystem=Subsystem.SYS, command_id=0x01)
        with pytest.raises(ValidationError):
            Message(command_type=CommandType.SREQ, subsystem=0x0A, command_id=0x01)

    @pytest.mark.parametrize("command_id", [-1, 256])
    def test_command_id_range(self, command_id):
        """Test command id must fit in a byte."""
        with pytest.raises(ValidationError):
            Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=command_id)

    @pytest.mark.parametrize("payload", ["abc", [1, 2], 5])
    def test_rejects_non_binary_payload(self, payload):
        """Test text and other non-binary payloads are not coerced."""
        with pytest.raises(ValidationError):
            Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=0x01, payload=payload)

    def test_bytearray_payload_frozen_to_bytes(self):
        """Test bytearray payloads are stored as bytes."""
        msg = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=0x01, payload=bytearray(b"\x01"))
        assert msg.payload == b"\x01"
        assert isinstance(msg.payload, bytes)

    def test_header_byte(self):
        """Test header byte packing."""
        msg = Message(command_type=CommandType.SRSP, subsystem=Subsystem.UTIL, command_id=0x00)
        assert msg.header_byte == 0x67

    def test_equality_and_hash(self):
        """Test value semantics."""
        a = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=1, payload=b"\x01")
        b = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=1, payload=b"\x01")
        c = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=1, payload=b"\x02")
        assert a == b
        assert a != c
        assert hash(a) == hash(b)

    def test_frozen(self):
        """Test messages are immutable."""
        msg = Message(command_type=CommandType.SREQ, subsystem=Subsystem.SYS, command_id=1)
        with pytest.raises(ValidationError):
            msg.command_id = 2

    def test_to_frame(self):
        """Test conversion to a wire frame."""
        msg = Message(
            command_type=CommandType.SREQ,
            subsystem=Subsystem.SYS,
            command_id=0x01,
            payload=b"\x02\x04\x06\x08",
        )
        frame = msg.to_frame()
        assert frame.header_byte == 0x21
        assert frame.command_id == 0x01
        assert frame.payload == b"\x02\x04\x06\x08"
        assert frame.check == 0x2C

    def test_to_frame_oversized_payload(self):
        """Test oversized payloads fail on conversion."""
        msg = Message(command_type=CommandType.AREQ, subsystem=Subsystem.AF, command_id=1, payload=bytes(300))
        with pytest.raises(PayloadTooLargeError):
            msg.to_frame()

    def test_from_frame(self):
        """Test conversion from a wire frame."""
        frame = WireFrame.build(0x64, 0x01, b"\x00")
        msg = Message.from_frame(frame)
        assert msg.command_type is CommandType.SRSP
        assert msg.subsystem is Subsystem.AF
        assert msg.command_id == 0x01
        assert msg.payload == b"\x00"

    def test_from_frame_unknown_command_type(self):
        """Test unknown command types are not mapped to a default."""
        frame = WireFrame.build((7 << 5) | 0x01, 0x01)
        with pytest.raises(InvalidCommandTypeError) as exc_info:
            Message.from_frame(frame)
        assert exc_info.value.code == 7

    def test_from_frame_unknown_subsystem(self):
        """Test unknown subsystems are not mapped to a default."""
        frame = WireFrame.build((1 << 5) | 0x10, 0x01)
        with pytest.raises(InvalidSubsystemError) as exc_info:
            Message.from_frame(frame)
        assert exc_info.value.code == 0x10

    def test_repr(self):
        """Test string representation."""
        msg = Message(command_type=CommandType.AREQ, subsystem=Subsystem.ZDO, command_id=0xC0, payload=b"\x09")
        assert repr(msg) == "Message(AREQ ZDO cmd=0xC0, payload=[09])"
