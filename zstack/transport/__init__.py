"""
Transport layer for UNPI communication.

This package provides transport implementations for talking to a Z-Stack
network processor.

Available transports:
- AsyncSerialTransport: Async serial port using pyserial-asyncio
- MockTransport: Mock transport for testing without hardware

Example:
    >>> from zstack.transport import AsyncSerialTransport, find_serial_port
    >>> async with AsyncSerialTransport(find_serial_port("CC2531")) as transport:
    ...     await transport.write(frame_data)
    ...     chunk = await transport.read_available()

Testing Example:
    >>> from zstack.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.add_response(bytes.fromhex("FE 00 21 01 20"))
"""

from zstack.transport.abc import AbstractTransport
from zstack.transport.mock import MockTransport, ScriptedMockTransport
from zstack.transport.serial_async import AsyncSerialTransport, find_serial_port

__all__ = [
    "AbstractTransport",
    "AsyncSerialTransport",
    "MockTransport",
    "ScriptedMockTransport",
    "find_serial_port",
]
