"""
zstack - Python library for the UNPI serial protocol of Z-Stack network processors.

This library frames, checks and decodes the messages exchanged with a Zigbee
network processor (CC2531, CC2652, ...) over its serial link.

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
    ...         print(await connection.receive())
"""

from zstack.codec import DEFAULT_CODEC, UnpiCodec, decode_message, encode_message
from zstack.connection import ConnectionState, UnpiConnection
from zstack.exceptions import (
    ChecksumError,
    ConnectionError,
    FieldRangeError,
    FrameError,
    InvalidCommandTypeError,
    InvalidStartOfFrameError,
    InvalidSubsystemError,
    PayloadTooLargeError,
    ProtocolError,
    TimeoutError,
    TransportError,
    ZStackError,
)
from zstack.models.message import Message
from zstack.protocol.constants import CommandType, Subsystem
from zstack.protocol.frame import WireFrame
from zstack.transport import AbstractTransport, AsyncSerialTransport

__version__ = "0.1.0"
__all__ = [
    # Codec
    "UnpiCodec",
    "DEFAULT_CODEC",
    "encode_message",
    "decode_message",
    # Connection
    "UnpiConnection",
    "ConnectionState",
    # Models
    "Message",
    "WireFrame",
    "CommandType",
    "Subsystem",
    # Exceptions
    "ZStackError",
    "ProtocolError",
    "FrameError",
    "FieldRangeError",
    "InvalidStartOfFrameError",
    "ChecksumError",
    "InvalidCommandTypeError",
    "InvalidSubsystemError",
    "PayloadTooLargeError",
    "TimeoutError",
    "ConnectionError",
    "TransportError",
    # Transport
    "AbstractTransport",
    "AsyncSerialTransport",
    # Version
    "__version__",
]
