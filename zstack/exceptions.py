"""
Exception hierarchy for zstack.

All exceptions inherit from ZStackError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Protocol errors (framing, checksum, unknown header codes) are distinct
   from transport errors
2. Every error carries the offending wire value for debugging
3. "Not enough bytes yet" is never an exception; decoders return None
"""

from __future__ import annotations


class ZStackError(Exception):
    """
    Base exception for all zstack errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all zstack errors with a single except clause.
    """

    pass


class ProtocolError(ZStackError):
    """
    Protocol-level error.

    Raised when the UNPI framing is violated. Protocol errors are terminal
    for the decode call that raised them; the stream has no way to recover
    frame alignment afterwards.
    """

    pass


class FrameError(ProtocolError):
    """
    Frame structure error.

    Raised when bytes cannot be interpreted as a frame envelope, such as
    a buffer that does not hold exactly one complete frame.
    """

    pass


class InvalidStartOfFrameError(FrameError):
    """
    The first byte of a frame is not the start-of-frame marker.

    This means the stream is desynchronized. It is raised only when enough
    bytes for a whole frame are present.
    """

    def __init__(self, received: int, message: str | None = None) -> None:
        self.received = received
        super().__init__(message or f"Invalid start of frame: 0x{received:02X}")


class FieldRangeError(FrameError, ValueError):
    """A single-byte frame field holds a value outside 0x00-0xFF."""

    def __init__(self, field: str, value: int) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Frame field {field} out of byte range: {value}")


class ChecksumError(ProtocolError):
    """
    Frame check validation failure.

    Raised when the XOR fold over a frame, including its trailing check
    byte, is not zero. This typically indicates corruption on the line.
    """

    def __init__(
        self,
        message: str = "Frame check validation failed",
        *,
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    @property
    def residual(self) -> int | None:
        """XOR of expected and received check bytes (non-zero on failure)."""
        if self.expected is None or self.received is None:
            return None
        return self.expected ^ self.received

    def __str__(self) -> str:
        base = super().__str__()
        if self.expected is not None and self.received is not None:
            return f"{base} (expected 0x{self.expected:02X}, got 0x{self.received:02X})"
        return base


class InvalidCommandTypeError(ProtocolError):
    """
    Unknown command type code in a frame header.

    Only codes 1 (SREQ), 2 (AREQ) and 3 (SRSP) are defined. Any other value
    in the upper three header bits usually means a firmware mismatch.
    """

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Invalid command type: 0x{code:02X}")


class InvalidSubsystemError(ProtocolError):
    """Unknown subsystem code in the lower five header bits."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Invalid subsystem: 0x{code:02X}")


class PayloadTooLargeError(ProtocolError, ValueError):
    """
    Payload does not fit the one-byte length field.

    Raised on encode instead of silently truncating the length.
    """

    def __init__(self, length: int, limit: int = 255) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Payload of {length} bytes exceeds the {limit}-byte frame limit")


class TimeoutError(ZStackError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when the transport does not deliver bytes within the expected
    time.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class ConnectionError(ZStackError):  # noqa: A001 - intentionally shadows builtin
    """
    Connection error.

    Raised when:
    - No network processor can be found
    - The connection is used while closed
    - The connection has failed after a fatal decode error
    """

    pass


class TransportError(ZStackError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Serial port errors
    - I/O errors
    - Hardware communication failures
    """

    pass
