"""
Data models for UNPI messages.

This module contains the Pydantic model representing a decoded UNPI
message. Frames themselves live in zstack.protocol.frame.
"""

from zstack.models.message import Message

__all__ = [
    "Message",
]
