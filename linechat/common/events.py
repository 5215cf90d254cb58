"""
Chat Server Events

Typed events produced from the lines a chat server sends. One event is
created per received line and handed to every registered listener; events
are never stored.
"""

from dataclasses import dataclass, field
from typing import List, Optional

@dataclass(frozen=True)
class TextMessage:
    """
    A chat message received from the server.

    Attributes:
        sender: Username of the sender
        private: True when the message was sent only to us
        text: Message text
    """
    sender: str
    private: bool
    text: str

class ServerEvent:
    """Base class for everything the dispatcher delivers to listeners"""

@dataclass(frozen=True)
class LoginResult(ServerEvent):
    """Outcome of a login request. `reason` is only set on failure."""
    success: bool
    reason: Optional[str] = None

@dataclass(frozen=True)
class Disconnected(ServerEvent):
    """The connection was closed by the server or failed"""
    reason: Optional[str] = None

@dataclass(frozen=True)
class UserList(ServerEvent):
    """Usernames currently connected to the server"""
    users: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class MessageReceived(ServerEvent):
    """A public or private message arrived"""
    message: TextMessage

@dataclass(frozen=True)
class MessageError(ServerEvent):
    """The server could not deliver a message we sent"""
    text: str

@dataclass(frozen=True)
class CommandError(ServerEvent):
    """The server did not understand a command we sent"""
    text: str

@dataclass(frozen=True)
class SupportedCommands(ServerEvent):
    """Commands the server reports it supports"""
    commands: List[str] = field(default_factory=list)
