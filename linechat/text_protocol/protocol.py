"""
Text Line Protocol Implementation

Defines the newline-delimited text protocol for the chat application.
Every message is one line: a verb, optionally followed by a space and the
rest of the line.

Client commands:
    login <username>
    msg <text>
    privmsg <recipient> <text>
    users
    help

Server responses:
    loginok
    loginerr <reason>
    users <name> <name> ...
    msg <sender> <text>
    privmsg <sender> <text>
    msgerr <text>
    cmderr <text>
    supported <command> <command> ...
"""

from enum import Enum
from typing import Tuple, Optional, List
from ..common.events import (
    ServerEvent, LoginResult, UserList, MessageReceived, MessageError,
    CommandError, SupportedCommands, TextMessage
)

LINE_TERMINATOR = '\n'

class ProtocolError(ValueError):
    """A line does not follow the text protocol"""

class Command(str, Enum):
    """Commands the client sends"""
    LOGIN = 'login'
    PUBLIC_MESSAGE = 'msg'
    PRIVATE_MESSAGE = 'privmsg'
    USERS = 'users'
    HELP = 'help'

class Response(str, Enum):
    """Verbs the server sends"""
    LOGIN_OK = 'loginok'
    LOGIN_ERROR = 'loginerr'
    USERS = 'users'
    PUBLIC_MESSAGE = 'msg'
    PRIVATE_MESSAGE = 'privmsg'
    MESSAGE_ERROR = 'msgerr'
    COMMAND_ERROR = 'cmderr'
    SUPPORTED = 'supported'

def is_single_line(text: str) -> bool:
    """True if text can be sent without breaking line framing"""
    if not isinstance(text, str):
        return False
    return '\n' not in text and '\r' not in text

def encode_command(verb: str, args: str = '') -> str:
    """
    Encode a command as one protocol line.

    Args:
        verb: Command verb, e.g. Command.LOGIN
        args: Free-form argument text

    Returns:
        str: The line including its terminator

    Raises:
        ProtocolError: If the verb is empty or contains a space, or either
            part contains a line break
    """
    verb = verb.value if isinstance(verb, Enum) else verb
    if not isinstance(verb, str) or not verb or ' ' in verb:
        raise ProtocolError(f"Invalid verb: {verb!r}")
    args = args or ''
    if not isinstance(args, str):
        raise ProtocolError(f"Arguments must be text, not {type(args).__name__}")
    if not is_single_line(verb) or not is_single_line(args):
        raise ProtocolError("Command must not contain line breaks")

    if args:
        return f"{verb} {args}{LINE_TERMINATOR}"
    return f"{verb}{LINE_TERMINATOR}"

def split_line(line: str) -> Tuple[str, str]:
    """
    Split a line on its first space.

    Returns:
        Tuple of (verb, rest). rest is '' when the line has no space.
    """
    verb, _, rest = line.partition(' ')
    return verb, rest

def _split_names(text: str) -> List[str]:
    return [name for name in text.split(' ') if name]

def _parse_message(rest: str, private: bool) -> MessageReceived:
    sender, sep, text = rest.partition(' ')
    if not sep or not sender:
        raise ProtocolError(f"Message without sender and text: {rest!r}")
    return MessageReceived(TextMessage(sender, private, text))

def parse_line(line: str) -> Optional[ServerEvent]:
    """
    Decode one line received from the server.

    Args:
        line: The line without its terminator

    Returns:
        The matching event, or None for empty lines and verbs this client
        does not know.

    Raises:
        ProtocolError: If a msg or privmsg line has no text after the sender
    """
    if not line:
        return None

    verb, rest = split_line(line)

    if verb == Response.LOGIN_OK:
        return LoginResult(True)
    elif verb == Response.LOGIN_ERROR:
        return LoginResult(False, rest)
    elif verb == Response.USERS:
        return UserList(_split_names(rest))
    elif verb == Response.PUBLIC_MESSAGE:
        return _parse_message(rest, private=False)
    elif verb == Response.PRIVATE_MESSAGE:
        return _parse_message(rest, private=True)
    elif verb == Response.MESSAGE_ERROR:
        return MessageError(rest)
    elif verb == Response.COMMAND_ERROR:
        return CommandError(rest)
    elif verb == Response.SUPPORTED:
        return SupportedCommands(_split_names(rest))

    return None
