"""
Chat Listeners

The observer side of the chat client. A user interface subclasses
ChatListener and overrides the handlers it cares about, then registers the
instance with the client. The client keeps listeners in an ObserverRegistry,
which holds only weak references so that registering never keeps a listener
alive.
"""

import logging
import threading
import weakref
from typing import List

from .events import (
    ServerEvent, LoginResult, Disconnected, UserList, MessageReceived,
    MessageError, CommandError, SupportedCommands, TextMessage
)

logger = logging.getLogger(__name__)

class ChatListener:
    """
    Receives events from the chat server.

    Every handler defaults to doing nothing. Handlers run on the client's
    reader thread, so a slow handler delays reading of the next line.
    """

    def on_login_result(self, success: bool, reason: str = None):
        """Login finished; `reason` holds the server's error text on failure"""

    def on_disconnect(self, reason: str = None):
        """
        The connection to the server was closed or failed.

        Sent at most once per connection, from the reader thread. A server
        close or read error always produces it. A local disconnect()
        produces it only if the reader thread was blocked waiting for the
        next line; if the reader was busy delivering an event, as it is when
        disconnect() is called from inside a listener callback, the reader
        exits without sending it.
        """

    def on_user_list(self, users: List[str]):
        """The server sent the list of connected users"""

    def on_message_received(self, message: TextMessage):
        """A public or private message arrived"""

    def on_message_error(self, text: str):
        """A message we sent was not delivered"""

    def on_command_error(self, text: str):
        """The server did not understand a command"""

    def on_supported_commands(self, commands: List[str]):
        """The server answered a help request"""

    def on_event(self, event: ServerEvent):
        """
        Route an event to the matching handler.

        Args:
            event: The event produced by the dispatcher

        Unknown event types are ignored.
        """
        if isinstance(event, LoginResult):
            self.on_login_result(event.success, event.reason)
        elif isinstance(event, Disconnected):
            self.on_disconnect(event.reason)
        elif isinstance(event, UserList):
            self.on_user_list(list(event.users))
        elif isinstance(event, MessageReceived):
            self.on_message_received(event.message)
        elif isinstance(event, MessageError):
            self.on_message_error(event.text)
        elif isinstance(event, CommandError):
            self.on_command_error(event.text)
        elif isinstance(event, SupportedCommands):
            self.on_supported_commands(list(event.commands))

class ObserverRegistry:
    """
    Insertion-ordered set of weakly referenced listeners.

    Attributes:
        _refs (List[weakref.ref]): References in registration order
        _lock (threading.Lock): Guards _refs; never held while notifying
    """

    def __init__(self):
        self._refs: List[weakref.ref] = []
        self._lock = threading.Lock()

    def register(self, listener: ChatListener) -> bool:
        """
        Add a listener.

        Returns:
            bool: False if the listener was already registered
        """
        if listener is None:
            return False
        with self._lock:
            if any(ref() is listener for ref in self._refs):
                return False
            self._refs.append(weakref.ref(listener))
        logger.debug(f"Registered listener {listener!r}")
        return True

    def unregister(self, listener: ChatListener) -> bool:
        """
        Remove a listener.

        Returns:
            bool: False if the listener was not registered
        """
        with self._lock:
            for i, ref in enumerate(self._refs):
                if ref() is listener:
                    del self._refs[i]
                    logger.debug(f"Unregistered listener {listener!r}")
                    return True
        return False

    def snapshot(self) -> List[ChatListener]:
        """Live listeners in registration order. Drops collected ones."""
        with self._lock:
            listeners = [ref() for ref in self._refs]
            self._refs = [ref for ref, l in zip(self._refs, listeners) if l is not None]
        return [l for l in listeners if l is not None]

    def __len__(self):
        return len(self.snapshot())

    def notify(self, event: ServerEvent):
        """
        Deliver an event to every listener registered when the call started.

        A listener that raises is logged and skipped so the remaining
        listeners still receive the event.
        """
        for listener in self.snapshot():
            try:
                listener.on_event(event)
            except Exception as e:
                logger.error(f"Listener {listener!r} failed on {event}: {e}", exc_info=True)
