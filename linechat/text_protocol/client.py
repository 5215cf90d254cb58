"""
Text Protocol Chat Client

Client for the newline-delimited text chat protocol. The client owns one TCP
connection. Commands are written from the caller's thread; a background
reader thread parses every line the server sends and hands the resulting
event to the registered listeners.

Features:
- Boolean results instead of exceptions for every public operation
- Thread-safe teardown that can be called from the reader and caller threads
- Weakly held, insertion-ordered listeners
- Last error kept for display by the user interface
"""

import codecs
import socket
import threading
import logging
from typing import Optional
from . import protocol
from ..common.config import ClientConfig
from ..common.events import ServerEvent, Disconnected
from ..common.listener import ChatListener, ObserverRegistry

logger = logging.getLogger(__name__)

class TCPChatClient:
    """
    Chat client speaking the text line protocol over TCP.

    Attributes:
        config (ClientConfig): Encoding and timeout settings
        sock (socket.socket): Connected socket, None while disconnected
        listeners (ObserverRegistry): Registered ChatListener instances

    connect() starts the reader thread for the new connection. The thread
    exits when the connection closes, whichever side closes it.
    """

    def __init__(self, config: ClientConfig = None):
        """
        Initialize the chat client.

        Args:
            config: Client settings. Defaults to ClientConfig().

        The client starts disconnected.
        """
        self.config = config or ClientConfig()
        self.sock: Optional[socket.socket] = None
        self.listeners = ObserverRegistry()

        self._reader = None
        self._writer = None
        self._reader_thread: Optional[threading.Thread] = None
        self._last_error: Optional[str] = None

        # Re-entrant so the reader thread can tear down while checking ownership
        self._connection_lock = threading.RLock()
        self._send_lock = threading.Lock()

    def connect(self, host: str = None, port: int = None) -> bool:
        """
        Connect to a chat server.

        Args:
            host: Server hostname or IP address. Defaults to config.host.
            port: Server TCP port. Defaults to config.port.

        Returns:
            bool: True on success, False otherwise. get_last_error()
            describes the failure.
        """
        host = host if host is not None else self.config.host
        port = port if port is not None else self.config.port

        if self.is_active():
            self._set_error("Already connected")
            return False

        try:
            codecs.lookup(self.config.encoding)
        except (LookupError, TypeError) as e:
            return self._connect_failed(None, f"Unknown encoding {self.config.encoding!r}: {e}")

        sock = None
        reader = None
        try:
            sock = socket.create_connection((host, port), timeout=self.config.connect_timeout)
            sock.settimeout(None)
            reader = sock.makefile('r', encoding=self.config.encoding, errors='replace')
            writer = sock.makefile('w', encoding=self.config.encoding, newline='\n')
        except socket.gaierror as e:
            return self._connect_failed(sock, f"Unknown host {host}: {e}")
        except ConnectionRefusedError as e:
            return self._connect_failed(sock, f"Connection refused by {host}:{port}: {e}")
        except socket.timeout as e:
            return self._connect_failed(sock, f"Timed out connecting to {host}:{port}: {e}")
        except (OSError, ValueError, OverflowError, TypeError, LookupError) as e:
            return self._connect_failed(sock, f"I/O error connecting to {host}:{port}: {e}", reader)

        with self._connection_lock:
            if self.sock is not None:
                # Another thread connected while this handshake was running
                reader.close()
                writer.close()
                return self._connect_failed(sock, "Already connected")
            self.sock = sock
            self._reader = reader
            self._writer = writer
            self._last_error = None
            self._reader_thread = threading.Thread(
                target=self._read_loop,
                args=(reader,),
                name="linechat-reader",
                daemon=True
            )
            self._reader_thread.start()

        logger.info(f"Connected to server at {host}:{port}")
        return True

    def _connect_failed(self, sock: Optional[socket.socket], message: str, reader=None) -> bool:
        if reader is not None:
            try:
                reader.close()
            except OSError as e:
                logger.debug(f"Error closing failed reader: {e}")
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.debug(f"Error closing failed socket: {e}")
        self._set_error(message)
        logger.error(f"Connection failed: {message}")
        return False

    def disconnect(self):
        """
        Close the connection.

        Safe to call from several threads at once and when already
        disconnected: exactly one caller closes the socket, and every caller
        returns with the client disconnected.
        """
        with self._connection_lock:
            sock, reader, writer = self.sock, self._reader, self._writer
            if sock is None:
                logger.info("No connection established, nothing to close")
                return

            self.sock = None
            self._reader = None
            self._writer = None

            # Wakes a reader blocked in readline() before its stream is closed
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug(f"Socket shutdown failed: {e}")

            for name, resource in (("writer", writer), ("reader", reader), ("socket", sock)):
                try:
                    resource.close()
                except OSError as e:
                    self._set_error(f"Error disconnecting: {e}")
                    logger.warning(f"Error closing {name}: {e}")

        logger.info("Disconnected")

    def is_active(self) -> bool:
        """True while a connection is open"""
        return self.sock is not None

    def get_last_error(self) -> str:
        """
        Get the last error message.

        Returns:
            str: Description of the last failure, or '' if there has been none
        """
        return self._last_error or ''

    def _set_error(self, message: str):
        self._last_error = message

    def send_command(self, verb: str, args: str = '') -> bool:
        """
        Send one command line to the server.

        Args:
            verb: Command verb
            args: Argument text, must not contain line breaks

        Returns:
            bool: False if not connected or the command is not a single line.
            Write errors on an open connection are logged but not reported
            here; the reader thread notices the broken connection.
        """
        writer = self._writer
        if writer is None:
            self._set_error("Not connected to server")
            logger.warning(f"Not connected, dropping command {verb}")
            return False

        try:
            line = protocol.encode_command(verb, args)
        except protocol.ProtocolError as e:
            self._set_error(str(e))
            logger.warning(f"Rejected command: {e}")
            return False

        try:
            with self._send_lock:
                writer.write(line)
                writer.flush()
            logger.debug(f"Sent: {line.rstrip()}")
        except ValueError:
            # Writer closed by a concurrent disconnect()
            self._set_error("Connection closed while sending")
            return False
        except OSError as e:
            self._set_error(f"Error sending command: {e}")
            logger.error(f"Error sending command: {e}")
        return True

    def send_public_message(self, message: str) -> bool:
        """
        Send a message to all users.

        Args:
            message: Message text, must not be empty or contain line breaks

        Returns:
            bool: True if the message was sent
        """
        if not message or not protocol.is_single_line(message):
            self._set_error("Message must be a single non-empty line")
            logger.warning("Rejected public message")
            return False
        return self.send_command(protocol.Command.PUBLIC_MESSAGE, message)

    def send_private_message(self, recipient: str, message: str) -> bool:
        """
        Send a message to a single user.

        Args:
            recipient: Username of the recipient
            message: Message text, must not be empty or contain line breaks

        Returns:
            bool: True if the message was sent
        """
        if not isinstance(recipient, str) or not recipient or any(c.isspace() for c in recipient):
            self._set_error("Recipient must be a single username")
            logger.warning(f"Rejected private message to {recipient!r}")
            return False
        if not message or not protocol.is_single_line(message):
            self._set_error("Message must be a single non-empty line")
            logger.warning(f"Rejected private message to {recipient}")
            return False
        return self.send_command(protocol.Command.PRIVATE_MESSAGE, f"{recipient} {message}")

    def login(self, username: str) -> bool:
        """Send a login request. Does nothing without a username."""
        if not username:
            return False
        return self.send_command(protocol.Command.LOGIN, username)

    def request_user_list(self) -> bool:
        """Ask the server for the connected users. The answer arrives as a UserList event."""
        return self.send_command(protocol.Command.USERS)

    def request_supported_commands(self) -> bool:
        """Ask the server which commands it supports"""
        return self.send_command(protocol.Command.HELP)

    def register_observer(self, listener: ChatListener):
        """Register a listener for server events. Registering twice has no effect."""
        self.listeners.register(listener)

    def unregister_observer(self, listener: ChatListener):
        """Unregister a listener"""
        self.listeners.unregister(listener)

    def _read_loop(self, reader):
        """Read lines until the connection closes"""
        logger.debug("Reader thread started")
        while self._reader is reader:
            line = self._wait_server_response(reader)
            if line is None:
                break
            self.handle_line(line)
        logger.debug("Reader thread finished")

    def _wait_server_response(self, reader) -> Optional[str]:
        """
        Block until the server sends a line.

        Returns:
            The line without its terminator, or None once the connection is
            gone. In that case the client is disconnected and listeners got
            a Disconnected event.
        """
        try:
            line = reader.readline()
        except (OSError, ValueError) as e:
            self._connection_lost(reader, f"Error reading from server: {e}")
            return None

        if not line:
            self._connection_lost(reader, "Connection closed")
            return None

        line = line.rstrip('\r\n')
        logger.debug(f"Response from server: {line}")
        return line

    def _connection_lost(self, reader, reason: str):
        with self._connection_lock:
            if self._reader is not None and self._reader is not reader:
                # A newer connection replaced the one this reader belonged to
                return
            if self._reader is reader:
                logger.warning(f"Connection lost: {reason}")
                self._set_error(reason)
            self.disconnect()
        self._notify(Disconnected(reason))

    def handle_line(self, line: str):
        """
        Process one line received from the server.

        Empty lines and unknown verbs are ignored. A malformed message line
        is logged and dropped.
        """
        try:
            event = protocol.parse_line(line)
        except protocol.ProtocolError as e:
            self._set_error(f"Malformed line from server: {e}")
            logger.warning(f"Dropping malformed line {line!r}: {e}")
            return

        if event is None:
            if line:
                logger.debug(f"Ignoring unknown response: {line}")
            return
        self._notify(event)

    def _notify(self, event: ServerEvent):
        self.listeners.notify(event)
