"""
Chat Client Runner

Starts an interactive console chat client for the text line protocol.

Usage:
    python -m linechat.run_client [--host HOST] [--port PORT] [--username NAME]

Console commands:
    <text>                  Send a public message
    /msg <user> <text>      Send a private message
    /login <username>       Log in
    /users                  List connected users
    /help                   List commands supported by the server
    /quit                   Disconnect and exit
"""

import argparse
import logging
import sys
import threading
from typing import List
from linechat.common.config import ClientConfig, configure_logging
from linechat.common.events import TextMessage
from linechat.common.listener import ChatListener
from linechat.text_protocol.client import TCPChatClient

class ConsoleListener(ChatListener):
    """Prints server events to the console"""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self.disconnected = threading.Event()

    def show(self, text: str):
        print(text, file=self.out, flush=True)

    def on_login_result(self, success: bool, reason: str = None):
        if success:
            self.show("Logged in")
        else:
            self.show(f"Login failed: {reason}")

    def on_disconnect(self, reason: str = None):
        self.show(f"Disconnected from server ({reason or 'closed'})")
        self.disconnected.set()

    def on_user_list(self, users: List[str]):
        self.show("Users: " + ", ".join(users))

    def on_message_received(self, message: TextMessage):
        if message.private:
            self.show(f"[private] {message.sender}: {message.text}")
        else:
            self.show(f"{message.sender}: {message.text}")

    def on_message_error(self, text: str):
        self.show(f"Message not delivered: {text}")

    def on_command_error(self, text: str):
        self.show(f"Command error: {text}")

    def on_supported_commands(self, commands: List[str]):
        self.show("Server supports: " + " ".join(commands))

def handle_input(client: TCPChatClient, line: str) -> bool:
    """
    Run one console command.

    Returns:
        bool: False when the user asked to quit
    """
    if not line:
        return True

    if not line.startswith('/'):
        sent = client.send_public_message(line)
    else:
        command, _, rest = line[1:].partition(' ')
        if command == 'quit':
            return False
        elif command == 'msg':
            recipient, _, text = rest.partition(' ')
            sent = client.send_private_message(recipient, text)
        elif command == 'login':
            sent = client.login(rest.strip())
        elif command == 'users':
            sent = client.request_user_list()
        elif command == 'help':
            sent = client.request_supported_commands()
        else:
            print(f"Unknown command: /{command}")
            return True

    if not sent:
        print(f"Not sent: {client.get_last_error()}")
    return True

def main(argv=None):
    parser = argparse.ArgumentParser(description="Chat client (text line protocol)")
    defaults = ClientConfig()
    parser.add_argument("--host", default=defaults.host, help="Server host")
    parser.add_argument("--port", type=int, default=defaults.port, help="Server port")
    parser.add_argument("--encoding", default=defaults.encoding, help="Wire text encoding")
    parser.add_argument("--timeout", type=float, default=defaults.connect_timeout,
                        help="Connect timeout in seconds")
    parser.add_argument("--username", help="Log in with this username after connecting")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level,
        help="Logging level"
    )
    parser.add_argument("--log-file", help="Also write the log to this file")
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_file)
    config = ClientConfig(
        host=args.host,
        port=args.port,
        encoding=args.encoding,
        connect_timeout=args.timeout,
        log_level=args.log_level
    )

    client = TCPChatClient(config)
    listener = ConsoleListener()
    client.register_observer(listener)

    if not client.connect():
        print(f"Could not connect: {client.get_last_error()}")
        return 1

    try:
        if args.username:
            client.login(args.username)
        for line in sys.stdin:
            if listener.disconnected.is_set():
                break
            if not handle_input(client, line.rstrip('\r\n')):
                break
    except KeyboardInterrupt:
        print("\nShutting down client...")
    finally:
        client.disconnect()
        logging.info("Client stopped")
    return 0

if __name__ == "__main__":
    sys.exit(main())
