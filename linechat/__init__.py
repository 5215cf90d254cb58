"""
Line-based chat client.

Connects to a chat server speaking the newline-delimited text protocol and
delivers what the server sends to ChatListener instances.
"""

from .common.config import ClientConfig
from .common.listener import ChatListener
from .text_protocol.client import TCPChatClient

__all__ = ['ClientConfig', 'ChatListener', 'TCPChatClient']
