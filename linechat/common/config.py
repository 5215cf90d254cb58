"""
Client Configuration

Default settings for the chat client and the logging setup used by the
entry points.
"""

import logging
from dataclasses import dataclass

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 1300
DEFAULT_ENCODING = 'utf-8'
DEFAULT_CONNECT_TIMEOUT = 10.0

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

@dataclass
class ClientConfig:
    """
    Settings for one chat client.

    Attributes:
        host: Server hostname or IP address
        port: Server TCP port
        encoding: Text encoding of the wire protocol
        connect_timeout: Seconds to wait for the TCP handshake. Reads never time out.
        log_level: Name of the logging level used by the entry points
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    encoding: str = DEFAULT_ENCODING
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    log_level: str = 'INFO'

def configure_logging(level: str = 'INFO', log_file: str = None):
    """
    Set up root logging for a chat entry point.

    Args:
        level: Logging level name, e.g. 'DEBUG'
        log_file: Optional file that receives a copy of the log
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
