"""Run commands and transfer files over one authenticated SSH connection."""

from .config import SSHConfig, load_config, parse_connection_string
from .errors import (
    CloseError,
    CommandExecutionError,
    ConfigParseError,
    DialError,
    MalformedConnectionStringError,
    MissingHostError,
    MissingUsernameError,
    RemoteFileCreateError,
    RemoteFileOpenError,
    RemoteSSHError,
    RemoteWriteError,
    SessionOpenError,
    SignerCreationError,
    SubconnectionError,
)
from .ssh import CommandResult, RemoteFile, SSHClient, connect

__all__ = [
    "SSHConfig",
    "load_config",
    "parse_connection_string",
    "CommandResult",
    "RemoteFile",
    "SSHClient",
    "connect",
    "RemoteSSHError",
    "ConfigParseError",
    "MissingUsernameError",
    "MissingHostError",
    "MalformedConnectionStringError",
    "SignerCreationError",
    "DialError",
    "SessionOpenError",
    "CommandExecutionError",
    "SubconnectionError",
    "RemoteFileOpenError",
    "RemoteFileCreateError",
    "RemoteWriteError",
    "CloseError",
]
